"""
Notewise Backend - Identity Gateway (Supabase Auth)
====================================================

What:  Resolves the caller's session to a User, or None when there is no
       valid session.
How:   Finds the access token (Bearer header first, then the Supabase session
       cookie) and asks Supabase Auth who it belongs to:
           GET {SUPABASE_URL}/auth/v1/user
           apikey: <anon key>
           Authorization: Bearer <access token>
Who:   Called once per request by the `get_current_user` dependency. The
       resolved user is then passed explicitly into each action.

Session cookie formats accepted:
    <raw access token>
    {"access_token": "...", ...}               JSON session
    base64-<base64url(JSON session)>           @supabase/ssr encoding
    <name>.0, <name>.1, ...                    chunked cookie, joined in order

Failure policy:
    No token, rejected token, malformed provider response, or a transport
    error all resolve to None. Transport and server errors are logged at
    ERROR; plain "no session" outcomes are not.
"""

import base64
import binascii
import json
import logging
from typing import Any, Mapping, Optional

import httpx

from app.config import settings
from app.schemas.user import User

logger = logging.getLogger(__name__)

USER_ENDPOINT = "/auth/v1/user"
BASE64_PREFIX = "base64-"

# Statuses Supabase uses for missing/expired/invalid sessions
NO_SESSION_STATUSES = {400, 401, 403, 404}


def _read_cookie(cookies: Mapping[str, str], name: str) -> Optional[str]:
    if cookies.get(name):
        return cookies[name]

    chunks = []
    index = 0
    while f"{name}.{index}" in cookies:
        chunks.append(cookies[f"{name}.{index}"])
        index += 1
    return "".join(chunks) or None


def token_from_cookie(value: str) -> Optional[str]:
    """Extract an access token from any of the supported cookie encodings."""
    if value.startswith(BASE64_PREFIX):
        encoded = value[len(BASE64_PREFIX):]
        try:
            value = base64.urlsafe_b64decode(encoded + "=" * (-len(encoded) % 4)).decode("utf-8")
        except (binascii.Error, ValueError):
            logger.debug("Ignoring undecodable session cookie")
            return None

    if value.startswith(("{", "[")):
        try:
            session: Any = json.loads(value)
        except ValueError:
            logger.debug("Ignoring session cookie with invalid JSON")
            return None
        token: Any = None
        if isinstance(session, dict):
            token = session.get("access_token")
        elif isinstance(session, list) and session:
            # Older supabase-js stored [access_token, refresh_token, ...]
            token = session[0]
        return token if isinstance(token, str) and token else None

    return value or None


def token_from_authorization(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer":
        return None
    return token.strip() or None


class IdentityGateway:
    """
    Thin client for Supabase Auth.

    The optional `transport` is handed to httpx.AsyncClient; tests pass an
    httpx.MockTransport so no network is needed.
    """

    def __init__(
        self,
        supabase_url: Optional[str] = None,
        anon_key: Optional[str] = None,
        cookie_name: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.supabase_url = (supabase_url if supabase_url is not None else settings.supabase_url).rstrip("/")
        self.anon_key = anon_key if anon_key is not None else settings.supabase_anon_key
        self.cookie_name = cookie_name or settings.auth_cookie_name
        self.timeout = timeout or settings.auth_timeout
        self.transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self.supabase_url) and bool(self.anon_key)

    def extract_access_token(
        self,
        authorization: Optional[str],
        cookies: Mapping[str, str],
    ) -> Optional[str]:
        token = token_from_authorization(authorization)
        if token:
            return token
        raw = _read_cookie(cookies, self.cookie_name)
        return token_from_cookie(raw) if raw else None

    async def get_user(
        self,
        authorization: Optional[str] = None,
        cookies: Optional[Mapping[str, str]] = None,
    ) -> Optional[User]:
        """
        Resolve request credentials to a User.

        Returns:
            The signed-in User, or None for anonymous/invalid sessions and
            for provider outages.
        """
        if not self.is_configured:
            logger.debug("Supabase is not configured; treating request as anonymous")
            return None

        token = self.extract_access_token(authorization, cookies or {})
        if not token:
            return None
        return await self.get_user_for_token(token)

    async def get_user_for_token(self, access_token: str) -> Optional[User]:
        try:
            async with httpx.AsyncClient(
                base_url=self.supabase_url,
                timeout=self.timeout,
                transport=self.transport,
            ) as client:
                response = await client.get(
                    USER_ENDPOINT,
                    headers={
                        "apikey": self.anon_key,
                        "Authorization": f"Bearer {access_token}",
                    },
                )
        except httpx.HTTPError as e:
            logger.error("Supabase auth request failed: %s", str(e))
            return None

        if response.status_code in NO_SESSION_STATUSES:
            logger.debug("Supabase rejected session (HTTP %d)", response.status_code)
            return None
        if response.status_code >= 400:
            logger.error("Supabase auth returned HTTP %d", response.status_code)
            return None

        try:
            data = response.json()
        except ValueError:
            logger.error("Supabase auth returned a non-JSON body")
            return None

        user_id = data.get("id") if isinstance(data, dict) else None
        if not user_id:
            logger.error("Supabase auth response has no user id")
            return None

        return User(id=str(user_id), email=data.get("email"))


identity_gateway = IdentityGateway()
