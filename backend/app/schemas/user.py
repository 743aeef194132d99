"""
Notewise Backend - Authenticated User Schema
=============================================

What:  The identity the Identity Gateway resolves a request to.
Who:   Produced by IdentityGateway; passed explicitly into every action.
"""

from typing import Optional

from pydantic import BaseModel, Field


class User(BaseModel):
    """An authenticated user as reported by Supabase Auth. Immutable here."""
    id: str = Field(description="Identity-provider user id")
    email: Optional[str] = Field(default=None, description="Primary email, when the provider has one")

    model_config = {"frozen": True}
