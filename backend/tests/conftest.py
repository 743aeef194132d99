"""
Notewise Backend - Test Configuration (conftest.py)
====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Environment is pointed at throwaway resources before any app module is
       imported; fixtures then provide real SQLite sessions, a recording stub
       LLM client and an HTTP client wired to the app.

Fixture Hierarchy:
    Function-scoped:
    ├── mock_db_session:  AsyncMock session (no database)
    ├── db_engine:        fresh SQLite file per test, schema created
    ├── db_session:       AsyncSession on db_engine
    ├── add_note:         inserts a Note with explicit timestamps
    ├── user_a / user_b:  two distinct signed-in users
    ├── stub_llm:         StubLLMClient recording every call
    ├── sample_pdf_bytes: minimal PDF document
    └── test_client:      httpx AsyncClient over ASGITransport with
                          db / user / LLM dependencies overridden
"""

import os
import tempfile

# Must run before any `app` import: settings are read at import time
_TEST_ROOT = tempfile.mkdtemp(prefix="notewise_test_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_TEST_ROOT, 'app.db')}"
os.environ["GEMINI_API_KEY"] = "test-key-not-real"
os.environ["SUPABASE_URL"] = "https://project.supabase.test"
os.environ["SUPABASE_ANON_KEY"] = "test-anon-key"
os.environ["UPLOAD_TMP_DIR"] = os.path.join(_TEST_ROOT, "uploads")
os.environ["LOG_LEVEL"] = "WARNING"

from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.database import Base
from app.models.note import Note
from app.schemas.user import User
from app.services.llm_base import LLMClient, RemoteFile, Turn

BASE_TIME = datetime(2025, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


# ══════════════════════════════════════════════════════════════════════════
# Stub LLM Client
# ══════════════════════════════════════════════════════════════════════════

class StubLLMClient(LLMClient):
    """
    In-memory LLMClient that records every call.

    Set `generate_error`, `upload_error` or `delete_error` to make the
    matching operation raise.
    """

    def __init__(self, reply: str = "<p>Answer</p>", configured: bool = True):
        self.reply = reply
        self.configured = configured
        self.generate_error: Optional[Exception] = None
        self.upload_error: Optional[Exception] = None
        self.delete_error: Optional[Exception] = None

        self.conversations: List[List[Turn]] = []
        self.file_requests: List[Dict[str, Any]] = []
        self.uploads: List[Dict[str, Any]] = []
        self.deleted: List[str] = []

        self.remote_file = RemoteFile(
            name="files/stub-123",
            uri="https://generativelanguage.test/v1beta/files/stub-123",
            mime_type="application/pdf",
        )

    @property
    def is_configured(self) -> bool:
        return self.configured

    @property
    def generation_calls(self) -> int:
        return len(self.conversations) + len(self.file_requests)

    async def generate_content(self, turns: Sequence[Turn]) -> str:
        self.conversations.append(list(turns))
        if self.generate_error:
            raise self.generate_error
        return self.reply

    async def generate_with_file(self, prompt: str, remote_file: RemoteFile) -> str:
        self.file_requests.append({"prompt": prompt, "remote_file": remote_file})
        if self.generate_error:
            raise self.generate_error
        return self.reply

    async def upload_file(self, path: str, mime_type: str, display_name: str) -> RemoteFile:
        self.uploads.append({
            "path": path,
            "mime_type": mime_type,
            "display_name": display_name,
            "content": Path(path).read_bytes(),
        })
        if self.upload_error:
            raise self.upload_error
        return self.remote_file

    async def delete_file(self, remote_file: RemoteFile) -> None:
        self.deleted.append(remote_file.name)
        if self.delete_error:
            raise self.delete_error

    async def health_check(self) -> bool:
        return self.configured


# ══════════════════════════════════════════════════════════════════════════
# Database Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    AsyncMock standing in for AsyncSession.

    Usage:
        mock_db_session.execute.side_effect = OperationalError("SELECT", {}, Exception())
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest_asyncio.fixture
async def db_engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'notes.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def add_note(session_factory):
    """
    Insert a note in its own committed transaction.

    `age_minutes` places created_at before BASE_TIME, so larger ages sort
    later in newest-first listings.
    """

    async def _add(note_id: str, author_id: str, text: str = "", age_minutes: int = 0) -> Note:
        created = BASE_TIME - timedelta(minutes=age_minutes)
        note = Note(
            id=note_id,
            author_id=author_id,
            text=text,
            created_at=created,
            updated_at=created,
        )
        async with session_factory() as session:
            session.add(note)
            await session.commit()
        return note

    return _add


# ══════════════════════════════════════════════════════════════════════════
# Domain Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def user_a():
    return User(id="user-a", email="a@example.com")


@pytest.fixture
def user_b():
    return User(id="user-b", email="b@example.com")


@pytest.fixture
def stub_llm():
    return StubLLMClient()


@pytest.fixture
def upload_dir(tmp_path):
    path = tmp_path / "uploads"
    path.mkdir()
    return path


@pytest.fixture
def sample_pdf_bytes():
    """Smallest well-formed single-page PDF."""
    return (
        b"%PDF-1.4\n"
        b"1 0 obj << /Type /Catalog /Pages 2 0 R >> endobj\n"
        b"2 0 obj << /Type /Pages /Kids [3 0 R] /Count 1 >> endobj\n"
        b"3 0 obj << /Type /Page /Parent 2 0 R /MediaBox [0 0 200 200] >> endobj\n"
        b"trailer << /Root 1 0 R >>\n"
        b"%%EOF\n"
    )


# ══════════════════════════════════════════════════════════════════════════
# HTTP Client
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def auth_state(user_a):
    """Mutable holder for the user the test client is signed in as (None = anonymous)."""
    return {"user": user_a}


@pytest_asyncio.fixture
async def test_client(session_factory, stub_llm, auth_state, upload_dir):
    """
    HTTP client for the real app with its external dependencies replaced.

    Usage:
        async def test_list(test_client, auth_state):
            auth_state["user"] = None
            response = await test_client.get("/api/notes")
            assert response.status_code == 401
    """
    from app.database import get_db_session
    from app.dependencies import get_assistant_service, get_current_user
    from app.main import app
    from app.services.assistant_service import AssistantService
    from app.services.file_service import FileService

    async def override_db_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    files = FileService(tmp_dir=str(upload_dir))

    app.dependency_overrides[get_db_session] = override_db_session
    app.dependency_overrides[get_current_user] = lambda: auth_state["user"]
    app.dependency_overrides[get_assistant_service] = lambda: AssistantService(llm=stub_llm, files=files)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
