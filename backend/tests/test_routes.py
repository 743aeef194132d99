"""
Notewise Backend - HTTP Endpoint Tests
=======================================

What:  End-to-end tests through FastAPI: routing, dependency wiring, error
       mapping and response shapes.
How:   httpx AsyncClient over ASGITransport. The database is a per-test
       SQLite file; the signed-in user and the LLM client are overridden.
"""

from unittest.mock import AsyncMock, patch

import pytest


class TestNoteEndpoints:

    @pytest.mark.asyncio
    async def test_create_update_list_get_delete(self, test_client):
        created = await test_client.post("/api/notes", json={"note_id": "n1"})
        assert created.status_code == 200
        assert created.json() == {"error_message": None}

        updated = await test_client.patch("/api/notes/n1", json={"text": "Groceries: eggs"})
        assert updated.json() == {"error_message": None}

        listing = await test_client.get("/api/notes")
        assert listing.status_code == 200
        assert listing.headers["X-Total-Count"] == "1"
        body = listing.json()
        assert body["total_count"] == 1
        assert body["notes"][0]["text"] == "Groceries: eggs"

        single = await test_client.get("/api/notes/n1")
        assert single.json()["id"] == "n1"

        deleted = await test_client.delete("/api/notes/n1")
        assert deleted.json() == {"error_message": None}
        assert (await test_client.get("/api/notes/n1")).status_code == 404

    @pytest.mark.asyncio
    async def test_anonymous_mutations_return_error_message(self, test_client, auth_state):
        auth_state["user"] = None

        response = await test_client.post("/api/notes", json={"note_id": "n1"})

        assert response.status_code == 200
        assert response.json() == {"error_message": "You must be logged in to create a note"}

    @pytest.mark.asyncio
    async def test_anonymous_list_is_401(self, test_client, auth_state):
        auth_state["user"] = None

        response = await test_client.get("/api/notes")

        assert response.status_code == 401
        body = response.json()
        assert body["error"] == "unauthenticated"
        assert body["request_id"] == response.headers["X-Request-ID"]

    @pytest.mark.asyncio
    async def test_duplicate_create_returns_error_message(self, test_client):
        await test_client.post("/api/notes", json={"note_id": "dup"})

        response = await test_client.post("/api/notes", json={"note_id": "dup"})

        assert response.status_code == 200
        assert response.json()["error_message"] == "Could not create the note. Please try again."

    @pytest.mark.asyncio
    async def test_other_users_note_is_invisible(self, test_client, auth_state, user_b):
        await test_client.post("/api/notes", json={"note_id": "mine"})
        await test_client.patch("/api/notes/mine", json={"text": "private"})

        auth_state["user"] = user_b
        assert (await test_client.get("/api/notes/mine")).status_code == 404
        deleted = await test_client.delete("/api/notes/mine")
        assert deleted.json()["error_message"] == "note with ID 'mine' was not found"
        assert (await test_client.get("/api/notes")).json()["total_count"] == 0


class TestAssistantEndpoints:

    @pytest.mark.asyncio
    async def test_ask_without_notes(self, test_client, stub_llm):
        response = await test_client.post("/api/assistant/ask", json={"questions": ["Hi?"]})

        assert response.status_code == 200
        assert response.json() == {"response": "You don't have any notes yet."}
        assert stub_llm.generation_calls == 0

    @pytest.mark.asyncio
    async def test_ask_with_notes(self, test_client, stub_llm):
        await test_client.post("/api/notes", json={"note_id": "n1"})
        await test_client.patch("/api/notes/n1", json={"text": "Call mom"})

        response = await test_client.post(
            "/api/assistant/ask",
            json={"questions": ["q0", "q1"], "responses": ["r0"]},
        )

        assert response.json() == {"response": "<p>Answer</p>"}
        assert [t.text for t in stub_llm.conversations[0][1:]] == ["q0", "r0", "q1"]

    @pytest.mark.asyncio
    async def test_ask_invalid_history_is_400(self, test_client):
        response = await test_client.post(
            "/api/assistant/ask",
            json={"questions": ["q0"], "responses": ["r0"]},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    @pytest.mark.asyncio
    async def test_missing_api_key_is_500(self, test_client, stub_llm):
        stub_llm.configured = False

        response = await test_client.post("/api/assistant/ask", json={"questions": ["q"]})

        assert response.status_code == 500
        assert response.json()["error"] == "configuration_error"
        assert response.json()["message"] == "Gemini API key is not configured"

    @pytest.mark.asyncio
    async def test_provider_failure_is_503(self, test_client, stub_llm):
        from app.exceptions import UpstreamError

        await test_client.post("/api/notes", json={"note_id": "n1"})
        stub_llm.generate_error = UpstreamError()

        response = await test_client.post("/api/assistant/ask", json={"questions": ["q"]})

        assert response.status_code == 503
        assert response.json()["error"] == "upstream_error"

    @pytest.mark.asyncio
    async def test_analyze_pdf(self, test_client, stub_llm, upload_dir, sample_pdf_bytes):
        response = await test_client.post(
            "/api/assistant/analyze-pdf",
            files={"file": ("report.pdf", sample_pdf_bytes, "application/pdf")},
            data={"prompt": "What changed?"},
        )

        assert response.status_code == 200
        assert response.json() == {"response": "<p>Answer</p>"}
        assert stub_llm.uploads[0]["display_name"] == "report.pdf"
        assert stub_llm.file_requests[0]["prompt"].endswith("User prompt:\nWhat changed?")
        assert stub_llm.deleted == ["files/stub-123"]
        assert list(upload_dir.iterdir()) == []

    @pytest.mark.asyncio
    async def test_analyze_pdf_without_file_is_400(self, test_client):
        response = await test_client.post("/api/assistant/analyze-pdf", data={"prompt": "x"})

        assert response.status_code == 400
        assert response.json()["message"] == "A valid PDF file is required"

    @pytest.mark.asyncio
    async def test_analyze_non_pdf_is_400(self, test_client, stub_llm):
        response = await test_client.post(
            "/api/assistant/analyze-pdf",
            files={"file": ("photo.png", b"\x89PNG\r\n", "image/png")},
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Only PDF files are supported"
        assert stub_llm.uploads == []

    @pytest.mark.asyncio
    async def test_analyze_pdf_anonymous_is_401(self, test_client, auth_state, sample_pdf_bytes):
        auth_state["user"] = None

        response = await test_client.post(
            "/api/assistant/analyze-pdf",
            files={"file": ("report.pdf", sample_pdf_bytes, "application/pdf")},
        )

        assert response.status_code == 401
        assert response.json()["message"] == "You must be logged in to analyze a PDF"

    @pytest.mark.asyncio
    async def test_suggested_questions(self, test_client, stub_llm):
        await test_client.post("/api/notes", json={"note_id": "n1"})
        stub_llm.reply = '{"questions": ["A?", "B?", "C?", "D?"]}'

        response = await test_client.get("/api/assistant/suggested-questions", params={"count": 2})

        assert response.status_code == 200
        assert response.json() == {"questions": ["A?", "B?"]}

    @pytest.mark.asyncio
    async def test_suggested_questions_without_notes(self, test_client, stub_llm):
        response = await test_client.get("/api/assistant/suggested-questions")

        assert response.json() == {"questions": []}
        assert stub_llm.generation_calls == 0


class TestRequestId:

    @pytest.mark.asyncio
    async def test_client_request_id_is_echoed(self, test_client):
        response = await test_client.get("/api/notes", headers={"X-Request-ID": "trace-42"})

        assert response.headers["X-Request-ID"] == "trace-42"

    @pytest.mark.asyncio
    async def test_malformed_request_id_is_replaced(self, test_client):
        response = await test_client.get("/api/notes", headers={"X-Request-ID": "bad id with spaces"})

        assert response.headers["X-Request-ID"] != "bad id with spaces"
        assert len(response.headers["X-Request-ID"]) == 8


class TestHealth:

    @pytest.mark.asyncio
    async def test_healthy(self, test_client):
        from app.services.gemini_service import gemini_service

        with patch.object(gemini_service, "health_check", AsyncMock(return_value=True)):
            response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"
        assert body["gemini"] == "available"

    @pytest.mark.asyncio
    async def test_degraded_when_gemini_unreachable(self, test_client):
        from app.services.gemini_service import gemini_service

        with patch.object(gemini_service, "health_check", AsyncMock(return_value=False)):
            response = await test_client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "degraded"
        assert response.json()["gemini"] == "unavailable"
