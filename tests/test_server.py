"""Tests for the HTTP API."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from mdcommands.exceptions import LLMError
from server.__main__ import serve
from server.main import app

SOURCE = "# Intro\n\nWelcome.\n"


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


class TestHealth:
    """Tests for GET /health."""

    def test_health(self, client: TestClient) -> None:
        """Returns ok."""
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}


class TestTreeEndpoint:
    """Tests for POST /api/tree."""

    def test_returns_tree_with_ids(self, client: TestClient) -> None:
        """The tree carries the ids command batches refer to."""
        response = client.post("/api/tree", json={"markdown": SOURCE})

        assert response.status_code == 200
        body = response.json()
        assert body["node_count"] == 5
        assert body["tree"]["children"][1]["id"] == "node-3"

    def test_missing_markdown(self, client: TestClient) -> None:
        """Requests without markdown fail validation."""
        assert client.post("/api/tree", json={}).status_code == 422


class TestApplyEndpoint:
    """Tests for POST /api/apply."""

    def test_applies_commands(self, client: TestClient) -> None:
        """Good commands apply and bad ones are reported."""
        response = client.post(
            "/api/apply",
            json={
                "markdown": SOURCE,
                "commands": [
                    {"action": "modify", "target": "node-2", "value": "Start"},
                    {"action": "move", "target": "node-0", "destination": "node-1", "position": "after"},
                ],
            },
        )

        assert response.status_code == 200
        body = response.json()
        assert body["markdown"] == "# Start\n\nWelcome.\n"
        outcomes = body["report"]["outcomes"]
        assert [outcome["success"] for outcome in outcomes] == [True, False]
        assert outcomes[1]["error_type"] == "NodeNotFoundError"


class TestEditEndpoint:
    """Tests for POST /api/edit."""

    def test_applies_model_commands(self, client: TestClient) -> None:
        """The model's reply is applied to the document."""
        reply = '```json\n{"commands": [{"action": "delete", "target": "node-3"}]}\n```'
        with patch("mdcommands.editor.generate_reply", new_callable=AsyncMock, return_value=reply):
            response = client.post("/api/edit", json={"markdown": SOURCE, "instruction": "Drop the paragraph"})

        assert response.status_code == 200
        assert response.json()["markdown"] == "# Intro\n"

    def test_empty_instruction(self, client: TestClient) -> None:
        """Blank instructions fail validation."""
        response = client.post("/api/edit", json={"markdown": SOURCE, "instruction": "   "})

        assert response.status_code == 422

    def test_malformed_reply(self, client: TestClient) -> None:
        """A reply without a command batch is a 422 with an error message."""
        with patch("mdcommands.editor.generate_reply", new_callable=AsyncMock, return_value="No idea."):
            response = client.post("/api/edit", json={"markdown": SOURCE, "instruction": "Anything"})

        assert response.status_code == 422
        assert "error" in response.json()

    def test_model_failure(self, client: TestClient) -> None:
        """Model API failures map to 502."""
        with patch("mdcommands.editor.generate_reply", new_callable=AsyncMock, side_effect=LLMError("HTTP 500")):
            response = client.post("/api/edit", json={"markdown": SOURCE, "instruction": "Anything"})

        assert response.status_code == 502
        assert response.json() == {"error": "HTTP 500"}


class TestOperationEndpoint:
    """Tests for POST /api/operation."""

    def test_runs_operation(self, client: TestClient) -> None:
        """The operation's output is returned."""
        with patch("mdcommands.operations.generate_reply", new_callable=AsyncMock, return_value="Short summary."):
            response = client.post("/api/operation", json={"markdown": SOURCE, "operation": "summarize"})

        assert response.status_code == 200
        assert response.json() == {"operation": "summarize", "result": "Short summary."}

    def test_unknown_operation(self, client: TestClient) -> None:
        response = client.post("/api/operation", json={"markdown": SOURCE, "operation": "translate"})

        assert response.status_code == 422
        assert "Unknown operation" in response.json()["error"]

    def test_rewrite_needs_audience(self, client: TestClient) -> None:
        response = client.post("/api/operation", json={"markdown": SOURCE, "operation": "rewrite"})

        assert response.status_code == 422
        assert "audience" in response.json()["error"]

    def test_model_failure(self, client: TestClient) -> None:
        with patch("mdcommands.operations.generate_reply", new_callable=AsyncMock, side_effect=LLMError("HTTP 500")):
            response = client.post("/api/operation", json={"markdown": SOURCE, "operation": "glossary"})

        assert response.status_code == 502


class TestServe:
    """Tests for the uvicorn runner."""

    def test_passes_settings_to_uvicorn(self) -> None:
        """serve() runs the app with the given bind address."""
        with patch("server.__main__.uvicorn.run") as mock_run:
            serve("0.0.0.0", 9001, reload=True)

        mock_run.assert_called_once_with("server.main:app", host="0.0.0.0", port=9001, reload=True, log_config=None)
