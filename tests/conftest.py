"""
Pytest configuration and fixtures for the debt recovery voice agent tests
"""
import os

# Settings are built at import time and require an OpenAI key
os.environ.setdefault("OPENAI_API_KEY", "test-openai-key")
os.environ.setdefault("APP_ENV", "test")

import json
from typing import Any, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from app.core.dependencies import get_openai_client, get_sheets_client
from app.integrations.openai_client import OpenAIAPIError
from app.main import app
from app.models.session import UpstreamResponse


REALTIME_SESSION_BODY = {
    "id": "sess_001",
    "object": "realtime.session",
    "model": "gpt-4o-realtime-preview-2024-12-17",
    "voice": "verse",
    "client_secret": {"value": "ek_test_secret", "expires_at": 1735689600},
}


class StubOpenAIClient:
    """Stands in for OpenAIClient; records every request it receives."""

    def __init__(
        self,
        realtime_body: Optional[Dict[str, Any]] = None,
        realtime_error: Optional[OpenAIAPIError] = None,
        summary: Optional[str] = "Debtor agreed to pay on Friday.",
        chat_error: Optional[OpenAIAPIError] = None,
        chat_body: Optional[Dict[str, Any]] = None,
    ):
        self.realtime_body = realtime_body if realtime_body is not None else REALTIME_SESSION_BODY
        self.realtime_error = realtime_error
        self.summary = summary
        self.chat_error = chat_error
        self.chat_body = chat_body
        self.realtime_payloads: List[Dict[str, Any]] = []
        self.chat_requests: List[Dict[str, Any]] = []

    async def create_realtime_session(self, payload: Dict[str, Any]) -> UpstreamResponse:
        self.realtime_payloads.append(payload)
        if self.realtime_error:
            raise self.realtime_error
        return UpstreamResponse(status_code=200, body=json.dumps(self.realtime_body).encode("utf-8"))

    async def create_chat_completion(self, model: str, messages: List[Dict[str, str]]) -> Dict[str, Any]:
        self.chat_requests.append({"model": model, "messages": messages})
        if self.chat_error:
            raise self.chat_error
        if self.chat_body is not None:
            return self.chat_body
        return {"choices": [{"index": 0, "message": {"role": "assistant", "content": self.summary}}]}


class StubSheetSource:
    """Stands in for SheetsClient with a fixed grid or a failure."""

    def __init__(self, rows: Optional[List[List[Any]]] = None, error: Optional[Exception] = None):
        self.rows = rows or []
        self.error = error
        self.ranges: List[str] = []

    async def get_values(self, cell_range: str) -> List[List[Any]]:
        self.ranges.append(cell_range)
        if self.error:
            raise self.error
        return self.rows


@pytest.fixture
def openai_stub() -> StubOpenAIClient:
    return StubOpenAIClient()


@pytest.fixture
def sheet_source() -> Optional[StubSheetSource]:
    """No sheet configured unless a test overrides this fixture."""
    return None


@pytest.fixture
def client(openai_stub, sheet_source):
    """Create test client with dependency overrides"""
    app.dependency_overrides[get_openai_client] = lambda: openai_stub
    app.dependency_overrides[get_sheets_client] = lambda: sheet_source

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def debtor_rows():
    """Sample sheet grid: header plus three debtors, the second flagged to call"""
    return [
        ["Name", "Outstanding Debt", "Due Date", "Eligible To Call"],
        ["Bruce Wayne", "12,000", "02/01/2025", "FALSE"],
        ["Peter Parker", "1,500", "03/15/2025", "TRUE"],
        ["Clark Kent", "900", "04/30/2025", "true"],
    ]
