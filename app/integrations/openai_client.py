from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

import httpx

from app.models.session import UpstreamResponse


logger = logging.getLogger(__name__)


class OpenAIAPIError(RuntimeError):
    """Raised when an OpenAI endpoint is unreachable or answers with an error status."""

    def __init__(self, message: str, *, status_code: Optional[int] = None, body: Optional[str] = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class OpenAIClient:
    """Minimal async client for the two OpenAI endpoints the agent relies on."""

    DEFAULT_BASE_URL = "https://api.openai.com/v1"

    def __init__(
        self,
        api_key: str,
        base_url: Optional[str] = None,
        timeout: Optional[float] = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if not api_key or not isinstance(api_key, str):
            raise ValueError("OpenAI API key is required")
        self._api_key = api_key.strip()
        self._base_url = (base_url or self.DEFAULT_BASE_URL).rstrip("/")
        self._timeout = timeout
        self._transport = transport

    async def _post(self, path: str, payload: Dict[str, Any]) -> httpx.Response:
        """POST a JSON payload; returns the response only when the status is 2xx."""
        url = f"{self._base_url}{path}"
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(url, headers=headers, json=payload)
        except httpx.HTTPError as exc:
            logger.error(
                "OpenAI transport error",
                extra={"url": url, "error_type": type(exc).__name__, "error_message": str(exc)},
            )
            raise OpenAIAPIError(f"OpenAI request to {path} failed: {exc}") from exc

        if response.status_code // 100 != 2:
            logger.error(
                "OpenAI API error",
                extra={"status": response.status_code, "url": url, "body": response.text},
            )
            raise OpenAIAPIError(
                f"OpenAI request failed ({response.status_code}): {response.text or 'no response body'}",
                status_code=response.status_code,
                body=response.text,
            )
        return response

    async def create_realtime_session(self, payload: Dict[str, Any]) -> UpstreamResponse:
        """Create an ephemeral realtime session; the body is returned untouched."""
        response = await self._post("/realtime/sessions", payload)
        return UpstreamResponse(
            status_code=response.status_code,
            body=response.content,
            content_type=response.headers.get("content-type", "application/json"),
        )

    async def create_chat_completion(self, model: str, messages: List[Dict[str, str]]) -> Dict[str, Any]:
        """Run a non-streaming chat completion and return the decoded JSON body."""
        response = await self._post("/chat/completions", {"model": model, "messages": messages})
        try:
            return response.json()
        except json.JSONDecodeError as exc:
            raise OpenAIAPIError(
                "Failed to parse OpenAI chat completion response as JSON",
                status_code=response.status_code,
                body=response.text,
            ) from exc
