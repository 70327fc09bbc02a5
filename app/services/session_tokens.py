"""
Ephemeral realtime session issuance.

The browser never sees the long-lived OpenAI key: it asks for a short-lived
session credential, which is created here with the composed instructions and
relayed back exactly as OpenAI returned it.
"""
import logging
from typing import Protocol, Dict, Any

from app.integrations.openai_client import OpenAIAPIError
from app.models.session import TokenResponse, UpstreamResponse
from app.utils.exceptions import UpstreamError

logger = logging.getLogger(__name__)


class RealtimeSessionClient(Protocol):
    async def create_realtime_session(self, payload: Dict[str, Any]) -> UpstreamResponse: ...


class SessionTokenIssuer:
    """Requests one realtime session per call; no retries."""

    def __init__(self, client: RealtimeSessionClient, model: str, voice: str):
        self.client = client
        self.model = model
        self.voice = voice

    async def issue(self, instructions: str) -> TokenResponse:
        payload = {
            "model": self.model,
            "voice": self.voice,
            "instructions": instructions,
        }
        try:
            response = await self.client.create_realtime_session(payload)
        except OpenAIAPIError as e:
            logger.error(f"Realtime session request failed: {e}", extra={"upstream_status": e.status_code})
            raise UpstreamError(
                "Failed to create realtime session",
                service="openai_realtime",
                upstream_status=e.status_code,
                cause=str(e),
            ) from e

        logger.info(
            "Issued realtime session token",
            extra={"model": self.model, "voice": self.voice, "upstream_status": response.status_code},
        )
        return response
