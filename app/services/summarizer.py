import json
import logging
from typing import Any, Dict, List, Protocol

from app.constants import NO_SUMMARY
from app.integrations.openai_client import OpenAIAPIError
from app.models.conversation import SummaryResult, Transcript

logger = logging.getLogger(__name__)

SUMMARY_INSTRUCTION = (
    "You are an assistant that summarizes debt collection phone calls. "
    "Write a concise summary of the topics discussed and the outcome of the call, "
    "including any repayment commitment, dates agreed, or request for a human callback."
)


class ChatCompletionClient(Protocol):
    async def create_chat_completion(self, model: str, messages: List[Dict[str, str]]) -> Dict[str, Any]: ...


def transcript_to_json(transcript: Transcript) -> str:
    return json.dumps([message.model_dump(mode="json") for message in transcript], ensure_ascii=False)


def _extract_summary(body: Dict[str, Any]) -> str:
    """Pull the first choice's message text; raises ValueError on any other shape."""
    try:
        content = body["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as e:
        raise ValueError(f"unexpected chat completion shape: {e!r}") from e
    if content is None:
        return NO_SUMMARY
    if not isinstance(content, str):
        raise ValueError(f"unexpected content type {type(content).__name__}")
    return content.strip() or NO_SUMMARY


class SummaryRequester:
    def __init__(self, client: ChatCompletionClient, model: str):
        self.client = client
        self.model = model

    def build_messages(self, transcript: Transcript) -> List[Dict[str, str]]:
        return [
            {"role": "system", "content": SUMMARY_INSTRUCTION},
            {"role": "user", "content": transcript_to_json(transcript)},
        ]

    async def summarize(self, transcript: Transcript) -> SummaryResult:
        """Summarize a normalized transcript in a single upstream request."""
        if not transcript:
            logger.info("Empty transcript, skipping summary request")
            return SummaryResult(success=True, summary=NO_SUMMARY)

        try:
            body = await self.client.create_chat_completion(self.model, self.build_messages(transcript))
            summary = _extract_summary(body)
        except OpenAIAPIError as e:
            logger.error(f"Summary request failed: {e}", extra={"upstream_status": e.status_code})
            return SummaryResult(success=False, error=str(e), upstream_status=e.status_code)
        except ValueError as e:
            logger.error(f"Summary response could not be read: {e}")
            return SummaryResult(success=False, error=str(e))

        logger.info(
            "Conversation summarized",
            extra={"messages": len(transcript), "summary_chars": len(summary)},
        )
        return SummaryResult(success=True, summary=summary)
