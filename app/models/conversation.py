from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from app.constants import (
    AUDIO_TRANSCRIPT_DONE,
    INPUT_AUDIO_TRANSCRIPTION_COMPLETED,
    ITEM_CREATED,
)


class MessageRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class NormalizedMessage(BaseModel):
    """One role-labeled line of a reconstructed conversation"""
    role: MessageRole
    content: str

    model_config = ConfigDict(frozen=True)


Transcript = Tuple[NormalizedMessage, ...]


# ---------------------------------------------------------------------------
# Raw realtime session events
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ItemCreatedEvent:
    """``conversation.item.created``: a message item with a content part list."""
    event_type: ClassVar[str] = ITEM_CREATED
    item: Any = None

    @property
    def item_role(self) -> Optional[str]:
        """Speaker recorded on the item, or ``None`` when absent or malformed."""
        if isinstance(self.item, dict) and isinstance(self.item.get("role"), str):
            return self.item["role"]
        return None


@dataclass(frozen=True)
class AudioTranscriptDoneEvent:
    """``response.audio_transcript.done``: final transcript of a spoken response."""
    event_type: ClassVar[str] = AUDIO_TRANSCRIPT_DONE
    transcript: Any = None


@dataclass(frozen=True)
class InputAudioTranscriptionCompletedEvent:
    """Transcript of the caller's speech once input transcription finishes."""
    event_type: ClassVar[str] = INPUT_AUDIO_TRANSCRIPTION_COMPLETED
    transcript: Any = None


@dataclass(frozen=True)
class UnrecognizedEvent:
    """Any event kind without a dedicated variant; keeps the raw payload."""
    event_type: Optional[str]
    payload: Any = None


SessionEvent = Union[
    ItemCreatedEvent,
    AudioTranscriptDoneEvent,
    InputAudioTranscriptionCompletedEvent,
    UnrecognizedEvent,
]


def parse_session_event(raw: Any) -> SessionEvent:
    """Map one raw event object onto its variant. Never raises."""
    if not isinstance(raw, dict):
        return UnrecognizedEvent(event_type=None, payload=raw)

    event_type = raw.get("type")
    if event_type == ITEM_CREATED:
        return ItemCreatedEvent(item=raw.get("item"))
    if event_type == AUDIO_TRANSCRIPT_DONE:
        return AudioTranscriptDoneEvent(transcript=raw.get("transcript"))
    if event_type == INPUT_AUDIO_TRANSCRIPTION_COMPLETED:
        return InputAudioTranscriptionCompletedEvent(transcript=raw.get("transcript"))

    return UnrecognizedEvent(
        event_type=event_type if isinstance(event_type, str) else None,
        payload=raw,
    )


# ---------------------------------------------------------------------------
# Summarization request / response
# ---------------------------------------------------------------------------

class SummarizeConversationRequest(BaseModel):
    """Request body for POST /summarize-conversation"""
    # Entries are inspected by the normalizer; any JSON value is accepted here
    events: List[Any] = Field(...)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "events": [
                    {
                        "type": "conversation.item.created",
                        "item": {"content": [{"type": "input_text", "text": "Hello"}]}
                    },
                    {
                        "type": "response.audio_transcript.done",
                        "transcript": "Sure, I can pay Friday."
                    }
                ]
            }
        }
    )


class SummaryResult(BaseModel):
    """Outcome of one summarization request"""
    success: bool
    summary: Optional[str] = None
    error: Optional[str] = None
    upstream_status: Optional[int] = None


class SummaryResponse(BaseModel):
    """Response model for a successful summarization"""
    success: bool = True
    summary: str
