"""
Realtime event log → role-labeled transcript.

The browser records every server event of a realtime voice session and posts
the raw list after the call. Which event kinds carry conversation content has
drifted across API revisions, so the kinds to keep and the role given to
spoken agent transcripts are a ``NormalizerPolicy`` rather than hard-coded.

Rules applied per kept event:

- ``conversation.item.created``: role ``user`` unless ``item.role`` says
  otherwise (``assistant`` items take the policy role, ``system`` items stay
  ``system``); content is built from the item's content parts
  (``transcript`` for audio parts, ``text`` otherwise).
- ``conversation.item.input_audio_transcription.completed``: role ``user``;
  content is the transcript.
- ``response.audio_transcript.done``: role from the policy; content is the
  transcript.
- any other kept kind: role ``system`` with the ``(unhandled event)`` sentinel.

A kept event whose payload has the expected structure but no usable text
yields ``(empty message)``; a kept event whose payload does not have the
expected structure yields ``(unhandled event)``. Normalization never raises
and never drops a kept event, so the output lines up one-to-one with the
kept input events.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, FrozenSet, Iterable, List, Optional

from app.constants import (
    AUDIO_CONTENT_TYPES,
    DEFAULT_RECOGNIZED_EVENT_TYPES,
    EMPTY_MESSAGE,
    UNHANDLED_EVENT,
)
from app.models.conversation import (
    AudioTranscriptDoneEvent,
    InputAudioTranscriptionCompletedEvent,
    ItemCreatedEvent,
    MessageRole,
    NormalizedMessage,
    SessionEvent,
    Transcript,
    UnrecognizedEvent,
    parse_session_event,
)

logger = logging.getLogger(__name__)


class _ShapeMismatch(Exception):
    """Payload does not have the structure its event kind promises."""


@dataclass(frozen=True)
class NormalizerPolicy:
    allowed_event_types: FrozenSet[str] = field(
        default_factory=lambda: frozenset(DEFAULT_RECOGNIZED_EVENT_TYPES)
    )
    transcript_role: MessageRole = MessageRole.SYSTEM

    @classmethod
    def from_settings(cls, recognized_event_types: Iterable[str], transcript_role: str) -> "NormalizerPolicy":
        return cls(
            allowed_event_types=frozenset(recognized_event_types),
            transcript_role=MessageRole(transcript_role),
        )


def _clean(value: Any) -> Optional[str]:
    """Usable text or ``None``; raises for a non-string value."""
    if value is None:
        return None
    if not isinstance(value, str):
        raise _ShapeMismatch(f"expected string, got {type(value).__name__}")
    return value if value.strip() else None


def _content_part_text(part: Any) -> Optional[str]:
    if not isinstance(part, dict):
        raise _ShapeMismatch("content part is not an object")
    if part.get("type") in AUDIO_CONTENT_TYPES:
        return _clean(part.get("transcript"))
    return _clean(part.get("text"))


def _item_content(item: Any) -> Optional[str]:
    if not isinstance(item, dict):
        raise _ShapeMismatch("item is missing or not an object")
    parts = item.get("content")
    if not isinstance(parts, list):
        raise _ShapeMismatch("item.content is not a list")
    texts = [text for text in (_content_part_text(part) for part in parts) if text is not None]
    return " ".join(texts) if texts else None


class ConversationEventNormalizer:
    def __init__(self, policy: Optional[NormalizerPolicy] = None):
        self.policy = policy or NormalizerPolicy()

    def is_recognized(self, event: SessionEvent) -> bool:
        return event.event_type is not None and event.event_type in self.policy.allowed_event_types

    def role_for(self, event: SessionEvent) -> MessageRole:
        if isinstance(event, ItemCreatedEvent):
            # Agent items share the role given to spoken agent transcripts
            if event.item_role == MessageRole.ASSISTANT.value:
                return self.policy.transcript_role
            if event.item_role == MessageRole.SYSTEM.value:
                return MessageRole.SYSTEM
            return MessageRole.USER
        if isinstance(event, InputAudioTranscriptionCompletedEvent):
            return MessageRole.USER
        if isinstance(event, AudioTranscriptDoneEvent):
            return self.policy.transcript_role
        return MessageRole.SYSTEM

    def content_for(self, event: SessionEvent) -> str:
        try:
            if isinstance(event, ItemCreatedEvent):
                text = _item_content(event.item)
            elif isinstance(event, (AudioTranscriptDoneEvent, InputAudioTranscriptionCompletedEvent)):
                text = _clean(event.transcript)
            else:
                raise _ShapeMismatch(f"no content rule for event kind {event.event_type!r}")
        except _ShapeMismatch as e:
            logger.debug(f"Unhandled {event.event_type} event: {e}")
            return UNHANDLED_EVENT
        return text if text is not None else EMPTY_MESSAGE

    def normalize_event(self, event: SessionEvent) -> NormalizedMessage:
        return NormalizedMessage(role=self.role_for(event), content=self.content_for(event))

    def normalize(self, events: Iterable[Any]) -> Transcript:
        messages: List[NormalizedMessage] = []
        skipped = 0
        for raw in events:
            event = parse_session_event(raw)
            if not self.is_recognized(event):
                skipped += 1
                continue
            messages.append(self.normalize_event(event))

        logger.info(
            f"Normalized {len(messages)} messages from event log",
            extra={"kept": len(messages), "skipped": skipped},
        )
        return tuple(messages)
