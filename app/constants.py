"""Shared constants for realtime event kinds, sentinels and fallbacks."""

# Realtime session event kinds
ITEM_CREATED = "conversation.item.created"
AUDIO_TRANSCRIPT_DONE = "response.audio_transcript.done"
INPUT_AUDIO_TRANSCRIPTION_COMPLETED = "conversation.item.input_audio_transcription.completed"

DEFAULT_RECOGNIZED_EVENT_TYPES = [ITEM_CREATED, AUDIO_TRANSCRIPT_DONE]

# Content part types that carry speech rather than typed text
AUDIO_CONTENT_TYPES = ("input_audio", "audio")

# Sentinel content for messages whose payload cannot be read
EMPTY_MESSAGE = "(empty message)"
UNHANDLED_EVENT = "(unhandled event)"

# Summary placeholder for conversations with nothing to summarize
NO_SUMMARY = "(no summary)"

# Debtor used whenever the spreadsheet lookup cannot produce an eligible record
FALLBACK_DEBTOR_NAME = "Spiderman"
FALLBACK_OUTSTANDING_DEBT = "50,000"
FALLBACK_DUE_DATE = "01/01/2025"
