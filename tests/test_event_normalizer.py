from __future__ import annotations

import pytest

from app.constants import (
    AUDIO_TRANSCRIPT_DONE,
    EMPTY_MESSAGE,
    INPUT_AUDIO_TRANSCRIPTION_COMPLETED,
    ITEM_CREATED,
    UNHANDLED_EVENT,
)
from app.models.conversation import (
    ItemCreatedEvent,
    MessageRole,
    NormalizedMessage,
    UnrecognizedEvent,
    parse_session_event,
)
from app.services.event_normalizer import ConversationEventNormalizer, NormalizerPolicy


def _text_item(text):
    return {"type": ITEM_CREATED, "item": {"content": [{"type": "input_text", "text": text}]}}


def _transcript_done(transcript):
    return {"type": AUDIO_TRANSCRIPT_DONE, "transcript": transcript}


@pytest.fixture
def normalizer():
    return ConversationEventNormalizer()


def test_item_created_text_becomes_user_message(normalizer):
    transcript = normalizer.normalize([_text_item("Hello")])

    assert transcript == (NormalizedMessage(role=MessageRole.USER, content="Hello"),)


def test_audio_transcript_done_uses_configured_system_role(normalizer):
    transcript = normalizer.normalize([_transcript_done("Sure, I can pay Friday.")])

    assert transcript == (NormalizedMessage(role=MessageRole.SYSTEM, content="Sure, I can pay Friday."),)


def test_empty_event_list_gives_empty_transcript(normalizer):
    assert normalizer.normalize([]) == ()


def test_audio_content_part_reads_transcript_field(normalizer):
    event = {
        "type": ITEM_CREATED,
        "item": {"content": [{"type": "input_audio", "transcript": "I lost my job", "text": "ignored"}]},
    }

    (message,) = normalizer.normalize([event])

    assert message.content == "I lost my job"


def test_multiple_content_parts_are_joined_in_order(normalizer):
    event = {
        "type": ITEM_CREATED,
        "item": {
            "content": [
                {"type": "input_text", "text": "Can I"},
                {"type": "input_audio", "transcript": None},
                {"type": "input_text", "text": "pay in two parts?"},
            ]
        },
    }

    (message,) = normalizer.normalize([event])

    assert message.content == "Can I pay in two parts?"


def test_unrecognized_kinds_are_dropped_entirely(normalizer):
    events = [
        {"type": "session.created", "session": {}},
        _text_item("Hello"),
        {"type": "response.audio.delta", "delta": "AAAA"},
        {"type": "input_audio_buffer.speech_started"},
        _transcript_done("Hi, this is ABC Bank."),
    ]

    transcript = normalizer.normalize(events)

    assert [m.content for m in transcript] == ["Hello", "Hi, this is ABC Bank."]
    assert UNHANDLED_EVENT not in [m.content for m in transcript]


def test_non_object_entries_are_dropped(normalizer):
    transcript = normalizer.normalize([None, "conversation.item.created", 42, _text_item("Hello")])

    assert [m.content for m in transcript] == ["Hello"]


@pytest.mark.parametrize(
    "event",
    [
        {"type": ITEM_CREATED},
        {"type": ITEM_CREATED, "item": "not-an-object"},
        {"type": ITEM_CREATED, "item": {"content": "Hello"}},
        {"type": ITEM_CREATED, "item": {"content": ["Hello"]}},
        {"type": ITEM_CREATED, "item": {"content": [{"type": "input_text", "text": 7}]}},
        {"type": AUDIO_TRANSCRIPT_DONE, "transcript": {"text": "nested"}},
    ],
)
def test_recognized_kind_with_wrong_shape_yields_unhandled_sentinel(normalizer, event):
    transcript = normalizer.normalize([event])

    assert len(transcript) == 1
    assert transcript[0].content == UNHANDLED_EVENT


@pytest.mark.parametrize(
    "event",
    [
        {"type": ITEM_CREATED, "item": {"content": []}},
        {"type": ITEM_CREATED, "item": {"content": [{"type": "input_text"}]}},
        {"type": ITEM_CREATED, "item": {"content": [{"type": "input_audio", "transcript": None}]}},
        {"type": ITEM_CREATED, "item": {"content": [{"type": "input_text", "text": "   "}]}},
        {"type": AUDIO_TRANSCRIPT_DONE},
        {"type": AUDIO_TRANSCRIPT_DONE, "transcript": ""},
    ],
)
def test_recognized_kind_without_text_yields_empty_sentinel(normalizer, event):
    transcript = normalizer.normalize([event])

    assert len(transcript) == 1
    assert transcript[0].content == EMPTY_MESSAGE


def test_malformed_event_does_not_abort_the_rest(normalizer):
    events = [_text_item("First"), {"type": ITEM_CREATED, "item": None}, _transcript_done("Last")]

    transcript = normalizer.normalize(events)

    assert [m.content for m in transcript] == ["First", UNHANDLED_EVENT, "Last"]


def test_order_is_preserved_across_kinds(normalizer):
    events = [
        _transcript_done("Hello, am I speaking with Peter Parker?"),
        _text_item("Yes, speaking."),
        {"type": "response.done"},
        _transcript_done("Your balance of $1,500 is overdue."),
        _text_item("I can pay Friday."),
    ]

    transcript = normalizer.normalize(events)

    assert [(m.role, m.content) for m in transcript] == [
        (MessageRole.SYSTEM, "Hello, am I speaking with Peter Parker?"),
        (MessageRole.USER, "Yes, speaking."),
        (MessageRole.SYSTEM, "Your balance of $1,500 is overdue."),
        (MessageRole.USER, "I can pay Friday."),
    ]


def test_normalize_is_idempotent(normalizer):
    events = [
        _text_item("Hello"),
        {"type": ITEM_CREATED, "item": {}},
        {"type": "rate_limits.updated"},
        _transcript_done("Sure, I can pay Friday."),
    ]

    first = normalizer.normalize(events)
    second = normalizer.normalize(events)

    assert first == second
    assert [m.model_dump_json() for m in first] == [m.model_dump_json() for m in second]


def test_policy_can_map_transcripts_to_assistant():
    normalizer = ConversationEventNormalizer(NormalizerPolicy(transcript_role=MessageRole.ASSISTANT))

    (message,) = normalizer.normalize([_transcript_done("We can set up a payment plan.")])

    assert message.role == MessageRole.ASSISTANT


def test_input_transcription_is_ignored_unless_allowlisted():
    event = {"type": INPUT_AUDIO_TRANSCRIPTION_COMPLETED, "item_id": "item_1", "transcript": "I can pay Friday."}

    assert ConversationEventNormalizer().normalize([event]) == ()

    policy = NormalizerPolicy.from_settings(
        [ITEM_CREATED, AUDIO_TRANSCRIPT_DONE, INPUT_AUDIO_TRANSCRIPTION_COMPLETED],
        "assistant",
    )
    (message,) = ConversationEventNormalizer(policy).normalize([event])

    assert message == NormalizedMessage(role=MessageRole.USER, content="I can pay Friday.")


def test_allowlisted_kind_without_content_rule_is_unhandled():
    policy = NormalizerPolicy(allowed_event_types=frozenset({ITEM_CREATED, "response.text.done"}))
    normalizer = ConversationEventNormalizer(policy)

    transcript = normalizer.normalize([{"type": "response.text.done", "text": "Goodbye"}])

    assert transcript == (NormalizedMessage(role=MessageRole.SYSTEM, content=UNHANDLED_EVENT),)


def test_parse_session_event_variants():
    assert isinstance(parse_session_event(_text_item("Hi")), ItemCreatedEvent)

    unknown = parse_session_event({"type": "error", "error": {"message": "bad"}})
    assert isinstance(unknown, UnrecognizedEvent)
    assert unknown.event_type == "error"

    typeless = parse_session_event({"type": 5})
    assert isinstance(typeless, UnrecognizedEvent)
    assert typeless.event_type is None


def test_assistant_items_are_not_attributed_to_the_debtor(normalizer):
    events = [
        {
            "type": ITEM_CREATED,
            "item": {"role": "assistant", "content": [{"type": "text", "text": "Hello, this is ABC Bank."}]},
        },
        {"type": ITEM_CREATED, "item": {"role": "assistant", "content": [{"type": "audio", "transcript": None}]}},
    ]

    transcript = normalizer.normalize(events)

    assert transcript == (
        NormalizedMessage(role=MessageRole.SYSTEM, content="Hello, this is ABC Bank."),
        NormalizedMessage(role=MessageRole.SYSTEM, content=EMPTY_MESSAGE),
    )
    assert MessageRole.USER not in [m.role for m in transcript]


def test_assistant_items_follow_the_transcript_role_policy():
    normalizer = ConversationEventNormalizer(NormalizerPolicy(transcript_role=MessageRole.ASSISTANT))
    event = {"type": ITEM_CREATED, "item": {"role": "assistant", "content": [{"type": "text", "text": "Hi"}]}}

    (message,) = normalizer.normalize([event])

    assert message.role == MessageRole.ASSISTANT


@pytest.mark.parametrize(
    "item, expected",
    [
        ({"role": "user", "content": [{"type": "input_text", "text": "Yes"}]}, MessageRole.USER),
        ({"role": "system", "content": [{"type": "input_text", "text": "Yes"}]}, MessageRole.SYSTEM),
        ({"role": 3, "content": [{"type": "input_text", "text": "Yes"}]}, MessageRole.USER),
        ({"content": [{"type": "input_text", "text": "Yes"}]}, MessageRole.USER),
    ],
)
def test_item_role_selects_speaker(normalizer, item, expected):
    (message,) = normalizer.normalize([{"type": ITEM_CREATED, "item": item}])

    assert message.role == expected
