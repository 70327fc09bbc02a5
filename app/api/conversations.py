"""Post-call summarization of a recorded realtime event log."""

from fastapi import APIRouter, Depends, Request

from app.core.dependencies import get_event_normalizer, get_summary_requester
from app.middleware.logging import record_outcome
from app.models.common import ErrorResponse
from app.models.conversation import SummarizeConversationRequest, SummaryResponse
from app.services.event_normalizer import ConversationEventNormalizer
from app.services.summarizer import SummaryRequester
from app.utils.exceptions import UpstreamError

router = APIRouter(tags=["conversations"])


@router.post(
    "/summarize-conversation",
    response_model=SummaryResponse,
    responses={500: {"model": ErrorResponse}},
)
async def summarize_conversation(
    body: SummarizeConversationRequest,
    request: Request,
    normalizer: ConversationEventNormalizer = Depends(get_event_normalizer),
    requester: SummaryRequester = Depends(get_summary_requester),
):
    transcript = normalizer.normalize(body.events)
    record_outcome(request, events_received=len(body.events), transcript_messages=len(transcript))

    result = await requester.summarize(transcript)
    if not result.success:
        raise UpstreamError(
            "Failed to summarize conversation",
            service="openai_chat",
            upstream_status=result.upstream_status,
            cause=result.error,
        )
    return SummaryResponse(summary=result.summary)
