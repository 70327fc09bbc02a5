"""Realtime session token endpoint used by the browser before a call starts."""
from fastapi import APIRouter, Depends, Request, Response

from app.core.dependencies import get_debtor_provider, get_instruction_composer, get_token_issuer
from app.middleware.logging import record_outcome
from app.models.common import ErrorResponse
from app.services.debtor_context import DebtorContextProvider
from app.services.instructions import InstructionComposer
from app.services.session_tokens import SessionTokenIssuer

router = APIRouter(tags=["sessions"])


@router.get("/token", responses={500: {"model": ErrorResponse}})
async def create_session_token(
    request: Request,
    provider: DebtorContextProvider = Depends(get_debtor_provider),
    composer: InstructionComposer = Depends(get_instruction_composer),
    issuer: SessionTokenIssuer = Depends(get_token_issuer),
):
    """Return an ephemeral realtime session for the next eligible debtor, verbatim."""
    resolution = await provider.lookup()
    debtor = provider.apply_fallback(resolution)
    record_outcome(
        request,
        debtor_source="sheet" if resolution.resolved else "fallback",
        debtor_failure=resolution.failure.value if resolution.failure else None,
    )

    instructions = composer.compose(debtor)
    token = await issuer.issue(instructions)
    record_outcome(request, upstream_status=token.status_code)
    return Response(content=token.body, status_code=token.status_code, media_type=token.content_type)
