"""
Request-scoped service factories for the API routers.

Each request builds its own pipeline objects from the read-only settings, so
concurrent requests share nothing mutable. Tests replace any of these through
``app.dependency_overrides``.
"""
from typing import Optional

from fastapi import Depends

from app.config import settings
from app.integrations.openai_client import OpenAIClient
from app.integrations.sheets_client import SheetsClient
from app.services.debtor_context import DebtorContextProvider
from app.services.event_normalizer import ConversationEventNormalizer, NormalizerPolicy
from app.services.instructions import InstructionComposer
from app.services.session_tokens import SessionTokenIssuer
from app.services.summarizer import SummaryRequester


def get_openai_client() -> OpenAIClient:
    return OpenAIClient(
        api_key=settings.openai_api_key,
        base_url=settings.openai_base_url,
        timeout=settings.upstream_timeout,
    )

def get_sheets_client() -> Optional[SheetsClient]:
    """Sheet source, or None when the sheet is not configured (forces the fallback debtor)."""
    if not settings.debtor_sheet_configured:
        return None
    return SheetsClient(
        api_key=settings.debtor_sheet_api_key,
        spreadsheet_id=settings.debtor_sheet_id,
        timeout=settings.upstream_timeout,
    )

def get_debtor_provider(
    source: Optional[SheetsClient] = Depends(get_sheets_client),
) -> DebtorContextProvider:
    return DebtorContextProvider(source, cell_range=settings.debtor_sheet_range)

def get_instruction_composer() -> InstructionComposer:
    return InstructionComposer()

def get_token_issuer(client: OpenAIClient = Depends(get_openai_client)) -> SessionTokenIssuer:
    return SessionTokenIssuer(client, model=settings.realtime_model, voice=settings.realtime_voice)

def get_event_normalizer() -> ConversationEventNormalizer:
    policy = NormalizerPolicy.from_settings(
        settings.recognized_event_types,
        settings.transcript_completion_role,
    )
    return ConversationEventNormalizer(policy)

def get_summary_requester(client: OpenAIClient = Depends(get_openai_client)) -> SummaryRequester:
    return SummaryRequester(client, model=settings.summary_model)
