"""
Debtor context resolution for outbound collection calls.

Reads debtor rows from the configured spreadsheet and picks the first row
flagged as eligible to call. Resolution is split into two steps so each can
be exercised on its own:

- ``lookup()`` returns a ``DebtorResolution`` carrying either the record or
  a tagged failure reason;
- ``apply_fallback()`` turns any failure into the fixed fallback debtor.

``resolve()`` chains both and never raises.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Protocol, Sequence

from app.integrations.sheets_client import SheetsAPIError
from app.models.debtor import FALLBACK_DEBTOR, DebtorRecord

logger = logging.getLogger(__name__)

HEADER_ALIASES: Dict[str, str] = {
    "name": "name",
    "debtor_name": "name",
    "outstanding_debt": "outstanding_debt",
    "debt": "outstanding_debt",
    "amount": "outstanding_debt",
    "due_date": "due_date",
    "due": "due_date",
    "eligible_to_call": "eligible",
    "call": "eligible",
    "to_call": "eligible",
}


class ResolutionFailure(str, Enum):
    NOT_CONFIGURED = "not_configured"
    AUTH_ERROR = "auth_error"
    LOOKUP_ERROR = "lookup_error"
    EMPTY_DATA_SET = "empty_data_set"
    NO_ELIGIBLE_RECORD = "no_eligible_record"


@dataclass(frozen=True)
class DebtorResolution:
    record: Optional[DebtorRecord] = None
    failure: Optional[ResolutionFailure] = None
    detail: Optional[str] = None

    @property
    def resolved(self) -> bool:
        return self.record is not None

    @classmethod
    def ok(cls, record: DebtorRecord) -> "DebtorResolution":
        return cls(record=record)

    @classmethod
    def failed(cls, failure: ResolutionFailure, detail: Optional[str] = None) -> "DebtorResolution":
        return cls(failure=failure, detail=detail)


class DebtorRecordSource(Protocol):
    async def get_values(self, cell_range: str) -> List[List[Any]]: ...


def _normalize_header(header: Any) -> str:
    return re.sub(r"[^a-z0-9]+", "_", str(header).strip().lower()).strip("_")


def _is_eligible(value: Any) -> bool:
    return str(value).strip().lower() == "true"


def rows_to_candidates(rows: Sequence[Sequence[Any]]) -> List[Dict[str, str]]:
    """Turn a header row plus data rows into dicts keyed by canonical field name."""
    if not rows:
        return []
    columns = [HEADER_ALIASES.get(_normalize_header(header)) for header in rows[0]]
    candidates: List[Dict[str, str]] = []
    for row in rows[1:]:
        candidate: Dict[str, str] = {}
        for index, field in enumerate(columns):
            if field is None or field in candidate:
                continue
            candidate[field] = str(row[index]) if index < len(row) and row[index] is not None else ""
        candidates.append(candidate)
    return candidates


def select_eligible(candidates: Sequence[Dict[str, str]]) -> Optional[DebtorRecord]:
    """First candidate, in source order, whose eligible flag reads ``true``."""
    for candidate in candidates:
        if _is_eligible(candidate.get("eligible", "")):
            return DebtorRecord(
                name=candidate.get("name", ""),
                outstanding_debt=candidate.get("outstanding_debt", ""),
                due_date=candidate.get("due_date", ""),
            )
    return None


class DebtorContextProvider:
    """Resolves who the agent is calling, falling back to a fixed debtor."""

    def __init__(self, source: Optional[DebtorRecordSource], cell_range: str = "Sheet1"):
        self.source = source
        self.cell_range = cell_range

    async def lookup(self) -> DebtorResolution:
        if self.source is None:
            return DebtorResolution.failed(
                ResolutionFailure.NOT_CONFIGURED,
                "debtor sheet API key or spreadsheet id not set",
            )

        try:
            rows = await self.source.get_values(self.cell_range)
        except SheetsAPIError as e:
            failure = ResolutionFailure.AUTH_ERROR if e.is_auth_error else ResolutionFailure.LOOKUP_ERROR
            return DebtorResolution.failed(failure, str(e))
        except Exception as e:
            return DebtorResolution.failed(ResolutionFailure.LOOKUP_ERROR, f"{type(e).__name__}: {e}")

        candidates = rows_to_candidates(rows)
        if not candidates:
            return DebtorResolution.failed(ResolutionFailure.EMPTY_DATA_SET, f"no data rows in range {self.cell_range}")

        record = select_eligible(candidates)
        if record is None:
            return DebtorResolution.failed(
                ResolutionFailure.NO_ELIGIBLE_RECORD,
                f"none of {len(candidates)} rows flagged eligible to call",
            )
        return DebtorResolution.ok(record)

    @staticmethod
    def apply_fallback(resolution: DebtorResolution) -> DebtorRecord:
        if resolution.record is not None:
            return resolution.record
        logger.warning(
            f"Debtor lookup failed ({resolution.failure.value if resolution.failure else 'unknown'}), using fallback debtor",
            extra={
                "failure": resolution.failure.value if resolution.failure else None,
                "detail": resolution.detail,
            },
        )
        return FALLBACK_DEBTOR

    async def resolve(self) -> DebtorRecord:
        resolution = await self.lookup()
        if resolution.resolved:
            logger.info("Resolved debtor from sheet", extra={"range": self.cell_range})
        return self.apply_fallback(resolution)
