from pydantic import BaseModel, ConfigDict, Field

from app.constants import (
    FALLBACK_DEBTOR_NAME,
    FALLBACK_DUE_DATE,
    FALLBACK_OUTSTANDING_DEBT,
)


class DebtorRecord(BaseModel):
    """Subject of an outbound collections call"""
    name: str = Field(...)
    outstanding_debt: str = Field(...)
    due_date: str = Field(...)

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "name": "Jane Doe",
                "outstanding_debt": "1,200",
                "due_date": "03/15/2025"
            }
        },
    )


FALLBACK_DEBTOR = DebtorRecord(
    name=FALLBACK_DEBTOR_NAME,
    outstanding_debt=FALLBACK_OUTSTANDING_DEBT,
    due_date=FALLBACK_DUE_DATE,
)
