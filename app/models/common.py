from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime

class ErrorResponse(BaseModel):
    """Error body returned for failed requests; the cause is logged, not exposed"""
    error: str

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "error": "Failed to summarize conversation"
            }
        }
    )

class HealthStatus(BaseModel):
    """Health check status"""
    status: str = Field(..., pattern="^(healthy|degraded|unhealthy)$")
    service: str
    timestamp: datetime
