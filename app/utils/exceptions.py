from typing import Optional, Dict, Any

class APIException(Exception):
    """Base exception for API errors"""
    def __init__(
        self,
        message: str,
        status_code: int = 500,
        error_type: str = "API_ERROR",
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.error_type = error_type
        self.error_code = error_code or error_type
        self.details = details or {}
        super().__init__(self.message)

class UpstreamError(APIException):
    """Raised when a language-model endpoint is unreachable or returns a non-success status.

    The message is what the HTTP caller sees; the upstream cause is kept on the
    exception for logging only.
    """
    def __init__(
        self,
        message: str = "Upstream request failed",
        service: Optional[str] = None,
        upstream_status: Optional[int] = None,
        cause: Optional[str] = None,
    ):
        details = {}
        if service:
            details["service"] = service
        if upstream_status is not None:
            details["upstream_status"] = upstream_status

        self.cause = cause
        super().__init__(
            message=message,
            status_code=500,
            error_type="Upstream Error",
            error_code="UPSTREAM_ERROR",
            details=details
        )
