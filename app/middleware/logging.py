from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
import time
import logging
import json
import uuid
from datetime import datetime
from typing import Any

from app.config import settings

logger = logging.getLogger(__name__)

SLOW_REQUEST_MS = 1000

# Operation tag per route path, used to filter call-flow logs
OPERATIONS = {
    "/token": "session_token",
    "/summarize-conversation": "conversation_summary",
    "/health": "health",
}


def record_outcome(request: Request, **fields: Any) -> None:
    """Attach outcome fields to the request; the middleware logs them with the response."""
    outcome = getattr(request.state, "outcome", None)
    if outcome is None:
        outcome = {}
        request.state.outcome = outcome
    outcome.update({key: value for key, value in fields.items() if value is not None})


class LoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for structured logging of requests and responses"""

    async def dispatch(self, request: Request, call_next):
        # Generate request ID
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
        operation = OPERATIONS.get(request.url.path, "other")

        # Start timer
        start_time = time.time()

        # Extract request details
        request_details = {
            "request_id": request_id,
            "operation": operation,
            "method": request.method,
            "path": request.url.path,
            "client_host": request.client.host if request.client else None,
            "user_agent": request.headers.get("user-agent"),
            "timestamp": datetime.utcnow().isoformat()
        }

        # Log request
        logger.info("API Request", extra=request_details)

        # Process request
        response = None
        error_details = None

        try:
            response = await call_next(request)

        except Exception as e:
            # Log exception
            error_details = {
                "request_id": request_id,
                "error_type": type(e).__name__,
                "error_message": str(e),
                "path": request.url.path
            }
            logger.error("Request processing error", extra=error_details, exc_info=True)
            raise

        finally:
            # Calculate duration
            duration_ms = (time.time() - start_time) * 1000

            # Log response
            response_details = {
                "request_id": request_id,
                "operation": operation,
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code if response else 500,
                "duration_ms": round(duration_ms, 2)
            }

            # Fields recorded by the route or the exception handlers
            response_details.update(getattr(request.state, "outcome", None) or {})

            if error_details:
                response_details["error"] = error_details

            # Add response headers
            if response:
                response.headers["X-Request-ID"] = request_id
                response.headers["X-Response-Time"] = f"{duration_ms:.2f}ms"

            # Log based on status code
            if response and response.status_code >= 500:
                logger.error(f"{operation} failed", extra=response_details)
            elif response and response.status_code >= 400:
                logger.warning(f"{operation} rejected", extra=response_details)
            else:
                logger.info(f"{operation} completed", extra=response_details)

            # Log slow requests
            if duration_ms > SLOW_REQUEST_MS:
                logger.warning(
                    f"Slow request detected: {request.method} {request.url.path} took {duration_ms:.2f}ms",
                    extra=response_details
                )

        return response


def setup_logging():
    """Configure logging for the application: JSON lines in production, plain text elsewhere"""
    if settings.app_env == "production":
        handler = logging.StreamHandler()
        handler.setFormatter(JSONLogFormatter())

        root_logger = logging.getLogger()
        root_logger.handlers = [handler]
        root_logger.setLevel(settings.log_level)
    else:
        logging.basicConfig(level=settings.log_level)


class JSONLogFormatter(logging.Formatter):
    """JSON formatter for structured logging"""

    RESERVED_ATTRS = {
        "name", "msg", "args", "created", "filename", "funcName",
        "levelname", "levelno", "lineno", "module", "msecs", "message",
        "pathname", "process", "processName", "relativeCreated", "stack_info",
        "thread", "threadName", "exc_info", "exc_text", "taskName"
    }

    def format(self, record):
        log_data = {
            "timestamp": datetime.utcnow().isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module
        }

        # Call-flow fields lead the record
        for key in ("request_id", "operation"):
            if hasattr(record, key):
                log_data[key] = getattr(record, key)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Add any extra fields from the record
        for key, value in record.__dict__.items():
            if key not in self.RESERVED_ATTRS and key not in log_data:
                log_data[key] = value

        return json.dumps(log_data, default=str)
