from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import logging
from datetime import datetime
import os
from dotenv import load_dotenv

# Load environment variables from .env file BEFORE importing settings
load_dotenv(os.path.join(os.path.dirname(os.path.dirname(__file__)), '.env'))

from app.config import settings
from app.api import api_router
from app.middleware.cors import setup_cors
from app.middleware.logging import LoggingMiddleware, record_outcome, setup_logging
from app.models.common import HealthStatus
from app.utils.exceptions import APIException

# Configure logging
setup_logging()
logger = logging.getLogger("debt_recovery_agent")

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    logger.info(
        "Starting debt recovery voice agent backend",
        extra={
            "realtime_model": settings.realtime_model,
            "summary_model": settings.summary_model,
            "debtor_sheet_configured": settings.debtor_sheet_configured,
            "recognized_event_types": settings.recognized_event_types,
            "transcript_completion_role": settings.transcript_completion_role,
        },
    )
    if not settings.debtor_sheet_configured:
        logger.warning("Debtor sheet not configured; every session will use the fallback debtor")

    yield

    logger.info("Shutting down debt recovery voice agent backend")

# Create FastAPI app
app = FastAPI(
    title="Debt Recovery Voice Agent API",
    description="Ephemeral realtime session issuance and post-call conversation summaries",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {"name": "sessions", "description": "Realtime voice session credentials"},
        {"name": "conversations", "description": "Call transcript reconstruction and summarization"},
        {"name": "health", "description": "Health check and monitoring"}
    ]
)

setup_cors(app)
app.add_middleware(LoggingMiddleware)

app.include_router(api_router)

# Health check endpoints
@app.get("/health", tags=["health"], response_model=HealthStatus)
async def health_check():
    """Basic health check endpoint"""
    return {
        "status": "healthy",
        "service": settings.app_name,
        "timestamp": datetime.utcnow().isoformat()
    }

# Global exception handlers
@app.exception_handler(APIException)
async def api_exception_handler(request: Request, exc: APIException):
    record_outcome(request, error_code=exc.error_code, **exc.details)
    logger.error(
        f"{exc.error_type}: {exc.message}",
        extra={
            "path": request.url.path,
            "error_code": exc.error_code,
            "details": exc.details,
            "cause": getattr(exc, "cause", None),
        },
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message}
    )

@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"error": "An unexpected error occurred"}
    )

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug
    )
