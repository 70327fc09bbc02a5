from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings

def setup_cors(app: FastAPI):
    """Configure CORS middleware for the application"""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=[
            "Content-Type",
            "X-Request-ID",
        ],
        expose_headers=[
            "X-Request-ID",
            "X-Response-Time"
        ],
        max_age=3600  # Cache preflight requests for 1 hour
    )
