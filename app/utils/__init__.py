"""Utility modules for the debt recovery voice agent backend"""
from .exceptions import APIException, UpstreamError

__all__ = [
    "APIException",
    "UpstreamError",
]
