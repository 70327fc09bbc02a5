from dataclasses import dataclass


@dataclass(frozen=True)
class UpstreamResponse:
    """Raw HTTP response from a language-model endpoint, kept byte-for-byte."""
    status_code: int
    body: bytes
    content_type: str = "application/json"


# The realtime session response is relayed to the browser without re-shaping
TokenResponse = UpstreamResponse
