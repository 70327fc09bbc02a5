from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict
from pydantic import field_validator, Field, AliasChoices
from typing import Annotated, List, Optional
import json

from app.constants import DEFAULT_RECOGNIZED_EVENT_TYPES


class Settings(BaseSettings):
    # Application Settings
    app_name: str = Field(default="debt-recovery-voice-agent")
    app_env: str = Field(default="production")
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")

    # API Configuration
    api_host: str = Field(default="0.0.0.0")
    api_port: int = Field(default=3000, validation_alias=AliasChoices("PORT", "API_PORT"))

    # OpenAI (required: the process refuses to start without a key)
    openai_api_key: str = Field(...)
    openai_base_url: str = Field(default="https://api.openai.com/v1")
    realtime_model: str = Field(default="gpt-4o-realtime-preview-2024-12-17")
    realtime_voice: str = Field(default="verse")
    summary_model: str = Field(default="gpt-4o-mini")

    # Debtor spreadsheet (optional: missing key forces the fallback debtor)
    debtor_sheet_api_key: Optional[str] = Field(default=None)
    debtor_sheet_id: Optional[str] = Field(default=None)
    debtor_sheet_range: str = Field(default="Sheet1")

    # Event normalization policy
    recognized_event_types: Annotated[List[str], NoDecode] = Field(
        default_factory=lambda: list(DEFAULT_RECOGNIZED_EVENT_TYPES)
    )
    transcript_completion_role: str = Field(default="system")

    # Upstream HTTP
    upstream_timeout_seconds: float = Field(default=30.0)

    # CORS Settings
    cors_allowed_origins: Annotated[List[str], NoDecode] = Field(
        default=["http://localhost:3000"]
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator('openai_api_key')
    def validate_openai_api_key(cls, v):
        if not v or not v.strip():
            raise ValueError('OPENAI_API_KEY is required')
        return v.strip()

    @field_validator('debtor_sheet_api_key', 'debtor_sheet_id', mode='before')
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator('transcript_completion_role', mode='before')
    def normalize_transcript_role(cls, v):
        candidate = str(v or "").strip().lower()
        if candidate not in {"system", "assistant"}:
            raise ValueError('TRANSCRIPT_COMPLETION_ROLE must be "system" or "assistant"')
        return candidate

    @field_validator('upstream_timeout_seconds', mode='before')
    def clamp_timeout(cls, v):
        try:
            value = float(v)
        except (TypeError, ValueError):
            return 30.0
        return max(0.0, value)

    @field_validator('recognized_event_types', 'cors_allowed_origins', mode='before')
    def parse_list(cls, v):
        if isinstance(v, str):
            raw = v.strip()
            if raw.startswith("["):
                try:
                    parsed = json.loads(raw)
                    if isinstance(parsed, list):
                        return [str(item).strip() for item in parsed if str(item).strip()]
                except json.JSONDecodeError:
                    pass
            return [item.strip() for item in raw.split(',') if item.strip()]
        return v

    @property
    def debtor_sheet_configured(self) -> bool:
        return bool(self.debtor_sheet_api_key and self.debtor_sheet_id)

    @property
    def upstream_timeout(self) -> Optional[float]:
        """httpx timeout value; ``None`` disables the timeout."""
        return self.upstream_timeout_seconds or None


# Create settings instance
settings = Settings()
