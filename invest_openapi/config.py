"""
Configuration for the streaming client.
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

from invest_openapi.base_models import STREAMING_API_URL


class StreamingSettings(BaseSettings):
    """Streaming client settings loaded from INVEST_* environment variables."""

    token: str = Field(default="", description="OpenAPI token sent as a bearer credential")
    streaming_url: str = STREAMING_API_URL

    handshake_timeout: float = Field(default=5.0, gt=0, description="Websocket handshake timeout (seconds)")
    pong_timeout: float = Field(default=1.0, gt=0, description="Deadline for keep-alive replies (seconds)")

    log_level: str = "INFO"

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalise_log_level(cls, value: str | None) -> str:
        if not value:
            return "INFO"
        return str(value).strip().upper()

    class Config:
        env_prefix = "INVEST_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"
