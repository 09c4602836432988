"""
Application settings and configuration using Pydantic BaseSettings.
"""
from enum import Enum
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Application environment."""
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    TEST = "test"


class ConfigBackend(str, Enum):
    """Where the multi-provider AI configuration is persisted."""
    MEMORY = "memory"
    FILE = "file"
    SUPABASE = "supabase"


class Settings(BaseSettings):
    """Application settings with environment-based configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Environment
    app_env: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment"
    )

    # Server settings
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, description="Server port")
    log_level: str = Field(default="INFO", description="Logging level")

    # CORS settings
    allowed_origins: List[str] = Field(
        default_factory=lambda: ["http://localhost:5173", "http://localhost:8080"],
        description="Allowed CORS origins"
    )

    # AI configuration persistence
    config_backend: ConfigBackend = Field(
        default=ConfigBackend.FILE,
        description="Backend for the AI configuration record"
    )
    config_file_path: str = Field(
        default=".casedesk/config.json",
        description="JSON file used by the file backend"
    )
    config_client_id: str = Field(
        default="default",
        description="Scope of the persisted configuration record"
    )

    # Supabase settings
    supabase_url: str = Field(default="", description="Supabase project URL")
    supabase_service_key: str = Field(default="", description="Supabase service role key")
    supabase_config_table: str = Field(
        default="app_settings",
        description="Table holding key-value settings rows"
    )

    # Built-in AI gateway
    lovable_api_key: str = Field(default="", description="Server-side key for the built-in AI gateway")
    lovable_gateway_url: str = Field(default="", description="Override for the gateway endpoint")

    # Provider calls
    ai_request_timeout: float = Field(default=60.0, description="Provider request timeout (seconds)")

    # Media transcoding
    ffmpeg_binary: str = Field(default="ffmpeg", description="ffmpeg executable")
    ffprobe_binary: str = Field(default="ffprobe", description="ffprobe executable")
    transcoder_realtime_capture: bool = Field(
        default=True,
        description="Capture video audio at wall-clock speed instead of decoding directly"
    )
    max_upload_bytes: int = Field(
        default=25 * 1024 * 1024,
        description="Upload size limit for transcription (bytes)"
    )

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def parse_allowed_origins(cls, v):
        """Parse allowed origins from comma-separated string."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @field_validator("app_env", mode="before")
    @classmethod
    def parse_app_env(cls, v):
        """Parse app environment, handle common variations."""
        if isinstance(v, str):
            v = v.lower()
            if v in ["dev", "development", "local"]:
                return Environment.DEVELOPMENT
            elif v in ["prod", "production"]:
                return Environment.PRODUCTION
            elif v in ["test", "testing"]:
                return Environment.TEST
        return v

    @property
    def is_development(self) -> bool:
        return self.app_env == Environment.DEVELOPMENT

    @property
    def is_production(self) -> bool:
        return self.app_env == Environment.PRODUCTION


# Global settings instance - will be created by factory
settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get or create settings instance."""
    global settings
    if settings is None:
        settings = Settings()
    return settings


def configure_settings(**overrides) -> Settings:
    """Configure settings with overrides (useful for testing)."""
    global settings
    settings = Settings(**overrides)
    return settings
