from typing import Optional
from urllib.parse import quote_plus

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseConfig(BaseSettings):
    """Database configuration"""

    host: str = "localhost"
    port: int = 5432
    username: str = "postgres"
    password: SecretStr = Field(default=SecretStr("postgres"))
    database: str = "trace"
    url_override: Optional[str] = Field(
        default=None,
        description="Full SQLAlchemy URL; takes precedence over host/port fields.",
    )
    serverless: bool = Field(
        default=True,
        description="If true, disable connection pooling so serverless DBs can pause.",
    )

    @property
    def url(self) -> str:
        """Get database URL"""
        if self.url_override:
            return self.url_override
        username = quote_plus(self.username)
        password = quote_plus(self.password.get_secret_value())
        return (
            "postgresql+asyncpg://"
            f"{username}:{password}"
            f"@{self.host}:{self.port}/{self.database}"
        )

    model_config = SettingsConfigDict(
        env_prefix="DB_",
        env_file=".env",
        secrets_dir=".secrets",
        case_sensitive=False,
        extra="ignore",
    )


class GeminiConfig(BaseSettings):
    """Google Gemini configuration."""

    api_key: SecretStr | None = Field(
        default=None,
        validation_alias="GEMINI_API_KEY",
    )
    transcription_model: str = Field(
        default="gemini-3-flash-preview",
        validation_alias="GEMINI_TRANSCRIPTION_MODEL",
    )
    query_model: str = Field(
        default="gemini-3-flash-preview",
        validation_alias="GEMINI_QUERY_MODEL",
    )
    video_model: str = Field(
        default="gemini-3-flash-preview",
        validation_alias="GEMINI_VIDEO_MODEL",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        secrets_dir=".secrets",
        case_sensitive=False,
        extra="ignore",
    )


class PollyConfig(BaseSettings):
    """Amazon Polly configuration."""

    region: str = "us-east-1"
    voice_id: str = "Joanna"
    engine: str = "neural"
    output_format: str = "mp3"
    access_key: Optional[str] = None
    secret_key: Optional[str] = None

    model_config = SettingsConfigDict(
        env_prefix="POLLY_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


class QueryConfig(BaseSettings):
    """Voice query pipeline tuning."""

    poll_interval_seconds: float = Field(default=1.0, gt=0)
    poll_max_attempts: int = Field(default=30, ge=1)
    timezone: str = Field(
        default="UTC",
        description="IANA timezone used to describe 'now' to the model.",
    )

    model_config = SettingsConfigDict(
        env_prefix="QUERY_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


class VideoConfig(BaseSettings):
    """Video analysis tuning."""

    poll_interval_seconds: float = Field(default=3.0, gt=0)
    poll_max_attempts: int = Field(default=60, ge=1)

    model_config = SettingsConfigDict(
        env_prefix="VIDEO_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


class Settings(BaseSettings):
    """Application settings"""

    app_name: str = "Trace API"
    app_version: str = "1.0.0"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 3000
    log_file: str = "logs/app.log"
    pipeline_log_file: str = "logs/query_pipeline.log"
    transcript_log_file: str = "logs/transcripts.log"
    upload_dir: str = "uploads"
    max_audio_bytes: int = 25 * 1024 * 1024
    max_video_bytes: int = 100 * 1024 * 1024

    # Database
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)

    # Gemini
    gemini: GeminiConfig = Field(default_factory=GeminiConfig)

    # Polly
    polly: PollyConfig = Field(default_factory=PollyConfig)

    # Pipelines
    query: QueryConfig = Field(default_factory=QueryConfig)
    video: VideoConfig = Field(default_factory=VideoConfig)

    # CORS
    cors_origins: list[str] = ["*"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
    cors_allow_headers: list[str] = ["Content-Type", "Authorization"]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


# Global settings instance
settings = Settings()
