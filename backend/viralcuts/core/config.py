from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # OpenAI (transcription + fallback LLM)
    OPENAI_API_KEY: Optional[str] = None
    OPENAI_REQUEST_TIMEOUT_SEC: float = 60.0

    # Groq (primary LLM for moment proposals)
    GROQ_API_KEY: Optional[str] = None

    # FFmpeg binaries
    FFMPEG_BIN: str = "ffmpeg"
    FFPROBE_BIN: str = "ffprobe"

    # Silence removal
    SILENCE_THRESHOLD_DB: float = -30.0
    MIN_SILENCE_DURATION: float = 0.5
    SILENCE_PADDING: float = 0.1
    SILENCE_MERGE_GAP: float = 0.1

    # Transcript analysis
    CHUNK_MINUTES: float = 12.0

    # Folders
    VIDEOS_DIR: str = "videos"
    UPLOADS_DIR: str = "uploads"
    OUTPUT_DIR: str = "output"

    # App
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    API_V1_PREFIX: str = "/api"
    PROJECT_NAME: str = "ViralCuts"
    CORS_ORIGINS: List[str] = ["*"]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )


settings = Settings()
