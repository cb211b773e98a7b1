from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENV_FILE = Path(__file__).resolve().parent.parent / ".env"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE) if _ENV_FILE.exists() else None,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    LOG_LEVEL: str = "INFO"

    # Result nodes show at most this many lines; the rest is summarised
    OUTPUT_PREVIEW_LINES: int = 5
    NODE_ID_PREFIX: str = "node"

    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://localhost:8080",
    ]
    CORS_ORIGIN_REGEX: str = r"^http://127\.0\.0\.1(:\d+)?$"


settings = Settings()
