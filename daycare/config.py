"""Application configuration using Pydantic Settings."""
from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

STORE_BACKENDS = ("mongo", "memory")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # App
    app_name: str = "Daycare Daily Reports"
    debug: bool = False
    log_level: str = "INFO"

    # MongoDB
    mongodb_url: str = "mongodb://localhost:27017"
    mongodb_db_name: str = "daycare"

    # "mongo" for Beanie/Motor, "memory" for local development without a database
    store_backend: str = "mongo"

    # Children with no attendance record are marked absent from this hour (local time)
    auto_absent_hour: int = 12

    # CORS (comma-separated origins, e.g. "https://app.example.com,https://admin.example.com")
    cors_origins: str = "http://localhost:5173"

    @model_validator(mode="after")
    def _validate_values(self):
        if not 0 <= self.auto_absent_hour <= 23:
            raise ValueError("AUTO_ABSENT_HOUR must be between 0 and 23")
        if self.store_backend not in STORE_BACKENDS:
            raise ValueError(
                f"STORE_BACKEND must be one of {', '.join(STORE_BACKENDS)}, got {self.store_backend!r}"
            )
        return self


settings = Settings()
