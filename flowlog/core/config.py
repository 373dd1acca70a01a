from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="FLOWLOG_", extra="ignore")

    DATABASE_URL: str = "sqlite:///./data.db3"

    # Empty means log to stderr. Set a path when using the full-screen calendar.
    LOG_FILE: str = ""
    LOG_LEVEL: str = "WARNING"

    # Key poll used by the calendar screen to stay responsive.
    POLL_INTERVAL_MS: int = 250


settings = Settings()
