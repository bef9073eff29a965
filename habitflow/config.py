from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    DATABASE_URL: str = Field(..., description="SQLAlchemy async URL, e.g., postgresql+asyncpg://...")

    # Auth
    JWT_SECRET: str
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_DAYS: int = 7
    RESET_TOKEN_EXPIRE_MINUTES: int = 15

    # Used when a user has no (or an unknown) timezone
    DEFAULT_TIMEZONE: str = "Asia/Kolkata"

    # CORS
    CLIENT_URL: str = ""
    CORS_ORIGINS: str = "http://localhost:4200,https://habitflow-frontend-hm9x.onrender.com"

    # Outbound email
    SMTP_HOST: str = ""
    SMTP_PORT: int = 587
    SMTP_USERNAME: str = ""
    SMTP_PASSWORD: str = ""
    SMTP_USE_TLS: bool = False
    SMTP_START_TLS: bool = True
    EMAIL_FROM: str = "HabitFlow <no-reply@habitflow.app>"

    # AI coach (any OpenAI-compatible endpoint, OpenRouter by default)
    LLM_BASE_URL: str = "https://openrouter.ai/api/v1"
    LLM_API_KEY: str = ""
    LLM_MODEL_ID: str = "google/gemini-2.5-flash-lite"

    ENABLE_REMINDER_SCHEDULER: bool = True

    @property
    def allowed_origins(self) -> list[str]:
        origins = [x.strip() for x in self.CORS_ORIGINS.split(",") if x.strip()]
        if self.CLIENT_URL and self.CLIENT_URL not in origins:
            origins.append(self.CLIENT_URL)
        return origins

settings = Settings()
