from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    ENV: str = "development"
    DATABASE_URL: str = "sqlite:///./eventdrop.db"
    OPENAI_API_KEY: str | None = None
    MODEL_BASE_URL: str | None = None
    MODEL_NAME: str = "gpt-4o-mini"
    RESEND_API_KEY: str | None = None
    EMAIL_FROM: str = "Event Moderation <onboarding@resend.dev>"
    JWT_SECRET: str = "your-secret-key"
    INTERNAL_API_KEY: str | None = None
    POSTER_STORAGE_DIR: str = "./posters"
    PUBLIC_BASE_URL: str = "http://localhost:8000"
    FETCH_TIMEOUT_S: float = 10.0
    FETCH_MAX_BYTES: int = 5 * 1024 * 1024
    ANALYTICS_WINDOW_S: float = 300.0


settings = Settings()
