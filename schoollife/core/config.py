from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    # SQLite file shared by the API process and the widget runner
    DATABASE_URL: str = "sqlite:///./schoollife.db"

    NEIS_API_KEY: str = ""
    NEIS_BASE_URL: str = "https://open.neis.go.kr/hub"
    NEIS_TIMEOUT_SECONDS: float = 10.0

    WIDGET_REFRESH_SECONDS: int = 60 * 60
    WIDGET_POLL_SECONDS: int = 5
    WIDGET_SNAPSHOT_PATH: str | None = None

    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        extra = "ignore"

settings = Settings()
