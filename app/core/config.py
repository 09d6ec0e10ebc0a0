from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()


class Settings(BaseSettings):
    RUNNER_URL: str = "http://localhost:2358"
    API_BASE_URL: str = "http://localhost:3000/api"

    RUNNER_TIMEOUT_SEC: float = 10.0
    STORE_TIMEOUT_SEC: float = 10.0

    SEARCH_DEBOUNCE_MS: int = 500
    LATEST_CONTESTS_LIMIT: int = 3

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()
