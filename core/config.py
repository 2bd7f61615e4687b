from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    PROJECT_NAME: str = "Store API"
    STORE_API_PREFIX: str = "/store-api"
    SUPPORTED_API_VERSIONS: List[int] = [3]

    # Database
    DATABASE_URL: str = "sqlite:///./store_api.sqlite"

    # JWT context tokens (issued by the account service)
    SECRET_KEY: str = "change-me"
    ALGORITHM: str = "HS256"

    # Criteria limits
    DEFAULT_LIMIT: int = 20
    MAX_LIMIT: int = 100

    # Logging Configuration
    LOG_LEVEL: str = "INFO"
    JSON_LOGS: bool = False
    LOG_TO_CONSOLE: bool = True

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True)


settings = Settings()
