from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional

class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    APP_ENV: str = "local"
    APP_NAME: str = "case-query-service"

    API_JWT_SECRET: str = "change_me_api"

    CORS_ORIGINS: str = "http://localhost:3000"

    COSMOS_ENDPOINT: str = "https://localhost:8081/"
    COSMOS_KEY: str = ""
    COSMOS_DB_NAME: str = "digicust"
    COSMOS_RETRY_MAX_ATTEMPTS: int = 9
    COSMOS_RETRY_MAX_WAIT_SECONDS: int = 30

    CASES_CONTAINER: str = "testing"
    PROJECT_CONTAINER: str = "Project"
    CASES_PARTITION_KEY: Optional[str] = None  # unset -> cross-partition query

    DEFAULT_PAGE_LIMIT: int = 10
    MAX_PAGE_LIMIT: int = 100

    @property
    def cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

settings = Settings()
