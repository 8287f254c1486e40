from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    APP_NAME: str = "Limb Salvage Decision Support"
    VERSION: str = "1.0.0"
    API_PREFIX: str = "/api/v1"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = None

    CORS_ALLOW_ORIGINS: List[str] = ["*"]

    # Requests under these prefixes carry patient assessment data and are audit-logged
    AUDIT_PATH_PREFIXES: List[str] = ["/api/v1/limb-salvage"]

    class Config:
        env_file = ".env"


settings = Settings()
