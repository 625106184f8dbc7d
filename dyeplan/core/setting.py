from typing import Optional

from pydantic import AnyUrl
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings class.
    Reads variables from .env file automatically.
    """

    # API Config
    PROJECT_NAME: str = "Dyeing Planning API"
    API_V1_STR: str = "/api/v1"

    # MongoDB Config
    MONGODB_URL: AnyUrl = "mongodb://localhost:27017"
    DATABASE_NAME: str = "dyeing_planning"

    # Environment
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # Plant clock (used for plan ids, default plan date and status timestamps)
    PLANT_TIMEZONE: str = "Asia/Kolkata"

    # Optional JSON file overriding the built-in planning catalog
    CATALOG_FILE: Optional[str] = None

    # Pydantic V2 Configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore"
    )


# It creates the 'config' object that main.py uses.
config = Settings()
