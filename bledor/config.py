# bledor/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional
from pathlib import Path

# Resolve absolute path to the .env file for reliable loading
env_path = Path(__file__).parent.parent / ".env"

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=str(env_path), extra="ignore")

    DATABASE_URL: str = "sqlite:///./bledor.db"

    SECRET_KEY: str = "dev-secret-change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # Public storefront URL used to build password reset links
    APP_URL: str = "http://localhost:3000"
    FRONTEND_URL: Optional[str] = None

    # Ticket numbers: PREFIX-YYYYMMDD-HHMM-NNNN
    TICKET_PREFIX: str = "BLE"
    TICKET_MAX_ATTEMPTS: int = 5

    PASSWORD_MIN_LENGTH: int = 6
    RESET_TOKEN_TTL_MINUTES: int = 60

    LOG_LEVEL: str = "INFO"

settings = Settings()
