"""Application configuration"""

import os
from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Application settings"""

    # Application
    APP_NAME: str = "SubcontractorBilling"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = os.getenv("DEBUG", "False").lower() == "true"
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")

    # API
    API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
    API_PORT: int = int(os.getenv("API_PORT", "8000"))

    # Database
    DATABASE_URL: Optional[str] = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./billing.db")

    # Invoicing
    INVOICE_DEFAULT_RECIPIENT_TEXT: str = os.getenv("INVOICE_DEFAULT_RECIPIENT_TEXT", "To Whom It May Concern,")
    INVOICE_CURRENCY: str = os.getenv("INVOICE_CURRENCY", "RM")
    INVOICE_DUE_DAYS: int = int(os.getenv("INVOICE_DUE_DAYS", "30"))
    # When False, a failed invoice insert is logged and the PDF is still returned
    INVOICE_PERSISTENCE_STRICT: bool = os.getenv("INVOICE_PERSISTENCE_STRICT", "False").lower() == "true"

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FILE: Optional[str] = os.getenv("LOG_FILE")

    class Config:
        env_file = ".env"
        case_sensitive = True


# Global settings instance
settings = Settings()
