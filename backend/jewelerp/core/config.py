"""
Application Configuration
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List
import warnings


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Application
    APP_NAME: str = "Jewel ERP Ledger API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"  # development, staging, production
    LOG_LEVEL: str = "INFO"

    # Database (hosted PostgreSQL in production)
    DATABASE_URL: str = "sqlite:///./jewelerp.db"

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000,http://127.0.0.1:3000"

    # Data management
    ALLOW_FACTORY_RESET: bool = True
    ALLOW_NEGATIVE_STOCK: bool = False

    # GST place of supply used when an organization has none
    DEFAULT_STATE_CODE: str = "27"

    @property
    def cors_origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    @property
    def database_url(self) -> str:
        """Get properly formatted database URL"""
        url = self.DATABASE_URL
        if url.startswith("file:"):
            path = url[5:]
            return f"sqlite:///{path}"
        # Hosted providers hand out postgres:// URLs, SQLAlchemy wants postgresql://
        if url.startswith("postgres://"):
            return "postgresql://" + url[len("postgres://"):]
        return url

    @property
    def is_production(self) -> bool:
        """Check if running in production environment"""
        return self.ENVIRONMENT.lower() == "production"

    def validate_settings(self):
        """Validate settings and warn about risky combinations"""
        if self.is_production and self.DEBUG:
            raise ValueError(
                "CRITICAL: DEBUG mode is enabled in production! "
                "Set DEBUG=False for production environment."
            )

        if self.is_production and self.ALLOW_FACTORY_RESET:
            warnings.warn(
                "WARNING: ALLOW_FACTORY_RESET is enabled in production. "
                "Any caller can wipe an organization's master data.",
                UserWarning
            )

        if self.is_production and self.database_url.startswith("sqlite"):
            warnings.warn(
                "WARNING: SQLite database configured in production.",
                UserWarning
            )

        return True

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")


settings = Settings()

try:
    settings.validate_settings()
except ValueError as e:
    if settings.is_production:
        raise
    else:
        warnings.warn(str(e), UserWarning)
