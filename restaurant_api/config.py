"""
Centralized application configuration
"""
import os
from typing import List
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


class Settings(BaseSettings):
    """Application settings from environment variables"""

    # ============================================
    # Application Settings
    # ============================================
    APP_NAME: str = "Restaurant Ordering API"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    DEBUG: bool = ENVIRONMENT == "development"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # ============================================
    # Database Settings
    # ============================================
    DATABASE_URL: str = os.getenv(
        "DATABASE_URL", "sqlite:///./restaurant.db")
    CREATE_TABLES_ON_STARTUP: bool = os.getenv(
        "CREATE_TABLES_ON_STARTUP", "true").lower() == "true"
    SEED_MENU: bool = os.getenv("SEED_MENU", "false").lower() == "true"

    # ============================================
    # CORS Settings
    # ============================================
    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "*")

    # ============================================
    # Server Settings
    # ============================================
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", 5050))

    # ============================================
    # Orders
    # ============================================
    ORDER_NUMBER_PREFIX: str = os.getenv("ORDER_NUMBER_PREFIX", "ORD")
    # Clients fall back to polling the active orders list at this interval
    ACTIVE_ORDERS_POLL_SECONDS: float = float(
        os.getenv("ACTIVE_ORDERS_POLL_SECONDS", 5))

    class Config:
        case_sensitive = True
        env_file = ".env"
        extra = "ignore"

    @property
    def is_production(self) -> bool:
        """Check if running in production"""
        return self.ENVIRONMENT == "production"

    @property
    def cors_origins(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def database_url(self) -> str:
        # Hosted Postgres providers still hand out the old scheme
        if self.DATABASE_URL.startswith("postgres://"):
            return self.DATABASE_URL.replace("postgres://", "postgresql://", 1)
        return self.DATABASE_URL

    def validate_settings(self) -> List[str]:
        """Validate critical settings and return warnings"""
        warnings = []

        if self.is_production:
            if self.database_url.startswith("sqlite"):
                warnings.append("WARNING: Using SQLite in production!")

            if "*" in self.cors_origins:
                warnings.append(
                    "WARNING: CORS allows every origin in production!")

            if self.CREATE_TABLES_ON_STARTUP:
                warnings.append(
                    "WARNING: Tables are created on startup, run alembic migrations instead")

        if self.ACTIVE_ORDERS_POLL_SECONDS <= 0:
            warnings.append(
                "WARNING: ACTIVE_ORDERS_POLL_SECONDS must be positive")

        return warnings


# Create global settings instance
settings = Settings()
