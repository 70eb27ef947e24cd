from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Environment mode: dev or prod
    ENV: Literal["dev", "prod"] = "dev"

    # Database (checked lazily on first engine access)
    DATABASE_URL: str | None = None

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"
    SLACK_WEBHOOK_URL: str | None = None

    # Upstream providers
    SCRYFALL_BULK_API_URL: str = "https://api.scryfall.com/bulk-data"
    SCRYFALL_BULK_TYPE: str = "unique_artwork"
    CARDMARKET_PRICE_GUIDE_URL: str = (
        "https://downloads.s3.cardmarket.com/productCatalog/priceGuide/price_guide_1.json"
    )
    EXCLUDED_SET_TYPES: list[str] = ["memorabilia", "token"]
    HTTP_TIMEOUT_SECONDS: float = 120.0

    # Batch import
    IMPORT_BATCH_SIZE: int = 500
    IMPORT_BATCH_DELAY_SECONDS: float = 0.1
    IMPORT_MAX_RETRIES: int = 3
    IMPORT_RETRY_BASE_DELAY_SECONDS: float = 2.0

    # A lock row older than this is considered abandoned by a crashed run
    SYNC_LOCK_TTL_SECONDS: int = 2 * 60 * 60

    RUN_MIGRATIONS_ON_STARTUP: bool = True

    # Docs Configuration
    DOCS_ENABLED: bool | None = None  # Override docs setting (None = auto based on ENV)

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",  # ignore unrelated keys in local .env
    )

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENV == "prod"

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENV == "dev"

    @property
    def debug_enabled(self) -> bool:
        """Debug mode is only enabled in development."""
        return self.is_development

    @property
    def effective_log_level(self) -> str:
        """Return appropriate log level based on environment."""
        if self.is_production:
            # In production, minimum INFO level (ignore DEBUG)
            return self.LOG_LEVEL if self.LOG_LEVEL.upper() != "DEBUG" else "INFO"
        return self.LOG_LEVEL

    @property
    def docs_enabled(self) -> bool:
        """Swagger/ReDoc docs enabled based on environment or override."""
        if self.DOCS_ENABLED is not None:
            return self.DOCS_ENABLED
        return self.is_development


settings = Settings()
