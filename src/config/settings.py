"""
Configuration settings using Pydantic Settings.

Values are loaded from environment variables (or a local .env file).
The compaction engine has no secrets; every field has a safe default.
"""

from pydantic import AliasChoices, Field
from pydantic_settings import (
    BaseSettings,
    SettingsConfigDict,
    PydanticBaseSettingsSource,
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Order: init kwargs > .env (dotenv) > env vars > file secrets
    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ):
        return (
            init_settings,
            dotenv_settings,
            env_settings,
            file_secret_settings,
        )

    # Application Configuration
    app_name: str = Field("match-narrative", alias="APP_NAME")
    app_env: str = Field("development", alias="APP_ENV")
    app_log_level: str = Field(
        "INFO", validation_alias=AliasChoices("APP_LOG_LEVEL", "LOG_LEVEL")
    )

    # Reference catalog (heroes / items / abilities / game modes / rank tiers)
    catalog_data_file: str | None = Field(
        None,
        alias="CATALOG_DATA_FILE",
        description="Override path to the catalog JSON; defaults to assets/dota/constants.json",
    )
    catalog_data_version: str = Field(
        "7.37",
        alias="CATALOG_DATA_VERSION",
        description="Pinned catalog data version; must match the catalog file",
    )

    # Popular-item ranking
    popular_items_limit: int = Field(10, ge=1, alias="POPULAR_ITEMS_LIMIT")
    popular_items_min_consumable_cost: int = Field(
        300,
        ge=0,
        alias="POPULAR_ITEMS_MIN_CONSUMABLE_COST",
        description="Consumables cheaper than this are dropped from popular-item lists",
    )

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.app_env == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.app_env == "development"


# Global settings instance loaded from the environment
settings = Settings()  # type: ignore[call-arg]


def get_settings() -> Settings:
    """Get the global settings instance.

    This function provides dependency injection support for settings.
    """
    return settings
