"""
Application settings using pydantic-settings.

Environment variables are prefixed with TERMINOLOGY_SEARCH_.
"""

from functools import lru_cache

from dotenv import load_dotenv
from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="TERMINOLOGY_SEARCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @model_validator(mode="after")
    def validate_search_settings(self) -> "Settings":
        """Reject settings that would break query building or pagination."""
        if not self.base_url.startswith(("http://", "https://")):
            raise ValueError(
                "TERMINOLOGY_SEARCH_BASE_URL must be an http(s) URL, "
                f"got '{self.base_url}'."
            )
        if self.page_size <= 0:
            raise ValueError("TERMINOLOGY_SEARCH_PAGE_SIZE must be greater than zero.")
        if self.min_length < 0 or self.ecl_min_length < 0:
            raise ValueError("Minimum search lengths cannot be negative.")

        return self

    @property
    def cors_allow_credentials(self) -> bool:
        """Allow credentials only when specific origins are configured (not wildcard)."""
        return self.cors_origins != "*"

    # Server settings
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    # Terminology server
    base_url: str = "https://ontoserver.dataproducts.nhs.uk/fhir/"
    request_timeout: int = 30
    default_value_set_url: str = "http://snomed.info/sct?fhir_vs"

    # Expansion paging and filters
    page_size: int = 100
    active_only: bool = True
    include_designations: bool = True

    # Search triggers
    min_length: int = 2
    ecl_min_length: int = 1  # ECL expressions like "*" are a single character
    surface_stale_errors: bool = True  # Report errors of superseded searches

    # CORS settings
    cors_origins: str = "*"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    get_settings.cache_clear()
