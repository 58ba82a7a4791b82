from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application configuration loaded from environment variables or .env file."""

    # Parser settings
    default_format: str = Field("json", description="Dissection output format parsed by default")
    xml_raw_mode: bool = Field(
        False, description="PDML lookups return the default string instead of the field container"
    )
    xml_include_positions: bool = Field(
        False, description="Keep PDML pos/size attributes and build byte offset tables"
    )
    ek_cast_values: bool = Field(False, description="Cast EK values using the field mapping table")

    # Caching settings
    cache_enabled: bool = Field(True, description="Enable caching of pure lookups")
    field_cache_size: int = Field(4096, description="Maximum entries in field lookup caches")

    # Logging settings
    log_level: str = Field("INFO", description="Level for pcap_dissect loggers")

    class Config:
        env_prefix = "PCAP_DISSECT_"
        env_file = ".env"


@lru_cache()
def get_settings() -> Settings:
    """Return a singleton settings instance."""
    return Settings()


settings = get_settings()
