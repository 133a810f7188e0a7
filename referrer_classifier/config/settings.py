"""Application settings and configuration management."""

import os
from functools import lru_cache
from typing import Optional

from pydantic import Field, ConfigDict
from pydantic_settings import BaseSettings


DEFAULT_DEFINITIONS_FILE = os.path.join(
    os.path.dirname(os.path.dirname(os.path.abspath(__file__))),
    "data",
    "search_engines.yml",
)


class Settings(BaseSettings):
    """Application settings with environment variable support."""
    
    # Definitions source
    definitions_file: str = Field(default=DEFAULT_DEFINITIONS_FILE)
    option_storage_path: Optional[str] = Field(default=None)  # None keeps options in memory
    option_storage_name: str = Field(default="SearchEngineDefinitions")
    
    # Cache Configuration
    enable_cache: bool = Field(default=True)
    
    # Logos
    assets_root: str = Field(default="plugins/Referrers/images/searchEngines")
    assets_base_path: str = Field(default=".")
    
    # Labels
    keyword_not_defined_label: str = Field(default="Keyword not defined")
    keyword_not_defined_url: str = Field(default="http://piwik.org/faq/general/#faq_144")
    unknown_url_label: str = Field(default="URL unknown!")
    
    # Logging
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="json")
    
    model_config = ConfigDict(
        env_prefix="REFERRER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"  # Ignore extra environment variables
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
