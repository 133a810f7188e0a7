"""Configuration management for the referrer classifier."""

from .settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
