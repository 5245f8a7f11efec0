"""Configuration management utilities."""

from .settings import HttpClientSettings, get_settings

__all__ = [
    "HttpClientSettings",
    "get_settings",
]
