"""Configuration module."""
from .settings import AdvisorSettings, get_settings

__all__ = ["AdvisorSettings", "get_settings"]
