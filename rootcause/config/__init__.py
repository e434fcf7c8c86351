"""Configuration package for the root-cause context service"""

from .settings import get_settings, Settings

__all__ = ["get_settings", "Settings"]
