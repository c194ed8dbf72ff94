"""
Endor Configuration

Typed settings loaded from the environment.
"""

from .settings import DEVELOPMENT, ENV_PREFIX, EndorSettings, get_settings, load_settings

__all__ = [
    "EndorSettings",
    "load_settings",
    "get_settings",
    "ENV_PREFIX",
    "DEVELOPMENT",
]
