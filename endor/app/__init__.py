"""
Endor HTTP Application

FastAPI router and application factory for a service registry.
"""

from .main import create_app, run
from .router import create_router

__all__ = [
    "create_app",
    "create_router",
    "run",
]
