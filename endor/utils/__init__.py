"""
Endor Utilities

Common utilities used across the framework.
"""

from .serialization import to_jsonable, type_adapter

__all__ = [
    "to_jsonable",
    "type_adapter",
]
