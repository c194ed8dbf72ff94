"""
Endor Event Subsystem

Typed event definitions and a fire-and-forget publish/subscribe bus.
"""

from .bus import EventBus, EventHandler, InMemoryEventBus
from .definition import Event, EventDefinition

__all__ = [
    "Event",
    "EventDefinition",
    "EventBus",
    "EventHandler",
    "InMemoryEventBus",
]
