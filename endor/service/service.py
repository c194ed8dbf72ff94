"""
Endor services.

An EndorService is the flat, registered form of a resource: a name, a
description and a map of method key to action. Method keys are a bare
verb (``"list"``) or ``"<category>/<verb>"`` for category actions.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

from endor.actions import EndorServiceAction
from endor.errors import ActionCollisionError, NotFoundError


@dataclass
class EndorService:
    resource: str
    description: str = ""
    methods: dict[str, EndorServiceAction] = field(default_factory=dict)
    priority: int | None = None
    version: str = "v1"

    def add_action(self, name: str, action: EndorServiceAction) -> EndorService:
        """
        Register ``action`` under ``name``.

        Raises:
            ActionCollisionError: If ``name`` is already registered.
        """
        if name in self.methods:
            raise ActionCollisionError(self.resource, name)
        self.methods[name] = action
        return self

    def add_actions(self, actions: Mapping[str, EndorServiceAction]) -> EndorService:
        for name, action in actions.items():
            self.add_action(name, action)
        return self

    def get_action(self, name: str) -> EndorServiceAction:
        action = self.methods.get(name)
        if action is None:
            raise NotFoundError(f"Action '{name}' not found on resource '{self.resource}'")
        return action

    def __contains__(self, name: str) -> bool:
        return name in self.methods

    @property
    def action_names(self) -> list[str]:
        return sorted(self.methods)

    @property
    def categories(self) -> list[str]:
        """Category ids that have actions on this service."""
        return sorted({key.split("/", 1)[0] for key in self.methods if "/" in key})

    @staticmethod
    def split_key(key: str) -> tuple[str | None, str]:
        """Split a method key into ``(category, verb)``."""
        if "/" in key:
            category, verb = key.split("/", 1)
            return category, verb
        return None, key
