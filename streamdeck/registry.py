"""Book-keeping for the buttons currently visible on the deck."""
from __future__ import annotations

import asyncio
import itertools
from dataclasses import dataclass, field
from typing import Dict, Iterator, Optional

from omnifocus_api import ScriptHandle

from .models import ActionSettings

_generations = itertools.count(1)


@dataclass
class ActionInstance:
    context: str
    action: str
    settings: ActionSettings
    generation: int = field(default_factory=lambda: next(_generations))
    handle: Optional[ScriptHandle] = None
    unavailable: bool = False
    in_flight: bool = False
    poll_task: Optional[asyncio.Task] = None


class ActionRegistry:
    """Live action contexts keyed by context id.

    Every (re)registration gets a new generation number so that results of a
    query started for an earlier configuration can be recognised and dropped.
    """

    def __init__(self) -> None:
        self._instances: Dict[str, ActionInstance] = {}

    def add(self, context: str, action: str, settings: ActionSettings) -> ActionInstance:
        instance = ActionInstance(context=context, action=action, settings=settings)
        self._instances[context] = instance
        return instance

    def get(self, context: Optional[str]) -> Optional[ActionInstance]:
        if context is None:
            return None
        return self._instances.get(context)

    def remove(self, context: str) -> Optional[ActionInstance]:
        return self._instances.pop(context, None)

    def is_active(self, context: str, generation: Optional[int] = None) -> bool:
        instance = self._instances.get(context)
        if instance is None:
            return False
        return generation is None or instance.generation == generation

    def __iter__(self) -> Iterator[ActionInstance]:
        return iter(list(self._instances.values()))

    def __len__(self) -> int:
        return len(self._instances)
