"""
Relationship registry shared by every entity of a generation run.

The registry accumulates each entity's relationships in processing order
and is rendered once into the aggregate init-models artifact.

Lifecycle::

    empty -> accumulating -> sealed -> rendered

``record`` is legal only before sealing and only once per entity;
``consume`` is legal only once, after sealing.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Dict, List, Sequence, Tuple

from entity_synth.errors import InvariantViolation
from entity_synth.models import Relationship

logger = logging.getLogger(__name__)


class RegistryState(str, Enum):
    EMPTY = "empty"
    ACCUMULATING = "accumulating"
    SEALED = "sealed"
    RENDERED = "rendered"


class RelationshipRegistry:
    """Write-once-per-entity accumulator of entity relationships."""

    def __init__(self):
        self._entries: Dict[str, List[Relationship]] = {}
        self._state = RegistryState.EMPTY

    @property
    def state(self) -> RegistryState:
        return self._state

    @property
    def entity_names(self) -> List[str]:
        """Entity names in write order."""
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, entity_name: str) -> bool:
        return entity_name in self._entries

    def record(self, entity_name: str, relationships: Sequence[Relationship]) -> None:
        """Record one entity's relationships (possibly none)."""
        if self._state in (RegistryState.SEALED, RegistryState.RENDERED):
            raise InvariantViolation(
                f"Cannot record {entity_name}: registry is {self._state.value}"
            )
        if entity_name in self._entries:
            raise InvariantViolation(f"Relationships for {entity_name} were already recorded")

        self._entries[entity_name] = list(relationships)
        self._state = RegistryState.ACCUMULATING
        logger.debug(f"Registered {len(relationships)} relationships for {entity_name}")

    def seal(self) -> None:
        """Close the registry for writes once every table was processed."""
        if self._state in (RegistryState.SEALED, RegistryState.RENDERED):
            raise InvariantViolation(f"Registry is already {self._state.value}")
        self._state = RegistryState.SEALED
        logger.info(f"Sealed relationship registry with {len(self._entries)} entities")

    def consume(self) -> List[Tuple[str, List[Relationship]]]:
        """Hand the entries to the emitter; allowed exactly once, after sealing."""
        if self._state != RegistryState.SEALED:
            raise InvariantViolation(
                f"Registry can only be rendered when sealed (state: {self._state.value})"
            )
        self._state = RegistryState.RENDERED
        return [(name, list(rels)) for name, rels in self._entries.items()]
