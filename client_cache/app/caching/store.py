"""
Single-entity store contract and its in-memory default.
"""

from typing import Any, Dict, Optional, Protocol

from shared.errors import ConfigurationError

Entity = Dict[str, Any]


class EntityStore(Protocol):
    async def save(self, data: Entity) -> Entity: ...

    async def get(self, entity_id: str) -> Optional[Entity]: ...


class InMemoryEntityStore:
    """Dict-backed store keyed by the entity's primary key."""

    def __init__(self, primary_key: str = "_id"):
        self.primary_key = primary_key
        self._entities: Dict[str, Entity] = {}

    async def save(self, data: Entity) -> Entity:
        entity_id = data.get(self.primary_key)
        if entity_id is None:
            raise ConfigurationError(
                f"Entity has no {self.primary_key}",
                details={"primary_key": self.primary_key}
            )
        self._entities[entity_id] = dict(data)
        return self._entities[entity_id]

    async def get(self, entity_id: str) -> Optional[Entity]:
        return self._entities.get(entity_id)

    def clear(self):
        self._entities.clear()

    def __len__(self) -> int:
        return len(self._entities)
