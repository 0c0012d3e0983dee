"""
Entity cache orchestration: one paginated collection per scoped view.
"""

from typing import Any, Callable, Dict, Iterable, List, Optional

from structlog.contextvars import bound_contextvars

from shared.config import BaseConfig, get_default_config
from shared.errors import ConfigurationError
from shared.logging import get_logger
from shared.metrics import MetricsCollector

from .collection import Collection
from .store import Entity, EntityStore, InMemoryEntityStore


class EntityModel:
    """Registry of ``Collection`` instances for one schema.

    Subclasses name the schema and the scope their paginated views hang off.
    A view's ``db_index`` is ``"{scope_kind}:{collection_name}/{scope_id}"``
    and exactly one ``Collection`` exists per index until ``teardown``.
    """

    schema_name: str = ""
    scope_kind: str = ""
    collection_name: str = ""
    bound_type_field: str = "boundToObjectType"
    bound_id_field: str = "_boundToObjectId"

    def __init__(
        self,
        store: Optional[EntityStore] = None,
        transform: Optional[Callable[[Dict[str, Any]], Entity]] = None,
        transform_many: Optional[Callable[[Iterable[Dict[str, Any]]], List[Entity]]] = None,
        *,
        settings: Optional[BaseConfig] = None,
        metrics: Optional[MetricsCollector] = None,
    ):
        if not (self.schema_name and self.scope_kind and self.collection_name):
            raise ConfigurationError(
                f"{type(self).__name__} must define schema_name, scope_kind and collection_name"
            )
        self.settings = settings or get_default_config()
        self.store = store or InMemoryEntityStore()
        self.transform = transform or dict
        self.transform_many = transform_many or (lambda datas: [self.transform(data) for data in datas])
        self.metrics = metrics
        self.logger = get_logger(f"client_cache.model.{self.schema_name.lower()}")

        self.collections: Dict[str, Collection[Entity]] = {}

    def db_index(self, scope_id: str) -> str:
        return f"{self.scope_kind}:{self.collection_name}/{scope_id}"

    def _membership(self, scope_id: str) -> Callable[[Entity], bool]:
        def belongs(entity: Entity) -> bool:
            return (
                entity.get(self.bound_type_field) == self.scope_kind
                and entity.get(self.bound_id_field) == scope_id
            )
        return belongs

    async def add_one(self, data: Dict[str, Any]) -> Entity:
        return await self.store.save(self.transform(data))

    async def get_one(self, entity_id: str) -> Optional[Entity]:
        return await self.store.get(entity_id)

    def collection_for(self, scope_id: str) -> Optional[Collection[Entity]]:
        return self.collections.get(self.db_index(scope_id))

    def add_scoped_page(
        self,
        scope_id: str,
        entities: Iterable[Dict[str, Any]],
        page: int = 1,
        count: Optional[int] = None,
    ) -> List[Entity]:
        """Normalize ``entities`` and store them as ``page`` of the scope's view."""
        with bound_contextvars(scope_id=scope_id):
            result = self.transform_many(entities)
            db_index = self.db_index(scope_id)

            cache = self.collections.get(db_index)
            if cache is None:
                cache = Collection(
                    self.schema_name,
                    self._membership(scope_id),
                    db_index,
                    count or self.settings.default_page_size,
                    metrics=self.metrics
                )
                self.collections[db_index] = cache
                self.logger.info(
                    "Collection created",
                    schema=self.schema_name,
                    db_index=db_index,
                    page_size=cache.page_size
                )

            return cache.add_page(page, result)

    def get_scoped_page(self, scope_id: str, page: int) -> Optional[List[Entity]]:
        """Read a cached page; ``None`` if the view or the page was never written."""
        with bound_contextvars(scope_id=scope_id):
            cache = self.collection_for(scope_id)
            if cache is None:
                self.logger.debug("No collection for scope", schema=self.schema_name)
                return None
            return cache.get(page)

    def teardown(self):
        for cache in self.collections.values():
            cache.clear()
        self.collections.clear()
        self.logger.info("Entity cache torn down", schema=self.schema_name)
