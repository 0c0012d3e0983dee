"""
Paginated in-memory view over one scoped slice of a schema.
"""

from typing import Callable, Dict, Generic, Iterable, List, Optional, TypeVar

from shared.errors import ConfigurationError
from shared.logging import get_logger
from shared.metrics import MetricsCollector

T = TypeVar("T")


class Collection(Generic[T]):
    """Pages of entities keyed by page number, scoped to one ``db_index``.

    ``condition`` declares which entities belong to this view. ``add_page``
    stores what it is given; entities failing the condition are reported,
    not dropped. Use ``accepts`` where membership has to be enforced.
    Reads return new lists; the entities inside them are shared.
    """

    def __init__(
        self,
        schema_name: str,
        condition: Callable[[T], bool],
        db_index: str,
        page_size: int = 100,
        *,
        metrics: Optional[MetricsCollector] = None,
    ):
        if page_size < 1:
            raise ConfigurationError(
                "Page size must be positive",
                details={"db_index": db_index, "page_size": page_size}
            )
        self.schema_name = schema_name
        self.condition = condition
        self.db_index = db_index
        self.page_size = page_size
        self.metrics = metrics
        self.logger = get_logger("client_cache.collection")

        self.pages: Dict[int, List[T]] = {}

    def accepts(self, entity: T) -> bool:
        return bool(self.condition(entity))

    def add_page(self, page: int, entities: Iterable[T]) -> List[T]:
        """Replace page ``page`` with ``entities`` and return a copy of the stored page."""
        if page < 1:
            raise ConfigurationError(
                "Page numbers start at 1",
                details={"db_index": self.db_index, "page": page}
            )

        stored = list(entities)

        mismatched = sum(1 for entity in stored if not self.accepts(entity))
        if mismatched:
            self.logger.warning(
                "Entities outside collection scope",
                schema=self.schema_name,
                db_index=self.db_index,
                page=page,
                mismatched=mismatched
            )
            if self.metrics:
                self.metrics.increment_counter(
                    "predicate_mismatches_total", amount=mismatched, schema=self.schema_name
                )

        self.pages[page] = stored
        if self.metrics:
            self.metrics.increment_counter("page_writes_total", schema=self.schema_name)

        return list(stored)

    def get(self, page: int) -> Optional[List[T]]:
        stored = self.pages.get(page)
        if stored is None:
            return None
        return list(stored)

    def has_page(self, page: int) -> bool:
        return page in self.pages

    def page_numbers(self) -> List[int]:
        return sorted(self.pages)

    def clear(self):
        self.pages.clear()

    def __repr__(self) -> str:
        return f"Collection(schema={self.schema_name!r}, db_index={self.db_index!r}, pages={self.page_numbers()})"
