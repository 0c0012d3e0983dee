"""
Process-wide registry of entity caches.

Create one ``ModelRegistry`` at application start, pass it to whatever needs
a model, and call ``teardown`` on shutdown or logout. Nothing is registered
at import time.
"""

from typing import Dict, List, Optional

from shared.errors import ConfigurationError
from shared.logging import get_logger

from .model import EntityModel


class ModelRegistry:
    """Holds one ``EntityModel`` per schema name."""

    def __init__(self):
        self.logger = get_logger("client_cache.registry")
        self._models: Dict[str, EntityModel] = {}

    def register(self, model: EntityModel) -> EntityModel:
        existing = self._models.get(model.schema_name)
        if existing is not None and existing is not model:
            raise ConfigurationError(
                f"Schema {model.schema_name} already has a registered model",
                details={"schema": model.schema_name}
            )
        self._models[model.schema_name] = model
        return model

    def get(self, schema_name: str) -> Optional[EntityModel]:
        return self._models.get(schema_name)

    def __getitem__(self, schema_name: str) -> EntityModel:
        return self._models[schema_name]

    def schema_names(self) -> List[str]:
        return sorted(self._models)

    def teardown(self):
        """Tear down every model and forget them."""
        for model in self._models.values():
            model.teardown()
        count = len(self._models)
        self._models.clear()
        self.logger.info("Model registry torn down", models=count)
