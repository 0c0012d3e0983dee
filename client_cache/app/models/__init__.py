"""
Concrete entity caches and the factory wiring them into a registry.
"""

from typing import Optional

from shared.config import BaseConfig
from shared.metrics import MetricsCollector

from ..caching.registry import ModelRegistry
from ..caching.store import EntityStore
from .feedback import FeedbackModel


def create_model_registry(
    store: Optional[EntityStore] = None,
    *,
    settings: Optional[BaseConfig] = None,
    metrics: Optional[MetricsCollector] = None,
) -> ModelRegistry:
    """Build the application's registry; call once at startup."""
    registry = ModelRegistry()
    registry.register(FeedbackModel(store, settings=settings, metrics=metrics))
    return registry
