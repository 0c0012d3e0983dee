"""
Entity caching package.

Paginated collections live purely in memory and are only ever filled with
data that was already fetched; reads never trigger network activity.
"""

from .collection import Collection
from .model import EntityModel
from .registry import ModelRegistry
from .store import EntityStore, InMemoryEntityStore
