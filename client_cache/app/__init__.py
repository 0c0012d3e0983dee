"""
Client cache application package.

Structure:
- app.net: memoized, clonable HTTP request engine and error broadcast.
- app.caching: paginated collections, entity models and their registry.
- app.schemas: payload normalization for cached records.
- app.models: concrete entity caches (feedback).
"""
