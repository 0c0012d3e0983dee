"""
Shared utilities for the client cache layer.

This package aggregates common building blocks consumed by the request
engine and the entity caches:

- config: Client configuration via pydantic-settings
- logging: Structured logging with correlation context
- metrics: Prometheus metrics helpers
- errors: Canonical error types and payloads

Do not import from client_cache into shared/.
"""
