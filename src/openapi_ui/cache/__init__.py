"""In-memory spec caching for openapi-ui.

This package provides :class:`SpecCache`, which stores normalized specs
keyed by the URL they were fetched from, with a configurable TTL.

The cache is consumed by :class:`~openapi_ui.loader.SpecLoader` and is
controlled by the ``cache`` section of the settings
(:class:`~openapi_ui.models.CacheConfig`).
"""

from openapi_ui.cache.cache import CacheEntry, SpecCache

__all__ = ["CacheEntry", "SpecCache"]
