"""CachePort implementations.

- InMemoryCache: TTL cache used for live delay boards
- NullCache: never stores, for tests
"""

from .memory_cache import InMemoryCache
from .null_cache import NullCache

__all__ = ["InMemoryCache", "NullCache"]
