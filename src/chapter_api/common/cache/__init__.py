"""Cache module."""
from .client import CacheManager, CacheConfig, CacheLookup, CacheStatus

__all__ = ["CacheManager", "CacheConfig", "CacheLookup", "CacheStatus"]
