from .response_cache import CacheEntry, RedisResponseCache, ResponseCache

__all__ = ["CacheEntry", "RedisResponseCache", "ResponseCache"]
