# server/core/cache.py
"""
Caching utilities
"""
from typing import Any, Optional, Dict
from cachetools import TTLCache

class CacheManager:
    """Simple in-memory cache manager"""
    
    def __init__(self, max_size: int = 1000, ttl: int = 900):
        self._cache: Dict[str, Any] = TTLCache(maxsize=max_size, ttl=ttl)
    
    async def get(self, key: str) -> Optional[Any]:
        """Get value from cache"""
        return self._cache.get(key)
    
    async def set(self, key: str, value: Any) -> None:
        """Set value in cache"""
        # TTLCache expires entries with the ttl given at construction
        self._cache[key] = value
    
    async def clear(self) -> None:
        """Clear all cache"""
        self._cache.clear()
    
    def __len__(self) -> int:
        return len(self._cache)
