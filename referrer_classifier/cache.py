"""In-process key-value caches for catalog data."""

import time
from typing import Any, Dict, Optional


class MemoryCache:
    """Process-lifetime cache: entries stay until deleted or flushed."""
    
    def __init__(self) -> None:
        """Initialize the cache."""
        self._data: Dict[str, Any] = {}
        self._stats = {
            "hits": 0,
            "misses": 0,
            "saves": 0,
            "last_updated": None
        }
    
    def contains(self, cache_id: str) -> bool:
        return cache_id in self._data
    
    def fetch(self, cache_id: str) -> Optional[Any]:
        """
        Fetch a cached value.
        
        Args:
            cache_id: Cache key
            
        Returns:
            Cached value, or None when missing
        """
        if cache_id in self._data:
            self._stats["hits"] += 1
            return self._data[cache_id]
        
        self._stats["misses"] += 1
        return None
    
    def save(self, cache_id: str, value: Any) -> None:
        """Store a value under a key, replacing any previous one."""
        self._data[cache_id] = value
        self._stats["saves"] += 1
        self._stats["last_updated"] = time.time()
    
    def delete(self, cache_id: str) -> bool:
        """
        Remove a cached value.
        
        Returns:
            True if removed, False if not found
        """
        if cache_id in self._data:
            del self._data[cache_id]
            return True
        return False
    
    def flush_all(self) -> None:
        """Remove every entry."""
        self._data.clear()
    
    def __len__(self) -> int:
        return len(self._data)
    
    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        stats = self._stats.copy()
        stats["size"] = len(self._data)
        return stats


class TransientCache(MemoryCache):
    """Cache meant to live for a single request or batch of calls."""
