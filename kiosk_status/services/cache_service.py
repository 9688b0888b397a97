"""
Cache Service - Short-lived cache of provider kiosk metadata

Only static metadata (location, name, bank, address) is cached. Status is
always recomputed from reports by the caller, on hits and misses alike.
"""
import logging
import threading
from datetime import timedelta
from typing import Any, Dict, List, Optional

from kiosk_status.clock import Clock, utcnow
from kiosk_status.config import settings
from kiosk_status.schemas import CacheEntry, KioskMetadata

logger = logging.getLogger(__name__)


class ResultCache:
    """
    In-memory metadata cache keyed by quantized (lat, lng, radius).

    Nearby repeated queries share an entry. Expired entries are simply
    treated as misses and overwritten by the next store.
    """

    def __init__(
        self,
        clock: Clock = utcnow,
        ttl_seconds: int = settings.CACHE_TTL_SEC,
        precision: int = settings.CACHE_COORD_PRECISION,
    ):
        self._clock = clock
        self.ttl = timedelta(seconds=ttl_seconds)
        self.precision = precision
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    def key_for(self, lat: float, lng: float, radius: int) -> str:
        """Generate cache key for a search area"""
        return f"{lat:.{self.precision}f}_{lng:.{self.precision}f}_{int(radius)}"

    def lookup(self, lat: float, lng: float, radius: int) -> Optional[List[KioskMetadata]]:
        """Cached kiosks for the area, or None on a miss or expired entry"""
        key = self.key_for(lat, lng, radius)
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and self._clock() - entry.fetched_at < self.ttl:
                self._hits += 1
                logger.debug(f"Kiosk cache hit for: {key}")
                return list(entry.kiosks)
            self._misses += 1
        return None

    def store(self, lat: float, lng: float, radius: int, kiosks: List[KioskMetadata]) -> CacheEntry:
        key = self.key_for(lat, lng, radius)
        entry = CacheEntry(cache_key=key, kiosks=list(kiosks), fetched_at=self._clock())
        with self._lock:
            self._entries[key] = entry
        logger.debug(f"Cached {len(entry.kiosks)} kiosks for: {key}")
        return entry

    def stats(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "entries": len(self._entries),
                "hits": self._hits,
                "misses": self._misses,
                "ttl_seconds": int(self.ttl.total_seconds()),
            }


# Singleton instance
result_cache = ResultCache()
