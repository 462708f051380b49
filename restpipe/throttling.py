"""
Throttling strategies

    async throttle(identifier) -> bool  (True means the request is rejected)
"""
import time
from typing import Optional
import restpipe
from .cache import Cache, MemoryCache


class Throttling:
    """
    No throttling
    """

    async def throttle(self, identifier: str) -> bool:
        return False


class CacheThrottling(Throttling):
    """
    Keeps the access times of every identifier in a cache and rejects requests
    once `throttle_at` accesses fall within the last `timeframe` seconds

    :param cache: cache holding the access times, a MemoryCache when not given
    :param throttle_at: number of requests allowed within the timeframe
    :param timeframe: sliding window in seconds
    """

    key_prefix = "throttle:"

    def __init__(self, cache: Optional[Cache] = None, throttle_at: int = 150, timeframe: float = 3600) -> None:
        self.cache = cache if cache is not None else MemoryCache()
        self.throttle_at = throttle_at
        self.timeframe = timeframe

    async def throttle(self, identifier: str) -> bool:
        key = f"{self.key_prefix}{identifier}"
        now = time.time()
        accesses = [t for t in (await self.cache.get(key) or []) if t > now - self.timeframe]
        if len(accesses) >= self.throttle_at:
            restpipe.log.info(f"Throttling {identifier}: {len(accesses)} requests in {self.timeframe}s")
            await self.cache.set(key, accesses)
            return True
        accesses.append(now)
        await self.cache.set(key, accesses)
        return False
