"""
Caching

Resources read through the cache ("cache-aside"):
- show/index: cache.get(key), on a miss fetch from storage and cache.set(key, value) in the background
- create: cache.set(key, new_object) in the background
- update: cache.set(key, updated_object), awaited before responding
- destroy: cache.set(key, None) in the background

A cached None is treated as a miss. Background write failures are logged and dropped.
"""
import asyncio
import time
from typing import Any, Awaitable, Dict, Mapping, Optional, Set, Tuple, Union
import restpipe


def build_cache_key(path: str, id_query: Union[str, int, Mapping[str, Any]]) -> str:
    """
    build cache key from an object id or the query params

    The query params are concatenated in iteration order, so the same query with a different
    parameter order gets a different key

    :param path: resource path
    :param id_query: object id or query string params
    :return: cache key
    """
    if isinstance(id_query, Mapping):
        key = "".join(f"{field}={value}" for field, value in id_query.items())
    else:
        key = str(id_query)
    return f"{path}{key}"


class Cache:
    """
    No caching: every get is a miss, every set is dropped
    """

    async def get(self, key: str) -> Any:
        return None

    async def set(self, key: str, value: Any) -> None:
        return None


class MemoryCache(Cache):
    """
    Process local cache, values are stored as is (not copied)

    :param timeout: seconds after which an entry expires, None means never
    """

    def __init__(self, timeout: Optional[float] = None) -> None:
        self.timeout = timeout
        self._store: Dict[str, Tuple[Optional[float], Any]] = {}

    async def get(self, key: str) -> Any:
        entry = self._store.get(key)
        if entry is None:
            return None
        expires, value = entry
        if expires is not None and expires <= time.monotonic():
            del self._store[key]
            return None
        return value

    async def set(self, key: str, value: Any) -> None:
        expires = None if self.timeout is None else time.monotonic() + self.timeout
        self._store[key] = (expires, value)

    def __contains__(self, key: str) -> bool:
        return key in self._store

    def __len__(self) -> int:
        return len(self._store)

    def clear(self) -> None:
        self._store.clear()


class BackgroundTasks:
    """
    Detached tasks (fire and forget)

    The event loop only keeps weak references to tasks, we hold them until they're done.
    Failures are logged, never raised to the caller.
    """

    def __init__(self) -> None:
        self._tasks: Set[asyncio.Task] = set()

    def spawn(self, coro: Awaitable, description: str = "") -> asyncio.Task:
        task = asyncio.ensure_future(coro)
        if description:
            task.set_name(description)
        self._tasks.add(task)
        task.add_done_callback(self._done)
        return task

    def _done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            restpipe.log.warning(f"Background task {task.get_name()} failed: {exc!r}")

    async def join(self) -> None:
        """
        Wait for the pending tasks, mostly useful in tests and on shutdown
        """
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def __len__(self) -> int:
        return len(self._tasks)
