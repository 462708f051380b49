import asyncio
from types import SimpleNamespace

from conftest import run

from restpipe import BackgroundTasks, Cache, MemoryCache, build_cache_key


def test_cache_key_from_id():
    assert build_cache_key("/widgets", 42) == "/widgets42"


def test_cache_key_from_query_follows_iteration_order():
    assert build_cache_key("/widgets", {"a": "1", "b": "2"}) == "/widgetsa=1b=2"
    assert build_cache_key("/widgets", {"b": "2", "a": "1"}) == "/widgetsb=2a=1"


def test_null_cache():
    async def scenario():
        cache = Cache()
        await cache.set("k", 1)
        return await cache.get("k")

    assert run(scenario()) is None


def test_memory_cache_expiry(monkeypatch):
    now = [100.0]
    monkeypatch.setattr("restpipe.cache.time", SimpleNamespace(monotonic=lambda: now[0]))

    async def scenario():
        cache = MemoryCache(timeout=10)
        await cache.set("k", "v")
        first = await cache.get("k")
        now[0] += 11
        return first, await cache.get("k"), "k" in cache

    assert run(scenario()) == ("v", None, False)


def test_background_tasks_log_failures(monkeypatch):
    warnings = []
    monkeypatch.setattr("restpipe.log.warning", lambda msg, *args: warnings.append(msg))

    async def fail():
        raise RuntimeError("cache down")

    async def scenario():
        tasks = BackgroundTasks()
        tasks.spawn(fail(), "cache set /widgets1")
        assert len(tasks) == 1
        await tasks.join()
        return len(tasks)

    assert run(scenario()) == 0
    assert len(warnings) == 1
    assert "cache set /widgets1" in warnings[0]
    assert "cache down" in warnings[0]


def test_background_tasks_do_not_block():
    async def scenario():
        release = asyncio.Event()
        done = []

        async def slow():
            await release.wait()
            done.append(True)

        tasks = BackgroundTasks()
        tasks.spawn(slow())
        await asyncio.sleep(0)
        pending = not done
        release.set()
        await tasks.join()
        return pending, done

    assert run(scenario()) == (True, [True])
