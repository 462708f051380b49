import asyncio
from typing import Any, Dict, List, Optional

import pytest

from restpipe import MemoryCache, NotFoundError, Resource, ResourceRequest


def run(coro):
    return asyncio.run(coro)


class RecordingCache(MemoryCache):
    """
    MemoryCache keeping a log of the get/set calls
    """

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.log: List[tuple] = []

    async def get(self, key: str) -> Any:
        self.log.append(("get", key))
        return await super().get(key)

    async def set(self, key: str, value: Any) -> None:
        self.log.append(("set", key, value))
        await super().set(key, value)


class MemoryResource(Resource):
    """
    Resource storing dicts in memory and recording the storage calls
    """

    path = "/widgets"
    allowed_methods = ["get", "post", "put", "delete"]

    def __init__(self, objects: Optional[Dict[str, dict]] = None, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.objects = {str(k): dict(v) for k, v in (objects or {}).items()}
        self.calls: List[tuple] = []

    async def get_object(self, request: ResourceRequest, id: Any) -> Any:
        self.calls.append(("get_object", id))
        if str(id) not in self.objects:
            raise NotFoundError(f"widget {id} not found")
        return dict(self.objects[str(id)])

    async def get_objects(self, request, filters, sorts, limit, offset) -> Any:
        self.calls.append(("get_objects", filters, sorts, limit, offset))
        return [dict(obj) for obj in self.objects.values()][offset : offset + limit]

    async def create_object(self, request, fields) -> Any:
        obj = dict(fields, id=str(len(self.objects) + 1))
        self.calls.append(("create_object", dict(fields)))
        self.objects[obj["id"]] = obj
        return dict(obj)

    async def update_object(self, request, obj) -> Any:
        self.calls.append(("update_object", dict(obj)))
        self.objects[str(obj["id"])] = dict(obj)
        return obj

    async def delete_object(self, request, obj) -> Any:
        self.calls.append(("delete_object", obj["id"]))
        del self.objects[str(obj["id"])]
        return None


WIDGETS = {
    "1": {"id": "1", "name": "bolt", "size": 3, "secret": "s1"},
    "2": {"id": "2", "name": "nut", "size": 1, "secret": "s2"},
}


@pytest.fixture
def cache() -> RecordingCache:
    return RecordingCache()


@pytest.fixture
def widgets(cache: RecordingCache) -> MemoryResource:
    return MemoryResource(
        WIDGETS,
        cache=cache,
        fields=["id", "name", "size"],
        update_fields=["name", "size"],
        filtering={"name": "__all__", "size": ["exact", "gte", "lte", "in"]},
    )
