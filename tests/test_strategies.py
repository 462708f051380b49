import base64
from types import SimpleNamespace

import pydantic
import pytest
from conftest import run

from restpipe import (
    ApiKeyAuthentication,
    Authentication,
    BasicAuthentication,
    CacheThrottling,
    JSONSchemaValidation,
    MemoryCache,
    PydanticValidation,
    ReadOnlyAuthorization,
    ResourceRequest,
)


def basic_auth(username, password):
    token = base64.b64encode(f"{username}:{password}".encode()).decode()
    return {"Authorization": f"Basic {token}"}


def test_default_identifier():
    request = ResourceRequest(remote_addr="10.0.0.1", host="api.example.com")
    assert run(Authentication().get_identifier(request)) == "10.0.0.1_api.example.com"


def test_api_key_authentication():
    auth = ApiKeyAuthentication({"secret-key": "alice"})
    request = ResourceRequest(headers={"x-api-key": "secret-key"})

    assert run(auth.is_authenticated(request)) is True
    assert request.user == "alice"
    assert run(auth.get_identifier(request)) == "alice"
    assert run(auth.is_authenticated(ResourceRequest(headers={"X-Api-Key": "wrong"}))) is False
    assert run(auth.is_authenticated(ResourceRequest())) is False


def test_basic_authentication():
    auth = BasicAuthentication(lambda username, password: (username, password) == ("bob", "pw"))
    request = ResourceRequest(headers=basic_auth("bob", "pw"))

    assert run(auth.is_authenticated(request)) is True
    assert request.user == "bob"
    assert run(auth.get_identifier(request)) == "bob"
    assert run(auth.is_authenticated(ResourceRequest(headers=basic_auth("bob", "nope")))) is False
    assert run(auth.is_authenticated(ResourceRequest(headers={"Authorization": "Bearer abc"}))) is False


def test_basic_authentication_async_check():
    async def check(username, password):
        return password == "pw"

    auth = BasicAuthentication(check)
    assert run(auth.is_authenticated(ResourceRequest(headers=basic_auth("carol", "pw")))) is True


def test_read_only_authorization():
    auth = ReadOnlyAuthorization()
    assert run(auth.is_authorized(ResourceRequest("get"))) is True
    assert run(auth.is_authorized(ResourceRequest("PUT"))) is False


def test_cache_throttling(monkeypatch):
    now = [1000.0]
    monkeypatch.setattr("restpipe.throttling.time", SimpleNamespace(time=lambda: now[0]))
    throttling = CacheThrottling(MemoryCache(), throttle_at=2, timeframe=60)

    async def scenario():
        results = [await throttling.throttle("alice") for _ in range(3)]
        results.append(await throttling.throttle("bob"))
        now[0] += 61
        results.append(await throttling.throttle("alice"))
        return results

    assert run(scenario()) == [False, False, True, False, False]


SCHEMA = {
    "type": "object",
    "properties": {"name": {"type": "string"}, "size": {"type": "integer", "minimum": 1}},
    "required": ["name"],
}


def test_jsonschema_validation():
    validation = JSONSchemaValidation(SCHEMA)

    assert run(validation.is_valid({"name": "bolt", "size": 2})) == {}
    errors = run(validation.is_valid({"size": 0}))
    assert set(errors) == {"__all__", "size"}
    assert "name" in errors["__all__"]


def test_jsonschema_validation_of_entities():
    validation = JSONSchemaValidation(SCHEMA)
    entity = SimpleNamespace(name=3, size=2, _private=object())

    assert set(run(validation.is_valid(entity))) == {"name"}


def test_jsonschema_invalid_schema():
    with pytest.raises(Exception):
        JSONSchemaValidation({"type": 12})


class WidgetModel(pydantic.BaseModel):
    name: str
    size: int = 1


def test_pydantic_validation():
    validation = PydanticValidation(WidgetModel)

    assert run(validation.is_valid({"name": "bolt"})) == {}
    errors = run(validation.is_valid({"size": "big"}))
    assert set(errors) == {"name", "size"}
