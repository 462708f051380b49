import datetime
import decimal
import json
import uuid
from types import SimpleNamespace

import pytest

from restpipe import Projection, build_tree
from restpipe.json_encoder import dumps


def test_build_tree_from_list():
    assert build_tree(["name", "size"]) == {"name": None, "size": None}


def test_build_tree_from_mapping():
    spec = {"name": None, "owner": {"email": None}, "parts": ["id"]}
    assert build_tree(spec) == {"name": None, "owner": {"email": None}, "parts": {"id": None}}


def test_build_tree_from_list_with_nested_mappings():
    tree = build_tree(["id", "name", {"owner": ["name"]}, {"parts": {"id": None}}])
    assert tree == {"id": None, "name": None, "owner": {"name": None}, "parts": {"id": None}}


def test_build_tree_absent():
    assert build_tree(None) is None


def test_build_tree_rejects_string():
    with pytest.raises(TypeError):
        build_tree("name")


def test_dehydrate_hides_fields_recursively():
    projection = Projection(build_tree({"name": None, "owner": ["email"]}))
    entity = {"name": "bolt", "secret": "x", "owner": {"email": "a@b.c", "password": "p"}}

    assert projection.dehydrate(entity) == {"name": "bolt", "owner": {"email": "a@b.c"}}


def test_dehydrate_missing_field_is_none():
    projection = Projection(build_tree(["name", "size"]))
    assert projection.dehydrate({"name": "bolt"}) == {"name": "bolt", "size": None}


def test_dehydrate_uses_attributes_and_accessors():
    class Document:
        def __init__(self, **values):
            self._values = values

        def get(self, field):
            return self._values.get(field)

    projection = Projection(build_tree(["name"]))
    assert projection.dehydrate(SimpleNamespace(name="bolt", secret=1)) == {"name": "bolt"}
    assert projection.dehydrate(Document(name="nut", secret=2)) == {"name": "nut"}


def test_dehydrate_lists_keep_order():
    projection = Projection(build_tree(["id"]))
    assert projection.dehydrate([{"id": 2, "x": 1}, {"id": 1}]) == [{"id": 2}, {"id": 1}]


def test_dehydrate_unwraps_basic_types():
    projection = Projection(build_tree(["price", "count", "day", "at", "uid"]))
    uid = uuid.uuid4()
    entity = {
        "price": decimal.Decimal("1.5"),
        "count": decimal.Decimal("3"),
        "day": datetime.date(2020, 1, 2),
        "at": datetime.datetime(2020, 1, 2, 3, 4, 5),
        "uid": uid,
    }
    assert projection.dehydrate(entity) == {
        "price": 1.5,
        "count": 3,
        "day": "2020-01-02",
        "at": "2020-01-02T03:04:05",
        "uid": str(uid),
    }


def test_dehydrate_non_finite_numbers_are_null():
    projection = Projection(build_tree(["a", "b", "c", "d"]))
    entity = {"a": decimal.Decimal("Infinity"), "b": decimal.Decimal("-Infinity"), "c": decimal.Decimal("NaN"), "d": float("nan")}
    assert projection.dehydrate(entity) == {"a": None, "b": None, "c": None, "d": None}


def test_dehydrate_large_integral_decimal():
    assert Projection().dehydrate(decimal.Decimal("1E+30")) == 10**30


def test_dates_serialize_the_same_with_and_without_tree():
    at = datetime.datetime(2020, 1, 2, 3, 4, 5)
    dehydrated = json.loads(dumps(Projection(build_tree(["at"])).dehydrate({"at": at})))
    passed_through = json.loads(dumps(Projection().dehydrate({"at": at})))
    assert dehydrated == passed_through == {"at": "2020-01-02T03:04:05"}


def test_encoder_non_finite_decimal():
    assert dumps({"price": decimal.Decimal("NaN")}) == '{"price": null}'


def test_dehydrate_without_tree_passes_through():
    entity = {"name": "bolt", "secret": "x"}
    assert Projection().dehydrate(entity) is entity


def test_dehydrate_empty_tree_exposes_nothing():
    assert Projection({}).dehydrate({"name": "bolt"}) == {}


def test_full_dehydrate_envelope():
    projection = Projection(build_tree(["id"]))
    envelope = {"meta": {"total_count": 2}, "objects": [{"id": 1, "x": 1}, {"id": 2}]}

    result = projection.full_dehydrate(envelope)

    assert result == {"meta": {"total_count": 2}, "objects": [{"id": 1}, {"id": 2}]}
    assert envelope["objects"][0] == {"id": 1, "x": 1}


def test_hydrate_drops_fields_not_writable():
    projection = Projection(update_tree=build_tree({"name": None, "owner": ["email"]}))
    data = {"name": "bolt", "id": 7, "owner": {"email": "a@b.c", "admin": True}}

    assert projection.hydrate(data) == {"name": "bolt", "owner": {"email": "a@b.c"}}


def test_hydrate_leaves_out_absent_fields():
    projection = Projection(update_tree=build_tree(["name", "size"]))
    assert projection.hydrate({"size": 2}) == {"size": 2}


def test_hydrate_without_tree_passes_through():
    data = {"anything": 1}
    assert Projection().hydrate(data) == data
