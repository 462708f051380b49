"""
Projection of entities through field trees

- dehydrate: entity (or list of entities, or a {"meta", "objects"} envelope) -> plain data
  containing only the exposed fields
- hydrate: request input -> the subset of fields a client is allowed to write
"""
import datetime
import decimal
import math
import uuid
from collections.abc import Mapping
from typing import Any, Optional
from .trees import FieldTree

#
# Marker for "use the tree configured on the projection"
# (None is a valid explicit tree: a leaf)
#
_DEFAULT = object()

PRIMITIVES = (str, int, float, bool, type(None))


def read_field(obj: Any, field: str) -> Any:
    """
    Read a field using the entity accessor if it has one, otherwise by attribute access
    """
    getter = getattr(obj, "get", None)
    if callable(getter):
        return getter(field)
    return getattr(obj, field, None)


def write_field(obj: Any, field: str, value: Any) -> None:
    """
    Set a field using the entity setter if it has one
    """
    setter = getattr(obj, "set", None)
    if callable(setter):
        setter(field, value)
    elif isinstance(obj, dict):
        obj[field] = value
    else:
        setattr(obj, field, value)


def is_envelope(obj: Any) -> bool:
    return isinstance(obj, Mapping) and "meta" in obj and "objects" in obj


class Projection:
    """
    Applies the exposed (outward) and writable (inward) field trees of a resource
    """

    def __init__(self, tree: Optional[FieldTree] = None, update_tree: Optional[FieldTree] = None) -> None:
        self.tree = tree
        self.update_tree = update_tree

    def full_dehydrate(self, obj: Any) -> Any:
        """
        Dehydrate a response object, collection envelopes keep their meta as is
        """
        if is_envelope(obj):
            result = dict(obj)
            result["objects"] = self.dehydrate(obj["objects"])
            return result
        return self.dehydrate(obj)

    def dehydrate(self, obj: Any, tree: Any = _DEFAULT) -> Any:
        """
        Hide all fields that aren't in the tree and turn the result into basic types

        :param obj: entity, list of entities or basic value
        :param tree: field tree, defaults to the exposed fields tree
        :return: plain data
        """
        if tree is _DEFAULT:
            tree = self.tree
        if isinstance(obj, (list, tuple)):
            return [self.dehydrate(item, tree) for item in obj]
        if isinstance(obj, float) and not math.isfinite(obj):
            return None
        if isinstance(obj, PRIMITIVES):
            return obj
        if isinstance(obj, decimal.Decimal):
            return self.dehydrate_number(obj)
        if isinstance(obj, (datetime.date, datetime.time)):
            return self.dehydrate_date(obj)
        if isinstance(obj, uuid.UUID):
            return str(obj)
        if tree is None:
            return obj
        return {field: self.dehydrate(read_field(obj, field), subtree) for field, subtree in tree.items()}

    @staticmethod
    def dehydrate_number(num: decimal.Decimal) -> Any:
        # NaN and Infinity have no JSON representation
        if not num.is_finite():
            return None
        if num == num.to_integral_value():
            return int(num)
        return float(num)

    @staticmethod
    def dehydrate_date(date: Any) -> str:
        return date.isoformat()

    def hydrate(self, obj: Any, tree: Any = _DEFAULT) -> Any:
        """
        Make sure only the writable fields are passed on, fields missing from the input are left out

        :param obj: request input
        :param tree: field tree, defaults to the writable fields tree
        :return: the restricted input
        """
        if tree is _DEFAULT:
            tree = self.update_tree
        if isinstance(obj, (list, tuple)):
            return [self.hydrate(item, tree) for item in obj]
        if not isinstance(obj, Mapping) or tree is None:
            return obj
        return {field: self.hydrate(obj[field], subtree) for field, subtree in tree.items() if field in obj}
