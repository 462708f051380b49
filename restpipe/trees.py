"""
Field trees

A field tree is a nested dict mapping a field name to None (a leaf, the field is used as a whole)
or to another field tree (the field holds an object that is projected with the subtree):

    {"name": None, "owner": {"name": None, "email": None}}

Resources accept the shorthand ["name", "owner"] for a flat tree, mappings in the list
are merged in: ["name", {"owner": ["name", "email"]}].
"""
from typing import Any, Dict, Iterable, Mapping, Optional, Union

FieldTree = Dict[str, Optional["FieldTree"]]
FieldSpec = Union[None, Iterable[str], Mapping[str, Any]]


def build_tree(spec: FieldSpec) -> Optional[FieldTree]:
    """
    Normalize a field specification

    :param spec: None, a sequence of field names or an (already nested) mapping
    :return: the field tree or None when nothing was specified
    """
    if spec is None:
        return None
    if isinstance(spec, Mapping):
        return {field: _build_subtree(subtree) for field, subtree in spec.items()}
    if isinstance(spec, str):
        raise TypeError(f"Invalid field specification {spec!r}, use a list of field names")
    tree: FieldTree = {}
    for item in spec:
        if isinstance(item, Mapping):
            # ["id", {"owner": ["name"]}]
            tree.update(build_tree(item))
        else:
            tree[item] = None
    return tree


def _build_subtree(spec: FieldSpec) -> Optional[FieldTree]:
    # nested lists are accepted as a shorthand for flat subtrees too
    if spec is None:
        return None
    return build_tree(spec)
