"""Total order over JSON value trees used to sort the serialized @graph.

Sorting with this order makes output independent of model store iteration
order:

- None sorts after every present value.
- Strings compare lexicographically and sort before any other kind.
- Objects carrying an ``spdxId`` compare on it and sort before objects
  without one; other objects compare on their concatenated sorted field
  names, then value by value in field name order.
- Lists: shorter first, equal lengths compare element-wise after sorting
  each list with this same order.
- Anything else compares on a SHA-256 hash of its canonical JSON text.
"""
from __future__ import annotations

import functools
import hashlib
import json

from spdx_jsonld.schema.common import SPDX_ID_PROP, JsonValue

_TEXT, _OBJECT, _LIST, _OTHER = range(4)


def _rank(value: JsonValue) -> int:
    if isinstance(value, str):
        return _TEXT
    if isinstance(value, dict):
        return _OBJECT
    if isinstance(value, list):
        return _LIST
    return _OTHER


def _cmp(a, b) -> int:
    return (a > b) - (a < b)


def _structural_hash(value: JsonValue) -> str:
    text = json.dumps(value, sort_keys=True, separators=(",", ":"), default=repr)
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def _compare_objects(a: dict, b: dict) -> int:
    id_a = a.get(SPDX_ID_PROP)
    id_b = b.get(SPDX_ID_PROP)
    if id_a is not None and id_b is not None:
        return _cmp(str(id_a), str(id_b))
    if id_a is not None:
        return -1
    if id_b is not None:
        return 1
    names_a = sorted(a)
    names_b = sorted(b)
    result = _cmp("".join(names_a), "".join(names_b))
    if result:
        return result
    for name in sorted(set(names_a) | set(names_b)):
        result = compare_nodes(a.get(name), b.get(name))
        if result:
            return result
    return 0


def _compare_lists(a: list, b: list) -> int:
    if len(a) != len(b):
        return _cmp(len(a), len(b))
    for x, y in zip(sort_nodes(a), sort_nodes(b)):
        result = compare_nodes(x, y)
        if result:
            return result
    return 0


def compare_nodes(a: JsonValue, b: JsonValue) -> int:
    """Three-way comparison of two JSON values: negative, zero or positive."""
    if a is None:
        return 0 if b is None else 1
    if b is None:
        return -1
    rank_a, rank_b = _rank(a), _rank(b)
    if rank_a != rank_b:
        return _cmp(rank_a, rank_b)
    if rank_a == _TEXT:
        return _cmp(a, b)
    if rank_a == _OBJECT:
        return _compare_objects(a, b)
    if rank_a == _LIST:
        return _compare_lists(a, b)
    return _cmp(_structural_hash(a), _structural_hash(b))


NODE_SORT_KEY = functools.cmp_to_key(compare_nodes)


def sort_nodes(nodes: list) -> list:
    """Return a new list of nodes in canonical order."""
    return sorted(nodes, key=NODE_SORT_KEY)
