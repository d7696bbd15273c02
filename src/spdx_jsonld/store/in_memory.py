"""In-memory model store."""
from __future__ import annotations

import itertools
import threading
from dataclasses import dataclass, field
from typing import Iterator, Optional, Union

from spdx_jsonld.errors import InvalidData
from spdx_jsonld.schema.common import IdType, PropertyDescriptor, StoredValue, TypedValue
from spdx_jsonld.store.model_store import ModelStore

ANON_PREFIX = "__anon__"
GENERATED_SPDX_ID_PREFIX = "SPDXRef-gnrtd"
GENERATED_LICENSE_ID_PREFIX = "LicenseRef-gnrtd"


class ReadWriteLock:
    """Many readers or one writer; a waiting writer blocks new readers."""

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    def acquire_read(self):
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1

    def release_read(self):
        with self._cond:
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquire_write(self):
        with self._cond:
            self._writers_waiting += 1
            while self._writer or self._readers:
                self._cond.wait()
            self._writers_waiting -= 1
            self._writer = True

    def release_write(self):
        with self._cond:
            self._writer = False
            self._cond.notify_all()


@dataclass
class _StoredItem:
    typed_value: TypedValue
    values: dict[PropertyDescriptor, Union[StoredValue, list]] = field(default_factory=dict)


class InMemoryModelStore(ModelStore):
    """Dict-backed store; property values keep insertion order."""

    def __init__(self):
        self._items: dict[str, _StoredItem] = {}
        self._data_lock = threading.RLock()
        self._critical_section = ReadWriteLock()
        self._counters = {id_type: itertools.count(1) for id_type in IdType}

    def _item(self, object_uri: str) -> _StoredItem:
        item = self._items.get(object_uri)
        if item is None:
            raise InvalidData(f"Object {object_uri} does not exist in the model store")
        return item

    # ── objects ──

    def create(self, typed_value: TypedValue) -> None:
        with self._data_lock:
            if typed_value.object_uri not in self._items:
                self._items[typed_value.object_uri] = _StoredItem(typed_value)

    def exists(self, object_uri: str) -> bool:
        with self._data_lock:
            return object_uri in self._items

    def get_typed_value(self, object_uri: str) -> Optional[TypedValue]:
        with self._data_lock:
            item = self._items.get(object_uri)
            return item.typed_value if item else None

    def get_all_items(self, type_filter: Optional[str] = None) -> list[TypedValue]:
        with self._data_lock:
            return [
                item.typed_value for item in self._items.values()
                if type_filter is None or item.typed_value.type == type_filter
            ]

    # ── properties ──

    def get_property_descriptors(self, object_uri: str) -> list[PropertyDescriptor]:
        with self._data_lock:
            return list(self._item(object_uri).values.keys())

    def get_value(self, object_uri: str, prop: PropertyDescriptor) -> Optional[StoredValue]:
        with self._data_lock:
            value = self._item(object_uri).values.get(prop)
            return list(value) if isinstance(value, list) else value

    def list_values(self, object_uri: str, prop: PropertyDescriptor) -> Iterator[StoredValue]:
        with self._data_lock:
            value = self._item(object_uri).values.get(prop)
            if value is None:
                return iter(())
            if not isinstance(value, list):
                return iter((value,))
            return iter(list(value))

    def set_value(self, object_uri: str, prop: PropertyDescriptor, value: StoredValue) -> None:
        with self._data_lock:
            values = self._item(object_uri).values
            if value is None:
                values.pop(prop, None)
            else:
                values[prop] = value

    def add_value_to_collection(self, object_uri: str, prop: PropertyDescriptor,
                                value: StoredValue) -> None:
        with self._data_lock:
            values = self._item(object_uri).values
            existing = values.setdefault(prop, [])
            if not isinstance(existing, list):
                raise InvalidData(f"Property {prop} of {object_uri} is not a collection")
            existing.append(value)

    def is_collection_property(self, object_uri: str, prop: PropertyDescriptor) -> bool:
        with self._data_lock:
            return isinstance(self._item(object_uri).values.get(prop), list)

    # ── identifiers ──

    def next_id(self, id_type: IdType) -> str:
        with self._data_lock:
            n = next(self._counters[id_type])
        if id_type == IdType.ANONYMOUS:
            return f"{ANON_PREFIX}{n}"
        if id_type == IdType.LISTED_LICENSE:
            return f"{GENERATED_LICENSE_ID_PREFIX}{n}"
        return f"{GENERATED_SPDX_ID_PREFIX}{n}"

    def is_anon(self, object_uri: str) -> bool:
        return object_uri.startswith(ANON_PREFIX)

    # ── locking ──

    def enter_critical_section(self, read_lock: bool) -> bool:
        if read_lock:
            self._critical_section.acquire_read()
        else:
            self._critical_section.acquire_write()
        return read_lock

    def leave_critical_section(self, lock: bool) -> None:
        if lock:
            self._critical_section.release_read()
        else:
            self._critical_section.release_write()
