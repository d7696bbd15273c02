"""Port: the property-graph model store the serializer reads and the deserializer fills."""
from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Iterator, Optional

from spdx_jsonld.schema.common import IdType, PropertyDescriptor, StoredValue, TypedValue


class ModelStore(ABC):
    """Objects keyed by identifier, each holding typed property values.

    A property holds either a single value or an ordered collection of values.
    """

    # ── objects ──

    @abstractmethod
    def create(self, typed_value: TypedValue) -> None:
        """Create an object; creating an existing identifier is a no-op."""

    @abstractmethod
    def exists(self, object_uri: str) -> bool: ...

    @abstractmethod
    def get_typed_value(self, object_uri: str) -> Optional[TypedValue]: ...

    @abstractmethod
    def get_all_items(self, type_filter: Optional[str] = None) -> list[TypedValue]:
        """Every stored object, optionally restricted to one model type."""

    # ── properties ──

    @abstractmethod
    def get_property_descriptors(self, object_uri: str) -> list[PropertyDescriptor]: ...

    @abstractmethod
    def get_value(self, object_uri: str, prop: PropertyDescriptor) -> Optional[StoredValue]: ...

    @abstractmethod
    def list_values(self, object_uri: str, prop: PropertyDescriptor) -> Iterator[StoredValue]: ...

    @abstractmethod
    def set_value(self, object_uri: str, prop: PropertyDescriptor, value: StoredValue) -> None: ...

    @abstractmethod
    def add_value_to_collection(self, object_uri: str, prop: PropertyDescriptor,
                                value: StoredValue) -> None: ...

    @abstractmethod
    def is_collection_property(self, object_uri: str, prop: PropertyDescriptor) -> bool: ...

    # ── identifiers ──

    @abstractmethod
    def next_id(self, id_type: IdType) -> str: ...

    @abstractmethod
    def is_anon(self, object_uri: str) -> bool: ...

    # ── locking ──

    @abstractmethod
    def enter_critical_section(self, read_lock: bool) -> Any:
        """Acquire the store lock (shared if read_lock) and return a token for leave."""

    @abstractmethod
    def leave_critical_section(self, lock: Any) -> None: ...

    @contextmanager
    def critical_section(self, read_lock: bool):
        lock = self.enter_critical_section(read_lock)
        try:
            yield lock
        finally:
            self.leave_critical_section(lock)
