"""Deserialize SPDX 3 JSON-LD into a model store.

A graph is read in two passes. The first pass indexes every node by its id
and records the spec version declared by each CreationInfo node; the second
materializes the nodes in document order. References may therefore point
at nodes defined later in the document, and each element is read with the
schema of the spec version its creation info declares.
"""
from __future__ import annotations

import json
import logging
import math
import re
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Union

from spdx_jsonld import config
from spdx_jsonld.errors import InvalidData, SchemaUnavailable
from spdx_jsonld.schema.common import (
    BLANK_NODE_PREFIX,
    CORE_CREATION_INFO,
    CREATION_INFO_PROP,
    ID_PROP,
    NON_PROPERTY_FIELD_NAMES,
    SPDX_ID_PROP,
    SPEC_VERSION_PROP,
    TYPE_PROP,
    IdType,
    IndividualUriValue,
    JsonValue,
    PropertyKind,
    StoredValue,
    TypedValue,
)
from spdx_jsonld.schema.jsonld_schema import JsonLDSchema, load_schema
from spdx_jsonld.store.model_store import ModelStore

logger = logging.getLogger(__name__)

# plain decimal notation only: no digit separators, nan or infinity
INTEGER_PATTERN = re.compile(r"^[+-]?[0-9]+$")
DOUBLE_PATTERN = re.compile(r"^[+-]?([0-9]+\.?[0-9]*|\.[0-9]+)([eE][+-]?[0-9]+)?$")


class BlankNodeIdMap:
    """Translates blank node ids (``_:x``) of one document to anonymous store ids.

    Lookup and insertion happen under one lock, so every reference to the
    same blank id resolves to the same store id even when nodes are read
    from several threads.
    """

    def __init__(self, model_store: ModelStore):
        self._store = model_store
        self._ids: dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, blank_id: str) -> str:
        with self._lock:
            store_id = self._ids.get(blank_id)
            if store_id is None:
                store_id = self._store.next_id(IdType.ANONYMOUS)
                self._ids[blank_id] = store_id
            return store_id

    def __contains__(self, blank_id: str) -> bool:
        with self._lock:
            return blank_id in self._ids

    def __len__(self) -> int:
        with self._lock:
            return len(self._ids)


@dataclass
class _GraphIndex:
    """Pass 1 results plus the blank id translations of one call."""
    blank_ids: BlankNodeIdMap
    nodes_by_id: dict[str, dict] = field(default_factory=dict)
    creation_info_versions: dict[str, str] = field(default_factory=dict)


def _node_id(node: dict) -> Optional[str]:
    for id_field in (ID_PROP, SPDX_ID_PROP):
        if node.get(id_field) is not None:
            return str(node[id_field])
    return None


class JsonLDDeserializer:
    """Reads JSON-LD nodes into a model store.

    Args:
        model_store: Store the objects are created in.
        resource_dir: Directory with the schema resources.
    """

    def __init__(self, model_store: ModelStore,
                 resource_dir: Optional[Union[str, Path]] = None):
        if model_store is None:
            raise ValueError("Model store is a required field")
        self._store = model_store
        self._resource_dir = resource_dir
        self._schemas: dict[str, JsonLDSchema] = {}
        self._schemas_lock = threading.Lock()
        self._materialize_lock = threading.RLock()

    # ── public API ──

    def deserialize_graph(self, graph: JsonValue) -> None:
        """Deserialize every node of a JSON-LD @graph into the store.

        Args:
            graph: The @graph list.

        Raises:
            InvalidData: if graph is not a list or a node can not be converted.
                Nodes materialized before the failing node stay in the store.
            SchemaUnavailable: if no schema can be loaded.
        """
        if not isinstance(graph, list):
            logger.error("Invalid type for deserialize_graph - must be a list")
            raise InvalidData("Invalid type for deserialize_graph - must be a list")
        index = self._build_index(graph)
        for node in graph:
            if not isinstance(node, dict):
                raise InvalidData(f"Graph member is not a JSON object: {node!r}")
            self._deserialize_core_object(node, config.LATEST_SPEC_VERSION, index)

    def deserialize_element(self, element_node: dict) -> TypedValue:
        """Deserialize a single node and return the stored object it became."""
        if not isinstance(element_node, dict):
            raise InvalidData(f"Element is not a JSON object: {element_node!r}")
        index = _GraphIndex(BlankNodeIdMap(self._store))
        node_id = _node_id(element_node)
        if node_id is not None:
            index.nodes_by_id[node_id] = element_node
        return self._deserialize_core_object(element_node, config.LATEST_SPEC_VERSION, index)

    def get_schema(self, spec_version: str = config.LATEST_SPEC_VERSION) -> JsonLDSchema:
        """Schema for spec_version, the latest version's if it is unavailable."""
        with self._schemas_lock:
            schema = self._schemas.get(spec_version)
            if schema is not None:
                return schema
            try:
                schema = load_schema(spec_version, self._resource_dir, fallback=False)
            except SchemaUnavailable as e:
                logger.warning(f"Unable to get a schema for spec version {spec_version}. "
                               f"Trying latest spec version.")
                schema = self._schemas.get(config.LATEST_SPEC_VERSION)
                if schema is None:
                    try:
                        schema = load_schema(config.LATEST_SPEC_VERSION, self._resource_dir,
                                             fallback=False)
                    except SchemaUnavailable:
                        logger.error("Unable to get JSON schema for latest version")
                        raise e
                    self._schemas[config.LATEST_SPEC_VERSION] = schema
            self._schemas[spec_version] = schema
            return schema

    # ── pass 1 ──

    def _build_index(self, graph: list) -> _GraphIndex:
        index = _GraphIndex(BlankNodeIdMap(self._store))
        for node in graph:
            if not isinstance(node, dict):
                continue
            for id_field in (SPDX_ID_PROP, ID_PROP):
                if node.get(id_field) is not None:
                    index.nodes_by_id[str(node[id_field])] = node
            if (self._type_of(node) == CORE_CREATION_INFO
                    and SPEC_VERSION_PROP in node and node.get(ID_PROP) is not None):
                index.creation_info_versions[str(node[ID_PROP])] = str(node[SPEC_VERSION_PROP])
        return index

    def _type_of(self, node: dict) -> Optional[str]:
        json_type = node.get(TYPE_PROP)
        if not isinstance(json_type, str):
            return None
        return self.get_schema().json_type_to_model_type(json_type)

    # ── pass 2 ──

    def _store_id(self, node: dict, index: _GraphIndex) -> str:
        node_id = _node_id(node)
        if node_id is None:
            return self._store.next_id(IdType.ANONYMOUS)
        if node_id.startswith(BLANK_NODE_PREFIX):
            return index.blank_ids.get(node_id)
        return node_id

    def _spec_version(self, node: dict, model_type: str, default_version: str,
                      index: _GraphIndex) -> str:
        creation_info = node.get(CREATION_INFO_PROP)
        if isinstance(creation_info, dict):
            if SPEC_VERSION_PROP in creation_info:
                return str(creation_info[SPEC_VERSION_PROP])
            return default_version
        if creation_info is not None:
            return index.creation_info_versions.get(str(creation_info), default_version)
        if model_type == CORE_CREATION_INFO and SPEC_VERSION_PROP in node:
            return str(node[SPEC_VERSION_PROP])
        return default_version

    def _deserialize_core_object(self, node: dict, default_version: str,
                                 index: _GraphIndex) -> TypedValue:
        with self._materialize_lock:
            model_type = self._type_of(node)
            if model_type is None:
                logger.error(f"Missing type for core object {node}")
                raise InvalidData(f"Missing type for core object {node}")
            store_id = self._store_id(node, index)
            spec_version = self._spec_version(node, model_type, default_version, index)
            tv = TypedValue(store_id, model_type, spec_version)
            self._store.create(tv)
            schema = self.get_schema(spec_version)
            for field_name, value in node.items():
                if field_name in NON_PROPERTY_FIELD_NAMES:
                    continue
                prop = schema.get_property_descriptor(field_name)
                if prop is None:
                    logger.error(f"No property descriptor for field {field_name} in version {spec_version}")
                    raise InvalidData(f"No property descriptor for field {field_name} "
                                      f"in spec version {spec_version}")
                if isinstance(value, list):
                    for item in value:
                        self._store.add_value_to_collection(
                            store_id, prop, self._to_stored_value(field_name, item, spec_version, index))
                else:
                    self._store.set_value(
                        store_id, prop, self._to_stored_value(field_name, value, spec_version, index))
            return tv

    # ── values ──

    def _to_stored_value(self, field_name: str, value: JsonValue, spec_version: str,
                         index: _GraphIndex) -> StoredValue:
        kind = self.get_schema(spec_version).get_property_kind(field_name)
        if isinstance(value, list):
            raise InvalidData(f"Can not convert a JSON array nested in {field_name} to a stored value")
        if value is None:
            raise InvalidData(f"Can not convert a JSON null in {field_name} to a stored value")
        if isinstance(value, bool):
            if kind is None or kind == PropertyKind.BOOLEAN:
                return value
            if kind == PropertyKind.STRING:
                return json.dumps(value)
            raise InvalidData(f"Type mismatch for {field_name}: expecting {kind.name} but was a JSON boolean")
        if isinstance(value, (int, float)):
            return self._number_to_stored_value(field_name, value, kind)
        if isinstance(value, dict):
            return self._deserialize_core_object(value, spec_version, index)
        if isinstance(value, str):
            return self._text_to_stored_value(field_name, value, kind, spec_version, index)
        raise InvalidData(f"Unsupported JSON value for {field_name}: {value!r}")

    def _number_to_stored_value(self, field_name: str, value: Union[int, float],
                                kind: Optional[PropertyKind]) -> StoredValue:
        if kind is None:
            return value
        if kind == PropertyKind.INTEGER:
            if isinstance(value, float) and not value.is_integer():
                raise InvalidData(f"Type mismatch for {field_name}: {value} is not an integer")
            return int(value)
        if kind == PropertyKind.DOUBLE:
            if not math.isfinite(value):
                raise InvalidData(f"Invalid value {value} for {field_name}: not a finite number")
            return float(value)
        if kind == PropertyKind.STRING:
            return json.dumps(value)
        raise InvalidData(f"Type mismatch for {field_name}: expecting {kind.name} but was a JSON number")

    def _text_to_stored_value(self, field_name: str, text: str, kind: Optional[PropertyKind],
                              spec_version: str, index: _GraphIndex) -> StoredValue:
        # text can be an element or object id, an enum token, an individual
        # URI, an external element URI or a plain literal
        if kind is None:
            logger.warning(f"Missing property type for value {text!r} of {field_name}. "
                           f"Defaulting to a string type")
            return text
        if kind == PropertyKind.REFERENCE:
            target = index.nodes_by_id.get(text)
            if target is None:
                # an individual or an external element
                return IndividualUriValue(text)
            target_type = self._type_of(target)
            if target_type is None:
                raise InvalidData(f"Missing type in schema for ID {text}")
            object_uri = index.blank_ids.get(text) if text.startswith(BLANK_NODE_PREFIX) else text
            return TypedValue(object_uri, target_type, spec_version)
        if kind == PropertyKind.ENUM:
            vocab = self.get_schema(spec_version).get_vocab(field_name)
            if not vocab:
                raise InvalidData(f"Missing vocabulary for enum property {field_name}")
            return IndividualUriValue(vocab + text)
        if kind == PropertyKind.STRING:
            return text
        if kind == PropertyKind.DOUBLE:
            return self._parse(field_name, text, _parse_double)
        if kind == PropertyKind.INTEGER:
            return self._parse(field_name, text, _parse_integer)
        if kind == PropertyKind.BOOLEAN:
            return self._parse(field_name, text, _parse_boolean)
        raise InvalidData(f"Unknown type {kind.name} for property {field_name}")

    @staticmethod
    def _parse(field_name: str, text: str, parser) -> Any:
        try:
            return parser(text.strip())
        except ValueError as e:
            raise InvalidData(f"Invalid value {text!r} for {field_name}: {e}") from e


def _parse_boolean(text: str) -> bool:
    lowered = text.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    raise ValueError("expecting true or false")


def _parse_integer(text: str) -> int:
    if not INTEGER_PATTERN.match(text):
        raise ValueError("expecting a decimal integer")
    return int(text)


def _parse_double(text: str) -> float:
    if not DOUBLE_PATTERN.match(text):
        raise ValueError("expecting a decimal number")
    return float(text)
