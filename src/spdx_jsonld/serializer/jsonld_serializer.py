"""Serialize objects in a model store to SPDX 3 JSON-LD.

``serialize()`` with no argument writes every element in the store;
``serialize(document)`` writes an SpdxDocument with its root elements and
elements; ``serialize(element)`` writes a single element. Every other
element is referenced by its identifier, never inlined, so each element
appears in the @graph exactly once.
"""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional, Union

from spdx_jsonld import config
from spdx_jsonld.errors import InvalidData, UnsupportedOperand
from spdx_jsonld.schema.common import (
    CONTEXT_PROP,
    CORE_CREATION_INFO,
    CORE_ELEMENT,
    CORE_EXTERNAL_MAP,
    CORE_SPDX_DOCUMENT,
    CREATION_INFO_PROP,
    GRAPH_PROP,
    ID_PROP,
    IMPORT_PROP,
    SPDX_ID_PROP,
    TYPE_PROP,
    IdType,
    IndividualUriValue,
    JsonValue,
    StoredValue,
    TypedValue,
)
from spdx_jsonld.schema.jsonld_schema import JsonLDSchema, load_schema
from spdx_jsonld.serializer.license_text import LicenseFormatter, format_license
from spdx_jsonld.serializer.node_comparator import NODE_SORT_KEY, sort_nodes
from spdx_jsonld.store.model_store import ModelStore

logger = logging.getLogger(__name__)

CREATION_INFO_ID_PREFIX = "_:creationInfo_"

# SpdxDocument fields left out of the document node: elements are implied by
# @graph membership and namespace maps are not yet supported by the context
DOCUMENT_SKIPPED_FIELDS = frozenset({"element", "namespaceMap"})


@dataclass
class _SerializationContext:
    """State for one serialize call."""
    id_to_serialized_id: dict[str, str] = field(default_factory=dict)
    external_ids: list[str] = field(default_factory=list)
    inlining: set[str] = field(default_factory=set)
    collect_externals: bool = False

    def serialized_id(self, object_uri: str) -> str:
        return self.id_to_serialized_id.get(object_uri, object_uri)

    def add_external(self, object_uri: str):
        if self.collect_externals and object_uri not in self.external_ids:
            self.external_ids.append(object_uri)


class JsonLDSerializer:
    """Serializer for a model store containing SPDX 3 objects.

    Args:
        model_store: Store holding the objects to serialize.
        spec_version: SemVer of the SPDX spec (default: config.DEFAULT_SPEC_VERSION).
        pretty: If True, license references that would be inlined are written
            as license expression text.
        use_external_listed_elements: If True, listed licenses and exceptions
            are not serialized; SpdxDocuments import them through ExternalMaps.
        license_formatter: Renders a license object as expression text.
        resource_dir: Directory with the schema resources.
    """

    def __init__(
        self,
        model_store: ModelStore,
        spec_version: Optional[str] = None,
        pretty: bool = False,
        use_external_listed_elements: bool = False,
        license_formatter: Optional[LicenseFormatter] = None,
        resource_dir: Optional[Union[str, Path]] = None,
    ):
        if model_store is None:
            raise ValueError("Model store is a required field")
        self._store = model_store
        self.spec_version = spec_version or config.DEFAULT_SPEC_VERSION
        self.pretty = pretty
        self.use_external_listed_elements = use_external_listed_elements
        self._license_formatter = license_formatter or format_license
        self._schema = load_schema(self.spec_version, resource_dir)
        self._element_types = frozenset(self._schema.get_element_types())
        self._license_types = frozenset(self._schema.get_any_license_info_types())

    def get_schema(self) -> JsonLDSchema:
        return self._schema

    def serialize(self, scope: Optional[TypedValue] = None) -> dict:
        """Serialize the whole store, an SpdxDocument or a single element.

        Args:
            scope: None for every element in the store, an SpdxDocument, or an
                element.

        Returns:
            The JSON-LD document as a dict with @context and @graph.

        Raises:
            InvalidData: if scope is neither an SpdxDocument nor an element, or
                the stored objects can not be serialized.
            UnsupportedOperand: if a stored value has an unsupported type.
        """
        if scope is None:
            return self._serialize_all_objects()
        if self._schema.is_subclass_of(scope.type, CORE_SPDX_DOCUMENT):
            return self._serialize_spdx_document(scope)
        if scope.type in self._element_types:
            return self._serialize_element(scope)
        logger.error(f"Unsupported type to serialize: {scope.type}")
        raise InvalidData(f"Unsupported type to serialize: {scope.type}")

    # ── scopes ──

    def _serialize_all_objects(self) -> dict:
        ctx = _SerializationContext()
        with self._store.critical_section(read_lock=True):
            elements = [tv for tv in self._store.get_all_items() if tv.type in self._element_types]
            for element in elements:
                self._assign_serialized_id(element, ctx)
            graph = self._hoist_creation_infos(elements, ctx)
            graph.extend(self._elements_to_json_nodes(elements, ctx))
        return self._document(graph)

    def _serialize_spdx_document(self, spdx_document: TypedValue) -> dict:
        ctx = _SerializationContext(collect_externals=self.use_external_listed_elements)
        doc_uri = spdx_document.object_uri
        with self._store.critical_section(read_lock=True):
            members: dict[str, TypedValue] = {}
            for field_name in ("rootElement", "element"):
                prop = self._schema.get_property_descriptor(field_name)
                for value in self._store.list_values(doc_uri, prop):
                    if (isinstance(value, TypedValue) and value.object_uri != doc_uri
                            and value.type in self._element_types):
                        members.setdefault(value.object_uri, value)
            elements = list(members.values())
            for tv in [spdx_document] + elements:
                self._assign_serialized_id(tv, ctx)
            graph = self._hoist_creation_infos([spdx_document] + elements, ctx)
            doc_node = self._model_object_to_json_node(spdx_document, ctx, DOCUMENT_SKIPPED_FIELDS)
            graph.append(doc_node)
            graph.extend(self._elements_to_json_nodes(elements, ctx))
            self._add_external_license_references(doc_node, ctx.external_ids)
        return self._document(graph)

    def _serialize_element(self, element: TypedValue) -> dict:
        ctx = _SerializationContext()
        with self._store.critical_section(read_lock=False):
            self._assign_serialized_id(element, ctx)
            graph = self._elements_to_json_nodes([element], ctx)
        return self._document(graph)

    def _document(self, graph: list) -> dict:
        return {
            CONTEXT_PROP: config.context_uri(self.spec_version),
            GRAPH_PROP: sort_nodes(graph),
        }

    # ── identifiers, creation info, external elements ──

    def _assign_serialized_id(self, tv: TypedValue, ctx: _SerializationContext):
        if self._store.is_anon(tv.object_uri):
            serialized_id = (f"{config.GENERATED_SERIALIZED_ID_PREFIX}{uuid.uuid4()}"
                             f"#{self._store.next_id(IdType.SPDX_ID)}")
            ctx.id_to_serialized_id[tv.object_uri] = serialized_id
            logger.warning(f"SPDX element has a non-URI ID: {tv.object_uri}.  Converting to URI {serialized_id}.")

    def _hoist_creation_infos(self, elements: Iterable[TypedValue],
                              ctx: _SerializationContext) -> list[dict]:
        """Serialize each distinct creation info once under a blank node id.

        Blank ids are numbered in canonical order of the creation info nodes
        so the numbering does not depend on store iteration order. Creation
        infos with equal content are ordered by the ids of the elements
        referencing them.
        """
        prop = self._schema.get_property_descriptor(CREATION_INFO_PROP)
        creation_infos: dict[str, TypedValue] = {}
        referrers: dict[str, list[str]] = {}
        for element in elements:
            value = self._store.get_value(element.object_uri, prop)
            if isinstance(value, TypedValue) and value.type == CORE_CREATION_INFO:
                creation_infos.setdefault(value.object_uri, value)
                referrers.setdefault(value.object_uri, []).append(
                    ctx.serialized_id(element.object_uri))
        nodes = [(self._model_object_to_json_node(ci, ctx), ci) for ci in creation_infos.values()]
        # store ids are left out of the ordering
        ordered = sorted(nodes, key=lambda pair: (
            NODE_SORT_KEY({k: v for k, v in pair[0].items() if k != ID_PROP}),
            sorted(referrers[pair[1].object_uri]),
        ))
        result = []
        for index, (node, ci) in enumerate(ordered):
            serialized_id = f"{CREATION_INFO_ID_PREFIX}{index}"
            ctx.id_to_serialized_id[ci.object_uri] = serialized_id
            node[ID_PROP] = serialized_id
            result.append(node)
        return result

    def _is_external_listed(self, object_uri: str) -> bool:
        return (self.use_external_listed_elements
                and object_uri.startswith(config.SPDX_LISTED_LICENSE_NAMESPACE))

    def _elements_to_json_nodes(self, elements: Iterable[TypedValue],
                                ctx: _SerializationContext) -> list[dict]:
        nodes = []
        for element in elements:
            if self._is_external_listed(element.object_uri):
                ctx.add_external(element.object_uri)
            else:
                nodes.append(self._model_object_to_json_node(element, ctx))
        return nodes

    def _add_external_license_references(self, doc_node: dict, license_uris: list[str]):
        """Add an ExternalMap import for each listed license not already imported."""
        if not license_uris:
            return
        imports = doc_node.get(IMPORT_PROP)
        if not isinstance(imports, list):
            imports = []
            doc_node[IMPORT_PROP] = imports
        known = {m.get("externalSpdxId") for m in imports if isinstance(m, dict)}
        for license_uri in license_uris:
            if license_uri in known:
                continue
            known.add(license_uri)
            imports.append({
                TYPE_PROP: self._schema.model_type_to_json_type(CORE_EXTERNAL_MAP),
                "externalSpdxId": license_uri,
                "locationHint": license_uri.replace("http://", "https://") + ".jsonld",
            })

    # ── objects and values ──

    def _model_object_to_json_node(self, tv: TypedValue, ctx: _SerializationContext,
                                   skipped_fields: frozenset = frozenset()) -> dict:
        id_field = SPDX_ID_PROP if self._schema.is_subclass_of(tv.type, CORE_ELEMENT) else ID_PROP
        node = {
            id_field: ctx.serialized_id(tv.object_uri),
            TYPE_PROP: self._schema.model_type_to_json_type(tv.type),
        }
        self._add_property_values(node, tv, ctx, skipped_fields)
        return node

    def _add_property_values(self, node: dict, tv: TypedValue, ctx: _SerializationContext,
                             skipped_fields: frozenset = frozenset()):
        uri = tv.object_uri
        fields = sorted(
            (self._schema.get_json_field_name(prop), prop)
            for prop in self._store.get_property_descriptors(uri)
        )
        for field_name, prop in fields:
            if field_name in skipped_fields:
                continue
            if self._store.is_collection_property(uri, prop):
                node[field_name] = [self._object_to_json(v, ctx) for v in self._store.list_values(uri, prop)]
            else:
                value = self._store.get_value(uri, prop)
                if value is not None:
                    node[field_name] = self._object_to_json(value, ctx)

    def _object_to_json(self, value: StoredValue, ctx: _SerializationContext) -> JsonValue:
        if isinstance(value, TypedValue):
            return self._typed_value_to_json(value, ctx)
        if isinstance(value, str):
            return value
        if isinstance(value, bool):
            return value
        if isinstance(value, int):
            return value
        if isinstance(value, float):
            # decimals are written as text to avoid precision and locale drift
            return str(value)
        if isinstance(value, IndividualUriValue):
            individual_uri = value.individual_uri
            if self._schema.is_enum_value(individual_uri):
                return individual_uri[individual_uri.rfind("/") + 1:]
            if self._is_external_listed(individual_uri):
                ctx.add_external(individual_uri)
            # named individuals and external element references
            return individual_uri
        raise UnsupportedOperand(f"Unknown class for object to json node: {type(value).__name__}")

    def _typed_value_to_json(self, tv: TypedValue, ctx: _SerializationContext) -> JsonValue:
        if self._is_external_listed(tv.object_uri):
            ctx.add_external(tv.object_uri)
        if tv.type in self._element_types:
            # the element is in the @graph or is external
            return ctx.serialized_id(tv.object_uri)
        if tv.type == CORE_CREATION_INFO and tv.object_uri in ctx.id_to_serialized_id:
            return ctx.id_to_serialized_id[tv.object_uri]
        if self.pretty and tv.type in self._license_types:
            return self._license_formatter(self._store, tv)
        return self._inlined_json_node(tv, ctx)

    def _inlined_json_node(self, tv: TypedValue, ctx: _SerializationContext) -> dict:
        if tv.object_uri in ctx.inlining:
            logger.error(f"Reference cycle while inlining {tv.object_uri}")
            raise InvalidData(f"Reference cycle while inlining {tv.object_uri} of type {tv.type}")
        ctx.inlining.add(tv.object_uri)
        try:
            node = {TYPE_PROP: self._schema.model_type_to_json_type(tv.type)}
            self._add_property_values(node, tv, ctx)
        finally:
            ctx.inlining.discard(tv.object_uri)
        return node
