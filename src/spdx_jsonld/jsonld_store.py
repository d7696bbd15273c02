"""Read and write SPDX 3 JSON-LD text streams through a model store."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional, TextIO, Union

from spdx_jsonld.errors import InvalidData
from spdx_jsonld.parser.jsonld_deserializer import JsonLDDeserializer
from spdx_jsonld.schema.common import (
    BLANK_NODE_PREFIX,
    CORE_SPDX_DOCUMENT,
    GRAPH_PROP,
    ID_PROP,
    SPDX_ID_PROP,
    TYPE_PROP,
    TypedValue,
)
from spdx_jsonld.serializer.jsonld_serializer import JsonLDSerializer
from spdx_jsonld.store.model_store import ModelStore

logger = logging.getLogger(__name__)


def _graph_of(data) -> list:
    """The @graph of a document; a bare list or a single node is accepted too."""
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        if GRAPH_PROP in data:
            return data[GRAPH_PROP]
        if TYPE_PROP in data:
            return [data]
    raise InvalidData("JSON-LD input has no @graph and is not an SPDX node")


class JsonLDStore:
    """Serializes a model store to, and fills it from, JSON-LD text.

    Args:
        model_store: Store backing the documents.
        pretty: Indent output and write licenses as expression text.
        use_external_listed_elements: Import listed licenses through
            ExternalMaps instead of writing them out.
        spec_version: Spec version of the written documents.
        resource_dir: Directory with the schema resources.
    """

    def __init__(
        self,
        model_store: ModelStore,
        pretty: bool = False,
        use_external_listed_elements: bool = False,
        spec_version: Optional[str] = None,
        resource_dir: Optional[Union[str, Path]] = None,
    ):
        self.model_store = model_store
        self._serializer = JsonLDSerializer(
            model_store,
            spec_version=spec_version,
            pretty=pretty,
            use_external_listed_elements=use_external_listed_elements,
            resource_dir=resource_dir,
        )
        self._deserializer = JsonLDDeserializer(model_store, resource_dir=resource_dir)

    @property
    def pretty(self) -> bool:
        return self._serializer.pretty

    @pretty.setter
    def pretty(self, value: bool):
        self._serializer.pretty = value

    @property
    def use_external_listed_elements(self) -> bool:
        return self._serializer.use_external_listed_elements

    @use_external_listed_elements.setter
    def use_external_listed_elements(self, value: bool):
        self._serializer.use_external_listed_elements = value

    def serialize(self, stream: TextIO, scope: Optional[TypedValue] = None) -> None:
        """Write the store, an SpdxDocument or an element as JSON-LD to stream."""
        document = self._serializer.serialize(scope)
        json.dump(document, stream, indent=2 if self.pretty else None, ensure_ascii=False)

    def deserialize(self, stream: TextIO, overwrite: bool = False) -> Optional[TypedValue]:
        """Read a JSON-LD document from stream into the store.

        Args:
            stream: Text stream holding a document, a bare @graph list, or a
                single node.
            overwrite: If False, fail when an element id of the input already
                exists in the store.

        Returns:
            The SpdxDocument read (the node itself when the input is a single
            node), or None if the graph has no SpdxDocument.

        Raises:
            InvalidData: on malformed JSON, existing ids without overwrite, or
                nodes that can not be converted.
        """
        try:
            data = json.load(stream)
        except json.JSONDecodeError as e:
            raise InvalidData(f"Invalid JSON: {e}") from e

        graph = _graph_of(data)
        if not isinstance(graph, list):
            raise InvalidData("@graph must be a list")
        if not overwrite:
            existing = sorted(
                node_id for node_id in self._graph_ids(graph)
                if self.model_store.exists(node_id)
            )
            if existing:
                logger.error(f"Ids already exist in the model store: {existing}")
                raise InvalidData(f"Ids already exist in the model store and overwrite is false: "
                                  f"{', '.join(existing)}")

        if isinstance(data, dict) and GRAPH_PROP not in data:
            return self._deserializer.deserialize_element(data)
        self._deserializer.deserialize_graph(graph)
        return self._find_spdx_document(graph)

    @staticmethod
    def _graph_ids(graph: list) -> set[str]:
        ids = set()
        for node in graph:
            if not isinstance(node, dict):
                continue
            for id_field in (SPDX_ID_PROP, ID_PROP):
                node_id = node.get(id_field)
                if isinstance(node_id, str) and not node_id.startswith(BLANK_NODE_PREFIX):
                    ids.add(node_id)
        return ids

    def _find_spdx_document(self, graph: list) -> Optional[TypedValue]:
        document_type = self._serializer.get_schema().model_type_to_json_type(CORE_SPDX_DOCUMENT)
        for node in graph:
            if isinstance(node, dict) and node.get(TYPE_PROP) == document_type:
                node_id = node.get(SPDX_ID_PROP)
                if isinstance(node_id, str) and not node_id.startswith(BLANK_NODE_PREFIX):
                    return self.model_store.get_typed_value(node_id)
        return None
