"""spdx-jsonld: schema-driven SPDX 3 JSON-LD serialization for model stores.

Converts between objects held in a property-graph model store and the
canonical SPDX 3 JSON-LD wire format.
"""
__version__ = "0.1.0"

from spdx_jsonld.errors import (
    InvalidData,
    SchemaUnavailable,
    SchemaValidationError,
    SpdxJsonLDError,
    UnsupportedOperand,
)
from spdx_jsonld.schema.common import (
    IdType,
    IndividualUriValue,
    PropertyDescriptor,
    PropertyKind,
    TypedValue,
)
from spdx_jsonld.schema.jsonld_schema import ClassDescriptor, JsonLDSchema, load_schema

from spdx_jsonld.store.model_store import ModelStore
from spdx_jsonld.store.in_memory import InMemoryModelStore

from spdx_jsonld.serializer.node_comparator import compare_nodes, sort_nodes
from spdx_jsonld.serializer.license_text import format_license
from spdx_jsonld.serializer.jsonld_serializer import JsonLDSerializer
from spdx_jsonld.parser.jsonld_deserializer import BlankNodeIdMap, JsonLDDeserializer

from spdx_jsonld.jsonld_store import JsonLDStore

__all__ = [
    # Errors
    "SpdxJsonLDError", "SchemaUnavailable", "InvalidData",
    "SchemaValidationError", "UnsupportedOperand",
    # Schema
    "IdType", "IndividualUriValue", "PropertyDescriptor", "PropertyKind", "TypedValue",
    "ClassDescriptor", "JsonLDSchema", "load_schema",
    # Stores
    "ModelStore", "InMemoryModelStore",
    # Serializer
    "compare_nodes", "sort_nodes", "format_license", "JsonLDSerializer",
    # Deserializer
    "BlankNodeIdMap", "JsonLDDeserializer",
    # Streams
    "JsonLDStore",
]
