"""Model types and the schema resolver for SPDX 3 JSON-LD."""
from spdx_jsonld.schema.common import (
    IdType,
    IndividualUriValue,
    PropertyDescriptor,
    PropertyKind,
    StoredValue,
    TypedValue,
)
from spdx_jsonld.schema.jsonld_schema import ClassDescriptor, JsonLDSchema, load_schema
