"""JSON-LD deserializer."""
from spdx_jsonld.parser.jsonld_deserializer import BlankNodeIdMap, JsonLDDeserializer
