"""JSON-LD serializer, canonical node ordering and license expression text."""
from spdx_jsonld.serializer.jsonld_serializer import JsonLDSerializer
from spdx_jsonld.serializer.license_text import format_license
from spdx_jsonld.serializer.node_comparator import NODE_SORT_KEY, compare_nodes, sort_nodes
