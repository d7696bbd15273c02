"""Shared fixtures: schema, stores and sample SPDX 3 JSON-LD documents."""
import copy

import pytest

from spdx_jsonld.schema.jsonld_schema import load_schema
from spdx_jsonld.store.in_memory import InMemoryModelStore

SPEC_VERSION = "3.0.1"
CONTEXT_URI = "https://spdx.org/rdf/3.0.1/spdx-context.jsonld"

CREATED = "2024-03-06T00:00:00Z"


SAMPLE_DOCUMENT = {
    "@context": CONTEXT_URI,
    "@graph": [
        {
            "type": "CreationInfo",
            "@id": "_:creationinfo",
            "specVersion": SPEC_VERSION,
            "created": CREATED,
            "createdBy": ["https://example.com/person/alice"],
        },
        {
            "type": "Person",
            "spdxId": "https://example.com/person/alice",
            "name": "Alice",
            "creationInfo": "_:creationinfo",
        },
        {
            "type": "SpdxDocument",
            "spdxId": "https://example.com/doc",
            "creationInfo": "_:creationinfo",
            "name": "widget-sbom",
            "dataLicense": "https://spdx.org/licenses/CC0-1.0",
            "profileConformance": ["core", "software"],
            "rootElement": ["https://example.com/pkg/widget"],
            "element": [
                "https://example.com/person/alice",
                "https://example.com/pkg/widget",
                "https://example.com/file/widget.py",
                "https://example.com/rel/contains",
            ],
        },
        {
            "type": "software_Package",
            "spdxId": "https://example.com/pkg/widget",
            "creationInfo": "_:creationinfo",
            "name": "widget",
            "software_packageVersion": "1.0.0",
            "software_primaryPurpose": "library",
            "verifiedUsing": [
                {"type": "Hash", "algorithm": "sha256", "hashValue": "a1b2c3"},
            ],
        },
        {
            "type": "software_File",
            "spdxId": "https://example.com/file/widget.py",
            "creationInfo": "_:creationinfo",
            "name": "widget.py",
        },
        {
            "type": "Relationship",
            "spdxId": "https://example.com/rel/contains",
            "creationInfo": "_:creationinfo",
            "from": "https://example.com/pkg/widget",
            "to": ["https://example.com/file/widget.py"],
            "relationshipType": "contains",
        },
    ],
}

# Two relationships point at the same listed license
LICENSED_DOCUMENT = {
    "@context": CONTEXT_URI,
    "@graph": [
        {
            "type": "CreationInfo",
            "@id": "_:ci",
            "specVersion": SPEC_VERSION,
            "created": CREATED,
            "createdBy": ["https://example.com/org/acme"],
        },
        {
            "type": "Organization",
            "spdxId": "https://example.com/org/acme",
            "name": "Acme",
            "creationInfo": "_:ci",
        },
        {
            "type": "SpdxDocument",
            "spdxId": "https://example.com/licensed-doc",
            "creationInfo": "_:ci",
            "rootElement": ["https://example.com/pkg/a"],
            "element": [
                "https://example.com/pkg/a",
                "https://example.com/pkg/b",
                "https://spdx.org/licenses/MIT",
                "https://example.com/rel/a-declared",
                "https://example.com/rel/b-concluded",
            ],
        },
        {
            "type": "software_Package",
            "spdxId": "https://example.com/pkg/a",
            "creationInfo": "_:ci",
            "name": "a",
        },
        {
            "type": "software_Package",
            "spdxId": "https://example.com/pkg/b",
            "creationInfo": "_:ci",
            "name": "b",
        },
        {
            "type": "expandedlicensing_ListedLicense",
            "spdxId": "https://spdx.org/licenses/MIT",
            "creationInfo": "_:ci",
            "name": "MIT License",
            "expandedlicensing_licenseText": "Permission is hereby granted, free of charge...",
            "expandedlicensing_isOsiApproved": True,
        },
        {
            "type": "Relationship",
            "spdxId": "https://example.com/rel/a-declared",
            "creationInfo": "_:ci",
            "from": "https://example.com/pkg/a",
            "to": ["https://spdx.org/licenses/MIT"],
            "relationshipType": "hasDeclaredLicense",
        },
        {
            "type": "Relationship",
            "spdxId": "https://example.com/rel/b-concluded",
            "creationInfo": "_:ci",
            "from": "https://example.com/pkg/b",
            "to": ["https://spdx.org/licenses/MIT"],
            "relationshipType": "hasConcludedLicense",
        },
    ],
}


@pytest.fixture(scope="session")
def schema():
    return load_schema(SPEC_VERSION)


@pytest.fixture
def store():
    return InMemoryModelStore()


@pytest.fixture
def sample_document():
    return copy.deepcopy(SAMPLE_DOCUMENT)


@pytest.fixture
def licensed_document():
    return copy.deepcopy(LICENSED_DOCUMENT)
