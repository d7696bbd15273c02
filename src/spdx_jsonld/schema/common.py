"""Shared types for SPDX 3 stored objects and their JSON-LD form."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Union

# JSON-LD structural field names
CONTEXT_PROP = "@context"
GRAPH_PROP = "@graph"
ID_PROP = "@id"
SPDX_ID_PROP = "spdxId"
TYPE_PROP = "type"
CREATION_INFO_PROP = "creationInfo"
SPEC_VERSION_PROP = "specVersion"
IMPORT_PROP = "import"

NON_PROPERTY_FIELD_NAMES = frozenset({ID_PROP, SPDX_ID_PROP, TYPE_PROP})

BLANK_NODE_PREFIX = "_:"
SPDX_NAMESPACE_PREFIX = "https://spdx.org/rdf/"

# Model types (dotted Profile.ClassName form)
CORE_ELEMENT = "Core.Element"
CORE_CREATION_INFO = "Core.CreationInfo"
CORE_SPDX_DOCUMENT = "Core.SpdxDocument"
CORE_EXTERNAL_MAP = "Core.ExternalMap"
SIMPLE_LICENSING_ANY_LICENSE_INFO = "SimpleLicensing.AnyLicenseInfo"


class PropertyKind(Enum):
    """How a property's JSON value is to be interpreted."""
    REFERENCE = "@id"
    ENUM = "@vocab"
    STRING = "string"
    INTEGER = "integer"
    DOUBLE = "double"
    BOOLEAN = "boolean"
    OBJECT = "object"     # range is a class URI
    LITERAL = "literal"   # a datatype we do not know how to parse


class IdType(Enum):
    ANONYMOUS = "Anonymous"
    SPDX_ID = "SpdxId"
    LISTED_LICENSE = "ListedLicense"


@dataclass(frozen=True)
class PropertyDescriptor:
    """A property key: local name plus the namespace it is defined in."""
    name: str
    name_space: str

    def __str__(self):
        return self.name_space + self.name


@dataclass(frozen=True)
class TypedValue:
    """Reference to a stored object: identifier, model type and spec version."""
    object_uri: str
    type: str
    spec_version: str

    @property
    def profile(self) -> str:
        return self.type.split(".", 1)[0]


@dataclass(frozen=True)
class IndividualUriValue:
    """An enumeration member, named individual or external element URI."""
    individual_uri: str

    def __repr__(self):
        return f"IndividualUriValue({self.individual_uri!r})"


# Everything a model store may hold as a property value
StoredValue = Union[str, bool, int, float, TypedValue, IndividualUriValue]

# A parsed JSON value (dict, list, str, int, float, bool or None)
JsonValue = Any


def profile_namespace(profile: str, spec_version: str) -> str:
    """Namespace URI for properties of a profile, e.g. ``.../3.0.1/terms/Core/``."""
    return f"{SPDX_NAMESPACE_PREFIX}{spec_version}/terms/{profile}/"


def core_property(name: str, spec_version: str) -> PropertyDescriptor:
    return PropertyDescriptor(name, profile_namespace("Core", spec_version))
