"""Resolve SPDX 3 JSON schema, JSON-LD context and RDF model resources.

A JsonLDSchema is built once per spec version from three resources:

- the JSON schema (``schema-v<ver>.json``): class hierarchy, concrete vs.
  abstract classes and the fields each class declares, plus validation;
- the JSON-LD context (``spdx-context-v<ver>.jsonld``): wire names of classes
  and properties, property value types and enumeration vocabularies;
- the RDF model (``spdx-model-v<ver>.jsonld``, optional): named individuals
  and enumeration members, parsed with rdflib.

Instances are immutable after construction and can be shared between threads.
"""
from __future__ import annotations

import json
import keyword
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Union

from jsonschema import Draft202012Validator
from jsonschema.exceptions import SchemaError
from rdflib import OWL, RDF, Graph, URIRef

from spdx_jsonld import config
from spdx_jsonld.errors import SchemaUnavailable, SchemaValidationError
from spdx_jsonld.schema.common import (
    CORE_ELEMENT,
    NON_PROPERTY_FIELD_NAMES,
    SIMPLE_LICENSING_ANY_LICENSE_INFO,
    SPDX_NAMESPACE_PREFIX,
    PropertyDescriptor,
    PropertyKind,
)

logger = logging.getLogger(__name__)

XSD = "http://www.w3.org/2001/XMLSchema#"

STRING_TYPES = frozenset(XSD + t for t in (
    "string", "anyURI", "dateTimeStamp", "dateTime", "date",
    "normalizedString", "token", "hexBinary",
))
INTEGER_TYPES = frozenset(XSD + t for t in (
    "integer", "int", "long", "short", "positiveInteger",
    "nonNegativeInteger", "negativeInteger", "nonPositiveInteger",
))
DOUBLE_TYPES = frozenset(XSD + t for t in ("decimal", "double", "float"))
BOOLEAN_TYPES = frozenset({XSD + "boolean"})

# Canonical names that can not be used as Python identifiers or that clash
# with the domain classes built on top of the store.
RESERVED_NAMES: dict[str, str] = {
    "Package": "SpdxPackage",
    "File": "SpdxFile",
    **{kw: kw + "_" for kw in keyword.kwlist},
}
REVERSE_RESERVED_NAMES: dict[str, str] = {v: k for k, v in RESERVED_NAMES.items()}

_PROPS_SUFFIX = "_props"
_PROPS_REF = re.compile(r"^#/\$defs/(?P<name>.+)_props$")


def escape_name(name: str) -> str:
    """Canonical class/property name -> name used in model types and descriptors."""
    return RESERVED_NAMES.get(name, name)


def unescape_name(name: str) -> str:
    """Inverse of escape_name."""
    return REVERSE_RESERVED_NAMES.get(name, name)


@dataclass(frozen=True)
class ClassDescriptor:
    name: str                    # wire type, e.g. "software_Package"
    model_type: str              # dotted type, e.g. "Software.SpdxPackage"
    type_uri: Optional[str]
    superclass: Optional[str]    # wire type of the direct superclass
    abstract: bool
    properties: tuple[str, ...]  # fields declared on this class only
    required: tuple[str, ...]


def _load_json(path: Path) -> Any:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, ValueError) as e:
        raise SchemaUnavailable(f"Unable to load {path}: {e}") from e


def _load_model(path: Path) -> Graph:
    g = Graph()
    try:
        with open(path, "r", encoding="utf-8") as f:
            g.parse(data=f.read(), format="json-ld")
    except (OSError, ValueError) as e:
        raise SchemaUnavailable(f"Unable to load RDF model {path}: {e}") from e
    return g


def _split_uri(uri: str) -> tuple[str, str]:
    """Split a URI into (namespace, local name) at the last '#' or '/'."""
    cut = max(uri.rfind("#"), uri.rfind("/"))
    return uri[:cut + 1], uri[cut + 1:]


def _profile_of(namespace: str) -> str:
    """'https://spdx.org/rdf/3.0.1/terms/Software/' -> 'Software'"""
    return namespace.rstrip("/").rsplit("/", 1)[-1]


class JsonLDSchema:
    """Queryable class, property and vocabulary metadata for one spec version."""

    def __init__(
        self,
        schema_file: str,
        context_file: str,
        model_file: Optional[str] = None,
        resource_dir: Optional[Union[str, Path]] = None,
    ):
        base = Path(resource_dir) if resource_dir is not None else config.RESOURCE_DIR
        self._schema = _load_json(base / schema_file)
        context_doc = _load_json(base / context_file)
        if not isinstance(context_doc, dict) or not isinstance(context_doc.get("@context"), dict):
            raise SchemaUnavailable(f"{base / context_file} has no @context object")
        if not isinstance(self._schema, dict) or not isinstance(self._schema.get("$defs"), dict):
            raise SchemaUnavailable(f"{base / schema_file} has no $defs")
        try:
            Draft202012Validator.check_schema(self._schema)
        except SchemaError as e:
            raise SchemaUnavailable(f"Invalid JSON schema {base / schema_file}: {e.message}") from e
        self._validator = Draft202012Validator(self._schema)

        self._context: dict[str, Any] = context_doc["@context"]
        self._parse_context()
        self._parse_classes()

        self._individuals: frozenset[str] = frozenset()
        if model_file is not None:
            self._parse_model(_load_model(base / model_file))

    # ── resource parsing ──

    def _parse_context(self):
        self._descriptors: dict[str, PropertyDescriptor] = {}
        self._field_names: dict[PropertyDescriptor, str] = {}
        self._property_types: dict[str, Optional[str]] = {}
        self._vocabs: dict[str, str] = {}
        self._profiles: dict[str, str] = {}  # json prefix -> profile

        for key, value in self._context.items():
            if key in NON_PROPERTY_FIELD_NAMES or not isinstance(value, dict):
                continue
            uri = value.get("@id")
            if not isinstance(uri, str) or uri.startswith("@"):
                continue
            namespace, local = _split_uri(uri)
            descriptor = PropertyDescriptor(escape_name(local), namespace)
            self._descriptors[key] = descriptor
            self._field_names[descriptor] = key
            self._property_types[key] = value.get("@type")
            vocab = (value.get("@context") or {}).get("@vocab")
            if vocab:
                self._vocabs[key] = vocab

        self._enum_vocabularies = frozenset(
            vocab for key, vocab in self._vocabs.items()
            if self._property_types.get(key) == "@vocab"
        )

    def _parse_classes(self):
        defs = self._schema["$defs"]
        self._classes: dict[str, ClassDescriptor] = {}
        for key, definition in defs.items():
            if not key.endswith(_PROPS_SUFFIX) or not isinstance(definition, dict):
                continue
            name = key[:-len(_PROPS_SUFFIX)]
            superclass = None
            for part in definition.get("allOf", []):
                m = _PROPS_REF.match(part.get("$ref", "")) if isinstance(part, dict) else None
                if m:
                    superclass = m.group("name")
                    break
            type_uri = self._context.get(name)
            if not isinstance(type_uri, str):
                type_uri = None
            self._classes[name] = ClassDescriptor(
                name=name,
                model_type=self._to_model_type(name, type_uri),
                type_uri=type_uri,
                superclass=superclass,
                abstract=name not in defs,
                properties=tuple(definition.get("properties", {}).keys()),
                required=tuple(definition.get("required", [])),
            )
        self._model_types = {c.name: c.model_type for c in self._classes.values()}
        self._json_types = {c.model_type: c.name for c in self._classes.values()}

    def _to_model_type(self, json_type: str, type_uri: Optional[str]) -> str:
        if type_uri and type_uri.startswith(SPDX_NAMESPACE_PREFIX):
            namespace, local = _split_uri(type_uri)
            profile = _profile_of(namespace)
        elif "_" in json_type:
            prefix, local = json_type.split("_", 1)
            profile = self._profiles.get(prefix, prefix[:1].upper() + prefix[1:])
        else:
            profile, local = "Core", json_type
        self._profiles.setdefault(profile.lower(), profile)
        return f"{profile}.{escape_name(local)}"

    def _parse_model(self, g: Graph):
        individuals = set()
        for subject in g.subjects(RDF.type, OWL.NamedIndividual):
            if isinstance(subject, URIRef):
                individuals.add(str(subject))
        self._individuals = frozenset(individuals)
        logger.debug(f"Loaded {len(individuals)} named individuals from the RDF model")

    # ── classes ──

    def get_all_classes(self) -> list[ClassDescriptor]:
        return sorted(self._classes.values(), key=lambda c: c.name)

    def get_class_schema(self, name: str) -> Optional[ClassDescriptor]:
        """Look up a class by wire type ("software_Package") or model type."""
        cls = self._classes.get(name)
        if cls is None and name in self._json_types:
            cls = self._classes.get(self._json_types[name])
        return cls

    def get_type(self, cls: ClassDescriptor) -> str:
        return cls.name

    def get_type_uri(self, cls: ClassDescriptor) -> Optional[str]:
        return cls.type_uri

    def is_subclass_of(self, class_name: str, ancestor: str) -> bool:
        """True if class_name is ancestor or inherits from it, transitively.

        Both names may be wire types or model types.
        """
        cls = self.get_class_schema(class_name)
        target = self.get_class_schema(ancestor)
        if cls is None or target is None:
            return False
        seen = set()
        while cls is not None and cls.name not in seen:
            if cls.name == target.name:
                return True
            seen.add(cls.name)
            cls = self._classes.get(cls.superclass) if cls.superclass else None
        return False

    def has_property(self, field_name: str, cls: Union[str, ClassDescriptor]) -> bool:
        """True if the class or one of its superclasses declares field_name."""
        current = self.get_class_schema(cls) if isinstance(cls, str) else cls
        while current is not None:
            if field_name in current.properties:
                return True
            current = self._classes.get(current.superclass) if current.superclass else None
        return False

    def get_element_types(self) -> list[str]:
        """Model types of every concrete Element subclass."""
        return self._concrete_subclasses(CORE_ELEMENT)

    def get_any_license_info_types(self) -> list[str]:
        """Model types usable wherever a license expression is expected."""
        return self._concrete_subclasses(SIMPLE_LICENSING_ANY_LICENSE_INFO)

    def _concrete_subclasses(self, ancestor: str) -> list[str]:
        return sorted(
            c.model_type for c in self._classes.values()
            if not c.abstract and self.is_subclass_of(c.name, ancestor)
        )

    def json_type_to_model_type(self, json_type: str) -> Optional[str]:
        """'software_Package' -> 'Software.SpdxPackage'; None if unknown."""
        return self._model_types.get(json_type)

    def model_type_to_json_type(self, model_type: str) -> str:
        """'Software.SpdxPackage' -> 'software_Package'."""
        if model_type in self._json_types:
            return self._json_types[model_type]
        parts = model_type.split(".")
        if len(parts) == 1:
            return model_type
        name = unescape_name(parts[1])
        if parts[0] == "Core":
            return name
        return f"{parts[0].lower()}_{name}"

    # ── properties ──

    def get_property_descriptor(self, field_name: str) -> Optional[PropertyDescriptor]:
        descriptor = self._descriptors.get(field_name)
        if descriptor is None and "://" in field_name:
            # extension property written as an absolute URI
            namespace, local = _split_uri(field_name)
            if local:
                descriptor = PropertyDescriptor(escape_name(local), namespace)
        return descriptor

    def get_json_field_name(self, prop: PropertyDescriptor) -> str:
        """Wire field name for a property descriptor."""
        if prop in self._field_names:
            return self._field_names[prop]
        name = unescape_name(prop.name)
        if prop.name_space.startswith(SPDX_NAMESPACE_PREFIX):
            profile = _profile_of(prop.name_space)
            if profile == "Core":
                return name
            return f"{profile.lower()}_{name}"
        return prop.name_space + name

    def get_property_type(self, field_name: str) -> Optional[str]:
        """Raw value type from the context: '@id', '@vocab' or a datatype URI."""
        return self._property_types.get(field_name)

    def get_property_kind(self, field_name: str) -> Optional[PropertyKind]:
        property_type = self.get_property_type(field_name)
        if property_type is None:
            return None
        if property_type == "@id":
            return PropertyKind.REFERENCE
        if property_type == "@vocab":
            return PropertyKind.ENUM
        if property_type in STRING_TYPES:
            return PropertyKind.STRING
        if property_type in INTEGER_TYPES:
            return PropertyKind.INTEGER
        if property_type in DOUBLE_TYPES:
            return PropertyKind.DOUBLE
        if property_type in BOOLEAN_TYPES:
            return PropertyKind.BOOLEAN
        if any(c.type_uri == property_type for c in self._classes.values()):
            return PropertyKind.OBJECT
        return PropertyKind.LITERAL

    def get_vocab(self, field_name: str) -> Optional[str]:
        return self._vocabs.get(field_name)

    def is_enum(self, field_name: str) -> bool:
        return self.get_property_kind(field_name) == PropertyKind.ENUM

    def is_spdx_object(self, field_name: str) -> bool:
        return self.get_property_kind(field_name) in (PropertyKind.REFERENCE, PropertyKind.OBJECT)

    def is_enum_value(self, uri: str) -> bool:
        """True if uri is a member of one of the enumeration vocabularies."""
        namespace, local = _split_uri(uri)
        return bool(local) and namespace in self._enum_vocabularies

    def is_individual(self, field_name: str, uri: str) -> bool:
        """True if uri is a named individual usable as a value of field_name."""
        return (self.is_spdx_object(field_name)
                and uri in self._individuals
                and not self.is_enum_value(uri))

    # ── validation ──

    def validate(self, document: Any) -> None:
        """Raise SchemaValidationError listing every violation in document."""
        errors = sorted(self._validator.iter_errors(document), key=lambda e: list(e.path))
        if not errors:
            return
        messages = []
        for error in errors:
            path = ".".join(str(p) for p in error.path) if error.path else "root"
            messages.append(f"{path}: {error.message}")
        raise SchemaValidationError(
            f"Document does not conform to the schema ({len(messages)} errors): {messages[0]}",
            messages,
        )

    def is_valid(self, document: Any) -> bool:
        return self._validator.is_valid(document)


def load_schema(
    spec_version: str,
    resource_dir: Optional[Union[str, Path]] = None,
    fallback: bool = True,
) -> JsonLDSchema:
    """Load the schema resources for a spec version.

    Args:
        spec_version: SemVer of the SPDX spec, e.g. "3.0.1".
        resource_dir: Directory holding the resources (default: config.RESOURCE_DIR).
        fallback: If the version's resources are unavailable, load the latest
            known version instead.

    Returns:
        The resolved JsonLDSchema.

    Raises:
        SchemaUnavailable: if neither the version nor the fallback can be loaded.
    """
    try:
        return JsonLDSchema(
            config.schema_file_name(spec_version),
            config.context_file_name(spec_version),
            config.model_file_name(spec_version),
            resource_dir=resource_dir,
        )
    except SchemaUnavailable as e:
        if not fallback or spec_version == config.LATEST_SPEC_VERSION:
            raise
        logger.warning(
            f"Unable to get a schema for spec version {spec_version}. "
            f"Trying latest spec version {config.LATEST_SPEC_VERSION}."
        )
        try:
            return load_schema(config.LATEST_SPEC_VERSION, resource_dir, fallback=False)
        except SchemaUnavailable:
            logger.error(f"Unable to get JSON schema for latest version {config.LATEST_SPEC_VERSION}")
            raise e
