"""Tests for the JSON-LD schema resolver."""
import pytest

from spdx_jsonld.errors import SchemaUnavailable, SchemaValidationError
from spdx_jsonld.schema.common import PropertyDescriptor, PropertyKind
from spdx_jsonld.schema.jsonld_schema import (
    RESERVED_NAMES,
    REVERSE_RESERVED_NAMES,
    JsonLDSchema,
    escape_name,
    load_schema,
    unescape_name,
)

CORE_NS = "https://spdx.org/rdf/3.0.1/terms/Core/"
SOFTWARE_NS = "https://spdx.org/rdf/3.0.1/terms/Software/"
SECURITY_NS = "https://spdx.org/rdf/3.0.1/terms/Security/"


# ── Name escaping ──────────────────────────────────────────────

class TestNameEscaping:
    """Reserved canonical names map to Python-safe names and back."""

    def test_package_and_file(self):
        assert escape_name("Package") == "SpdxPackage"
        assert escape_name("File") == "SpdxFile"
        assert unescape_name("SpdxPackage") == "Package"

    def test_python_keywords(self):
        assert escape_name("from") == "from_"
        assert escape_name("import") == "import_"
        assert unescape_name("import_") == "import"

    def test_ordinary_names_unchanged(self):
        assert escape_name("name") == "name"
        assert unescape_name("name") == "name"

    def test_tables_are_inverse(self):
        for canonical, escaped in RESERVED_NAMES.items():
            assert REVERSE_RESERVED_NAMES[escaped] == canonical


# ── Classes ────────────────────────────────────────────────────

class TestClasses:
    """Class descriptors, type naming and the class hierarchy."""

    def test_class_by_wire_name(self, schema):
        cls = schema.get_class_schema("software_Package")
        assert cls is not None
        assert cls.model_type == "Software.SpdxPackage"
        assert cls.type_uri == SOFTWARE_NS + "Package"
        assert cls.superclass == "software_SoftwareArtifact"
        assert not cls.abstract

    def test_class_by_model_type(self, schema):
        cls = schema.get_class_schema("Software.SpdxFile")
        assert schema.get_type(cls) == "software_File"
        assert schema.get_type_uri(cls) == SOFTWARE_NS + "File"

    def test_abstract_class(self, schema):
        assert schema.get_class_schema("Element").abstract
        assert schema.get_class_schema("Artifact").abstract

    def test_unknown_class(self, schema):
        assert schema.get_class_schema("NoSuchClass") is None

    def test_all_classes_sorted(self, schema):
        names = [c.name for c in schema.get_all_classes()]
        assert names == sorted(names)
        assert "Relationship" in names
        assert "CreationInfo" in names

    def test_type_conversion(self, schema):
        assert schema.json_type_to_model_type("software_Package") == "Software.SpdxPackage"
        assert schema.json_type_to_model_type("Relationship") == "Core.Relationship"
        assert schema.json_type_to_model_type("expandedlicensing_ListedLicense") == \
            "ExpandedLicensing.ListedLicense"
        assert schema.json_type_to_model_type("NoSuchClass") is None
        assert schema.model_type_to_json_type("Software.SpdxFile") == "software_File"
        assert schema.model_type_to_json_type("Core.CreationInfo") == "CreationInfo"

    def test_subclass_is_transitive(self, schema):
        assert schema.is_subclass_of("software_Sbom", "Core.Element")
        assert schema.is_subclass_of("Software.SpdxPackage", "Core.Artifact")
        assert schema.is_subclass_of("security_CvssV3VulnAssessmentRelationship", "Relationship")

    def test_subclass_is_reflexive(self, schema):
        assert schema.is_subclass_of("Core.SpdxDocument", "Core.SpdxDocument")

    def test_not_subclass(self, schema):
        assert not schema.is_subclass_of("Core.CreationInfo", "Core.Element")
        assert not schema.is_subclass_of("Core.Element", "Software.SpdxPackage")
        assert not schema.is_subclass_of("NoSuchClass", "Core.Element")

    def test_has_property_includes_inherited(self, schema):
        assert schema.has_property("software_packageVersion", "software_Package")
        assert schema.has_property("name", "software_Package")
        assert schema.has_property("creationInfo", "Relationship")
        assert not schema.has_property("from", "software_Package")

    def test_element_types(self, schema):
        element_types = schema.get_element_types()
        assert element_types == sorted(element_types)
        assert "Software.SpdxPackage" in element_types
        assert "Core.Person" in element_types
        assert "Core.SpdxDocument" in element_types
        assert "Core.CreationInfo" not in element_types
        assert "Core.Hash" not in element_types
        assert "Core.Element" not in element_types

    def test_every_profile_has_element_types(self, schema):
        element_types = schema.get_element_types()
        for model_type in ("AI.AIPackage", "Build.Build", "Dataset.DatasetPackage",
                           "Security.CvssV4VulnAssessmentRelationship",
                           "Security.VexAffectedVulnAssessmentRelationship",
                           "Security.SsvcVulnAssessmentRelationship",
                           "SimpleLicensing.SimpleLicensingText"):
            assert model_type in element_types
        assert schema.is_subclass_of("ai_AIPackage", "software_Package")
        assert schema.is_subclass_of("dataset_DatasetPackage", "Software.SpdxPackage")

    def test_non_element_profile_classes(self, schema):
        element_types = schema.get_element_types()
        for json_type in ("ai_EnergyConsumption", "extension_CdxPropertiesExtension",
                          "software_ContentIdentifier"):
            cls = schema.get_class_schema(json_type)
            assert cls is not None
            assert cls.model_type not in element_types
        assert schema.get_class_schema("extension_Extension").abstract

    def test_license_types(self, schema):
        license_types = schema.get_any_license_info_types()
        assert "ExpandedLicensing.ListedLicense" in license_types
        assert "SimpleLicensing.LicenseExpression" in license_types
        assert "ExpandedLicensing.ConjunctiveLicenseSet" in license_types
        assert "SimpleLicensing.AnyLicenseInfo" not in license_types
        assert "Software.SpdxPackage" not in license_types


# ── Properties ─────────────────────────────────────────────────

class TestProperties:
    """Wire field names, descriptors, kinds and vocabularies."""

    def test_core_descriptor(self, schema):
        assert schema.get_property_descriptor("name") == PropertyDescriptor("name", CORE_NS)

    def test_profile_descriptor(self, schema):
        prop = schema.get_property_descriptor("software_packageVersion")
        assert prop == PropertyDescriptor("packageVersion", SOFTWARE_NS)

    def test_keyword_descriptor(self, schema):
        assert schema.get_property_descriptor("from") == PropertyDescriptor("from_", CORE_NS)
        assert schema.get_property_descriptor("import") == PropertyDescriptor("import_", CORE_NS)

    def test_field_name_round_trip(self, schema):
        for field_name in ("from", "to", "import", "software_packageVersion",
                           "security_score", "expandedlicensing_isOsiApproved"):
            prop = schema.get_property_descriptor(field_name)
            assert schema.get_json_field_name(prop) == field_name

    def test_field_name_for_property_missing_from_context(self, schema):
        assert schema.get_json_field_name(PropertyDescriptor("foo", CORE_NS)) == "foo"
        assert schema.get_json_field_name(PropertyDescriptor("foo", SECURITY_NS)) == "security_foo"

    def test_extension_property(self, schema):
        prop = schema.get_property_descriptor("https://example.com/ext/custom")
        assert prop == PropertyDescriptor("custom", "https://example.com/ext/")
        assert schema.get_property_kind("https://example.com/ext/custom") is None
        assert schema.get_json_field_name(prop) == "https://example.com/ext/custom"

    def test_unknown_property(self, schema):
        assert schema.get_property_descriptor("noSuchField") is None
        assert schema.get_property_kind("noSuchField") is None

    def test_property_kinds(self, schema):
        assert schema.get_property_kind("from") == PropertyKind.REFERENCE
        assert schema.get_property_kind("creationInfo") == PropertyKind.REFERENCE
        assert schema.get_property_kind("relationshipType") == PropertyKind.ENUM
        assert schema.get_property_kind("name") == PropertyKind.STRING
        assert schema.get_property_kind("created") == PropertyKind.STRING
        assert schema.get_property_kind("beginIntegerRange") == PropertyKind.INTEGER
        assert schema.get_property_kind("security_score") == PropertyKind.DOUBLE
        assert schema.get_property_kind("expandedlicensing_isOsiApproved") == PropertyKind.BOOLEAN

    def test_raw_property_type(self, schema):
        assert schema.get_property_type("from") == "@id"
        assert schema.get_property_type("relationshipType") == "@vocab"
        assert schema.get_property_type("name") == "http://www.w3.org/2001/XMLSchema#string"

    def test_vocab(self, schema):
        assert schema.get_vocab("relationshipType") == CORE_NS + "RelationshipType/"
        assert schema.get_vocab("software_primaryPurpose") == SOFTWARE_NS + "SoftwarePurpose/"
        assert schema.get_vocab("name") is None

    def test_shared_core_vocabularies(self, schema):
        presence = CORE_NS + "PresenceType/"
        assert schema.get_vocab("ai_autonomyType") == presence
        assert schema.get_vocab("dataset_hasSensitivePersonalInformation") == presence
        assert schema.get_vocab("supportLevel") == CORE_NS + "SupportType/"
        assert schema.is_enum_value(presence + "yes")

    def test_is_enum_and_is_spdx_object(self, schema):
        assert schema.is_enum("relationshipType")
        assert not schema.is_enum("from")
        assert schema.is_spdx_object("from")
        assert not schema.is_spdx_object("name")


# ── Individuals and enumeration values ─────────────────────────

class TestIndividuals:
    """Enumeration members and named individuals from the RDF model."""

    def test_enum_value(self, schema):
        assert schema.is_enum_value(CORE_NS + "RelationshipType/describes")
        assert schema.is_enum_value(CORE_NS + "RelationshipType/DESCRIBES")
        assert schema.is_enum_value(SOFTWARE_NS + "SoftwarePurpose/library")

    def test_not_enum_value(self, schema):
        assert not schema.is_enum_value(CORE_NS + "NoAssertionElement")
        assert not schema.is_enum_value("https://example.com/pkg/widget")
        assert not schema.is_enum_value(CORE_NS + "RelationshipType/")

    def test_named_individual(self, schema):
        assert schema.is_individual("from", CORE_NS + "NoAssertionElement")
        assert schema.is_individual(
            "dataLicense", "https://spdx.org/rdf/3.0.1/terms/ExpandedLicensing/NoneLicense")

    def test_individual_requires_reference_property(self, schema):
        assert not schema.is_individual("name", CORE_NS + "NoAssertionElement")

    def test_enum_member_is_not_individual(self, schema):
        assert not schema.is_individual("relationshipType", CORE_NS + "RelationshipType/describes")

    def test_schema_without_model_has_no_individuals(self):
        schema = JsonLDSchema("schema-v3.0.1.json", "spdx-context-v3.0.1.jsonld")
        assert not schema.is_individual("from", CORE_NS + "NoAssertionElement")
        assert schema.is_enum_value(CORE_NS + "RelationshipType/describes")


# ── Validation ─────────────────────────────────────────────────

class TestValidation:
    """Validation of whole documents against the JSON schema."""

    def test_valid_document(self, schema, sample_document):
        schema.validate(sample_document)
        assert schema.is_valid(sample_document)

    def test_profile_nodes(self, schema, sample_document):
        sample_document["@graph"] += [
            {"type": "build_Build", "spdxId": "https://example.com/build/1",
             "creationInfo": "_:creationinfo", "build_buildType": "https://example.com/make"},
            {"type": "ai_AIPackage", "spdxId": "https://example.com/ai/model",
             "creationInfo": "_:creationinfo", "ai_autonomyType": "yes"},
        ]
        schema.validate(sample_document)
        sample_document["@graph"][-1]["ai_autonomyType"] = "maybe"
        assert not schema.is_valid(sample_document)

    def test_missing_required_field(self, schema, sample_document):
        del sample_document["@graph"][1]["spdxId"]
        assert not schema.is_valid(sample_document)
        with pytest.raises(SchemaValidationError) as exc_info:
            schema.validate(sample_document)
        assert exc_info.value.errors
        assert all(":" in message for message in exc_info.value.errors)

    def test_wrong_context(self, schema, sample_document):
        sample_document["@context"] = "https://example.com/context.jsonld"
        with pytest.raises(SchemaValidationError) as exc_info:
            schema.validate(sample_document)
        assert any(m.startswith("@context") for m in exc_info.value.errors)

    def test_bad_enum_token(self, schema, sample_document):
        sample_document["@graph"][-1]["relationshipType"] = "notARelationship"
        assert not schema.is_valid(sample_document)


# ── Loading ────────────────────────────────────────────────────

class TestLoading:
    """Resource loading and the latest-version fallback."""

    def test_missing_resource(self, tmp_path):
        with pytest.raises(SchemaUnavailable):
            JsonLDSchema("schema-v3.0.1.json", "spdx-context-v3.0.1.jsonld", resource_dir=tmp_path)

    def test_malformed_resource(self, tmp_path):
        (tmp_path / "schema-v9.json").write_text("{not json", encoding="utf-8")
        (tmp_path / "spdx-context-v9.jsonld").write_text("{}", encoding="utf-8")
        with pytest.raises(SchemaUnavailable):
            JsonLDSchema("schema-v9.json", "spdx-context-v9.jsonld", resource_dir=tmp_path)

    def test_fallback_to_latest(self):
        schema = load_schema("9.9.9")
        assert schema.json_type_to_model_type("software_Package") == "Software.SpdxPackage"

    def test_no_fallback(self):
        with pytest.raises(SchemaUnavailable):
            load_schema("9.9.9", fallback=False)

    def test_fallback_failure_surfaces_original_error(self, tmp_path):
        with pytest.raises(SchemaUnavailable) as exc_info:
            load_schema("9.9.9", resource_dir=tmp_path)
        assert "9.9.9" in str(exc_info.value)
