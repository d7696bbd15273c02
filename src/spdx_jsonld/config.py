"""Configuration for SPDX JSON-LD resources and serialization defaults.

The resource directory and default spec version can be overridden through
environment variables:

- SPDX_JSONLD_RESOURCE_DIR: directory holding the schema, context and model files
- SPDX_JSONLD_SPEC_VERSION: spec version used when a caller does not give one
"""
from __future__ import annotations

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

LATEST_SPEC_VERSION = "3.0.1"
SUPPORTED_SPEC_VERSIONS = ("3.0.1",)

DEFAULT_RESOURCE_DIR = Path(__file__).parent / "resources"
RESOURCE_DIR = Path(os.getenv("SPDX_JSONLD_RESOURCE_DIR", str(DEFAULT_RESOURCE_DIR)))
DEFAULT_SPEC_VERSION = os.getenv("SPDX_JSONLD_SPEC_VERSION", LATEST_SPEC_VERSION).strip()

if DEFAULT_SPEC_VERSION not in SUPPORTED_SPEC_VERSIONS:
    logger.warning(
        f"SPDX_JSONLD_SPEC_VERSION={DEFAULT_SPEC_VERSION!r} is not one of "
        f"{SUPPORTED_SPEC_VERSIONS}; resources for it must be in {RESOURCE_DIR}"
    )

SCHEMA_FILE_TEMPLATE = "schema-v{version}.json"
CONTEXT_FILE_TEMPLATE = "spdx-context-v{version}.jsonld"
MODEL_FILE_TEMPLATE = "spdx-model-v{version}.jsonld"

CONTEXT_URI_TEMPLATE = "https://spdx.org/rdf/{version}/spdx-context.jsonld"

# Anonymous elements are given <prefix><uuid>#<store id> on serialization
GENERATED_SERIALIZED_ID_PREFIX = "https://generated-prefix/"

SPDX_LISTED_LICENSE_NAMESPACE = "https://spdx.org/licenses/"


def schema_file_name(spec_version: str) -> str:
    return SCHEMA_FILE_TEMPLATE.format(version=spec_version)


def context_file_name(spec_version: str) -> str:
    return CONTEXT_FILE_TEMPLATE.format(version=spec_version)


def model_file_name(spec_version: str) -> str:
    return MODEL_FILE_TEMPLATE.format(version=spec_version)


def context_uri(spec_version: str) -> str:
    return CONTEXT_URI_TEMPLATE.format(version=spec_version)
