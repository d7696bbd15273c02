"""Exceptions raised while resolving schemas and converting SPDX JSON-LD."""
from __future__ import annotations

from typing import Optional


class SpdxJsonLDError(Exception):
    pass


class SchemaUnavailable(SpdxJsonLDError):
    """A schema, context or model resource could not be loaded."""


class InvalidData(SpdxJsonLDError):
    """The JSON-LD input or the stored objects can not be converted."""


class SchemaValidationError(InvalidData):
    """A document does not conform to the JSON schema."""

    def __init__(self, message: str, errors: Optional[list[str]] = None):
        super().__init__(message)
        self.errors = errors or []


class UnsupportedOperand(SpdxJsonLDError):
    """A stored value has a Python type the serializer does not handle."""
