"""Render stored license objects as SPDX license expression text.

Used by the serializer in pretty mode; callers with a full license
expression printer can pass their own formatter instead.
"""
from __future__ import annotations

from typing import Callable, Union

from spdx_jsonld.schema.common import (
    IndividualUriValue,
    PropertyDescriptor,
    TypedValue,
    profile_namespace,
)
from spdx_jsonld.store.model_store import ModelStore

LicenseFormatter = Callable[[ModelStore, TypedValue], str]

INDIVIDUAL_LICENSE_TEXT = {
    "NoneLicense": "NONE",
    "NoAssertionLicense": "NOASSERTION",
}


def _local_name(uri: str) -> str:
    return uri[max(uri.rfind("#"), uri.rfind("/")) + 1:]


def _prop(profile: str, name: str, tv: TypedValue) -> PropertyDescriptor:
    return PropertyDescriptor(name, profile_namespace(profile, tv.spec_version))


def _text(store: ModelStore, value: Union[TypedValue, IndividualUriValue, str, None]) -> str:
    if isinstance(value, TypedValue):
        return format_license(store, value)
    if isinstance(value, IndividualUriValue):
        local = _local_name(value.individual_uri)
        return INDIVIDUAL_LICENSE_TEXT.get(local, local)
    return "" if value is None else str(value)


def format_license(store: ModelStore, tv: TypedValue) -> str:
    """License expression text for the license object tv."""
    uri = tv.object_uri
    local_type = tv.type.split(".", 1)[-1]
    if local_type == "LicenseExpression":
        return _text(store, store.get_value(uri, _prop("SimpleLicensing", "licenseExpression", tv)))
    if local_type in ("ConjunctiveLicenseSet", "DisjunctiveLicenseSet"):
        operator = " AND " if local_type == "ConjunctiveLicenseSet" else " OR "
        members = [_text(store, m) for m in
                   store.list_values(uri, _prop("ExpandedLicensing", "member", tv))]
        return "(" + operator.join(members) + ")"
    if local_type == "OrLaterOperator":
        subject = store.get_value(uri, _prop("ExpandedLicensing", "subjectLicense", tv))
        return _text(store, subject) + "+"
    if local_type == "WithAdditionOperator":
        subject = store.get_value(uri, _prop("ExpandedLicensing", "subjectExtendableLicense", tv))
        addition = store.get_value(uri, _prop("ExpandedLicensing", "subjectAddition", tv))
        return f"{_text(store, subject)} WITH {_text(store, addition)}"
    # listed/custom licenses and additions, individuals
    local = _local_name(uri)
    return INDIVIDUAL_LICENSE_TEXT.get(local, local)
