"""Flat (label, value, icon) list for an account's detail panel."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from .ingest.columns import (
    ACCOUNT_CANDIDATES,
    LAYER_CANDIDATES,
    SECONDARY_FIELDS,
    is_blank,
    normalize_key,
    normalize_row,
)

INTERNAL_KEYS = frozenset({"children", "__rowNum__"})
FALLBACK_ICON = "spreadsheet"

_CAMEL_RE = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")
_SPACES_RE = re.compile(r"\s+")

# every header the builder resolves belongs to its group, so it is never listed again as a leftover
_RESOLVED = {spec.key: spec.candidates for spec in SECONDARY_FIELDS}


@dataclass(frozen=True)
class FieldGroup:
    label: str
    icon: str
    keys: tuple[str, ...]


@dataclass(frozen=True)
class DetailField:
    label: str
    value: Any
    icon: str


FIELD_GROUPS: tuple[FieldGroup, ...] = (
    FieldGroup(
        "Account Number",
        "credit-card",
        ("accountNo", "Account No", "AccountNo", "Account_No", "acc_no", "Acknowledgement N", "AcknowledgementN")
        + ACCOUNT_CANDIDATES,
    ),
    FieldGroup(
        "Serial Number",
        "hash",
        ("sNo", "S.No", "S No", "SNo", "Serial No", "SerialNo", "serial_no") + _RESOLVED["sNo"],
    ),
    FieldGroup(
        "Acknowledgement",
        "file-text",
        ("acknowledgementN", "Acknowledgement N", "Acknowledgement", "ack_no") + _RESOLVED["acknowledgementN"],
    ),
    FieldGroup(
        "IFSC Code",
        "building",
        ("ifscCode", "IFSC Code", "IFSCCode", "IFSC", "ifsc_code") + _RESOLVED["ifscCode"],
    ),
    FieldGroup("State", "map-pin", ("state", "State", "state_name", "StateName") + _RESOLVED["state"]),
    FieldGroup(
        "District",
        "map-pinned",
        ("district", "District", "district_name", "DistrictName") + _RESOLVED["district"],
    ),
    FieldGroup(
        "Police Station",
        "shield",
        ("policeStation", "Police Station", "police Station Name of Complain reported officer", "PS Name")
        + _RESOLVED["policeStation"],
    ),
    FieldGroup("Designation", "user", ("designation", "Designation", "post", "Position") + _RESOLVED["designation"]),
    FieldGroup(
        "Mobile Number",
        "phone",
        ("mobileNumber", "Mobile Number", "Mobile", "Phone", "Contact", "contact_no", "mobile_no")
        + _RESOLVED["mobileNumber"],
    ),
    FieldGroup(
        "Email",
        "mail",
        ("email", "Email", "E-mail", "EmailID", "email_id", "email_address") + _RESOLVED["email"],
    ),
    FieldGroup("Name", "user", ("name", "Name", "full_name", "FullName", "PersonName", "person_name")),
    FieldGroup("Address", "home", ("address", "Address", "full_address", "FullAddress")),
    FieldGroup("Pincode", "map-pin", ("pincode", "Pincode", "PIN", "postal_code", "PostalCode", "zip")),
    FieldGroup("Amount", "package", ("amount", "Amount", "transaction_amount", "TransactionAmount", "value")),
    FieldGroup("Date", "calendar", ("date", "Date", "transaction_date", "TransactionDate", "timestamp")),
    FieldGroup("Status", "check-circle", ("status", "Status", "transaction_status", "TransactionStatus")),
    FieldGroup("Remarks", "message", ("remarks", "Remarks", "comments", "notes", "description")),
    FieldGroup("Layer", "layers", ("layer", "Layer", "level", "Level") + LAYER_CANDIDATES),
)


def humanize_header(key: str) -> str:
    """`parent_acc_no` -> `parent acc no`, `txnReference` -> `txn Reference`."""
    label = _CAMEL_RE.sub(" ", key.replace("_", " "))
    return _SPACES_RE.sub(" ", label).strip()


def detail_fields(attributes: Mapping[str, Any] | None) -> list[DetailField]:
    """Canonical groups first (one entry each), then any other non-empty attribute.

    A leftover attribute is dropped when its header is one of the candidates of
    a group that already produced an entry, so `accountNo` and a raw
    `Account No.` column are not both listed.
    """
    if not attributes:
        return []

    normalized = normalize_row(attributes)
    fields: list[DetailField] = []
    consumed: set[str] = set()

    for group in FIELD_GROUPS:
        for key in group.keys:
            value = normalized.get(normalize_key(key))
            if not is_blank(value):
                fields.append(DetailField(label=group.label, value=value, icon=group.icon))
                consumed.update(normalize_key(k) for k in group.keys)
                break

    for key, value in attributes.items():
        if key in INTERNAL_KEYS or is_blank(value):
            continue
        norm = normalize_key(key)
        if norm in consumed:
            continue
        consumed.add(norm)
        fields.append(DetailField(label=humanize_header(key), value=value, icon=FALLBACK_ICON))

    return fields
