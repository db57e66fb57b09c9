"""Header normalization and prioritized column lookup."""

from __future__ import annotations

import math
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

_STRIP_RE = re.compile(r"[\s._-]")

# Candidate header names per logical field, highest priority first.
ACCOUNT_CANDIDATES = (
    "Account No",
    "AccountNo",
    "Account Number",
    "acc_no",
    "Acknowledgement N",
    "A/C No",
    "AC No",
)
LAYER_CANDIDATES = ("Layer", "Level")
PARENT_CANDIDATES = ("parent_acc_no", "ParentAccountNo", "Parent Account No", "Parent")


@dataclass(frozen=True)
class FieldSpec:
    """A canonical attribute key and the headers that may carry it."""

    key: str
    candidates: tuple[str, ...]

    def with_aliases(self, extra: Iterable[str]) -> FieldSpec:
        extra = tuple(extra)
        if not extra:
            return self
        return FieldSpec(self.key, self.candidates + extra)


SECONDARY_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec("sNo", ("S.No", "SNo", "Serial No", "S No", "SerialNumber")),
    FieldSpec("acknowledgementN", ("Acknowledgement N", "Acknowledgement", "AcknowledgementN")),
    FieldSpec("ifscCode", ("IFSC Code", "IFSCCode", "IFSC")),
    FieldSpec("state", ("State",)),
    FieldSpec("district", ("District",)),
    FieldSpec(
        "policeStation",
        ("police Station Name of Complain reported officer", "Police Station", "PS Name", "PoliceStation"),
    ),
    FieldSpec("designation", ("Designation",)),
    FieldSpec("mobileNumber", ("Mobile Number", "MobileNumber", "Mobile", "Phone")),
    FieldSpec("email", ("Email", "E-mail", "EmailID")),
)


def normalize_key(key: Any) -> str:
    """Lower-case a header and drop whitespace, dots, underscores and hyphens."""
    return _STRIP_RE.sub("", str(key).lower())


def is_blank(value: Any) -> bool:
    """True for cells that carry no value (None, NaN, empty or whitespace-only text)."""
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return False


def normalize_row(row: Mapping[str, Any]) -> dict[str, Any]:
    """Map normalized header -> value. For colliding headers the first non-blank cell wins."""
    out: dict[str, Any] = {}
    for header, value in row.items():
        key = normalize_key(header)
        if key not in out or (is_blank(out[key]) and not is_blank(value)):
            out[key] = value
    return out


def lookup(normalized: Mapping[str, Any], candidates: Iterable[str]) -> Any | None:
    """Return the first non-blank value among `candidates`, or None when absent."""
    for candidate in candidates:
        value = normalized.get(normalize_key(candidate))
        if not is_blank(value):
            return value
    return None


def resolve_value(row: Mapping[str, Any], candidates: Iterable[str]) -> Any | None:
    """Resolve a logical field from a raw row by prioritized candidate header names."""
    return lookup(normalize_row(row), candidates)


def stringify_id(value: Any) -> str:
    """Render an identifier cell as text; integral floats lose their `.0`."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()
