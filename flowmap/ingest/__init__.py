"""Row ingestion: column resolution, hierarchy building and spreadsheet reading."""

from .builder import BuildDiagnostic, BuildReport, HierarchyBuilder, build_tree
from .columns import normalize_key, resolve_value
from .reader import read_rows

__all__ = [
    "BuildDiagnostic",
    "BuildReport",
    "HierarchyBuilder",
    "build_tree",
    "normalize_key",
    "resolve_value",
    "read_rows",
]
