"""Pytest configuration and fixtures."""

import csv
from pathlib import Path

import pytest

from flowmap.session import Session


@pytest.fixture
def chain_rows() -> list[dict]:
    """A1 -> A2 -> A3 across two layers."""
    return [
        {"AccountNo": "A1", "Layer": 1},
        {"AccountNo": "A2", "Layer": 1, "parent_acc_no": "A1"},
        {"AccountNo": "A3", "Layer": 2, "parent_acc_no": "A2"},
    ]


@pytest.fixture
def wide_rows() -> list[dict]:
    """One root at layer 1 fanning out to six accounts at layer 2."""
    rows = [{"Account No.": "R", "Layer": 1, "State": "Kerala"}]
    for i in range(6):
        rows.append({"Account No.": f"C{i}", "Layer": 2, "Parent Account No": "R", "IFSC Code": f"SBIN000{i}"})
    return rows


@pytest.fixture
def wide_session(wide_rows: list[dict]) -> Session:
    session = Session()
    session.load(wide_rows)
    return session


def _write_csv(path: Path, rows: list[dict]) -> Path:
    headers: list[str] = []
    for row in rows:
        for key in row:
            if key not in headers:
                headers.append(key)
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=headers)
        writer.writeheader()
        for row in rows:
            writer.writerow(row)
    return path


@pytest.fixture
def write_csv():
    """Write rows to a CSV file; headers are the union of row keys in first-seen order."""
    return _write_csv
