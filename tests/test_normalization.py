from __future__ import annotations

import math

import pytest

from pyscour.ingestion.normalize import join_nonempty, safe_bool, safe_float, safe_int


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("43.6", 43.6),
        (7, 7.0),
        ("--", None),
        ("", None),
        (None, None),
        (True, None),
        (math.nan, None),
        ("inf", None),
        ("north", None),
    ],
)
def test_safe_float(value: object, expected: float | None) -> None:
    assert safe_float(value) == expected


def test_safe_int_truncates_floats() -> None:
    assert safe_int("45.0") == 45
    assert safe_int("n/a") is None


@pytest.mark.parametrize(
    ("value", "expected"),
    [(True, True), ("true", True), ("Y", True), (1, True), (0, False), ("false", False), (None, False)],
)
def test_safe_bool(value: object, expected: bool) -> None:
    assert safe_bool(value) is expected


def test_join_nonempty_skips_blank_parts() -> None:
    assert join_nonempty("John", "", None, " Doe ") == "John Doe"
    assert join_nonempty("100 Main St", "Boise", "ID 83702", sep=", ") == "100 Main St, Boise, ID 83702"
