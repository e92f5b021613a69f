"""Tests for element parsing and specimen table import."""

from __future__ import annotations

import pytest

from sodecal.resolvers.specimens import Element, Specimen, SpecimenError, read_specimen_table


def test_element_parse() -> None:
    assert Element.parse("tibia") is Element.TIBIA
    assert Element.parse(" Femur ") is Element.FEMUR
    assert Element.parse(Element.RADIUS) is Element.RADIUS
    with pytest.raises(SpecimenError):
        Element.parse("ulna")


def test_specimen_error_is_value_error() -> None:
    with pytest.raises(ValueError):
        Element.parse("scapula")


def test_read_valid_table() -> None:
    data = b"element,depth\nradius,6.78\nTibia,12.1\nfemur,110\n"
    specimens = read_specimen_table(data)
    assert specimens == [
        Specimen(Element.RADIUS, 6.78),
        Specimen(Element.TIBIA, 12.1),
        Specimen(Element.FEMUR, 110.0),
    ]
    assert specimens[0].to_dict() == {"element": "radius", "depth_mm": 6.78}


def test_read_from_path(tmp_path) -> None:
    path = tmp_path / "specimens.csv"
    path.write_text("bone,mm,notes\nhumerus,8.5,left\n")
    assert read_specimen_table(path) == [Specimen(Element.HUMERUS, 8.5)]


def test_invalid_names_are_reported_by_row() -> None:
    data = b"element,depth\nradius,6.0\nulna,5.0\ntibia,4.0\n,3.0\n"
    with pytest.raises(SpecimenError) as exc_info:
        read_specimen_table(data)
    assert "[2, 4]" in str(exc_info.value)


def test_bad_depths_are_reported_by_row() -> None:
    data = b"element,depth\nradius,abc\ntibia,\nfemur,3.2\n"
    with pytest.raises(SpecimenError) as exc_info:
        read_specimen_table(data)
    assert "[1, 2]" in str(exc_info.value)
    assert "depth" in str(exc_info.value)


def test_single_column_rejected() -> None:
    with pytest.raises(SpecimenError) as exc_info:
        read_specimen_table(b"element\nradius\n")
    assert "two columns" in str(exc_info.value)


def test_empty_table_rejected() -> None:
    with pytest.raises(SpecimenError):
        read_specimen_table(b"element,depth\n")
    with pytest.raises(SpecimenError):
        read_specimen_table(b"")
