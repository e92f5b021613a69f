"""Skeletal elements, specimen measurements and specimen table import."""

from __future__ import annotations

import io
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import IO, Union

import pandas as pd

from sodecal.engine.errors import SodeError
from sodecal.utils.logging import get_logger

logger = get_logger(__name__)


class SpecimenError(SodeError, ValueError):
    """A specimen measurement or specimen table cannot be resolved."""


class Element(str, Enum):
    """Fetal long bones with modelled growth."""

    HUMERUS = "humerus"
    RADIUS = "radius"
    FEMUR = "femur"
    TIBIA = "tibia"

    @classmethod
    def parse(cls, value: Union[str, "Element"]) -> "Element":
        """Coerce a name such as ' Tibia ' to an Element.

        Raises:
            SpecimenError: If the name is not a modelled element.
        """
        if isinstance(value, Element):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            valid = ", ".join(repr(e.value) for e in cls)
            raise SpecimenError(f"element must be one of {valid}, got {value!r}") from None


@dataclass(frozen=True)
class Specimen:
    """Minimum antero-posterior diaphyseal depth of one element, in mm."""

    element: Element
    depth_mm: float

    def to_dict(self) -> dict:
        return {"element": self.element.value, "depth_mm": self.depth_mm}


SpecimenSource = Union[str, Path, bytes, IO[str], IO[bytes]]


def read_specimen_table(source: SpecimenSource) -> list[Specimen]:
    """Read a two-column CSV of element names and depths (header row required).

    Column 1 is the element, column 2 the depth in mm; further columns are
    ignored.

    Args:
        source: Path, raw CSV bytes, or an open file.

    Returns:
        Specimens in row order.

    Raises:
        SpecimenError: On unreadable CSV, fewer than two columns, no rows,
            invalid element names, or missing / non-numeric depths. The
            message names the offending (1-based data) rows.
    """
    if isinstance(source, (bytes, bytearray)):
        source = io.BytesIO(bytes(source))
    try:
        df = pd.read_csv(source)
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        raise SpecimenError(f"could not read specimen table: {e}") from e

    if df.shape[1] < 2:
        raise SpecimenError(
            f"specimen table needs two columns (element, depth), got {df.shape[1]}"
        )
    if len(df) == 0:
        raise SpecimenError("specimen table has no rows")

    names = df.iloc[:, 0]
    depths = pd.to_numeric(df.iloc[:, 1], errors="coerce")

    bad_names: list[int] = []
    elements: list[Element] = []
    for row, name in enumerate(names, start=1):
        try:
            elements.append(Element.parse(name if pd.notna(name) else ""))
        except SpecimenError:
            bad_names.append(row)
    bad_depths = [row for row, ok in enumerate(depths.notna(), start=1) if not ok]

    problems: list[str] = []
    if bad_names:
        problems.append(f"invalid element names in rows {bad_names}")
    if bad_depths:
        problems.append(f"missing or non-numeric depths in rows {bad_depths}")
    if problems:
        raise SpecimenError("; ".join(problems))

    specimens = [Specimen(e, float(d)) for e, d in zip(elements, depths)]
    logger.info(f"read {len(specimens)} specimens from table")
    return specimens
