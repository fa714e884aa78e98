"""Conversion of raw wizard measurements into a single unit system.

Heights are carried in total inches and weights in pounds. Centimetres are
always converted with ``cm / 2.54`` and kilograms with ``kg / 0.453592`` so
every call in a deployment shares one convention. No rounding happens here;
the classifier receives full precision.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum

CM_PER_INCH = 2.54
KG_PER_POUND = 0.453592
INCHES_PER_FOOT = 12


class WeightUnit(str, Enum):
    """Units accepted for the weight field."""

    LB = "lb"
    KG = "kg"


class HeightUnit(str, Enum):
    """Units accepted for the height field."""

    FT_IN = "ft_in"
    CM = "cm"


NumberInput = str | float | int | None


@dataclass(frozen=True, slots=True)
class NotReady:
    """Marks input that is not complete enough to move forward.

    This is the normal state of a half-filled form and not a failure.
    """

    reason: str


@dataclass(frozen=True, slots=True)
class RawMeasurement:
    """Values as entered by the user, still unvalidated.

    For ``HeightUnit.FT_IN`` the ``height_value`` holds feet and
    ``height_inches`` the remaining inches. For ``HeightUnit.CM`` the
    ``height_inches`` field is ignored.
    """

    weight_value: NumberInput
    height_value: NumberInput
    weight_unit: WeightUnit = WeightUnit.LB
    height_unit: HeightUnit = HeightUnit.FT_IN
    height_inches: NumberInput = 0


@dataclass(frozen=True, slots=True)
class CanonicalMeasurement:
    """Weight in pounds and height in total inches."""

    weight_lb: float
    height_in: float

    def __post_init__(self) -> None:
        for name in ("weight_lb", "height_in"):
            value = getattr(self, name)
            if not math.isfinite(value) or value <= 0:
                raise ValueError(f"{name} must be a finite positive number, got {value!r}")

    @property
    def weight_kg(self) -> float:
        return self.weight_lb * KG_PER_POUND

    @property
    def height_m(self) -> float:
        return self.height_in * CM_PER_INCH / 100

    @property
    def feet_and_inches(self) -> tuple[int, float]:
        feet = int(self.height_in // INCHES_PER_FOOT)
        return feet, self.height_in - feet * INCHES_PER_FOOT


def parse_number(value: NumberInput) -> float | None:
    """Return a finite float or ``None`` for blanks and garbage."""

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip().replace(",", ".")
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if not math.isfinite(number):
        return None
    return number


def _height_in_inches(raw: RawMeasurement) -> float | NotReady:
    primary = parse_number(raw.height_value)
    if primary is None or primary <= 0:
        return NotReady("Height must be a positive number.")

    if raw.height_unit is HeightUnit.CM:
        return primary / CM_PER_INCH

    inches = parse_number(raw.height_inches if raw.height_inches not in (None, "") else 0)
    if inches is None or inches < 0:
        return NotReady("Inches must be zero or a positive number.")
    return primary * INCHES_PER_FOOT + inches


def _weight_in_pounds(raw: RawMeasurement) -> float | NotReady:
    weight = parse_number(raw.weight_value)
    if weight is None or weight <= 0:
        return NotReady("Weight must be a positive number.")
    if raw.weight_unit is WeightUnit.KG:
        return weight / KG_PER_POUND
    return weight


def normalize(raw: RawMeasurement) -> CanonicalMeasurement | NotReady:
    """Convert ``raw`` to pounds/inches or report why it cannot be used yet."""

    weight = _weight_in_pounds(raw)
    if isinstance(weight, NotReady):
        return weight
    height = _height_in_inches(raw)
    if isinstance(height, NotReady):
        return height
    return CanonicalMeasurement(weight_lb=weight, height_in=height)
