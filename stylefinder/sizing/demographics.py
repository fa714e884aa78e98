"""Age and gender inputs used to pick a sizing table."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from stylefinder.sizing.measurements import NotReady, parse_number

ADULT_AGE = 18


class GenderTag(str, Enum):
    """Closed set of demographic tags understood by the sizing tables."""

    BOY = "boy"
    GIRL = "girl"
    MALE = "male"
    FEMALE = "female"
    UNISEX = "unisex"

    @property
    def is_minor_tag(self) -> bool:
        return self in (GenderTag.BOY, GenderTag.GIRL)

    @property
    def is_adult_tag(self) -> bool:
        return self in (GenderTag.MALE, GenderTag.FEMALE)

    def as_adult(self) -> GenderTag:
        """Nearest adult bracket for a minor tag (boy->male, girl->female)."""

        return _TO_ADULT.get(self, self)

    def as_minor(self) -> GenderTag:
        return _TO_MINOR.get(self, self)


_TO_ADULT = {GenderTag.BOY: GenderTag.MALE, GenderTag.GIRL: GenderTag.FEMALE}
_TO_MINOR = {GenderTag.MALE: GenderTag.BOY, GenderTag.FEMALE: GenderTag.GIRL}

_GENDER_ALIASES: dict[str, GenderTag] = {
    "boy": GenderTag.BOY,
    "boys": GenderTag.BOY,
    "girl": GenderTag.GIRL,
    "girls": GenderTag.GIRL,
    "male": GenderTag.MALE,
    "man": GenderTag.MALE,
    "men": GenderTag.MALE,
    "mens": GenderTag.MALE,
    "female": GenderTag.FEMALE,
    "woman": GenderTag.FEMALE,
    "women": GenderTag.FEMALE,
    "womens": GenderTag.FEMALE,
    "unisex": GenderTag.UNISEX,
    "non-binary": GenderTag.UNISEX,
    "nonbinary": GenderTag.UNISEX,
    "prefer not to say": GenderTag.UNISEX,
}

_AGE_RANGE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(?:[-+]|$)")


@dataclass(frozen=True, slots=True)
class Demographic:
    """Age in years with a gender tag that agrees with the age bracket."""

    age_years: float
    gender: GenderTag

    def __post_init__(self) -> None:
        if self.age_years < 0:
            raise ValueError("age_years must not be negative")
        if self.is_minor and self.gender.is_adult_tag:
            raise ValueError(f"{self.gender.value!r} is an adult tag but age is {self.age_years}")
        if not self.is_minor and self.gender.is_minor_tag:
            raise ValueError(f"{self.gender.value!r} is a minor tag but age is {self.age_years}")

    @property
    def is_minor(self) -> bool:
        return self.age_years < ADULT_AGE


def parse_gender(value: str | GenderTag | None) -> GenderTag | None:
    if isinstance(value, GenderTag):
        return value
    if not value:
        return None
    return _GENDER_ALIASES.get(value.strip().lower())


def parse_age(value: str | float | int | None) -> float | None:
    """Read a plain age or the lower bound of a range like ``"18-25"`` or ``"55+"``."""

    if isinstance(value, str):
        match = _AGE_RANGE.match(value)
        if match is None:
            return None
        return float(match.group(1))
    return parse_number(value)


def parse_demographic(
    age: str | float | int | None,
    gender: str | GenderTag | None,
) -> Demographic | NotReady:
    """Build a :class:`Demographic` from wizard selections.

    Tags that contradict the age bracket are moved to the matching bracket
    (``male`` for a 12 year old becomes ``boy``).
    """

    age_years = parse_age(age)
    if age_years is None or age_years < 0:
        return NotReady("Age must be selected.")
    tag = parse_gender(gender)
    if tag is None:
        return NotReady("Gender must be selected.")

    tag = tag.as_minor() if age_years < ADULT_AGE else tag.as_adult()
    return Demographic(age_years=age_years, gender=tag)
