"""Rule-based clothing size inference.

The decision order is fixed:

1. ``age < 18`` takes the kids table, otherwise the adult tables.
2. Kids: an explicit height+weight band wins. Without one, a child taller or
   heavier than the top kids band moves to the adult tables under the nearest
   adult tag (boy->male, girl->female). This early transition is intended.
   Anyone else gets the height-only thresholds.
3. Adults: weight short-circuit, then height bracket and weight band, then
   weight-only thresholds when the height has no bracket.
4. Tags without a demographic table (unisex) use BMI.

With ``SizePolicy.BMI`` every call uses BMI instead; the two policies are never
mixed inside one classifier.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from enum import Enum

from stylefinder.metrics.prometheus_exporter import size_classification_total
from stylefinder.sizing.demographics import Demographic, GenderTag
from stylefinder.sizing.measurements import CanonicalMeasurement
from stylefinder.sizing.tables import (
    BMI_BANDS,
    KIDS_TABLE,
    MENS_TABLE,
    WOMENS_TABLE,
    AdultTable,
    KidsTable,
    WeightBand,
)

logger = logging.getLogger(__name__)


class SizePolicy(str, Enum):
    """Which family of rules a classifier applies."""

    TABLE = "table"
    BMI = "bmi"


class SizeCategory(str, Enum):
    """Department prefix carried by every size label."""

    BOYS = "Boys"
    GIRLS = "Girls"
    MENS = "Mens"
    WOMENS = "Womens"


class SizeMatch(str, Enum):
    """Which rule produced a label."""

    EXACT = "exact"
    SHORT_CIRCUIT = "short_circuit"
    HEIGHT_FALLBACK = "height_fallback"
    WEIGHT_FALLBACK = "weight_fallback"
    BMI = "bmi"
    GENERATIVE = "generative"

    @property
    def is_fallback(self) -> bool:
        return self in (SizeMatch.HEIGHT_FALLBACK, SizeMatch.WEIGHT_FALLBACK, SizeMatch.BMI)


# Unisex takes the girls/womens department: only boy/male map to the
# boys/mens prefix.
_CATEGORY = {
    GenderTag.BOY: SizeCategory.BOYS,
    GenderTag.GIRL: SizeCategory.GIRLS,
    GenderTag.MALE: SizeCategory.MENS,
    GenderTag.FEMALE: SizeCategory.WOMENS,
}

_ADULT_TABLES: dict[GenderTag, AdultTable] = {
    GenderTag.MALE: MENS_TABLE,
    GenderTag.FEMALE: WOMENS_TABLE,
}

SIZE_ORDER = ("2T", "3T", "4T", "XS", "S", "M", "L", "XL", "XXL", "3XL", "4XL", "5XL", "6XL")
_TOKEN_ALIASES = {"2XL": "XXL", "SMALL": "S", "MEDIUM": "M", "LARGE": "L"}
_LABEL = re.compile(r"^(Boys|Girls|Mens|Womens) (\S.*)$")


@dataclass(frozen=True, slots=True)
class SizeResult:
    """A size label with the rule trail that produced it."""

    category: SizeCategory
    token: str
    match: SizeMatch
    bracket: str | None = None
    early_transition: bool = False

    @property
    def label(self) -> str:
        return f"{self.category.value} {self.token}"

    def __str__(self) -> str:
        return self.label


def category_for(demographic: Demographic) -> SizeCategory:
    gender = demographic.gender
    if gender is GenderTag.UNISEX:
        return SizeCategory.GIRLS if demographic.is_minor else SizeCategory.WOMENS
    return _CATEGORY[gender]


def bmi(measurement: CanonicalMeasurement) -> float:
    """Body mass index from pounds and inches; infinite when the height squares to zero."""

    height_squared = measurement.height_m * measurement.height_m
    if height_squared == 0:
        return math.inf
    return measurement.weight_kg / height_squared


def split_label(label: str) -> tuple[str, str] | None:
    """Return ``(category, token)`` for a well-formed size label."""

    match = _LABEL.match(label.strip())
    if match is None:
        return None
    return match.group(1), match.group(2)


def size_rank(label_or_token: str) -> int:
    """Position of a size in ``SIZE_ORDER``; ``-1`` when unknown.

    Kids hints such as ``"S (Size 6-8)"`` rank by their leading token.
    """

    parts = split_label(label_or_token)
    token = parts[1] if parts else label_or_token.strip()
    token = token.split(" ", 1)[0].upper()
    token = _TOKEN_ALIASES.get(token, token)
    try:
        return SIZE_ORDER.index(token)
    except ValueError:
        return -1


def _first_band(bands: tuple[WeightBand, ...], value: float) -> WeightBand | None:
    for band in bands:
        if band.max_weight is None or value < band.max_weight:
            return band
    return None


class SizeClassifier:
    """Maps measurements and demographics to a size label. Never raises for valid input."""

    def __init__(
        self,
        policy: SizePolicy | str = SizePolicy.TABLE,
        *,
        kids_table: KidsTable = KIDS_TABLE,
        adult_tables: dict[GenderTag, AdultTable] | None = None,
    ) -> None:
        self.policy = SizePolicy(policy)
        self._kids_table = kids_table
        self._adult_tables = adult_tables or _ADULT_TABLES

    def classify(self, measurement: CanonicalMeasurement, demographic: Demographic) -> str:
        return self.classify_detailed(measurement, demographic).label

    def classify_detailed(self, measurement: CanonicalMeasurement, demographic: Demographic) -> SizeResult:
        if self.policy is SizePolicy.BMI:
            result = self._by_bmi(measurement, category_for(demographic))
        elif demographic.is_minor:
            result = self._minor(measurement, demographic)
        else:
            result = self._adult(measurement, demographic.gender, category_for(demographic))

        size_classification_total.labels(match=result.match.value).inc()
        if result.match.is_fallback:
            logger.debug(
                "Size %s from %s fallback (%.1f in, %.1f lb)",
                result.label,
                result.match.value,
                measurement.height_in,
                measurement.weight_lb,
            )
        return result

    def _minor(self, measurement: CanonicalMeasurement, demographic: Demographic) -> SizeResult:
        category = category_for(demographic)
        height, weight = measurement.height_in, measurement.weight_lb
        table = self._kids_table

        band = table.band_for(height, weight)
        if band is not None:
            return SizeResult(category, band.token, SizeMatch.EXACT, bracket="kids")

        if height >= table.top_height or weight >= table.top_weight:
            adult_gender = demographic.gender.as_adult()
            adult_category = category_for(Demographic(age_years=18, gender=adult_gender))
            adult = self._adult(measurement, adult_gender, adult_category)
            return SizeResult(
                adult.category,
                adult.token,
                adult.match,
                bracket=adult.bracket,
                early_transition=True,
            )

        return SizeResult(category, table.token_by_height(height), SizeMatch.HEIGHT_FALLBACK, bracket="kids")

    def _adult(self, measurement: CanonicalMeasurement, gender: GenderTag, category: SizeCategory) -> SizeResult:
        table = self._adult_tables.get(gender)
        if table is None:
            return self._by_bmi(measurement, category)

        weight = measurement.weight_lb
        short = _first_band(table.short_circuit, weight)
        if short is not None:
            return SizeResult(category, short.token, SizeMatch.SHORT_CIRCUIT)

        bracket = table.bracket_for(measurement.height_in)
        if bracket is not None:
            band = bracket.band_for(weight)
            if band is not None:
                return SizeResult(category, band.token, SizeMatch.EXACT, bracket=bracket.name)

        fallback = _first_band(table.weight_fallback, weight)
        token = fallback.token if fallback is not None else table.weight_fallback[-1].token
        return SizeResult(category, token, SizeMatch.WEIGHT_FALLBACK)

    def _by_bmi(self, measurement: CanonicalMeasurement, category: SizeCategory) -> SizeResult:
        band = _first_band(BMI_BANDS, bmi(measurement))
        token = band.token if band is not None else BMI_BANDS[-1].token
        return SizeResult(category, token, SizeMatch.BMI)


def classify(
    measurement: CanonicalMeasurement,
    demographic: Demographic,
    policy: SizePolicy | str = SizePolicy.TABLE,
) -> str:
    """Size label for ``measurement`` and ``demographic`` under ``policy``."""

    return SizeClassifier(policy).classify(measurement, demographic)
