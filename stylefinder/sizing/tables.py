"""Canonical sizing tables.

One table per demographic bracket. Heights are in inches, weights in pounds.
Band upper bounds are exclusive; ``None`` marks an open-ended top band.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class WeightBand:
    """Size token for weights below ``max_weight``."""

    max_weight: float | None
    token: str


@dataclass(frozen=True, slots=True)
class HeightBracket:
    """Weight-ordered bands for heights up to ``max_height`` inclusive."""

    name: str
    max_height: float | None
    bands: tuple[WeightBand, ...]

    def band_for(self, weight_lb: float) -> WeightBand | None:
        for band in self.bands:
            if band.max_weight is None or weight_lb < band.max_weight:
                return band
        return None


@dataclass(frozen=True, slots=True)
class AdultTable:
    """Sizing rules for one adult bracket.

    ``short_circuit`` bands apply first, by weight alone. Heights outside
    ``[min_height, max_height]`` have no bracket and use ``weight_fallback``.
    """

    short_circuit: tuple[WeightBand, ...]
    min_height: float
    max_height: float
    brackets: tuple[HeightBracket, ...]
    weight_fallback: tuple[WeightBand, ...]

    def bracket_for(self, height_in: float) -> HeightBracket | None:
        if not self.min_height <= height_in <= self.max_height:
            return None
        for bracket in self.brackets:
            if bracket.max_height is None or height_in <= bracket.max_height:
                return bracket
        return None


@dataclass(frozen=True, slots=True)
class KidsBand:
    """Toddler or kids size defined by half-open height and weight ranges."""

    token: str
    min_height: float
    max_height: float
    min_weight: float
    max_weight: float

    def matches(self, height_in: float, weight_lb: float) -> bool:
        return (
            self.min_height <= height_in < self.max_height
            and self.min_weight <= weight_lb < self.max_weight
        )


@dataclass(frozen=True, slots=True)
class KidsTable:
    """Ordered bands plus the height-only thresholds used when no band matches."""

    bands: tuple[KidsBand, ...]
    height_fallback: tuple[tuple[float, str], ...]

    @property
    def top_height(self) -> float:
        return self.bands[-1].max_height

    @property
    def top_weight(self) -> float:
        return self.bands[-1].max_weight

    def band_for(self, height_in: float, weight_lb: float) -> KidsBand | None:
        for band in self.bands:
            if band.matches(height_in, weight_lb):
                return band
        return None

    def token_by_height(self, height_in: float) -> str:
        for limit, token in self.height_fallback:
            if height_in < limit:
                return token
        return self.height_fallback[-1][1]


def _bands(*pairs: tuple[float | None, str]) -> tuple[WeightBand, ...]:
    return tuple(WeightBand(limit, token) for limit, token in pairs)


KIDS_TABLE = KidsTable(
    bands=(
        KidsBand("2T", 33, 36, 24, 30),
        KidsBand("3T", 36, 39, 28, 34),
        KidsBand("4T", 39, 42, 32, 38),
        KidsBand("XS (Size 4-5)", 42, 46, 36, 46),
        KidsBand("S (Size 6-8)", 46, 51, 44, 62),
        KidsBand("M (Size 10-12)", 51, 57, 60, 86),
        KidsBand("L (Size 14-16)", 57, 62, 84, 112),
        KidsBand("XL (Size 18-20)", 62, 65, 110, 130),
    ),
    height_fallback=(
        (36, "2T"),
        (39, "3T"),
        (42, "4T"),
        (46, "XS (Size 4-5)"),
        (51, "S (Size 6-8)"),
        (57, "M (Size 10-12)"),
        (62, "L (Size 14-16)"),
        (65, "XL (Size 18-20)"),
    ),
)

MENS_TABLE = AdultTable(
    short_circuit=_bands((100, "XS"), (110, "S")),
    min_height=48,
    max_height=96,
    brackets=(
        HeightBracket("<=66", 66, _bands((130, "S"), (160, "M"), (185, "L"), (210, "XL"), (None, "XXL"))),
        HeightBracket(
            "67-68",
            68,
            _bands((140, "S"), (170, "M"), (195, "L"), (220, "XL"), (250, "XXL"), (None, "3XL")),
        ),
        HeightBracket(
            "69-70",
            70,
            _bands((145, "S"), (175, "M"), (200, "L"), (230, "XL"), (260, "XXL"), (None, "3XL")),
        ),
        HeightBracket(
            "71-72",
            72,
            _bands(
                (150, "S"), (180, "M"), (210, "L"), (240, "XL"), (270, "XXL"), (300, "3XL"), (None, "4XL"),
            ),
        ),
        HeightBracket(
            "73-74",
            74,
            _bands(
                (155, "S"),
                (185, "M"),
                (215, "L"),
                (245, "XL"),
                (275, "XXL"),
                (305, "3XL"),
                (335, "4XL"),
                (None, "5XL"),
            ),
        ),
        HeightBracket(
            ">=75",
            None,
            _bands(
                (160, "S"),
                (190, "M"),
                (220, "L"),
                (250, "XL"),
                (280, "XXL"),
                (310, "3XL"),
                (340, "4XL"),
                (370, "5XL"),
                (None, "6XL"),
            ),
        ),
    ),
    weight_fallback=_bands((150, "S"), (190, "M"), (None, "L")),
)

WOMENS_TABLE = AdultTable(
    short_circuit=_bands((90, "XS")),
    min_height=48,
    max_height=90,
    brackets=(
        HeightBracket("<=62", 62, _bands((100, "XS"), (120, "S"), (140, "M"), (160, "L"), (185, "XL"), (None, "XXL"))),
        HeightBracket("63-65", 65, _bands((125, "S"), (145, "M"), (165, "L"), (190, "XL"), (None, "XXL"))),
        HeightBracket("66-68", 68, _bands((130, "S"), (150, "M"), (175, "L"), (200, "XL"), (None, "XXL"))),
        HeightBracket(">=69", None, _bands((135, "S"), (160, "M"), (185, "L"), (210, "XL"), (None, "XXL"))),
    ),
    weight_fallback=_bands((120, "S"), (150, "M"), (None, "L")),
)

# Upper BMI bounds, exclusive.
BMI_BANDS = _bands((18.5, "XS"), (20, "S"), (24, "M"), (27, "L"), (30, "XL"), (None, "XXL"))
