"""Turns style and occasion selections into a bounded list of search terms."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from stylefinder.config.settings import MAX_QUERY_TERMS
from stylefinder.search.models import SearchSpec, StylePreference
from stylefinder.search.occasion import OccasionClass, OccasionContext
from stylefinder.sizing.demographics import GenderTag
from stylefinder.sizing.measurements import NotReady


class Slot(str, Enum):
    """Garment categories a search can fill."""

    TOPS = "tops"
    BOTTOMS = "bottoms"
    DRESSES = "dresses"
    OUTERWEAR = "outerwear"


@dataclass(frozen=True, slots=True)
class Garments:
    """Garment keyword per slot for one department; ``None`` skips the slot."""

    tops: str
    bottoms: str
    dresses: str | None
    outerwear: str

    def keyword(self, slot: Slot) -> str | None:
        return getattr(self, slot.value)


_MENSWEAR: dict[OccasionClass, Garments] = {
    OccasionClass.WORK: Garments("dress shirt", "dress pants", None, "blazer"),
    OccasionClass.FORMAL: Garments("dress shirt", "suit pants", None, "suit jacket"),
    OccasionClass.PARTY: Garments("button down shirt", "slim fit chinos", None, "leather jacket"),
    OccasionClass.CASUAL: Garments("t-shirt", "jeans", None, "jacket"),
}

_WOMENSWEAR: dict[OccasionClass, Garments] = {
    OccasionClass.WORK: Garments("blouse", "dress pants", "sheath dress", "blazer"),
    OccasionClass.FORMAL: Garments("silk blouse", "dress pants", "evening gown", "tailored blazer"),
    OccasionClass.PARTY: Garments("going out top", "skirt", "cocktail dress", "leather jacket"),
    OccasionClass.CASUAL: Garments("casual top", "jeans", "casual dress", "cardigan"),
}

_ACTIVEWEAR = {
    False: Garments("athletic shirt", "joggers", None, "track jacket"),
    True: Garments("sports bra", "leggings", None, "track jacket"),
}

_SLOT_ORDER = (Slot.TOPS, Slot.BOTTOMS, Slot.DRESSES, Slot.OUTERWEAR)
_WOMENS_DEPARTMENTS = ("Womens", "Girls")
_NEEDS_WORDS = 6


def _wears_dresses(style: StylePreference) -> bool:
    if style.gender is not None:
        return style.gender in (GenderTag.FEMALE, GenderTag.GIRL)
    return style.department in _WOMENS_DEPARTMENTS


def garments_for(style: StylePreference, occasion: OccasionContext) -> Garments:
    womenswear = style.department in _WOMENS_DEPARTMENTS
    occasion_class = occasion.occasion_class
    if occasion.athletic and occasion_class is OccasionClass.CASUAL:
        return _ACTIVEWEAR[womenswear]
    table = _WOMENSWEAR if womenswear else _MENSWEAR
    return table[occasion_class]


def _term(*parts: str | None) -> str:
    return " ".join(part.strip() for part in parts if part and part.strip())


class QueryBuilder:
    """Builds a :class:`SearchSpec` from style and occasion selections."""

    def __init__(self, max_terms: int = MAX_QUERY_TERMS) -> None:
        self._max_terms = min(max(max_terms, 1), MAX_QUERY_TERMS)

    @property
    def max_terms(self) -> int:
        return self._max_terms

    def build(self, style: StylePreference, occasion: OccasionContext) -> SearchSpec | NotReady:
        not_ready = occasion.ready() or style.ready()
        if not_ready is not None:
            return not_ready

        terms = self._slot_terms(style, occasion)
        terms += self._extra_terms(style, occasion)
        unique = list(dict.fromkeys(terms))[: self._max_terms]

        return SearchSpec(
            terms=tuple(unique),
            budget_predicate=style.budget.predicate,  # type: ignore[union-attr]
            size_label=style.size,
            budget=style.budget,
            metadata={
                "occasion_class": occasion.occasion_class.value,
                "indoor": str(occasion.indoor).lower(),
            },
        )

    def _slot_terms(self, style: StylePreference, occasion: OccasionContext) -> list[str]:
        garments = garments_for(style, occasion)
        season = occasion.season_qualifier
        colors = style.color_tags

        terms: list[str] = []
        for slot in _SLOT_ORDER:
            keyword = garments.keyword(slot)
            if keyword is None:
                continue
            if slot is Slot.DRESSES and not _wears_dresses(style):
                continue
            if slot is Slot.OUTERWEAR and season == "summer":
                continue
            color = colors[len(terms) % len(colors)] if colors else None
            terms.append(_term(style.size, color, keyword, season))
        return terms

    def _extra_terms(self, style: StylePreference, occasion: OccasionContext) -> list[str]:
        season = occasion.season_qualifier
        occasion_word = occasion.occasion_class.value
        garments = garments_for(style, occasion)

        terms = [
            _term(style.size, tag, occasion_word, "outfit", season)
            for tag in style.effective_style_tags
        ]
        terms += [_term(brand, style.size, garments.tops) for brand in style.brand_tags]
        needs = " ".join(occasion.specific_needs.split()[:_NEEDS_WORDS])
        if needs:
            terms.append(_term(style.size, needs))
        return terms


def build_query(
    style: StylePreference,
    occasion: OccasionContext,
    max_terms: int = MAX_QUERY_TERMS,
) -> SearchSpec | NotReady:
    """Search terms and budget predicate for ``style`` and ``occasion``."""

    return QueryBuilder(max_terms).build(style, occasion)
