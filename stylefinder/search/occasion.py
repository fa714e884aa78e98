"""Occasion context and its coarse classification."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from stylefinder.sizing.measurements import NotReady

INDOOR_SEASON = "indoor"
SEASONS = ("spring", "summer", "fall", "winter")


class OccasionClass(str, Enum):
    """Coarse bucket that decides which garment slots are searched."""

    FORMAL = "formal"
    WORK = "work"
    PARTY = "party"
    CASUAL = "casual"


# Checked in order, first substring hit wins. "workout" must precede "work".
_OCCASION_KEYWORDS: tuple[tuple[str, OccasionClass], ...] = (
    ("workout", OccasionClass.CASUAL),
    ("work", OccasionClass.WORK),
    ("office", OccasionClass.WORK),
    ("formal", OccasionClass.FORMAL),
    ("wedding", OccasionClass.FORMAL),
    ("interview", OccasionClass.WORK),
    ("party", OccasionClass.PARTY),
    ("date", OccasionClass.PARTY),
)

_FORMALITY_KEYWORDS: tuple[tuple[str, OccasionClass], ...] = (
    ("black tie", OccasionClass.FORMAL),
    ("formal", OccasionClass.FORMAL),
    ("business", OccasionClass.WORK),
)

_INDOOR_KEYWORDS = ("party", "formal", "workout", "gym", "indoor")
_ATHLETIC_KEYWORDS = ("workout", "gym", "sport", "active")


def _first_hit(text: str, keywords: tuple[tuple[str, OccasionClass], ...]) -> OccasionClass | None:
    lowered = text.lower()
    for keyword, occasion_class in keywords:
        if keyword in lowered:
            return occasion_class
    return None


@dataclass(frozen=True, slots=True)
class OccasionContext:
    """What the outfit is for, as selected in the wizard."""

    occasion: str
    season: str = ""
    activity_or_formality: str = ""
    specific_needs: str = ""

    @property
    def indoor(self) -> bool:
        """Indoor occasions ignore the season."""

        if self.season.strip().lower() == INDOOR_SEASON:
            return True
        lowered = self.occasion.lower()
        return any(keyword in lowered for keyword in _INDOOR_KEYWORDS)

    @property
    def athletic(self) -> bool:
        text = f"{self.occasion} {self.activity_or_formality}".lower()
        return any(keyword in text for keyword in _ATHLETIC_KEYWORDS)

    @property
    def occasion_class(self) -> OccasionClass:
        return classify_occasion(self.occasion, self.activity_or_formality)

    @property
    def season_qualifier(self) -> str | None:
        if self.indoor:
            return None
        season = self.season.strip().lower()
        return season or None

    def ready(self) -> NotReady | None:
        """Return why the context cannot be used yet, or ``None``."""

        if not self.occasion.strip():
            return NotReady("Occasion must be selected.")
        if not self.indoor and not self.season.strip():
            return NotReady("Season must be selected.")
        return None


def classify_occasion(occasion: str, formality: str = "") -> OccasionClass:
    """Bucket free-text occasion input, case-insensitively.

    Work/formal/wedding/interview are checked before party/date, and
    anything else is casual unless the formality field says otherwise.
    """

    found = _first_hit(occasion, _OCCASION_KEYWORDS)
    if found is not None:
        return found
    return _first_hit(formality, _FORMALITY_KEYWORDS) or OccasionClass.CASUAL
