"""Tests for occasion classification."""

from __future__ import annotations

import pytest

from stylefinder.search.occasion import OccasionClass, OccasionContext, classify_occasion
from stylefinder.sizing.measurements import NotReady


@pytest.mark.parametrize(
    ("occasion", "expected"),
    [
        ("Work/Office", OccasionClass.WORK),
        ("Job Interview", OccasionClass.WORK),
        ("Wedding", OccasionClass.FORMAL),
        ("Formal Event", OccasionClass.FORMAL),
        ("Office party", OccasionClass.WORK),
        ("Birthday Party", OccasionClass.PARTY),
        ("Date Night", OccasionClass.PARTY),
        ("Workout", OccasionClass.CASUAL),
        ("Weekend brunch", OccasionClass.CASUAL),
    ],
)
def test_classify_occasion(occasion: str, expected: OccasionClass) -> None:
    assert classify_occasion(occasion) is expected


def test_formality_decides_when_occasion_is_unknown() -> None:
    assert classify_occasion("Gala", "Black Tie") is OccasionClass.FORMAL
    assert classify_occasion("Conference", "business casual") is OccasionClass.WORK


def test_indoor_occasions_drop_season() -> None:
    context = OccasionContext(occasion="Birthday Party", season="Winter")

    assert context.indoor
    assert context.season_qualifier is None


def test_outdoor_occasion_keeps_season() -> None:
    context = OccasionContext(occasion="Work/Office", season="Winter")

    assert not context.indoor
    assert context.season_qualifier == "winter"


def test_season_is_required_only_outdoors() -> None:
    assert OccasionContext(occasion="Gym session").ready() is None
    assert isinstance(OccasionContext(occasion="Picnic").ready(), NotReady)
    assert isinstance(OccasionContext(occasion=" ", season="Fall").ready(), NotReady)
