"""Tests for rule and generative size/query strategies."""

from __future__ import annotations

import pytest
import pytest_mock

from stylefinder.nlp.generative_client import GenerativeResponseError, GenerativeServiceError
from stylefinder.nlp.strategies import (
    GenerativeQueryStrategy,
    GenerativeSizeStrategy,
    RuleQueryStrategy,
    RuleSizeStrategy,
)
from stylefinder.search.budget import BudgetTier
from stylefinder.search.models import SearchSpec, StylePreference
from stylefinder.search.occasion import OccasionContext
from stylefinder.sizing.classifier import SizeCategory, SizeMatch
from stylefinder.sizing.demographics import Demographic, GenderTag
from stylefinder.sizing.measurements import CanonicalMeasurement, NotReady

MAN = Demographic(age_years=30, gender=GenderTag.MALE)
TEEN = Demographic(age_years=15, gender=GenderTag.BOY)
MEASUREMENT = CanonicalMeasurement(weight_lb=140, height_in=66)
STYLE = StylePreference(budget=BudgetTier.UNDER_50, size="Mens M", gender=GenderTag.MALE)


@pytest.mark.asyncio
async def test_generative_size_is_used_when_valid(mocker: pytest_mock.MockerFixture) -> None:
    client = mocker.AsyncMock()
    client.determine_size.return_value = "Mens L"

    result = await GenerativeSizeStrategy(client).size(MEASUREMENT, MAN)

    assert result.category is SizeCategory.MENS
    assert result.token == "L"
    assert result.match is SizeMatch.GENERATIVE


@pytest.mark.asyncio
async def test_generative_size_may_move_minor_to_adult(mocker: pytest_mock.MockerFixture) -> None:
    client = mocker.AsyncMock()
    client.determine_size.return_value = "Mens S"

    result = await GenerativeSizeStrategy(client).size(CanonicalMeasurement(weight_lb=120, height_in=66), TEEN)

    assert result.label == "Mens S"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "behaviour",
    [
        {"side_effect": GenerativeServiceError("timeout")},
        {"side_effect": GenerativeResponseError("garbage")},
        {"return_value": "Girls M"},
    ],
)
async def test_generative_size_falls_back_to_rules(
    mocker: pytest_mock.MockerFixture,
    behaviour: dict[str, object],
) -> None:
    client = mocker.AsyncMock()
    client.determine_size = mocker.AsyncMock(**behaviour)

    result = await GenerativeSizeStrategy(client, fallback=RuleSizeStrategy()).size(MEASUREMENT, MAN)

    assert result.label == "Mens M"
    assert result.match is SizeMatch.EXACT


@pytest.mark.asyncio
async def test_generative_queries_replace_rule_terms(mocker: pytest_mock.MockerFixture) -> None:
    client = mocker.AsyncMock()
    client.generate_queries.return_value = ["Mens M navy suit", "Mens M oxford shirt"]

    spec = await GenerativeQueryStrategy(client).build(STYLE, OccasionContext("Wedding", "Spring"))

    assert isinstance(spec, SearchSpec)
    assert spec.terms == ("Mens M navy suit", "Mens M oxford shirt")
    assert spec.metadata["strategy"] == "generative"
    assert spec.budget is BudgetTier.UNDER_50
    assert client.generate_queries.await_args.kwargs["limit"] == 8


@pytest.mark.asyncio
async def test_generative_queries_drop_seasons_indoors(mocker: pytest_mock.MockerFixture) -> None:
    client = mocker.AsyncMock()
    client.generate_queries.return_value = ["Mens M winter party shirt", "winter"]

    spec = await GenerativeQueryStrategy(client).build(STYLE, OccasionContext("Holiday party", "Winter"))

    assert isinstance(spec, SearchSpec)
    assert spec.terms == ("Mens M party shirt",)


@pytest.mark.asyncio
async def test_generative_queries_fall_back_on_error(mocker: pytest_mock.MockerFixture) -> None:
    client = mocker.AsyncMock()
    client.generate_queries.side_effect = GenerativeServiceError("down")
    occasion = OccasionContext("Work", "Winter")

    spec = await GenerativeQueryStrategy(client).build(STYLE, occasion)
    rule_spec = await RuleQueryStrategy().build(STYLE, occasion)

    assert spec == rule_spec


@pytest.mark.asyncio
async def test_generative_queries_not_called_for_incomplete_input(mocker: pytest_mock.MockerFixture) -> None:
    client = mocker.AsyncMock()

    result = await GenerativeQueryStrategy(client).build(STYLE, OccasionContext("Picnic"))

    assert isinstance(result, NotReady)
    client.generate_queries.assert_not_awaited()
