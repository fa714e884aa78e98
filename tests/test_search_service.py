"""Tests for the search orchestration service."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest
import pytest_mock

from stylefinder.config.settings import Settings
from stylefinder.search.budget import BudgetTier
from stylefinder.search.models import Product, SearchSpec, StylePreference
from stylefinder.search.occasion import OccasionContext
from stylefinder.search.product_source import CatalogRequestError, FixtureProductSource
from stylefinder.services.search import SearchStatus, StyleSearchService, build_search_service
from stylefinder.sizing.demographics import Demographic, GenderTag
from stylefinder.sizing.measurements import NotReady, RawMeasurement
from stylefinder.storage.history import SearchHistory
from stylefinder.wizard.state import SubmitDemographic, SubmitOccasion, SubmitStyle, WizardState, reduce

STYLE = StylePreference(budget=BudgetTier.UNDER_50, size="Mens L", gender=GenderTag.MALE)
WORK = OccasionContext("Work/Office", "Winter")


class _StaticSource:
    def __init__(self, prices: list[str]) -> None:
        self._prices = prices

    async def search(self, spec: SearchSpec) -> list[Product]:
        return [Product(id=str(index), title=f"Item {index}", price=price) for index, price in enumerate(self._prices)]


class _FailingSource:
    async def search(self, spec: SearchSpec) -> list[Product]:
        raise CatalogRequestError("Catalog returned 500", status_code=500)


class _GatedSource:
    def __init__(self) -> None:
        self.release = asyncio.Event()
        self.calls = 0

    async def search(self, spec: SearchSpec) -> list[Product]:
        self.calls += 1
        if self.calls == 1:
            await self.release.wait()
        return [Product(id="1", title="Shirt", price="$20")]


@pytest.mark.asyncio
async def test_search_filters_by_budget() -> None:
    service = StyleSearchService(Settings(), _StaticSource(["$45", "$55", "$30"]))

    outcome = await service.search("session", STYLE, WORK)

    assert not isinstance(outcome, NotReady)
    assert outcome.status is SearchStatus.OK
    assert [product.price for product in outcome.products] == ["$45", "$30"]
    assert outcome.total_results == 2
    assert outcome.size_label == "Mens L"
    assert "Mens L dress shirt winter" in outcome.terms


@pytest.mark.asyncio
async def test_nothing_in_budget_is_empty_status() -> None:
    service = StyleSearchService(Settings(), _StaticSource(["$700"]))

    outcome = await service.search("session", STYLE, WORK)

    assert not isinstance(outcome, NotReady)
    assert outcome.status is SearchStatus.EMPTY
    assert outcome.products == []


@pytest.mark.asyncio
async def test_source_failure_is_treated_as_no_candidates() -> None:
    service = StyleSearchService(Settings(), _FailingSource())

    outcome = await service.search("session", STYLE, WORK)

    assert not isinstance(outcome, NotReady)
    assert outcome.status is SearchStatus.SOURCE_ERROR
    assert outcome.products == []
    assert outcome.terms


@pytest.mark.asyncio
async def test_stale_response_is_discarded() -> None:
    source = _GatedSource()
    service = StyleSearchService(Settings(), source)

    first = asyncio.create_task(service.search("session", STYLE, WORK))
    while source.calls == 0:
        await asyncio.sleep(0)
    second = await service.search("session", STYLE, WORK)
    source.release.set()
    stale = await first

    assert not isinstance(second, NotReady) and not isinstance(stale, NotReady)
    assert second.status is SearchStatus.OK
    assert stale.status is SearchStatus.SUPERSEDED
    assert stale.products == []


@pytest.mark.asyncio
async def test_sessions_do_not_supersede_each_other() -> None:
    source = _GatedSource()
    service = StyleSearchService(Settings(), source)

    first = asyncio.create_task(service.search("session-a", STYLE, WORK))
    while source.calls == 0:
        await asyncio.sleep(0)
    await service.search("session-b", STYLE, WORK)
    source.release.set()
    outcome = await first

    assert not isinstance(outcome, NotReady)
    assert outcome.status is SearchStatus.OK


@pytest.mark.asyncio
async def test_incomplete_occasion_is_not_ready() -> None:
    service = StyleSearchService(Settings(), FixtureProductSource())

    assert isinstance(await service.search("session", STYLE, OccasionContext("Picnic")), NotReady)


@pytest.mark.asyncio
async def test_search_is_recorded_in_history(tmp_path: Path) -> None:
    history = SearchHistory(tmp_path / "history.jsonl")
    service = StyleSearchService(Settings(), FixtureProductSource(), history=history)

    await service.search("user-7", STYLE, WORK)
    records = await history.read("user-7")

    assert len(records) == 1
    assert records[0].season == "winter"
    assert records[0].preferences["budget"] == "under-50"
    assert records[0].terms


@pytest.mark.asyncio
async def test_history_failure_does_not_break_search(mocker: pytest_mock.MockerFixture) -> None:
    history = mocker.AsyncMock(spec=SearchHistory)
    history.append.side_effect = OSError("disk full")
    service = StyleSearchService(Settings(), _StaticSource(["$10"]), history=history)

    outcome = await service.search("session", STYLE, WORK)

    assert not isinstance(outcome, NotReady)
    assert outcome.status is SearchStatus.OK


@pytest.mark.asyncio
async def test_determine_size_normalizes_first() -> None:
    service = StyleSearchService(Settings(), FixtureProductSource())
    man = Demographic(age_years=30, gender=GenderTag.MALE)

    sized = await service.determine_size(RawMeasurement(weight_value=140, height_value=5, height_inches=6), man)
    missing = await service.determine_size(RawMeasurement(weight_value=None, height_value=5), man)

    assert not isinstance(sized, NotReady)
    assert sized.label == "Mens M"
    assert isinstance(missing, NotReady)


@pytest.mark.asyncio
async def test_search_wizard_uses_collected_answers() -> None:
    service = StyleSearchService(Settings(), _StaticSource(["$80", "$20"]))
    state = reduce(WizardState(), SubmitDemographic("26-35", "female"))
    state = reduce(state, SubmitStyle(RawMeasurement(weight_value=130, height_value=5, height_inches=5), "50-100"))
    state = reduce(state, SubmitOccasion(WORK))

    outcome = await service.search_wizard("session", state)
    unfinished = await service.search_wizard("session", WizardState())

    assert not isinstance(outcome, NotReady)
    assert outcome.size_label == "Womens M"
    assert [product.price for product in outcome.products] == ["$80"]
    assert isinstance(unfinished, NotReady)


def test_build_search_service_without_key_keeps_rule_strategies() -> None:
    settings = Settings(sizing_strategy="generative", query_strategy="generative", search_history_path="")

    service = build_search_service(settings)

    assert isinstance(service, StyleSearchService)


@pytest.mark.asyncio
async def test_finished_searches_release_their_session() -> None:
    source = _GatedSource()
    service = StyleSearchService(Settings(), source)

    first = asyncio.create_task(service.search("session", STYLE, WORK))
    while source.calls == 0:
        await asyncio.sleep(0)
    assert service.active_sessions == frozenset({"session"})

    await service.search("session", STYLE, WORK)
    source.release.set()
    await first
    await service.search("other", STYLE, OccasionContext("Picnic"))

    assert service.active_sessions == frozenset()
