"""Tests for fixture and HTTP catalog product sources."""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable

import httpx
import pytest

from stylefinder.config.settings import Settings
from stylefinder.search.budget import BudgetTier
from stylefinder.search.models import SearchSpec
from stylefinder.search.product_source import (
    CatalogProductSource,
    CatalogRequestError,
    FixtureProductSource,
    build_product_source,
)


def _spec(*terms: str) -> SearchSpec:
    return SearchSpec(
        terms=terms,
        budget_predicate=BudgetTier.UNDER_50.predicate,
        size_label="Mens L",
        budget=BudgetTier.UNDER_50,
    )


def _catalog(
    handler: Callable[[httpx.Request], httpx.Response | Awaitable[httpx.Response]],
) -> CatalogProductSource:
    settings = Settings(catalog_base_url="https://catalog.test", catalog_api_key="secret")
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="https://catalog.test")
    return CatalogProductSource(settings, client=client)


@pytest.mark.asyncio
async def test_fixture_source_is_deterministic() -> None:
    source = FixtureProductSource()
    spec = _spec("Mens L dress shirt winter", "Mens L dress pants winter")

    first = await source.search(spec)
    second = await source.search(spec)

    assert first == second
    assert len(first) == 2
    assert first[0].title == "Mens L Dress Shirt Winter (Mens L)"
    assert all(product.price_value is not None for product in first)


@pytest.mark.asyncio
async def test_fixture_source_limits_products() -> None:
    spec = _spec(*(f"Mens L item {index}" for index in range(8)))

    products = await FixtureProductSource().search(spec)

    assert len(products) == FixtureProductSource.MAX_PRODUCTS


@pytest.mark.asyncio
async def test_catalog_queries_each_term_and_dedupes() -> None:
    seen_queries: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen_queries.append(request.url.params["query"])
        return httpx.Response(
            200,
            json={
                "products": [
                    {"id": 1, "title": "Oxford shirt", "price": "$45.00", "reviews": 12, "url": "https://shop.test/1"},
                    {"id": "bad", "title": "Broken", "price": "$10", "rating": 9},
                ],
            },
        )

    source = _catalog(handler)
    products = await source.search(_spec("Mens L dress shirt", "Mens L blazer"))
    await source.close()

    assert sorted(seen_queries) == ["mens+l+blazer", "mens+l+dress+shirt"]
    assert [product.id for product in products] == ["1"]
    assert products[0].review_count == 12
    assert products[0].detail_url == "https://shop.test/1"


@pytest.mark.asyncio
async def test_catalog_error_status_is_wrapped() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="maintenance")

    source = _catalog(handler)

    with pytest.raises(CatalogRequestError) as exc_info:
        await source.search(_spec("Mens L jeans"))
    await source.close()

    assert exc_info.value.status_code == 503


@pytest.mark.asyncio
async def test_catalog_ping() -> None:
    source = _catalog(lambda request: httpx.Response(200, json=[]))

    assert await source.ping()
    await source.close()


def test_catalog_requires_base_url() -> None:
    with pytest.raises(RuntimeError):
        CatalogProductSource(Settings())


def test_build_product_source_defaults_to_fixtures() -> None:
    assert isinstance(build_product_source(Settings()), FixtureProductSource)


@pytest.mark.asyncio
async def test_catalog_non_json_body_is_wrapped() -> None:
    source = _catalog(lambda request: httpx.Response(200, text="<html>busy</html>"))

    with pytest.raises(CatalogRequestError) as exc_info:
        await source.search(_spec("Mens L jeans"))
    await source.close()

    assert exc_info.value.status_code == 200


@pytest.mark.asyncio
async def test_catalog_failure_cancels_remaining_requests() -> None:
    cancelled: list[str] = []

    async def handler(request: httpx.Request) -> httpx.Response:
        query = request.url.params["query"]
        if "slow" in query:
            try:
                await asyncio.Event().wait()
            except asyncio.CancelledError:
                cancelled.append(query)
                raise
        return httpx.Response(500, text="boom")

    source = _catalog(handler)

    with pytest.raises(CatalogRequestError):
        await source.search(_spec("Mens L slow coat", "Mens L jeans"))
    await source.close()

    assert cancelled == ["mens+l+slow+coat"]
