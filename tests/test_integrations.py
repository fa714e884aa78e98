"""Tests for external integration connectivity helpers."""

from __future__ import annotations

import pytest
import pytest_mock

from stylefinder.config.settings import get_settings
from stylefinder.integrations.checks import check_catalog, check_generative, run_all_checks


@pytest.fixture(autouse=True)
def _setup_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("AITUNNEL_API_KEY", "test-aitunnel")
    monkeypatch.setenv("AITUNNEL_BASE_URL", "https://aitunnel.test")
    monkeypatch.setenv("CATALOG_BASE_URL", "https://catalog.test")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.mark.asyncio
async def test_check_generative_success(mocker: pytest_mock.MockerFixture) -> None:
    client_mock = mocker.patch("stylefinder.integrations.checks.GenerativeStylistClient", autospec=True)
    instance = client_mock.return_value
    instance.ping = mocker.AsyncMock(return_value=True)
    instance.close = mocker.AsyncMock(return_value=None)

    result = await check_generative()

    assert result.success
    instance.ping.assert_awaited_once()
    instance.close.assert_awaited_once()


@pytest.mark.asyncio
async def test_check_catalog_failure(mocker: pytest_mock.MockerFixture) -> None:
    source_mock = mocker.patch("stylefinder.integrations.checks.CatalogProductSource", autospec=True)
    instance = source_mock.return_value
    instance.ping = mocker.AsyncMock(return_value=False)
    instance.close = mocker.AsyncMock(return_value=None)

    result = await check_catalog()

    assert not result.success
    assert "non-success" in result.message.lower()
    instance.close.assert_awaited_once()


@pytest.mark.asyncio
async def test_check_reports_exception_message(mocker: pytest_mock.MockerFixture) -> None:
    client_mock = mocker.patch("stylefinder.integrations.checks.GenerativeStylistClient", autospec=True)
    instance = client_mock.return_value
    instance.ping = mocker.AsyncMock(side_effect=RuntimeError("connection refused"))
    instance.close = mocker.AsyncMock(return_value=None)

    result = await check_generative()

    assert not result.success
    assert result.message == "connection refused"


@pytest.mark.asyncio
async def test_run_all_checks_returns_both(mocker: pytest_mock.MockerFixture) -> None:
    for name in ("GenerativeStylistClient", "CatalogProductSource"):
        patched = mocker.patch(f"stylefinder.integrations.checks.{name}", autospec=True)
        patched.return_value.ping = mocker.AsyncMock(return_value=True)
        patched.return_value.close = mocker.AsyncMock(return_value=None)

    results = await run_all_checks()

    assert [result.name for result in results] == ["Generative service", "Catalog"]
    assert all(result.success for result in results)
