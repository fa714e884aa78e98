"""Connectivity checks for the generative service and the product catalog."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable

from stylefinder.config.settings import get_settings
from stylefinder.nlp.generative_client import GenerativeStylistClient
from stylefinder.search.product_source import CatalogProductSource

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class IntegrationCheckResult:
    """Structured result describing the integration check outcome."""

    name: str
    success: bool
    message: str


async def _run_check(
    name: str,
    factory: Callable[[], Awaitable[bool]],
    success_message: str,
) -> IntegrationCheckResult:
    timeout = get_settings().request_timeout
    try:
        result = await asyncio.wait_for(factory(), timeout=timeout)
    except asyncio.TimeoutError:
        logger.warning("%s check timed out after %.0fs", name, timeout)
        return IntegrationCheckResult(name=name, success=False, message=f"No answer within {timeout:.0f}s.")
    except Exception as exc:  # reported to the caller instead of raised
        logger.warning("%s check failed: %s", name, exc)
        return IntegrationCheckResult(name=name, success=False, message=str(exc))

    if result:
        return IntegrationCheckResult(name=name, success=True, message=success_message)
    return IntegrationCheckResult(
        name=name,
        success=False,
        message="Service responded with non-success status.",
    )


async def check_generative() -> IntegrationCheckResult:
    """Ping the generative sizing/query service."""

    async def _ping() -> bool:
        client = GenerativeStylistClient(get_settings())
        try:
            return await client.ping()
        finally:
            await client.close()

    return await _run_check(
        name="Generative service",
        factory=_ping,
        success_message="Generative service is reachable.",
    )


async def check_catalog() -> IntegrationCheckResult:
    """Ping the product catalog."""

    async def _ping() -> bool:
        source = CatalogProductSource(get_settings())
        try:
            return await source.ping()
        finally:
            await source.close()

    return await _run_check(
        name="Catalog",
        factory=_ping,
        success_message="Catalog API is reachable.",
    )


async def run_all_checks() -> list[IntegrationCheckResult]:
    """Execute all integration checks concurrently."""

    return list(await asyncio.gather(check_generative(), check_catalog()))
