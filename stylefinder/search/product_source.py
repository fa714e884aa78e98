"""Product sources that turn a :class:`SearchSpec` into candidate products."""

from __future__ import annotations

import asyncio
import hashlib
import logging
from typing import Any, Mapping, Protocol
from urllib.parse import quote_plus

import httpx
from pydantic import ValidationError

from stylefinder.config.settings import Settings
from stylefinder.search.models import Product, SearchSpec

logger = logging.getLogger(__name__)


class CatalogRequestError(RuntimeError):
    """Raised when the catalog responds with an error or cannot be reached."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class ProductSource(Protocol):
    """Anything that can look up products for a search."""

    async def search(self, spec: SearchSpec) -> list[Product]:
        ...


class FixtureProductSource:
    """Offline source that derives one product per search term.

    Values are picked from fixed lists by a hash of the term, so the same
    spec always yields the same products.
    """

    PRICES = (
        "$19.99",
        "$24.99",
        "$29.99",
        "$34.99",
        "$39.99",
        "$44.99",
        "$49.99",
        "$59.99",
        "$69.99",
        "$79.99",
        "$129.99",
        "$249.99",
        "$599.99",
    )
    BRANDS = ("Nike", "Adidas", "Levi's", "Gap", "H&M", "Zara", "Uniqlo", "Calvin Klein")
    MAX_PRODUCTS = 6

    async def search(self, spec: SearchSpec) -> list[Product]:
        products: list[Product] = []
        for index, term in enumerate(spec.terms[: self.MAX_PRODUCTS]):
            digest = int(hashlib.sha1(term.encode("utf-8")).hexdigest(), 16)
            title = self._title(term, spec.size_label)
            products.append(
                Product(
                    id=f"fixture-{digest % 10**8:08d}-{index}",
                    title=title,
                    price=self.PRICES[digest % len(self.PRICES)],
                    rating=round(4.0 + (digest % 100) / 100, 1),
                    review_count=100 + digest % 900,
                    image_url=f"https://images.unsplash.com/photo-{1500000000000 + digest % 10**8}?w=300&h=300&fit=crop",
                    detail_url=f"https://www.amazon.com/s?k={quote_plus(term)}&ref=sr_st_relevancerank",
                    brand=self.BRANDS[(digest // 7) % len(self.BRANDS)],
                    description=f"Recommended {title.lower()} for your style and occasion.",
                ),
            )
        return products

    @staticmethod
    def _title(term: str, size_label: str) -> str:
        words = term.replace("+", " ").split()
        formatted = " ".join(word[:1].upper() + word[1:].lower() for word in words)
        return f"{formatted} ({size_label})" if size_label else formatted


class CatalogProductSource:
    """HTTP catalog search, one request per term, run concurrently."""

    def __init__(self, settings: Settings, client: httpx.AsyncClient | None = None) -> None:
        if not settings.catalog_base_url:
            raise RuntimeError("Catalog base URL is not configured.")

        self._settings = settings
        headers = {}
        if settings.catalog_api_key:
            headers["Authorization"] = f"Bearer {settings.catalog_api_key}"
        self._client = client or httpx.AsyncClient(
            base_url=settings.catalog_base_url.rstrip("/"),
            timeout=settings.request_timeout,
            headers=headers,
        )

    async def close(self) -> None:
        """Close the underlying HTTP client."""

        await self._client.aclose()

    async def ping(self) -> bool:
        """Return ``True`` if the catalog answers a trivial query."""

        response = await self._client.get(self._settings.catalog_search_path, params={"query": "shirt"})
        return response.is_success

    async def search(self, spec: SearchSpec) -> list[Product]:
        tasks = [asyncio.create_task(self._search_term(query)) for query in spec.to_query_strings()]
        try:
            batches = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        seen: set[str] = set()
        products: list[Product] = []
        for batch in batches:
            for product in batch:
                if product.id in seen:
                    continue
                seen.add(product.id)
                products.append(product)
        return products

    async def _search_term(self, query: str) -> list[Product]:
        try:
            response = await self._client.get(self._settings.catalog_search_path, params={"query": query})
            response.raise_for_status()
        except httpx.TimeoutException as exc:
            raise CatalogRequestError("Catalog request timed out.") from exc
        except httpx.HTTPStatusError as exc:
            raise CatalogRequestError(
                f"Catalog returned {exc.response.status_code}: {exc.response.text}",
                status_code=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            raise CatalogRequestError(f"Catalog request failed: {exc}") from exc

        if not response.content:
            return []
        try:
            payload = response.json()
        except ValueError as exc:
            raise CatalogRequestError("Catalog returned a non-JSON body.", status_code=response.status_code) from exc
        return self._parse_products(payload)

    @staticmethod
    def _parse_products(payload: Any) -> list[Product]:
        if isinstance(payload, Mapping):
            payload = payload.get("products") or []
        if not isinstance(payload, list):
            return []

        products: list[Product] = []
        for entry in payload:
            try:
                products.append(Product.model_validate(entry))
            except ValidationError:
                logger.warning("Skipping malformed catalog entry: %s", entry)
        return products


def build_product_source(settings: Settings) -> ProductSource:
    """Pick the configured product source."""

    if settings.product_source == "catalog":
        return CatalogProductSource(settings)
    return FixtureProductSource()
