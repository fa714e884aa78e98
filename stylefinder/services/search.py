"""Search orchestration: size, query, product lookup and budget filtering."""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from stylefinder.config.settings import Settings
from stylefinder.metrics.prometheus_exporter import style_search_total
from stylefinder.nlp.generative_client import GenerativeStylistClient
from stylefinder.nlp.strategies import (
    GenerativeQueryStrategy,
    GenerativeSizeStrategy,
    QueryStrategy,
    RuleQueryStrategy,
    RuleSizeStrategy,
    SizeStrategy,
)
from stylefinder.search.models import Product, SearchSpec, StylePreference
from stylefinder.search.occasion import OccasionContext
from stylefinder.search.product_source import ProductSource, build_product_source
from stylefinder.search.query_builder import QueryBuilder
from stylefinder.search.results import filter_and_rank
from stylefinder.sizing.classifier import SizeClassifier, SizeResult
from stylefinder.sizing.demographics import Demographic
from stylefinder.sizing.measurements import NotReady, RawMeasurement, normalize
from stylefinder.storage.history import SearchHistory, SearchRecord
from stylefinder.wizard.state import WizardState

logger = logging.getLogger(__name__)


class SearchStatus(str, Enum):
    """How a search ended."""

    OK = "ok"
    EMPTY = "empty"
    SOURCE_ERROR = "source_error"
    SUPERSEDED = "superseded"


@dataclass(slots=True)
class SearchOutcome:
    """Everything the results view needs."""

    status: SearchStatus
    products: list[Product] = field(default_factory=list)
    terms: list[str] = field(default_factory=list)
    size_label: str = ""

    @property
    def total_results(self) -> int:
        return len(self.products)


class StyleSearchService:
    """Runs one search per request and discards responses that a newer request replaced."""

    def __init__(
        self,
        settings: Settings,
        product_source: ProductSource,
        *,
        size_strategy: SizeStrategy | None = None,
        query_strategy: QueryStrategy | None = None,
        history: SearchHistory | None = None,
    ) -> None:
        self._settings = settings
        self._source = product_source
        self._size_strategy = size_strategy or RuleSizeStrategy(SizeClassifier(settings.size_policy))
        self._query_strategy = query_strategy or RuleQueryStrategy(QueryBuilder(settings.max_query_terms))
        self._history = history
        self._tokens = itertools.count(1)
        self._latest: dict[str, int] = {}

    async def determine_size(
        self,
        raw: RawMeasurement,
        demographic: Demographic,
    ) -> SizeResult | NotReady:
        """Normalize ``raw`` and size it with the configured strategy."""

        measurement = normalize(raw)
        if isinstance(measurement, NotReady):
            return measurement
        return await self._size_strategy.size(measurement, demographic)

    async def build_spec(self, style: StylePreference, occasion: OccasionContext) -> SearchSpec | NotReady:
        return await self._query_strategy.build(style, occasion)

    async def search(
        self,
        session_id: str,
        style: StylePreference,
        occasion: OccasionContext,
    ) -> SearchOutcome | NotReady:
        """Fetch and filter products for one session.

        A lookup failure counts as zero candidates. If another search for the
        same session started while this one was waiting, this result is
        dropped with status ``superseded``.
        """

        token = next(self._tokens)
        self._latest[session_id] = token
        try:
            return await self._search(session_id, token, style, occasion)
        finally:
            if self._latest.get(session_id) == token:
                del self._latest[session_id]

    @property
    def active_sessions(self) -> frozenset[str]:
        """Sessions with a search still in flight."""

        return frozenset(self._latest)

    async def _search(
        self,
        session_id: str,
        token: int,
        style: StylePreference,
        occasion: OccasionContext,
    ) -> SearchOutcome | NotReady:
        spec = await self.build_spec(style, occasion)
        if isinstance(spec, NotReady):
            return spec

        await self._record(session_id, style, occasion, spec)

        status = SearchStatus.OK
        try:
            candidates = await self._source.search(spec)
        except Exception as exc:  # the product source is an external collaborator
            logger.warning("Product source failed for session %s: %s", session_id, exc)
            candidates = []
            status = SearchStatus.SOURCE_ERROR

        if self._latest.get(session_id) != token:
            logger.info("Discarding stale results for session %s", session_id)
            style_search_total.labels(outcome=SearchStatus.SUPERSEDED.value).inc()
            return SearchOutcome(status=SearchStatus.SUPERSEDED, terms=list(spec.terms), size_label=spec.size_label)

        products = filter_and_rank(candidates, spec.budget_predicate, limit=self._settings.max_results)
        if not products and status is SearchStatus.OK:
            status = SearchStatus.EMPTY
        style_search_total.labels(outcome=status.value).inc()
        return SearchOutcome(
            status=status,
            products=products,
            terms=list(spec.terms),
            size_label=spec.size_label,
        )

    async def search_wizard(self, session_id: str, state: WizardState) -> SearchOutcome | NotReady:
        """Search with the answers collected by a finished wizard."""

        if state.occasion is None or state.size is None:
            return NotReady("Wizard is not complete.")
        return await self.search(session_id, state.style_preference(), state.occasion)

    async def _record(
        self,
        session_id: str,
        style: StylePreference,
        occasion: OccasionContext,
        spec: SearchSpec,
    ) -> None:
        if self._history is None:
            return
        record = SearchRecord(
            user_id=session_id,
            occasion=occasion.occasion,
            season=occasion.season_qualifier or "indoor",
            formality=occasion.activity_or_formality,
            specific_needs=occasion.specific_needs,
            preferences={
                "size": style.size,
                "budget": style.budget.value if style.budget else None,
                "style": list(style.style_tags),
                "colors": list(style.color_tags),
                "brands": list(style.brand_tags),
            },
            terms=list(spec.terms),
        )
        try:
            await self._history.append(record)
        except OSError as exc:
            logger.error("Failed to store search history for %s: %s", session_id, exc)


def build_search_service(settings: Settings) -> StyleSearchService:
    """Wire the service from settings."""

    classifier = SizeClassifier(settings.size_policy)
    size_strategy: SizeStrategy = RuleSizeStrategy(classifier)
    rule_queries = RuleQueryStrategy(QueryBuilder(settings.max_query_terms))
    query_strategy: QueryStrategy = rule_queries

    client: GenerativeStylistClient | None = None
    if settings.sizing_strategy == "generative" or settings.query_strategy == "generative":
        try:
            client = GenerativeStylistClient(settings)
        except RuntimeError as exc:
            logger.warning("Generative strategies disabled, using rule tables: %s", exc)

    if client is not None:
        if settings.sizing_strategy == "generative":
            size_strategy = GenerativeSizeStrategy(client, fallback=RuleSizeStrategy(classifier))
        if settings.query_strategy == "generative":
            query_strategy = GenerativeQueryStrategy(client, fallback=rule_queries)

    history = SearchHistory(Path(settings.search_history_path)) if settings.search_history_path else None
    return StyleSearchService(
        settings,
        build_product_source(settings),
        size_strategy=size_strategy,
        query_strategy=query_strategy,
        history=history,
    )
