"""Pluggable sizing and query strategies.

The rule tables are the default and the fallback: a generative strategy that
fails or answers with something unusable yields the rule-based result.
"""

from __future__ import annotations

import logging
from typing import Protocol

from stylefinder.metrics.prometheus_exporter import generative_fallback_total
from stylefinder.nlp.generative_client import GenerativeServiceError, GenerativeStylistClient
from stylefinder.search.models import SearchSpec, StylePreference
from stylefinder.search.occasion import OccasionContext
from stylefinder.search.query_builder import QueryBuilder
from stylefinder.sizing.classifier import (
    SizeCategory,
    SizeClassifier,
    SizeMatch,
    SizeResult,
    category_for,
    split_label,
)
from stylefinder.sizing.demographics import Demographic
from stylefinder.sizing.measurements import CanonicalMeasurement, NotReady

logger = logging.getLogger(__name__)


class SizeStrategy(Protocol):
    async def size(self, measurement: CanonicalMeasurement, demographic: Demographic) -> SizeResult:
        ...


class QueryStrategy(Protocol):
    async def build(self, style: StylePreference, occasion: OccasionContext) -> SearchSpec | NotReady:
        ...


class RuleSizeStrategy:
    """Size from the rule tables."""

    def __init__(self, classifier: SizeClassifier | None = None) -> None:
        self.classifier = classifier or SizeClassifier()

    async def size(self, measurement: CanonicalMeasurement, demographic: Demographic) -> SizeResult:
        return self.classifier.classify_detailed(measurement, demographic)


class RuleQueryStrategy:
    """Terms from the deterministic query builder."""

    def __init__(self, builder: QueryBuilder | None = None) -> None:
        self.builder = builder or QueryBuilder()

    async def build(self, style: StylePreference, occasion: OccasionContext) -> SearchSpec | NotReady:
        return self.builder.build(style, occasion)


def _allowed_categories(demographic: Demographic) -> set[str]:
    own = category_for(demographic)
    allowed = {own.value}
    if demographic.is_minor:
        allowed.add(category_for(Demographic(age_years=18, gender=demographic.gender.as_adult())).value)
    return allowed


class GenerativeSizeStrategy:
    """Asks the generative service for a size, rule tables otherwise."""

    def __init__(self, client: GenerativeStylistClient, fallback: RuleSizeStrategy | None = None) -> None:
        self._client = client
        self._fallback = fallback or RuleSizeStrategy()

    async def size(self, measurement: CanonicalMeasurement, demographic: Demographic) -> SizeResult:
        try:
            label = await self._client.determine_size(measurement, demographic)
        except GenerativeServiceError as exc:
            logger.warning("Generative sizing unavailable, using rule tables: %s", exc)
            generative_fallback_total.labels(stage="size").inc()
            return await self._fallback.size(measurement, demographic)

        category, token = split_label(label) or ("", "")
        if category not in _allowed_categories(demographic):
            logger.warning("Generative size %r does not fit %s, using rule tables", label, demographic)
            generative_fallback_total.labels(stage="size").inc()
            return await self._fallback.size(measurement, demographic)
        return SizeResult(SizeCategory(category), token, SizeMatch.GENERATIVE)


class GenerativeQueryStrategy:
    """Asks the generative service for search terms, query builder otherwise."""

    def __init__(self, client: GenerativeStylistClient, fallback: RuleQueryStrategy | None = None) -> None:
        self._client = client
        self._fallback = fallback or RuleQueryStrategy()

    async def build(self, style: StylePreference, occasion: OccasionContext) -> SearchSpec | NotReady:
        rule_spec = await self._fallback.build(style, occasion)
        if isinstance(rule_spec, NotReady):
            return rule_spec

        try:
            terms = await self._client.generate_queries(
                style,
                occasion,
                style.size,
                limit=self._fallback.builder.max_terms,
            )
        except GenerativeServiceError as exc:
            logger.warning("Generative queries unavailable, using query builder: %s", exc)
            generative_fallback_total.labels(stage="query").inc()
            return rule_spec

        if occasion.season_qualifier is None:
            terms = [_without_seasons(term) for term in terms]
        terms = [term for term in terms if term]
        if not terms:
            generative_fallback_total.labels(stage="query").inc()
            return rule_spec
        return SearchSpec(
            terms=tuple(terms),
            budget_predicate=rule_spec.budget_predicate,
            size_label=rule_spec.size_label,
            budget=rule_spec.budget,
            metadata={**rule_spec.metadata, "strategy": "generative"},
        )


_SEASON_WORDS = {"spring", "summer", "fall", "autumn", "winter"}


def _without_seasons(term: str) -> str:
    return " ".join(word for word in term.split() if word.lower() not in _SEASON_WORDS)
