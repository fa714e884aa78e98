"""Prometheus exporter helpers."""

from __future__ import annotations

from prometheus_client import Counter


style_search_total = Counter(
    "style_search_total",
    "Total number of product searches by outcome.",
    ["outcome"],
)

size_classification_total = Counter(
    "size_classification_total",
    "Size classifications grouped by the rule that produced the label.",
    ["match"],
)

generative_fallback_total = Counter(
    "generative_fallback_total",
    "Generative strategy calls that fell back to the rule tables.",
    ["stage"],
)
