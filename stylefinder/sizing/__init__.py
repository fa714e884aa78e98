"""Measurement normalization and size classification."""

from .classifier import SizeClassifier, SizeMatch, SizePolicy, SizeResult, classify, size_rank
from .demographics import Demographic, GenderTag, parse_demographic
from .measurements import (
    CanonicalMeasurement,
    HeightUnit,
    NotReady,
    RawMeasurement,
    WeightUnit,
    normalize,
)

__all__ = [
    "CanonicalMeasurement",
    "Demographic",
    "GenderTag",
    "HeightUnit",
    "NotReady",
    "RawMeasurement",
    "SizeClassifier",
    "SizeMatch",
    "SizePolicy",
    "SizeResult",
    "WeightUnit",
    "classify",
    "normalize",
    "parse_demographic",
    "size_rank",
]
