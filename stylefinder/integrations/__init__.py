"""Integration check helpers."""

from .checks import (
    IntegrationCheckResult,
    check_catalog,
    check_generative,
    run_all_checks,
)

__all__ = [
    "IntegrationCheckResult",
    "check_catalog",
    "check_generative",
    "run_all_checks",
]
