"""Budget tiers and the price predicates derived from them."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from enum import Enum

_PRICE = re.compile(r"-?\d[\d,]*(?:\.\d+)?")


class BudgetTier(str, Enum):
    """Price ranges offered by the wizard."""

    UNDER_50 = "under-50"
    FROM_50_TO_100 = "50-100"
    FROM_100_TO_200 = "100-200"
    FROM_200_TO_500 = "200-500"
    OVER_500 = "over-500"

    @property
    def predicate(self) -> BudgetPredicate:
        return _PREDICATES[self]


@dataclass(frozen=True, slots=True)
class BudgetPredicate:
    """Price range check; every price belongs to exactly one tier.

    Lower bounds are inclusive and upper bounds exclusive, except around
    ``500``: the 200-500 tier includes 500 and over-500 starts above it.
    """

    lower: float | None
    upper: float | None
    upper_inclusive: bool = False
    lower_inclusive: bool = True

    def __call__(self, price: float) -> bool:
        if self.lower is not None:
            if price < self.lower or (price == self.lower and not self.lower_inclusive):
                return False
        if self.upper is None:
            return True
        return price <= self.upper if self.upper_inclusive else price < self.upper


_PREDICATES = {
    BudgetTier.UNDER_50: BudgetPredicate(None, 50),
    BudgetTier.FROM_50_TO_100: BudgetPredicate(50, 100),
    BudgetTier.FROM_100_TO_200: BudgetPredicate(100, 200),
    BudgetTier.FROM_200_TO_500: BudgetPredicate(200, 500, upper_inclusive=True),
    BudgetTier.OVER_500: BudgetPredicate(500, None, lower_inclusive=False),
}


def parse_budget(value: str | BudgetTier | None) -> BudgetTier | None:
    if isinstance(value, BudgetTier):
        return value
    if not value:
        return None
    try:
        return BudgetTier(value.strip().lower())
    except ValueError:
        return None


def parse_price(value: str | float | int | None) -> float | None:
    """Read ``"$1,299.99"``-style strings or plain numbers; ``None`` when unreadable."""

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else None
    match = _PRICE.search(value)
    if match is None:
        return None
    return float(match.group(0).replace(",", ""))
