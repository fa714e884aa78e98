"""Budget filtering of candidate products."""

from __future__ import annotations

from typing import Callable, Iterable

from stylefinder.search.models import Product


def filter_and_rank(
    candidates: Iterable[Product],
    predicate: Callable[[float], bool],
    limit: int | None = None,
) -> list[Product]:
    """Keep candidates whose price passes ``predicate``, in source order.

    Products with an unreadable price are dropped. An empty result is a
    valid outcome.
    """

    if limit is not None and limit <= 0:
        return []

    kept: list[Product] = []
    for product in candidates:
        price = product.price_value
        if price is None or not predicate(price):
            continue
        kept.append(product)
        if limit is not None and len(kept) >= limit:
            break
    return kept
