"""Data passed between the query builder, product sources and the filter."""

from __future__ import annotations

from dataclasses import dataclass, field

from pydantic import BaseModel, ConfigDict, Field

from stylefinder.search.budget import BudgetPredicate, BudgetTier, parse_price
from stylefinder.sizing.classifier import split_label
from stylefinder.sizing.demographics import GenderTag
from stylefinder.sizing.measurements import NotReady


class Product(BaseModel):
    """Catalog item as returned by a product source. Read-only to this package."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, coerce_numbers_to_str=True)

    id: str
    title: str
    price: str
    rating: float = Field(0.0, ge=0.0, le=5.0)
    review_count: int = Field(0, ge=0, alias="reviews")
    image_url: str = Field("", alias="image")
    detail_url: str = Field("", alias="url")
    brand: str = ""
    description: str = ""

    @property
    def price_value(self) -> float | None:
        return parse_price(self.price)


@dataclass(frozen=True, slots=True)
class StylePreference:
    """Style, color, brand and budget choices plus the computed size label."""

    budget: BudgetTier | None
    size: str
    style_tags: tuple[str, ...] = ()
    color_tags: tuple[str, ...] = ()
    brand_tags: tuple[str, ...] = ()
    gender: GenderTag | None = None

    @property
    def effective_style_tags(self) -> tuple[str, ...]:
        return self.style_tags or ("casual",)

    @property
    def size_token(self) -> str:
        parts = split_label(self.size)
        return parts[1] if parts else self.size

    @property
    def department(self) -> str | None:
        parts = split_label(self.size)
        return parts[0] if parts else None

    def ready(self) -> NotReady | None:
        if self.budget is None:
            return NotReady("Budget must be selected.")
        if not self.size.strip():
            return NotReady("Size is not known yet.")
        return None


@dataclass(frozen=True, slots=True)
class SearchSpec:
    """Bounded query terms plus the budget check for their results."""

    terms: tuple[str, ...]
    budget_predicate: BudgetPredicate
    size_label: str = ""
    budget: BudgetTier | None = None
    metadata: dict[str, str] = field(default_factory=dict)

    def to_query_strings(self) -> list[str]:
        """Terms in catalog form, words joined by ``+``."""

        return ["+".join(term.lower().split()) for term in self.terms]
