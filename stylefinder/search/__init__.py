"""Query building, budget filtering and product sources."""

from .budget import BudgetPredicate, BudgetTier, parse_budget, parse_price
from .models import Product, SearchSpec, StylePreference
from .occasion import OccasionClass, OccasionContext, classify_occasion
from .product_source import CatalogProductSource, FixtureProductSource, ProductSource
from .query_builder import QueryBuilder, build_query
from .results import filter_and_rank

__all__ = [
    "BudgetPredicate",
    "BudgetTier",
    "CatalogProductSource",
    "FixtureProductSource",
    "OccasionClass",
    "OccasionContext",
    "Product",
    "ProductSource",
    "QueryBuilder",
    "SearchSpec",
    "StylePreference",
    "build_query",
    "classify_occasion",
    "filter_and_rank",
    "parse_budget",
    "parse_price",
]
