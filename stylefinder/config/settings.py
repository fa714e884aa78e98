"""Application configuration loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

MAX_QUERY_TERMS = 8


def _load_env_file(path: str = ".env") -> None:
    """Populate os.environ from the provided .env file if it exists."""

    env_path = Path(path)
    if not env_path.exists():
        return

    for line in env_path.read_text(encoding="utf-8").splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#") or "=" not in stripped:
            continue
        key, value = stripped.split("=", 1)
        os.environ.setdefault(key.strip(), value.strip())


@dataclass(frozen=True, slots=True)
class Settings:
    """Centralised project settings based on OS environment variables."""

    environment: str = "dev"
    log_level: str = "INFO"

    size_policy: str = "table"
    sizing_strategy: str = "rules"
    query_strategy: str = "rules"
    product_source: str = "fixtures"

    catalog_base_url: str = ""
    catalog_search_path: str = "/search"
    catalog_api_key: str = ""

    aitunnel_api_key: str = ""
    aitunnel_base_url: str = "https://api.aitunnel.ru/v1"
    aitunnel_chat_model: str = "gpt-4o-mini"

    request_timeout: float = 30.0
    max_query_terms: int = MAX_QUERY_TERMS
    max_results: int = 24
    search_history_path: str = "data/search_history.jsonl"


def _choice(name: str, allowed: tuple[str, ...], default: str) -> str:
    value = os.getenv(name, default).strip().lower()
    return value if value in allowed else default


def _build_settings() -> Settings:
    _load_env_file()

    max_terms = int(os.getenv("MAX_QUERY_TERMS", str(MAX_QUERY_TERMS)))
    return Settings(
        environment=os.getenv("ENVIRONMENT", "dev"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        size_policy=_choice("SIZE_POLICY", ("table", "bmi"), "table"),
        sizing_strategy=_choice("SIZING_STRATEGY", ("rules", "generative"), "rules"),
        query_strategy=_choice("QUERY_STRATEGY", ("rules", "generative"), "rules"),
        product_source=_choice("PRODUCT_SOURCE", ("fixtures", "catalog"), "fixtures"),
        catalog_base_url=os.getenv("CATALOG_BASE_URL", ""),
        catalog_search_path=os.getenv("CATALOG_SEARCH_PATH", "/search"),
        catalog_api_key=os.getenv("CATALOG_API_KEY", ""),
        aitunnel_api_key=os.getenv("AITUNNEL_API_KEY", ""),
        aitunnel_base_url=os.getenv("AITUNNEL_BASE_URL", "https://api.aitunnel.ru/v1"),
        aitunnel_chat_model=os.getenv("AITUNNEL_CHAT_MODEL", "gpt-4o-mini"),
        request_timeout=float(os.getenv("REQUEST_TIMEOUT", "30")),
        max_query_terms=min(max(max_terms, 1), MAX_QUERY_TERMS),
        max_results=int(os.getenv("MAX_RESULTS", "24")),
        search_history_path=os.getenv("SEARCH_HISTORY_PATH", "data/search_history.jsonl"),
    )


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance to avoid re-reading configuration."""

    return _build_settings()
