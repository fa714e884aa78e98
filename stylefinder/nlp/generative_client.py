"""Client for size and query generation via the configured LLM provider."""

from __future__ import annotations

import logging
import re
from typing import Sequence

from openai import AsyncOpenAI, OpenAIError

from stylefinder.config.settings import MAX_QUERY_TERMS, Settings, get_settings
from stylefinder.search.models import StylePreference
from stylefinder.search.occasion import OccasionContext
from stylefinder.sizing.classifier import split_label
from stylefinder.sizing.demographics import Demographic
from stylefinder.sizing.measurements import CanonicalMeasurement

logger = logging.getLogger(__name__)

_TOKEN_ALIASES = {
    "SMALL": "S",
    "MEDIUM": "M",
    "LARGE": "L",
    "X-LARGE": "XL",
    "EXTRA LARGE": "XL",
    "XX-LARGE": "XXL",
    "2XL": "XXL",
    "X-SMALL": "XS",
    "EXTRA SMALL": "XS",
}
_LIST_PREFIX = re.compile(r"^\s*(?:[-*•]|\d+[.)])\s*")


class GenerativeServiceError(RuntimeError):
    """Raised when the generative service cannot be reached."""


class GenerativeResponseError(GenerativeServiceError):
    """Raised when the generative service answers with unusable content."""


def parse_size_label(text: str) -> str:
    """Return ``"<Department> <TOKEN>"`` from a model answer or raise."""

    line = text.strip().strip('."\'').splitlines()[0] if text.strip() else ""
    parts = split_label(line)
    if parts is None:
        raise GenerativeResponseError(f"Unrecognised size answer: {text!r}")
    category, token = parts
    token = token.strip().strip('."\'').upper()
    return f"{category} {_TOKEN_ALIASES.get(token, token)}"


def parse_queries(text: str, limit: int = MAX_QUERY_TERMS) -> list[str]:
    """One query per non-empty line, list markers removed, ``+`` turned into spaces."""

    queries: list[str] = []
    for raw_line in text.splitlines():
        line = _LIST_PREFIX.sub("", raw_line).replace("+", " ").strip().strip('"')
        if line:
            queries.append(" ".join(line.split()))
    if not queries:
        raise GenerativeResponseError("Model returned no search queries.")
    return list(dict.fromkeys(queries))[:limit]


class GenerativeStylistClient:
    """Thin client that talks to the AITunnel OpenAI-compatible proxy."""

    def __init__(self, settings: Settings | None = None, client: AsyncOpenAI | None = None) -> None:
        settings = settings or get_settings()
        if client is None and not settings.aitunnel_api_key:
            raise RuntimeError("AITunnel API key is not configured.")

        self._settings = settings
        self._client = client or AsyncOpenAI(
            api_key=settings.aitunnel_api_key,
            base_url=settings.aitunnel_base_url.rstrip("/"),
            timeout=settings.request_timeout,
        )

    async def _complete(self, prompt: str, max_tokens: int) -> str:
        try:
            response = await self._client.chat.completions.create(
                model=self._settings.aitunnel_chat_model,
                messages=[{"role": "user", "content": prompt}],
                max_tokens=max_tokens,
            )
        except OpenAIError as exc:
            raise GenerativeServiceError(f"Generative service call failed: {exc}") from exc

        if not response.choices:
            raise GenerativeResponseError("Model returned no choices.")
        return response.choices[0].message.content or ""

    async def determine_size(self, measurement: CanonicalMeasurement, demographic: Demographic) -> str:
        """Ask the model for a department-prefixed size label."""

        feet, inches = measurement.feet_and_inches
        prompt = (
            "You are a professional clothing size expert. Based on the following measurements and "
            "demographics, determine the most accurate clothing size using industry standards.\n\n"
            "Person Details:\n"
            f"- Height: {feet} feet {inches:.0f} inches ({measurement.height_in:.1f} total inches)\n"
            f"- Weight: {measurement.weight_lb:.0f} pounds\n"
            f"- Age: {demographic.age_years:.0f} years old\n"
            f"- Gender: {demographic.gender.value}\n\n"
            "Provide ONLY the size in this exact format based on gender and age:\n"
            '- For children under 18: "Boys XS", "Girls M", "Boys L", etc.\n'
            '- For adults: "Mens S", "Womens M", "Mens XL", etc.\n\n'
            "Respond with ONLY the size, nothing else."
        )
        content = await self._complete(prompt, max_tokens=20)
        label = parse_size_label(content)
        logger.info("Generative size answer: %s", label)
        return label

    async def generate_queries(
        self,
        style: StylePreference,
        occasion: OccasionContext,
        size_label: str,
        *,
        limit: int = MAX_QUERY_TERMS,
    ) -> list[str]:
        """Ask the model for product search queries, one per line."""

        prompt = (
            "You are an expert fashion stylist and e-commerce search specialist. Generate 5-8 specific "
            "search queries for clothing that would be perfect for this person and occasion.\n\n"
            "Person Profile:\n"
            f"- Size: {size_label}\n"
            f"- Budget: {style.budget.value if style.budget else 'any'}\n"
            f"- Preferred Brands: {_joined(style.brand_tags)}\n"
            f"- Style Preferences: {_joined(style.effective_style_tags)}\n"
            f"- Colors: {_joined(style.color_tags)}\n\n"
            "Occasion Details:\n"
            f"- Event: {occasion.occasion}\n"
            f"- Season: {occasion.season_qualifier or 'not relevant (indoor)'}\n"
            f"- Formality: {occasion.activity_or_formality or 'not specified'}\n"
            f"- Specific Needs: {occasion.specific_needs or 'none'}\n\n"
            "Include the size in every query and keywords for the age group (kids vs adult clothing). "
            "Provide the queries one per line, no numbering or bullets. "
            "Respond with ONLY the search queries, nothing else."
        )
        content = await self._complete(prompt, max_tokens=300)
        return parse_queries(content, limit=limit)

    async def ping(self) -> bool:
        """Return ``True`` if the upstream service responds to a model listing call."""

        models = await self._client.models.list()
        return bool(models.data)

    async def close(self) -> None:
        """Release HTTP resources."""

        await self._client.close()


def _joined(values: Sequence[str]) -> str:
    return ", ".join(values) if values else "any"
