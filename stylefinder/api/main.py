"""FastAPI entrypoint and HTTP routes."""

from __future__ import annotations

from uuid import uuid4

from fastapi import Depends, FastAPI, HTTPException, Request
from pydantic import BaseModel, ConfigDict, Field

from stylefinder.config.settings import get_settings
from stylefinder.monitoring.logging import configure_logging
from stylefinder.search.budget import parse_budget
from stylefinder.search.models import Product, StylePreference
from stylefinder.search.occasion import OccasionContext
from stylefinder.services.search import SearchStatus, StyleSearchService, build_search_service
from stylefinder.sizing.demographics import Demographic, parse_demographic
from stylefinder.sizing.measurements import HeightUnit, NotReady, RawMeasurement, WeightUnit


class MeasurementPayload(BaseModel):
    """Body measurements as typed into the wizard."""

    model_config = ConfigDict(populate_by_name=True)

    age_range: str | int | None = None
    gender: str | None = None
    weight: float | str | None = None
    weight_unit: WeightUnit = WeightUnit.LB
    height: float | str | None = Field(None, description="Total inches, or centimetres with height_unit=cm")
    height_feet: float | str | None = None
    height_inches: float | str | None = None
    height_unit: HeightUnit = HeightUnit.FT_IN

    def raw_measurement(self) -> RawMeasurement:
        if self.height_unit is HeightUnit.CM or self.height_feet is not None:
            feet_or_cm = self.height if self.height_unit is HeightUnit.CM else self.height_feet
            return RawMeasurement(
                weight_value=self.weight,
                weight_unit=self.weight_unit,
                height_value=feet_or_cm,
                height_inches=self.height_inches,
                height_unit=self.height_unit,
            )
        try:
            total = float(self.height) if self.height is not None else 0.0
        except ValueError:
            total = 0.0
        return RawMeasurement(
            weight_value=self.weight,
            weight_unit=self.weight_unit,
            height_value=total // 12,
            height_inches=total % 12,
        )


class PreferencesPayload(MeasurementPayload):
    style: list[str] = Field(default_factory=list)
    colors: list[str] = Field(default_factory=list)
    brands: list[str] = Field(default_factory=list)
    budget: str | None = None
    size: str | None = None


class OccasionPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    occasion: str = ""
    season: str = ""
    formality: str = Field("", alias="activity_type")
    specific_needs: str = Field("", alias="specificNeeds")

    def context(self) -> OccasionContext:
        return OccasionContext(
            occasion=self.occasion,
            season=self.season,
            activity_or_formality=self.formality,
            specific_needs=self.specific_needs,
        )


class SearchRequest(BaseModel):
    # Requests without a session never supersede each other.
    session_id: str = Field(default_factory=lambda: f"anonymous-{uuid4().hex}")
    preferences: PreferencesPayload
    occasion: OccasionPayload


class SizeResponse(BaseModel):
    size: str
    match: str
    early_transition: bool = False


class SearchResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    status: SearchStatus
    products: list[Product]
    total_results: int = Field(alias="totalResults")
    determined_size: str = Field(alias="determinedSize")
    search_terms: list[str] = Field(alias="searchTerms")


def _not_ready(reason: NotReady) -> HTTPException:
    return HTTPException(status_code=422, detail=reason.reason)


def get_service(request: Request) -> StyleSearchService:
    return request.app.state.search_service


def _demographic(payload: MeasurementPayload) -> Demographic:
    demographic = parse_demographic(payload.age_range, payload.gender)
    if isinstance(demographic, NotReady):
        raise _not_ready(demographic)
    return demographic


def create_app(service: StyleSearchService | None = None) -> FastAPI:
    """Initialise the FastAPI application."""

    settings = get_settings()
    configure_logging(settings)
    app = FastAPI(
        title="StyleFinder API",
        version="0.1.0",
        docs_url="/docs" if settings.environment != "prod" else None,
        redoc_url="/redoc" if settings.environment != "prod" else None,
    )
    app.state.search_service = service or build_search_service(settings)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Simple health endpoint used for readiness probes."""

        return {"status": "ok"}

    @app.post("/size", response_model=SizeResponse, tags=["sizing"])
    async def determine_size(
        payload: MeasurementPayload,
        search_service: StyleSearchService = Depends(get_service),
    ) -> SizeResponse:
        """Size label for the submitted measurements."""

        result = await search_service.determine_size(payload.raw_measurement(), _demographic(payload))
        if isinstance(result, NotReady):
            raise _not_ready(result)
        return SizeResponse(size=result.label, match=result.match.value, early_transition=result.early_transition)

    @app.post("/search", response_model=SearchResponse, response_model_by_alias=True, tags=["search"])
    async def search(
        payload: SearchRequest,
        search_service: StyleSearchService = Depends(get_service),
    ) -> SearchResponse:
        """Products for the submitted preferences and occasion."""

        preferences = payload.preferences
        demographic = _demographic(preferences)
        size_label = preferences.size or ""
        if preferences.weight is not None or preferences.height is not None or not size_label:
            sized = await search_service.determine_size(preferences.raw_measurement(), demographic)
            if isinstance(sized, NotReady):
                raise _not_ready(sized)
            size_label = sized.label

        style = StylePreference(
            budget=parse_budget(preferences.budget),
            size=size_label,
            style_tags=tuple(preferences.style),
            color_tags=tuple(preferences.colors),
            brand_tags=tuple(preferences.brands),
            gender=demographic.gender,
        )
        outcome = await search_service.search(payload.session_id, style, payload.occasion.context())
        if isinstance(outcome, NotReady):
            raise _not_ready(outcome)
        return SearchResponse(
            status=outcome.status,
            products=outcome.products,
            total_results=outcome.total_results,
            determined_size=outcome.size_label,
            search_terms=outcome.terms,
        )

    return app


app = create_app()
