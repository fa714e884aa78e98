"""Immutable wizard state and the reducer that advances it.

Every action produces a new :class:`WizardState`; nothing is patched in place.
Incomplete submissions keep the current step and report why in ``not_ready``.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Union

from stylefinder.search.budget import BudgetTier, parse_budget
from stylefinder.search.models import StylePreference
from stylefinder.search.occasion import OccasionContext
from stylefinder.sizing.classifier import SizeClassifier, SizeResult
from stylefinder.sizing.demographics import Demographic, parse_demographic
from stylefinder.sizing.measurements import CanonicalMeasurement, NotReady, RawMeasurement, normalize


class WizardStep(str, Enum):
    """Wizard stages, in order."""

    AGE_GENDER = "age_gender"
    STYLE = "style"
    OCCASION = "occasion"
    RESULTS = "results"

    @property
    def previous(self) -> WizardStep:
        steps = list(WizardStep)
        index = steps.index(self)
        return steps[max(index - 1, 0)]


@dataclass(frozen=True, slots=True)
class SubmitDemographic:
    age: str | float | int | None
    gender: str | None


@dataclass(frozen=True, slots=True)
class SubmitStyle:
    measurement: RawMeasurement
    budget: str | BudgetTier | None
    style_tags: tuple[str, ...] = ()
    color_tags: tuple[str, ...] = ()
    brand_tags: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class SubmitOccasion:
    occasion: OccasionContext


@dataclass(frozen=True, slots=True)
class GoBack:
    pass


@dataclass(frozen=True, slots=True)
class Reset:
    pass


Action = Union[SubmitDemographic, SubmitStyle, SubmitOccasion, GoBack, Reset]


@dataclass(frozen=True, slots=True)
class WizardState:
    """Answers collected so far."""

    step: WizardStep = WizardStep.AGE_GENDER
    demographic: Demographic | None = None
    measurement: CanonicalMeasurement | None = None
    size: SizeResult | None = None
    budget: BudgetTier | None = None
    style_tags: tuple[str, ...] = ()
    color_tags: tuple[str, ...] = ()
    brand_tags: tuple[str, ...] = ()
    occasion: OccasionContext | None = None
    not_ready: NotReady | None = None
    classifier: SizeClassifier = field(default_factory=SizeClassifier, compare=False, repr=False)

    @property
    def size_label(self) -> str:
        return self.size.label if self.size else ""

    def style_preference(self) -> StylePreference:
        return StylePreference(
            budget=self.budget,
            size=self.size_label,
            style_tags=self.style_tags,
            color_tags=self.color_tags,
            brand_tags=self.brand_tags,
            gender=self.demographic.gender if self.demographic else None,
        )


def _resize(state: WizardState) -> SizeResult | None:
    if state.demographic is None or state.measurement is None:
        return None
    return state.classifier.classify_detailed(state.measurement, state.demographic)


def _submit_demographic(state: WizardState, action: SubmitDemographic) -> WizardState:
    demographic = parse_demographic(action.age, action.gender)
    if isinstance(demographic, NotReady):
        return replace(state, not_ready=demographic)
    updated = replace(state, demographic=demographic, step=WizardStep.STYLE, not_ready=None)
    return replace(updated, size=_resize(updated))


def _submit_style(state: WizardState, action: SubmitStyle) -> WizardState:
    measurement = normalize(action.measurement)
    if isinstance(measurement, NotReady):
        return replace(state, not_ready=measurement)
    budget = parse_budget(action.budget)
    if budget is None:
        return replace(state, not_ready=NotReady("Budget must be selected."))

    updated = replace(
        state,
        measurement=measurement,
        budget=budget,
        style_tags=tuple(action.style_tags),
        color_tags=tuple(action.color_tags),
        brand_tags=tuple(action.brand_tags),
        step=WizardStep.OCCASION,
        not_ready=None,
    )
    return replace(updated, size=_resize(updated))


def _submit_occasion(state: WizardState, action: SubmitOccasion) -> WizardState:
    not_ready = action.occasion.ready()
    if not_ready is None and state.size is None:
        not_ready = NotReady("Size is not known yet.")
    if not_ready is not None:
        return replace(state, not_ready=not_ready)
    return replace(state, occasion=action.occasion, step=WizardStep.RESULTS, not_ready=None)


def reduce(state: WizardState, action: Action) -> WizardState:
    """Return the state that follows ``state`` after ``action``."""

    if isinstance(action, SubmitDemographic):
        return _submit_demographic(state, action)
    if isinstance(action, SubmitStyle):
        return _submit_style(state, action)
    if isinstance(action, SubmitOccasion):
        return _submit_occasion(state, action)
    if isinstance(action, GoBack):
        return replace(state, step=state.step.previous, not_ready=None)
    if isinstance(action, Reset):
        return WizardState(classifier=state.classifier)
    raise TypeError(f"Unsupported wizard action: {action!r}")
