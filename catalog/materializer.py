"""Assemble templates from their sources and expand them for launch.

Forward direction: a validated CSV row or a completed agent task becomes a
:class:`TemplateDraft`, with every optional field resolved to a default.
Reverse direction: a stored :class:`TemplateRecord` plus caller overrides
becomes a :class:`LaunchPayload`.
"""
from __future__ import annotations

import uuid
from typing import Any, List, Mapping, Optional

from shared.config import get_settings
from shared.models import TemplateCategory
from shared.sanitizer import sanitize_number

from .creatives import select_creatives
from .errors import ValidationError
from .records import (
    AdCopy,
    Budget,
    CompletedTask,
    LaunchPayload,
    Location,
    Targeting,
    TemplateDraft,
    TemplateRecord,
)
from .validators import normalize_cta, require_allowed_cta


DEFAULT_OBJECTIVE = "OUTCOME_LEADS"
DEFAULT_CONVERSION_METHOD = "lead_form"
DEFAULT_CTA = "SIGN_UP"
DEFAULT_AGE_MIN = 25
DEFAULT_AGE_MAX = 45
DEFAULT_CSV_RADIUS = 10
DEFAULT_TASK_RADIUS = 5
DESCRIPTION_FALLBACK_CHARS = 30


def _text(row: Mapping[str, Any], key: str) -> str:
    value = row.get(key)
    return "" if value is None else str(value).strip()


def _int_or(value: Any, default: int) -> int:
    number = sanitize_number(value, minimum=0)
    return default if number is None else int(number)


def _amount_or(value: Any, default: float) -> float:
    number = sanitize_number(value)
    if number is None or number <= 0:
        return default
    return number


def _variants(row: Mapping[str, Any], key: str, primary: str) -> List[str]:
    values = [primary, _text(row, f"{key}2") or primary, _text(row, f"{key}3") or primary]
    return [value for value in values if value]


def _split_interests(raw: str) -> List[str]:
    if not raw:
        return []
    return [token.strip() for token in raw.split(",") if token.strip()]


def build_from_row(row: Mapping[str, Any], category: TemplateCategory) -> TemplateDraft:
    """Turn a sanitized, validated CSV row into a system-owned template draft."""

    settings = get_settings()
    industry = _text(row, "Industry")
    goal = _text(row, "Goal")
    headline = _text(row, "Headline")
    primary_text = _text(row, "PrimaryText")
    description = _text(row, "Description")

    targeting = Targeting(
        age_min=_int_or(row.get("AgeMin"), DEFAULT_AGE_MIN),
        age_max=_int_or(row.get("AgeMax"), DEFAULT_AGE_MAX),
        interest_keywords=_split_interests(_text(row, "Interests")),
        location=Location(
            is_local=_text(row, "IsLocal").lower() != "false",
            radius=_int_or(row.get("Radius"), DEFAULT_CSV_RADIUS),
        ),
    )
    budget = Budget(
        daily_amount=_amount_or(row.get("Budget"), settings.default_daily_budget),
        currency=_text(row, "Currency") or settings.default_currency,
        reasoning=_text(row, "BudgetReasoning") or f"Recommended budget for {industry}",
    )
    description_primary = description or headline[:DESCRIPTION_FALLBACK_CHARS]
    ad_copy = AdCopy(
        headlines=_variants(row, "Headline", headline),
        primary_texts=_variants(row, "PrimaryText", primary_text),
        descriptions=_variants(row, "Description", description_primary),
        cta=normalize_cta(row.get("CTA")),
    )

    return TemplateDraft.for_owner(
        None,
        name=_text(row, "TemplateName"),
        category=category,
        description=description or f"{industry} - {goal}",
        objective=_text(row, "Objective") or DEFAULT_OBJECTIVE,
        conversion_method=_text(row, "ConversionMethod") or DEFAULT_CONVERSION_METHOD,
        targeting=targeting,
        budget=budget,
        ad_copy=ad_copy,
        image_url=_text(row, "ImageUrl") or None,
    )


def _section(recommendations: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = recommendations.get(key)
    return value if isinstance(value, Mapping) else {}


def _flag(value: Any, default: bool = True) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() != "false"
    return bool(value)


def _task_location(value: Any) -> Location:
    if not isinstance(value, Mapping):
        return Location(is_local=True, radius=DEFAULT_TASK_RADIUS)
    radius = sanitize_number(value.get("radius"), minimum=0)
    city_name = str(value.get("cityName") or "").strip()
    return Location(
        is_local=_flag(value.get("isLocal")),
        radius=DEFAULT_TASK_RADIUS if radius is None else radius,
        city_name=city_name or None,
    )


def _interest_list(value: Any) -> List[str]:
    """Accept either a keyword list or a comma separated string."""

    if isinstance(value, str):
        return _split_interests(value)
    if not isinstance(value, (list, tuple)):
        return []
    return [str(item).strip() for item in value if item is not None and str(item).strip()]


def build_from_task(
    task: CompletedTask,
    owner_id: uuid.UUID,
    name: str,
    category: Optional[TemplateCategory] = None,
    description: Optional[str] = None,
) -> TemplateDraft:
    """Turn a completed task into a private template owned by ``owner_id``.

    Name, category and description come from the caller as-is; the
    classifier is not consulted on this path.
    """

    settings = get_settings()
    recommendations = task.recommendations or {}
    objective = _section(recommendations, "objective")
    audience = _section(recommendations, "audience")
    budget_rec = _section(recommendations, "budget")
    cta_rec = _section(recommendations, "cta")
    selected = select_creatives(task)

    return TemplateDraft.for_owner(
        owner_id,
        name=(name or "").strip(),
        category=category or TemplateCategory.GENERAL,
        description=description,
        objective=objective.get("chosen") or DEFAULT_OBJECTIVE,
        conversion_method=task.conversion_method or DEFAULT_CONVERSION_METHOD,
        targeting=Targeting(
            age_min=_int_or(audience.get("ageMin"), DEFAULT_AGE_MIN) or DEFAULT_AGE_MIN,
            age_max=_int_or(audience.get("ageMax"), DEFAULT_AGE_MAX) or DEFAULT_AGE_MAX,
            interest_keywords=_interest_list(audience.get("interestKeywords")),
            location=_task_location(audience.get("location")),
        ),
        budget=Budget(
            daily_amount=_amount_or(budget_rec.get("dailyAmount"), settings.default_daily_budget),
            currency=budget_rec.get("currency") or settings.default_currency,
            reasoning=budget_rec.get("reasoning"),
        ),
        ad_copy=AdCopy(
            headlines=selected.headlines,
            primary_texts=selected.primary_texts,
            descriptions=selected.descriptions,
            cta=normalize_cta(cta_rec.get("chosen") or DEFAULT_CTA),
        ),
    )


def _override(overrides: Mapping[str, Any], key: str, fallback: Any) -> Any:
    value = overrides.get(key)
    return fallback if value is None else value


def _merge_location(stored: Optional[Location], overrides: Optional[Mapping[str, Any]]) -> Optional[Location]:
    if not overrides:
        return stored
    base = stored or Location()
    return Location(
        is_local=bool(_override(overrides, "is_local", base.is_local)),
        radius=_override(overrides, "radius", base.radius),
        city_name=_override(overrides, "city_name", base.city_name),
    )


def materialize_for_launch(
    template: TemplateRecord, overrides: Optional[Mapping[str, Any]] = None
) -> LaunchPayload:
    """Merge ``overrides`` onto ``template`` field by field.

    Sub-objects are never replaced wholesale: a new ``budget.daily_amount``
    keeps the stored currency, a new ``targeting.location.city_name`` keeps
    the stored radius.  Raises :class:`ValidationError` when the merged
    payload cannot be launched.
    """

    overrides = overrides or {}
    budget_overrides = overrides.get("budget") or {}
    targeting_overrides = overrides.get("targeting") or {}

    budget = Budget(
        daily_amount=_override(budget_overrides, "daily_amount", template.budget.daily_amount),
        currency=_override(budget_overrides, "currency", template.budget.currency),
        reasoning=_override(budget_overrides, "reasoning", template.budget.reasoning),
    )
    targeting = Targeting(
        age_min=_override(targeting_overrides, "age_min", template.targeting.age_min),
        age_max=_override(targeting_overrides, "age_max", template.targeting.age_max),
        interest_keywords=list(
            _override(targeting_overrides, "interest_keywords", template.targeting.interest_keywords)
        ),
        location=_merge_location(template.targeting.location, targeting_overrides.get("location")),
    )

    cta_override = overrides.get("cta")
    cta = require_allowed_cta(cta_override) if cta_override is not None else template.ad_copy.cta

    payload = LaunchPayload(
        template_id=template.id,
        name=template.name,
        objective=template.objective,
        conversion_method=template.conversion_method,
        headlines=list(_override(overrides, "headlines", template.ad_copy.headlines)),
        primary_texts=list(_override(overrides, "primary_texts", template.ad_copy.primary_texts)),
        descriptions=list(_override(overrides, "descriptions", template.ad_copy.descriptions)),
        cta=cta,
        budget=budget,
        targeting=targeting,
        image_url=_override(overrides, "image_url", template.image_url),
    )
    if not payload.headlines:
        raise ValidationError("At least one headline is required to launch", rule="launch_headlines", field="headlines")
    if not payload.primary_texts:
        raise ValidationError(
            "At least one primary text is required to launch", rule="launch_primary_texts", field="primaryTexts"
        )
    if not payload.cta:
        raise ValidationError("A call-to-action is required to launch", rule="cta", field="CTA")
    return payload


__all__ = ["build_from_row", "build_from_task", "materialize_for_launch"]
