from __future__ import annotations

import sys
from datetime import datetime, timezone
from pathlib import Path
from uuid import uuid4

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from catalog.errors import ValidationError
from catalog.materializer import build_from_row, build_from_task, materialize_for_launch
from catalog.records import (
    AdCopy,
    Budget,
    CompletedTask,
    GeneratedCreative,
    Location,
    Targeting,
    TemplateRecord,
)
from shared.models import CreativeType, TemplateCategory, Visibility


def _row(**overrides: str) -> dict[str, str]:
    row = {
        "TemplateName": "Pizza Deal",
        "PrimaryText": "Get 50% off",
        "Headline": "Hot Pizza",
        "CTA": "Sign Up",
        "Industry": "Food",
        "Goal": "Leads",
    }
    row.update(overrides)
    return row


def _record(**overrides) -> TemplateRecord:
    fields = dict(
        id=uuid4(),
        owner_id=None,
        visibility=Visibility.PUBLIC,
        name="Pizza Deal",
        category=TemplateCategory.RESTAURANT,
        description="Food - Leads",
        objective="OUTCOME_LEADS",
        conversion_method="lead_form",
        targeting=Targeting(
            age_min=25,
            age_max=45,
            interest_keywords=["pizza"],
            location=Location(is_local=True, radius=10, city_name="Mumbai"),
        ),
        budget=Budget(daily_amount=500.0, currency="INR", reasoning="Recommended budget for Food"),
        ad_copy=AdCopy(headlines=["Hot Pizza"], primary_texts=["Get 50% off"], descriptions=["Hot Pizza"], cta="SIGN_UP"),
        image_url=None,
        usage_count=0,
        created_at=datetime.now(timezone.utc),
    )
    fields.update(overrides)
    return TemplateRecord(**fields)


def test_minimal_row_gets_defaults() -> None:
    draft = build_from_row(_row(), TemplateCategory.RESTAURANT)

    assert draft.owner_id is None
    assert draft.visibility is Visibility.PUBLIC
    assert draft.category is TemplateCategory.RESTAURANT
    assert draft.description == "Food - Leads"
    assert draft.objective == "OUTCOME_LEADS"
    assert draft.conversion_method == "lead_form"
    assert draft.ad_copy.cta == "SIGN_UP"
    assert draft.ad_copy.headlines == ["Hot Pizza", "Hot Pizza", "Hot Pizza"]
    assert draft.ad_copy.primary_texts == ["Get 50% off"] * 3
    assert draft.ad_copy.descriptions == ["Hot Pizza"] * 3
    assert draft.budget.daily_amount == 500
    assert draft.budget.currency == "INR"
    assert draft.budget.reasoning == "Recommended budget for Food"
    assert draft.targeting.age_min == 25
    assert draft.targeting.age_max == 45
    assert draft.targeting.interest_keywords == []
    assert draft.targeting.location == Location(is_local=True, radius=10)
    assert draft.image_url is None


def test_optional_columns_are_used() -> None:
    draft = build_from_row(
        _row(
            Description="Best slices in town",
            Headline2="Fresh Pizza",
            PrimaryText3="Order today",
            Budget="1200",
            AgeMin="18",
            AgeMax="35",
            Interests="pizza, , fast food ,",
            IsLocal="FALSE",
            Radius="25",
            Currency="USD",
            BudgetReasoning="Weekend push",
            ImageUrl="https://cdn.example.com/pizza.png",
            Objective="OUTCOME_TRAFFIC",
            ConversionMethod="website",
        ),
        TemplateCategory.RESTAURANT,
    )

    assert draft.description == "Best slices in town"
    assert draft.ad_copy.headlines == ["Hot Pizza", "Fresh Pizza", "Hot Pizza"]
    assert draft.ad_copy.primary_texts == ["Get 50% off", "Get 50% off", "Order today"]
    assert draft.ad_copy.descriptions == ["Best slices in town"] * 3
    assert draft.budget.daily_amount == 1200
    assert draft.budget.currency == "USD"
    assert draft.budget.reasoning == "Weekend push"
    assert draft.targeting.age_min == 18
    assert draft.targeting.age_max == 35
    assert draft.targeting.interest_keywords == ["pizza", "fast food"]
    assert draft.targeting.location == Location(is_local=False, radius=25)
    assert draft.image_url == "https://cdn.example.com/pizza.png"
    assert draft.objective == "OUTCOME_TRAFFIC"
    assert draft.conversion_method == "website"


def test_description_falls_back_to_truncated_headline() -> None:
    headline = "Forty character headline for the launch!"[:40]
    draft = build_from_row(_row(Headline=headline), TemplateCategory.GENERAL)
    assert draft.ad_copy.descriptions[0] == headline[:30]


@pytest.mark.parametrize("budget", ["abc", "0", "-10", "nan"])
def test_unusable_budget_falls_back(budget: str) -> None:
    draft = build_from_row(_row(Budget=budget), TemplateCategory.GENERAL)
    assert draft.budget.daily_amount == 500


def test_inverted_age_range_is_rejected() -> None:
    with pytest.raises(ValidationError) as excinfo:
        build_from_row(_row(AgeMin="50", AgeMax="20"), TemplateCategory.GENERAL)
    assert excinfo.value.rule == "age_range"


def _agent_task(recommendations=None, creatives=None, conversion_method=None) -> CompletedTask:
    return CompletedTask(
        id=uuid4(),
        owner_id=uuid4(),
        recommendations=recommendations or {},
        creatives=creatives or [],
        conversion_method=conversion_method,
    )


def test_recommendations_are_copied() -> None:
    owner_id = uuid4()
    task = _agent_task(
        recommendations={
            "objective": {"chosen": "OUTCOME_SALES"},
            "audience": {
                "ageMin": 21,
                "ageMax": 40,
                "interestKeywords": ["yoga"],
                "location": {"isLocal": True, "radius": 12, "cityName": "Pune"},
            },
            "budget": {"dailyAmount": 800, "currency": "USD", "reasoning": "Launch week"},
            "cta": {"chosen": "book now"},
        },
        creatives=[
            GeneratedCreative(CreativeType.HEADLINE, "A", is_selected=True),
            GeneratedCreative(CreativeType.HEADLINE, "B"),
            GeneratedCreative(CreativeType.PRIMARY_TEXT, "Body"),
        ],
        conversion_method="website",
    )

    draft = build_from_task(task, owner_id, "  Yoga Launch ", TemplateCategory.GYM, "Saved from chat")

    assert draft.owner_id == owner_id
    assert draft.visibility is Visibility.PRIVATE
    assert draft.name == "Yoga Launch"
    assert draft.category is TemplateCategory.GYM
    assert draft.description == "Saved from chat"
    assert draft.objective == "OUTCOME_SALES"
    assert draft.conversion_method == "website"
    assert draft.targeting.age_min == 21
    assert draft.targeting.age_max == 40
    assert draft.targeting.interest_keywords == ["yoga"]
    assert draft.targeting.location == Location(is_local=True, radius=12, city_name="Pune")
    assert draft.budget == Budget(daily_amount=800, currency="USD", reasoning="Launch week")
    assert draft.ad_copy.headlines == ["A"]
    assert draft.ad_copy.primary_texts == ["Body"]
    assert draft.ad_copy.descriptions == []
    assert draft.ad_copy.cta == "BOOK_NOW"


def test_missing_recommendations_use_defaults() -> None:
    draft = build_from_task(_agent_task(), uuid4(), "Blank")

    assert draft.category is TemplateCategory.GENERAL
    assert draft.objective == "OUTCOME_LEADS"
    assert draft.conversion_method == "lead_form"
    assert draft.targeting.age_min == 25
    assert draft.targeting.age_max == 45
    assert draft.targeting.location == Location(is_local=True, radius=5)
    assert draft.budget.daily_amount == 500
    assert draft.budget.currency == "INR"
    assert draft.ad_copy.cta == "SIGN_UP"


def test_loosely_typed_recommendations_are_coerced() -> None:
    task = _agent_task(
        recommendations={
            "audience": {
                "interestKeywords": "yoga, pilates, ",
                "location": {"isLocal": "false", "radius": "10 km", "cityName": "  "},
            },
        }
    )

    draft = build_from_task(task, uuid4(), "Studio")

    assert draft.targeting.interest_keywords == ["yoga", "pilates"]
    assert draft.targeting.location == Location(is_local=False, radius=5)


@pytest.mark.parametrize(
    ("location", "expected"),
    [
        ({"radius": -3}, Location(is_local=True, radius=5)),
        ({"isLocal": "TRUE", "radius": "7.5"}, Location(is_local=True, radius=7.5)),
        ({"isLocal": 0, "radius": None}, Location(is_local=False, radius=5)),
        ("downtown", Location(is_local=True, radius=5)),
    ],
)
def test_task_location_falls_back_per_field(location, expected) -> None:
    task = _agent_task(recommendations={"audience": {"location": location, "interestKeywords": 42}})

    draft = build_from_task(task, uuid4(), "Studio")

    assert draft.targeting.location == expected
    assert draft.targeting.interest_keywords == []


def test_no_overrides_copies_template() -> None:
    record = _record()
    payload = materialize_for_launch(record)

    assert payload.template_id == record.id
    assert payload.headlines == ["Hot Pizza"]
    assert payload.primary_texts == ["Get 50% off"]
    assert payload.cta == "SIGN_UP"
    assert payload.budget == record.budget
    assert payload.targeting == record.targeting


def test_nested_overrides_merge_field_by_field() -> None:
    payload = materialize_for_launch(
        _record(),
        {
            "budget": {"daily_amount": 900},
            "targeting": {"age_max": 55, "location": {"city_name": "Delhi"}},
        },
    )

    assert payload.budget.daily_amount == 900
    assert payload.budget.currency == "INR"
    assert payload.budget.reasoning == "Recommended budget for Food"
    assert payload.targeting.age_min == 25
    assert payload.targeting.age_max == 55
    assert payload.targeting.interest_keywords == ["pizza"]
    assert payload.targeting.location == Location(is_local=True, radius=10, city_name="Delhi")


def test_copy_overrides_replace_lists() -> None:
    payload = materialize_for_launch(
        _record(),
        {"headlines": ["New"], "primary_texts": ["Fresh copy"], "cta": "shop now"},
    )
    assert payload.headlines == ["New"]
    assert payload.primary_texts == ["Fresh copy"]
    assert payload.descriptions == ["Hot Pizza"]
    assert payload.cta == "SHOP_NOW"


def test_none_override_means_absent() -> None:
    payload = materialize_for_launch(_record(), {"headlines": None, "budget": None})
    assert payload.headlines == ["Hot Pizza"]
    assert payload.budget.daily_amount == 500.0


def test_invalid_cta_override_is_rejected() -> None:
    with pytest.raises(ValidationError) as excinfo:
        materialize_for_launch(_record(), {"cta": "subscribe"})
    assert excinfo.value.rule == "cta"


def test_empty_headlines_cannot_launch() -> None:
    with pytest.raises(ValidationError) as excinfo:
        materialize_for_launch(_record(), {"headlines": []})
    assert excinfo.value.rule == "launch_headlines"


def test_bad_budget_override_is_rejected() -> None:
    with pytest.raises(ValidationError) as excinfo:
        materialize_for_launch(_record(), {"budget": {"daily_amount": -1}})
    assert excinfo.value.rule == "budget_amount"


def test_inverted_age_override_is_rejected() -> None:
    with pytest.raises(ValidationError):
        materialize_for_launch(_record(), {"targeting": {"age_min": 60}})


def test_payload_serializes_camel_case() -> None:
    data = materialize_for_launch(_record(image_url="https://cdn.example.com/a.png")).as_dict()
    assert data["primaryTexts"] == ["Get 50% off"]
    assert data["budget"] == {"dailyAmount": 500.0, "currency": "INR", "reasoning": "Recommended budget for Food"}
    assert data["targeting"]["location"] == {"isLocal": True, "radius": 10, "cityName": "Mumbai"}
    assert data["imageUrl"] == "https://cdn.example.com/a.png"
