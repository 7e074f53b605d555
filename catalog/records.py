"""Structured value objects that flow through the template pipeline.

Nothing in here knows about JSON text columns; encoding happens in
:mod:`catalog.repository` only.
"""
from __future__ import annotations

import enum
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from shared.models import CreativeType, TemplateCategory, Visibility

from .errors import ValidationError


class CallToAction(str, enum.Enum):
    SIGN_UP = "SIGN_UP"
    LEARN_MORE = "LEARN_MORE"
    SHOP_NOW = "SHOP_NOW"
    CONTACT_US = "CONTACT_US"
    APPLY_NOW = "APPLY_NOW"
    GET_STARTED = "GET_STARTED"
    BOOK_NOW = "BOOK_NOW"
    CALL_NOW = "CALL_NOW"
    DOWNLOAD = "DOWNLOAD"
    GET_QUOTE = "GET_QUOTE"


def _drop_none(payload: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in payload.items() if value is not None}


@dataclass
class Location:
    is_local: bool = True
    radius: Optional[float] = None
    city_name: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Location":
        return cls(
            is_local=bool(data.get("isLocal", True)),
            radius=data.get("radius"),
            city_name=data.get("cityName"),
        )

    def as_dict(self) -> Dict[str, Any]:
        return _drop_none({"isLocal": self.is_local, "radius": self.radius, "cityName": self.city_name})


@dataclass
class Targeting:
    age_min: int
    age_max: int
    interest_keywords: List[str] = field(default_factory=list)
    location: Optional[Location] = None

    def __post_init__(self) -> None:
        if self.age_min > self.age_max:
            raise ValidationError(
                f"Minimum age {self.age_min} exceeds maximum age {self.age_max}",
                rule="age_range",
                field="AgeMin",
            )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Targeting":
        location = data.get("location")
        return cls(
            age_min=int(data["ageMin"]),
            age_max=int(data["ageMax"]),
            interest_keywords=list(data.get("interestKeywords") or []),
            location=Location.from_dict(location) if isinstance(location, Mapping) else None,
        )

    def as_dict(self) -> Dict[str, Any]:
        return _drop_none(
            {
                "ageMin": self.age_min,
                "ageMax": self.age_max,
                "interestKeywords": list(self.interest_keywords),
                "location": self.location.as_dict() if self.location else None,
            }
        )


@dataclass
class Budget:
    daily_amount: float
    currency: str
    reasoning: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.daily_amount or self.daily_amount <= 0:
            raise ValidationError(
                "Daily budget must be a positive amount", rule="budget_amount", field="Budget"
            )
        if not self.currency or not self.currency.strip():
            raise ValidationError("Budget currency is required", rule="budget_currency", field="Currency")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Budget":
        return cls(
            daily_amount=data["dailyAmount"],
            currency=data["currency"],
            reasoning=data.get("reasoning"),
        )

    def as_dict(self) -> Dict[str, Any]:
        return _drop_none(
            {"dailyAmount": self.daily_amount, "currency": self.currency, "reasoning": self.reasoning}
        )


@dataclass
class AdCopy:
    headlines: List[str]
    primary_texts: List[str]
    descriptions: List[str]
    cta: str

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AdCopy":
        return cls(
            headlines=list(data.get("headlines") or []),
            primary_texts=list(data.get("primaryTexts") or []),
            descriptions=list(data.get("descriptions") or []),
            cta=str(data["cta"]),
        )

    def as_dict(self) -> Dict[str, Any]:
        return {
            "headlines": list(self.headlines),
            "primaryTexts": list(self.primary_texts),
            "descriptions": list(self.descriptions),
            "cta": self.cta,
        }


def _check_ownership(owner_id: Optional[uuid.UUID], visibility: Visibility) -> None:
    if owner_id is None and visibility != Visibility.PUBLIC:
        raise ValidationError(
            "Templates without an owner must be public", rule="visibility", field="visibility"
        )


@dataclass
class TemplateDraft:
    """A template ready to be persisted; ``id`` is assigned by the repository."""

    owner_id: Optional[uuid.UUID]
    visibility: Visibility
    name: str
    category: TemplateCategory
    objective: str
    conversion_method: str
    targeting: Targeting
    budget: Budget
    ad_copy: AdCopy
    description: Optional[str] = None
    image_url: Optional[str] = None

    def __post_init__(self) -> None:
        _check_ownership(self.owner_id, self.visibility)
        if not self.name or not self.name.strip():
            raise ValidationError("Template name is required", rule="required", field="name")

    @classmethod
    def for_owner(cls, owner_id: Optional[uuid.UUID], **fields: Any) -> "TemplateDraft":
        """System templates (no owner) are public, owned templates start private."""

        visibility = Visibility.PUBLIC if owner_id is None else Visibility.PRIVATE
        return cls(owner_id=owner_id, visibility=visibility, **fields)


@dataclass
class TemplateRecord:
    """A persisted template with its structured fields decoded."""

    id: uuid.UUID
    owner_id: Optional[uuid.UUID]
    visibility: Visibility
    name: str
    category: TemplateCategory
    description: Optional[str]
    objective: str
    conversion_method: str
    targeting: Targeting
    budget: Budget
    ad_copy: AdCopy
    image_url: Optional[str]
    usage_count: int
    created_at: datetime

    def __post_init__(self) -> None:
        _check_ownership(self.owner_id, self.visibility)

    @property
    def is_public(self) -> bool:
        return self.visibility == Visibility.PUBLIC

    def readable_by(self, user_id: Optional[uuid.UUID]) -> bool:
        return self.is_public or (self.owner_id is not None and self.owner_id == user_id)

    def owned_by(self, user_id: Optional[uuid.UUID]) -> bool:
        return self.owner_id is not None and self.owner_id == user_id


@dataclass
class GeneratedCreative:
    type: CreativeType
    content: str
    is_selected: bool = False


@dataclass
class CompletedTask:
    """Read-only view of a finished conversational ad-creation task."""

    id: uuid.UUID
    owner_id: uuid.UUID
    recommendations: Dict[str, Any] = field(default_factory=dict)
    creatives: List[GeneratedCreative] = field(default_factory=list)
    conversion_method: Optional[str] = None


@dataclass
class LaunchPayload:
    """Launch-ready campaign data handed to the publisher."""

    template_id: uuid.UUID
    name: str
    objective: str
    conversion_method: str
    headlines: List[str]
    primary_texts: List[str]
    descriptions: List[str]
    cta: str
    budget: Budget
    targeting: Targeting
    image_url: Optional[str] = None
    usage_count: int = 0

    def as_dict(self) -> Dict[str, Any]:
        return {
            "templateId": str(self.template_id),
            "name": self.name,
            "objective": self.objective,
            "conversionMethod": self.conversion_method,
            "headlines": list(self.headlines),
            "primaryTexts": list(self.primary_texts),
            "descriptions": list(self.descriptions),
            "cta": self.cta,
            "budget": self.budget.as_dict(),
            "targeting": self.targeting.as_dict(),
            "imageUrl": self.image_url,
            "usageCount": self.usage_count,
        }
