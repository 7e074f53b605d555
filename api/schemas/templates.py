from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from catalog.records import AdCopy, Budget, LaunchPayload, Location, Targeting, TemplateRecord
from shared.models import TemplateCategory, Visibility


def _not_blank(value: str | None) -> str | None:
    if value is not None and not value.strip():
        raise ValueError("Value cannot be empty")
    return value


class LocationSchema(BaseModel):
    is_local: bool = True
    radius: Optional[float] = Field(None, ge=0)
    city_name: Optional[str] = None

    def to_domain(self) -> Location:
        return Location(is_local=self.is_local, radius=self.radius, city_name=self.city_name)


class TargetingSchema(BaseModel):
    age_min: int = Field(..., ge=0)
    age_max: int = Field(..., ge=0)
    interest_keywords: List[str] = Field(default_factory=list)
    location: Optional[LocationSchema] = None

    def to_domain(self) -> Targeting:
        return Targeting(
            age_min=self.age_min,
            age_max=self.age_max,
            interest_keywords=list(self.interest_keywords),
            location=self.location.to_domain() if self.location else None,
        )

    @classmethod
    def from_domain(cls, targeting: Targeting) -> "TargetingSchema":
        location = targeting.location
        return cls(
            age_min=targeting.age_min,
            age_max=targeting.age_max,
            interest_keywords=list(targeting.interest_keywords),
            location=LocationSchema(
                is_local=location.is_local, radius=location.radius, city_name=location.city_name
            )
            if location
            else None,
        )


class BudgetSchema(BaseModel):
    daily_amount: float = Field(..., gt=0)
    currency: str = "INR"
    reasoning: Optional[str] = None

    def to_domain(self) -> Budget:
        return Budget(daily_amount=self.daily_amount, currency=self.currency, reasoning=self.reasoning)

    @classmethod
    def from_domain(cls, budget: Budget) -> "BudgetSchema":
        return cls(daily_amount=budget.daily_amount, currency=budget.currency, reasoning=budget.reasoning)


class AdCopySchema(BaseModel):
    headlines: List[str] = Field(default_factory=list)
    primary_texts: List[str] = Field(default_factory=list)
    descriptions: List[str] = Field(default_factory=list)
    cta: str

    def to_domain(self) -> AdCopy:
        return AdCopy(
            headlines=list(self.headlines),
            primary_texts=list(self.primary_texts),
            descriptions=list(self.descriptions),
            cta=self.cta,
        )

    @classmethod
    def from_domain(cls, ad_copy: AdCopy) -> "AdCopySchema":
        return cls(
            headlines=list(ad_copy.headlines),
            primary_texts=list(ad_copy.primary_texts),
            descriptions=list(ad_copy.descriptions),
            cta=ad_copy.cta,
        )


class TemplateCreateRequest(BaseModel):
    name: str
    category: Optional[TemplateCategory] = None
    description: Optional[str] = None
    objective: str
    conversion_method: str = "lead_form"
    targeting: TargetingSchema
    budget: BudgetSchema
    ad_copy: AdCopySchema
    image_url: Optional[str] = None

    @field_validator("name", "objective")
    @classmethod
    def not_blank(cls, value: str) -> str:
        return _not_blank(value)


class TemplateFromTaskRequest(BaseModel):
    name: str
    category: Optional[TemplateCategory] = None
    description: Optional[str] = None

    @field_validator("name")
    @classmethod
    def not_blank(cls, value: str) -> str:
        return _not_blank(value)


class TemplateUpdateRequest(BaseModel):
    name: Optional[str] = None
    category: Optional[TemplateCategory] = None
    description: Optional[str] = None
    objective: Optional[str] = None
    conversion_method: Optional[str] = None
    targeting: Optional[TargetingSchema] = None
    budget: Optional[BudgetSchema] = None
    ad_copy: Optional[AdCopySchema] = None
    image_url: Optional[str] = None

    def to_changes(self) -> Dict[str, Any]:
        """Only the fields the client actually sent, with sub-objects as domain values."""

        changes: Dict[str, Any] = {}
        for key in self.model_fields_set:
            value = getattr(self, key)
            changes[key] = value.to_domain() if hasattr(value, "to_domain") else value
        return changes


class VisibilityUpdateRequest(BaseModel):
    visibility: Visibility


class DuplicateTemplateRequest(BaseModel):
    name: Optional[str] = None


class BudgetOverride(BaseModel):
    daily_amount: Optional[float] = Field(None, gt=0)
    currency: Optional[str] = None
    reasoning: Optional[str] = None


class TargetingOverride(BaseModel):
    age_min: Optional[int] = Field(None, ge=0)
    age_max: Optional[int] = Field(None, ge=0)
    interest_keywords: Optional[List[str]] = None
    location: Optional[LocationSchema] = None


class LaunchRequest(BaseModel):
    headlines: Optional[List[str]] = None
    primary_texts: Optional[List[str]] = None
    descriptions: Optional[List[str]] = None
    cta: Optional[str] = None
    budget: Optional[BudgetOverride] = None
    targeting: Optional[TargetingOverride] = None
    image_url: Optional[str] = None

    def to_overrides(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True, exclude_unset=True)


class TemplateResponse(BaseModel):
    id: UUID
    owner_id: Optional[UUID]
    visibility: Visibility
    is_public: bool
    name: str
    category: TemplateCategory
    description: Optional[str]
    objective: str
    conversion_method: str
    targeting: TargetingSchema
    budget: BudgetSchema
    ad_copy: AdCopySchema
    image_url: Optional[str]
    usage_count: int
    created_at: datetime

    model_config = ConfigDict(use_enum_values=True)

    @classmethod
    def from_record(cls, record: TemplateRecord) -> "TemplateResponse":
        return cls(
            id=record.id,
            owner_id=record.owner_id,
            visibility=record.visibility,
            is_public=record.is_public,
            name=record.name,
            category=record.category,
            description=record.description,
            objective=record.objective,
            conversion_method=record.conversion_method,
            targeting=TargetingSchema.from_domain(record.targeting),
            budget=BudgetSchema.from_domain(record.budget),
            ad_copy=AdCopySchema.from_domain(record.ad_copy),
            image_url=record.image_url,
            usage_count=record.usage_count,
            created_at=record.created_at,
        )


class TemplateListResponse(BaseModel):
    templates: List[TemplateResponse] = Field(default_factory=list)
    count: int = 0


class LaunchResponse(BaseModel):
    template_id: UUID
    name: str
    objective: str
    conversion_method: str
    headlines: List[str]
    primary_texts: List[str]
    descriptions: List[str]
    cta: str
    budget: BudgetSchema
    targeting: TargetingSchema
    image_url: Optional[str] = None
    usage_count: int

    @classmethod
    def from_payload(cls, payload: LaunchPayload) -> "LaunchResponse":
        return cls(
            template_id=payload.template_id,
            name=payload.name,
            objective=payload.objective,
            conversion_method=payload.conversion_method,
            headlines=payload.headlines,
            primary_texts=payload.primary_texts,
            descriptions=payload.descriptions,
            cta=payload.cta,
            budget=BudgetSchema.from_domain(payload.budget),
            targeting=TargetingSchema.from_domain(payload.targeting),
            image_url=payload.image_url,
            usage_count=payload.usage_count,
        )
