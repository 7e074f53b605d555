"""Keyword heuristic that maps free text to a template category."""
from __future__ import annotations

from typing import Optional, Sequence, Tuple

from shared.models import TemplateCategory


# Evaluated top to bottom; the first group with any substring hit wins.
# "training" sits in both GYM and EDUCATION, so GYM takes it.
CATEGORY_KEYWORDS: Tuple[Tuple[TemplateCategory, Tuple[str, ...]], ...] = (
    (TemplateCategory.RESTAURANT, ("restaurant", "food", "cafe", "pizza", "delivery")),
    (TemplateCategory.GYM, ("gym", "fitness", "workout", "training")),
    (TemplateCategory.SALON, ("salon", "beauty", "hair", "spa", "makeup")),
    (TemplateCategory.REAL_ESTATE, ("real estate", "property", "apartment", "house")),
    (TemplateCategory.ECOMMERCE, ("ecommerce", "store", "shop", "online shopping")),
    (TemplateCategory.AGENCY, ("agency", "marketing", "consulting")),
    (TemplateCategory.HOME_SERVICES, ("plumb", "electric", "repair", "home service")),
    (TemplateCategory.HEALTHCARE, ("dental", "clinic", "hospital", "healthcare", "doctor")),
    (TemplateCategory.EDUCATION, ("education", "course", "training", "school", "learning")),
    (TemplateCategory.AUTOMOTIVE, ("car", "auto", "vehicle", "dealership")),
    (TemplateCategory.HOSPITALITY, ("hotel", "resort", "travel", "vacation")),
)

DEFAULT_CATEGORY = TemplateCategory.GENERAL


def classify(text: str) -> TemplateCategory:
    lowered = (text or "").lower()
    for category, keywords in CATEGORY_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return category
    return DEFAULT_CATEGORY


def classifier_input(name: str, primary_text: str, industry: Optional[str] = None) -> str:
    """Join the free-text fields a CSV row offers into one classifier input."""

    parts: Sequence[str] = (name or "", primary_text or "", industry or "")
    return " ".join(parts)


__all__ = ["CATEGORY_KEYWORDS", "DEFAULT_CATEGORY", "classifier_input", "classify"]
