"""Persistence for templates and read access to completed agent tasks.

This is the only module that sees the JSON text stored in the
``targeting``, ``budget`` and ``ad_copy`` columns; everything it returns is
already decoded into :mod:`catalog.records` values.
"""
from __future__ import annotations

import json
import uuid
from typing import Any, Dict, List, Mapping, Optional, Protocol

from sqlalchemy import case, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from shared.models import AdTemplate, AgentTask, TemplateCategory, Visibility

from .records import (
    AdCopy,
    Budget,
    CompletedTask,
    GeneratedCreative,
    Targeting,
    TemplateDraft,
    TemplateRecord,
)


class TemplateStore(Protocol):
    def create(self, draft: TemplateDraft) -> TemplateRecord: ...

    def find_by_name_and_category(self, name: str, category: TemplateCategory) -> List[TemplateRecord]: ...

    def increment_usage(self, template_id: uuid.UUID) -> int: ...

    def find_by_id(self, template_id: uuid.UUID) -> Optional[TemplateRecord]: ...

    def update(self, template_id: uuid.UUID, patch: Mapping[str, Any]) -> Optional[TemplateRecord]: ...

    def delete(self, template_id: uuid.UUID) -> bool: ...

    def list_visible(
        self,
        user_id: Optional[uuid.UUID],
        category: Optional[TemplateCategory] = None,
        search: Optional[str] = None,
    ) -> List[TemplateRecord]: ...


class TaskSource(Protocol):
    def find_task(self, task_id: uuid.UUID) -> Optional[CompletedTask]: ...


_STRUCTURED = {"targeting", "budget", "ad_copy"}
_UPDATABLE = {
    "name",
    "category",
    "description",
    "objective",
    "conversion_method",
    "targeting",
    "budget",
    "ad_copy",
    "image_url",
    "visibility",
}


def _encode(value: Any) -> str:
    return json.dumps(value.as_dict(), ensure_ascii=False)


def to_record(row: AdTemplate) -> TemplateRecord:
    return TemplateRecord(
        id=row.id,
        owner_id=row.owner_id,
        visibility=row.visibility,
        name=row.name,
        category=row.category,
        description=row.description,
        objective=row.objective,
        conversion_method=row.conversion_method,
        targeting=Targeting.from_dict(json.loads(row.targeting)),
        budget=Budget.from_dict(json.loads(row.budget)),
        ad_copy=AdCopy.from_dict(json.loads(row.ad_copy)),
        image_url=row.image_url,
        usage_count=row.usage_count or 0,
        created_at=row.created_at,
    )


class TemplateRepository:
    """SQLAlchemy backed :class:`TemplateStore`."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def _commit(self) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            raise

    def create(self, draft: TemplateDraft) -> TemplateRecord:
        row = AdTemplate(
            id=uuid.uuid4(),
            owner_id=draft.owner_id,
            visibility=draft.visibility,
            name=draft.name,
            category=draft.category,
            description=draft.description,
            objective=draft.objective,
            conversion_method=draft.conversion_method,
            targeting=_encode(draft.targeting),
            budget=_encode(draft.budget),
            ad_copy=_encode(draft.ad_copy),
            image_url=draft.image_url,
            usage_count=0,
        )
        self.session.add(row)
        self._commit()
        self.session.refresh(row)
        return to_record(row)

    def find_by_name_and_category(self, name: str, category: TemplateCategory) -> List[TemplateRecord]:
        stmt = select(AdTemplate).where(AdTemplate.name == name, AdTemplate.category == category)
        return [to_record(row) for row in self.session.scalars(stmt).all()]

    def increment_usage(self, template_id: uuid.UUID) -> int:
        """Bump the usage counter in SQL and return the new value."""

        self.session.execute(
            update(AdTemplate)
            .where(AdTemplate.id == template_id)
            .values(usage_count=AdTemplate.usage_count + 1)
        )
        self.session.commit()
        count = self.session.scalar(select(AdTemplate.usage_count).where(AdTemplate.id == template_id))
        return count or 0

    def find_by_id(self, template_id: uuid.UUID) -> Optional[TemplateRecord]:
        row = self.session.get(AdTemplate, template_id, populate_existing=True)
        return to_record(row) if row else None

    def update(self, template_id: uuid.UUID, patch: Mapping[str, Any]) -> Optional[TemplateRecord]:
        row = self.session.get(AdTemplate, template_id)
        if not row:
            return None
        for key, value in patch.items():
            if key not in _UPDATABLE:
                raise KeyError(f"Field '{key}' cannot be updated")
            setattr(row, key, _encode(value) if key in _STRUCTURED else value)
        self._commit()
        self.session.refresh(row)
        return to_record(row)

    def delete(self, template_id: uuid.UUID) -> bool:
        row = self.session.get(AdTemplate, template_id)
        if not row:
            return False
        self.session.delete(row)
        self.session.commit()
        return True

    def list_visible(
        self,
        user_id: Optional[uuid.UUID],
        category: Optional[TemplateCategory] = None,
        search: Optional[str] = None,
    ) -> List[TemplateRecord]:
        visible = AdTemplate.visibility == Visibility.PUBLIC
        if user_id is not None:
            visible = or_(visible, AdTemplate.owner_id == user_id)
        stmt = select(AdTemplate).where(visible)
        if category is not None:
            stmt = stmt.where(AdTemplate.category == category)
        if search:
            pattern = f"%{search.strip()}%"
            stmt = stmt.where(or_(AdTemplate.name.ilike(pattern), AdTemplate.description.ilike(pattern)))
        public_first = case((AdTemplate.visibility == Visibility.PUBLIC, 0), else_=1)
        stmt = stmt.order_by(
            public_first,
            AdTemplate.usage_count.desc(),
            AdTemplate.created_at.desc(),
        )
        return [to_record(row) for row in self.session.scalars(stmt).all()]


class TaskRepository:
    """Read-only access to tasks produced by the conversational flow."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def find_task(self, task_id: uuid.UUID) -> Optional[CompletedTask]:
        stmt = (
            select(AgentTask)
            .options(selectinload(AgentTask.creatives))
            .where(AgentTask.id == task_id)
        )
        task = self.session.scalars(stmt).one_or_none()
        if not task:
            return None
        recommendations: Dict[str, Any] = task.recommendations or {}
        if isinstance(recommendations, str):
            recommendations = json.loads(recommendations)
        return CompletedTask(
            id=task.id,
            owner_id=task.user_id,
            conversion_method=task.conversion_method,
            recommendations=recommendations,
            creatives=[
                GeneratedCreative(type=creative.type, content=creative.content, is_selected=creative.is_selected)
                for creative in task.creatives
            ],
        )


__all__ = ["TaskRepository", "TaskSource", "TemplateRepository", "TemplateStore", "to_record"]
