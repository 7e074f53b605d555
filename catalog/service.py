"""Template service: ingestion, catalog management and launch materialization."""
from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, Iterable, List, Mapping, Optional

from shared.models import TemplateCategory, Visibility
from shared.sanitizer import sanitize_object, sanitize_string

from . import telemetry
from .classifier import classifier_input, classify
from .dup_guard import DuplicateDetector
from .errors import (
    DuplicateError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from .materializer import build_from_row, build_from_task, materialize_for_launch
from .records import AdCopy, Budget, LaunchPayload, Targeting, TemplateDraft, TemplateRecord
from .repository import TaskSource, TemplateStore
from .result import ImportReport, RowOutcome, RowStatus
from .validators import require_allowed_cta, validate_row

logger = logging.getLogger(__name__)

FIRST_DATA_ROW = 2


def _clean_name(name: Optional[str]) -> str:
    cleaned = sanitize_string(name)
    if not cleaned:
        raise ValidationError("Template name is required", rule="required", field="name")
    return cleaned


def _clean_description(description: Optional[str]) -> Optional[str]:
    return None if description is None else sanitize_string(description)


class TemplateService:
    """Stateless facade over the template pipeline.

    One instance is built per request or task with its stores injected; it
    holds no state between calls other than the duplicate detector's
    per-instance statistics.
    """

    def __init__(self, store: TemplateStore, tasks: Optional[TaskSource] = None) -> None:
        self.store = store
        self.tasks = tasks
        self.duplicates = DuplicateDetector(store)

    # -- ingestion -----------------------------------------------------

    def create_from_csv(self, row: Mapping[str, Any]) -> TemplateRecord:
        """Sanitize, validate, classify and store one CSV row as a system template."""

        clean = sanitize_object(row)
        error = validate_row(clean)
        if error is not None:
            raise error

        category = classify(
            classifier_input(clean.get("TemplateName", ""), clean.get("PrimaryText", ""), clean.get("Industry"))
        )
        name = str(clean["TemplateName"]).strip()
        if self.duplicates.is_duplicate(name, category):
            raise DuplicateError(name, category.value)

        record = self.store.create(build_from_row(clean, category))
        logger.info("Imported template %s (%s) as %s", record.name, record.category.value, record.id)
        return record

    def import_row(self, row: Mapping[str, Any], row_number: int) -> RowOutcome:
        name = str(row.get("TemplateName") or "").strip() or "Unknown"
        try:
            record = self.create_from_csv(row)
        except DuplicateError as exc:
            outcome = RowOutcome(row=row_number, name=name, status=RowStatus.DUPLICATE, reason=str(exc))
        except ValidationError as exc:
            outcome = RowOutcome(row=row_number, name=name, status=RowStatus.INVALID, reason=str(exc))
        except Exception:
            # The store has already rolled back; later rows still get their turn.
            logger.exception("Failed to store template row %s (%s)", row_number, name)
            outcome = RowOutcome(
                row=row_number, name=name, status=RowStatus.FAILED, reason="Template could not be saved"
            )
        else:
            outcome = RowOutcome(
                row=row_number, name=record.name, status=RowStatus.IMPORTED, template_id=record.id
            )
        telemetry.record_import_outcome(outcome.status.value)
        return outcome

    def import_rows(self, rows: Iterable[Mapping[str, Any]]) -> ImportReport:
        """Import every row independently; one bad row never stops the batch."""

        report = ImportReport()
        for index, row in enumerate(rows, start=FIRST_DATA_ROW):
            report.add(self.import_row(row, index))
        return report

    def create_from_task(
        self,
        task_id: uuid.UUID,
        user_id: uuid.UUID,
        name: str,
        category: Optional[TemplateCategory] = None,
        description: Optional[str] = None,
    ) -> TemplateRecord:
        if self.tasks is None:
            raise NotFoundError("Task not found")
        task = self.tasks.find_task(task_id)
        if task is None:
            raise NotFoundError("Task not found")
        if task.owner_id != user_id:
            raise UnauthorizedError("Unauthorized")

        draft = build_from_task(task, user_id, _clean_name(name), category, _clean_description(description))
        record = self.store.create(draft)
        logger.info("Created template %s from task %s", record.id, task_id)
        return record

    def create_template(
        self,
        owner_id: Optional[uuid.UUID],
        *,
        name: str,
        objective: str,
        conversion_method: str,
        targeting: Targeting,
        budget: Budget,
        ad_copy: AdCopy,
        category: Optional[TemplateCategory] = None,
        description: Optional[str] = None,
        image_url: Optional[str] = None,
    ) -> TemplateRecord:
        ad_copy.cta = require_allowed_cta(ad_copy.cta)
        draft = TemplateDraft.for_owner(
            owner_id,
            name=_clean_name(name),
            category=category or TemplateCategory.GENERAL,
            description=_clean_description(description),
            objective=objective,
            conversion_method=conversion_method,
            targeting=targeting,
            budget=budget,
            ad_copy=ad_copy,
            image_url=image_url,
        )
        return self.store.create(draft)

    # -- catalog -------------------------------------------------------

    def list_templates(
        self,
        user_id: uuid.UUID,
        category: Optional[TemplateCategory] = None,
        search: Optional[str] = None,
    ) -> List[TemplateRecord]:
        return self.store.list_visible(user_id, category=category, search=search)

    def get_template(self, template_id: uuid.UUID, user_id: Optional[uuid.UUID]) -> TemplateRecord:
        template = self.store.find_by_id(template_id)
        if template is None:
            raise NotFoundError("Template not found")
        if not template.readable_by(user_id):
            raise UnauthorizedError("Access denied")
        return template

    def _owned(self, template_id: uuid.UUID, user_id: uuid.UUID) -> TemplateRecord:
        template = self.store.find_by_id(template_id)
        if template is None:
            raise NotFoundError("Template not found")
        if not template.owned_by(user_id):
            raise UnauthorizedError("Unauthorized")
        return template

    def update_template(
        self, template_id: uuid.UUID, user_id: uuid.UUID, changes: Mapping[str, Any]
    ) -> TemplateRecord:
        """Apply owner edits; blank scalar fields are ignored, sub-objects replace whole."""

        self._owned(template_id, user_id)
        patch: Dict[str, Any] = {}
        name = sanitize_string(changes.get("name"))
        if name:
            patch["name"] = name
        for key in ("category", "objective", "conversion_method"):
            if changes.get(key):
                patch[key] = changes[key]
        if "description" in changes:
            patch["description"] = _clean_description(changes["description"])
        if "image_url" in changes:
            patch["image_url"] = changes["image_url"]
        for key in ("targeting", "budget", "ad_copy"):
            if changes.get(key) is not None:
                patch[key] = changes[key]
        if "ad_copy" in patch:
            patch["ad_copy"].cta = require_allowed_cta(patch["ad_copy"].cta)

        updated = self.store.update(template_id, patch) if patch else self.store.find_by_id(template_id)
        if updated is None:
            raise NotFoundError("Template not found")
        return updated

    def delete_template(self, template_id: uuid.UUID, user_id: uuid.UUID) -> None:
        self._owned(template_id, user_id)
        if not self.store.delete(template_id):
            raise NotFoundError("Template not found")
        logger.info("Deleted template %s", template_id)

    def set_visibility(
        self, template_id: uuid.UUID, user_id: uuid.UUID, visibility: Visibility
    ) -> TemplateRecord:
        template = self._owned(template_id, user_id)
        if template.visibility == visibility:
            return template
        updated = self.store.update(template_id, {"visibility": visibility})
        if updated is None:
            raise NotFoundError("Template not found")
        return updated

    def duplicate_template(
        self, template_id: uuid.UUID, user_id: uuid.UUID, new_name: Optional[str] = None
    ) -> TemplateRecord:
        source = self.get_template(template_id, user_id)
        draft = TemplateDraft.for_owner(
            user_id,
            name=sanitize_string(new_name) or f"{source.name} (Copy)",
            category=source.category,
            description=source.description,
            objective=source.objective,
            conversion_method=source.conversion_method,
            targeting=source.targeting,
            budget=source.budget,
            ad_copy=source.ad_copy,
            image_url=source.image_url,
        )
        return self.store.create(draft)

    # -- launch --------------------------------------------------------

    def launch(
        self,
        template_id: uuid.UUID,
        user_id: uuid.UUID,
        overrides: Optional[Mapping[str, Any]] = None,
    ) -> LaunchPayload:
        """Build the launch payload, then count the use.

        The usage counter is only bumped once the payload assembled cleanly.
        """

        template = self.get_template(template_id, user_id)
        payload = materialize_for_launch(template, overrides)
        payload.usage_count = self.store.increment_usage(template.id)
        telemetry.record_launch()
        logger.info("Materialized template %s for launch by %s", template.id, user_id)
        return payload


__all__ = ["TemplateService"]
