"""Error kinds raised by the template pipeline."""
from __future__ import annotations

from typing import Optional


class TemplateError(Exception):
    """Base class for every pipeline error; ``str(exc)`` is display ready."""

    kind = "error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(TemplateError, ValueError):
    """Input broke a structural rule; the caller must correct it."""

    kind = "invalid"

    def __init__(self, message: str, *, rule: str, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.rule = rule
        self.field = field


class DuplicateError(TemplateError):
    """A template with the same name and category already exists."""

    kind = "duplicate"

    def __init__(self, name: str, category: str) -> None:
        super().__init__("Duplicate template")
        self.name = name
        self.category = category


class NotFoundError(TemplateError, LookupError):
    kind = "not_found"


class UnauthorizedError(TemplateError, PermissionError):
    kind = "unauthorized"


__all__ = [
    "DuplicateError",
    "NotFoundError",
    "TemplateError",
    "UnauthorizedError",
    "ValidationError",
]
