"""Ad template content pipeline."""
from .classifier import classify
from .creatives import SelectedCreatives, select_creatives
from .errors import DuplicateError, NotFoundError, TemplateError, UnauthorizedError, ValidationError
from .materializer import build_from_row, build_from_task, materialize_for_launch
from .service import TemplateService
from .validators import normalize_cta, validate_row

__all__ = [
    "DuplicateError",
    "NotFoundError",
    "SelectedCreatives",
    "TemplateError",
    "TemplateService",
    "UnauthorizedError",
    "ValidationError",
    "build_from_row",
    "build_from_task",
    "classify",
    "materialize_for_launch",
    "normalize_cta",
    "select_creatives",
    "validate_row",
]
