"""Operator-facing import logs persisted alongside each batch."""
from __future__ import annotations

import logging
import uuid
from typing import Any, Dict

from sqlalchemy.orm import Session

from .models import ImportLog

logger = logging.getLogger(__name__)

_LEVELS = {"debug": logging.DEBUG, "info": logging.INFO, "warning": logging.WARNING, "error": logging.ERROR}


def emit_log(
    session: Session,
    batch_id: uuid.UUID,
    message: str,
    *,
    level: str = "info",
    metadata: Dict[str, Any] | None = None,
) -> ImportLog:
    """Persist a log entry for an import batch and mirror it to the process log."""

    metadata = metadata or {}
    entry = ImportLog(
        id=uuid.uuid4(),
        batch_id=batch_id,
        message=message,
        level=level,
        data=metadata,
    )
    session.add(entry)
    session.commit()
    session.refresh(entry)

    logger.log(_LEVELS.get(level, logging.INFO), "[import %s] %s", batch_id, message, extra={"metadata": metadata})
    return entry
