from __future__ import annotations

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from catalog.repository import TaskRepository, TemplateRepository
from catalog.service import TemplateService
from shared.db import get_db
from shared.models import User
from shared.security import get_user_by_token

http_bearer = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(http_bearer),
    session: Session = Depends(get_db),
) -> User:
    if credentials is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing credentials")
    user = get_user_by_token(session, credentials.credentials)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    return user


def get_template_service(session: Session = Depends(get_db)) -> TemplateService:
    return TemplateService(TemplateRepository(session), TaskRepository(session))
