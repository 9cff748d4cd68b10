# driver_onboarding/deps.py
from __future__ import annotations

from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from .config import settings
from .db import get_db
from .errors import Forbidden, Unauthenticated
from .models.driver import DriverProfile
from .services import profiles
from .services.documents import DocumentStore
from .services.storage import LocalDocumentStorage
from .utils.security import decode_jwt


# ------------------ Caller identity ------------------

def get_current_user(authorization: Optional[str] = Header(None)) -> dict:
    """
    Resolve the caller from a Bearer JWT. Tokens are issued elsewhere; we
    only need ``sub`` (user id) and an optional ``role``.
    """
    if not authorization:
        raise Unauthenticated("Authentication required")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise Unauthenticated("Bearer token required")

    claims = decode_jwt(token.strip())
    if not claims or not claims.get("sub"):
        raise Unauthenticated("Invalid or expired token")
    return {"id": str(claims["sub"]), "role": (claims.get("role") or "user").lower()}


def is_admin_user(user: dict) -> bool:
    """
    Admin if:
      1) role == 'admin' in the token, or
      2) the user id is listed in ADMIN_USER_IDS.
    """
    if (user.get("role") or "") == "admin":
        return True
    return user.get("id") in settings.admin_user_ids


# ------------------ Ownership guard ------------------

def get_owned_profile(
    driver_id: int,
    user: dict = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> DriverProfile:
    """404 for an unknown driver, 403 when it belongs to someone else."""
    p = profiles.get_profile(db, driver_id)
    if p.user_id != user["id"] and not is_admin_user(user):
        raise Forbidden("This driver profile belongs to another user")
    return p


# ------------------ Document store ------------------

@lru_cache(maxsize=1)
def _default_document_store() -> DocumentStore:
    return DocumentStore(
        storage=LocalDocumentStorage(settings.DOCUMENT_STORAGE_DIR),
        max_bytes=settings.DOCUMENT_MAX_BYTES,
        content_types=settings.document_content_types,
    )


def get_document_store() -> DocumentStore:
    return _default_document_store()
