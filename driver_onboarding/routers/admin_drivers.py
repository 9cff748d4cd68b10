# driver_onboarding/routers/admin_drivers.py
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..admin.security import require_admin
from ..db import get_db
from ..deps import get_document_store
from ..schemas.driver import (
    DeactivateRequest,
    RejectRequest,
    VerifyRequest,
    document_to_public,
    ok,
    profile_to_public,
)
from ..services import verification
from ..services.documents import DocumentStore

# verification gate, never reachable by the driver
router = APIRouter(
    prefix="/api/admin/drivers",
    tags=["admin-drivers"],
    dependencies=[Depends(require_admin)],
)


@router.get("/pending")
def api_admin_pending(
    db: Session = Depends(get_db),
    store: DocumentStore = Depends(get_document_store),
):
    rows = verification.list_pending(db)
    return ok([
        {
            **profile_to_public(p),
            "documents": [document_to_public(d) for d in store.list(db, p.id)],
        }
        for p in rows
    ])


@router.post("/{driver_id}/verify")
def api_admin_verify(
    driver_id: int,
    payload: VerifyRequest | None = None,
    db: Session = Depends(get_db),
):
    p = verification.verify_driver(db, driver_id, notes=payload.notes if payload else None)
    return ok(profile_to_public(p))


@router.post("/{driver_id}/reject")
def api_admin_reject(
    driver_id: int,
    payload: RejectRequest,
    db: Session = Depends(get_db),
    store: DocumentStore = Depends(get_document_store),
):
    p = verification.reject_driver(
        db, store, driver_id, payload.reason,
        hard=payload.hard,
        document_types=payload.document_types,
    )
    return ok(profile_to_public(p))


@router.post("/{driver_id}/deactivate")
def api_admin_deactivate(
    driver_id: int,
    payload: DeactivateRequest | None = None,
    db: Session = Depends(get_db),
):
    p = verification.deactivate_driver(db, driver_id, reason=payload.reason if payload else None)
    return ok(profile_to_public(p))


@router.post("/{driver_id}/documents/{document_id}/verify")
def api_admin_verify_document(
    driver_id: int,
    document_id: int,
    db: Session = Depends(get_db),
    store: DocumentStore = Depends(get_document_store),
):
    d = verification.verify_document(db, store, driver_id, document_id)
    return ok(document_to_public(d))
