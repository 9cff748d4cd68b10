# driver_onboarding/services/verification.py
from __future__ import annotations

import logging
from typing import Iterable, Optional

from sqlalchemy import update
from sqlalchemy.orm import Session

from ..db import transaction
from ..errors import InvalidState
from ..models.document import DriverDocument
from ..models.driver import DriverProfile, DriverStatus, OPEN_STATUSES
from ..models.vehicle import Vehicle
from . import profiles
from .documents import DocumentStore, coerce_document_type

logger = logging.getLogger(__name__)


# -------- Admin gate --------

def list_pending(db: Session) -> list[DriverProfile]:
    """Profiles waiting for a decision, oldest submission first."""
    return profiles.list_by_status(db, DriverStatus.PENDING_VERIFICATION)


def _require_pending(db: Session, driver_id: int) -> DriverProfile:
    p = profiles.get_profile(db, driver_id)
    if DriverStatus(p.status) != DriverStatus.PENDING_VERIFICATION:
        raise InvalidState(
            f"Driver must be pending_verification, current status is {p.status.value}"
        )
    return p


def verify_driver(db: Session, driver_id: int, notes: Optional[str] = None) -> DriverProfile:
    """
    pending_verification -> verified. The current documents and the vehicle
    are marked verified along with the profile.
    """
    with transaction(db):
        p = _require_pending(db, driver_id)
        if p.has_open_rejection:
            raise InvalidState("Driver has an open rejection and has not re-submitted yet")
        now = profiles.utcnow()
        moved = profiles.transition(
            db, driver_id, [DriverStatus.PENDING_VERIFICATION], DriverStatus.VERIFIED,
            where=[DriverProfile.rejected_at.is_(None)],
            verified_at=now, verification_notes=(notes or "").strip() or None,
        )
        if not moved:
            raise InvalidState("Driver status changed during verification")
        db.execute(
            update(DriverDocument)
            .where(
                DriverDocument.driver_id == driver_id,
                DriverDocument.superseded_at.is_(None),
                DriverDocument.verified.is_(False),
            )
            .values(verified=True, verified_at=now)
            .execution_options(synchronize_session=False)
        )
        db.execute(
            update(Vehicle)
            .where(Vehicle.driver_id == driver_id)
            .values(verified=True)
            .execution_options(synchronize_session=False)
        )
    logger.info("Driver %s verified", driver_id)
    return profiles.get_profile(db, driver_id)


def reject_driver(
    db: Session,
    store: DocumentStore,
    driver_id: int,
    reason: str,
    hard: bool = False,
    document_types: Iterable = (),
) -> DriverProfile:
    """
    Soft rejection keeps the profile at pending_verification with the reason
    recorded; the named document types are superseded so they show up as
    missing again, and the driver re-submits once fixed.
    Hard rejection deactivates the profile.
    """
    reason = (reason or "").strip()
    types = [coerce_document_type(t) for t in document_types]
    with transaction(db):
        _require_pending(db, driver_id)
        now = profiles.utcnow()
        if hard:
            moved = profiles.transition(
                db, driver_id, [DriverStatus.PENDING_VERIFICATION], DriverStatus.DEACTIVATED,
                deactivated_at=now, deactivation_reason=reason or None,
                rejection_reason=reason or None, rejected_at=now, is_available=False,
            )
        else:
            moved = profiles.update_fields(
                db, driver_id, [DriverStatus.PENDING_VERIFICATION],
                rejection_reason=reason or None, rejected_at=now,
            )
            store.supersede(db, driver_id, types)
        if not moved:
            raise InvalidState("Driver status changed during review")
    logger.info(
        "Driver %s rejected (%s): %s", driver_id, "hard" if hard else "soft", reason or "-"
    )
    return profiles.get_profile(db, driver_id)


def deactivate_driver(db: Session, driver_id: int, reason: Optional[str] = None) -> DriverProfile:
    """Any non-terminal status -> deactivated."""
    with transaction(db):
        p = profiles.get_profile(db, driver_id)
        moved = profiles.transition(
            db, driver_id, OPEN_STATUSES, DriverStatus.DEACTIVATED,
            deactivated_at=profiles.utcnow(),
            deactivation_reason=(reason or "").strip() or None,
            is_available=False,
        )
        if not moved:
            raise InvalidState(f"Driver profile is already {p.status.value}")
    logger.info("Driver %s deactivated", driver_id)
    return profiles.get_profile(db, driver_id)


def verify_document(
    db: Session, store: DocumentStore, driver_id: int, document_id: int
) -> DriverDocument:
    """Piecemeal review of one current document before the overall decision."""
    with transaction(db):
        p = profiles.get_profile(db, driver_id)
        if DriverStatus(p.status).is_terminal:
            raise InvalidState(f"Driver profile is {p.status.value}")
        doc = store.get(db, driver_id, document_id)
        if doc.superseded_at is not None:
            raise InvalidState("Document has been superseded by a newer upload")
        doc.verified = True
        doc.verified_at = profiles.utcnow()
    logger.info("Document %s of driver %s verified", document_id, driver_id)
    return doc
