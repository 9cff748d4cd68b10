"""
Registration orchestrator.

The five driver-facing step operations (apply, upload document, add vehicle,
submit, registration status) plus the small reads the onboarding screens
need. Every mutating step runs in one transaction: the precondition checks,
the side effect (document row, vehicle row) and the status advance either
all commit or all roll back.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from ..db import transaction
from ..errors import AlreadyRegistered, IncompleteRegistration, InvalidState
from ..models.driver import DriverProfile, DriverStatus
from ..models.vehicle import Vehicle
from . import profiles, vehicles
from .documents import DocumentRef, DocumentStore
from .status import RegistrationStatus, missing_items, project

logger = logging.getLogger(__name__)


@dataclass
class SubmitResult:
    status: DriverStatus
    transitioned: bool
    message: str


def _ensure_open(p: DriverProfile) -> None:
    if DriverStatus(p.status).is_terminal:
        raise InvalidState(f"Driver profile is {p.status.value} and can no longer be changed")


# ===================== Step 1: apply =====================

def apply(db: Session, user_id: str, data: Dict[str, Any]) -> DriverProfile:
    """
    Create the driver profile for ``user_id``. A second application is an
    error, not a silent success.
    """
    with transaction(db):
        if profiles.find_profile_for_user(db, user_id):
            logger.info("User %s applied again, rejecting", user_id)
            raise AlreadyRegistered("A driver profile already exists for this user")
        p = profiles.create_profile(db, user_id, data)
    logger.info("Driver profile %s created for user %s", p.id, user_id)
    return profiles.reload(db, p)


# ===================== Step 2: documents =====================

def upload_document(
    db: Session,
    store: DocumentStore,
    driver_id: int,
    doc_type,
    data: bytes,
    filename: Optional[str] = None,
    content_type: Optional[str] = None,
) -> DocumentRef:
    ref: Optional[DocumentRef] = None
    try:
        with transaction(db):
            p = profiles.get_profile(db, driver_id)
            _ensure_open(p)
            # validation errors from the store are surfaced as they are
            ref = store.store(db, driver_id, doc_type, data, filename=filename, content_type=content_type)
            profiles.guard_open(db, driver_id)
            profiles.advance_status(db, driver_id, DriverStatus.DOCUMENTS_SUBMITTED)
    except Exception:
        if ref is not None:
            store.discard(ref)
        raise
    return ref


def list_documents(db: Session, store: DocumentStore, driver_id: int):
    profiles.get_profile(db, driver_id)
    return store.list(db, driver_id)


# ===================== Step 3: vehicle =====================

def add_vehicle(db: Session, driver_id: int, payload: Dict[str, Any]) -> Vehicle:
    with transaction(db):
        p = profiles.get_profile(db, driver_id)
        _ensure_open(p)
        v = vehicles.upsert_vehicle(db, driver_id, payload)
        profiles.guard_open(db, driver_id)
        profiles.advance_status(db, driver_id, DriverStatus.VEHICLE_ADDED)
    return v


def get_vehicle(db: Session, driver_id: int) -> Optional[Vehicle]:
    profiles.get_profile(db, driver_id)
    return vehicles.get_vehicle(db, driver_id)


# ===================== Step 4: submit =====================

def submit(db: Session, store: DocumentStore, driver_id: int) -> SubmitResult:
    """
    Gate into pending_verification. Fails with IncompleteRegistration while
    any required document or the vehicle is missing; the status view tells
    the caller which. Calling it again once submitted is a no-op success,
    except after a soft rejection, where it re-checks and clears the
    rejection.
    """
    with transaction(db):
        p = profiles.get_profile(db, driver_id)
        status = DriverStatus(p.status)

        if status == DriverStatus.DEACTIVATED:
            raise InvalidState("Driver profile is deactivated")
        if status == DriverStatus.VERIFIED or (
            status == DriverStatus.PENDING_VERIFICATION and not p.has_open_rejection
        ):
            return SubmitResult(status=status, transitioned=False, message="Already submitted")

        missing = missing_items(store.list(db, driver_id), vehicles.get_vehicle(db, driver_id))
        if missing:
            logger.info("Driver %s submit refused, missing %s", driver_id, missing)
            raise IncompleteRegistration(
                "Registration is incomplete",
                details={"missing_items": missing},
            )

        if p.has_open_rejection:
            ok = profiles.update_fields(
                db, driver_id, [DriverStatus.PENDING_VERIFICATION],
                rejection_reason=None, rejected_at=None, submitted_at=profiles.utcnow(),
            )
            if not ok:
                raise InvalidState("Driver profile changed while re-submitting")
            logger.info("Driver %s re-submitted after rejection", driver_id)
            return SubmitResult(
                status=DriverStatus.PENDING_VERIFICATION,
                transitioned=False,
                message="Registration re-submitted for verification",
            )

        moved = profiles.advance_status(
            db, driver_id, DriverStatus.PENDING_VERIFICATION, submitted_at=profiles.utcnow()
        )
        if not moved:
            # lost a race: someone else submitted, or the profile was closed
            current = DriverStatus(profiles.get_profile(db, driver_id).status)
            if current == DriverStatus.DEACTIVATED:
                raise InvalidState("Driver profile is deactivated")
            return SubmitResult(status=current, transitioned=False, message="Already submitted")

    return SubmitResult(
        status=DriverStatus.PENDING_VERIFICATION,
        transitioned=True,
        message="Registration submitted for verification",
    )


# ===================== Step 5: status =====================

def get_registration_status(db: Session, store: DocumentStore, driver_id: int) -> RegistrationStatus:
    p = profiles.get_profile(db, driver_id)
    return project(p, store.list(db, driver_id), vehicles.get_vehicle(db, driver_id))


# ===================== Profile reads / availability =====================

def get_profile(db: Session, driver_id: int) -> DriverProfile:
    return profiles.get_profile(db, driver_id)


def get_my_profile(db: Session, user_id: str) -> Optional[DriverProfile]:
    return profiles.find_profile_for_user(db, user_id)


def set_availability(db: Session, driver_id: int, value: bool) -> DriverProfile:
    """Only verified drivers can go online."""
    with transaction(db):
        p = profiles.get_profile(db, driver_id)
        if not profiles.update_fields(db, driver_id, [DriverStatus.VERIFIED], is_available=bool(value)):
            raise InvalidState(
                f"Availability can only be changed once verified (status is {p.status.value})"
            )
    logger.info("Driver %s availability set to %s", driver_id, bool(value))
    return profiles.get_profile(db, driver_id)
