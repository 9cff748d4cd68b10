# driver_onboarding/services/profiles.py
from __future__ import annotations

import datetime as dt
import logging
from typing import Any, Dict, Iterable, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..db import is_unique_violation
from ..errors import AlreadyRegistered, InvalidState, ProfileNotFound
from ..models.driver import DriverProfile, DriverStatus, OPEN_STATUSES

logger = logging.getLogger(__name__)


def utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


# ---- reads ----

def find_profile(db: Session, driver_id: int) -> Optional[DriverProfile]:
    return db.execute(
        select(DriverProfile)
        .where(DriverProfile.id == driver_id)
        .execution_options(populate_existing=True)
    ).scalar_one_or_none()


def get_profile(db: Session, driver_id: int) -> DriverProfile:
    p = find_profile(db, driver_id)
    if not p:
        raise ProfileNotFound(f"Driver profile {driver_id} not found")
    return p


def find_profile_for_user(db: Session, user_id: str) -> Optional[DriverProfile]:
    return db.execute(
        select(DriverProfile).where(DriverProfile.user_id == str(user_id))
    ).scalar_one_or_none()


def list_by_status(db: Session, status: DriverStatus) -> list[DriverProfile]:
    return list(
        db.execute(
            select(DriverProfile)
            .where(DriverProfile.status == status)
            .order_by(DriverProfile.submitted_at.asc(), DriverProfile.id.asc())
        ).scalars().all()
    )


# ---- writes ----

def create_profile(db: Session, user_id: str, data: Dict[str, Any]) -> DriverProfile:
    """
    Insert a new profile at profile_created. The caller has already checked
    that the user holds none; a concurrent insert still trips the unique
    constraint and is reported the same way.
    """
    p = DriverProfile(
        user_id=str(user_id),
        status=DriverStatus.PROFILE_CREATED,
        is_available=False,
        license_number=data["license_number"],
        timezone=data["timezone"],
        phone_number=data["phone_number"],
        email=data.get("email"),
        full_name=data.get("full_name"),
        experience_years=data.get("experience_years"),
        rating=0.0,
        rating_count=0,
    )
    db.add(p)
    try:
        db.flush()
    except IntegrityError as e:
        if not is_unique_violation(e):
            raise
        raise AlreadyRegistered("A driver profile already exists for this user") from e
    return p


def advance_status(db: Session, driver_id: int, target: DriverStatus, **values) -> bool:
    """
    Move the profile to ``target`` only if its current status is earlier in
    the pipeline. Runs as a single conditional UPDATE, so concurrent callers
    can never regress the status: the highest target wins.
    Returns True when this call performed the transition.
    """
    res = db.execute(
        update(DriverProfile)
        .where(DriverProfile.id == driver_id, DriverProfile.status.in_(target.below()))
        .values(status=target, updated_at=utcnow(), **values)
        .execution_options(synchronize_session=False)
    )
    moved = res.rowcount == 1
    if moved:
        logger.info("Driver %s advanced to %s", driver_id, target.value)
    return moved


def transition(
    db: Session,
    driver_id: int,
    allowed_from: Iterable[DriverStatus],
    target: DriverStatus,
    where: Iterable = (),
    **values,
) -> bool:
    """
    Compare-and-swap on status for transitions outside the forward pipeline.
    ``where`` adds conditions the row must still satisfy at update time.
    """
    res = db.execute(
        update(DriverProfile)
        .where(DriverProfile.id == driver_id, DriverProfile.status.in_(list(allowed_from)), *where)
        .values(status=target, updated_at=utcnow(), **values)
        .execution_options(synchronize_session=False)
    )
    return res.rowcount == 1


def update_fields(
    db: Session,
    driver_id: int,
    required_status: Iterable[DriverStatus],
    **values,
) -> bool:
    """Set columns on the profile only while its status is one of ``required_status``."""
    res = db.execute(
        update(DriverProfile)
        .where(DriverProfile.id == driver_id, DriverProfile.status.in_(list(required_status)))
        .values(updated_at=utcnow(), **values)
        .execution_options(synchronize_session=False)
    )
    return res.rowcount == 1


def guard_open(db: Session, driver_id: int) -> None:
    """
    Touch the profile row inside the current transaction, failing if it has
    reached a terminal status in the meantime. On databases with row locks
    this also serializes concurrent writers for the same driver.
    """
    if not update_fields(db, driver_id, OPEN_STATUSES):
        p = get_profile(db, driver_id)
        raise InvalidState(f"Driver profile is {_status_value(p)} and can no longer be changed")


def reload(db: Session, p: DriverProfile) -> DriverProfile:
    db.refresh(p)
    return p


def _status_value(p: DriverProfile) -> str:
    return p.status.value if isinstance(p.status, DriverStatus) else str(p.status)
