# driver_onboarding/models/driver.py
from __future__ import annotations

import enum

from sqlalchemy import (
    Column, Integer, Boolean, String, Float, DateTime, Enum, Index, UniqueConstraint
)
from sqlalchemy.sql import func

from .base import Base


def _enum_values(e):
    return [m.value for m in e]


class DriverStatus(str, enum.Enum):
    PROFILE_CREATED      = "profile_created"
    DOCUMENTS_SUBMITTED  = "documents_submitted"
    VEHICLE_ADDED        = "vehicle_added"
    PENDING_VERIFICATION = "pending_verification"
    VERIFIED             = "verified"
    DEACTIVATED          = "deactivated"

    @property
    def rank(self) -> int:
        return _PIPELINE.index(self)

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES

    def below(self) -> list["DriverStatus"]:
        """Non-terminal statuses strictly earlier in the pipeline than this one."""
        return [s for s in _PIPELINE[: self.rank] if not s.is_terminal]


_PIPELINE = [
    DriverStatus.PROFILE_CREATED,
    DriverStatus.DOCUMENTS_SUBMITTED,
    DriverStatus.VEHICLE_ADDED,
    DriverStatus.PENDING_VERIFICATION,
    DriverStatus.VERIFIED,
    DriverStatus.DEACTIVATED,
]

TERMINAL_STATUSES = frozenset({DriverStatus.VERIFIED, DriverStatus.DEACTIVATED})
OPEN_STATUSES = [s for s in _PIPELINE if s not in TERMINAL_STATUSES]


class DriverProfile(Base):
    __tablename__ = "driver_profiles"

    id = Column(Integer, primary_key=True)
    user_id = Column(String(64), nullable=False, index=True)

    status = Column(
        Enum(DriverStatus, name="driver_status", values_callable=_enum_values),
        nullable=False,
        default=DriverStatus.PROFILE_CREATED,
    )
    is_available = Column(Boolean, default=False, nullable=False)

    # application data
    license_number   = Column(String(50), nullable=False)
    timezone         = Column(String(64), nullable=False)
    phone_number     = Column(String(32), nullable=False)
    email            = Column(String(255), nullable=True)
    full_name        = Column(String(200), nullable=True)
    experience_years = Column(Integer, nullable=True)

    rating       = Column(Float, default=0.0, nullable=False)
    rating_count = Column(Integer, default=0, nullable=False)

    # review trail
    submitted_at        = Column(DateTime(timezone=True), nullable=True)
    rejection_reason    = Column(String(500), nullable=True)
    rejected_at         = Column(DateTime(timezone=True), nullable=True)
    verified_at         = Column(DateTime(timezone=True), nullable=True)
    verification_notes  = Column(String(500), nullable=True)
    deactivated_at      = Column(DateTime(timezone=True), nullable=True)
    deactivation_reason = Column(String(500), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        # one driver profile per user
        UniqueConstraint("user_id", name="uq_driver_profiles_user_id"),
        Index("ix_driver_profiles_status", "status"),
    )

    @property
    def has_open_rejection(self) -> bool:
        return self.status == DriverStatus.PENDING_VERIFICATION and self.rejected_at is not None
