# driver_onboarding/models/vehicle.py
from __future__ import annotations

import enum

from sqlalchemy import (
    Column, Integer, Boolean, String, Float, DateTime, Enum, ForeignKey, UniqueConstraint
)
from sqlalchemy.sql import func

from .base import Base


class VehicleType(str, enum.Enum):
    SEDAN      = "sedan"
    SUV        = "suv"
    VAN        = "van"
    TRUCK      = "truck"
    MOTORCYCLE = "motorcycle"


class Vehicle(Base):
    __tablename__ = "vehicles"

    id = Column(Integer, primary_key=True)
    driver_id = Column(Integer, ForeignKey("driver_profiles.id"), nullable=False, index=True)

    name             = Column(String(120), nullable=False)
    type             = Column(
        Enum(VehicleType, name="vehicle_type", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    plate_number     = Column(String(20), nullable=False)
    manufacture_year = Column(Integer, nullable=True)
    model            = Column(String(80), nullable=True)
    color            = Column(String(40), nullable=True)

    # capacity
    max_weight   = Column(Float, nullable=False)
    max_volume   = Column(Float, nullable=False)
    max_packages = Column(Integer, nullable=False)

    verified = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        # one vehicle per driver in the onboarding pipeline
        UniqueConstraint("driver_id", name="uq_vehicles_driver_id"),
    )

    @property
    def capacity(self) -> dict:
        return {
            "max_weight": self.max_weight,
            "max_volume": self.max_volume,
            "max_packages": self.max_packages,
        }
