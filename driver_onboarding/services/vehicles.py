# driver_onboarding/services/vehicles.py
from __future__ import annotations

import logging
import math
from typing import Any, Dict, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..errors import InvalidCapacity, InvalidState, ValidationFailed
from ..models.vehicle import Vehicle, VehicleType

logger = logging.getLogger(__name__)

CAPACITY_FIELDS = ("max_weight", "max_volume", "max_packages")
# counted, so only whole numbers
INTEGER_CAPACITY_FIELDS = ("max_packages",)


def _positive(field: str, value: Any) -> bool:
    if value is None or isinstance(value, bool):
        return False
    try:
        number = float(value)
    except (TypeError, ValueError):
        return False
    if not math.isfinite(number) or number <= 0:
        return False
    if field in INTEGER_CAPACITY_FIELDS and not number.is_integer():
        return False
    return True


def validate_capacity(payload: Dict[str, Any]) -> None:
    bad = [field for field in CAPACITY_FIELDS if not _positive(field, payload.get(field))]
    if bad:
        raise InvalidCapacity(
            "Vehicle capacity must be positive and finite: " + ", ".join(bad),
            details={"fields": bad},
        )


def get_vehicle(db: Session, driver_id: int) -> Optional[Vehicle]:
    return db.execute(
        select(Vehicle)
        .where(Vehicle.driver_id == driver_id)
        .execution_options(populate_existing=True)
    ).scalar_one_or_none()


def upsert_vehicle(db: Session, driver_id: int, payload: Dict[str, Any]) -> Vehicle:
    """
    Replace semantics: the driver has one vehicle, a second call overwrites
    every field. A verified vehicle is frozen.
    """
    validate_capacity(payload)
    try:
        vtype = VehicleType(str(payload.get("type") or "").strip().lower())
    except ValueError:
        raise ValidationFailed(f"Unsupported vehicle type '{payload.get('type')}'")

    v = get_vehicle(db, driver_id)
    if v and v.verified:
        raise InvalidState("Vehicle has been verified and can no longer be changed")
    if not v:
        v = Vehicle(driver_id=driver_id)
        db.add(v)

    v.name = (payload.get("name") or "").strip()
    v.type = vtype
    v.plate_number = (payload.get("plate_number") or "").strip().upper()
    v.manufacture_year = payload.get("manufacture_year")
    v.model = (payload.get("model") or "").strip() or None
    v.color = (payload.get("color") or "").strip() or None
    v.max_weight = float(payload["max_weight"])
    v.max_volume = float(payload["max_volume"])
    v.max_packages = int(float(payload["max_packages"]))
    v.verified = False

    db.flush()
    logger.info("Vehicle %s saved for driver %s", v.id, driver_id)
    return v
