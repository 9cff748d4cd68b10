# driver_onboarding/schemas/driver.py
from __future__ import annotations

import datetime as dt
from typing import List, Optional

from pydantic import BaseModel, Field

from ..models.document import DocumentType, DriverDocument
from ..models.driver import DriverProfile
from ..models.vehicle import Vehicle, VehicleType


# ---------- Requests ----------

class DriverApplyRequest(BaseModel):
    license_number: str = Field(min_length=1, max_length=50)
    timezone: str = Field(min_length=1, max_length=64)
    phone_number: str = Field(min_length=3, max_length=32)
    experience_years: Optional[int] = Field(default=None, ge=0, le=80)
    full_name: Optional[str] = Field(default=None, max_length=200)
    email: Optional[str] = Field(default=None, max_length=255)


class VehicleRequest(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    type: VehicleType
    plate_number: str = Field(min_length=1, max_length=20)
    manufacture_year: Optional[int] = Field(default=None, ge=1900, le=2100)
    model: Optional[str] = Field(default=None, max_length=80)
    color: Optional[str] = Field(default=None, max_length=40)
    # positivity is checked by the vehicle registry (InvalidCapacity)
    max_weight: float
    max_volume: float
    max_packages: int


class AvailabilityRequest(BaseModel):
    is_available: bool


class VerifyRequest(BaseModel):
    notes: Optional[str] = Field(default=None, max_length=500)


class RejectRequest(BaseModel):
    reason: str = Field(min_length=1, max_length=500)
    hard: bool = False
    document_types: List[DocumentType] = Field(default_factory=list)


class DeactivateRequest(BaseModel):
    reason: Optional[str] = Field(default=None, max_length=500)


# ---------- Responses ----------

def _dt(x):
    if isinstance(x, (dt.date, dt.datetime)):
        return x.isoformat()
    return x


def _val(x):
    return x.value if hasattr(x, "value") else x


def profile_to_public(p: DriverProfile, document_count: Optional[int] = None) -> dict:
    out = {
        "id": p.id,
        "user_id": p.user_id,
        "status": _val(p.status),
        "is_available": bool(p.is_available),
        "license_number": p.license_number,
        "timezone": p.timezone,
        "phone_number": p.phone_number,
        "email": p.email,
        "full_name": p.full_name,
        "experience_years": p.experience_years,
        "rating": p.rating,
        "rating_count": p.rating_count,
        "submitted_at": _dt(p.submitted_at),
        "verified_at": _dt(p.verified_at),
        "rejection_reason": p.rejection_reason,
        "deactivation_reason": p.deactivation_reason,
        "created_at": _dt(p.created_at),
        "updated_at": _dt(p.updated_at),
    }
    if document_count is not None:
        out["document_count"] = document_count
    return out


def document_to_public(d: DriverDocument) -> dict:
    return {
        "id": d.id,
        "driver_id": d.driver_id,
        "type": _val(d.type),
        "url": f"/api/driver/{d.driver_id}/documents/{d.id}/file",
        "filename": d.filename,
        "content_type": d.content_type,
        "size_bytes": d.size_bytes,
        "verified": bool(d.verified),
        "pending_verification": not d.verified,
        "created_at": _dt(d.created_at),
    }


def vehicle_to_public(v: Vehicle) -> dict:
    return {
        "id": v.id,
        "driver_id": v.driver_id,
        "name": v.name,
        "type": _val(v.type),
        "plate_number": v.plate_number,
        "manufacture_year": v.manufacture_year,
        "model": v.model,
        "color": v.color,
        "capacity": v.capacity,
        "verified": bool(v.verified),
        "created_at": _dt(v.created_at),
        "updated_at": _dt(v.updated_at),
    }


def ok(data=None) -> dict:
    return {"success": True, "data": data}
