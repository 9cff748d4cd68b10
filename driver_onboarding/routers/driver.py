# driver_onboarding/routers/driver.py
from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from fastapi.responses import Response
from sqlalchemy.orm import Session

from ..db import get_db
from ..deps import get_current_user, get_document_store, get_owned_profile
from ..models.driver import DriverProfile
from ..schemas.driver import (
    AvailabilityRequest,
    DriverApplyRequest,
    VehicleRequest,
    document_to_public,
    ok,
    profile_to_public,
    vehicle_to_public,
)
from ..services import registration
from ..services.documents import DocumentStore

router = APIRouter(prefix="/api/driver", tags=["driver"])


# ---------- Step 1: apply ----------
@router.post("/apply", status_code=status.HTTP_201_CREATED)
def api_apply(
    payload: DriverApplyRequest,
    user: dict = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    p = registration.apply(db, user["id"], payload.model_dump())
    return ok(profile_to_public(p, document_count=0))


@router.get("/me")
def api_driver_me(
    user: dict = Depends(get_current_user),
    db: Session = Depends(get_db),
    store: DocumentStore = Depends(get_document_store),
):
    p = registration.get_my_profile(db, user["id"])
    if not p:
        return ok(None)
    return ok(profile_to_public(p, document_count=len(store.list(db, p.id))))


@router.get("/{driver_id}")
def api_driver_profile(
    profile: DriverProfile = Depends(get_owned_profile),
    db: Session = Depends(get_db),
    store: DocumentStore = Depends(get_document_store),
):
    return ok(profile_to_public(profile, document_count=len(store.list(db, profile.id))))


# ---------- Step 2: documents ----------
@router.post("/{driver_id}/documents", status_code=status.HTTP_201_CREATED)
def api_upload_document(
    doc_type: str = Form(..., alias="type"),
    document: UploadFile = File(...),
    profile: DriverProfile = Depends(get_owned_profile),
    db: Session = Depends(get_db),
    store: DocumentStore = Depends(get_document_store),
):
    # one byte past the limit is enough to reject
    data = document.file.read(store.max_bytes + 1)
    ref = registration.upload_document(
        db, store, profile.id, doc_type, data,
        filename=document.filename,
        content_type=document.content_type,
    )
    doc = store.get(db, profile.id, ref.document_id)
    return ok(document_to_public(doc))


@router.get("/{driver_id}/documents")
def api_list_documents(
    profile: DriverProfile = Depends(get_owned_profile),
    db: Session = Depends(get_db),
    store: DocumentStore = Depends(get_document_store),
):
    docs = registration.list_documents(db, store, profile.id)
    return ok([document_to_public(d) for d in docs])


@router.get("/{driver_id}/documents/{document_id}/file")
def api_document_file(
    document_id: int,
    profile: DriverProfile = Depends(get_owned_profile),
    db: Session = Depends(get_db),
    store: DocumentStore = Depends(get_document_store),
):
    doc = store.get(db, profile.id, document_id)
    return Response(content=store.read(doc), media_type=doc.content_type)


# ---------- Step 3: vehicle ----------
@router.post("/{driver_id}/vehicle", status_code=status.HTTP_201_CREATED)
def api_add_vehicle(
    payload: VehicleRequest,
    profile: DriverProfile = Depends(get_owned_profile),
    db: Session = Depends(get_db),
):
    v = registration.add_vehicle(db, profile.id, payload.model_dump(mode="json"))
    return ok(vehicle_to_public(v))


@router.get("/{driver_id}/vehicle")
def api_get_vehicle(
    profile: DriverProfile = Depends(get_owned_profile),
    db: Session = Depends(get_db),
):
    v = registration.get_vehicle(db, profile.id)
    return ok(vehicle_to_public(v) if v else None)


# ---------- Step 4: submit ----------
@router.post("/{driver_id}/submit")
def api_submit(
    profile: DriverProfile = Depends(get_owned_profile),
    db: Session = Depends(get_db),
    store: DocumentStore = Depends(get_document_store),
):
    res = registration.submit(db, store, profile.id)
    return ok({"message": res.message, "status": res.status.value})


# ---------- Step 5: status ----------
@router.get("/{driver_id}/registration-status")
def api_registration_status(
    profile: DriverProfile = Depends(get_owned_profile),
    db: Session = Depends(get_db),
    store: DocumentStore = Depends(get_document_store),
):
    return ok(registration.get_registration_status(db, store, profile.id).to_dict())


# ---------- Availability ----------
@router.put("/{driver_id}/availability")
def api_availability(
    payload: AvailabilityRequest,
    profile: DriverProfile = Depends(get_owned_profile),
    db: Session = Depends(get_db),
):
    p = registration.set_availability(db, profile.id, payload.is_available)
    return ok({"driver_id": p.id, "is_available": p.is_available})
