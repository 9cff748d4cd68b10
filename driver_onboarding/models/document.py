# driver_onboarding/models/document.py
from __future__ import annotations

import enum

from sqlalchemy import (
    Column, Integer, Boolean, String, DateTime, Enum, ForeignKey, Index, text
)
from sqlalchemy.sql import func

from .base import Base


class DocumentType(str, enum.Enum):
    LICENSE              = "license"
    IDENTITY             = "identity"
    INSURANCE            = "insurance"
    VEHICLE_REGISTRATION = "vehicle_registration"


# every type is required before submit
REQUIRED_DOCUMENT_TYPES = tuple(DocumentType)


class DriverDocument(Base):
    __tablename__ = "driver_documents"

    id = Column(Integer, primary_key=True)
    driver_id = Column(Integer, ForeignKey("driver_profiles.id"), nullable=False, index=True)

    type = Column(
        Enum(DocumentType, name="document_type", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    storage_ref  = Column(String(400), nullable=False)
    filename     = Column(String(255), nullable=True)
    content_type = Column(String(100), nullable=False)
    size_bytes   = Column(Integer, nullable=False)

    verified    = Column(Boolean, default=False, nullable=False)
    verified_at = Column(DateTime(timezone=True), nullable=True)

    # null = current document of its type
    superseded_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        Index(
            "uq_driver_documents_current",
            "driver_id", "type",
            unique=True,
            postgresql_where=text("superseded_at IS NULL"),
            sqlite_where=text("superseded_at IS NULL"),
        ),
    )

    @property
    def is_current(self) -> bool:
        return self.superseded_at is None
