"""
Document store adapter.

Validates an uploaded document, puts the bytes into blob storage and keeps
the ``driver_documents`` rows: one current row per (driver, type), older
uploads are marked superseded and kept for audit.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from ..errors import DocumentNotFound, PayloadTooLarge, UnsupportedFormat, UnsupportedType
from ..models.document import DocumentType, DriverDocument
from .profiles import utcnow
from .storage import LocalDocumentStorage

logger = logging.getLogger(__name__)


@dataclass
class DocumentRef:
    document_id: int
    driver_id: int
    type: DocumentType
    storage_ref: str
    pending_verification: bool = True


def coerce_document_type(value) -> DocumentType:
    if isinstance(value, DocumentType):
        return value
    try:
        return DocumentType(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(t.value for t in DocumentType)
        raise UnsupportedType(f"Unsupported document type '{value}'. Allowed: {allowed}")


class DocumentStore:
    def __init__(self, storage: LocalDocumentStorage, max_bytes: int, content_types: Iterable[str]):
        self.storage = storage
        self.max_bytes = max_bytes
        self.content_types = {c.lower() for c in content_types}

    def validate(self, doc_type, data: bytes, content_type: Optional[str]) -> DocumentType:
        doc_type = coerce_document_type(doc_type)
        if not data:
            raise UnsupportedFormat("Document is empty")
        if len(data) > self.max_bytes:
            raise PayloadTooLarge(
                f"Document is {len(data)} bytes, the limit is {self.max_bytes} bytes"
            )
        ctype = (content_type or "").split(";")[0].strip().lower()
        if ctype not in self.content_types:
            raise UnsupportedFormat(
                f"Unsupported content type '{ctype or 'unknown'}'. "
                f"Allowed: {', '.join(sorted(self.content_types))}"
            )
        return doc_type

    def store(
        self,
        db: Session,
        driver_id: int,
        doc_type,
        data: bytes,
        filename: Optional[str] = None,
        content_type: Optional[str] = None,
    ) -> DocumentRef:
        """
        Store the bytes and make the new row the current document of its
        type. Nothing is committed here; on a database error the blob is
        discarded before the error propagates.
        """
        doc_type = self.validate(doc_type, data, content_type)
        ctype = (content_type or "").split(";")[0].strip().lower()
        ref = self.storage.put(driver_id, doc_type.value, data, ctype)
        try:
            db.execute(
                update(DriverDocument)
                .where(
                    DriverDocument.driver_id == driver_id,
                    DriverDocument.type == doc_type,
                    DriverDocument.superseded_at.is_(None),
                )
                .values(superseded_at=utcnow())
                .execution_options(synchronize_session=False)
            )
            doc = DriverDocument(
                driver_id=driver_id,
                type=doc_type,
                storage_ref=ref,
                filename=filename,
                content_type=ctype,
                size_bytes=len(data),
                verified=False,
            )
            db.add(doc)
            db.flush()
        except Exception:
            self.storage.discard(ref)
            raise
        logger.info("Stored %s document %s for driver %s", doc_type.value, doc.id, driver_id)
        return DocumentRef(document_id=doc.id, driver_id=driver_id, type=doc_type, storage_ref=ref)

    def discard(self, ref: DocumentRef) -> None:
        self.storage.discard(ref.storage_ref)

    def list(self, db: Session, driver_id: int) -> list[DriverDocument]:
        """Current (non-superseded) documents of a driver."""
        return list(
            db.execute(
                select(DriverDocument)
                .where(DriverDocument.driver_id == driver_id, DriverDocument.superseded_at.is_(None))
                .order_by(DriverDocument.id.asc())
                .execution_options(populate_existing=True)
            ).scalars().all()
        )

    def get(self, db: Session, driver_id: int, document_id: int) -> DriverDocument:
        doc = db.execute(
            select(DriverDocument).where(
                DriverDocument.id == document_id,
                DriverDocument.driver_id == driver_id,
            )
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        if not doc:
            raise DocumentNotFound(f"Document {document_id} not found")
        return doc

    def read(self, doc: DriverDocument) -> bytes:
        return self.storage.read(doc.storage_ref)

    def supersede(self, db: Session, driver_id: int, types: Iterable[DocumentType]) -> int:
        types = list(types)
        if not types:
            return 0
        res = db.execute(
            update(DriverDocument)
            .where(
                DriverDocument.driver_id == driver_id,
                DriverDocument.type.in_(types),
                DriverDocument.superseded_at.is_(None),
            )
            .values(superseded_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        return res.rowcount
