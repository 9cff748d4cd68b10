# driver_onboarding/services/storage.py
from __future__ import annotations

import logging
import mimetypes
import os
import uuid
from pathlib import Path

from ..errors import DocumentNotFound, TemporaryFailure

logger = logging.getLogger(__name__)


class LocalDocumentStorage:
    """
    Blob storage on the local filesystem. ``put`` returns a relative
    reference that ``read`` and ``discard`` accept later.
    """

    def __init__(self, base_dir: str | os.PathLike):
        self.base_dir = Path(base_dir)

    def _path(self, ref: str) -> Path:
        path = (self.base_dir / ref).resolve()
        if self.base_dir.resolve() not in path.parents:
            raise DocumentNotFound("Unknown document reference")
        return path

    def put(self, driver_id: int, kind: str, data: bytes, content_type: str) -> str:
        ext = mimetypes.guess_extension(content_type) or ".bin"
        ref = f"driver_{driver_id}/{kind}/{uuid.uuid4().hex}{ext}"
        path = self.base_dir / ref
        tmp = path.with_suffix(path.suffix + ".part")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_bytes(data)
            os.replace(tmp, path)
        except OSError as e:
            logger.exception("Failed to store document for driver %s", driver_id)
            raise TemporaryFailure("Document storage is temporarily unavailable") from e
        return ref

    def read(self, ref: str) -> bytes:
        path = self._path(ref)
        try:
            return path.read_bytes()
        except FileNotFoundError as e:
            raise DocumentNotFound("Document file is missing") from e
        except OSError as e:
            logger.exception("Failed to read document %s", ref)
            raise TemporaryFailure("Document storage is temporarily unavailable") from e

    def discard(self, ref: str) -> None:
        try:
            self._path(ref).unlink(missing_ok=True)
        except (OSError, DocumentNotFound):
            # orphaned blob, the database never referenced it
            logger.warning("Could not discard orphaned document %s", ref)
