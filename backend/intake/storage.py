"""Where uploaded resumes and academic documents end up.

Both backends resolve a document to an opaque URL string; the submission
pipeline only ever stores that URL and asks the backend to delete the object
again when the database write fails.
"""

import io
import pathlib
import re
import time
import uuid
from dataclasses import dataclass
from typing import Optional

from starlette.concurrency import run_in_threadpool

from .config import Settings
from .errors import StorageError
from .logging import get_logger

logger = get_logger(__name__)

PDF_CONTENT_TYPE = "application/pdf"


@dataclass
class IncomingDocument:
    field: str
    filename: str
    content_type: str
    content: bytes


@dataclass
class StoredDocument:
    field: str
    url: str
    key: str


@dataclass
class StoredDocuments:
    resume: StoredDocument
    academics: Optional[StoredDocument] = None

    def all(self):
        return [doc for doc in (self.resume, self.academics) if doc is not None]


def _safe_filename(filename: str) -> str:
    name = pathlib.Path(filename or "document.pdf").name
    return re.sub(r"\s+", "_", name) or "document.pdf"


class LocalDocumentStorage:
    """Writes documents under `upload_dir`, served back at `/uploads/<name>`."""

    def __init__(self, upload_dir: str, public_base_url: Optional[str] = None) -> None:
        self.upload_dir = pathlib.Path(upload_dir)
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        self.public_base_url = public_base_url

    async def save(self, document: IncomingDocument, base_url: str) -> StoredDocument:
        name = f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}-{_safe_filename(document.filename)}"
        dest = self.upload_dir / name
        try:
            dest.write_bytes(document.content)
        except OSError as exc:
            raise StorageError("File upload failed") from exc
        root = (self.public_base_url or base_url).rstrip("/")
        return StoredDocument(field=document.field, url=f"{root}/uploads/{name}", key=str(dest))

    async def delete(self, document: StoredDocument) -> None:
        pathlib.Path(document.key).unlink(missing_ok=True)


class CloudinaryDocumentStorage:
    """Raw uploads to Cloudinary through the official SDK.

    The SDK is blocking, so every call runs in the threadpool.
    """

    def __init__(
        self,
        cloud_name: str,
        api_key: str,
        api_secret: str,
        folder: str = "pdf_uploads",
        timeout: float = 30.0,
    ) -> None:
        import cloudinary
        import cloudinary.exceptions
        import cloudinary.uploader

        cloudinary.config(cloud_name=cloud_name, api_key=api_key, api_secret=api_secret, secure=True)
        self.uploader = cloudinary.uploader
        self.sdk_error = cloudinary.exceptions.Error
        self.folder = folder
        self.timeout = timeout

    async def save(self, document: IncomingDocument, base_url: str) -> StoredDocument:
        stem = pathlib.Path(_safe_filename(document.filename)).stem
        try:
            result = await run_in_threadpool(
                self.uploader.upload,
                io.BytesIO(document.content),
                resource_type="raw",
                folder=self.folder,
                public_id=f"{stem}-{uuid.uuid4().hex[:8]}",
                timeout=self.timeout,
            )
        except self.sdk_error as exc:
            logger.error("Cloudinary upload failed", field=document.field, error=str(exc))
            raise StorageError("File upload failed") from exc
        return StoredDocument(field=document.field, url=result["secure_url"], key=result["public_id"])

    async def delete(self, document: StoredDocument) -> None:
        result = await run_in_threadpool(
            self.uploader.destroy, document.key, resource_type="raw", timeout=self.timeout
        )
        outcome = result.get("result")
        if outcome not in ("ok", "not found"):
            raise StorageError(f"Cloudinary destroy returned {outcome!r}")


def build_storage(settings: Settings):
    if settings.storage_backend == "cloudinary":
        missing = [
            name for name in ("cloudinary_cloud_name", "cloudinary_api_key", "cloudinary_api_secret")
            if not getattr(settings, name)
        ]
        if missing:
            raise RuntimeError(f"Cloudinary storage selected but {', '.join(missing)} not set. Edit your .env.")
        return CloudinaryDocumentStorage(
            settings.cloudinary_cloud_name,
            settings.cloudinary_api_key,
            settings.cloudinary_api_secret,
            folder=settings.cloudinary_folder,
            timeout=settings.cloudinary_timeout_seconds,
        )
    if settings.storage_backend != "local":
        raise RuntimeError(f"Unknown storage backend: {settings.storage_backend}")
    return LocalDocumentStorage(settings.upload_dir, settings.public_base_url)
