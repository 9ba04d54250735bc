"""Incoming-directory storage: unique upload names, streamed writes, listing."""
import contextlib
import logging
import mimetypes
import os
import random
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional
from urllib.parse import quote

from fastapi import UploadFile

from app.exceptions import InternalError, NotFoundError, PayloadTooLargeError

logger = logging.getLogger("lanshare.storage")

UPLOADS_URL_PREFIX = "/uploads"
CHUNK_SIZE = 1024 * 1024
DEFAULT_CONTENT_TYPE = "application/octet-stream"
# Filesystem limit for a single path component, in encoded bytes.
MAX_NAME_BYTES = 255
# Converted outputs prepend a prefix to the stored name.
RESERVED_PREFIX_BYTES = 16
MAX_EXT_BYTES = 32


def sanitize_base_name(name: str) -> str:
    """Base name without directories; only alphanumerics and ._- and spaces survive."""
    base = Path((name or "").replace("\\", "/")).name
    s = "".join(c if c.isalnum() or c in "._- " else "_" for c in base).strip()
    return s if s.strip(".") else "file"


def _truncate_utf8(text: str, max_bytes: int) -> str:
    return text.encode("utf-8")[:max_bytes].decode("utf-8", "ignore")


def generate_stored_name(original: str, now_ms: Optional[int] = None) -> str:
    """``{base}-{millis}-{random}{ext}``; the extension is kept for content-type lookup.

    Long bases are cut so the name, plus the prefix of its converted output,
    stays within the filesystem's name limit.
    """
    safe = sanitize_base_name(original)
    base, ext = os.path.splitext(safe)
    if len(ext.encode("utf-8")) > MAX_EXT_BYTES:
        base, ext = safe, ""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    suffix = f"-{now_ms}-{random.randint(0, 10**9)}"
    budget = MAX_NAME_BYTES - RESERVED_PREFIX_BYTES - len(suffix) - len(ext.encode("utf-8"))
    base = _truncate_utf8(base, budget) or "file"
    return f"{base}{suffix}{ext}"


def guess_content_type(name: str) -> str:
    content_type, _ = mimetypes.guess_type(name)
    return content_type or DEFAULT_CONTENT_TYPE


def upload_url(name: str) -> str:
    return f"{UPLOADS_URL_PREFIX}/{quote(name)}"


@dataclass
class StoredFile:
    name: str
    size: int
    modified_at: datetime
    content_type: str

    @classmethod
    def from_path(cls, path: Path) -> "StoredFile":
        st = path.stat()
        return cls(
            name=path.name,
            size=st.st_size,
            modified_at=datetime.fromtimestamp(st.st_mtime, tz=timezone.utc),
            content_type=guess_content_type(path.name),
        )

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "size": self.size,
            "url": upload_url(self.name),
            "uploadedAt": self.modified_at.isoformat(),
            "mimetype": self.content_type,
        }


@dataclass
class UploadedFile:
    """Result of a single upload: the stored entry plus what the client sent."""

    original_name: str
    stored: StoredFile
    mimetype: str
    uploaded_at: datetime

    def to_dict(self) -> dict:
        return {
            "originalName": self.original_name,
            "filename": self.stored.name,
            "size": self.stored.size,
            "mimetype": self.mimetype,
            "url": upload_url(self.stored.name),
            "uploadedAt": self.uploaded_at.isoformat(),
        }


class UploadStore:
    """Flat directory of uploaded files. The directory listing is the only metadata."""

    def __init__(self, directory: Path, max_bytes: int):
        self.directory = directory
        self.max_bytes = max_bytes

    async def save(self, upload: UploadFile) -> UploadedFile:
        original = upload.filename or "file"
        dest = self.directory / generate_stored_name(original)
        max_mb = self.max_bytes // (1024 * 1024)
        try:
            total = 0
            with open(dest, "wb") as f:
                while chunk := await upload.read(CHUNK_SIZE):
                    total += len(chunk)
                    if total > self.max_bytes:
                        raise PayloadTooLargeError(f"File too large (max {max_mb} MB)")
                    f.write(chunk)
        except PayloadTooLargeError:
            with contextlib.suppress(OSError):
                dest.unlink(missing_ok=True)
            logger.warning("Rejected %s: larger than %s bytes", original, self.max_bytes)
            raise
        except OSError as e:
            logger.exception("Upload failed for %s: %s", original, e)
            with contextlib.suppress(OSError):
                dest.unlink(missing_ok=True)
            raise InternalError("Upload failed") from e
        finally:
            await upload.close()

        stored = StoredFile.from_path(dest)
        logger.info("Uploaded %s as %s (%s bytes)", original, stored.name, stored.size)
        return UploadedFile(
            original_name=original,
            stored=stored,
            mimetype=upload.content_type or stored.content_type,
            uploaded_at=datetime.now(timezone.utc),
        )

    def list_files(self) -> list[StoredFile]:
        """Regular files directly inside the directory, in no particular order."""
        try:
            return [
                StoredFile.from_path(p)
                for p in self.directory.iterdir()
                if p.is_file()
            ]
        except OSError as e:
            logger.exception("Error listing files in %s: %s", self.directory, e)
            raise InternalError("Failed to list files") from e

    def resolve(self, name: str) -> Path:
        """Path of an existing stored file; names escaping the directory are not found."""
        if not name or name != Path(name).name or name in (".", ".."):
            raise NotFoundError("File not found")
        path = self.directory / name
        if not path.is_file():
            raise NotFoundError("File not found")
        return path
