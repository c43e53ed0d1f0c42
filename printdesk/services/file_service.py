"""FileService: uploaded files on the local file system.

Files live flat under one storage root and are exposed to clients as
``/uploads/<stored name>``. Listing and lookup only stat the files; file
metadata is not recorded anywhere else, and orders keep their own copies.
"""
from __future__ import annotations

import logging
import mimetypes
import time
from pathlib import Path, PurePosixPath
from typing import List, Optional, Union

from printdesk.config.storage import DEFAULT_MAX_UPLOAD_BYTES
from printdesk.core.exceptions import PersistenceError, UploadError, UploadLimitError
from printdesk.stores.types import StoredFile

logger = logging.getLogger(__name__)

URL_PREFIX = "/uploads/"
_DEFAULT_TYPE = "application/octet-stream"


def _guess_type(name: str) -> str:
    return mimetypes.guess_type(name)[0] or _DEFAULT_TYPE


class FileService:
    """Save, list, look up and clear uploaded files.

    Usage::

        svc = FileService("./uploads")
        stored = svc.save_file(data, "report.pdf", "application/pdf")
        files  = svc.list_files()
        info   = svc.get_file(stored.path)
        svc.delete_all_files()
    """

    def __init__(
        self,
        root: Union[str, Path],
        *,
        max_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
    ) -> None:
        self.root = Path(root)
        self.max_bytes = max_bytes

    # ── Upload ──

    def save_file(
        self,
        data: Optional[bytes],
        original_name: Optional[str],
        content_type: Optional[str] = None,
    ) -> StoredFile:
        """Store ``data`` as ``<epoch-millis>_<base><ext>`` and return its metadata.

        ``name`` in the result is the original file name; ``path``/``url``
        point at the stored copy.
        """
        if data is None or not original_name:
            raise UploadError("No file uploaded")
        if len(data) > self.max_bytes:
            raise UploadLimitError(
                "Upload failed",
                details={"size": len(data), "max_bytes": self.max_bytes},
            )

        # Browsers may send a client path; keep only the last component
        original = PurePosixPath(original_name.replace("\\", "/")).name or "unknown"
        suffix = PurePosixPath(original).suffix
        stem = original[: -len(suffix)] if suffix else original
        unique_name = f"{time.time_ns() // 1_000_000}_{stem}{suffix}"

        try:
            self.root.mkdir(parents=True, exist_ok=True)
            (self.root / unique_name).write_bytes(data)
        except OSError as exc:
            logger.error("FileService.save_file: write failed name=%s: %s", unique_name, exc)
            raise PersistenceError("Upload failed", cause=exc) from exc

        logger.info("FileService: stored '%s' as %s (%d bytes)", original, unique_name, len(data))
        url = URL_PREFIX + unique_name
        return StoredFile(
            name=original,
            size=len(data),
            type=content_type or _guess_type(original),
            path=url,
            url=url,
        )

    # ── List / get ──

    def list_files(self) -> List[StoredFile]:
        """All stored files sorted by name. A missing root means no files."""
        if not self.root.is_dir():
            return []
        try:
            entries = sorted(p for p in self.root.iterdir() if p.is_file())
            return [self._to_stored_file(p) for p in entries]
        except OSError as exc:
            raise PersistenceError("Could not list uploads", cause=exc) from exc

    def get_file(self, relative_path: str) -> Optional[StoredFile]:
        path = self.resolve_path(relative_path)
        if path is None:
            return None
        return self._to_stored_file(path)

    def resolve_path(self, relative_path: str) -> Optional[Path]:
        """Map ``name`` or ``/uploads/name`` to a file under the root.

        Anything that does not resolve to an existing regular file inside the
        root, including ``..`` tricks, is reported as ``None``.
        """
        rel = (relative_path or "").strip()
        if rel.startswith(URL_PREFIX):
            rel = rel[len(URL_PREFIX):]
        rel = rel.lstrip("/")
        if not rel:
            return None
        try:
            root = self.root.resolve()
            candidate = (root / rel).resolve()
            if root not in candidate.parents or not candidate.is_file():
                return None
        except (OSError, ValueError):
            # e.g. embedded NUL bytes or over-long names
            return None
        return candidate

    # ── Delete ──

    def delete_all_files(self) -> int:
        """Remove every file under the root. Returns how many were removed."""
        if not self.root.is_dir():
            return 0
        removed = 0
        try:
            for path in self.root.iterdir():
                if path.is_file() or path.is_symlink():
                    path.unlink()
                    removed += 1
        except OSError as exc:
            logger.error("FileService.delete_all_files: failed after %d files: %s", removed, exc)
            raise PersistenceError("Could not delete uploads", cause=exc) from exc
        logger.warning("FileService: deleted %d uploaded files", removed)
        return removed

    # ── Helpers ──

    def _to_stored_file(self, path: Path) -> StoredFile:
        url = URL_PREFIX + path.name
        return StoredFile(
            name=path.name,
            size=path.stat().st_size,
            type=_guess_type(path.name),
            path=url,
            url=url,
        )
