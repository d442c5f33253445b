"""Filesystem storage for uploaded manual documents."""
from __future__ import annotations

import logging
import os
import re
import uuid
from pathlib import Path
from typing import BinaryIO

from ..config import get_settings
from ..errors import DocumentNotReadableError, StorageError

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 1024 * 1024
_DEFAULT_FILENAME = "manual.pdf"
TOMBSTONE_SUFFIX = ".deleting"


def _sanitize_filename(filename: str | None) -> str:
    """Reduce an uploaded filename to a safe single path segment."""

    base = os.path.basename((filename or "").replace("\\", "/")).strip()
    stem, extension = os.path.splitext(base)
    stem = re.sub(r"[^A-Za-z0-9._-]", "-", stem)
    stem = re.sub(r"-+", "-", stem).strip("-.")
    extension = re.sub(r"[^A-Za-z0-9]", "", extension)
    if not stem:
        return _DEFAULT_FILENAME
    return f"{stem}.{extension}" if extension else stem


def is_legacy_location(stored_value: str) -> bool:
    """Legacy rows stored a full path; current rows store a bare key."""

    return "/" in stored_value or "\\" in stored_value


class DocumentStore:
    """Stores manual bytes under generated, collision-resistant keys."""

    def __init__(self, root: str | Path) -> None:
        self._root = Path(root).expanduser().resolve()

    @property
    def root(self) -> Path:
        return self._root

    def generate_key(self, suggested_name: str | None) -> str:
        return f"{uuid.uuid4().hex}_{_sanitize_filename(suggested_name)}"

    def resolve(self, stored_value: str) -> Path:
        """Map a stored location (bare key or legacy path) to a filesystem path."""

        value = (stored_value or "").strip()
        if not value:
            raise DocumentNotReadableError("Manual has no stored file location.")
        if is_legacy_location(value):
            # TODO: drop once legacy full-path rows are rewritten to bare keys.
            return Path(value.replace("\\", "/"))
        return self._root / value

    def store(self, data: bytes | BinaryIO, suggested_name: str | None) -> str:
        """Persist ``data`` and return the generated storage key."""

        key = self.generate_key(suggested_name)
        destination = self._root / key
        try:
            self._root.mkdir(parents=True, exist_ok=True)
            with destination.open("xb") as fh:
                if isinstance(data, (bytes, bytearray, memoryview)):
                    fh.write(data)
                else:
                    data.seek(0)
                    while True:
                        chunk = data.read(_CHUNK_SIZE)
                        if not chunk:
                            break
                        fh.write(chunk)
        except OSError as exc:
            logger.exception("Failed to write manual file %s", destination)
            # Never leave a partially written file behind.
            try:
                destination.unlink(missing_ok=True)
            except OSError:
                logger.warning("Unable to remove partial manual file %s", destination)
            raise StorageError("Unable to store manual file") from exc

        logger.info("Stored manual file key=%s", key)
        return key

    def open_path(self, stored_value: str) -> Path:
        """Return the readable path behind ``stored_value``."""

        path = self.resolve(stored_value)
        if not path.is_file() or not os.access(path, os.R_OK):
            raise DocumentNotReadableError(f"Manual file is not readable: {stored_value}")
        return path

    def retrieve(self, stored_value: str) -> bytes:
        path = self.open_path(stored_value)
        try:
            return path.read_bytes()
        except OSError as exc:
            raise DocumentNotReadableError(f"Manual file is not readable: {stored_value}") from exc

    def exists(self, stored_value: str) -> bool:
        try:
            return self.resolve(stored_value).is_file()
        except DocumentNotReadableError:
            return False

    def delete(self, stored_value: str) -> bool:
        """Remove the stored file. Returns ``False`` when nothing was there."""

        if not (stored_value or "").strip():
            return False
        path = self.resolve(stored_value)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as exc:
            logger.exception("Failed to delete manual file %s", path)
            raise StorageError("Unable to delete manual file") from exc
        logger.info("Deleted manual file %s", stored_value)
        return True

    def detach(self, stored_value: str) -> Path | None:
        """Move the stored file aside so its deletion can still be undone.

        Returns the tombstone path, or ``None`` when nothing was stored. Pair
        with :meth:`purge` once the deletion is final, or :meth:`restore`.
        """

        if not (stored_value or "").strip():
            return None
        path = self.resolve(stored_value)
        tombstone = path.with_name(path.name + TOMBSTONE_SUFFIX)
        try:
            os.replace(path, tombstone)
        except FileNotFoundError:
            return None
        except OSError as exc:
            logger.exception("Failed to detach manual file %s", path)
            raise StorageError("Unable to delete manual file") from exc
        logger.debug("Detached manual file %s -> %s", stored_value, tombstone.name)
        return tombstone

    def restore(self, stored_value: str, tombstone: Path) -> None:
        path = self.resolve(stored_value)
        try:
            os.replace(tombstone, path)
        except OSError:
            logger.exception("Unable to restore manual file %s from %s", path, tombstone)
            return
        logger.info("Restored manual file %s", stored_value)

    def purge(self, tombstone: Path) -> None:
        # Runs after the commit; a leftover tombstone is never read again.
        try:
            tombstone.unlink(missing_ok=True)
        except OSError:
            logger.warning("Unable to remove detached manual file %s", tombstone)
            return
        logger.info("Deleted manual file %s", tombstone.name[: -len(TOMBSTONE_SUFFIX)])


_document_store: DocumentStore | None = None


def set_document_store(store: DocumentStore | None) -> None:
    """Override the process-wide document store (used by tests)."""

    global _document_store
    _document_store = store


def get_document_store() -> DocumentStore:
    global _document_store
    if _document_store is None:
        _document_store = DocumentStore(get_settings().manual_storage_dir)
    return _document_store


__all__ = [
    "TOMBSTONE_SUFFIX",
    "DocumentStore",
    "is_legacy_location",
    "get_document_store",
    "set_document_store",
]
