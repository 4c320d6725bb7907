"""Durable mirror of cart state"""

import os
import re
import logging
import tempfile
from pathlib import Path
from typing import Optional, Protocol

from pydantic import TypeAdapter, ValidationError

from ..models.cart import CartLine
from ..services.cart_engine import CartEngine

logger = logging.getLogger(__name__)

CART_KEY = "cart"
SAVED_KEY = "savedForLater"

_lines_adapter = TypeAdapter(list[CartLine])


class CartStorageError(Exception):
    """Raised by blob storage when a read or write fails"""
    pass


class BlobStorage(Protocol):
    """Key-value storage for serialized cart lists"""

    def read_blob(self, key: str) -> Optional[bytes]:
        ...

    def write_blob(self, key: str, data: bytes) -> None:
        ...


class InMemoryBlobStorage:
    """Process-local blob storage"""

    def __init__(self):
        self.blobs: dict[str, bytes] = {}

    def read_blob(self, key: str) -> Optional[bytes]:
        return self.blobs.get(key)

    def write_blob(self, key: str, data: bytes) -> None:
        self.blobs[key] = data


class FileBlobStorage:
    """Blob storage keeping one file per key in a directory"""

    def __init__(self, directory: str):
        self.directory = Path(directory)

    def _path_for(self, key: str) -> Path:
        safe_key = re.sub(r"[^A-Za-z0-9_.-]", "_", key)
        return self.directory / f"{safe_key}.json"

    def read_blob(self, key: str) -> Optional[bytes]:
        path = self._path_for(key)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise CartStorageError(f"Failed to read {path}: {e}") from e

    def write_blob(self, key: str, data: bytes) -> None:
        path = self._path_for(key)
        tmp_path = None
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            # Write to a sibling temp file and swap it in
            fd, tmp_path = tempfile.mkstemp(dir=self.directory, suffix=".tmp")
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.replace(tmp_path, path)
        except OSError as e:
            if tmp_path:
                self._discard(tmp_path)
            raise CartStorageError(f"Failed to write {path}: {e}") from e

    @staticmethod
    def _discard(tmp_path: str) -> None:
        try:
            os.unlink(tmp_path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Could not remove temp file {tmp_path}: {e}")


class PersistedCartStore:
    """
    Mirrors a CartEngine's two lists into blob storage.

    Storage is never the source of truth: read failures and malformed data
    yield empty lists, and write failures are logged and dropped.
    """

    def __init__(self, storage: BlobStorage, namespace: Optional[str] = None):
        self.storage = storage
        self.namespace = namespace

    def _key(self, name: str) -> str:
        return f"{self.namespace}:{name}" if self.namespace else name

    def load(self) -> tuple[list[CartLine], list[CartLine]]:
        """Load (items, saved_items), empty where nothing valid is stored"""
        return self._load_list(CART_KEY), self._load_list(SAVED_KEY)

    def save(self, items: list[CartLine], saved_items: list[CartLine]) -> None:
        """Write both lists; never raises"""
        for name, lines in ((CART_KEY, items), (SAVED_KEY, saved_items)):
            key = self._key(name)
            try:
                self.storage.write_blob(key, _lines_adapter.dump_json(lines))
            except CartStorageError as e:
                logger.error(f"Failed to persist {key}: {e}")

    def attach(self, engine: CartEngine) -> None:
        """Persist the engine's state after each of its mutations"""
        engine.subscribe(self._on_change)

    def detach(self, engine: CartEngine) -> None:
        engine.unsubscribe(self._on_change)

    def _on_change(self, engine: CartEngine) -> None:
        self.save(engine.items, engine.saved_items)

    def _load_list(self, name: str) -> list[CartLine]:
        key = self._key(name)
        try:
            raw = self.storage.read_blob(key)
        except CartStorageError as e:
            logger.error(f"Failed to read {key}: {e}")
            return []

        if not raw:
            return []

        try:
            return _lines_adapter.validate_json(raw)
        except ValidationError as e:
            logger.warning(f"Discarding malformed cart data in {key}: {e.error_count()} errors")
            return []
