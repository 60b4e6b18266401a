"""
Layout Engine - Preference Persistence.

============================================================
RESPONSIBILITY
============================================================
Best-effort local storage of layout preferences.

- StoragePort: Result-returning key/value port (never raises)
- Adapters: in-memory, JSON files on disk, disabled
- Preference stores: load with fallback to defaults,
  fire-and-forget writes

Layout preferences are cosmetic. Every storage failure
(storage disabled, quota exceeded, corrupt JSON, wrong shape)
degrades to the in-memory defaults and is never surfaced.

============================================================
RECONCILIATION POLICY
============================================================
Stored column preferences are MERGED with the current
column definitions on load:
- ids no longer defined are dropped
- newly defined ids are appended in definition order with
  their default visibility
- pinned ids are re-spliced at the front
A blob written for the current column set loads unchanged.
The stored blob itself is never repaired or removed.

============================================================
"""

import json
import logging
import os
import re
import tempfile
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from core.exceptions import LayoutValidationError, StorageError
from .config import PersistenceConfig
from .types import ColumnDefinition, ColumnPreferences, WidgetWidth


logger = logging.getLogger(__name__)


# =============================================================
# STORAGE RESULT
# =============================================================

@dataclass
class StorageResult:
    """Outcome of a storage call."""

    ok: bool
    value: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def success(cls, value: Optional[str] = None) -> "StorageResult":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: Union[str, Exception]) -> "StorageResult":
        return cls(ok=False, error=str(error))


# =============================================================
# STORAGE PORT
# =============================================================

class StoragePort(ABC):
    """
    Key/value storage for serialized preferences.

    Implementations must not raise: failures are reported
    through StorageResult. A successful read of a missing
    key returns ok=True with value=None.
    """

    def read(self, key: str) -> StorageResult:
        try:
            return StorageResult.success(self._read(key))
        except StorageError as e:
            return StorageResult.failure(e)
        except Exception as e:
            return StorageResult.failure(f"{type(e).__name__}: {e}")

    def write(self, key: str, value: str) -> StorageResult:
        try:
            self._write(key, value)
            return StorageResult.success()
        except StorageError as e:
            return StorageResult.failure(e)
        except Exception as e:
            return StorageResult.failure(f"{type(e).__name__}: {e}")

    @abstractmethod
    def _read(self, key: str) -> Optional[str]:
        """Return the stored string, None if absent. May raise."""
        pass

    @abstractmethod
    def _write(self, key: str, value: str) -> None:
        """Store value under key. May raise."""
        pass


class InMemoryStorage(StoragePort):
    """
    Process-local storage.

    quota_bytes emulates a browser quota: writes that would push
    the total stored size over the quota fail.
    """

    def __init__(self, initial: Optional[Dict[str, str]] = None, quota_bytes: Optional[int] = None):
        self._data: Dict[str, str] = dict(initial or {})
        self._quota_bytes = quota_bytes

    def _read(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def _write(self, key: str, value: str) -> None:
        if self._quota_bytes is not None:
            used = sum(len(v.encode("utf-8")) for k, v in self._data.items() if k != key)
            if used + len(value.encode("utf-8")) > self._quota_bytes:
                raise StorageError("Storage quota exceeded", key=key)
        self._data[key] = value

    def snapshot(self) -> Dict[str, str]:
        return dict(self._data)


class JsonFileStorage(StoragePort):
    """
    One file per key under a directory.

    Writes go through a temp file and an atomic replace, so a
    crash mid-write never leaves a truncated blob behind.
    """

    def __init__(self, directory: Union[str, Path]):
        self._directory = Path(directory)

    @property
    def directory(self) -> Path:
        return self._directory

    def path_for(self, key: str) -> Path:
        safe_key = re.sub(r"[^A-Za-z0-9_.-]", "_", key)
        return self._directory / f"{safe_key}.json"

    def _read(self, key: str) -> Optional[str]:
        path = self.path_for(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def _write(self, key: str, value: str) -> None:
        self._directory.mkdir(parents=True, exist_ok=True)
        path = self.path_for(key)
        fd, tmp_path = tempfile.mkstemp(dir=str(self._directory), suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
            os.replace(tmp_path, path)
        except OSError:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise


class UnavailableStorage(StoragePort):
    """Storage disabled: every call fails."""

    def _read(self, key: str) -> Optional[str]:
        raise StorageError("Local storage is not available", key=key)

    def _write(self, key: str, value: str) -> None:
        raise StorageError("Local storage is not available", key=key)


def build_storage(config: PersistenceConfig) -> StoragePort:
    """Create the configured storage backend."""
    config.validate()
    if config.backend == "file":
        return JsonFileStorage(config.directory)
    if config.backend == "disabled":
        return UnavailableStorage()
    return InMemoryStorage()


# =============================================================
# PREFERENCE STORES
# =============================================================

class PreferenceStore:
    """
    JSON blob under one storage key, read and written best-effort.
    """

    def __init__(self, storage: Optional[StoragePort], key: str):
        self._storage = storage
        self._key = key

    @property
    def key(self) -> str:
        return self._key

    def read_blob(self) -> Optional[Any]:
        """Decoded blob, or None when absent or unreadable."""
        if self._storage is None:
            return None

        result = self._storage.read(self._key)
        if not result.ok:
            logger.debug(f"Preference read failed for {self._key}: {result.error}")
            return None
        if result.value is None:
            return None

        try:
            return json.loads(result.value)
        except ValueError as e:
            logger.debug(f"Ignoring corrupt preferences under {self._key}: {e}")
            return None

    def write_blob(self, data: Any) -> bool:
        """Serialize and write. Returns False on any failure."""
        if self._storage is None:
            return False

        try:
            payload = json.dumps(data)
        except (TypeError, ValueError) as e:
            logger.debug(f"Preferences for {self._key} are not serializable: {e}")
            return False

        result = self._storage.write(self._key, payload)
        if not result.ok:
            logger.debug(f"Preference write failed for {self._key}: {result.error}")
        return result.ok


class ColumnPreferenceStore(PreferenceStore):
    """Column order and visibility for one table."""

    def __init__(
        self,
        storage: Optional[StoragePort],
        key: str,
        definitions: List[ColumnDefinition],
    ):
        super().__init__(storage, key)
        self._definitions = list(definitions)

    def defaults(self) -> ColumnPreferences:
        return ColumnPreferences.defaults_for(self._definitions)

    def persist(self, order: List[str], visibility: Dict[str, bool]) -> bool:
        return self.write_blob({"order": list(order), "visibility": dict(visibility)})

    def load(self) -> ColumnPreferences:
        """Stored preferences merged with the definitions, or defaults."""
        blob = self.read_blob()
        if blob is None:
            return self.defaults()
        return self.parse(blob)

    def parse(self, blob: Any) -> ColumnPreferences:
        """Validate and reconcile a decoded blob. Invalid shapes yield defaults."""
        try:
            stored = ColumnPreferences.from_dict(blob)
        except LayoutValidationError as e:
            logger.debug(f"Ignoring invalid preferences under {self._key}: {e.message}")
            return self.defaults()
        return reconcile_preferences(stored, self._definitions)


class WidgetPreferenceStore(PreferenceStore):
    """Dashboard widget order and widths."""

    def persist(self, order: List[str], widths: Dict[str, WidgetWidth]) -> bool:
        return self.write_blob({
            "order": list(order),
            "widths": {widget_id: width.value for widget_id, width in widths.items()},
        })

    def load(self) -> Optional[Dict[str, Any]]:
        """
        Stored {"order": [...], "widths": {id: WidgetWidth}}.

        Returns None when absent or invalid; entries with an
        unknown width are dropped.
        """
        blob = self.read_blob()
        if not isinstance(blob, dict):
            return None

        order = blob.get("order")
        widths = blob.get("widths", {})
        if not isinstance(order, list) or not all(isinstance(i, str) for i in order):
            return None
        if not isinstance(widths, dict):
            return None

        parsed: Dict[str, WidgetWidth] = {}
        for widget_id, raw in widths.items():
            try:
                parsed[widget_id] = WidgetWidth.parse(raw)
            except LayoutValidationError:
                continue

        seen = set()
        unique_order = []
        for widget_id in order:
            if widget_id not in seen:
                seen.add(widget_id)
                unique_order.append(widget_id)

        return {"order": unique_order, "widths": parsed}


def reconcile_preferences(
    stored: ColumnPreferences,
    definitions: List[ColumnDefinition],
) -> ColumnPreferences:
    """Merge stored preferences with the current column definitions."""
    known = [col.id for col in definitions]
    known_set = set(known)
    pinned = [col.id for col in definitions if col.always_visible]
    pinned_set = set(pinned)
    default_visibility = {col.id: col.default_visible for col in definitions}

    order = [i for i in stored.order if i in known_set]
    order += [i for i in known if i not in order]
    order = pinned + [i for i in order if i not in pinned_set]

    visibility = {
        i: stored.visibility.get(i, default_visibility[i])
        for i in order
    }

    return ColumnPreferences(order=order, visibility=visibility)
