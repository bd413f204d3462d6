# naturalization/storage.py

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional

import structlog
from pydantic import TypeAdapter, ValidationError

from .models import Profile, Trip


logger = structlog.get_logger(__name__)

PROFILE_SLOT = "current"
TRIPS_SLOT = "all"

_TRIPS_ADAPTER = TypeAdapter(List[Trip])


class StorageError(Exception):
    """The store exists but cannot be read or written."""


class TrackerStore:
    """
    Local persistence for the single "current" profile and the trip list.

    Layout (one JSON document):
      {"profile": {"current": {...}}, "trips": {"all": [...]}}

    Records are validated on load; anything that no longer validates is a
    StorageError rather than a half-loaded state.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    # -------------------------
    # Document I/O
    # -------------------------

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            doc = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise StorageError(f"Cannot read store {self.path}: {e}") from e
        if not isinstance(doc, dict):
            raise StorageError(f"Store {self.path} is not a JSON object.")
        return doc

    def _slot(self, doc: Dict[str, Any], section: str) -> Dict[str, Any]:
        slot = doc.setdefault(section, {})
        if not isinstance(slot, dict):
            raise StorageError(f"Store {self.path}: '{section}' is not a JSON object.")
        return slot

    def _write(self, doc: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        # Write to a sibling temp file, then swap, so a crash never leaves half a document.
        fd, tmp_name = tempfile.mkstemp(prefix=".store-", suffix=".json", dir=self.path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(doc, fh, indent=2)
            os.replace(tmp_name, self.path)
        except OSError as e:
            Path(tmp_name).unlink(missing_ok=True)
            raise StorageError(f"Cannot write store {self.path}: {e}") from e

    # -------------------------
    # Profile
    # -------------------------

    def save_profile(self, profile: Profile) -> None:
        doc = self._read()
        self._slot(doc, "profile")[PROFILE_SLOT] = profile.model_dump(mode="json")
        self._write(doc)
        logger.info("profile_saved", path=str(self.path), eligibility_path=profile.eligibility_path)

    def load_profile(self) -> Optional[Profile]:
        raw = self._slot(self._read(), "profile").get(PROFILE_SLOT)
        if raw is None:
            return None
        try:
            return Profile.model_validate(raw)
        except ValidationError as e:
            raise StorageError(f"Stored profile is invalid: {e}") from e

    # -------------------------
    # Trips
    # -------------------------

    def save_trips(self, trips: List[Trip]) -> None:
        doc = self._read()
        self._slot(doc, "trips")[TRIPS_SLOT] = _TRIPS_ADAPTER.dump_python(trips, mode="json")
        self._write(doc)
        logger.info("trips_saved", path=str(self.path), count=len(trips))

    def load_trips(self) -> List[Trip]:
        raw = self._slot(self._read(), "trips").get(TRIPS_SLOT)
        if raw is None:
            return []
        try:
            trips = _TRIPS_ADAPTER.validate_python(raw)
        except ValidationError as e:
            raise StorageError(f"Stored trips are invalid: {e}") from e
        logger.debug("trips_loaded", path=str(self.path), count=len(trips))
        return trips

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()
            logger.info("store_cleared", path=str(self.path))
