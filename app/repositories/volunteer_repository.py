# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Repository: Volunteer data access.
Owns the authoritative in-memory roster and its JSON mirror on disk.
NO business rules here — pure CRUD plus raw scans.

Every mutation holds one lock across "change memory + rewrite the mirror",
and every read returns deep copies taken under the same lock.
"""

import json
import os
import tempfile
import threading
from datetime import date
from pathlib import Path
from typing import Any, Callable, Iterable, Optional

from app.core.errors import PersistenceError
from app.core.logging import get_logger
from app.metrics.prometheus import (
    MIRROR_WRITE_FAILURES,
    MIRROR_WRITE_LATENCY,
    MIRROR_WRITES,
    VOLUNTEERS_TOTAL,
)
from app.models.domain import Volunteer, new_volunteer_id

logger = get_logger(__name__)

DEFAULT_VOLUNTEERS: list[dict[str, Any]] = [
    {
        "first_name": "Grace",
        "last_name": "Adeyemi",
        "contact_number": "07700 900101",
        "email": "grace.adeyemi@example.org",
        "role": "Accountant",
        "skills": ["Integrity", "Bookkeeping"],
        "active": False,
        "date_joined": date(2019, 3, 10),
    },
    {
        "first_name": "Marcus",
        "last_name": "Bell",
        "contact_number": "07700 900102",
        "email": "marcus.bell@example.org",
        "role": "Greeter",
        "skills": ["Warmth", "Hospitality"],
        "active": True,
        "date_joined": date(2021, 6, 27),
    },
    {
        "first_name": "Priya",
        "last_name": "Nair",
        "contact_number": "07700 900103",
        "email": "priya.nair@example.org",
        "role": "Youth Leader",
        "skills": ["Mentoring", "Patience", "Event Planning"],
        "active": True,
        "date_joined": date(2020, 9, 13),
    },
    {
        "first_name": "Daniel",
        "last_name": "Okafor",
        "contact_number": "07700 900104",
        "email": "daniel.okafor@example.org",
        "role": "Sound Technician",
        "skills": ["Audio Engineering", "Problem Solving"],
        "active": True,
        "date_joined": date(2022, 1, 16),
    },
    {
        "first_name": "Helen",
        "last_name": "Carter",
        "contact_number": "07700 900105",
        "email": "helen.carter@example.org",
        "role": "Choir Director",
        "skills": ["Music", "Leadership"],
        "active": False,
        "date_joined": date(2018, 11, 4),
    },
]


def build_seed_volunteers() -> list[Volunteer]:
    """Bootstrap roster used when the mirror is absent or empty."""
    return [Volunteer(id=new_volunteer_id(), **entry) for entry in DEFAULT_VOLUNTEERS]


class JsonVolunteerRepository:
    """In-memory volunteer storage mirrored to a JSON array file."""

    def __init__(
        self,
        path: str | os.PathLike,
        seed_defaults: bool = True,
        retry_attempts: int = 1,
    ) -> None:
        self._path = Path(path)
        self._seed_defaults = seed_defaults
        self._retry_attempts = max(0, retry_attempts)
        self._volunteers: list[Volunteer] = []
        self._lock = threading.RLock()
        self._loaded = False
        self._load_error: Optional[str] = None

    # ── Lifecycle ──

    def load(self) -> int:
        """Read the roster from the mirror, seeding it on first boot.

        Returns the number of volunteers in memory afterwards.
        """
        with self._lock:
            self._load_error = None
            records = self._read_mirror()
            if records is None:
                # a quarantined mirror means the empty roster is real, not first boot
                seed = self._seed_defaults and not self.quarantine_path.exists()
                self._volunteers = build_seed_volunteers() if seed else []
                self._write_mirror()
                logger.info(
                    "Mirror %s absent or empty — seeded %d volunteers",
                    self._path, len(self._volunteers),
                )
            else:
                self._volunteers = records
                if self._load_error is not None and not self._path.exists():
                    self._write_mirror()
                logger.info("Loaded %d volunteers from %s", len(records), self._path)
            self._loaded = True
            VOLUNTEERS_TOTAL.set(len(self._volunteers))
            return len(self._volunteers)

    # ── Read ──

    def find_all(self) -> list[Volunteer]:
        with self._lock:
            return [v.model_copy(deep=True) for v in self._volunteers]

    def find_by_id(self, volunteer_id: str) -> Optional[Volunteer]:
        with self._lock:
            for volunteer in self._volunteers:
                if volunteer.id == volunteer_id:
                    return volunteer.model_copy(deep=True)
        return None

    def find_by_skills(self, skills: Iterable[str]) -> list[Volunteer]:
        """Volunteers sharing at least one skill with ``skills`` (case-sensitive)."""
        wanted = set(skills or ())
        with self._lock:
            return [
                v.model_copy(deep=True)
                for v in self._volunteers
                if wanted.intersection(v.skills)
            ]

    def find_by_is_active(self, active: bool) -> list[Volunteer]:
        with self._lock:
            return [v.model_copy(deep=True) for v in self._volunteers if v.active == active]

    def exists(self, volunteer_id: str) -> bool:
        with self._lock:
            return self._index_of(volunteer_id) is not None

    def count(self) -> int:
        with self._lock:
            return len(self._volunteers)

    # ── Write ──

    def save(self, volunteer: Volunteer) -> Volunteer:
        """Upsert by id, then rewrite the whole mirror."""
        stored = volunteer.model_copy(deep=True)
        with self._lock:
            index = self._index_of(stored.id)
            if index is None:
                self._volunteers.append(stored)
            else:
                self._volunteers[index] = stored
            VOLUNTEERS_TOTAL.set(len(self._volunteers))
            self._write_mirror()
            return stored.model_copy(deep=True)

    def delete(self, volunteer: Volunteer) -> bool:
        """Remove the record with ``volunteer.id``. Missing records are a no-op."""
        with self._lock:
            index = self._index_of(volunteer.id)
            if index is None:
                return False
            del self._volunteers[index]
            VOLUNTEERS_TOTAL.set(len(self._volunteers))
            self._write_mirror()
            return True

    def update(
        self, volunteer_id: str, merge: Callable[[Volunteer], Volunteer]
    ) -> Optional[Volunteer]:
        """Look up, merge and rewrite as one critical section.

        ``merge`` receives a private copy of the stored record and returns the
        record to store. Returns None (and writes nothing) if the id is unknown.
        """
        with self._lock:
            index = self._index_of(volunteer_id)
            if index is None:
                return None
            merged = merge(self._volunteers[index].model_copy(deep=True))
            merged.id = volunteer_id
            return self.save(merged)

    def delete_by_id(self, volunteer_id: str) -> Optional[Volunteer]:
        """Remove the record with ``volunteer_id``; returns it, or None if absent."""
        with self._lock:
            found = self.find_by_id(volunteer_id)
            if found is None:
                return None
            self.delete(found)
            return found

    # ── Bulk / internal ──

    def clear(self) -> None:
        """Empty the roster and rewrite the mirror as an empty array."""
        with self._lock:
            self._volunteers.clear()
            VOLUNTEERS_TOTAL.set(0)
            self._write_mirror()

    @property
    def path(self) -> Path:
        return self._path

    @property
    def loaded(self) -> bool:
        return self._loaded

    @property
    def load_error(self) -> Optional[str]:
        return self._load_error

    def _index_of(self, volunteer_id: str) -> Optional[int]:
        for index, volunteer in enumerate(self._volunteers):
            if volunteer.id == volunteer_id:
                return index
        return None

    def _read_mirror(self) -> Optional[list[Volunteer]]:
        """Parsed mirror contents, or None when absent or empty.

        An unparseable mirror is moved aside and treated as an empty roster.
        """
        try:
            raw = self._path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise PersistenceError(
                f"Failed to read volunteer mirror {self._path}", str(self._path), exc
            ) from exc

        if not raw.strip():
            return None

        try:
            data = json.loads(raw.decode("utf-8"))
            if not isinstance(data, list):
                raise ValueError("mirror root must be a JSON array")
            records = [Volunteer.model_validate(item) for item in data]
        except ValueError as exc:
            self._load_error = f"{type(exc).__name__}: {exc}"
            backup = self._quarantine_mirror()
            logger.error(
                "Volunteer mirror %s is unreadable (%s); starting with an empty roster, "
                "original kept at %s",
                self._path, exc, backup,
            )
            return []
        return records or None

    @property
    def quarantine_path(self) -> Path:
        return self._path.with_name(self._path.name + ".corrupt")

    def _quarantine_mirror(self) -> Optional[Path]:
        backup = self.quarantine_path
        try:
            os.replace(self._path, backup)
        except OSError as exc:
            logger.error("Could not move corrupt mirror %s aside: %s", self._path, exc)
            return None
        return backup

    def _write_mirror(self) -> None:
        """Rewrite the full mirror, retrying once on I/O failure. Lock must be held."""
        payload = json.dumps([v.to_record() for v in self._volunteers], indent=2)
        attempts = 1 + self._retry_attempts
        last_exc: Optional[OSError] = None
        for attempt in range(1, attempts + 1):
            try:
                with MIRROR_WRITE_LATENCY.time():
                    self._replace_file(payload)
                MIRROR_WRITES.inc()
                return
            except OSError as exc:
                last_exc = exc
                MIRROR_WRITE_FAILURES.inc()
                logger.warning(
                    "Mirror write attempt %d/%d to %s failed: %s",
                    attempt, attempts, self._path, exc,
                )
        raise PersistenceError(
            f"Failed to write volunteer mirror {self._path}", str(self._path), last_exc
        ) from last_exc

    def _replace_file(self, payload: str) -> None:
        directory = self._path.parent
        directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=directory, prefix=f".{self._path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, self._path)
        except OSError:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
