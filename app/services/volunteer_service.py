# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Volunteer management — validation, partial-update merge rules,
and orchestration of the repository and the search engine.
"""

import re
from typing import Any, Optional

from app.core.errors import InvalidInputError, VolunteerNotFoundError
from app.core.logging import get_logger
from app.metrics.prometheus import (
    VALIDATION_FAILURES,
    VOLUNTEER_SEARCHES,
    VOLUNTEERS_CREATED,
    VOLUNTEERS_DELETED,
    VOLUNTEERS_UPDATED,
)
from app.models.domain import SearchQuery, Volunteer
from app.repositories.volunteer_repository import JsonVolunteerRepository
from app.services.search import search

logger = get_logger(__name__)

EMAIL_PATTERN = re.compile(r"^[A-Za-z0-9+_.-]+@(.+)$")

# (attribute, message) in the order they are checked
MANDATORY_FIELDS: tuple[tuple[str, str], ...] = (
    ("first_name", "First name is required."),
    ("last_name", "Last name is required."),
    ("contact_number", "Contact number is required."),
    ("email", "Email is required."),
)

# Text fields merged on update only when the patch value is non-blank
MERGEABLE_TEXT_FIELDS: tuple[str, ...] = (
    "first_name",
    "last_name",
    "contact_number",
    "email",
    "role",
)


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def validate_volunteer(volunteer: Volunteer) -> None:
    """Raise InvalidInputError if a mandatory field is blank or the email is malformed."""
    for field, message in MANDATORY_FIELDS:
        if _is_blank(getattr(volunteer, field)):
            VALIDATION_FAILURES.labels(field=field).inc()
            raise InvalidInputError(message, field=field)
    if not EMAIL_PATTERN.fullmatch(volunteer.email):
        VALIDATION_FAILURES.labels(field="email").inc()
        raise InvalidInputError("Invalid email format.", field="email")


def merge_volunteer(existing: Volunteer, patch: Volunteer) -> list[str]:
    """Apply ``patch`` onto ``existing`` in place; returns the changed field names.

    Blank text fields, empty skills and unset dates leave the stored values
    alone; ``active`` is always taken from the patch. The id is never touched.
    """
    changes: list[str] = []
    for field in MERGEABLE_TEXT_FIELDS:
        value = getattr(patch, field)
        if not _is_blank(value) and value != getattr(existing, field):
            setattr(existing, field, value)
            changes.append(field)

    if patch.skills and patch.skills != existing.skills:
        existing.skills = list(patch.skills)
        changes.append("skills")

    for field in ("date_of_birth", "date_joined"):
        value = getattr(patch, field)
        if value is not None and value != getattr(existing, field):
            setattr(existing, field, value)
            changes.append(field)

    if patch.active != existing.active:
        changes.append("active")
    existing.active = patch.active
    return changes


class VolunteerService:
    """Business logic for the volunteer roster."""

    def __init__(self, repo: JsonVolunteerRepository) -> None:
        self._repo = repo

    # ── Commands ──

    def create_volunteer(self, volunteer: Volunteer) -> Volunteer:
        """Validate and persist a new volunteer. The supplied id is kept as-is."""
        validate_volunteer(volunteer)
        saved = self._repo.save(volunteer)
        VOLUNTEERS_CREATED.inc()
        logger.info(
            "Volunteer created id=%s role=%s", saved.id, saved.role,
            extra={"volunteer_id": saved.id},
        )
        return saved

    def update_volunteer(self, volunteer_id: str, patch: Volunteer) -> Volunteer:
        """Merge ``patch`` into the stored volunteer.

        The patch is validated like a create, then lookup, merge and rewrite
        run under the repository lock so no concurrent write can interleave.
        """
        validate_volunteer(patch)

        changes: list[str] = []

        def apply(existing: Volunteer) -> Volunteer:
            changes.extend(merge_volunteer(existing, patch))
            return existing

        saved = self._repo.update(volunteer_id, apply)
        if saved is None:
            raise VolunteerNotFoundError(volunteer_id)
        VOLUNTEERS_UPDATED.inc()
        logger.info(
            "Volunteer updated id=%s changes=%s", volunteer_id, changes,
            extra={"volunteer_id": volunteer_id},
        )
        return saved

    def delete_volunteer(self, volunteer_id: str) -> None:
        if self._repo.delete_by_id(volunteer_id) is None:
            raise VolunteerNotFoundError(volunteer_id)
        VOLUNTEERS_DELETED.inc()
        logger.info("Volunteer deleted id=%s", volunteer_id, extra={"volunteer_id": volunteer_id})

    # ── Queries ──

    def get_volunteer_by_id(self, volunteer_id: str) -> Volunteer:
        volunteer = self._repo.find_by_id(volunteer_id)
        if volunteer is None:
            raise VolunteerNotFoundError(volunteer_id)
        return volunteer

    def get_all_volunteers(self) -> list[Volunteer]:
        return self._repo.find_all()

    def search_volunteers(self, query: SearchQuery) -> list[Volunteer]:
        VOLUNTEER_SEARCHES.labels(active=str(query.active).lower()).inc()
        return search(self._repo.find_all(), query)

    # ── Stats helpers ──

    def get_stats(self) -> dict[str, Any]:
        """Aggregated roster statistics."""
        volunteers = self._repo.find_all()
        active = sum(1 for v in volunteers if v.active)
        by_role: dict[str, int] = {}
        by_skill: dict[str, int] = {}
        for v in volunteers:
            role = v.role or "unassigned"
            by_role[role] = by_role.get(role, 0) + 1
            for skill in v.skills:
                by_skill[skill] = by_skill.get(skill, 0) + 1
        return {
            "total": len(volunteers),
            "active": active,
            "inactive": len(volunteers) - active,
            "by_role": by_role,
            "by_skill": by_skill,
        }
