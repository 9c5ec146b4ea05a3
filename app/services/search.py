# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Volunteer search — pure filtering, no side effects.
"""

from typing import Iterable

from app.models.domain import SearchQuery, Volunteer


def matches_active(volunteer: Volunteer, query: SearchQuery) -> bool:
    return volunteer.active == query.active


def matches_skills(volunteer: Volunteer, query: SearchQuery) -> bool:
    """ANY-match: one shared skill is enough. No skills in the query matches all."""
    if not query.skills:
        return True
    return not set(query.skills).isdisjoint(volunteer.skills)


def matches_role(volunteer: Volunteer, query: SearchQuery) -> bool:
    if query.role is None:
        return True
    if volunteer.role is None:
        return False
    return volunteer.role == query.role


def search(volunteers: Iterable[Volunteer], query: SearchQuery) -> list[Volunteer]:
    """
    Return the volunteers matching ``query``, preserving input order.
    Pure function — no I/O, no metrics, no logging.
    """
    return [
        v
        for v in volunteers
        if matches_active(v, query)
        and matches_skills(v, query)
        and matches_role(v, query)
    ]
