# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Controller: Volunteer CRUD and search endpoints.
Thin HTTP layer — delegates ALL logic to VolunteerService.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from app.core.dependencies import get_volunteer_service
from app.core.errors import InvalidInputError, VolunteerNotFoundError
from app.models.domain import SearchQuery
from app.schemas.volunteer import VolunteerRequest, VolunteerResponse, VolunteerStats
from app.services.volunteer_service import VolunteerService

router = APIRouter(prefix="/api/volunteers", tags=["Volunteers"])


def _split_skills(raw: Optional[list[str]]) -> list[str]:
    """Accept both ?skills=a&skills=b and ?skills=a,b."""
    skills: list[str] = []
    for item in raw or []:
        skills.extend(part.strip() for part in item.split(",") if part.strip())
    return skills


@router.post("", status_code=201, response_model=VolunteerResponse)
def create_volunteer(
    payload: VolunteerRequest,
    service: VolunteerService = Depends(get_volunteer_service),
):
    """Register a new volunteer."""
    try:
        return service.create_volunteer(payload.to_domain())
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("", response_model=list[VolunteerResponse])
def list_volunteers(
    service: VolunteerService = Depends(get_volunteer_service),
):
    """List every volunteer on the roster."""
    return service.get_all_volunteers()


@router.get("/search", response_model=list[VolunteerResponse])
def search_volunteers(
    skills: Optional[list[str]] = Query(default=None),
    is_active: bool = Query(default=False, alias="isActive"),
    role: Optional[str] = None,
    service: VolunteerService = Depends(get_volunteer_service),
):
    """Filter by activity state, plus optional skills (any match) and role."""
    query = SearchQuery(skills=_split_skills(skills), active=is_active, role=role or None)
    return service.search_volunteers(query)


@router.get("/stats/summary", response_model=VolunteerStats)
def get_stats(
    service: VolunteerService = Depends(get_volunteer_service),
):
    """Roster statistics — counts by activity, role and skill."""
    return service.get_stats()


@router.get("/{volunteer_id}", response_model=VolunteerResponse)
def get_volunteer(
    volunteer_id: str,
    service: VolunteerService = Depends(get_volunteer_service),
):
    try:
        return service.get_volunteer_by_id(volunteer_id)
    except VolunteerNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.put("/{volunteer_id}", response_model=VolunteerResponse)
def update_volunteer(
    volunteer_id: str,
    payload: VolunteerRequest,
    service: VolunteerService = Depends(get_volunteer_service),
):
    """Partially update a volunteer; blank fields keep their stored values."""
    try:
        return service.update_volunteer(volunteer_id, payload.to_domain())
    except VolunteerNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.delete("/{volunteer_id}", status_code=204)
def delete_volunteer(
    volunteer_id: str,
    service: VolunteerService = Depends(get_volunteer_service),
):
    try:
        service.delete_volunteer(volunteer_id)
    except VolunteerNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return Response(status_code=204)
