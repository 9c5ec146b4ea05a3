# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Request / Response schemas — API contract definitions.
These are Pydantic models used ONLY at the controller (HTTP) boundary.
"""

from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.models.domain import Volunteer


class VolunteerRequest(BaseModel):
    """Body of POST and PUT /api/volunteers.

    Every field is optional here; mandatory-field rules are applied by the
    service; malformed bodies are turned into 400 by the handler in main.py.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: Optional[str] = Field(default=None, description="Ignored on update")
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    contact_number: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = None
    skills: Optional[list[str]] = None
    active: bool = False
    date_of_birth: Optional[date] = None
    date_joined: Optional[date] = None

    def to_domain(self) -> Volunteer:
        return Volunteer(**self.model_dump(exclude_none=True))


class VolunteerResponse(Volunteer):
    """Volunteer as returned to clients (camelCase keys)."""


class VolunteerStats(BaseModel):
    total: int
    active: int
    inactive: int
    by_role: dict[str, int]
    by_skill: dict[str, int]


class ErrorResponse(BaseModel):
    error: str
    detail: Optional[str] = None
    request_id: Optional[str] = None
