# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Domain models — pure data structures, NO FastAPI dependency.

Field names are snake_case in Python and camelCase on the wire and in the
JSON mirror file.
"""

import uuid
from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def new_volunteer_id() -> str:
    return str(uuid.uuid4())


class Volunteer(BaseModel):
    """A volunteer on the organisation's roster.

    Mandatory-field rules are enforced by the service layer, not here, so a
    partially populated instance can also act as an update patch.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(default_factory=new_volunteer_id, description="Immutable identifier")
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    contact_number: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = None
    skills: list[str] = Field(default_factory=list)
    active: bool = False
    date_of_birth: Optional[date] = None
    date_joined: Optional[date] = None

    @field_validator("skills", mode="before")
    @classmethod
    def null_skills_as_empty(cls, v):
        return [] if v is None else v

    def to_record(self) -> dict:
        """Serialise to the camelCase dict stored in the mirror file."""
        return self.model_dump(mode="json", by_alias=True)


class SearchQuery(BaseModel):
    """Filter descriptor for volunteer searches.

    ``active`` always filters; ``skills`` and ``role`` filter only when set.
    """

    skills: Optional[list[str]] = None
    active: bool = False
    role: Optional[str] = None
