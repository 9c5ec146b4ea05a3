# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Schema package — re-exports the HTTP contract models."""
from app.schemas.volunteer import (
    ErrorResponse,
    VolunteerRequest,
    VolunteerResponse,
    VolunteerStats,
)

__all__ = ["ErrorResponse", "VolunteerRequest", "VolunteerResponse", "VolunteerStats"]
