# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Repository package — re-exports JsonVolunteerRepository."""
from app.repositories.volunteer_repository import JsonVolunteerRepository

__all__ = ["JsonVolunteerRepository"]
