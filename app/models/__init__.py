# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Domain model package."""
from app.models.domain import SearchQuery, Volunteer

__all__ = ["SearchQuery", "Volunteer"]
