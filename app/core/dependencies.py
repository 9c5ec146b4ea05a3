# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
FastAPI dependency injection — wire the repository and service.
"""

from app.core.config import settings
from app.repositories.volunteer_repository import JsonVolunteerRepository
from app.services.volunteer_service import VolunteerService

# ── Singleton repository instance (JSON-mirrored store) ──
_volunteer_repo = JsonVolunteerRepository(
    settings.VOLUNTEER_DATA_FILE,
    seed_defaults=settings.SEED_DEFAULT_VOLUNTEERS,
    retry_attempts=settings.PERSIST_RETRY_ATTEMPTS,
)

# ── Service instance (with injected repository) ──
_volunteer_service = VolunteerService(_volunteer_repo)


# ── FastAPI dependency functions ──
def get_volunteer_service() -> VolunteerService:
    return _volunteer_service


def get_volunteer_repo() -> JsonVolunteerRepository:
    return _volunteer_repo
