# type: ignore
# pyright: reportGeneralTypeIssues=false
"""
Volunteer Service
=================
Manages the organisation's volunteer roster: create, retrieve, update,
delete, and search by skill / activity state / role. The roster lives in
memory and is mirrored to a JSON file on every change.

Port: 8080
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.controllers import system_controller, volunteer_controller
from app.core.config import settings
from app.core.dependencies import get_volunteer_repo
from app.core.errors import InvalidInputError, PersistenceError, VolunteerNotFoundError
from app.core.logging import get_logger
from app.middleware import MetricsMiddleware, RequestIDMiddleware
from app.schemas.volunteer import ErrorResponse

logger = get_logger(settings.SERVICE_NAME)


# ── Lifespan ──────────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(application: FastAPI):
    """Load (or seed) the roster at startup."""
    repo = get_volunteer_repo()
    count = repo.load()
    logger.info("Volunteer service starting — %d volunteers loaded from %s", count, repo.path)
    yield
    logger.info("Volunteer service shutting down — %d volunteers on roster", repo.count())


# ── FastAPI App ───────────────────────────────────────────────────────────
app = FastAPI(
    title="Volunteer Service",
    description="Volunteer roster management with skill, role and activity search.",
    version=settings.SERVICE_VERSION,
    lifespan=lifespan,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid volunteer data"},
        500: {"model": ErrorResponse, "description": "Internal server error"},
        503: {"model": ErrorResponse, "description": "Roster could not be persisted"},
    },
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestIDMiddleware)

app.include_router(system_controller.router)
app.include_router(volunteer_controller.router)


# ── Exception handlers ────────────────────────────────────────────────────
def _error(request: Request, status_code: int, error: str, detail: str) -> JSONResponse:
    req_id = getattr(request.state, "request_id", None)
    return JSONResponse(
        status_code=status_code,
        content={"error": error, "detail": detail, "request_id": req_id},
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return _error(request, exc.status_code, "http_error", str(exc.detail))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    detail = "; ".join(
        f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in exc.errors()
    )
    return _error(request, 400, "invalid_input", detail)


@app.exception_handler(InvalidInputError)
async def invalid_input_handler(request: Request, exc: InvalidInputError):
    return _error(request, 400, "invalid_input", str(exc))


@app.exception_handler(VolunteerNotFoundError)
async def not_found_handler(request: Request, exc: VolunteerNotFoundError):
    return _error(request, 404, "not_found", str(exc))


@app.exception_handler(PersistenceError)
async def persistence_error_handler(request: Request, exc: PersistenceError):
    req_id = getattr(request.state, "request_id", None)
    logger.error("Persistence failure on %s: %s", exc.path, exc.cause, extra={"request_id": req_id})
    return _error(request, 503, "persistence_failure", str(exc))


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    req_id = getattr(request.state, "request_id", None)
    logger.exception("Unhandled exception", extra={"request_id": req_id})
    return _error(request, 500, "internal_server_error", str(exc))


# ── Entrypoint ────────────────────────────────────────────────────────────
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.SERVICE_PORT, log_level="info")
