"""
FastAPI app assembly: logging, middleware, router wiring and the mapping
from service exceptions to HTTP status codes.
"""
import logging
import os

from fastapi import FastAPI, status
from fastapi.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

# Configure logging
LOG_LEVEL_NAME = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_LEVEL = getattr(logging, LOG_LEVEL_NAME, logging.INFO)
logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)
logger.setLevel(LOG_LEVEL)
logger.info("app_startup: log_level=%s", LOG_LEVEL_NAME)

from projecthub.api.activity import router as activity_router
from projecthub.api.invitations import router as invitations_router
from projecthub.api.invite_links import router as invite_links_router
from projecthub.api.notifications import router as notifications_router
from projecthub.api.projects import router as projects_router
from projecthub.services.errors import (
    AlreadyMemberError,
    DuplicateInvitationError,
    ExpiredError,
    InvalidStateError,
    InvalidValueError,
    NotFoundError,
    PermissionDenied,
    ServiceError,
)
from projecthub.utils.runtime import dev_mode_active
from projecthub.utils.urls import get_app_base_url

# Database schema is managed by Alembic migrations.

app = FastAPI(
    title="Project Collaboration Service",
    description="Projects, role and group based membership, invitations, invite links and activity auditing.",
    version="1.0.0",
)

origins = [
    "http://localhost",
    "http://localhost:3000",
    "http://localhost:8000",
]
if get_app_base_url() not in origins:
    origins.append(get_app_base_url())

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Most specific first; the first isinstance match wins
_STATUS_BY_ERROR = (
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (PermissionDenied, status.HTTP_403_FORBIDDEN),
    (AlreadyMemberError, status.HTTP_409_CONFLICT),
    (DuplicateInvitationError, status.HTTP_409_CONFLICT),
    (ExpiredError, status.HTTP_400_BAD_REQUEST),
    (InvalidStateError, status.HTTP_400_BAD_REQUEST),
    (InvalidValueError, 422),
)


def status_for_error(exc: ServiceError) -> int:
    for error_type, code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return code
    return status.HTTP_400_BAD_REQUEST


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    code = status_for_error(exc)
    if code == status.HTTP_403_FORBIDDEN:
        logger.info("Denied %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse({"detail": str(exc)}, status_code=code)


# Middleware: unauthenticated requests are read-only
@app.middleware("http")
async def enforce_readonly_for_guests(request: Request, call_next):
    if request.method in ("POST", "PUT", "PATCH", "DELETE"):
        if not dev_mode_active():
            h = request.headers
            user_present = (
                h.get("x-auth-request-user")
                or h.get("x-auth-request-email")
                or h.get("x-forwarded-user")
                or h.get("x-forwarded-email")
            )
            if not user_present:
                return JSONResponse(
                    {"detail": "Guest mode is read-only. Sign in to perform changes."},
                    status_code=status.HTTP_401_UNAUTHORIZED,
                )
    return await call_next(request)


@app.get("/health")
def health():
    return {"status": "ok"}


app.include_router(projects_router)
app.include_router(invitations_router)
app.include_router(invite_links_router)
app.include_router(activity_router)
app.include_router(notifications_router)
