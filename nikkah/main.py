import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError
from nikkah.config import get_settings
from nikkah.routers import admin_jobs, auth, matches, notifications, photos, profiles, requests, users
from nikkah.services.errors import MatchServiceError, StoreUnavailable

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="NikkahFirst Match API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error_response(exc: MatchServiceError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "detail": exc.detail,
            "code": exc.code,
            "upgrade_required": exc.upgrade_required,
            "retryable": exc.retryable,
        },
    )


@app.exception_handler(MatchServiceError)
async def match_service_error_handler(request: Request, exc: MatchServiceError):
    return _error_response(exc)


@app.exception_handler(OperationalError)
async def store_unavailable_handler(request: Request, exc: OperationalError):
    logger.error("Database unavailable on %s %s", request.method, request.url.path, exc_info=exc)
    return _error_response(StoreUnavailable())


app.include_router(auth.router)
app.include_router(users.router)
app.include_router(requests.router)
app.include_router(matches.router)
app.include_router(profiles.router)
app.include_router(photos.router)
app.include_router(notifications.router)
app.include_router(admin_jobs.router)


@app.get("/")
def root():
    return {"message": "NikkahFirst Match API", "docs": "/docs"}
