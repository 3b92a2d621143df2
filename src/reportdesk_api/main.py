import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from reportdesk_api import __version__
from reportdesk_api.config import settings
from reportdesk_api.db import engine
from reportdesk_api.exceptions import ReportDeskError
from reportdesk_api.models import Base
from reportdesk_api.routes import (
    activity_router,
    analytics_router,
    auth_router,
    folders_router,
    invitations_router,
    organizations_router,
    reports_router,
    system_router,
    uploads_router,
    users_router,
)

logging.basicConfig(level=logging.DEBUG if settings.debug else logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Create tables on startup
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield


app = FastAPI(
    title="ReportDesk API",
    description="Multi-tenant report management and access control API",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ReportDeskError)
async def report_desk_error_handler(request: Request, exc: ReportDeskError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.message},
        headers=exc.headers,
    )


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "message": "Invalid request data",
            "errors": jsonable_encoder(exc.errors()),
        },
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": "Internal server error"},
    )


# JWKS at /.well-known/jwks.json (standard location), everything else under /api/v1
app.include_router(auth_router)
app.include_router(auth_router, prefix="/api/v1")

app.include_router(organizations_router, prefix="/api/v1")
app.include_router(users_router, prefix="/api/v1")
app.include_router(folders_router, prefix="/api/v1")
app.include_router(reports_router, prefix="/api/v1")
app.include_router(uploads_router, prefix="/api/v1")
app.include_router(analytics_router, prefix="/api/v1")
app.include_router(activity_router, prefix="/api/v1")
app.include_router(invitations_router, prefix="/api/v1")
app.include_router(system_router, prefix="/api/v1")


@app.get("/health")
async def health_check():
    return {"status": "healthy"}
