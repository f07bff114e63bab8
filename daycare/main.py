"""Daycare daily reports - FastAPI entrypoint."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.errors import ServerSelectionTimeoutError

from daycare.api import attendance, children, dashboard, reports, settings as settings_api
from daycare.config import settings
from daycare.db import db_shutdown, db_startup
from daycare.services.session import SessionRegistry
from daycare.services.store import BeanieDocumentStore, MemoryDocumentStore

logging.basicConfig(level=settings.log_level.upper())
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.store_backend == "memory":
        logger.warning("STORE_BACKEND=memory: data lives in this process only")
        store = MemoryDocumentStore()
    else:
        try:
            await db_startup()
        except ServerSelectionTimeoutError as e:
            logger.error("MongoDB is not running. Start it or set STORE_BACKEND=memory for local development")
            raise RuntimeError("MongoDB connection failed.") from e
        store = BeanieDocumentStore()

    app.state.store = store
    app.state.sessions = SessionRegistry(store, auto_absent_hour=settings.auto_absent_hour)
    yield
    await db_shutdown()


app = FastAPI(
    title=settings.app_name,
    description="Daily attendance and per-child daily reports for a childcare roster",
    version="0.1.0",
    debug=settings.debug,
    lifespan=lifespan,
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    # ctx can carry the raised exception object, which is not JSON serializable
    errors = [{k: v for k, v in e.items() if k != "ctx"} for e in exc.errors()]
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": errors},
    )

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.cors_origins.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API routes
app.include_router(children.router, prefix="/api/children", tags=["Children"])
app.include_router(attendance.router, prefix="/api/attendance", tags=["Attendance"])
app.include_router(reports.router, prefix="/api/reports", tags=["Daily Reports"])
app.include_router(dashboard.router, prefix="/api/dashboard", tags=["Dashboard"])
app.include_router(settings_api.router, prefix="/api/settings", tags=["Themes & Note"])


@app.get("/health")
def health():
    return {"status": "ok", "app": settings.app_name}
