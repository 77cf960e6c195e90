"""
Main Application Entry Point.

This module initializes the FastAPI application, configures middleware (CORS),
registers exception handlers and includes all API routers.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from oncall_ai.core.logging_config import get_logger, setup_logging

from .api.v1 import approvals, health, runs
from .core import constant
from .core.database import dispose_db, init_db
from .exception_handlers import setup_exception_handlers

setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifespan events.

    Creates tables on startup when a database is configured and releases
    pooled connections on shutdown.
    """
    logger.info("Starting up oncall-ai server...")
    try:
        await init_db()
    except Exception as e:
        logger.error(f"Database initialization failed: {e}", exc_info=True)
        raise

    yield

    logger.info("Shutting down oncall-ai server...")
    await dispose_db()


app = FastAPI(
    title=constant.PROJECT_NAME,
    description="""
    oncall-ai Server API

    Start on-call investigation runs and review the destructive actions they
    pause on before anything is executed.
    """,
    version="0.1.0",
    openapi_url=f"{constant.API_V1_STR}/openapi.json",
    docs_url=f"{constant.API_V1_STR}/docs",
    redoc_url=f"{constant.API_V1_STR}/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

setup_exception_handlers(app)

app.include_router(health.router, tags=["health"])
app.include_router(runs.router, prefix=f"{constant.API_V1_STR}/runs", tags=["runs"])
app.include_router(approvals.router, prefix=f"{constant.API_V1_STR}/approvals", tags=["approvals"])
