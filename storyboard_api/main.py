from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.middleware.cors import CORSMiddleware

from storyboard_api.config import settings
from storyboard_api.db import Database, get_database
from storyboard_api.exceptions import AppException
from storyboard_api.logging_config import get_logger, setup_logging
from storyboard_api.middleware.logging_middleware import LoggingMiddleware
from storyboard_api.routes import api_router

# Setup logging
setup_logging(settings.LOG_LEVEL)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    database = Database.from_settings(settings)
    app.state.database = database
    try:
        logger.info("Starting up...")
        await database.connect_with_retry(
            max_retries=settings.DB_CONNECT_RETRIES,
            delay=settings.DB_CONNECT_RETRY_DELAY,
        )
        yield
    finally:
        logger.info("Shutting down...")
        await database.disconnect()


app = FastAPI(
    title="Storyboard API",
    description="Budgets and shooting schedules for film production projects",
    version="1.0.0",
    lifespan=lifespan,
)

# Logging middleware
app.add_middleware(LoggingMiddleware)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["DELETE", "GET", "PATCH", "POST", "PUT"],
    allow_headers=["*"],
)


# Global exception handler
@app.exception_handler(AppException)
async def app_exception_handler(request: Request, exc: AppException):
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_content(),
        headers=exc.headers,
    )


# Include routers
app.include_router(api_router, prefix="/api/v1")


@app.get("/health")
async def health(request: Request):
    db_status = await get_database(request).check_connection()
    return {
        "status": "ok" if db_status else "degraded",
        "database": "connected" if db_status else "disconnected",
    }
