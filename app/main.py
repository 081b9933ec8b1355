import os
import subprocess
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config.logger import app_logger, log_request_start, log_request_end, log_request_error
from app.config.settings import settings
from app.db.supabase_db import ping_supabase
from app.services.indexing import run_vault_sync
from app.utils.errors import ConfigurationError
from app.utils.responses import error_response
from app.api.index.router import router as index_router
from app.api.search.router import router as search_router


_git_sha_cache: Optional[str] = None


def get_git_sha() -> str:
    """Get the current Git commit SHA (cached to avoid blocking)."""
    global _git_sha_cache
    if _git_sha_cache is not None:
        return _git_sha_cache

    try:
        result = subprocess.run(
            ["git", "rev-parse", "HEAD"],
            capture_output=True,
            text=True,
            check=True,
            timeout=1.0
        )
        _git_sha_cache = result.stdout.strip()[:8]
        return _git_sha_cache
    except (subprocess.CalledProcessError, FileNotFoundError, subprocess.TimeoutExpired):
        _git_sha_cache = "local-dev"
        return _git_sha_cache


async def index_on_start() -> None:
    """Index new and changed documents before serving, when enabled."""
    app_logger.info(f"Indexing vault at '{settings.VAULT_DIR}'")
    try:
        result = await run_vault_sync()
    except Exception as e:
        app_logger.error(f"Index on start failed: {e}")
        return

    if result.error_count == 0:
        app_logger.info(
            f"Successfully indexed {result.success_count} documents with {result.updated_count} updates. "
            f"Removed {result.delete_count} deleted documents."
        )
    else:
        app_logger.warning(f"Index on start finished with {result.error_count} errors, see logs/sync.log")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan context manager for startup and shutdown events."""
    app_logger.info(f"{settings.APP_NAME} API starting up")

    missing = settings.missing_credentials()
    if missing:
        app_logger.warning(f"Missing API variables: {', '.join(missing)}. Search and sync are disabled.")
    else:
        is_ok, message = await ping_supabase()
        if is_ok:
            app_logger.info(f"Supabase connection: {message}")
            if settings.INDEX_ON_START:
                await index_on_start()
        else:
            app_logger.warning(f"Supabase connection issue: {message}")

    app_logger.info("Application initialized successfully")

    yield

    app_logger.info(f"{settings.APP_NAME} API shutting down")


app = FastAPI(
    title=settings.APP_NAME,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError):
    """Report missing credentials as 503."""
    app_logger.warning(f"Configuration error on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=503,
        content=error_response("Service not configured", detail=str(exc)).model_dump(mode="json"),
    )


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all HTTP requests with timing information using Loguru."""
    start_time = datetime.now()
    log_request_start(request)

    try:
        response = await call_next(request)
        process_time = (datetime.now() - start_time).total_seconds()
        log_request_end(request, response.status_code, process_time)
        return response

    except Exception as e:
        process_time = (datetime.now() - start_time).total_seconds()
        log_request_error(request, e, process_time)
        raise


@app.get("/", tags=["health"])
async def root():
    """Root endpoint with basic API information."""
    return {
        "message": f"Welcome to {settings.APP_NAME} API",
        "version": settings.APP_VERSION,
        "status": "ready" if not settings.missing_credentials() else "missing API variables",
        "database": "Supabase REST API",
        "docs": "/docs",
    }


@app.get("/status", tags=["health"])
async def status():
    """Status endpoint with build information for CI/CD monitoring."""
    build_number = os.getenv("BUILD_NUMBER", "local-dev")
    git_sha = os.getenv("GIT_SHA", os.getenv("GITHUB_SHA", get_git_sha()))
    environment = os.getenv("ENVIRONMENT", os.getenv("ENV", "development"))

    return {
        "status": "ok",
        "build": build_number,
        "sha": git_sha,
        "env": environment
    }


@app.get("/health/db", tags=["health"])
async def health_db():
    """Database health endpoint: checks Supabase REST API connection."""
    is_ok, message = await ping_supabase()
    if not is_ok:
        return JSONResponse(
            status_code=503,
            content={"status": "degraded", "db": "unavailable", "message": message}
        )
    return {"status": "ok", "db": "available", "connection": "Supabase REST API", "message": message}


app.include_router(index_router)
app.include_router(search_router)


if __name__ == "__main__":
    import uvicorn

    app_logger.info(f"Starting {settings.APP_NAME} API server")

    uvicorn.run(
        app,
        host="0.0.0.0",
        port=8000,
        log_config=None
    )
