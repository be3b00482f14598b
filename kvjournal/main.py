#!/usr/bin/env python3
"""
kvjournal - Main Entry Point

This is the thin orchestration layer that:
1. Loads configuration
2. Initializes modules
3. Runs the API server

All business logic is in the modules, following black box principles.
"""

import logging
import logging.config as log_config
from contextlib import asynccontextmanager
from typing import List, Optional

import uvicorn
from fastapi import Depends, FastAPI, Header, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from kvjournal import __version__
from kvjournal.config.provider import ConfigProvider, EnvConfigProvider
from kvjournal.errors import AppError, AuthenticationError, InternalError
from kvjournal.logging_config import get_logging_config
from kvjournal.modules.api import (
    CredentialsRequest,
    EntryResponse,
    ErrorResponse,
    HealthResponse,
    SaveEntryRequest,
    SuccessResponse,
    TokenResponse,
)
from kvjournal.modules.auth import AuthenticationService, AuthFactory, AuthModule

# Import modules through their black box interfaces
from kvjournal.modules.config import get_config
from kvjournal.modules.entries import EntryModule
from kvjournal.modules.storage import KeyValueStore, StorageModule

log_config.dictConfig(get_logging_config(get_config().get("log_level")))
logger = logging.getLogger(__name__)

# Configuration provider (centralized config access)
config_provider: ConfigProvider = EnvConfigProvider()

# Module instances (initialized at startup)
storage_module: Optional[StorageModule] = None
kv_store: Optional[KeyValueStore] = None
auth_module: Optional[AuthModule] = None
auth_service: Optional[AuthenticationService] = None
entry_module: Optional[EntryModule] = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifecycle - initialize and cleanup resources.
    """
    global storage_module, kv_store, auth_module, auth_service, entry_module

    logger.info("Starting kvjournal API...")
    config = get_config()

    storage_module = StorageModule(
        backend=config.get("storage_backend"),
        connection_url=config.get("redis_url"),
        password=config.get("redis_password"),
    )
    kv_store = await storage_module.connect()

    # Build authentication stack via factory (dependency injection)
    auth_module, auth_service = AuthFactory.build(config_provider, kv_store)
    entry_module = EntryModule(kv_store)

    logger.info(f"kvjournal API started ({config.get('storage_backend')} storage)")

    yield

    logger.info("Shutting down kvjournal API...")
    await storage_module.disconnect()
    logger.info("kvjournal API shutdown complete")


# Create FastAPI application
app = FastAPI(
    title="kvjournal API",
    description="Personal journal backend over a key-value store",
    version=__version__,
    lifespan=lifespan,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config_provider.get_api_config().cors_origins,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


# Dependency injection helpers
async def verify_bearer(
    authorization: Optional[str] = Header(None, description="Bearer token"),
) -> str:
    """Verify the bearer token and return the username it was issued to."""
    if not auth_service:
        raise HTTPException(503, "Service not initialized")

    result = await auth_service.authenticate(authorization)
    if not result.ok:
        raise AuthenticationError("Unauthorized")

    return result.identity


def get_auth_module() -> AuthModule:
    if not auth_module:
        raise HTTPException(503, "Service not initialized")
    return auth_module


def get_entry_module() -> EntryModule:
    if not entry_module:
        raise HTTPException(503, "Service not initialized")
    return entry_module


# Auth Endpoints


@app.post("/register", response_model=SuccessResponse, status_code=201)
async def register(
    request: CredentialsRequest,
    auth: AuthModule = Depends(get_auth_module),
):
    """
    Register a new user. Does not log the user in.

    Returns:
        201: User registered
        400: Validation failed or username taken
    """
    await auth.register(request.username, request.password)
    return SuccessResponse()


@app.post("/login", response_model=TokenResponse)
async def login(
    request: CredentialsRequest,
    auth: AuthModule = Depends(get_auth_module),
):
    """
    Exchange a username and password digest for a bearer token.

    Returns:
        200: Token issued
        400: Missing fields
        401: Invalid credentials
        500: Signing secret not configured
    """
    token = await auth.login(request.username, request.password)
    return TokenResponse(token=token)


# Entry Endpoints


@app.post("/entries", response_model=SuccessResponse, status_code=201)
async def save_entry(
    request: SaveEntryRequest,
    username: str = Depends(verify_bearer),
    entries: EntryModule = Depends(get_entry_module),
):
    """
    Save a journal entry for the authenticated user.

    Returns:
        201: Entry saved
        400: Content missing
        401: Unauthorized
    """
    await entries.save_entry(
        username,
        content=request.content,
        title=request.title,
        mood=request.mood,
        tags=request.tags,
    )
    return SuccessResponse()


@app.get("/entries", response_model=List[EntryResponse])
async def list_entries(
    username: str = Depends(verify_bearer),
    entries: EntryModule = Depends(get_entry_module),
):
    """
    List the authenticated user's entries, newest first.

    Returns:
        200: Entries
        401: Unauthorized
    """
    return await entries.list_entries(username)


@app.delete("/entries", response_model=SuccessResponse)
@app.delete("/entries/{timestamp}", response_model=SuccessResponse)
async def delete_entry(
    timestamp: Optional[str] = None,
    username: str = Depends(verify_bearer),
    entries: EntryModule = Depends(get_entry_module),
):
    """
    Delete one of the authenticated user's entries.

    Returns:
        200: Entry deleted
        400: Timestamp missing
        401: Unauthorized
        404: Entry not found
    """
    await entries.delete_entry(username, timestamp)
    return SuccessResponse()


# Health/Monitoring Endpoints


@app.get("/healthz")
async def healthz():
    """
    Minimal liveness probe.

    Returns:
        200: Service is running
    """
    return {"status": "ok"}


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Readiness probe: checks the key-value backend.

    Returns:
        200: Service healthy
        503: Storage unreachable or modules not initialized
    """
    storage_ok = bool(kv_store) and await kv_store.ping()
    modules_ready = all([auth_module, auth_service, entry_module])

    if storage_ok and modules_ready:
        return HealthResponse(status="healthy", storage="connected", version=__version__)

    return JSONResponse(
        status_code=503,
        content={
            "status": "unhealthy",
            "storage": "connected" if storage_ok else "disconnected",
            "version": __version__,
        },
    )


# Error handlers


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    """Map domain errors to the JSON error envelope."""
    if isinstance(exc, InternalError):
        logger.error(f"{request.method} {request.url.path}: {exc.detail}")
    return JSONResponse(status_code=int(exc.status), content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Report malformed request bodies as 400 with the error envelope."""
    errors = exc.errors()
    message = "Invalid request body"
    if errors:
        location = ".".join(str(part) for part in errors[0].get("loc", ()) if part != "body")
        detail = errors[0].get("msg", "")
        message = f"{message}: {location + ': ' if location else ''}{detail}"
    logger.debug(f"Validation error on {request.url.path}: {errors}")
    return JSONResponse(status_code=400, content={"error": message})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    """Wrap routing errors (404, 405) and 503s in the error envelope."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    """Last resort: log the failure, never leak it."""
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content=InternalError().to_dict())


def run():
    """Run the API server with uvicorn."""
    api_config = config_provider.get_api_config()
    uvicorn.run(
        "kvjournal.main:app",
        host=api_config.host,
        port=api_config.port,
        log_level=get_config().get("log_level").lower(),
        reload=api_config.debug,
        log_config=get_logging_config(get_config().get("log_level")),
    )


if __name__ == "__main__":
    run()
