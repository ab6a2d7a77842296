# Application entrypoint: builds the app context (settings, Mongo, storage, Redis),
# runs the bootstrap, installs middleware and error handlers, and mounts the API routers.
import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo import MongoClient
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import Settings
from .db import create_client, get_database
from .errors import DuplicateEntryError, StorageError
from .redis_client import connect_redis
from .routes.admin import router as admin_router
from .routes.auth import hash_password, router as auth_router
from .routes.inquiries import router as inquiries_router
from .routes.properties import router as properties_router
from .routes.wishlist import router as wishlist_router
from .seed import bootstrap
from .storage import Storage

request_logger = logging.getLogger("luxehomes.requests")


def create_app(settings: Optional[Settings] = None, mongo_client: Optional[MongoClient] = None) -> FastAPI:
    """
    Build the API around an explicit context.

    - settings: defaults to Settings() read from the environment
    - mongo_client: injected client (tests pass a mongomock one); when omitted a
      pymongo client is created at startup and closed at shutdown
    """
    settings = settings or Settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owns_client = mongo_client is None
        client = create_client(settings) if owns_client else mongo_client
        storage = Storage(get_database(client, settings))
        # The bootstrap must succeed; an app without its admin account or indexes should not serve
        bootstrap(storage, settings, hash_password)

        app.state.storage = storage
        app.state.redis = connect_redis(settings)
        yield

        if app.state.redis is not None:
            app.state.redis.close()
        if owns_client:
            client.close()

    app = FastAPI(title="LuxeHomes API", version="1.0.0", lifespan=lifespan)
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # One line per API request: method, path, status and duration
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        if request.url.path.startswith("/api"):
            elapsed_ms = (time.perf_counter() - start) * 1000
            request_logger.info(
                "%s %s %s in %.0fms", request.method, request.url.path, response.status_code, elapsed_ms
            )
        return response

    # Every error body is {"message": ...}
    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse({"message": exc.detail}, status_code=exc.status_code, headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            {"message": "Validation failed", "errors": jsonable_encoder(exc.errors())},
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    @app.exception_handler(DuplicateEntryError)
    async def duplicate_error(request: Request, exc: DuplicateEntryError) -> JSONResponse:
        return JSONResponse({"message": "Duplicate entry"}, status_code=status.HTTP_400_BAD_REQUEST)

    @app.exception_handler(StorageError)
    async def storage_error(request: Request, exc: StorageError) -> JSONResponse:
        return JSONResponse({"message": "Storage unavailable"}, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

    # Simple liveness endpoint for container orchestrators and uptime checks
    @app.get("/healthz")
    def healthz() -> dict:
        return {"status": "ok"}

    app.include_router(auth_router, prefix="/api", tags=["auth"])
    app.include_router(properties_router, prefix="/api", tags=["properties"])
    app.include_router(wishlist_router, prefix="/api", tags=["wishlist"])
    app.include_router(inquiries_router, prefix="/api", tags=["inquiries"])
    app.include_router(admin_router, prefix="/api", tags=["admin"])
    return app


app = create_app()
