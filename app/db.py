from fastapi import Request
from pymongo import MongoClient
from pymongo.database import Database

from .config import Settings


def create_client(settings: Settings) -> MongoClient:
    """
    Build the process-wide Mongo client.

    The client owns its own connection pool and is safe to share across request
    threads; it is created once in the application lifespan and closed on shutdown.
    """
    return MongoClient(
        settings.MONGODB_URI,
        serverSelectionTimeoutMS=settings.MONGODB_TIMEOUT_MS,
        tz_aware=True,
    )


def get_database(client: MongoClient, settings: Settings) -> Database:
    return client[settings.MONGODB_DB]


# ----------------
# Dependencies
# ----------------
# The application context (settings, storage) lives on app.state and is
# handed to routes through these dependencies, so tests can swap any of it.
def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_storage(request: Request):
    """FastAPI dependency returning the shared Storage for this app instance."""
    return request.app.state.storage
