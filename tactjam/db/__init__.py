# tactjam/db/__init__.py
"""
Database module.
"""
from typing import Optional

from tactjam.core.config import settings
from tactjam.core.logging import log, log_error

# Motor client instance
_client = None
_db = None
_connection_error: Optional[str] = None


async def connect_db():
    """
    Connect to MongoDB and register the Beanie documents.

    If MongoDB is not available, stores the error for later retrieval;
    every datastore call then fails with a DependencyError.
    """
    global _client, _db, _connection_error
    try:
        from motor.motor_asyncio import AsyncIOMotorClient

        _client = AsyncIOMotorClient(
            settings.database.mongo_url,
            serverSelectionTimeoutMS=settings.database.timeout_ms,
        )

        if settings.database.db_name:
            _db = _client[settings.database.db_name]
        else:
            try:
                _db = _client.get_default_database()
            except Exception:
                _db = _client.tactjam

        # fail fast if MongoDB is not running
        await _client.admin.command("ping")
        log("DB", "✅ Connected to MongoDB")

        from beanie import init_beanie
        from tactjam.models import DOCUMENTS

        await init_beanie(database=_db, document_models=list(DOCUMENTS.values()))
        log("DB", "✅ Beanie ODM initialized")
        _connection_error = None
    except Exception as e:
        log_error("DB", "MongoDB not available", e)
        log("DB", f"ℹ️ Ensure MongoDB is running on {settings.database.mongo_url}")
        _client = None
        _db = None
        _connection_error = str(e)


async def disconnect_db():
    """Disconnect from MongoDB."""
    global _client, _db
    if _client:
        _client.close()
        log("DB", "Disconnected from MongoDB")
    _client = None
    _db = None


def get_db():
    """
    Get database instance.

    Returns None if MongoDB is not connected.
    """
    return _db


def is_connected() -> bool:
    """Check if database is connected."""
    return _db is not None


def get_connection_error() -> Optional[str]:
    """Get connection error message if connection failed."""
    return _connection_error


async def open_store():
    """Create the DataStore selected by STORE_BACKEND."""
    from .store import BeanieDataStore, MemoryDataStore

    if settings.database.backend == "memory":
        log("DB", "Using in-memory datastore")
        return MemoryDataStore()

    await connect_db()
    return BeanieDataStore()
