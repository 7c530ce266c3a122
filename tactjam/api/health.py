# tactjam/api/health.py
"""
Liveness and datastore readiness.
"""
from datetime import datetime, timezone
from fastapi import APIRouter

from tactjam.core.config import settings
from tactjam.core.logging import log_error
from tactjam.db import get_connection_error, get_db

router = APIRouter(tags=["Health"])


async def _database_status() -> str:
    if settings.database.backend == "memory":
        return "memory"
    db = get_db()
    if db is None:
        return f"unavailable: {get_connection_error() or 'not connected'}"
    try:
        await db.command("ping")
    except Exception as e:
        log_error("DB", "Health ping failed", e)
        return "unreachable"
    return "connected"


@router.get("/healthz")
async def healthz():
    """Liveness only; never touches the datastore."""
    return {"ok": True, "timestamp": datetime.now(timezone.utc).isoformat()}


@router.get("/api/health")
async def api_health():
    database = await _database_status()
    return {
        "status": "healthy" if database in ("memory", "connected") else "degraded",
        "database": database,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
