# tactjam/main.py
"""
TactJam server - tacton sharing backend.
"""
import uvicorn
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from starlette.middleware.cors import CORSMiddleware
from starlette.responses import JSONResponse

# Rate limiting
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from tactjam.core.config import settings
from tactjam.core.exceptions import DependencyError, TactJamError
from tactjam.core.logging import log, log_error


# ---------------------------------------------------------------------------
# LIFESPAN
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown."""
    log("DB", f"Starting TactJam server ({settings.database.backend} datastore)")

    from tactjam.db import open_store
    app.state.store = await open_store()

    yield

    log("DB", "Shutting down...")
    await app.state.store.close()


# ---------------------------------------------------------------------------
# APP INITIALIZATION
# ---------------------------------------------------------------------------

app = FastAPI(
    title="TactJam",
    version="1.0.0",
    lifespan=lifespan,
)

# Monitoring
from tactjam.lib.monitoring import register_monitoring
register_monitoring(app)

if settings.cors_origins == ["*"] and not settings.debug:
    log("SECURITY", "⚠️ Using allow_origins=['*'] - consider setting CORS_ORIGINS in production")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Rate Limiting - default 100 requests per minute per IP
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.rate_limit],
    enabled=settings.rate_limit_enabled,
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)
if settings.rate_limit_enabled:
    log("SECURITY", f"🛡️ Rate limiting enabled: {settings.rate_limit}")


# ---------------------------------------------------------------------------
# ERROR HANDLING
# ---------------------------------------------------------------------------

@app.exception_handler(DependencyError)
async def dependency_error_handler(request: Request, exc: DependencyError):
    # datastore details stay in the log
    log_error("DB", f"{request.method} {request.url.path}", exc)
    return JSONResponse(status_code=exc.status_code, content={"detail": "Internal Server Error"})


@app.exception_handler(TactJamError)
async def tactjam_error_handler(request: Request, exc: TactJamError):
    log("API", f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"detail": "missing body parameters", "errors": jsonable_encoder(exc.errors())},
    )


# ---------------------------------------------------------------------------
# API ROUTES
# ---------------------------------------------------------------------------

from tactjam.api import auth, health, motor_positions, tactons, tags, teams, users

app.include_router(health.router)
app.include_router(auth.router)
app.include_router(tactons.router)
app.include_router(motor_positions.router)
app.include_router(tags.tags_router)
app.include_router(tags.body_tags_router)
app.include_router(users.router)
app.include_router(teams.router)


# ---------------------------------------------------------------------------
# RUN
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    uvicorn.run("tactjam.main:app", host="0.0.0.0", port=settings.port, reload=settings.debug)
