import sys
import os
from datetime import datetime
from typing import Any, Optional


# ═══════════════════════════════════════════════════════════════════════════════
# LOG FILTERING
# ═══════════════════════════════════════════════════════════════════════════════
# Only these scopes are shown at INFO level
# Everything else is gated behind DEBUG

INFO_SCOPES = {
    "DB",           # Connection lifecycle
    "TACTONS",      # Aggregate create / update / delete
    "SAGA",         # Compensating actions
    "AUTH",         # Register / login
    "USERS",        # Profile, password, team and account changes
    "SECURITY",     # Rate limiting, CORS
    "MONITORING",
}

# DEBUG-only scopes (hidden by default)
DEBUG_SCOPES = {
    "STORE",
    "RESOLVER",
    "LINKS",
    "API",
}

DEBUG_MODE = os.getenv("TACTJAM_DEBUG", "false").lower() == "true"


def log(scope: str, message: str, data: Any = None, user_id: Optional[str] = None) -> None:
    """
    Unified logging function for the TactJam server.

    Only INFO_SCOPES are shown by default.
    Set TACTJAM_DEBUG=true to see all scopes.
    """
    if not DEBUG_MODE and scope not in INFO_SCOPES:
        return

    timestamp = datetime.now().strftime("%H:%M:%S")
    prefix = f"[{timestamp}] [{scope}]"

    if user_id:
        prefix += f" [{user_id[:8]}]"

    print(f"{prefix} {message}")

    if data:
        print(f"  Data: {data}")

    sys.stdout.flush()


def log_error(scope: str, message: str, error: BaseException) -> None:
    """Log a failure with its exception type; always shown."""
    timestamp = datetime.now().strftime("%H:%M:%S")
    print(f"[{timestamp}] [{scope}] ⚠️ {message}: {type(error).__name__}: {error}", file=sys.stderr)
    sys.stderr.flush()
