# tactjam/api/__init__.py
"""
API module - All route handlers.
"""
from . import auth, health, motor_positions, tactons, tags, teams, users

__all__ = [
    "auth",
    "health",
    "motor_positions",
    "tactons",
    "tags",
    "teams",
    "users",
]
