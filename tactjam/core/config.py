# tactjam/core/config.py
"""
Application configuration - single source of truth for all settings.
"""
import os
from dataclasses import dataclass, field
from typing import List, Optional
from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


@dataclass
class DatabaseSettings:
    """Datastore configuration."""
    # "mongo" or "memory"
    backend: str = field(default_factory=lambda: os.getenv("STORE_BACKEND", "mongo").lower())
    mongo_url: str = field(default_factory=lambda: os.getenv("MONGODB_URL", "mongodb://localhost:27017"))
    db_name: Optional[str] = field(default_factory=lambda: os.getenv("MONGODB_DB"))
    timeout_ms: int = field(default_factory=lambda: int(os.getenv("MONGODB_TIMEOUT_MS", "5000")))


@dataclass
class AuthSettings:
    """Token and password hashing configuration."""
    secret_key: str = field(default_factory=lambda: os.getenv("JWT_SECRET", "development_secret_key_change_me"))
    algorithm: str = field(default_factory=lambda: os.getenv("JWT_ALGORITHM", "HS256"))
    token_expire_minutes: int = field(default_factory=lambda: int(os.getenv("TOKEN_EXPIRE_MINUTES", str(60 * 24))))
    bcrypt_rounds: int = field(default_factory=lambda: int(os.getenv("BCRYPT_ROUNDS", "12")))


@dataclass
class TactonSettings:
    """Tacton composition rules."""
    # Reject tactons whose position set is empty
    require_positions: bool = field(default_factory=lambda: _env_flag("REQUIRE_POSITIONS", "false"))
    title_min_length: int = 2
    title_max_length: int = 128
    name_min_length: int = 2
    name_max_length: int = 128


@dataclass
class Settings:
    """Main application settings."""
    database: DatabaseSettings = field(default_factory=DatabaseSettings)
    auth: AuthSettings = field(default_factory=AuthSettings)
    tactons: TactonSettings = field(default_factory=TactonSettings)
    port: int = field(default_factory=lambda: int(os.getenv("PORT", 8080)))
    debug: bool = field(default_factory=lambda: _env_flag("DEBUG", "false"))
    rate_limit: str = field(default_factory=lambda: os.getenv("RATE_LIMIT", "100/minute"))
    rate_limit_enabled: bool = field(default_factory=lambda: _env_flag("RATE_LIMIT_ENABLED", "true"))
    cors_origins_raw: str = field(default_factory=lambda: os.getenv("CORS_ORIGINS", "*"))

    @property
    def cors_origins(self) -> List[str]:
        if self.cors_origins_raw == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins_raw.split(",") if origin.strip()]


# Singleton instance
settings = Settings()
