# app/core/config.py
from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

EnvType = Literal["local", "dev", "staging", "prod"]

# Settings that must be present before the callback can do anything useful.
REQUIRED_SETTINGS = (
    "CLIENT_ID",
    "CLIENT_SECRET",
    "REDIRECT_URI",
    "FIREBASE_SERVICE_ACCOUNT",
    "FIREBASE_PROJECT_ID",
)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # App
    APP_NAME: str = "DiscordOAuthCallback"
    APP_ENV: EnvType = "local"
    LOG_LEVEL: str = "INFO"

    # Discord OAuth (names match the bot's deployment env)
    CLIENT_ID: Optional[str] = None
    CLIENT_SECRET: Optional[str] = None
    REDIRECT_URI: Optional[str] = None
    DISCORD_API_BASE: str = "https://discord.com/api/v10"
    DISCORD_OAUTH_SCOPE: str = "identify guilds.join"
    HTTP_TIMEOUT_SECONDS: float = Field(default=5.0, gt=0)

    # Firestore
    FIREBASE_SERVICE_ACCOUNT: Optional[str] = Field(
        default=None, description="Service account JSON, as a single string"
    )
    FIREBASE_PROJECT_ID: Optional[str] = None
    USERS_COLLECTION: str = "oauth_users"  # must match the bot's collection

    # expires_at is pulled in by this much so the bot refreshes early
    EXPIRY_SAFETY_MARGIN_SECONDS: int = Field(default=60, ge=0)

    # ---------- Validators ----------

    @field_validator(
        "CLIENT_ID",
        "CLIENT_SECRET",
        "REDIRECT_URI",
        "FIREBASE_SERVICE_ACCOUNT",
        "FIREBASE_PROJECT_ID",
    )
    @classmethod
    def _blank_is_missing(cls, v: Optional[str]) -> Optional[str]:
        # allow quoted values from .env; treat "" as unset
        if v is None:
            return None
        s = v.strip()
        if len(s) >= 2 and s[0] == s[-1] and s[0] in ("'", '"'):
            s = s[1:-1].strip()
        return s or None

    @field_validator("LOG_LEVEL")
    @classmethod
    def _upper_level(cls, v: str) -> str:
        level = (v or "INFO").strip().upper()
        if level not in ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"):
            raise ValueError("LOG_LEVEL must be one of CRITICAL, ERROR, WARNING, INFO, DEBUG")
        return level

    # ---------- Derived ----------

    @property
    def IS_LOCAL(self) -> bool:
        return self.APP_ENV == "local"

    @property
    def token_url(self) -> str:
        return f"{self.DISCORD_API_BASE.rstrip('/')}/oauth2/token"

    @property
    def current_user_url(self) -> str:
        return f"{self.DISCORD_API_BASE.rstrip('/')}/users/@me"

    def service_account_info(self) -> Dict[str, Any]:
        """
        Parse FIREBASE_SERVICE_ACCOUNT into a dict.
        Raises ValueError when it is unset, not JSON, or not a JSON object.
        """
        if not self.FIREBASE_SERVICE_ACCOUNT:
            raise ValueError("FIREBASE_SERVICE_ACCOUNT is not set")
        try:
            info = json.loads(self.FIREBASE_SERVICE_ACCOUNT)
        except json.JSONDecodeError as e:
            raise ValueError(f"FIREBASE_SERVICE_ACCOUNT is not valid JSON: {e.msg}") from e
        if not isinstance(info, dict):
            raise ValueError("FIREBASE_SERVICE_ACCOUNT must be a JSON object")
        return info

    # ---------- Runtime validations ----------

    def missing_required(self) -> List[str]:
        return [name for name in REQUIRED_SETTINGS if not getattr(self, name)]

    def validate_at_startup(self) -> None:
        """Log misconfigurations early. Requests still answer with a Configuration Error page."""
        missing = self.missing_required()
        if missing:
            logger.warning("Config incomplete, callback will refuse requests. Missing: %s", ", ".join(missing))


settings = Settings()
