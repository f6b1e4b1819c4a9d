from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field


class TokenGrant(BaseModel):
    # Discord also sends token_type; anything else is ignored
    access_token: str = Field(min_length=1)
    refresh_token: Optional[str] = None
    expires_in: int = Field(ge=0)
    scope: str = ""
    token_type: Optional[str] = None


class DiscordUser(BaseModel):
    id: str = Field(min_length=1)
    username: str
    discriminator: Optional[str] = None  # legacy; "0" for migrated accounts

    @property
    def display_name(self) -> str:
        # The bot looks users up by this exact "name#disc" format
        return f"{self.username}#{self.discriminator or '0'}"


class AuthorizationRecord(BaseModel):
    """One document in the oauth_users collection, keyed by Discord user id."""

    username: str
    access_token: str
    refresh_token: Optional[str] = None
    expires_at: int  # unix seconds
    scopes: str
    authorized_on: str  # ISO-8601, UTC

    @classmethod
    def from_grant(
        cls,
        grant: TokenGrant,
        user: DiscordUser,
        now: datetime,
        safety_margin: int = 60,
    ) -> "AuthorizationRecord":
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        return cls(
            username=user.display_name,
            access_token=grant.access_token,
            refresh_token=grant.refresh_token,
            expires_at=int(now.timestamp()) + grant.expires_in - safety_margin,
            scopes=grant.scope,
            authorized_on=now.astimezone(timezone.utc).isoformat(),
        )
