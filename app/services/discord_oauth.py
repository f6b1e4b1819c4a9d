# app/services/discord_oauth.py
from __future__ import annotations

import logging
from typing import Any, Dict

import requests
from pydantic import ValidationError

from app.core.config import Settings
from app.schemas.discord import DiscordUser, TokenGrant

logger = logging.getLogger(__name__)

GRANT_TYPE = "authorization_code"


class DiscordAPIError(RuntimeError):
    """Discord answered with something we can't use (or didn't answer at all)."""

    def __init__(self, message: str, status_code: int | None = None, body: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class TokenExchangeError(DiscordAPIError):
    pass


class ProfileFetchError(DiscordAPIError):
    pass


def _snippet(resp: requests.Response) -> str:
    try:
        return (resp.text or "")[:300]
    except Exception:
        return "<no-body>"


def _json_body(resp: requests.Response, error_cls: type[DiscordAPIError], what: str) -> Dict[str, Any]:
    if not resp.ok:
        raise error_cls(
            f"{what} failed ({resp.status_code}): {_snippet(resp)}",
            status_code=resp.status_code,
            body=_snippet(resp),
        )
    try:
        data = resp.json()
    except ValueError as e:
        ct = resp.headers.get("content-type", "")
        raise error_cls(
            f"{what} returned non-JSON (content-type={ct!r}). Body starts with: {_snippet(resp)}",
            status_code=resp.status_code,
        ) from e
    if not isinstance(data, dict):
        raise error_cls(f"{what} returned unexpected JSON type {type(data).__name__}", status_code=resp.status_code)
    return data


def exchange_code(settings: Settings, code: str) -> TokenGrant:
    """
    Exchange the one-time Discord authorization code for tokens.
    NOTE: No store writes here. Persist after the user's id is known.
    """
    data = {
        "client_id": settings.CLIENT_ID,
        "client_secret": settings.CLIENT_SECRET,
        "grant_type": GRANT_TYPE,
        "code": code,
        "redirect_uri": settings.REDIRECT_URI,
        "scope": settings.DISCORD_OAUTH_SCOPE,
    }
    try:
        # requests form-encodes a dict passed as data=
        r = requests.post(
            settings.token_url,
            data=data,
            headers={"Accept": "application/json"},
            timeout=settings.HTTP_TIMEOUT_SECONDS,
        )
    except requests.RequestException as e:
        raise TokenExchangeError(f"Token exchange request failed: {e}") from e

    body = _json_body(r, TokenExchangeError, "Token exchange")
    try:
        return TokenGrant.model_validate(body)
    except ValidationError as e:
        # don't echo the body, it holds tokens
        raise TokenExchangeError(f"Token exchange returned an unusable grant: {e.error_count()} invalid field(s)") from e


def fetch_current_user(settings: Settings, access_token: str) -> DiscordUser:
    headers = {
        "Authorization": f"Bearer {access_token}",
        "Accept": "application/json",
    }
    try:
        r = requests.get(settings.current_user_url, headers=headers, timeout=settings.HTTP_TIMEOUT_SECONDS)
    except requests.RequestException as e:
        raise ProfileFetchError(f"User fetch request failed: {e}") from e

    body = _json_body(r, ProfileFetchError, "User fetch")
    try:
        return DiscordUser.model_validate(body)
    except ValidationError as e:
        raise ProfileFetchError(f"Could not parse Discord user from /users/@me: {e}") from e
