# app/services/authorization.py
"""
The OAuth callback as a straight line of phases:

    init store -> check config -> check code -> exchange code -> fetch user -> save

Each phase either hands its result to the next one or ends the run with a
CallbackFailure. Nothing is retried: Discord codes are single-use, so the
user has to go through the consent screen again.
"""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Dict, Optional

from app.core.config import Settings
from app.schemas.discord import AuthorizationRecord
from app.services import discord_oauth
from app.services.discord_oauth import ProfileFetchError, TokenExchangeError
from app.services.firestore import PersistenceError, StoreInitializationError, UserStore

logger = logging.getLogger(__name__)

StoreFactory = Callable[[Settings], UserStore]


class CallbackFailure(str, enum.Enum):
    INITIALIZATION = "initialization"
    CONFIGURATION = "configuration"
    CLIENT_INPUT = "client_input"
    TOKEN_EXCHANGE = "token_exchange"
    PROFILE_FETCH = "profile_fetch"
    PERSISTENCE = "persistence"


@dataclass(frozen=True)
class FailurePage:
    status_code: int
    title: str
    message: str  # may hold a {reason} placeholder


FAILURE_PAGES: Dict[CallbackFailure, FailurePage] = {
    CallbackFailure.INITIALIZATION: FailurePage(500, "Server Error", "{reason}"),
    CallbackFailure.CONFIGURATION: FailurePage(
        500,
        "Configuration Error",
        "The required environment variables are not set. Contact the bot administrator.",
    ),
    CallbackFailure.CLIENT_INPUT: FailurePage(
        400,
        "Access Denied",
        'No authorization code was provided by Discord. You must click "Authorize".',
    ),
    CallbackFailure.TOKEN_EXCHANGE: FailurePage(
        500,
        "OAuth Error",
        "Failed to exchange authorization code for tokens. "
        "Check CLIENT_ID/SECRET and REDIRECT_URI configuration.",
    ),
    CallbackFailure.PROFILE_FETCH: FailurePage(
        500,
        "User Data Error",
        "Failed to retrieve your Discord profile. Check the OAuth scopes.",
    ),
    CallbackFailure.PERSISTENCE: FailurePage(
        500,
        "Database Save Error",
        "Failed to save data to Firestore. Reason: {reason}. Check your Firebase environment variables.",
    ),
}

SUCCESS_STATUS = 200
SUCCESS_TITLE = "✅ Access Granted!"
SUCCESS_MESSAGE = (
    "Welcome, {username}! Your authorization is securely saved. "
    "The bot can now add you using the /join command."
)


@dataclass(frozen=True)
class CallbackResult:
    failure: Optional[CallbackFailure] = None
    reason: Optional[str] = None  # user-safe detail, only for init/persistence
    user_id: Optional[str] = None
    username: Optional[str] = None  # plain Discord username, for the greeting
    record: Optional[AuthorizationRecord] = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    @property
    def status_code(self) -> int:
        return SUCCESS_STATUS if self.ok else FAILURE_PAGES[self.failure].status_code

    @property
    def title(self) -> str:
        return SUCCESS_TITLE if self.ok else FAILURE_PAGES[self.failure].title

    @property
    def message(self) -> str:
        if self.ok:
            return SUCCESS_MESSAGE.format(username=self.username)
        return FAILURE_PAGES[self.failure].message.format(reason=self.reason or "unknown error")


def _fail(failure: CallbackFailure, reason: str | None = None) -> CallbackResult:
    return CallbackResult(failure=failure, reason=reason)


def complete_authorization(
    code: Optional[str],
    settings: Settings,
    store_factory: StoreFactory,
    now: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
) -> CallbackResult:
    # init: only attempted once there is credential material to init with,
    # so an unset blob reports as a configuration problem
    store: Optional[UserStore] = None
    if settings.FIREBASE_SERVICE_ACCOUNT:
        try:
            store = store_factory(settings)
        except StoreInitializationError as e:
            logger.error("Store initialization failed: %s", e.__cause__ or e)
            return _fail(CallbackFailure.INITIALIZATION, str(e))

    missing = settings.missing_required()
    if missing or store is None:
        logger.warning("Callback refused, missing configuration: %s", ", ".join(missing))
        return _fail(CallbackFailure.CONFIGURATION)

    if not code:
        logger.warning("Callback hit without an authorization code")
        return _fail(CallbackFailure.CLIENT_INPUT)

    # Phase 1
    try:
        grant = discord_oauth.exchange_code(settings, code)
    except TokenExchangeError as e:
        logger.error("Token exchange error: %s", e)
        return _fail(CallbackFailure.TOKEN_EXCHANGE)

    # Phase 2
    try:
        user = discord_oauth.fetch_current_user(settings, grant.access_token)
    except ProfileFetchError as e:
        logger.error("User fetch error: %s", e)
        return _fail(CallbackFailure.PROFILE_FETCH)

    # Phase 3
    record = AuthorizationRecord.from_grant(
        grant, user, now(), safety_margin=settings.EXPIRY_SAFETY_MARGIN_SECONDS
    )
    try:
        store.merge(user.id, record.model_dump())
    except PersistenceError as e:
        logger.error("Firestore save error for user %s: %s", user.id, e)
        return _fail(CallbackFailure.PERSISTENCE, str(e))

    logger.info("Saved authorization for %s (%s)", record.username, user.id)
    return CallbackResult(user_id=user.id, username=user.username, record=record)
