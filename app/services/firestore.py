# app/services/firestore.py
from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Protocol

import firebase_admin
from firebase_admin import credentials, firestore

from app.core.config import Settings

logger = logging.getLogger(__name__)

# Cached across warm invocations. Creating it twice under a race is harmless:
# the second caller reuses the default Firebase app.
_db: Optional[Any] = None


class StoreInitializationError(RuntimeError):
    pass


class PersistenceError(RuntimeError):
    pass


class UserStore(Protocol):
    def merge(self, user_id: str, data: Dict[str, Any]) -> None: ...


class FirestoreUserStore:
    """Writes authorization documents into one Firestore collection."""

    def __init__(self, client: Any, collection: str):
        self._client = client
        self.collection = collection

    def merge(self, user_id: str, data: Dict[str, Any]) -> None:
        try:
            self._client.collection(self.collection).document(user_id).set(data, merge=True)
        except Exception as e:
            raise PersistenceError(str(e) or e.__class__.__name__) from e


def _firebase_app(settings: Settings) -> firebase_admin.App:
    try:
        return firebase_admin.get_app()
    except ValueError:
        pass  # no default app yet

    info = settings.service_account_info()
    cred = credentials.Certificate(info)
    options = {"projectId": settings.FIREBASE_PROJECT_ID}
    try:
        return firebase_admin.initialize_app(cred, options)
    except ValueError:
        # another request registered the default app first
        return firebase_admin.get_app()


def get_firestore_client(settings: Settings) -> Any:
    global _db
    if _db is not None:
        return _db
    try:
        app = _firebase_app(settings)
        _db = firestore.client(app)
    except Exception as e:
        raise StoreInitializationError(
            "Failed to initialize Firebase Admin SDK. Check FIREBASE_SERVICE_ACCOUNT variable."
        ) from e
    logger.info("Firebase Admin SDK initialized (project=%s)", settings.FIREBASE_PROJECT_ID)
    return _db


def get_user_store(settings: Settings) -> FirestoreUserStore:
    return FirestoreUserStore(get_firestore_client(settings), settings.USERS_COLLECTION)


def reset_client() -> None:
    """Forget the cached client (the Firebase app itself stays registered)."""
    global _db
    _db = None
