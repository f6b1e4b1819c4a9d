from app.core.config import Settings, settings
from app.services.authorization import StoreFactory
from app.services.firestore import get_user_store


def get_settings() -> Settings:
    return settings


def get_store_factory() -> StoreFactory:
    """
    The store is built inside the callback (not here) so an init failure
    still renders the Server Error page instead of a bare 500.
    """
    return get_user_store
