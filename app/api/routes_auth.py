# app/api/routes_auth.py
from fastapi import APIRouter, Depends, Query
from fastapi.responses import HTMLResponse

from app.core.config import Settings
from app.deps import get_settings, get_store_factory
from app.services.authorization import StoreFactory, complete_authorization
from app.services.pages import render_page

router = APIRouter(prefix="/api", tags=["auth"])


@router.get("/callback", response_class=HTMLResponse)
def auth_callback(
    code: str | None = Query(default=None, description="One-time Discord authorization code"),
    settings: Settings = Depends(get_settings),
    store_factory: StoreFactory = Depends(get_store_factory),
):
    """
    Final stage of the Discord OAuth flow: trade the code for tokens, look up
    the user, and save both to Firestore for the bot to pick up.
    """
    result = complete_authorization(code, settings, store_factory)
    page = render_page("success" if result.ok else "error", result.title, result.message)
    return HTMLResponse(content=page, status_code=result.status_code)
