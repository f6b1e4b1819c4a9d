# app/services/pages.py
from __future__ import annotations

from pathlib import Path
from typing import Literal

from fastapi.templating import Jinja2Templates

PageStatus = Literal["success", "error"]

DISCORD_HOME = "https://discord.com/"
RESULT_TEMPLATE = "result.html"

# Jinja2Templates turns autoescape on, so title/message never need escaping here
templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))


def render_page(status: PageStatus, title: str, message: str) -> str:
    """Render the one-card result page."""
    return templates.get_template(RESULT_TEMPLATE).render(
        status=status,
        title=title,
        message=message,
        home=DISCORD_HOME,
    )
