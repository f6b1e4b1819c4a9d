# app/main.py
import logging

from fastapi import FastAPI

from app.core.config import settings
from app.api import routes_auth

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title=settings.APP_NAME, docs_url=None, redoc_url=None, openapi_url=None)

settings.validate_at_startup()

# Routers
app.include_router(routes_auth.router)


if __name__ == "__main__":
    import os

    import uvicorn

    uvicorn.run(
        app="app.main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", 8001)),
        reload=settings.IS_LOCAL,
    )
