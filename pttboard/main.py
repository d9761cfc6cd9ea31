# pttboard/main.py
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from starlette.middleware.sessions import SessionMiddleware

from pttboard.config import Settings, configure_logging, settings as default_settings
from pttboard.database.connection import Storage
from pttboard.errors import ProcedureError
from pttboard.routers.http import router as rpc_router, procedure_error_handler

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    storage: Storage = app.state.storage
    if not storage.configured:
        logger.warning("DATABASE_URL is not set; running without storage (reads return empty results)")
    elif await storage.get() is None:
        logger.warning("Database unavailable at startup; will retry on first use")
    yield
    await storage.close()


def create_app(settings: Optional[Settings] = None, storage: Optional[Storage] = None) -> FastAPI:
    settings = settings or default_settings
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)
    app.state.settings = settings
    app.state.storage = storage or Storage(settings.DATABASE_URL)

    # 세션 쿠키 (로그아웃 시 세션을 비우면 쿠키도 만료)
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.SESSION_SECRET,
        session_cookie=settings.SESSION_COOKIE_NAME,
        max_age=settings.SESSION_MAX_AGE,
        same_site="lax",
    )
    app.add_exception_handler(ProcedureError, procedure_error_handler)

    app.include_router(rpc_router)

    @app.get("/healthz", include_in_schema=False)
    async def healthz(request: Request):
        database = await request.app.state.storage.get()
        return {"status": "ok", "database": database is not None}

    return app


app = create_app()
