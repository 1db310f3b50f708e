"""FastAPI application entrypoint. No business logic; only wiring and middleware."""

from dotenv import load_dotenv

load_dotenv()

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.httpsredirect import HTTPSRedirectMiddleware

from app.api.access import enforce_access
from app.api.errors import register_exception_handlers
from app.api.routes import router as api_router
from app.core.config import Settings, settings
from app.core.database import SessionLocal
from app.core.headers import add_security_headers
from app.services.token_purge import run_token_purge_periodically

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def create_app(app_settings: Settings) -> FastAPI:
    """Build the application: routes behind the access gate, error handlers and middleware."""

    @contextlib.asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        purge_task = None
        if app_settings.TOKEN_PURGE_ENABLED:
            purge_task = asyncio.create_task(
                run_token_purge_periodically(SessionLocal, app_settings)
            )
        yield
        if purge_task is not None:
            purge_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await purge_task

    app = FastAPI(
        title="Tokengate API",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Last added runs outermost: security headers also cover TLS redirects.
    if app_settings.REQUIRE_TLS:
        app.add_middleware(HTTPSRedirectMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if app_settings.APP_ENV == "dev" else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.middleware("http")(add_security_headers)

    app.state.settings = app_settings
    register_exception_handlers(app)
    app.include_router(
        api_router,
        prefix=app_settings.API_PREFIX,
        dependencies=[Depends(enforce_access)],
    )
    return app


app = create_app(settings)
