"""
FastAPI application - Main entry point

Run with:
  uvicorn dashbot.api.main:app --host 0.0.0.0 --port 3000
or the `dashbot` console script, which honours PORT from the config.
"""

from dotenv import load_dotenv

load_dotenv()

import logging
from datetime import datetime
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from dashbot import __version__
from dashbot.api.endpoints.slack_webhook import router as slack_router
from dashbot.bot.runtime import BotRuntime
from dashbot.error_handler import AuthError, AuthorizationError, CatalogLoadError
from dashbot.utils.config_loader import BotConfig, load_bot_config

# Setup logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

SERVICE_NAME = "Dashboard Finder Bot API"


def create_app(runtime: Optional[BotRuntime] = None, config: Optional[BotConfig] = None) -> FastAPI:
    """
    Build the app. When no runtime is given, one is created from `config`
    (or from the environment) during startup.
    """
    app = FastAPI(
        title=SERVICE_NAME,
        description="Search BI dashboards from Slack and receive rendered images in the channel",
        version=__version__,
    )
    app.state.runtime = runtime

    app.include_router(slack_router)

    @app.exception_handler(AuthorizationError)
    async def authorization_error_handler(request: Request, exc: AuthorizationError):
        return JSONResponse(status_code=status.HTTP_401_UNAUTHORIZED, content={"detail": str(exc)})

    # ========================================================================
    # ENDPOINTS
    # ========================================================================
    @app.get("/", tags=["Health"])
    async def root():
        """Health check endpoint."""
        return {"service": SERVICE_NAME, "status": "healthy", "version": __version__, "timestamp": datetime.now().isoformat()}

    @app.get("/health", tags=["Health"])
    async def health_check():
        """Detailed health check (BI session, catalog, fulfillment queue)."""
        bot = app.state.runtime
        if bot is None:
            return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content={"status": "starting"})
        return {"status": "healthy", **bot.status(), "timestamp": datetime.now().isoformat()}

    # ========================================================================
    # STARTUP/SHUTDOWN EVENTS
    # ========================================================================
    @app.on_event("startup")
    async def startup_event():
        """Authenticate and load the catalog; the server must not serve without both."""
        logger.info(f"Starting {SERVICE_NAME}...")
        if app.state.runtime is None:
            app.state.runtime = BotRuntime(config or load_bot_config())
        try:
            await app.state.runtime.startup()
        except (AuthError, CatalogLoadError) as e:
            logger.error("Startup failed: %s (cause: %s)", e, e.cause)
            raise
        logger.info("Catalog ready with %d views", len(app.state.runtime.store.current))

    @app.on_event("shutdown")
    async def shutdown_event():
        """Cleanup on shutdown"""
        logger.info(f"Shutting down {SERVICE_NAME}...")
        if app.state.runtime is not None:
            await app.state.runtime.shutdown()

    return app


app = create_app()


def run() -> None:
    import uvicorn

    config = load_bot_config()
    uvicorn.run(create_app(config=config), host="0.0.0.0", port=config.port)
