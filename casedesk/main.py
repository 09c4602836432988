"""
Main FastAPI application entry point.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from casedesk.deps import setup_dependencies
from casedesk.settings import Settings, get_settings

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan handler for startup and shutdown tasks."""
    # Startup
    logger.info("🚀 Starting casedesk AI service...")
    try:
        config = app.state.config_store.load()
        enabled = ", ".join(entry.provider.value for entry in config.enabled_providers()) or "none"
        logger.info(f"✅ AI configuration loaded (enabled providers: {enabled})")
    except Exception as e:
        logger.warning(f"⚠️  Could not load AI configuration at startup (will continue): {e}")

    logger.info("🚀 All systems operational")

    yield

    # Shutdown
    logger.info("🔄 Closing HTTP client...")
    try:
        await app.state.http_client.aclose()
        logger.info("✅ HTTP client closed")
    except Exception as e:
        logger.error(f"❌ Failed to close HTTP client: {e}")
    logger.info("🛑 Shutting down casedesk AI service...")


def create_app(settings: Settings = None) -> FastAPI:
    """Create and configure FastAPI application."""

    # Use provided settings or get default
    if settings is None:
        settings = get_settings()

    configure_logging(settings)
    deps = setup_dependencies(settings)

    app = FastAPI(
        title="Casedesk - AI Service",
        version="1.0.0",
        description=f"Running in {settings.app_env.value} mode",
        docs_url=None if settings.is_production else "/docs",
        redoc_url=None if settings.is_production else "/redoc",
        lifespan=lifespan
    )

    # Store dependencies in app state
    app.state.settings = settings
    app.state.config_store = deps["config_store"]
    app.state.http_client = deps["http_client"]
    app.state.analysis_service = deps["analysis_service"]
    app.state.transcoder = deps["transcoder"]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        max_age=3600,
    )

    from casedesk.ai.routes import router as ai_router
    app.include_router(ai_router)

    logger.info(f"FastAPI app created ({settings.app_env.value}, config backend: {settings.config_backend.value})")
    return app


# Create app instance
app = create_app()


def run() -> None:
    """Run the service with uvicorn."""
    import uvicorn

    settings = get_settings()
    logger.info(f"🌐 Server: {settings.host}:{settings.port}")

    if settings.is_development:
        # Import string so the reloader can re-create the app
        uvicorn.run(
            "casedesk.main:app",
            host=settings.host,
            port=settings.port,
            reload=True,
            log_level=settings.log_level.lower()
        )
    else:
        uvicorn.run(
            app,
            host=settings.host,
            port=settings.port,
            reload=False,
            log_level=settings.log_level.lower()
        )


if __name__ == "__main__":
    run()
