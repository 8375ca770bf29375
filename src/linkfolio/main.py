"""linkfolio - FastAPI backend for a link-in-bio portfolio."""

import logging
import sys

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import profile
from .auth import linking, oauth
from .auth.config import SECONDARY_PROVIDER, AppConfig, ConfigError, load_config
from .auth.dependencies import AppState
from .auth.providers import Providers, build_providers
from .auth.session import SessionCarrier
from .errors import register_exception_handlers
from .store import JsonProfileStore, ProfileStore

logger = logging.getLogger(__name__)


def configure_logging(level: int = logging.INFO) -> None:
    """Configure application logging."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    # Request lines from httpx would otherwise log every provider call
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def create_app(
    config: AppConfig,
    providers: Providers | None = None,
    store: ProfileStore | None = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        config: Application configuration
        providers: OAuth providers; built from config when omitted
        store: Profile store; a JsonProfileStore at config.profiles_file when omitted
    """
    if providers is None:
        providers = build_providers(
            config.primary, config.secondary, timeout=config.http_timeout
        )
    if store is None:
        store = JsonProfileStore(config.profiles_file)

    carrier = SessionCarrier.from_config(config)

    app = FastAPI(
        title="linkfolio",
        description="OAuth and profile backend for a link-in-bio portfolio",
        version="0.1.0",
    )
    app.state.linkfolio = AppState(
        config=config,
        providers=providers,
        store=store,
        carrier=carrier,
    )

    # The frontend sends the session cookie cross-origin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[config.frontend_url],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "OPTIONS"],
        allow_headers=["Content-Type", "Accept"],
    )

    register_exception_handlers(app, carrier)

    app.include_router(oauth.create_router(providers.primary.name))

    if config.linking_enabled and providers.secondary is not None:
        app.include_router(linking.create_router(providers.secondary.name))
    else:
        secondary_name = config.secondary.name if config.secondary else SECONDARY_PROVIDER
        logger.warning(f"{secondary_name} linking endpoints disabled: provider not configured")
        app.include_router(linking.create_unconfigured_router(secondary_name))

    app.include_router(profile.router)

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "ok"}

    return app


def main():
    """Run the backend server."""
    import uvicorn

    configure_logging()

    try:
        config = load_config()
    except ConfigError as e:
        logger.error(f"Invalid configuration: {e}")
        sys.exit(1)

    app = create_app(config)

    logger.info(f"linkfolio backend running on http://{config.host}:{config.port}")
    logger.info(f"Login URL: http://{config.host}:{config.port}/api/{config.primary.name}/login")

    uvicorn.run(app, host=config.host, port=config.port)


if __name__ == "__main__":
    main()
