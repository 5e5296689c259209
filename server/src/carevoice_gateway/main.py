"""FastAPI application entry point for CareVoice Gateway."""

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from carevoice_gateway import __version__
from carevoice_gateway.api import health, routes
from carevoice_gateway.api.errors import register_exception_handlers
from carevoice_gateway.api.rate_limit import RateLimiter
from carevoice_gateway.config import Settings, get_settings
from carevoice_gateway.db.repository import InMemoryUserRepository, UserRepository
from carevoice_gateway.services.authenticator import CareVoiceAuthenticator
from carevoice_gateway.services.carevoice_client import CareVoiceClient
from carevoice_gateway.services.identity import IdentityService
from carevoice_gateway.services.session_tokens import SessionTokenService

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def _build_repository(settings: Settings) -> UserRepository:
    if settings.user_store == "supabase":
        from carevoice_gateway.db.client import SupabaseUserRepository

        return SupabaseUserRepository.from_settings(settings)
    return InMemoryUserRepository()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    settings: Settings = app.state.settings
    logger.info(f"Starting CareVoice Gateway v{__version__} ({settings.node_env})")
    logger.info(f"CareVoiceOS base URL: {settings.carevoice_api_base_url}")
    logger.info(f"User store: {settings.user_store}")
    if settings.jwt_secret == "default-secret-key" and not settings.debug:
        logger.warning("JWT_SECRET is the built-in default; set it outside development")

    yield

    await app.state.carevoice_client.aclose()
    logger.info("Shutting down CareVoice Gateway")


def create_app(
    settings: Settings | None = None,
    carevoice_client: CareVoiceClient | None = None,
    repository: UserRepository | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Settings to use (default: loaded from the environment)
        carevoice_client: Upstream client (default: built from settings)
        repository: User store (default: chosen by USER_STORE)

    Returns:
        The configured app, with its services on ``app.state``
    """
    settings = settings or get_settings()
    logging.getLogger().setLevel(settings.log_level.upper())

    app = FastAPI(
        title="CareVoice Gateway",
        description="Local identity bridged to CareVoiceOS SDK tokens",
        version=__version__,
        lifespan=lifespan,
        debug=settings.debug,
    )

    client = carevoice_client or CareVoiceClient.from_settings(settings)
    app.state.settings = settings
    app.state.carevoice_client = client
    app.state.identity = IdentityService(
        repository=repository or _build_repository(settings),
        authenticator=CareVoiceAuthenticator(client),
        tokens=SessionTokenService(settings.jwt_secret, settings.jwt_expires_seconds),
        bcrypt_rounds=settings.bcrypt_rounds,
    )
    app.state.rate_limiter = RateLimiter(
        max_requests=settings.rate_limit_max_requests,
        window_seconds=settings.rate_limit_window_seconds,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start_time = time.monotonic()
        response = await call_next(request)
        process_time = time.monotonic() - start_time
        logger.info(
            f"{request.method} {request.url.path} - {response.status_code} ({process_time:.3f}s)"
        )
        return response

    register_exception_handlers(app)
    app.include_router(routes.router)
    app.include_router(health.router)

    return app


def main() -> None:
    """Run the server with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "carevoice_gateway.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    main()
