from contextlib import asynccontextmanager
from datetime import timedelta
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from leafbase import __version__
from leafbase.auth.errors import AuthError
from leafbase.auth.jwt import TokenIssuer
from leafbase.auth.password import PasswordHasher
from leafbase.auth.router import router as auth_router
from leafbase.base_service import BaseService, configure_logging
from leafbase.database import create_engine, create_session_factory, init_models
from leafbase.settings import Settings

base_service = BaseService("main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for FastAPI.
    Creates missing tables on startup and releases the pool on shutdown.
    """
    base_service.log_event("service.startup", {"service": "main", "version": __version__})
    await init_models(app.state.engine)
    yield
    base_service.log_event("service.shutdown", {"service": "main"})
    await app.state.engine.dispose()


async def handle_auth_error(request: Request, exc: AuthError):
    if exc.exposed:
        message = exc.message
    else:
        # Internal failures are logged, never echoed
        base_service.log_error(exc, context=f"{request.method} {request.url.path}")
        message = AuthError.public_message
    return base_service.error_response(message, status_code=exc.status_code, headers=exc.headers)


async def handle_validation_error(request: Request, exc: RequestValidationError):
    errors = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        errors.append({"field": field, "message": err.get("msg", "")})
    return base_service.error_response("Invalid request body", status_code=400, data={"errors": errors})


async def handle_unexpected_error(request: Request, exc: Exception):
    base_service.log_error(exc, context=f"{request.method} {request.url.path}")
    return base_service.error_response("Internal server error", status_code=500)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the FastAPI application from ``settings`` (environment by default)."""
    if settings is None:
        settings = Settings.from_env()
    configure_logging(settings.log_level)
    if settings.uses_default_secret:
        base_service.logger.warning("JWT_SECRET_KEY is not set; using the development default")

    app = FastAPI(
        title="Leafbase API",
        description="Authentication service for the Leafbase catalog",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.engine = create_engine(settings.database_url)
    app.state.session_factory = create_session_factory(app.state.engine)
    app.state.password_hasher = PasswordHasher(rounds=settings.bcrypt_rounds)
    app.state.token_issuer = TokenIssuer(
        secret_key=settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
        default_ttl=timedelta(minutes=settings.access_token_expire_minutes),
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(AuthError, handle_auth_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    app.include_router(auth_router, prefix="/api/users", tags=["auth"])

    @app.get("/", tags=["root"])
    async def root():
        """Root endpoint returning API information."""
        return base_service.response(
            message="Leafbase API",
            data={"name": "Leafbase API", "version": __version__, "services": ["auth"]},
        )

    @app.get("/health", tags=["health"])
    async def health_check():
        """Overall system health check."""
        return base_service.response(message="System health", data={"services": {"auth": "online"}})

    return app


app = create_app()
