"""FastAPI application entry point for the Certificate Management Adapter.

Initializes configuration, the secure session, authentication, and routes.
Run with: uvicorn --factory certmgmt_adapter.main:create_app
"""

from __future__ import annotations

import importlib
from contextlib import asynccontextmanager
from http import HTTPStatus
from typing import TYPE_CHECKING

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from certmgmt_adapter import __version__
from certmgmt_adapter.audit.logger import (
    configure_audit_logger,
    log_error,
    log_shutdown,
    log_startup,
)
from certmgmt_adapter.auth.handler import BasicAuthHandler
from certmgmt_adapter.config import load_config_from_env
from certmgmt_adapter.exceptions import CertMgmtAdapterError, ConfigurationError
from certmgmt_adapter.management.client import PullCertificateManagementClient
from certmgmt_adapter.routes.management import configure_routes, router

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from certmgmt_adapter.config import Settings
    from certmgmt_adapter.protocol.call import Session


def load_session(factory_path: str | None) -> Session:
    """Create the secure session from a 'module:callable' factory path.

    Raises:
        ConfigurationError: If no factory is configured or it cannot be loaded.
    """
    if not factory_path:
        raise ConfigurationError.missing_required(field="session.factory")

    module_name, _, attribute = factory_path.partition(":")
    try:
        module = importlib.import_module(module_name)
        factory = getattr(module, attribute)
    except (ImportError, AttributeError) as e:
        raise ConfigurationError.invalid_config(field="session.factory", reason=str(e)) from e

    if not callable(factory):
        raise ConfigurationError.invalid_config(field="session.factory", reason=f"{factory_path} is not callable")
    return factory()


def create_app(settings: Settings | None = None, session: Session | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional settings instance. If not provided,
            loads from environment or defaults.
        session: Optional session. If not provided, created from the
            configured session factory.

    Returns:
        Configured FastAPI application.
    """
    if settings is None:
        settings = load_config_from_env()

    configure_audit_logger(settings.audit)

    if session is None:
        session = load_session(settings.session.factory)

    client = PullCertificateManagementClient(session)
    auth_handler = BasicAuthHandler.from_config(settings.auth)

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
        """Application lifespan events."""
        log_startup(
            version=__version__,
            host=settings.server.host,
            port=settings.server.port,
        )
        yield
        log_shutdown()

    app = FastAPI(
        title="Certificate Management Adapter",
        description="Administration API for OPC UA server certificate management",
        version=__version__,
        lifespan=lifespan,
    )

    configure_routes(client, auth_handler, settings)
    app.include_router(router)

    @app.exception_handler(CertMgmtAdapterError)
    async def adapter_error_handler(
        _request: Request,
        exc: CertMgmtAdapterError,
    ) -> JSONResponse:
        """Handle adapter errors with appropriate HTTP status."""
        log_error(error=exc, context="request_handling")
        headers = {"WWW-Authenticate": "Basic"} if exc.http_status == HTTPStatus.UNAUTHORIZED else None
        return JSONResponse(
            status_code=exc.http_status.value,
            content={
                "error": exc.__class__.__name__,
                "message": exc.message,
                "details": exc.details,
            },
            headers=headers,
        )

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Health check endpoint for monitoring."""
        return {"status": "healthy", "version": __version__}

    return app


def main() -> None:
    """Run the server using uvicorn."""
    settings = load_config_from_env()

    uvicorn_config: dict[str, str | int | bool | None] = {
        "app": "certmgmt_adapter.main:create_app",
        "factory": True,
        "host": settings.server.host,
        "port": settings.server.port,
        "reload": False,
    }

    if settings.server.tls:
        uvicorn_config["ssl_certfile"] = str(settings.server.tls.cert_file)
        uvicorn_config["ssl_keyfile"] = str(settings.server.tls.key_file)

    uvicorn.run(**uvicorn_config)


if __name__ == "__main__":
    main()
