"""FastAPI application initialization and configuration module.

This module builds the Packsend application. It handles:
- Application lifecycle logging (startup/shutdown)
- Exception handler and middleware registration
- Endpoint options (serializer, response interceptor, route registry)
- Registration of ``Endpoint`` classes as named routes
- Health check and info endpoints
"""

from collections.abc import AsyncGenerator, Iterable
from contextlib import asynccontextmanager
from typing import Annotated, Any

from fastapi import Depends, FastAPI
from loguru import logger

from src.api.constants import BINARY_CONTENT_TYPE
from src.api.middleware.error_handler import register_exception_handlers
from src.api.middleware.request_context import RequestContextMiddleware
from src.api.sending.options import EndpointOptions, configure_endpoints
from src.api.utils.responses import ORJSONResponse
from src.core.config import Settings, get_settings
from src.core.logging import setup_logging


@asynccontextmanager
async def lifespan(app_instance: FastAPI) -> AsyncGenerator[None]:
    """Manage application lifespan events.

    Args:
        app_instance: The FastAPI application instance.

    Yields:
        None: Nothing is yielded, this is just a lifespan context.
    """
    options: EndpointOptions = app_instance.state.endpoint_options
    logger.info(
        "Application startup complete - {} v{}",
        app_instance.title,
        app_instance.version,
        route_count=len(options.route_registry.registered_names),
    )

    yield

    logger.info("Application shutdown complete")


def create_app(
    settings: Settings | None = None,
    endpoints: Iterable[type] = (),
    options: EndpointOptions | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional settings instance. If not provided, will use get_settings().
        endpoints: ``Endpoint`` subclasses to register as named routes.
        options: Endpoint options. Built from ``settings`` when not provided.

    Returns:
        FastAPI: Configured FastAPI application instance.
    """
    if settings is None:
        settings = get_settings()

    # Setup logging first
    setup_logging(settings)

    if options is None:
        options = EndpointOptions.from_settings(settings)

    application = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        docs_url=settings.docs_url,
        redoc_url=settings.redoc_url,
        openapi_url=settings.openapi_url,
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
    )

    # Register exception handlers BEFORE middleware
    register_exception_handlers(application)

    application.add_middleware(RequestContextMiddleware)

    configure_endpoints(application, options)
    application.router.routes.extend(options.route_registry.register_all(endpoints))

    @application.get("/health")
    async def health() -> dict[str, object]:
        """Health check endpoint for monitoring and container orchestration.

        Returns:
            dict[str, object]: A dictionary with the service status.
        """
        return {"status": "healthy"}

    @application.get("/info")
    async def info(
        app_settings: Annotated[Settings, Depends(get_settings)],
    ) -> dict[str, Any]:
        """Get application information.

        Args:
            app_settings: Application settings injected via dependency.

        Returns:
            dict[str, Any]: Application information including name, version,
                environment and the binary content type.
        """
        return {
            "app_name": app_settings.app_name,
            "version": app_settings.app_version,
            "environment": app_settings.environment,
            "debug": app_settings.debug,
            "binary_content_type": BINARY_CONTENT_TYPE,
        }

    return application


app = create_app()
