"""FastAPI application factory."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from client_portal.api.photographer import router as photographer_router
from client_portal.api.portal import router as portal_router
from client_portal.app_logging import configure_logging
from client_portal.config import parse_allowed_origins
from client_portal.containers import AppContainer
from client_portal.domain.errors import ErrorKind, PortalError

HTTP_STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.INVALID_ARGUMENT: status.HTTP_400_BAD_REQUEST,
    ErrorKind.UNAUTHENTICATED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.PERMISSION_DENIED: status.HTTP_403_FORBIDDEN,
    # Expiry is final for the link, so it must not look retryable.
    ErrorKind.DEADLINE_EXCEEDED: status.HTTP_403_FORBIDDEN,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.FAILED_PRECONDITION: status.HTTP_409_CONFLICT,
    ErrorKind.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    app = FastAPI(title="Client Planning Portal")
    app.state.container = container

    origins = parse_allowed_origins(container.settings.cors_allowed_origins)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins or ["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type"],
    )

    app.include_router(portal_router)
    app.include_router(photographer_router)

    @app.exception_handler(PortalError)
    async def portal_error_handler(request: Request, exc: PortalError) -> JSONResponse:
        return _error_response(exc.kind, exc.message)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        logger.warning("Rejected request to %s: %s", request.url.path, exc.errors())
        return _error_response(ErrorKind.INVALID_ARGUMENT, "Invalid request payload.")

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    return app


def _error_response(kind: ErrorKind, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=HTTP_STATUS_BY_KIND[kind],
        content={"success": False, "error": {"kind": kind.value, "message": message}},
    )
