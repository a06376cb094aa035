"""
Domain errors raised by the service layer.

Each class carries the HTTP status it is rendered with by the handler
registered in ``app.main``.
"""
from fastapi import Request, status
from fastapi.responses import JSONResponse
import logging

logger = logging.getLogger(__name__)

class LoopediaError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)

class ValidationError(LoopediaError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"

class AuthenticationError(LoopediaError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Could not validate credentials"

class AuthorizationError(LoopediaError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Not allowed"

class NotFoundError(LoopediaError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"

class PersistenceError(LoopediaError):
    default_message = "Database operation failed"

async def loopedia_error_handler(request: Request, exc: LoopediaError) -> JSONResponse:
    """Render a domain error as ``{"detail": message}``"""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})
