import logging
from fastapi import HTTPException, status

from ...services.errors import (
    ServiceError, ValidationError, AuthenticationError,
    PermissionDeniedError, NotFoundError, ConflictError
)

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    AuthenticationError: status.HTTP_401_UNAUTHORIZED,
    PermissionDeniedError: status.HTTP_403_FORBIDDEN,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ConflictError: status.HTTP_409_CONFLICT,
}

GENERIC_ERROR_MESSAGE = "Internal server error"


def to_http_exception(error: ServiceError) -> HTTPException:
    """Maps a service error to its HTTP status. Unclassified errors keep their message server-side."""
    for error_type, status_code in _STATUS_BY_ERROR.items():
        if isinstance(error, error_type):
            return HTTPException(status_code=status_code, detail=str(error))

    logger.error(f"Unclassified service error: {error}", exc_info=error)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=GENERIC_ERROR_MESSAGE)
