# --- Service layer exception classes ---
# Routers translate these into HTTP status codes.

class ServiceError(Exception):
    """General exception class for the service layer. Maps to 500."""
    pass

class ValidationError(ServiceError):
    """Malformed or missing input. Maps to 400."""
    pass

class AuthenticationError(ServiceError):
    """Missing or invalid credentials. Maps to 401."""
    pass

class PermissionDeniedError(ServiceError):
    """Authenticated, but the role is not allowed to do this. Maps to 403."""
    pass

class NotFoundError(ServiceError):
    """The referenced record does not exist. Maps to 404."""
    pass

class ConflictError(ServiceError):
    """A unique value is already taken. Maps to 409."""
    pass
