# attendance_admin/api/utilities/limiter.py

from fastapi import Request
import jwt

from slowapi import Limiter
from slowapi.util import get_remote_address

from ...config.config import settings


def get_limiter_key(request: Request) -> str:
    """
    Returns the rate limit key for a request.
    A readable auth cookie keys the limit by user id, anything else by client IP,
    so signed-in and anonymous callers are both covered.
    """
    token = request.cookies.get(settings.AUTH_COOKIE_NAME)
    if token:
        try:
            # Expiry does not matter here, only the identity inside.
            payload = jwt.decode(
                token,
                settings.SECRET_KEY,
                algorithms=[settings.ALGORITHM],
                options={"verify_exp": False}
            )
            user_id = payload.get("userId")
            if user_id is not None:
                return f"user:{user_id}"
        except jwt.PyJWTError:
            # Unreadable token, fall back to the IP based limit.
            pass

    return get_remote_address(request)


limiter = Limiter(
    key_func=get_limiter_key,
    storage_uri=settings.RATE_LIMITER_STORAGE_URI,
    enabled=settings.RATE_LIMIT_ENABLED,
)
