import logging
from fastapi import APIRouter, Depends, HTTPException, status, Response, Request
from fastapi.security import APIKeyCookie
from datetime import datetime, timedelta, timezone
from typing import Optional
import jwt
from pydantic import ValidationError

from .schemas.user import LoginRequest, SignupRequest, UserResponse, AuthResponse, MeResponse, TokenData
from ..models.db_models import User, Role
from ..services.auth_service import AuthService
from ..services.errors import PermissionDeniedError, ServiceError
from ..config.config import settings
from .dependencies import get_auth_service
from .utilities.errors import to_http_exception
from .utilities.limiter import limiter

logger = logging.getLogger(__name__)

# --- Router and security setup ---
router = APIRouter(
    prefix="/auth",
    tags=["Authentication"]
)
# auto_error=False so a missing cookie becomes our own 401 below.
cookie_scheme = APIKeyCookie(name=settings.AUTH_COOKIE_NAME, auto_error=False)


# --- Helpers ---
def create_access_token(user: User, expires_delta: Optional[timedelta] = None) -> str:
    """Signs a JWT carrying the user's identity and role."""
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.JWT_EXPIRE_MINUTES))
    to_encode = {
        "userId": user.id,
        "username": user.username,
        "email": user.email,
        "role": user.role.value,
        "full_name": user.full_name,
        "exp": expire,
    }
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def set_auth_cookie(response: Response, token: str):
    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=token,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
        max_age=settings.JWT_EXPIRE_MINUTES * 60,
        path="/",
    )


def clear_auth_cookie(response: Response):
    response.delete_cookie(
        key=settings.AUTH_COOKIE_NAME,
        path="/",
        secure=settings.COOKIE_SECURE,
        httponly=True,
        samesite="lax",
    )


# --- Dependencies for protected routes ---
async def get_current_user(
    token: Optional[str] = Depends(cookie_scheme),
    auth_service: AuthService = Depends(get_auth_service)
) -> User:
    """
    Decodes the auth cookie, validates its payload with Pydantic and returns
    the user as currently stored. A missing, expired or forged token, or a
    deleted account, all end in 401.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Unauthorized",
    )
    if not token:
        raise credentials_exception

    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        token_data = TokenData.model_validate(payload)
    except (jwt.PyJWTError, ValidationError) as e:
        # Both JWT errors (expiry, signature) and payload shape errors.
        logger.warning(f"Token validation error: {e}")
        raise credentials_exception

    # Always answer with the freshest user data from the database.
    user = await auth_service.get_user(token_data.user_id)
    if user is None:
        logger.warning(f"Token for user id {token_data.user_id} is valid but the account no longer exists.")
        raise credentials_exception
    return user


async def require_admin(user: User = Depends(get_current_user)) -> User:
    if user.role != Role.ADMIN:
        logger.warning(f"User '{user.username}' ({user.role.value}) tried to reach an admin-only route.")
        raise to_http_exception(PermissionDeniedError("This operation is only valid for admins."))
    return user


# --- API endpoints ---

@router.post("/signup", response_model=AuthResponse)
@limiter.limit("10/minute")
async def signup(
    request: Request,
    signup_request: SignupRequest,
    auth_service: AuthService = Depends(get_auth_service)
):
    try:
        user = await auth_service.signup(
            username=signup_request.username,
            email=signup_request.email,
            password=signup_request.password,
            full_name=signup_request.full_name,
            role=signup_request.role,
        )
    except ServiceError as e:
        raise to_http_exception(e)
    return AuthResponse(message="User created successfully", user=UserResponse.model_validate(user))


@router.post("/login", response_model=AuthResponse)
@limiter.limit("20/minute")
async def login(
    request: Request,
    login_request: LoginRequest,
    response: Response,
    auth_service: AuthService = Depends(get_auth_service)
):
    """Checks the credentials and stores a signed token in an HTTP-only cookie."""
    try:
        user = await auth_service.authenticate(login_request.email, login_request.password)
    except ServiceError as e:
        raise to_http_exception(e)

    set_auth_cookie(response, create_access_token(user))
    logger.info(f"User '{user.username}' ({user.role.value}) logged in.")
    return AuthResponse(message="Login successful", user=UserResponse.model_validate(user))


@router.post("/logout")
@limiter.limit("60/minute")
async def logout(request: Request, response: Response):
    """Clears the auth cookie. Works with or without a valid session."""
    clear_auth_cookie(response)
    return {"message": "Logged out successfully"}


@router.get("/me", response_model=MeResponse)
@limiter.limit("120/minute")
async def me(request: Request, current_user: User = Depends(get_current_user)):
    return MeResponse(user=UserResponse.model_validate(current_user))
