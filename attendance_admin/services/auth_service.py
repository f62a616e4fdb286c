import logging
from typing import Optional
import bcrypt

from ..db.db_client import AsyncPostgresClient, DuplicateRecordError
from ..models.db_models import User, VALID_ROLES
from ..modules.validators import validate_email
from .errors import AuthenticationError, ConflictError, ServiceError, ValidationError

logger = logging.getLogger(__name__)

BCRYPT_ROUNDS = 12
PASSWORD_MIN_LENGTH = 6
# bcrypt only looks at the first 72 bytes of a password.
PASSWORD_MAX_BYTES = 72


def hash_password(password: str) -> str:
    """Salted bcrypt hash of the password."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(password: str, hashed_password: str) -> bool:
    """Checks a clear text password against a stored bcrypt hash."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        # Malformed hash in storage or an over-long password.
        logger.warning("bcrypt rejected a password check input.")
        return False


class AuthService:
    """
    Account creation and credential checks.
    Token issuing and the cookie live at the HTTP boundary (api/auth.py).
    """
    def __init__(self, db_client: AsyncPostgresClient):
        self.db_client = db_client

    async def signup(self, username: Optional[str], email: Optional[str], password: Optional[str],
                     full_name: Optional[str], role: Optional[str]) -> User:
        if not username or not email or not password or not full_name:
            raise ValidationError("All fields are required")
        if not validate_email(email):
            raise ValidationError("Invalid email format")
        if len(password) < PASSWORD_MIN_LENGTH:
            raise ValidationError(f"Password must be at least {PASSWORD_MIN_LENGTH} characters")
        if len(password.encode("utf-8")) > PASSWORD_MAX_BYTES:
            raise ValidationError(f"Password must be at most {PASSWORD_MAX_BYTES} bytes")
        if role not in VALID_ROLES:
            raise ValidationError("Invalid role")

        try:
            user = await self.db_client.add_user(
                username=username, email=email, password_hash=hash_password(password),
                role=role, full_name=full_name
            )
        except DuplicateRecordError:
            logger.warning(f"Signup rejected, username '{username}' or email '{email}' already exists.")
            raise ConflictError("User creation failed. Email or username may already exist.")
        except Exception as e:
            logger.error("Database error while creating a user.", exc_info=True)
            raise ServiceError("User creation failed.") from e

        logger.info(f"User '{user.username}' ({user.role.value}) created.")
        return user

    async def authenticate(self, email: Optional[str], password: Optional[str]) -> User:
        """Returns the user (without its hash) or raises AuthenticationError."""
        if not email or not password:
            raise ValidationError("Email and password are required")

        credentials = await self.db_client.get_user_credentials_by_email(email)
        if credentials is None or not verify_password(password, credentials.password):
            logger.warning(f"Failed login attempt for '{email}'.")
            raise AuthenticationError("Invalid email or password")

        return User(**credentials.model_dump(exclude={"password"}))

    async def get_user(self, user_id: int) -> Optional[User]:
        return await self.db_client.get_user_by_id(user_id)
