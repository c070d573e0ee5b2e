from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi.security import HTTPBearer
from pydantic import BaseModel
from enum import Enum
import logging

from .config import settings
from .exceptions import InternalError, Unauthorized

logger = logging.getLogger(__name__)

# Password hashing. The cost factor is fixed per deployment.
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)

# Bearer credentials are checked by get_current_caller, not by FastAPI.
security = HTTPBearer(auto_error=False)

class UserRole(str, Enum):
    CLIENT = "client"
    DENTIST = "dentist"
    STAFF = "staff"

class SessionClaims(BaseModel):
    """Identity asserted by a validated session token."""
    user_id: str
    role: UserRole

# Password utilities
def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password against its hash."""
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        # Unrecognised or corrupt stored hash
        return False

def get_password_hash(password: str) -> str:
    """Generate password hash."""
    return pwd_context.hash(password)


class TokenService:
    """Issues and validates signed session tokens.

    The signing secret is injected at construction. When it is empty both
    directions fail closed: ``issue`` raises InternalError and ``verify``
    raises Unauthorized.
    """

    def __init__(
        self,
        secret: Optional[str],
        algorithm: str = "HS256",
        expires_delta: timedelta = timedelta(hours=24),
    ):
        self._secret = secret or None
        self.algorithm = algorithm
        self.expires_delta = expires_delta

    @property
    def configured(self) -> bool:
        return self._secret is not None

    @property
    def expires_in(self) -> int:
        return int(self.expires_delta.total_seconds())

    def issue(self, user_id: str, role: UserRole) -> str:
        if not self.configured:
            logger.critical("JWT_SECRET is not configured. Cannot generate token.")
            raise InternalError("Could not generate token")

        now = datetime.now(timezone.utc)
        claims = {
            "sub": user_id,
            "role": UserRole(role).value,
            "iat": now,
            "exp": now + self.expires_delta,
        }
        return jwt.encode(claims, self._secret, algorithm=self.algorithm)

    def verify(self, token: str) -> SessionClaims:
        if not self.configured:
            logger.critical("JWT_SECRET is not configured. Cannot validate token.")
            raise Unauthorized("Invalid token")

        try:
            payload = jwt.decode(token, self._secret, algorithms=[self.algorithm])
        except JWTError as exc:
            raise Unauthorized("Invalid token") from exc

        user_id = payload.get("sub")
        role = payload.get("role")
        if not user_id or role not in {r.value for r in UserRole}:
            raise Unauthorized("Invalid token payload")

        return SessionClaims(user_id=user_id, role=UserRole(role))


def get_token_service() -> TokenService:
    """Token service built from the process settings."""
    return TokenService(
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
        expires_delta=timedelta(hours=settings.ACCESS_TOKEN_EXPIRE_HOURS),
    )
