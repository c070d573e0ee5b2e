from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
import logging

from ..models.user import User
from ..core.exceptions import Conflict, Unauthorized
from ..core.security import (
    verify_password, get_password_hash, SessionClaims, TokenService, UserRole
)
from ..repositories.user_repository import UserRepository
from ..schemas.auth import UserLogin, UserRegister, TokenResponse, UserResponse

logger = logging.getLogger(__name__)

class AuthService:
    def __init__(self, db: Session, tokens: TokenService):
        self.db = db
        self.users = UserRepository(db)
        self.tokens = tokens

    def register_user(self, user_data: UserRegister) -> User:
        """Register a new user."""
        # Check if user already exists
        if self.users.get_by_email(user_data.email) is not None:
            raise Conflict("An account with this email already exists")

        new_user = User(
            full_name=user_data.full_name,
            email=user_data.email,
            password_hash=get_password_hash(user_data.password),
            role=user_data.role or UserRole.CLIENT,
            phone=user_data.phone,
        )

        try:
            user = self.users.add(new_user)
        except IntegrityError:
            # Lost a race with a concurrent registration for the same email
            self.db.rollback()
            raise Conflict("An account with this email already exists")

        logger.info("Registered user %s with role %s", user.id, user.role.value)
        return user

    def authenticate_user(self, login_data: UserLogin) -> TokenResponse:
        """Authenticate user and return an access token.

        An unknown email and a wrong password fail identically.
        """
        user = self.users.get_by_email(login_data.email)

        if user is None or not verify_password(login_data.password, user.password_hash):
            raise Unauthorized("Invalid credentials")

        access_token = self.tokens.issue(user.id, user.role)
        logger.info("User %s logged in", user.id)

        return TokenResponse(
            access_token=access_token,
            expires_in=self.tokens.expires_in,
            user=UserResponse.model_validate(user),
        )

    def validate_session(self, token: str) -> SessionClaims:
        """Verify a session token and return its claims."""
        return self.tokens.verify(token)
