from typing import Optional
from sqlalchemy.orm import Session

from ..core.exceptions import NotFound, ValidationError
from ..core.permissions import Operation, require_permission
from ..core.security import SessionClaims
from ..models.user import User
from ..repositories.user_repository import UserRepository


class UserService:
    """Profile access for the authenticated user."""

    def __init__(self, db: Session):
        self.users = UserRepository(db)

    def get_profile(self, caller: SessionClaims) -> User:
        require_permission(caller, Operation.VIEW_PROFILE)

        user = self.users.get_by_id(caller.user_id)
        if user is None:
            raise NotFound("User not found")
        return user

    def update_profile(self, caller: SessionClaims, full_name: Optional[str]) -> User:
        """Only the full name can be changed."""
        require_permission(caller, Operation.UPDATE_PROFILE)

        full_name = (full_name or "").strip()
        if not full_name:
            raise ValidationError("No update fields provided")

        user = self.users.update_full_name(caller.user_id, full_name)
        if user is None:
            raise NotFound("User not found")
        return user
