from typing import Optional
from sqlalchemy.orm import Session

from ..models.user import User


class UserRepository:
    """Lookup and persistence of user records."""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, user_id: str) -> Optional[User]:
        return self.db.get(User, user_id)

    def get_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email).first()

    def add(self, user: User) -> User:
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user

    def update_full_name(self, user_id: str, full_name: str) -> Optional[User]:
        """Set the user's full name; None when no such user exists."""
        matched = self.db.query(User).filter(User.id == user_id).update(
            {User.full_name: full_name}, synchronize_session=False
        )
        self.db.commit()
        if not matched:
            return None
        return self.get_by_id(user_id)
