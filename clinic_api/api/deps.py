from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from ..core.database import get_db
from ..core.exceptions import Unauthorized
from ..core.security import security, get_token_service, SessionClaims, TokenService
from ..services.appointment_service import AppointmentService
from ..services.auth_service import AuthService
from ..services.notifications import NotificationService, get_notification_service
from ..services.user_service import UserService

def get_auth_service(
    db: Session = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
) -> AuthService:
    return AuthService(db, tokens)

async def get_current_caller(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    auth_service: AuthService = Depends(get_auth_service),
) -> SessionClaims:
    """Extract and verify the bearer session token."""
    if credentials is None or not credentials.credentials:
        raise Unauthorized("Authorization header required")

    return auth_service.validate_session(credentials.credentials)

def get_appointment_service(
    db: Session = Depends(get_db),
    notifications: NotificationService = Depends(get_notification_service),
) -> AppointmentService:
    return AppointmentService(db, notifications)

def get_user_service(db: Session = Depends(get_db)) -> UserService:
    return UserService(db)
