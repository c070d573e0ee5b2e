from fastapi import APIRouter, Depends

from ...api.deps import get_current_caller, get_user_service
from ...core.security import SessionClaims
from ...services.user_service import UserService
from ...schemas.auth import ProfileUpdate, UserResponse

router = APIRouter(prefix="/user", tags=["Users"])

# The {user_id} path segment is accepted for route compatibility only; both
# endpoints act on the caller's own record.

@router.get("/{user_id}", response_model=UserResponse)
async def get_profile(
    user_id: str,
    caller: SessionClaims = Depends(get_current_caller),
    user_service: UserService = Depends(get_user_service),
):
    """Get the current user's profile."""
    return user_service.get_profile(caller)

@router.put("/{user_id}", response_model=UserResponse)
async def update_profile(
    user_id: str,
    body: ProfileUpdate,
    caller: SessionClaims = Depends(get_current_caller),
    user_service: UserService = Depends(get_user_service),
):
    """Update the current user's full name."""
    return user_service.update_profile(caller, body.full_name)
