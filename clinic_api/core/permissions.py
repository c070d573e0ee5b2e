"""Role-based access control policy.

A pure (role, operation) -> allow/deny table. Services consult it before
issuing any query or mutation.
"""

from enum import Enum
from typing import Dict, FrozenSet

from .exceptions import PermissionDenied
from .security import SessionClaims, UserRole


class Operation(str, Enum):
    BOOK_APPOINTMENT = "BookAppointment"
    LIST_APPOINTMENTS = "ListAppointments"
    MODIFY_APPOINTMENT = "ModifyAppointment"
    CANCEL_APPOINTMENT = "CancelAppointment"
    VIEW_PROFILE = "ViewProfile"
    UPDATE_PROFILE = "UpdateProfile"


ALL_ROLES: FrozenSet[UserRole] = frozenset(UserRole)
CLINICIANS: FrozenSet[UserRole] = frozenset({UserRole.DENTIST, UserRole.STAFF})

POLICY: Dict[Operation, FrozenSet[UserRole]] = {
    Operation.BOOK_APPOINTMENT: frozenset({UserRole.CLIENT}),
    Operation.LIST_APPOINTMENTS: ALL_ROLES,
    Operation.MODIFY_APPOINTMENT: CLINICIANS,
    Operation.CANCEL_APPOINTMENT: CLINICIANS,
    Operation.VIEW_PROFILE: ALL_ROLES,
    Operation.UPDATE_PROFILE: ALL_ROLES,
}

DENIAL_MESSAGES = {
    Operation.BOOK_APPOINTMENT: "Only clients can book appointments.",
}


def authorize(role: UserRole, operation: Operation) -> bool:
    """Return True when ``role`` may perform ``operation``."""
    try:
        role = UserRole(role)
    except ValueError:
        return False
    return role in POLICY.get(operation, frozenset())


def require_permission(caller: SessionClaims, operation: Operation) -> None:
    """Raise PermissionDenied unless the caller's role allows ``operation``."""
    if not authorize(caller.role, operation):
        raise PermissionDenied(DENIAL_MESSAGES.get(operation, "Permission denied."))
