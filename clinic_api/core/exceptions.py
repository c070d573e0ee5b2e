from typing import Dict, Optional
from fastapi import HTTPException, status


class ClinicError(HTTPException):
    """Base error carrying a stable, machine-readable kind.

    Rendered by the application as ``{"error": kind, "message": detail}``.
    """

    kind: str = "internal_error"
    status_code_default: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail: str = "An unexpected error occurred"

    def __init__(self, detail: Optional[str] = None, headers: Optional[Dict[str, str]] = None):
        super().__init__(
            status_code=self.status_code_default,
            detail=detail or self.default_detail,
            headers=headers,
        )


class ValidationError(ClinicError):
    kind = "validation_error"
    status_code_default = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid request"


class Unauthorized(ClinicError):
    kind = "unauthorized"
    status_code_default = status.HTTP_401_UNAUTHORIZED
    default_detail = "Could not validate credentials"

    def __init__(self, detail: Optional[str] = None):
        super().__init__(detail, headers={"WWW-Authenticate": "Bearer"})


class PermissionDenied(ClinicError):
    kind = "permission_denied"
    status_code_default = status.HTTP_403_FORBIDDEN
    default_detail = "Permission denied."


class NotFound(ClinicError):
    kind = "not_found"
    status_code_default = status.HTTP_404_NOT_FOUND
    default_detail = "Resource not found"


class Conflict(ClinicError):
    kind = "conflict"
    status_code_default = status.HTTP_409_CONFLICT
    default_detail = "Resource already exists"


class InternalError(ClinicError):
    pass
