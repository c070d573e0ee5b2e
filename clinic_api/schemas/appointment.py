from datetime import datetime
from typing import Any, Optional
from pydantic import AwareDatetime, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from ..core.parsing import is_rfc3339_text
from .auth import CamelModel


class AppointmentCreate(CamelModel):
    start_time: AwareDatetime
    end_time: AwareDatetime
    service: str = ""

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def require_rfc3339_text(cls, value: Any) -> Any:
        # Epoch numbers (or numeric strings) would otherwise be coerced.
        if not is_rfc3339_text(value):
            raise ValueError("Invalid time format, use RFC3339")
        return value


class AppointmentUpdate(CamelModel):
    """Sparse update. Timestamps stay raw strings so malformed values can be
    dropped individually instead of rejecting the request."""
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    service: Optional[str] = None
    status: Optional[str] = None


class AppointmentResponse(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: str
    patient_id: str
    patient_name: str
    start_time: datetime
    end_time: datetime
    service: str
    status: str


class AppointmentFilters(CamelModel):
    """List filters as received; dates are parsed leniently by the service."""
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    status: Optional[str] = None
    patient_id: Optional[str] = None
