from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional
from sqlalchemy.orm import Session

from ..models.appointment import Appointment


class SortOrder(str, Enum):
    ASCENDING = "asc"    # chronological, groups by day
    DESCENDING = "desc"  # newest first


@dataclass
class AppointmentQuery:
    """Filter over stored appointments; unset fields do not constrain."""
    patient_id: Optional[str] = None
    start_from: Optional[datetime] = None
    start_until: Optional[datetime] = None
    status: Optional[str] = None


UPDATABLE_COLUMNS = {"start_time", "end_time", "service", "status"}


class AppointmentRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, appointment_id: str) -> Optional[Appointment]:
        return self.db.get(Appointment, appointment_id)

    def add(self, appointment: Appointment) -> Appointment:
        self.db.add(appointment)
        self.db.commit()
        self.db.refresh(appointment)
        return appointment

    def update(self, appointment_id: str, fields: Dict[str, Any]) -> Optional[Appointment]:
        """Apply ``fields`` to one appointment; None when it does not exist."""
        unknown = set(fields) - UPDATABLE_COLUMNS
        if unknown:
            raise ValueError(f"Not updatable: {sorted(unknown)}")

        matched = self.db.query(Appointment).filter(Appointment.id == appointment_id).update(
            {getattr(Appointment, name): value for name, value in fields.items()},
            synchronize_session=False,
        )
        self.db.commit()
        if not matched:
            return None

        appointment = self.get(appointment_id)
        self.db.refresh(appointment)
        return appointment

    def find(self, query: AppointmentQuery, order: SortOrder = SortOrder.ASCENDING) -> List[Appointment]:
        q = self.db.query(Appointment)
        if query.patient_id is not None:
            q = q.filter(Appointment.patient_id == query.patient_id)
        if query.start_from is not None:
            q = q.filter(Appointment.start_time >= query.start_from)
        if query.start_until is not None:
            q = q.filter(Appointment.start_time <= query.start_until)
        if query.status is not None:
            q = q.filter(Appointment.status == query.status)

        if order == SortOrder.DESCENDING:
            q = q.order_by(Appointment.start_time.desc())
        else:
            q = q.order_by(Appointment.start_time.asc())

        return q.all()
