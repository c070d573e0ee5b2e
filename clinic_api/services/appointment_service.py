from datetime import datetime, timedelta
from typing import Any, Dict, List
from sqlalchemy.orm import Session
import logging

from ..core.exceptions import NotFound, ValidationError
from ..core.parsing import parse_date_or_none, parse_timestamp_or_none
from ..core.permissions import Operation, require_permission
from ..core.security import SessionClaims, UserRole
from ..models.appointment import Appointment, STATUS_CANCELLED, STATUS_SCHEDULED
from ..repositories.appointment_repository import AppointmentQuery, AppointmentRepository, SortOrder
from ..repositories.user_repository import UserRepository
from ..schemas.appointment import AppointmentFilters, AppointmentUpdate
from .notifications import NotificationService

logger = logging.getLogger(__name__)

# The end date filter covers its whole day up to 23:59.
END_OF_DAY = timedelta(hours=23, minutes=59)


class AppointmentService:
    def __init__(self, db: Session, notifications: NotificationService):
        self.appointments = AppointmentRepository(db)
        self.users = UserRepository(db)
        self.notifications = notifications

    def create(
        self,
        caller: SessionClaims,
        start_time: datetime,
        end_time: datetime,
        service: str,
    ) -> Appointment:
        """Book an appointment for the calling client."""
        require_permission(caller, Operation.BOOK_APPOINTMENT)

        patient = self.users.get_by_id(caller.user_id)
        if patient is None:
            raise NotFound("Could not find user details")

        appointment = self.appointments.add(Appointment(
            patient_id=patient.id,
            patient_name=patient.full_name,
            start_time=start_time,
            end_time=end_time,
            service=service,
            status=STATUS_SCHEDULED,
        ))
        logger.info("Appointment %s booked by patient %s", appointment.id, patient.id)

        self._notify(self.notifications.notify_appointment_booked, patient, appointment)
        return appointment

    def list_chronological(self, caller: SessionClaims, filters: AppointmentFilters) -> List[Appointment]:
        """Visible appointments, earliest first."""
        return self._list(caller, filters, SortOrder.ASCENDING)

    def list_newest_first(self, caller: SessionClaims, filters: AppointmentFilters) -> List[Appointment]:
        """Visible appointments, latest first."""
        return self._list(caller, filters, SortOrder.DESCENDING)

    def _list(self, caller: SessionClaims, filters: AppointmentFilters, order: SortOrder) -> List[Appointment]:
        require_permission(caller, Operation.LIST_APPOINTMENTS)
        return self.appointments.find(self.build_query(caller, filters), order)

    @staticmethod
    def build_query(caller: SessionClaims, filters: AppointmentFilters) -> AppointmentQuery:
        """Translate request filters into a store query for this caller.

        Clients are always pinned to their own appointments; any patient
        filter they send is ignored. Dentists and staff may filter by patient.
        """
        query = AppointmentQuery(status=filters.status or None)

        if caller.role == UserRole.CLIENT:
            query.patient_id = caller.user_id
        elif filters.patient_id:
            query.patient_id = filters.patient_id

        query.start_from = parse_date_or_none(filters.start_date)
        end_date = parse_date_or_none(filters.end_date)
        if end_date is not None:
            query.start_until = end_date + END_OF_DAY

        return query

    def update(self, caller: SessionClaims, appointment_id: str, changes: AppointmentUpdate) -> Appointment:
        """Apply a sparse update. Malformed timestamps are dropped, not rejected."""
        require_permission(caller, Operation.MODIFY_APPOINTMENT)

        fields = self.collect_update_fields(changes)
        if not fields:
            raise ValidationError("No fields to update")

        appointment = self.appointments.update(appointment_id, fields)
        if appointment is None:
            raise NotFound("Appointment not found")

        logger.info("Appointment %s updated by %s (%s)", appointment_id, caller.user_id, ", ".join(sorted(fields)))
        return appointment

    @staticmethod
    def collect_update_fields(changes: AppointmentUpdate) -> Dict[str, Any]:
        fields: Dict[str, Any] = {}
        start_time = parse_timestamp_or_none(changes.start_time)
        if start_time is not None:
            fields["start_time"] = start_time
        end_time = parse_timestamp_or_none(changes.end_time)
        if end_time is not None:
            fields["end_time"] = end_time
        if changes.service is not None:
            fields["service"] = changes.service
        if changes.status is not None:
            fields["status"] = changes.status
        return fields

    def cancel(self, caller: SessionClaims, appointment_id: str) -> Appointment:
        """Mark an appointment Cancelled. The record is kept."""
        require_permission(caller, Operation.CANCEL_APPOINTMENT)

        appointment = self.appointments.update(appointment_id, {"status": STATUS_CANCELLED})
        if appointment is None:
            raise NotFound("Appointment not found")
        logger.info("Appointment %s cancelled by %s", appointment_id, caller.user_id)

        patient = self.users.get_by_id(appointment.patient_id)
        if patient is not None:
            self._notify(self.notifications.notify_appointment_cancelled, patient, appointment)
        return appointment

    @staticmethod
    def _notify(send, patient, appointment) -> None:
        # Notification problems never fail the triggering operation.
        try:
            send(patient, appointment)
        except Exception:
            logger.exception("Notification for appointment %s could not be dispatched", appointment.id)
