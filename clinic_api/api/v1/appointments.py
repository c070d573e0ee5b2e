from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status

from ...api.deps import get_appointment_service, get_current_caller
from ...core.security import SessionClaims
from ...services.appointment_service import AppointmentService
from ...schemas.appointment import (
    AppointmentCreate, AppointmentFilters, AppointmentResponse, AppointmentUpdate
)

router = APIRouter(tags=["Appointments"])

def appointment_filters(
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    status: Optional[str] = Query(None),
    patient_id: Optional[str] = Query(None, alias="patientId"),
) -> AppointmentFilters:
    return AppointmentFilters(
        start_date=start_date,
        end_date=end_date,
        status=status,
        patient_id=patient_id,
    )

@router.get("/appointments", response_model=List[AppointmentResponse])
async def list_appointments(
    filters: AppointmentFilters = Depends(appointment_filters),
    caller: SessionClaims = Depends(get_current_caller),
    service: AppointmentService = Depends(get_appointment_service),
):
    """List appointments in chronological order (e.g. ?startDate=2024-07-01&endDate=2024-07-31)."""
    return service.list_chronological(caller, filters)

@router.get("/appointment/user/{user_id}", response_model=List[AppointmentResponse])
async def list_user_appointments(
    user_id: str,
    filters: AppointmentFilters = Depends(appointment_filters),
    caller: SessionClaims = Depends(get_current_caller),
    service: AppointmentService = Depends(get_appointment_service),
):
    """List appointments newest first.

    Clients only ever see their own. The path id is not consulted; dentists
    and staff narrow to one patient with ?patientId=.
    """
    return service.list_newest_first(caller, filters)

@router.post("/appointments", response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
async def create_appointment(
    body: AppointmentCreate,
    caller: SessionClaims = Depends(get_current_caller),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Book an appointment for the calling client."""
    return service.create(caller, body.start_time, body.end_time, body.service)

@router.put("/appointments/{appointment_id}", response_model=AppointmentResponse)
async def update_appointment(
    appointment_id: str,
    body: AppointmentUpdate,
    caller: SessionClaims = Depends(get_current_caller),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Update an appointment (dentist/staff)."""
    return service.update(caller, appointment_id, body)

@router.patch("/appointments/{appointment_id}/cancel", response_model=AppointmentResponse)
async def cancel_appointment(
    appointment_id: str,
    caller: SessionClaims = Depends(get_current_caller),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Cancel an appointment (dentist/staff)."""
    return service.cancel(caller, appointment_id)
