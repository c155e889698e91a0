from datetime import date, time
from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import List, Optional

from ...api.deps import get_appointment_service, get_caller, get_staff_caller
from ...models.appointment import AppointmentStatus
from ...schemas.appointment import (
    AppointmentCreate, AppointmentInformation, AppointmentUpdate, SlotAvailability
)
from ...services.access import CallerContext
from ...services.appointment_service import AppointmentService

router = APIRouter(prefix="/appointment", tags=["Appointments"])

@router.post(
    "/",
    response_model=AppointmentInformation,
    status_code=status.HTTP_201_CREATED,
    responses={
        404: {"description": "Patient or doctor not found"},
        409: {"description": "Doctor already booked for that slot"},
    },
)
def create_appointment(
    request: AppointmentCreate,
    service: AppointmentService = Depends(get_appointment_service),
    _: CallerContext = Depends(get_caller)
):
    """Book an appointment."""
    return service.create(
        request.patient_id, request.doctor_id, request.date, request.time
    )

@router.get("/", response_model=List[AppointmentInformation])
def list_appointments(
    status_filter: Optional[AppointmentStatus] = Query(None, alias="status"),
    start: Optional[date] = None,
    end: Optional[date] = None,
    service: AppointmentService = Depends(get_appointment_service),
    _: CallerContext = Depends(get_staff_caller)
):
    """List appointments (staff and admin only).

    Narrow by ``status`` or by an inclusive ``start``/``end`` date range.
    """
    if status_filter is not None:
        return service.list_by_status(status_filter)

    if start is not None or end is not None:
        if start is None or end is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Both start and end are required for a date range"
            )
        return service.list_between(start, end)

    return service.list_all()

@router.get("/mine", response_model=List[AppointmentInformation])
def list_my_appointments(
    service: AppointmentService = Depends(get_appointment_service),
    caller: CallerContext = Depends(get_caller)
):
    """Appointments visible to the authenticated caller."""
    return service.list_by_role(caller)

@router.get("/availability", response_model=SlotAvailability)
def slot_availability(
    doctor_id: int = Query(..., alias="doctorId"),
    on: date = Query(..., alias="date"),
    at: time = Query(..., alias="time"),
    service: AppointmentService = Depends(get_appointment_service),
    _: CallerContext = Depends(get_caller)
):
    """Check whether a doctor is free at the given date and time."""
    return SlotAvailability(
        doctor_id=doctor_id,
        date=on,
        time=at,
        available=service.is_slot_available(doctor_id, on, at)
    )

@router.get("/{appointment_id}", response_model=AppointmentInformation)
def get_appointment(
    appointment_id: int,
    service: AppointmentService = Depends(get_appointment_service),
    _: CallerContext = Depends(get_caller)
):
    return service.get_by_id(appointment_id)

@router.put("/{appointment_id}", response_model=AppointmentInformation)
def update_appointment(
    appointment_id: int,
    request: AppointmentUpdate,
    service: AppointmentService = Depends(get_appointment_service),
    _: CallerContext = Depends(get_staff_caller)
):
    """Reassign the doctor and set the status (staff and admin only)."""
    return service.update(appointment_id, request.doctor_id, request.status)

@router.delete("/{appointment_id}", response_model=AppointmentInformation)
def cancel_appointment(
    appointment_id: int,
    service: AppointmentService = Depends(get_appointment_service),
    _: CallerContext = Depends(get_caller)
):
    """Cancel an appointment. Cancelling twice is harmless."""
    return service.cancel(appointment_id)
