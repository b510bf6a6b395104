from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List

from ...core.database import get_db
from ...api.deps import get_secretary_user
from ...services.appointment_service import AppointmentService
from ...schemas.appointment import (
    AppointmentPayload, AppointmentResponse, StatusMessage
)
from ...models.user import User

router = APIRouter(
    prefix="/appointments",
    tags=["Appointments"],
    dependencies=[Depends(get_secretary_user)],
)

@router.get("", response_model=List[AppointmentResponse])
async def list_appointments(db: Session = Depends(get_db)):
    """List every appointment."""
    return AppointmentService(db).list_appointments()

@router.get("/mine", response_model=List[AppointmentResponse])
async def list_my_appointments(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_secretary_user)
):
    """List the appointments whose practitioner is the caller.

    Open to any staff role, but only doctors are booked as practitioners,
    so the list is empty for secretaries and admins.
    """
    return AppointmentService(db).list_for_practitioner(current_user)

@router.get("/{appointment_id}", response_model=AppointmentResponse)
async def get_appointment(appointment_id: int, db: Session = Depends(get_db)):
    return AppointmentService(db).get(appointment_id)

@router.post("", response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
async def create_appointment(
    payload: AppointmentPayload,
    db: Session = Depends(get_db)
):
    """Book an appointment. It starts out enabled."""
    return AppointmentService(db).create_appointment(payload)

@router.put("/{appointment_id}", response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
async def update_appointment(
    appointment_id: int,
    payload: AppointmentPayload,
    db: Session = Depends(get_db)
):
    """Rewrite an appointment. Fails with 409 when the new slot is taken."""
    return AppointmentService(db).update_appointment(appointment_id, payload)

@router.delete("/{appointment_id}", response_model=StatusMessage)
async def delete_appointment(appointment_id: int, db: Session = Depends(get_db)):
    AppointmentService(db).delete_appointment(appointment_id)

    return StatusMessage(status=status.HTTP_200_OK, message="Appointment deleted")

@router.put("/{appointment_id}/status", response_model=StatusMessage)
async def toggle_appointment_status(appointment_id: int, db: Session = Depends(get_db)):
    """Cancel an active appointment or reactivate a cancelled one."""
    appointment = AppointmentService(db).toggle_status(appointment_id)

    message = "Appointment reactivated" if appointment.is_enabled else "Appointment cancelled"
    return StatusMessage(status=status.HTTP_200_OK, message=message)
