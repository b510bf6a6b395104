from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List

from ...core.database import get_db
from ...api.deps import get_secretary_user
from ...services.patient_service import PatientService
from ...schemas.patient import PatientCreate, PatientResponse

router = APIRouter(
    prefix="/patients",
    tags=["Patients"],
    dependencies=[Depends(get_secretary_user)],
)

@router.get("", response_model=List[PatientResponse])
async def list_patients(db: Session = Depends(get_db)):
    return PatientService(db).list_patients()

@router.get("/{patient_id}", response_model=PatientResponse)
async def get_patient(patient_id: int, db: Session = Depends(get_db)):
    return PatientService(db).get(patient_id)

@router.post("", response_model=PatientResponse, status_code=status.HTTP_201_CREATED)
async def create_patient(
    patient_data: PatientCreate,
    db: Session = Depends(get_db)
):
    """Register a patient so appointments can be booked for them."""
    return PatientService(db).create_patient(patient_data)
