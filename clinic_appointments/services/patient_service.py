from typing import List
import logging

from sqlalchemy.orm import Session

from ..core.exceptions import PatientNotFoundError
from ..models.patient import Patient
from ..schemas.patient import PatientCreate

logger = logging.getLogger(__name__)


class PatientService:
    def __init__(self, db: Session):
        self.db = db

    def list_patients(self) -> List[Patient]:
        return self.db.query(Patient).order_by(
            Patient.last_name, Patient.first_name, Patient.id
        ).all()

    def get(self, patient_id: int) -> Patient:
        patient = self.db.get(Patient, patient_id)
        if patient is None:
            raise PatientNotFoundError()
        return patient

    def create_patient(self, patient_data: PatientCreate) -> Patient:
        patient = Patient(**patient_data.model_dump())

        self.db.add(patient)
        self.db.commit()
        self.db.refresh(patient)

        logger.info("Patient %s registered", patient.id)
        return patient
