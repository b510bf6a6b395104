from datetime import datetime
from typing import List, Optional, Union
import logging
import re

from sqlalchemy.orm import Session, joinedload

from ..core.config import settings
from ..core.exceptions import (
    AppointmentNotFoundError, SlotConflictError, ValidationFailedError
)
from ..models.appointment import Appointment
from ..models.patient import Patient
from ..models.user import User
from ..schemas.appointment import AppointmentPayload

logger = logging.getLogger(__name__)

# A bare id ("12") or a resource path ending in one ("/api/users/12")
REFERENCE_PATTERN = re.compile(r"^(?:/[A-Za-z0-9_\-/]*/)?(\d+)$")


def normalize_date(value: str) -> str:
    """Return ``value`` as a zero-padded ``YYYY/MM/DD`` string.

    Hyphen and slash separators are both accepted, so ``2024-3-1`` and
    ``2024/03/01`` name the same day.
    """
    candidate = value.strip().replace("-", "/")
    try:
        parsed = datetime.strptime(candidate, "%Y/%m/%d")
    except ValueError:
        raise ValidationFailedError()
    return parsed.strftime("%Y/%m/%d")


def normalize_time(value: str) -> str:
    """Return ``value`` as ``HH:MM`` (or ``HH:MM:SS`` when seconds are set)."""
    candidate = value.strip()
    for fmt in ("%H:%M", "%H:%M:%S"):
        try:
            parsed = datetime.strptime(candidate, fmt)
        except ValueError:
            continue
        return parsed.strftime("%H:%M:%S" if parsed.second else "%H:%M")
    raise ValidationFailedError()


def parse_reference(value: Union[int, str]) -> int:
    """Extract the numeric id from a patient or practitioner reference."""
    if isinstance(value, bool):
        raise ValidationFailedError()
    if isinstance(value, int):
        if value <= 0:
            raise ValidationFailedError()
        return value
    match = REFERENCE_PATTERN.match(value.strip())
    if not match:
        raise ValidationFailedError()
    return int(match.group(1))


class AppointmentService:
    def __init__(self, db: Session):
        self.db = db

    def _query(self):
        return self.db.query(Appointment).options(
            joinedload(Appointment.patient),
            joinedload(Appointment.medecin),
        )

    def list_appointments(self) -> List[Appointment]:
        """Return every appointment."""
        return self._query().order_by(
            Appointment.date, Appointment.heure_debut, Appointment.id
        ).all()

    def list_for_practitioner(self, practitioner: User) -> List[Appointment]:
        """Return the appointments booked with ``practitioner``."""
        return self._query().filter(
            Appointment.medecin_id == practitioner.id
        ).order_by(
            Appointment.date, Appointment.heure_debut, Appointment.id
        ).all()

    def find(self, appointment_id: int) -> Optional[Appointment]:
        return self._query().filter(Appointment.id == appointment_id).first()

    def get(self, appointment_id: int) -> Appointment:
        appointment = self.find(appointment_id)
        if appointment is None:
            raise AppointmentNotFoundError()
        return appointment

    def create_appointment(self, payload: AppointmentPayload) -> Appointment:
        """Book a new, enabled appointment.

        The slot conflict check only runs here when
        ``CHECK_CONFLICT_ON_CREATE`` is set; by default creation may
        double-book a slot and the clash surfaces on the next update or
        reactivation.
        """
        appointment = Appointment(is_enabled=True)
        self._apply(appointment, payload)

        if settings.CHECK_CONFLICT_ON_CREATE:
            self._ensure_slot_free(appointment)

        self.db.add(appointment)
        self.db.commit()
        self.db.refresh(appointment)

        logger.info(
            "Appointment %s created for practitioner %s on %s at %s",
            appointment.id, appointment.medecin_id, appointment.date, appointment.heure_debut
        )
        return appointment

    def update_appointment(self, appointment_id: int, payload: AppointmentPayload) -> Appointment:
        """Rewrite an appointment's fields, refusing to move it onto a booked slot."""
        appointment = self.get(appointment_id)

        self._apply(appointment, payload)
        self._ensure_slot_free(appointment)

        self.db.commit()
        self.db.refresh(appointment)

        logger.info("Appointment %s updated", appointment.id)
        return appointment

    def delete_appointment(self, appointment_id: int) -> None:
        appointment = self.get(appointment_id)

        self.db.delete(appointment)
        self.db.commit()

        logger.info("Appointment %s deleted", appointment_id)

    def toggle_status(self, appointment_id: int) -> Appointment:
        """Cancel an enabled appointment, or reactivate a cancelled one.

        Reactivation is refused when another enabled appointment already
        holds the slot; the record then stays cancelled.
        """
        appointment = self.get(appointment_id)

        if appointment.is_enabled:
            appointment.is_enabled = False
            logger.info("Appointment %s cancelled", appointment.id)
        else:
            self._ensure_slot_free(appointment)
            appointment.is_enabled = True
            logger.info("Appointment %s reactivated", appointment.id)

        self.db.commit()
        self.db.refresh(appointment)
        return appointment

    def find_slot_conflict(
        self,
        medecin_id: int,
        date: str,
        heure_debut: str,
        exclude_id: Optional[int] = None
    ) -> Optional[Appointment]:
        """Return another enabled appointment holding the same slot, if any.

        ``date`` and ``heure_debut`` must already be normalised.
        """
        query = self.db.query(Appointment).filter(
            Appointment.medecin_id == medecin_id,
            Appointment.date == date,
            Appointment.heure_debut == heure_debut,
            Appointment.is_enabled.is_(True),
        )
        if exclude_id is not None:
            query = query.filter(Appointment.id != exclude_id)
        return query.first()

    def _ensure_slot_free(self, appointment: Appointment) -> None:
        conflict = self.find_slot_conflict(
            appointment.medecin_id,
            appointment.date,
            appointment.heure_debut,
            exclude_id=appointment.id,
        )
        if conflict is not None:
            logger.warning(
                "Slot %s %s for practitioner %s already held by appointment %s",
                appointment.date, appointment.heure_debut, appointment.medecin_id, conflict.id
            )
            # Keep the pending field changes out of the session
            self.db.rollback()
            raise SlotConflictError()

    def _apply(self, appointment: Appointment, payload: AppointmentPayload) -> None:
        """Validate ``payload`` and copy it onto ``appointment``."""
        motif = payload.motif.strip()
        if not motif:
            raise ValidationFailedError()

        date = normalize_date(payload.date)
        heure_debut = normalize_time(payload.heure_debut)
        heure_fin = normalize_time(payload.heure_fin)
        if heure_fin <= heure_debut:
            raise ValidationFailedError()

        patient = self.db.get(Patient, parse_reference(payload.patient))
        medecin = self.db.get(User, parse_reference(payload.medecin))
        if patient is None or medecin is None or not medecin.is_active:
            raise ValidationFailedError()

        appointment.motif = motif
        appointment.date = date
        appointment.heure_debut = heure_debut
        appointment.heure_fin = heure_fin
        # Foreign keys are set too so the slot check sees them before a flush
        appointment.patient_id = patient.id
        appointment.medecin_id = medecin.id
        appointment.patient = patient
        appointment.medecin = medecin
