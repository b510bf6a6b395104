from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Boolean, Text, Index
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from ..core.database import Base

class Appointment(Base):
    __tablename__ = "appointments"
    __table_args__ = (
        # Slot lookup used by the conflict check
        Index("ix_appointments_slot", "medecin_id", "date", "heure_debut"),
    )

    id = Column(Integer, primary_key=True, index=True)

    # Relationships
    patient_id = Column(Integer, ForeignKey("patients.id"), nullable=False)
    medecin_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    # Appointment details, stored in canonical text form (YYYY/MM/DD, HH:MM)
    motif = Column(Text, nullable=False)
    date = Column(String(10), nullable=False)
    heure_debut = Column(String(8), nullable=False)
    heure_fin = Column(String(8), nullable=False)
    is_enabled = Column(Boolean, nullable=False, default=True)

    # Tracking
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    patient = relationship("Patient", back_populates="appointments")
    medecin = relationship("User", back_populates="appointments")

    def __repr__(self):
        return (
            f"<Appointment(id={self.id}, medecin_id={self.medecin_id}, "
            f"date='{self.date}', heure_debut='{self.heure_debut}', enabled={self.is_enabled})>"
        )
