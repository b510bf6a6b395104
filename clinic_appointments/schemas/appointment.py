from typing import Optional, Union

from pydantic import BaseModel, Field

# Wire names follow the clinic front-end: camelCase times, French field names.


class AppointmentPayload(BaseModel):
    """Body of create and update requests. Every field is required."""
    motif: str
    date: str
    patient: Union[int, str]
    medecin: Union[int, str]
    heure_debut: str = Field(..., alias="heureDebut")
    heure_fin: str = Field(..., alias="heureFin")


class PatientSummary(BaseModel):
    id: int
    first_name: str
    last_name: str

    class Config:
        from_attributes = True


class PractitionerSummary(BaseModel):
    id: int
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None

    class Config:
        from_attributes = True


class AppointmentResponse(BaseModel):
    id: int
    motif: str
    date: str
    heure_debut: str = Field(..., serialization_alias="heureDebut")
    heure_fin: str = Field(..., serialization_alias="heureFin")
    is_enabled: bool = Field(..., serialization_alias="isEnabled")
    patient: PatientSummary
    medecin: PractitionerSummary

    class Config:
        from_attributes = True


class StatusMessage(BaseModel):
    status: int
    message: str
