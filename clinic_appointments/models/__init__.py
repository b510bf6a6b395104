from .user import User, RefreshToken
from .patient import Patient
from .appointment import Appointment

__all__ = ["User", "RefreshToken", "Patient", "Appointment"]
