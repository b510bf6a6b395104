"""
Domain errors raised by the services.

Every error carries its HTTP status; ``main`` renders them, like any other
``HTTPException``, as a ``{"status": ..., "message": ...}`` body whose
``status`` always matches the response code.
"""
from fastapi import HTTPException, status


class ServiceError(HTTPException):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Something went wrong"

    def __init__(self, detail: str = None):
        super().__init__(
            status_code=self.status_code,
            detail=detail or self.message,
        )


class MissingFieldsError(ServiceError):
    message = "All required fields must be filled in"


class ValidationFailedError(ServiceError):
    message = "Invalid data"


class DeserializationError(ServiceError):
    message = "Malformed request body"


class NotFoundError(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Resource not found"


class AppointmentNotFoundError(NotFoundError):
    message = "This appointment does not exist"


class PatientNotFoundError(NotFoundError):
    message = "This patient does not exist"


class SlotConflictError(ServiceError):
    status_code = status.HTTP_409_CONFLICT
    message = "Appointment slot already booked"
