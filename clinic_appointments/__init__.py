"""
Clinic Appointment Service

A FastAPI-based REST API for booking, rescheduling and cancelling medical
appointments, with JWT authentication and role-based access control.
"""

__version__ = "1.0.0"
