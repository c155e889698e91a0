"""
Clinic Appointment Scheduling

A FastAPI service for booking appointments between patients and doctors,
with slot conflict detection, role-scoped listings and an appointment
status lifecycle.
"""

__version__ = "1.0.0"
