class SchedulingError(Exception):
    """Base error for requests the scheduling core rejects."""

    code = "SCHEDULING_ERROR"

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class PatientNotFound(SchedulingError):
    code = "PATIENT_NOT_FOUND"

    def __init__(self, patient_id: int):
        self.patient_id = patient_id
        super().__init__(f"Patient with id of {patient_id} not found")


class DoctorNotFound(SchedulingError):
    code = "DOCTOR_NOT_FOUND"

    def __init__(self, doctor_id: int):
        self.doctor_id = doctor_id
        super().__init__(f"Doctor with the id {doctor_id} not found")


class AppointmentNotFound(SchedulingError):
    code = "APPOINTMENT_NOT_FOUND"

    def __init__(self, appointment_id: int):
        self.appointment_id = appointment_id
        super().__init__(f"Appointment with the id of {appointment_id} not found")


class InvalidDate(SchedulingError):
    """Raised when an appointment is requested for a day that has passed."""

    code = "INVALID_DATE"


class SlotUnavailable(SchedulingError):
    """Raised when a doctor already has a live appointment at that date and time."""

    code = "SLOT_UNAVAILABLE"


class InvalidTransition(SchedulingError):
    """Raised when a completed or cancelled appointment is moved to another status."""

    code = "INVALID_TRANSITION"


__all__ = [
    "SchedulingError",
    "PatientNotFound",
    "DoctorNotFound",
    "AppointmentNotFound",
    "InvalidDate",
    "SlotUnavailable",
    "InvalidTransition",
]
