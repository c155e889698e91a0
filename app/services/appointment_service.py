from datetime import date, time
from typing import Callable, List
import logging

from ..core.exceptions import (
    AppointmentNotFound, DoctorNotFound, InvalidDate,
    InvalidTransition, PatientNotFound, SlotUnavailable
)
from ..models.appointment import Appointment, AppointmentStatus
from ..repositories.appointments import AppointmentStore
from ..repositories.directory import DirectoryStore
from .access import CallerContext, scope_appointments
from .slot_lock import SlotLock

logger = logging.getLogger(__name__)

class AppointmentService:
    """Creates appointments and moves them through BOOKED -> COMPLETED / CANCELLED.

    Every call reads the record fresh from the store, validates fully, and
    only then mutates and saves, so a rejected request leaves nothing behind.
    """

    def __init__(
        self,
        directory: DirectoryStore,
        appointments: AppointmentStore,
        slot_lock: SlotLock,
        today: Callable[[], date] = date.today,
    ):
        self.directory = directory
        self.appointments = appointments
        self.slot_lock = slot_lock
        self.today = today

    def create(self, patient_id: int, doctor_id: int, on: date, at: time) -> Appointment:
        """Book a new appointment in the BOOKED state."""
        patient = self.directory.find_patient_by_id(patient_id)
        if not patient:
            logger.warning(f"Rejected booking: patient {patient_id} not found")
            raise PatientNotFound(patient_id)

        doctor = self.directory.find_doctor_by_id(doctor_id)
        if not doctor:
            logger.warning(f"Rejected booking: doctor {doctor_id} not found")
            raise DoctorNotFound(doctor_id)

        if on < self.today():
            logger.warning(f"Rejected booking: {on} is in the past")
            raise InvalidDate(f"Appointment date {on.isoformat()} must be today or in the future")

        with self.slot_lock.hold(doctor_id, on, at):
            if self.appointments.exists_for_doctor_date_time(doctor_id, on, at):
                logger.warning(
                    f"Rejected booking: doctor {doctor_id} already booked at {on} {at}"
                )
                raise SlotUnavailable(
                    f"Doctor {doctor_id} already has an appointment on "
                    f"{on.isoformat()} at {at.isoformat()}"
                )

            appointment = self.appointments.save(Appointment(
                patient=patient,
                doctor=doctor,
                date=on,
                time=at,
                status=AppointmentStatus.BOOKED
            ))

        logger.info(
            f"Booked appointment {appointment.id}: patient {patient_id} "
            f"with doctor {doctor_id} on {on} at {at}"
        )
        return appointment

    def get_by_id(self, appointment_id: int) -> Appointment:
        appointment = self.appointments.find_by_id(appointment_id)
        if not appointment:
            raise AppointmentNotFound(appointment_id)
        return appointment

    def list_all(self) -> List[Appointment]:
        return self.appointments.find_all()

    def list_by_status(self, status: AppointmentStatus) -> List[Appointment]:
        return self.appointments.find_by_status(status)

    def list_between(self, start: date, end: date) -> List[Appointment]:
        return self.appointments.find_between(start, end)

    def list_by_role(self, caller: CallerContext) -> List[Appointment]:
        """Appointments visible to the caller."""
        return scope_appointments(caller, self.appointments)

    def is_slot_available(self, doctor_id: int, on: date, at: time) -> bool:
        if not self.directory.doctor_exists(doctor_id):
            raise DoctorNotFound(doctor_id)
        return not self.appointments.exists_for_doctor_date_time(doctor_id, on, at)

    def update(self, appointment_id: int, doctor_id: int, status: AppointmentStatus) -> Appointment:
        """Reassign the doctor and set the status.

        The slot conflict check is not repeated here, so moving an
        appointment to a doctor who is already booked at that date and
        time succeeds and leaves both appointments live.
        """
        appointment = self.get_by_id(appointment_id)

        doctor = self.directory.find_doctor_by_id(doctor_id)
        if not doctor:
            logger.warning(f"Rejected update of appointment {appointment_id}: doctor {doctor_id} not found")
            raise DoctorNotFound(doctor_id)

        current = appointment.status
        if current.is_terminal and status != current:
            logger.warning(
                f"Rejected update of appointment {appointment_id}: "
                f"{current.value} -> {status.value}"
            )
            raise InvalidTransition(
                f"Appointment {appointment_id} is {current.value} and cannot become {status.value}"
            )

        appointment.doctor = doctor
        appointment.status = status
        appointment = self.appointments.save(appointment)

        logger.info(
            f"Updated appointment {appointment_id}: doctor {doctor_id}, status {status.value}"
        )
        return appointment

    def cancel(self, appointment_id: int) -> Appointment:
        """Cancel the appointment; cancelling twice is a no-op.

        A completed appointment cannot be cancelled and raises
        InvalidTransition.
        """
        appointment = self.get_by_id(appointment_id)

        if appointment.status == AppointmentStatus.CANCELLED:
            logger.info(f"Appointment {appointment_id} already cancelled")
            return appointment

        if appointment.status == AppointmentStatus.COMPLETED:
            logger.warning(f"Rejected cancel of completed appointment {appointment_id}")
            raise InvalidTransition(
                f"Appointment {appointment_id} is completed and cannot be cancelled"
            )

        appointment.status = AppointmentStatus.CANCELLED
        appointment = self.appointments.save(appointment)

        logger.info(f"Cancelled appointment {appointment_id}")
        return appointment
