from abc import ABC, abstractmethod
from datetime import date, time
from typing import List, Optional

from sqlalchemy.orm import Session, joinedload

from ..models.appointment import Appointment, AppointmentStatus
# Imported so the string relationships on Appointment resolve
from ..models.doctor import Doctor  # noqa: F401
from ..models.patient import Patient  # noqa: F401


class AppointmentStore(ABC):
    """Durable collection of appointment records."""

    @abstractmethod
    def find_by_id(self, appointment_id: int) -> Optional[Appointment]:
        """Return the appointment with its patient and doctor, or None."""

    @abstractmethod
    def find_all(self) -> List[Appointment]:
        ...

    @abstractmethod
    def find_by_patient_id(self, patient_id: int) -> List[Appointment]:
        ...

    @abstractmethod
    def find_by_doctor_id(self, doctor_id: int) -> List[Appointment]:
        ...

    @abstractmethod
    def find_by_status(self, status: AppointmentStatus) -> List[Appointment]:
        """Appointments in the given status, earliest first."""

    @abstractmethod
    def find_between(self, start: date, end: date) -> List[Appointment]:
        """Appointments dated within [start, end], earliest first."""

    @abstractmethod
    def exists_for_doctor_date_time(self, doctor_id: int, on: date, at: time) -> bool:
        """True if a non-cancelled appointment holds the doctor's slot."""

    @abstractmethod
    def save(self, appointment: Appointment) -> Appointment:
        """Insert or update the appointment and make the change durable."""

    @abstractmethod
    def delete(self, appointment: Appointment) -> None:
        ...


class SqlAppointmentStore(AppointmentStore):
    def __init__(self, db: Session):
        self.db = db

    def _query(self):
        return self.db.query(Appointment).options(
            joinedload(Appointment.patient),
            joinedload(Appointment.doctor),
        )

    def find_by_id(self, appointment_id: int) -> Optional[Appointment]:
        return self._query().filter(Appointment.id == appointment_id).first()

    def find_all(self) -> List[Appointment]:
        return self._query().order_by(Appointment.id).all()

    def find_by_patient_id(self, patient_id: int) -> List[Appointment]:
        return self._query().filter(
            Appointment.patient_id == patient_id
        ).order_by(Appointment.id).all()

    def find_by_doctor_id(self, doctor_id: int) -> List[Appointment]:
        return self._query().filter(
            Appointment.doctor_id == doctor_id
        ).order_by(Appointment.id).all()

    def find_by_status(self, status: AppointmentStatus) -> List[Appointment]:
        return self._query().filter(
            Appointment.status == status
        ).order_by(Appointment.date, Appointment.time, Appointment.id).all()

    def find_between(self, start: date, end: date) -> List[Appointment]:
        return self._query().filter(
            Appointment.date >= start,
            Appointment.date <= end
        ).order_by(Appointment.date, Appointment.time, Appointment.id).all()

    def exists_for_doctor_date_time(self, doctor_id: int, on: date, at: time) -> bool:
        return self.db.query(Appointment.id).filter(
            Appointment.doctor_id == doctor_id,
            Appointment.date == on,
            Appointment.time == at,
            Appointment.status != AppointmentStatus.CANCELLED
        ).first() is not None

    def save(self, appointment: Appointment) -> Appointment:
        try:
            self.db.add(appointment)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(appointment)
        return appointment

    def delete(self, appointment: Appointment) -> None:
        try:
            self.db.delete(appointment)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise


__all__ = ["AppointmentStore", "SqlAppointmentStore"]
