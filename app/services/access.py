"""
Caller contexts and the appointment visibility rule attached to each.

A caller is resolved once, at the API boundary, from the verified token.
The subject id means different things per role: a patient id for patients,
a doctor id for staff and admins. Keeping that decision inside the caller
types means nothing downstream has to reinterpret a bare integer.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import ClassVar, Dict, List, Type, Union

from ..core.security import HospitalRole
from ..models.appointment import Appointment
from ..repositories.appointments import AppointmentStore


@dataclass(frozen=True)
class _Caller(ABC):
    id: int

    role: ClassVar[HospitalRole]

    @abstractmethod
    def visible_appointments(self, store: AppointmentStore) -> List[Appointment]:
        """Appointments this caller may enumerate."""


@dataclass(frozen=True)
class PatientCaller(_Caller):
    role = HospitalRole.PATIENT

    def visible_appointments(self, store: AppointmentStore) -> List[Appointment]:
        return store.find_by_patient_id(self.id)


@dataclass(frozen=True)
class StaffCaller(_Caller):
    role = HospitalRole.STAFF

    def visible_appointments(self, store: AppointmentStore) -> List[Appointment]:
        return store.find_by_doctor_id(self.id)


@dataclass(frozen=True)
class AdminCaller(_Caller):
    role = HospitalRole.ADMIN

    def visible_appointments(self, store: AppointmentStore) -> List[Appointment]:
        return store.find_by_doctor_id(self.id)


CallerContext = Union[PatientCaller, StaffCaller, AdminCaller]

_CALLER_TYPES: Dict[HospitalRole, Type[_Caller]] = {
    HospitalRole.PATIENT: PatientCaller,
    HospitalRole.STAFF: StaffCaller,
    HospitalRole.ADMIN: AdminCaller,
}

if set(_CALLER_TYPES) != set(HospitalRole):
    raise RuntimeError("Every HospitalRole needs a caller type")


def caller_from_token(role: HospitalRole, subject_id: int) -> CallerContext:
    """Build the caller context for a verified (role, subject id) pair."""
    return _CALLER_TYPES[HospitalRole(role)](id=subject_id)


def scope_appointments(caller: CallerContext, store: AppointmentStore) -> List[Appointment]:
    return caller.visible_appointments(store)


__all__ = [
    "AdminCaller",
    "CallerContext",
    "PatientCaller",
    "StaffCaller",
    "caller_from_token",
    "scope_appointments",
]
