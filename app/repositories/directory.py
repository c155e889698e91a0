from abc import ABC, abstractmethod
from typing import List, Optional

from sqlalchemy.orm import Session

from ..models.doctor import Doctor
from ..models.patient import Patient


class DirectoryStore(ABC):
    """Lookup of the patient and doctor records appointments refer to."""

    @abstractmethod
    def find_patient_by_id(self, patient_id: int) -> Optional[Patient]:
        """Return the patient, or None if no such record exists."""

    @abstractmethod
    def find_doctor_by_id(self, doctor_id: int) -> Optional[Doctor]:
        """Return the doctor, or None if no such record exists."""

    @abstractmethod
    def patient_exists(self, patient_id: int) -> bool:
        ...

    @abstractmethod
    def doctor_exists(self, doctor_id: int) -> bool:
        ...

    @abstractmethod
    def list_doctors(self) -> List[Doctor]:
        ...

    @abstractmethod
    def save_patient(self, patient: Patient) -> Patient:
        ...

    @abstractmethod
    def save_doctor(self, doctor: Doctor) -> Doctor:
        ...


class SqlDirectoryStore(DirectoryStore):
    def __init__(self, db: Session):
        self.db = db

    def find_patient_by_id(self, patient_id: int) -> Optional[Patient]:
        return self.db.get(Patient, patient_id)

    def find_doctor_by_id(self, doctor_id: int) -> Optional[Doctor]:
        return self.db.get(Doctor, doctor_id)

    def patient_exists(self, patient_id: int) -> bool:
        return self.db.query(Patient.id).filter(Patient.id == patient_id).first() is not None

    def doctor_exists(self, doctor_id: int) -> bool:
        return self.db.query(Doctor.id).filter(Doctor.id == doctor_id).first() is not None

    def list_doctors(self) -> List[Doctor]:
        return self.db.query(Doctor).order_by(Doctor.id).all()

    def save_patient(self, patient: Patient) -> Patient:
        self.db.add(patient)
        self.db.commit()
        self.db.refresh(patient)
        return patient

    def save_doctor(self, doctor: Doctor) -> Doctor:
        self.db.add(doctor)
        self.db.commit()
        self.db.refresh(doctor)
        return doctor


__all__ = ["DirectoryStore", "SqlDirectoryStore"]
