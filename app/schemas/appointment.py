import datetime as dt
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..models.appointment import AppointmentStatus
from ..models.patient import BiologicalSex

class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

# Directory projections
class PatientInformation(CamelModel):
    id: int
    first_name: str
    last_name: str
    phone_number: Optional[str] = None
    address: Optional[str] = None
    date_of_birth: Optional[dt.date] = None
    biological_sex: Optional[BiologicalSex] = None
    allergies: List[str] = Field(default_factory=list)

class DoctorInformation(CamelModel):
    id: int
    first_name: str
    last_name: str
    specialization: str
    department: str
    phone: str
    email: str

# Appointment requests
class AppointmentCreate(CamelModel):
    patient_id: int
    doctor_id: int
    date: dt.date
    time: dt.time

class AppointmentUpdate(CamelModel):
    doctor_id: int
    status: AppointmentStatus

# Appointment responses
class AppointmentInformation(CamelModel):
    id: int
    patient: PatientInformation
    doctor: DoctorInformation
    date: dt.date
    time: dt.time
    status: AppointmentStatus

class SlotAvailability(CamelModel):
    doctor_id: int
    date: dt.date
    time: dt.time
    available: bool
