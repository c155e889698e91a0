from fastapi import APIRouter, Depends
from typing import List

from ...api.deps import get_caller, get_directory_store
from ...core.exceptions import DoctorNotFound, PatientNotFound
from ...core.security import AuthorizationError
from ...repositories.directory import DirectoryStore
from ...schemas.appointment import DoctorInformation, PatientInformation
from ...services.access import CallerContext, PatientCaller

router = APIRouter(tags=["Directory"])

@router.get("/doctor/", response_model=List[DoctorInformation])
def list_doctors(
    directory: DirectoryStore = Depends(get_directory_store),
    _: CallerContext = Depends(get_caller)
):
    """List doctors patients can book with."""
    return directory.list_doctors()

@router.get("/doctor/{doctor_id}", response_model=DoctorInformation)
def get_doctor(
    doctor_id: int,
    directory: DirectoryStore = Depends(get_directory_store),
    _: CallerContext = Depends(get_caller)
):
    doctor = directory.find_doctor_by_id(doctor_id)
    if not doctor:
        raise DoctorNotFound(doctor_id)
    return doctor

@router.get("/patient/{patient_id}", response_model=PatientInformation)
def get_patient(
    patient_id: int,
    directory: DirectoryStore = Depends(get_directory_store),
    caller: CallerContext = Depends(get_caller)
):
    """Patient record; patients may only read their own."""
    if isinstance(caller, PatientCaller) and caller.id != patient_id:
        raise AuthorizationError("Patients may only view their own record")

    patient = directory.find_patient_by_id(patient_id)
    if not patient:
        raise PatientNotFound(patient_id)
    return patient
