from sqlalchemy import Column, Integer, String, ForeignKey, Date, DateTime, JSON, Enum as SQLEnum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import enum

from ..core.database import Base

class BiologicalSex(str, enum.Enum):
    MALE = "MALE"
    FEMALE = "FEMALE"
    INTERSEX = "INTERSEX"
    OTHER = "OTHER"

class Patient(Base):
    __tablename__ = "patients"

    id = Column(Integer, primary_key=True, index=True)

    # Personal information
    first_name = Column(String(150), nullable=False)
    last_name = Column(String(150), nullable=False)
    date_of_birth = Column(Date, nullable=True)
    biological_sex = Column(SQLEnum(BiologicalSex), nullable=True)

    # Contact information
    phone_number = Column(String(20), nullable=True)
    address = Column(String(255), nullable=True)

    # Medical information
    allergies = Column(JSON, nullable=False, default=list)
    primary_doctor_id = Column(Integer, ForeignKey("doctors.id"), nullable=True)

    # Timestamps
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    # Relationships
    primary_doctor = relationship("Doctor", back_populates="patients")
    appointments = relationship("Appointment", back_populates="patient")

    def __repr__(self):
        return f"<Patient(id={self.id}, name='{self.first_name} {self.last_name}')>"
