from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from ..core.database import Base

class Doctor(Base):
    __tablename__ = "doctors"

    id = Column(Integer, primary_key=True, index=True)

    # Personal information
    first_name = Column(String(150), nullable=False)
    last_name = Column(String(150), nullable=False)

    # Professional information
    specialization = Column(String(150), nullable=False)
    department = Column(String(150), nullable=False)

    # Contact information
    phone = Column(String(20), nullable=False)
    email = Column(String(255), nullable=False, unique=True)

    # Timestamps
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    # Relationships
    appointments = relationship("Appointment", back_populates="doctor")
    patients = relationship("Patient", back_populates="primary_doctor")

    def __repr__(self):
        return f"<Doctor(id={self.id}, name='{self.first_name} {self.last_name}', specialization='{self.specialization}')>"
