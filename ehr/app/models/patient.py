import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, Float, String, Text, DateTime

from ehr.app.core.database import Base

DEPARTMENTS = ("Emergency", "ICU", "Cardiology", "Pediatrics", "Neurology", "General Ward")
STATUSES = ("Admitted", "Discharged", "Critical", "Outpatient", "Recovery")

DEFAULT_DEPARTMENT = "General Ward"
DEFAULT_STATUS = "Admitted"


def new_patient_id():
    return uuid.uuid4().hex


def utcnow():
    return datetime.now(timezone.utc)


class Patient(Base):
    __tablename__ = "patients"

    id = Column(String(32), primary_key=True, default=new_patient_id)
    full_name = Column(String(200), nullable=False, index=True)
    age = Column(Float, nullable=False)  # years; infants are fractional
    condition = Column(Text, nullable=False)
    department = Column(String(32), nullable=False, default=DEFAULT_DEPARTMENT, index=True)
    status = Column(String(32), nullable=False, default=DEFAULT_STATUS)

    # vitals
    heart_rate = Column(Float, nullable=False, default=0)  # BPM
    blood_pressure = Column(String(20), nullable=False, default="N/A")
    temperature = Column(Float, nullable=False, default=36.5)  # Celsius

    room_number = Column(String(20), nullable=False, default="TBA")
    notes = Column(Text)
    admission_date = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)

    @property
    def vitals(self):
        return {
            "heartRate": self.heart_rate,
            "bloodPressure": self.blood_pressure,
            "temperature": self.temperature,
        }

    def __repr__(self):
        return f"<Patient {self.id} {self.full_name!r} {self.department}/{self.status}>"
