from sqlalchemy import Column, String, ForeignKey, Text

from ..core.database import Base, UTCDateTime, new_id

STATUS_SCHEDULED = "Scheduled"
STATUS_CANCELLED = "Cancelled"

class Appointment(Base):
    __tablename__ = "appointments"

    id = Column(String(32), primary_key=True, default=new_id)

    patient_id = Column(String(32), ForeignKey("users.id"), nullable=False, index=True)
    # Snapshot of the patient's name at booking time; not kept in sync with
    # later profile changes.
    patient_name = Column(String(255), nullable=False)

    start_time = Column(UTCDateTime, nullable=False, index=True)
    end_time = Column(UTCDateTime, nullable=False)
    service = Column(Text, nullable=False, default="")
    # Open-ended tag, not a closed enum.
    status = Column(String(50), nullable=False, default=STATUS_SCHEDULED, index=True)

    def __repr__(self):
        return f"<Appointment(id={self.id}, patient_id={self.patient_id}, start='{self.start_time}', status='{self.status}')>"
