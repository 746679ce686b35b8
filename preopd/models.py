# preopd/models.py
from datetime import datetime, timezone
from typing import Any, Dict
import uuid

from sqlalchemy import (
    String,
    DateTime,
    ForeignKey,
    Integer,
    Text,
    CheckConstraint,
)
from sqlalchemy.orm import relationship, Mapped, mapped_column

from preopd.db import Base, JSONType


def generate_uuid() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Patient(Base):
    __tablename__ = "patients"

    id: Mapped[str] = mapped_column(
        String, primary_key=True, default=generate_uuid
    )
    uhid: Mapped[str] = mapped_column(String, nullable=False, index=True)
    full_name: Mapped[str] = mapped_column(String, nullable=False)
    age: Mapped[int | None] = mapped_column(Integer, nullable=True)
    gender: Mapped[str | None] = mapped_column(String, nullable=True)
    chronic_conditions: Mapped[list] = mapped_column(JSONType, default=list)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )

    vitals: Mapped[list["VitalsRecord"]] = relationship(
        "VitalsRecord", back_populates="patient", cascade="all, delete-orphan"
    )
    intakes: Mapped[list["PreOPDIntakeRecord"]] = relationship(
        "PreOPDIntakeRecord", back_populates="patient", cascade="all, delete-orphan"
    )


class VitalsRecord(Base):
    __tablename__ = "vitals"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    patient_id: Mapped[str] = mapped_column(
        String, ForeignKey("patients.id", ondelete="CASCADE"), nullable=False, index=True
    )
    patient_uhid: Mapped[str] = mapped_column(String, default="")

    # Stored as entered; empty string means not recorded
    weight: Mapped[str] = mapped_column(String, default="")
    height: Mapped[str] = mapped_column(String, default="")
    bmi: Mapped[str] = mapped_column(String, default="")
    pulse: Mapped[str] = mapped_column(String, default="")
    bp_systolic: Mapped[str] = mapped_column(String, default="")
    bp_diastolic: Mapped[str] = mapped_column(String, default="")
    map: Mapped[str] = mapped_column(String, default="")
    temperature: Mapped[str] = mapped_column(String, default="")
    spo2: Mapped[str] = mapped_column(String, default="")
    respiratory_rate: Mapped[str] = mapped_column(String, default="")
    pain_score: Mapped[str] = mapped_column(String, default="")
    gcs_e: Mapped[str] = mapped_column(String, default="")
    gcs_v: Mapped[str] = mapped_column(String, default="")
    gcs_m: Mapped[str] = mapped_column(String, default="")
    risk_flags: Mapped[dict] = mapped_column(JSONType, default=dict)

    recorded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, index=True
    )
    recorded_by: Mapped[str] = mapped_column(String, default="")

    patient: Mapped[Patient] = relationship("Patient", back_populates="vitals")


class PreOPDIntakeRecord(Base):
    """
    One submitted Pre-OPD intake. Written once per submit, never updated.
    """
    __tablename__ = "pre_opd_intake"

    id: Mapped[str] = mapped_column(
        String, primary_key=True, default=generate_uuid
    )
    patient_id: Mapped[str] = mapped_column(
        String, ForeignKey("patients.id", ondelete="CASCADE"), nullable=False, index=True
    )
    patient_uhid: Mapped[str] = mapped_column(String, default="")
    patient_name: Mapped[str] = mapped_column(String, default="")

    complaints: Mapped[list] = mapped_column(JSONType, nullable=False)
    chronic_conditions: Mapped[list] = mapped_column(JSONType, nullable=False)
    allergies: Mapped[dict] = mapped_column(JSONType, nullable=False)
    past_history: Mapped[dict] = mapped_column(JSONType, nullable=False)
    extracted_records: Mapped[dict] = mapped_column(JSONType, nullable=False)

    ai_clinical_summary: Mapped[str] = mapped_column(Text, default="")
    ai_history_summary: Mapped[str] = mapped_column(Text, default="")

    recorded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )
    recorded_by: Mapped[str] = mapped_column(String, default="")
    status: Mapped[str] = mapped_column(String, default="completed")

    __table_args__ = (
        CheckConstraint(
            "status IN ('completed')",
            name="ck_pre_opd_intake_status_valid",
        ),
    )

    patient: Mapped[Patient] = relationship("Patient", back_populates="intakes")

    def to_document(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "patientId": self.patient_id,
            "patientUhid": self.patient_uhid,
            "patientName": self.patient_name,
            "complaints": self.complaints,
            "chronicConditions": self.chronic_conditions,
            "allergies": self.allergies,
            "pastHistory": self.past_history,
            "extractedRecords": self.extracted_records,
            "aiClinicalSummary": self.ai_clinical_summary,
            "aiHistorySummary": self.ai_history_summary,
            "recordedAt": self.recorded_at.isoformat() if self.recorded_at else None,
            "recordedBy": self.recorded_by,
            "status": self.status,
        }
