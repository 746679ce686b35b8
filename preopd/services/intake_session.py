# preopd/services/intake_session.py
from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

import structlog
from sqlalchemy import select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from preopd.config import Settings
from preopd.db import Base
from preopd.errors import (
    InvalidVitalsError,
    PatientNotFoundError,
    SessionNotFoundError,
)
from preopd.intake.actions import ResetAll, describe
from preopd.intake.extraction import UploadedFile, extract_text_from_file
from preopd.intake.records import RecordFile
from preopd.intake.schema import PatientSummary, PreOPDIntakeData, VitalsSnapshot
from preopd.intake.state import IntakeSession, SubmitStatus
from preopd.intake.summarizer import PromptKind, SummarizationService, SummaryContext
from preopd.intake.vitals import VitalsInput, compute_bmi, compute_map, validate_vitals
from preopd.models import Patient, PreOPDIntakeRecord, VitalsRecord


logger = structlog.get_logger(__name__)

NO_PATIENT_SUMMARY_MESSAGE = "Please select a patient first."
NO_PATIENT_SUBMIT_MESSAGE = "No patient selected!"
AI_ERROR_MESSAGE = (
    "Error connecting to AI service. Please check your connection and try again."
)
SAVE_FAILED_MESSAGE = "Failed to save intake data. Please try again."
INTAKE_STATUS_COMPLETED = "completed"


@contextmanager
def db_session(factory: sessionmaker):
    db = factory()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def init_db(engine: Engine) -> None:
    """
    Create all tables. Call this once at startup.
    """
    Base.metadata.create_all(bind=engine)


def _patient_summary(patient: Patient) -> PatientSummary:
    return PatientSummary(
        id=patient.id,
        uhid=patient.uhid,
        full_name=patient.full_name,
        age=patient.age,
        gender=patient.gender,
        chronic_conditions=list(patient.chronic_conditions or []),
    )


def _vitals_snapshot(record: VitalsRecord) -> VitalsSnapshot:
    return VitalsSnapshot(
        weight=record.weight,
        height=record.height,
        bmi=record.bmi,
        pulse=record.pulse,
        bp_systolic=record.bp_systolic,
        bp_diastolic=record.bp_diastolic,
        map=record.map,
        temperature=record.temperature,
        spo2=record.spo2,
        respiratory_rate=record.respiratory_rate,
        pain_score=record.pain_score,
        gcs_e=record.gcs_e,
        gcs_v=record.gcs_v,
        gcs_m=record.gcs_m,
        recorded_at=record.recorded_at.isoformat() if record.recorded_at else None,
    )


class IntakeSessionService:
    """
    Service that coordinates:
      - patients and vitals in the database
      - one in-memory IntakeSession per open encounter
      - AI summaries through the SummarizationService
      - the single write of a submitted intake
    """

    def __init__(
        self,
        session_factory: sessionmaker,
        summarizer: SummarizationService,
        settings: Settings,
    ):
        self.session_factory = session_factory
        self.summarizer = summarizer
        self.settings = settings
        self._sessions: Dict[str, IntakeSession] = {}
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Patients & vitals
    # ------------------------------------------------------------------

    def register_patient(
        self,
        uhid: str,
        full_name: str,
        age: Optional[int] = None,
        gender: Optional[str] = None,
        chronic_conditions: Optional[List[str]] = None,
    ) -> PatientSummary:
        with db_session(self.session_factory) as db:
            patient = Patient(
                uhid=uhid,
                full_name=full_name,
                age=age,
                gender=gender,
                chronic_conditions=list(chronic_conditions or []),
            )
            db.add(patient)
            db.flush()  # to get patient.id
            summary = _patient_summary(patient)

        logger.info("patient_registered", patient_id=summary.id, uhid=uhid)
        return summary

    def _load_patient(self, db: Session, patient_id: str) -> Patient:
        patient = db.get(Patient, patient_id)
        if patient is None:
            raise PatientNotFoundError(patient_id)
        return patient

    def get_patient(self, patient_id: str) -> PatientSummary:
        with db_session(self.session_factory) as db:
            return _patient_summary(self._load_patient(db, patient_id))

    def record_vitals(self, patient_id: str, vitals: VitalsInput) -> VitalsSnapshot:
        errors = validate_vitals(vitals)
        if errors:
            raise InvalidVitalsError(errors)

        with db_session(self.session_factory) as db:
            patient = self._load_patient(db, patient_id)
            record = VitalsRecord(
                patient_id=patient.id,
                patient_uhid=patient.uhid,
                weight=vitals.weight,
                height=vitals.height,
                bmi=compute_bmi(vitals.weight, vitals.height),
                pulse=vitals.pulse,
                bp_systolic=vitals.bp_systolic,
                bp_diastolic=vitals.bp_diastolic,
                map=compute_map(vitals.bp_systolic, vitals.bp_diastolic),
                temperature=vitals.temperature,
                spo2=vitals.spo2,
                respiratory_rate=vitals.respiratory_rate,
                pain_score=vitals.pain_score,
                gcs_e=vitals.gcs_e,
                gcs_v=vitals.gcs_v,
                gcs_m=vitals.gcs_m,
                risk_flags=vitals.risk_flags.to_document(),
                recorded_by=self.settings.recorded_by,
            )
            db.add(record)
            db.flush()
            snapshot = _vitals_snapshot(record)

        logger.info("vitals_recorded", patient_id=patient_id)
        return snapshot

    def latest_vitals(self, patient_id: str) -> Optional[VitalsSnapshot]:
        stmt = (
            select(VitalsRecord)
            .where(VitalsRecord.patient_id == patient_id)
            .order_by(VitalsRecord.recorded_at.desc(), VitalsRecord.id.desc())
            .limit(1)
        )
        with db_session(self.session_factory) as db:
            record = db.scalars(stmt).first()
            return _vitals_snapshot(record) if record is not None else None

    def list_intakes(self, patient_id: str) -> List[Dict[str, Any]]:
        stmt = (
            select(PreOPDIntakeRecord)
            .where(PreOPDIntakeRecord.patient_id == patient_id)
            .order_by(PreOPDIntakeRecord.recorded_at.desc())
        )
        with db_session(self.session_factory) as db:
            return [r.to_document() for r in db.scalars(stmt)]

    # ------------------------------------------------------------------
    # Intake sessions
    # ------------------------------------------------------------------

    def start_session(self, patient_id: Optional[str] = None) -> IntakeSession:
        session = IntakeSession()
        if patient_id is not None:
            session.patient = self.get_patient(patient_id)

        with self._lock:
            self._sessions[session.id] = session

        logger.info("intake_session_started", session_id=session.id, patient_id=patient_id)
        return session

    def get_session(self, session_id: str) -> IntakeSession:
        with self._lock:
            session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def end_session(self, session_id: str) -> None:
        with self._lock:
            if self._sessions.pop(session_id, None) is None:
                raise SessionNotFoundError(session_id)

    def select_patient(self, session_id: str, patient_id: str) -> IntakeSession:
        session = self.get_session(session_id)
        session.patient = self.get_patient(patient_id)
        session.touch()
        return session

    def dispatch(self, session_id: str, action: Any) -> PreOPDIntakeData:
        session = self.get_session(session_id)
        if isinstance(action, ResetAll):
            # A reset also drops records, summaries and submit status
            session.clear()
            data = session.data
        else:
            data = session.apply(action)
        logger.debug(
            "intake_action_applied",
            session_id=session_id,
            version=session.version,
            **describe(action),
        )
        return data

    def add_record(self, session_id: str, category: str, file: UploadedFile) -> RecordFile:
        """
        Extract text from an uploaded file and keep it under `category`.
        Extraction errors propagate to the caller.
        """
        session = self.get_session(session_id)
        # Validate the category before doing any parsing work
        session.records.check_category(category)

        text = extract_text_from_file(file)
        record = session.records.add(
            category,
            name=file.name,
            content_type=file.content_type,
            size=file.size,
            text=text,
        )
        session.touch()
        logger.info(
            "record_extracted",
            session_id=session_id,
            category=category,
            file_id=record.id,
            chars=len(text),
        )
        return record

    def remove_record(self, session_id: str, category: str, file_id: str) -> bool:
        session = self.get_session(session_id)
        removed = session.records.remove(category, file_id)
        if removed:
            session.touch()
        return removed

    def clear_form(self, session_id: str) -> IntakeSession:
        session = self.get_session(session_id)
        session.clear()
        return session

    # ------------------------------------------------------------------
    # AI summaries
    # ------------------------------------------------------------------

    def generate_clinical_summary(self, session_id: str) -> Optional[str]:
        return self._generate_summary(session_id, PromptKind.CLINICAL)

    def generate_history_summary(self, session_id: str) -> Optional[str]:
        return self._generate_summary(session_id, PromptKind.HISTORY)

    def _generate_summary(self, session_id: str, kind: PromptKind) -> Optional[str]:
        """
        Request one summary and store the text on the session.

        Returns the stored text, or None when the session changed while the
        request was in flight and the result was dropped.
        """
        session = self.get_session(session_id)
        patient = session.patient
        if patient is None:
            session.set_summary(kind, NO_PATIENT_SUMMARY_MESSAGE, expanded=False)
            return NO_PATIENT_SUMMARY_MESSAGE

        started_version = session.version
        log = logger.bind(session_id=session_id, kind=kind.value, version=started_version)

        try:
            vitals = self.latest_vitals(patient.id) if kind is PromptKind.CLINICAL else None
            context = SummaryContext(
                patient=patient,
                data=session.data,
                vitals=vitals,
                extracted_records=session.records.as_map(),
            )
            text = self.summarizer.summarize(kind, context)
            expanded = True
        except Exception:
            log.exception("summary_request_failed")
            text = AI_ERROR_MESSAGE
            expanded = False

        if session.version != started_version:
            log.warning("stale_summary_discarded", current_version=session.version)
            return None

        session.set_summary(kind, text, expanded=expanded)
        log.info("summary_stored", chars=len(text))
        return text

    # ------------------------------------------------------------------
    # Submit
    # ------------------------------------------------------------------

    def submit(self, session_id: str) -> Optional[str]:
        """
        Write the whole intake as one document.

        Returns the new document id, or None when nothing was written; the
        reason is left in session.status.error_message.
        """
        session = self.get_session(session_id)
        patient = session.patient
        if patient is None:
            session.status = SubmitStatus(error_message=NO_PATIENT_SUBMIT_MESSAGE)
            return None

        session.status = SubmitStatus(is_saving=True)
        document = session.data.to_document()

        try:
            with db_session(self.session_factory) as db:
                record = PreOPDIntakeRecord(
                    patient_id=patient.id,
                    patient_uhid=patient.uhid,
                    patient_name=patient.full_name,
                    complaints=document["complaints"],
                    chronic_conditions=document["chronicConditions"],
                    allergies=document["allergies"],
                    past_history=document["pastHistory"],
                    extracted_records=session.records.as_map(),
                    ai_clinical_summary=session.ai_clinical_summary,
                    ai_history_summary=session.ai_history_summary,
                    recorded_by=self.settings.recorded_by,
                    status=INTAKE_STATUS_COMPLETED,
                )
                db.add(record)
                db.flush()
                record_id = record.id
        except Exception:
            logger.exception("intake_save_failed", session_id=session_id, patient_id=patient.id)
            session.status = SubmitStatus(error_message=SAVE_FAILED_MESSAGE)
            return None

        session.status = SubmitStatus(show_success=True)
        logger.info("intake_saved", session_id=session_id, intake_id=record_id)
        return record_id
