# preopd/api/routes.py
from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile
from pydantic import ValidationError

from preopd.errors import (
    ExtractionError,
    InvalidVitalsError,
    OCRNotImplementedError,
    PatientNotFoundError,
    SessionNotFoundError,
    UnknownCategoryError,
    UnsupportedFileTypeError,
)
from preopd.intake import masters
from preopd.intake.actions import UpdateComplaints, parse_action, update_complaints
from preopd.intake.derived import derive_complaint
from preopd.intake.extraction import UploadedFile
from preopd.intake.summarizer import PromptKind
from preopd.intake.vitals import VitalsInput
from preopd.services import IntakeSessionService
from .schemas import (
    IntakeActionRequest,
    IntakeDocumentList,
    RecordUploadResponse,
    RegisterPatientRequest,
    SelectPatientRequest,
    StartIntakeRequest,
    StartIntakeResponse,
    SubmitResponse,
    SummaryResponse,
)

router = APIRouter()


def get_service(request: Request) -> IntakeSessionService:
    return request.app.state.intake_service


def _session_or_404(service: IntakeSessionService, session_id: str):
    try:
        return service.get_session(session_id)
    except SessionNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))


def _validation_detail(exc: ValidationError):
    return exc.errors(include_url=False, include_context=False)


# ----------------------------------------------------------------------
# Masters, patients, vitals
# ----------------------------------------------------------------------

@router.get("/masters")
def get_masters() -> Dict[str, Any]:
    return masters.as_dict()


@router.post("/patients", status_code=201)
def register_patient(
    payload: RegisterPatientRequest,
    service: IntakeSessionService = Depends(get_service),
) -> Dict[str, Any]:
    patient = service.register_patient(
        uhid=payload.uhid,
        full_name=payload.full_name,
        age=payload.age,
        gender=payload.gender,
        chronic_conditions=payload.chronic_conditions,
    )
    return patient.to_document()


@router.get("/patients/{patient_id}")
def get_patient(
    patient_id: str,
    service: IntakeSessionService = Depends(get_service),
) -> Dict[str, Any]:
    try:
        return service.get_patient(patient_id).to_document()
    except PatientNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))


@router.post("/patients/{patient_id}/vitals", status_code=201)
def record_vitals(
    patient_id: str,
    payload: VitalsInput,
    service: IntakeSessionService = Depends(get_service),
) -> Dict[str, Any]:
    try:
        return service.record_vitals(patient_id, payload).to_document()
    except PatientNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except InvalidVitalsError as exc:
        raise HTTPException(
            status_code=422,
            detail={"message": str(exc), "errors": exc.errors},
        )


@router.get("/patients/{patient_id}/vitals/latest")
def latest_vitals(
    patient_id: str,
    service: IntakeSessionService = Depends(get_service),
) -> Dict[str, Any]:
    vitals = service.latest_vitals(patient_id)
    if vitals is None:
        raise HTTPException(status_code=404, detail="No vitals recorded for this patient.")
    return vitals.to_document()


@router.get("/patients/{patient_id}/intakes", response_model=IntakeDocumentList)
def list_intakes(
    patient_id: str,
    service: IntakeSessionService = Depends(get_service),
) -> IntakeDocumentList:
    return IntakeDocumentList(intakes=service.list_intakes(patient_id))


# ----------------------------------------------------------------------
# Intake sessions
# ----------------------------------------------------------------------

@router.post("/intake/start", response_model=StartIntakeResponse)
def start_intake(
    payload: StartIntakeRequest,
    service: IntakeSessionService = Depends(get_service),
) -> StartIntakeResponse:
    """
    Open a new Pre-OPD intake, optionally with the patient already selected.
    """
    try:
        session = service.start_session(patient_id=payload.patient_id)
    except PatientNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))

    return StartIntakeResponse(
        session_id=session.id,
        patient_id=session.patient.id if session.patient else None,
        version=session.version,
    )


@router.get("/intake/{session_id}")
def get_intake(
    session_id: str,
    service: IntakeSessionService = Depends(get_service),
) -> Dict[str, Any]:
    return _session_or_404(service, session_id).view()


@router.delete("/intake/{session_id}", status_code=204)
def end_intake(
    session_id: str,
    service: IntakeSessionService = Depends(get_service),
) -> None:
    try:
        service.end_session(session_id)
    except SessionNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))


@router.post("/intake/{session_id}/patient")
def select_patient(
    session_id: str,
    payload: SelectPatientRequest,
    service: IntakeSessionService = Depends(get_service),
) -> Dict[str, Any]:
    _session_or_404(service, session_id)
    try:
        return service.select_patient(session_id, payload.patient_id).view()
    except PatientNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))


@router.post("/intake/{session_id}/actions")
def dispatch_action(
    session_id: str,
    payload: IntakeActionRequest,
    service: IntakeSessionService = Depends(get_service),
) -> Dict[str, Any]:
    session = _session_or_404(service, session_id)
    try:
        action = parse_action(payload.model_dump())
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=_validation_detail(exc))

    # Same as the complaints section: derived fields follow the master table
    if isinstance(action, UpdateComplaints):
        action = update_complaints([derive_complaint(c) for c in action.payload])

    service.dispatch(session_id, action)
    return session.view()


@router.post("/intake/{session_id}/reset")
def clear_form(
    session_id: str,
    service: IntakeSessionService = Depends(get_service),
) -> Dict[str, Any]:
    _session_or_404(service, session_id)
    return service.clear_form(session_id).view()


@router.post(
    "/intake/{session_id}/records/{category}",
    response_model=RecordUploadResponse,
    status_code=201,
)
def upload_record(
    session_id: str,
    category: str,
    file: UploadFile = File(...),
    service: IntakeSessionService = Depends(get_service),
) -> RecordUploadResponse:
    _session_or_404(service, session_id)
    upload = UploadedFile(
        name=file.filename or "upload",
        content_type=file.content_type or "",
        data=file.file.read(),
    )

    try:
        record = service.add_record(session_id, category, upload)
    except UnknownCategoryError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except UnsupportedFileTypeError as exc:
        raise HTTPException(status_code=415, detail=str(exc))
    except OCRNotImplementedError as exc:
        raise HTTPException(status_code=501, detail=str(exc))
    except ExtractionError as exc:
        raise HTTPException(status_code=422, detail=str(exc))

    return RecordUploadResponse(
        id=record.id,
        category=category,
        name=record.name,
        content_type=record.content_type,
        size=record.size,
        chars=len(record.text),
    )


@router.delete("/intake/{session_id}/records/{category}/{file_id}", status_code=204)
def remove_record(
    session_id: str,
    category: str,
    file_id: str,
    service: IntakeSessionService = Depends(get_service),
) -> None:
    _session_or_404(service, session_id)
    try:
        removed = service.remove_record(session_id, category, file_id)
    except UnknownCategoryError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    if not removed:
        raise HTTPException(status_code=404, detail="Record not found.")


@router.post("/intake/{session_id}/summaries/{kind}", response_model=SummaryResponse)
def generate_summary(
    session_id: str,
    kind: PromptKind,
    service: IntakeSessionService = Depends(get_service),
) -> SummaryResponse:
    _session_or_404(service, session_id)
    if kind is PromptKind.CLINICAL:
        text = service.generate_clinical_summary(session_id)
    else:
        text = service.generate_history_summary(session_id)

    return SummaryResponse(kind=kind.value, summary=text, discarded=text is None)


@router.post("/intake/{session_id}/submit", response_model=SubmitResponse)
def submit_intake(
    session_id: str,
    service: IntakeSessionService = Depends(get_service),
) -> SubmitResponse:
    session = _session_or_404(service, session_id)
    intake_id = service.submit(session_id)
    return SubmitResponse(
        saved=intake_id is not None,
        intake_id=intake_id,
        error_message=session.status.error_message,
    )
