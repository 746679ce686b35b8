# preopd/api/schemas.py
from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class RegisterPatientRequest(BaseModel):
    uhid: str
    full_name: str
    age: Optional[int] = None
    gender: Optional[str] = None
    chronic_conditions: List[str] = Field(default_factory=list)


class StartIntakeRequest(BaseModel):
    patient_id: Optional[str] = None


class StartIntakeResponse(BaseModel):
    session_id: str
    patient_id: Optional[str]
    version: int


class SelectPatientRequest(BaseModel):
    patient_id: str


class IntakeActionRequest(BaseModel):
    type: str
    payload: Any = None


class RecordUploadResponse(BaseModel):
    id: str
    category: str
    name: str
    content_type: str
    size: int
    chars: int


class SummaryResponse(BaseModel):
    kind: str
    summary: Optional[str]
    discarded: bool


class SubmitResponse(BaseModel):
    saved: bool
    intake_id: Optional[str] = None
    error_message: str = ""


class IntakeDocumentList(BaseModel):
    intakes: List[Dict[str, Any]]
