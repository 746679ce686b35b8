# preopd/intake/actions.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Annotated, Any, ClassVar, Dict, Mapping, Optional, Sequence, Tuple, Union

from pydantic import Field, TypeAdapter

from preopd.intake.schema import (
    MAX_COMPLAINTS,
    Allergy,
    ChronicCondition,
    Complaint,
    PastHistory,
)


class ActionType(str, Enum):
    UPDATE_COMPLAINTS = "UPDATE_COMPLAINTS"
    UPDATE_CHRONIC_CONDITIONS = "UPDATE_CHRONIC_CONDITIONS"
    UPDATE_ALLERGIES = "UPDATE_ALLERGIES"
    UPDATE_PAST_HISTORY = "UPDATE_PAST_HISTORY"
    RESET_ALL = "RESET_ALL"


@dataclass(frozen=True)
class UpdateComplaints:
    payload: Tuple[Complaint, ...]
    type: ClassVar[ActionType] = ActionType.UPDATE_COMPLAINTS


@dataclass(frozen=True)
class UpdateChronicConditions:
    payload: Tuple[ChronicCondition, ...]
    type: ClassVar[ActionType] = ActionType.UPDATE_CHRONIC_CONDITIONS


@dataclass(frozen=True)
class UpdateAllergies:
    payload: Allergy
    type: ClassVar[ActionType] = ActionType.UPDATE_ALLERGIES


@dataclass(frozen=True)
class UpdatePastHistory:
    payload: PastHistory
    type: ClassVar[ActionType] = ActionType.UPDATE_PAST_HISTORY


@dataclass(frozen=True)
class ResetAll:
    type: ClassVar[ActionType] = ActionType.RESET_ALL


IntakeAction = Union[
    UpdateComplaints,
    UpdateChronicConditions,
    UpdateAllergies,
    UpdatePastHistory,
    ResetAll,
]


def update_complaints(complaints: Sequence[Complaint]) -> UpdateComplaints:
    return UpdateComplaints(tuple(complaints))


def update_chronic_conditions(
    conditions: Sequence[ChronicCondition],
) -> UpdateChronicConditions:
    return UpdateChronicConditions(tuple(conditions))


_complaints_adapter = TypeAdapter(
    Annotated[Tuple[Complaint, ...], Field(max_length=MAX_COMPLAINTS)]
)
_conditions_adapter = TypeAdapter(Tuple[ChronicCondition, ...])


def parse_action(raw: Mapping[str, Any]) -> Optional[IntakeAction]:
    """
    Build a typed action from a {"type": ..., "payload": ...} mapping.

    Unknown types give None (the reducer ignores it). A payload that does not
    match its slice raises pydantic.ValidationError.
    """
    try:
        action_type = ActionType(raw.get("type"))
    except ValueError:
        return None

    payload = raw.get("payload")

    if action_type is ActionType.UPDATE_COMPLAINTS:
        return UpdateComplaints(_complaints_adapter.validate_python(payload))
    if action_type is ActionType.UPDATE_CHRONIC_CONDITIONS:
        return UpdateChronicConditions(_conditions_adapter.validate_python(payload))
    if action_type is ActionType.UPDATE_ALLERGIES:
        return UpdateAllergies(Allergy.model_validate(payload))
    if action_type is ActionType.UPDATE_PAST_HISTORY:
        return UpdatePastHistory(PastHistory.model_validate(payload))
    return ResetAll()


def describe(action: Any) -> Dict[str, Any]:
    """Short form for log lines."""
    action_type = getattr(action, "type", None)
    return {"action": action_type.value if isinstance(action_type, ActionType) else repr(action)}
