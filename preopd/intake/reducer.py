# preopd/intake/reducer.py
from __future__ import annotations

from typing import Any

from preopd.intake.actions import (
    ResetAll,
    UpdateAllergies,
    UpdateChronicConditions,
    UpdateComplaints,
    UpdatePastHistory,
)
from preopd.intake.schema import PreOPDIntakeData


INITIAL_INTAKE_STATE = PreOPDIntakeData()


def reduce(state: PreOPDIntakeData, action: Any) -> PreOPDIntakeData:
    """
    Fold one action into the intake snapshot.

    Update actions replace exactly one slice with the payload and leave every
    other slice as the same object. RESET_ALL returns INITIAL_INTAKE_STATE.
    Anything unrecognised returns `state` unchanged.
    """
    if isinstance(action, UpdateComplaints):
        return state.model_copy(update={"complaints": action.payload})
    if isinstance(action, UpdateChronicConditions):
        return state.model_copy(update={"chronic_conditions": action.payload})
    if isinstance(action, UpdateAllergies):
        return state.model_copy(update={"allergies": action.payload})
    if isinstance(action, UpdatePastHistory):
        return state.model_copy(update={"past_history": action.payload})
    if isinstance(action, ResetAll):
        return INITIAL_INTAKE_STATE
    return state
