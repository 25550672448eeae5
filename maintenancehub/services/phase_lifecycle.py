"""
Path to Excellence — Phase Lifecycle

Completion state machine for one phase of one subject. The state is not
stored; it is derived from (progress, completed):

  not_started        progress 0,        completed false
  in_progress        0 < progress < 100, completed false
  ready_to_complete  progress 100,      completed false
  completed          completed true

3 actions:
  toggle, complete, uncomplete

Business Rule: ``complete`` recomputes the percentage from the catalog and
the stored checklist before accepting the request. A phase below 100% is
rejected with PhaseIncompleteError and the record is returned untouched.
No action ever clears checklist answers.

Every function takes a ProgramProgress and returns a new one; nothing here
touches the database.

Usage:
    from maintenancehub.services.phase_lifecycle import complete_phase

    program = complete_phase(program, phase=2)
"""

import logging
from dataclasses import replace
from enum import Enum
from typing import Mapping, Sequence

from maintenancehub.core.exceptions import (
    InvalidTransitionError,
    PhaseIncompleteError,
    ValidationError,
)
from maintenancehub.services.program_catalog import (
    ASSESSMENT_PHASE,
    LAST_PHASE,
    ChecklistItem,
    checklist_catalog,
)
from maintenancehub.services.progress_tracker import (
    PhaseProgress,
    ProgramProgress,
    all_phases_completed,
    calculate_step_progress,
    utcnow,
)

logger = logging.getLogger(__name__)


class PhaseState(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    READY_TO_COMPLETE = "ready_to_complete"
    COMPLETED = "completed"


_OPEN_STATES = [PhaseState.NOT_STARTED, PhaseState.IN_PROGRESS, PhaseState.READY_TO_COMPLETE]

# Phase transition rules ("to" is None where the target is derived from the new percentage)
PHASE_TRANSITIONS = {
    "toggle": {"from": _OPEN_STATES + [PhaseState.COMPLETED], "to": None},
    "complete": {"from": [PhaseState.READY_TO_COMPLETE], "to": PhaseState.COMPLETED},
    "uncomplete": {"from": [PhaseState.COMPLETED], "to": None},
}


def derive_state(progress: int, completed: bool) -> PhaseState:
    if completed:
        return PhaseState.COMPLETED
    if progress >= 100:
        return PhaseState.READY_TO_COMPLETE
    if progress <= 0:
        return PhaseState.NOT_STARTED
    return PhaseState.IN_PROGRESS


def phase_state(record: PhaseProgress) -> PhaseState:
    return derive_state(record.progress, record.completed)


def validate_phase_transition(record: PhaseProgress, action: str) -> dict:
    """Validate whether an action is valid for the phase's current state."""
    current = phase_state(record)
    rule = PHASE_TRANSITIONS.get(action)
    if not rule:
        return {"valid": False, "from": current.value, "to": None,
                "reason": f"Unknown action: {action}"}

    target = rule["to"].value if rule["to"] else None
    if current not in rule["from"]:
        return {"valid": False, "from": current.value, "to": target,
                "reason": f"Cannot '{action}' from state '{current.value}'"}

    return {"valid": True, "from": current.value, "to": target, "reason": None}


def available_transitions(record: PhaseProgress) -> list[str]:
    """Actions valid from the phase's current state, in table order.

    ``complete`` is listed only at 100%; ``uncomplete`` only when completed.
    """
    return [action for action in PHASE_TRANSITIONS
            if validate_phase_transition(record, action)["valid"]]


def _checklist(phase: int, catalog: Mapping[int, Sequence[ChecklistItem]] | None) -> Sequence[ChecklistItem]:
    catalog = checklist_catalog() if catalog is None else catalog
    return catalog.get(phase, ())


def toggle_checklist_item(
    program: ProgramProgress,
    phase: int,
    item_id: str,
    done: bool | None = None,
    *,
    catalog: Mapping[int, Sequence[ChecklistItem]] | None = None,
) -> ProgramProgress:
    """Flip (or set, when ``done`` is given) one checklist answer and recompute the percentage.

    Allowed in every state. Toggling a completed phase never changes its
    completed flag; the consultant reopens it explicitly.

    Raises:
        ValidationError: item_id is not part of the phase's checklist.
    """
    record = program.phase(phase)
    items = _checklist(phase, catalog)
    if item_id not in {item.id for item in items}:
        raise ValidationError(
            f"Checklist item {item_id!r} does not belong to phase {phase}",
            details={"phase": phase, "item_id": item_id},
        )

    checklist = dict(record.checklist)
    checklist[item_id] = (not checklist.get(item_id, False)) if done is None else bool(done)
    updated = replace(record, checklist=checklist, progress=calculate_step_progress(items, checklist))

    logger.debug("Phase %s checklist %s → %s (%s%% → %s%%)",
                 phase, item_id, checklist[item_id], record.progress, updated.progress)
    return program.with_phase(updated)


def complete_phase(
    program: ProgramProgress,
    phase: int,
    *,
    catalog: Mapping[int, Sequence[ChecklistItem]] | None = None,
    now=None,
) -> ProgramProgress:
    """Mark a phase completed and advance the current-phase pointer.

    Raises:
        PhaseIncompleteError: recomputed percentage is below 100.
        InvalidTransitionError: phase is already completed.
    """
    record = program.phase(phase)
    progress = calculate_step_progress(_checklist(phase, catalog), record.checklist)
    record = replace(record, checklist=dict(record.checklist), progress=progress)

    if progress < 100 and not record.completed:
        logger.warning("Rejected complete for phase %s: only %s%% done", phase, progress)
        raise PhaseIncompleteError(phase=phase, progress=progress)

    check = validate_phase_transition(record, "complete")
    if not check["valid"]:
        logger.warning("Rejected complete for phase %s: %s", phase, check["reason"])
        raise InvalidTransitionError("complete", check["from"], check["reason"])

    now = now or utcnow()
    updated = program.with_phase(replace(record, completed=True, completed_at=now))
    updated.current_phase = min(phase + 1, LAST_PHASE)
    if phase != ASSESSMENT_PHASE and all_phases_completed(updated):
        updated.completed_at = now

    logger.info("Phase %s completed; current phase → %s", phase, updated.current_phase)
    return updated


def uncomplete_phase(program: ProgramProgress, phase: int) -> ProgramProgress:
    """Reopen a completed phase. Checklist and percentage are left exactly as they were.

    Raises:
        InvalidTransitionError: phase is not completed.
    """
    record = program.phase(phase)
    check = validate_phase_transition(record, "uncomplete")
    if not check["valid"]:
        logger.warning("Rejected uncomplete for phase %s: %s", phase, check["reason"])
        raise InvalidTransitionError("uncomplete", check["from"], check["reason"])

    updated = program.with_phase(replace(record, completed=False, completed_at=None))
    updated.completed_at = None

    logger.info("Phase %s reopened at %s%%", phase, record.progress)
    return updated


def set_notes(program: ProgramProgress, phase: int, notes: str) -> ProgramProgress:
    if not isinstance(notes, str):
        raise ValidationError("notes must be a string", details={"field": "notes"})
    record = program.phase(phase)
    return program.with_phase(replace(record, checklist=dict(record.checklist), notes=notes))
