"""
State-machine tests for the phase lifecycle.

    not_started ⇄ in_progress ⇄ ready_to_complete   (toggle)
    ready_to_complete → completed                    (complete)
    completed → derived from percentage              (uncomplete)

For each action:
    - Valid transitions return a new program with the expected state.
    - Invalid transitions raise and leave the input program untouched.
    - Checklist answers are never cleared.
"""

from datetime import datetime, timezone

import pytest

from maintenancehub.core.exceptions import (
    InvalidTransitionError,
    PhaseIncompleteError,
    ValidationError,
)
from maintenancehub.services.phase_lifecycle import (
    PHASE_TRANSITIONS,
    PhaseState,
    available_transitions,
    complete_phase,
    derive_state,
    phase_state,
    set_notes,
    toggle_checklist_item,
    uncomplete_phase,
    validate_phase_transition,
)
from maintenancehub.services.program_catalog import ChecklistItem, checklist_catalog, get_checklist
from maintenancehub.services.progress_tracker import PhaseProgress, ProgramProgress

_NOW = datetime(2026, 10, 18, 9, 30, tzinfo=timezone.utc)


def _catalog(phase=2, ids=("a", "b", "c", "d")) -> dict:
    catalog = dict(checklist_catalog())
    catalog[phase] = tuple(ChecklistItem(i, f"Task {i}", f"Deliverable {i}") for i in ids)
    return catalog


def _tick_all(program: ProgramProgress, phase: int) -> ProgramProgress:
    for item in get_checklist(phase):
        program = toggle_checklist_item(program, phase, item.id, True)
    return program


class TestDeriveState:
    """States are derived from (progress, completed)."""

    @pytest.mark.parametrize("progress,completed,state", [
        (0, False, PhaseState.NOT_STARTED),
        (1, False, PhaseState.IN_PROGRESS),
        (99, False, PhaseState.IN_PROGRESS),
        (100, False, PhaseState.READY_TO_COMPLETE),
        (100, True, PhaseState.COMPLETED),
        (40, True, PhaseState.COMPLETED),
    ])
    def test_derive_state(self, progress, completed, state):
        assert derive_state(progress, completed) == state

    def test_transition_table_actions(self):
        assert set(PHASE_TRANSITIONS) == {"toggle", "complete", "uncomplete"}

    def test_validate_unknown_action(self):
        result = validate_phase_transition(PhaseProgress(phase=1), "archive")
        assert result["valid"] is False
        assert "Unknown action" in result["reason"]


class TestToggle:
    """Checklist toggles recompute the percentage."""

    def test_toggle_flips_and_recomputes(self):
        catalog = _catalog()
        program = toggle_checklist_item(ProgramProgress(), 2, "a", catalog=catalog)
        assert program.phases[2].checklist == {"a": True}
        assert program.phases[2].progress == 25
        assert phase_state(program.phases[2]) == PhaseState.IN_PROGRESS

        program = toggle_checklist_item(program, 2, "a", catalog=catalog)
        assert program.phases[2].checklist == {"a": False}
        assert program.phases[2].progress == 0
        assert phase_state(program.phases[2]) == PhaseState.NOT_STARTED

    def test_explicit_done_value(self):
        catalog = _catalog()
        program = toggle_checklist_item(ProgramProgress(), 2, "b", True, catalog=catalog)
        program = toggle_checklist_item(program, 2, "b", True, catalog=catalog)
        assert program.phases[2].checklist == {"b": True}

    def test_unknown_item_rejected(self):
        with pytest.raises(ValidationError):
            toggle_checklist_item(ProgramProgress(), 1, "2-1")

    def test_input_program_not_mutated(self):
        original = ProgramProgress()
        toggle_checklist_item(original, 1, "1-1")
        assert original.phases[1].checklist == {}

    def test_toggle_on_completed_phase_keeps_completed_flag(self):
        program = complete_phase(_tick_all(ProgramProgress(), 3), 3, now=_NOW)
        program = toggle_checklist_item(program, 3, "3-1")
        record = program.phases[3]
        assert record.completed is True
        assert record.progress < 100
        assert phase_state(record) == PhaseState.COMPLETED


class TestComplete:
    """Complete is accepted only at a recomputed 100%."""

    def test_four_item_scenario(self):
        catalog = _catalog()
        program = ProgramProgress()
        program = toggle_checklist_item(program, 2, "a", True, catalog=catalog)
        program = toggle_checklist_item(program, 2, "b", True, catalog=catalog)
        program = toggle_checklist_item(program, 2, "c", False, catalog=catalog)
        program = toggle_checklist_item(program, 2, "d", False, catalog=catalog)
        assert program.phases[2].progress == 50

        with pytest.raises(PhaseIncompleteError) as exc_info:
            complete_phase(program, 2, catalog=catalog)
        assert exc_info.value.kind == "phase_incomplete"
        assert exc_info.value.progress == 50
        assert program.phases[2].completed is False

        program = toggle_checklist_item(program, 2, "c", catalog=catalog)
        program = toggle_checklist_item(program, 2, "d", catalog=catalog)
        assert program.phases[2].progress == 100
        assert phase_state(program.phases[2]) == PhaseState.READY_TO_COMPLETE

        program = complete_phase(program, 2, catalog=catalog, now=_NOW)
        assert program.phases[2].completed is True
        assert program.phases[2].completed_at == _NOW
        assert program.current_phase == 3

    def test_stored_percentage_not_trusted(self):
        program = ProgramProgress()
        program.phases[1].progress = 100
        with pytest.raises(PhaseIncompleteError):
            complete_phase(program, 1)

    def test_empty_catalog_never_completes(self):
        catalog = _catalog(phase=4, ids=())
        with pytest.raises(PhaseIncompleteError) as exc_info:
            complete_phase(ProgramProgress(), 4, catalog=catalog)
        assert exc_info.value.progress == 0

    def test_complete_last_phase_caps_pointer(self):
        program = complete_phase(_tick_all(ProgramProgress(), 6), 6, now=_NOW)
        assert program.current_phase == 6

    def test_complete_assessment_phase_points_to_phase_1(self):
        program = complete_phase(_tick_all(ProgramProgress(), 0), 0, now=_NOW)
        assert program.phases[0].completed is True
        assert program.current_phase == 1
        assert program.completed_at is None

    def test_complete_twice_rejected(self):
        program = complete_phase(_tick_all(ProgramProgress(), 5), 5, now=_NOW)
        with pytest.raises(InvalidTransitionError) as exc_info:
            complete_phase(program, 5)
        assert exc_info.value.current_state == "completed"

    def test_program_completed_when_all_six_done(self):
        program = ProgramProgress()
        for phase in range(1, 7):
            program = complete_phase(_tick_all(program, phase), phase, now=_NOW)
        assert program.completed_at == _NOW

        program = uncomplete_phase(program, 4)
        assert program.completed_at is None


class TestUncomplete:
    """Uncomplete only from completed; checklist and percentage untouched."""

    def test_uncomplete_preserves_checklist_and_progress(self):
        program = complete_phase(_tick_all(ProgramProgress(), 1), 1, now=_NOW)
        checklist_before = dict(program.phases[1].checklist)

        program = uncomplete_phase(program, 1)
        record = program.phases[1]
        assert record.completed is False
        assert record.completed_at is None
        assert record.checklist == checklist_before
        assert record.progress == 100
        assert phase_state(record) == PhaseState.READY_TO_COMPLETE

    def test_uncomplete_open_phase_rejected(self):
        with pytest.raises(InvalidTransitionError) as exc_info:
            uncomplete_phase(ProgramProgress(), 2)
        assert exc_info.value.current_state == "not_started"


class TestAvailableTransitions:
    """Actions offered per state."""

    def test_not_started(self):
        assert available_transitions(PhaseProgress(phase=1)) == ["toggle"]

    def test_ready_to_complete(self):
        assert available_transitions(PhaseProgress(phase=1, progress=100)) == ["toggle", "complete"]

    def test_completed(self):
        record = PhaseProgress(phase=1, progress=100, completed=True)
        assert available_transitions(record) == ["toggle", "uncomplete"]


class TestNotes:
    """set_notes touches only the notes field."""

    def test_set_notes(self):
        program = toggle_checklist_item(ProgramProgress(), 1, "1-1")
        updated = set_notes(program, 1, "Walk-down booked for Tuesday")
        assert updated.phases[1].notes == "Walk-down booked for Tuesday"
        assert updated.phases[1].checklist == {"1-1": True}
        assert updated.phases[1].progress == program.phases[1].progress

    def test_notes_must_be_text(self):
        with pytest.raises(ValidationError):
            set_notes(ProgramProgress(), 1, 42)

    def test_unknown_phase_rejected(self):
        with pytest.raises(ValidationError):
            set_notes(ProgramProgress(), 9, "x")
