"""
Path to Excellence — progress tracking.

Per-phase checklist progress and the program-wide roll-ups shown on the
wizard header. Phase progress is held in an explicit mapping keyed by phase
number; the stored JSON document uses the same keys (as strings).

Percentages are derived values. They are recomputed from the program
catalog every time a record is loaded or changed and are never trusted
from storage or from the client.

Usage:
    from maintenancehub.services.progress_tracker import ProgramProgress, refresh_progress

    program = refresh_progress(ProgramProgress.from_record(row.phases, ...))
    overall = overall_progress(program)
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Iterable, Mapping, Sequence

from maintenancehub.core.exceptions import ValidationError
from maintenancehub.services.assessment_model import round_half_up
from maintenancehub.services.program_catalog import (
    ALL_PHASES,
    FIRST_PHASE,
    IMPLEMENTATION_PHASES,
    ChecklistItem,
    ProgramPhase,
    checklist_catalog,
    validate_phase_number,
)

STAGE_EXCELLENCE = "Maintenance Excellence"
STAGE_ADVANCED = "Advanced Implementation"
STAGE_FOUNDATION = "Foundation Building"
STAGE_ASSESSMENT = "Assessment Phase"


def _parse_timestamp(value) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def _format_timestamp(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


# ═════════════════════════════════════════════════════════════════════════════
# Data classes
# ═════════════════════════════════════════════════════════════════════════════

@dataclass
class PhaseProgress:
    """Progress of one phase for one subject."""
    phase: int
    checklist: dict[str, bool] = field(default_factory=dict)
    progress: int = 0
    completed: bool = False
    completed_at: datetime | None = None
    notes: str = ""

    def to_dict(self) -> dict:
        return {
            "phase": self.phase,
            "checklist": dict(self.checklist),
            "progress": self.progress,
            "completed": self.completed,
            "completed_at": _format_timestamp(self.completed_at),
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, phase: int, data: Mapping | None) -> "PhaseProgress":
        """Load a stored phase entry; missing or malformed fields fall back to defaults."""
        data = data or {}
        raw_checklist = data.get("checklist") or {}
        checklist = (
            {str(k): bool(v) for k, v in raw_checklist.items()}
            if isinstance(raw_checklist, Mapping) else {}
        )
        progress = data.get("progress", 0)
        return cls(
            phase=phase,
            checklist=checklist,
            progress=progress if isinstance(progress, int) and not isinstance(progress, bool) else 0,
            completed=bool(data.get("completed", False)),
            completed_at=_parse_timestamp(data.get("completed_at", data.get("completedAt"))),
            notes=str(data.get("notes") or ""),
        )


@dataclass
class ProgramProgress:
    """All phase records of one subject (tenant + optional client engagement)."""
    phases: dict[int, PhaseProgress] = field(default_factory=dict)
    current_phase: int = FIRST_PHASE
    version: int = 0
    started_at: datetime | None = None
    completed_at: datetime | None = None

    def __post_init__(self):
        for number in ALL_PHASES:
            self.phases.setdefault(number, PhaseProgress(phase=number))

    def phase(self, number: int) -> PhaseProgress:
        return self.phases[validate_phase_number(number)]

    def with_phase(self, phase_progress: PhaseProgress) -> "ProgramProgress":
        """Copy of this program with one phase record replaced."""
        phases = {n: copy.deepcopy(p) for n, p in self.phases.items()}
        phases[phase_progress.phase] = phase_progress
        return replace(self, phases=phases)

    def phases_to_dict(self) -> dict:
        """JSON document stored on the progress row, keyed by phase number."""
        return {
            str(number): {k: v for k, v in record.to_dict().items() if k != "phase"}
            for number, record in sorted(self.phases.items())
        }

    def to_dict(self) -> dict:
        return {
            "current_phase": self.current_phase,
            "version": self.version,
            "started_at": _format_timestamp(self.started_at),
            "completed_at": _format_timestamp(self.completed_at),
            "phases": {number: record.to_dict() for number, record in sorted(self.phases.items())},
        }

    @classmethod
    def from_record(cls, phases_doc: Mapping | None, *, current_phase: int = FIRST_PHASE,
                    version: int = 0, started_at=None, completed_at=None) -> "ProgramProgress":
        phases_doc = phases_doc or {}
        phases = {}
        for number in ALL_PHASES:
            entry = phases_doc.get(str(number), phases_doc.get(number))
            phases[number] = PhaseProgress.from_dict(number, entry)
        return cls(
            phases=phases,
            current_phase=current_phase or FIRST_PHASE,
            version=version or 0,
            started_at=_parse_timestamp(started_at),
            completed_at=_parse_timestamp(completed_at),
        )


# ═════════════════════════════════════════════════════════════════════════════
# Calculations
# ═════════════════════════════════════════════════════════════════════════════

def count_completed_tasks(checklist: Sequence[ChecklistItem], done: Mapping[str, bool]) -> tuple[int, int]:
    """(completed, total) for one phase. Keys not in the catalog are ignored."""
    completed = sum(1 for item in checklist if done.get(item.id))
    return completed, len(checklist)


def calculate_step_progress(checklist: Sequence[ChecklistItem], done: Mapping[str, bool]) -> int:
    """Rounded percentage of catalog items marked done; 0 for an empty catalog."""
    completed, total = count_completed_tasks(checklist, done)
    if total == 0:
        return 0
    return round_half_up(100 * completed / total)


def calculate_overall_progress(percentages: Sequence[int]) -> int:
    """Average of the six implementation-phase percentages.

    Phase 0 is never part of this metric, so exactly six values are expected.
    """
    values = list(percentages)
    if len(values) != len(IMPLEMENTATION_PHASES):
        raise ValidationError(
            f"Overall progress needs {len(IMPLEMENTATION_PHASES)} phase percentages, got {len(values)}",
            details={"count": len(values)},
        )
    return round_half_up(sum(values) / len(IMPLEMENTATION_PHASES))


def overall_progress(program: ProgramProgress) -> int:
    return calculate_overall_progress([program.phases[n].progress for n in IMPLEMENTATION_PHASES])


def refresh_progress(
    program: ProgramProgress,
    catalog: Mapping[int, Sequence[ChecklistItem]] | None = None,
) -> ProgramProgress:
    """Recompute every stored percentage from the catalog. Returns a new program."""
    catalog = checklist_catalog() if catalog is None else catalog
    phases = {}
    for number, record in program.phases.items():
        phases[number] = replace(
            record,
            checklist=dict(record.checklist),
            progress=calculate_step_progress(catalog.get(number, ()), record.checklist),
        )
    return replace(program, phases=phases)


def calculate_total_task_progress(phases: Iterable[ProgramPhase], program: ProgramProgress) -> tuple[int, int]:
    """(completed, total) checklist items across the given catalog phases."""
    completed = total = 0
    for phase in phases:
        done, count = count_completed_tasks(phase.checklist, program.phases[phase.number].checklist)
        completed += done
        total += count
    return completed, total


def count_completed_phases(program: ProgramProgress) -> int:
    return sum(1 for n in IMPLEMENTATION_PHASES if program.phases[n].completed)


def all_phases_completed(program: ProgramProgress) -> bool:
    return count_completed_phases(program) == len(IMPLEMENTATION_PHASES)


def implementation_stage(completed_phases: int) -> str:
    """Label for the program's maturity given the number of completed phases."""
    if completed_phases == len(IMPLEMENTATION_PHASES):
        return STAGE_EXCELLENCE
    if completed_phases >= 4:
        return STAGE_ADVANCED
    if completed_phases >= 2:
        return STAGE_FOUNDATION
    return STAGE_ASSESSMENT


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
