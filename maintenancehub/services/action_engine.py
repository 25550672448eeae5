"""
Assessment-to-Action engine.

Turns a scored Maintenance Process Assessment into the prioritized list of
improvement actions that each implementation phase of the Path to Excellence
program shows to the consultant:

  detect_gaps          → items with achieved < possible, order preserved
  generate_action      → one ImprovementAction per gap (phase, priority, text)
  prioritize_actions   → stable sort by (priority, phase)

Pure functions only: no database, no Flask. The orchestration service loads
the assessment, calls ``generate_improvement_actions`` and stores the result,
replacing whatever list was stored before.

Usage:
    from maintenancehub.services.action_engine import generate_improvement_actions

    actions = generate_improvement_actions(items)
    phase_4 = actions_for_phase(actions, 4)
"""

from __future__ import annotations

from typing import Callable, Iterable

from maintenancehub.services.assessment_model import (
    AssessmentCategory,
    AssessmentHeader,
    AssessmentItem,
    ImprovementAction,
    Priority,
    score_summary,
)
from maintenancehub.services.program_catalog import IMPLEMENTATION_PHASES


# ═════════════════════════════════════════════════════════════════════════════
# Routing tables
# ═════════════════════════════════════════════════════════════════════════════

# Activity code → implementation phase
PHASE_BY_ACTIVITY: dict[str, int] = {
    "1.1": 1,  # Equipment information → Equipment Criticality
    "1.2": 1,  # Evaluate & prioritize → Equipment Criticality
    "1.3": 2,  # Define & classify failures → Root Cause Analysis
    "1.4": 4,  # PM requirements → Preventive Maintenance Excellence
    "1.5": 3,  # Storeroom supplies → Storeroom MRO
    "1.6": 5,  # Schedule & control work → Data-Driven Performance
}
DEFAULT_PHASE = 1

CRITICAL_THRESHOLD = 8
HIGH_THRESHOLD = 4

ACTION_ID_PREFIX = "action-"
FALLBACK_DESCRIPTION_LENGTH = 100


# ═════════════════════════════════════════════════════════════════════════════
# Gap detection
# ═════════════════════════════════════════════════════════════════════════════

def detect_gaps(items: Iterable[AssessmentItem]) -> list[AssessmentItem]:
    """Items scored below their possible score, in input order.

    Exact comparison: 1.9 of 2 is a gap, 2 of 2 is not.
    """
    return [item for item in items if item.actual_score < item.possible_score]


# ═════════════════════════════════════════════════════════════════════════════
# Action generation
# ═════════════════════════════════════════════════════════════════════════════

def assign_phase(activity_code: str | None) -> int:
    return PHASE_BY_ACTIVITY.get(activity_code or "", DEFAULT_PHASE)


def assign_priority(possible_score: float) -> Priority:
    """Priority depends on the element's weight only, never on the gap size."""
    if possible_score >= CRITICAL_THRESHOLD:
        return Priority.CRITICAL
    if possible_score >= HIGH_THRESHOLD:
        return Priority.HIGH
    return Priority.MEDIUM


def format_gap(gap: float) -> str:
    """``8`` for whole gaps, ``0.5`` otherwise."""
    if float(gap).is_integer():
        return str(int(gap))
    return repr(float(gap))


ActionTemplate = Callable[[AssessmentItem, str], str]

ACTION_TEMPLATES: dict[AssessmentCategory, ActionTemplate] = {
    AssessmentCategory.EQUIPMENT_RECORDS: lambda item, gap: (
        f"Establish complete equipment registry with hierarchical structure (current gap: {gap} points)"
    ),
    AssessmentCategory.FAILURE_TRACKING: lambda item, gap: (
        "Implement breakdown tracking system with trend visualization and prioritization "
        f"(current gap: {gap} points)"
    ),
    AssessmentCategory.WORK_ORDER_MANAGEMENT: lambda item, gap: (
        "Define and implement work order type classification (emergency, corrective, preventive) "
        f"(current gap: {gap} points)"
    ),
    AssessmentCategory.DOCUMENTATION: lambda item, gap: (
        f"Create technical document management system with version control (current gap: {gap} points)"
    ),
    AssessmentCategory.CRITICALITY_ASSESSMENT: lambda item, gap: (
        f"Establish ABC criticality ranking methodology for all equipment (current gap: {gap} points)"
    ),
    AssessmentCategory.VISUAL_MANAGEMENT: lambda item, gap: (
        "Implement visual asset tagging with criticality indicators visible to operators "
        f"(current gap: {gap} points)"
    ),
    AssessmentCategory.SAFETY: lambda item, gap: (
        "Complete NFPA 70E arc flash assessment and establish prevention program "
        f"(current gap: {gap} points)"
    ),
    AssessmentCategory.RCA_PROCESS: lambda item, gap: (
        "Establish formal RCA process with 5-Why methodology and corrective action tracking "
        f"(current gap: {gap} points)"
    ),
    AssessmentCategory.CONTINUOUS_IMPROVEMENT: lambda item, gap: (
        f"Implement daily failure review meetings with action item follow-up (current gap: {gap} points)"
    ),
    AssessmentCategory.PM_STRATEGY: lambda item, gap: (
        f"Develop PM strategy using RCM/FMEA methodology for critical equipment (current gap: {gap} points)"
    ),
    AssessmentCategory.PM_OPTIMIZATION: lambda item, gap: (
        f"Optimize PM frequencies based on failure data analysis (current gap: {gap} points)"
    ),
    AssessmentCategory.INVENTORY_MANAGEMENT: lambda item, gap: (
        "Implement ABC parts classification with min/max levels for critical spares "
        f"(current gap: {gap} points)"
    ),
    AssessmentCategory.STOREROOM_OPERATIONS: lambda item, gap: (
        "Establish controlled storeroom with proper access controls and location system "
        f"(current gap: {gap} points)"
    ),
    AssessmentCategory.WORK_SCHEDULING: lambda item, gap: (
        f"Implement weekly/daily maintenance scheduling with resource planning (current gap: {gap} points)"
    ),
    AssessmentCategory.BACKLOG_MANAGEMENT: lambda item, gap: (
        f"Establish backlog management process with aging and prioritization (current gap: {gap} points)"
    ),
    AssessmentCategory.FIVE_S_STANDARDS: lambda item, gap: (
        f"Achieve 5S standards in maintenance shop with monthly audits (current gap: {gap} points)"
    ),
}


def _generic_action(item: AssessmentItem, gap: str) -> str:
    prefix = item.description[:FALLBACK_DESCRIPTION_LENGTH]
    return f"Address gap in {item.category}: {prefix}... (gap: {gap} points)"


def action_text(item: AssessmentItem, gap: float) -> str:
    """One sentence stating the corrective action; categories without a template get the generic text."""
    template = ACTION_TEMPLATES.get(item.category_key, _generic_action)
    return template(item, format_gap(gap))


def action_id_for(item_id: str) -> str:
    return f"{ACTION_ID_PREFIX}{item_id}"


def scoped_action_key(client_company_id: str | None, action_id: str) -> str:
    """Key for indexing actions across client engagements.

    Action ids only encode the scorecard item, so two engagements produce the
    same ids; anything that indexes actions across engagements keys on this.
    """
    return f"{client_company_id or 'tenant'}:{action_id}"


def generate_action(item: AssessmentItem) -> ImprovementAction:
    gap = item.gap
    return ImprovementAction(
        id=action_id_for(item.id),
        phase=assign_phase(item.activity_code),
        priority=assign_priority(item.possible_score),
        action=action_text(item, gap),
        rationale=item.description,
        source_item_id=item.id,
        category=item.category,
        gap=gap,
    )


# ═════════════════════════════════════════════════════════════════════════════
# Prioritization & views
# ═════════════════════════════════════════════════════════════════════════════

def prioritize_actions(actions: Iterable[ImprovementAction]) -> list[ImprovementAction]:
    """Critical first, then by phase. Ties keep generation order (sorted() is stable)."""
    return sorted(actions, key=lambda a: (a.priority.rank, a.phase))


def generate_improvement_actions(items: Iterable[AssessmentItem]) -> list[ImprovementAction]:
    """Full pipeline: gaps → actions → prioritized list."""
    return prioritize_actions(generate_action(item) for item in detect_gaps(items))


def actions_for_phase(actions: Iterable[ImprovementAction], phase: int) -> list[ImprovementAction]:
    return [a for a in actions if a.phase == phase]


def summarize_actions(actions: Iterable[ImprovementAction]) -> dict:
    """Counts by priority and by phase (every priority and phase 1–6 present, zeros included)."""
    by_priority = {p.value: 0 for p in Priority}
    by_phase = {phase: 0 for phase in IMPLEMENTATION_PHASES}
    total = 0
    for action in actions:
        total += 1
        by_priority[action.priority.value] += 1
        by_phase[action.phase] = by_phase.get(action.phase, 0) + 1
    return {"total": total, "by_priority": by_priority, "by_phase": by_phase}


def build_assessment_record(
    items: list[AssessmentItem],
    header: AssessmentHeader | None = None,
    client_company_id: str | None = None,
) -> dict:
    """The phase-0 deliverable payload: items, regenerated actions and score totals."""
    header = header or AssessmentHeader()
    actions = generate_improvement_actions(items)
    record = {
        **header.to_dict(),
        "items": [item.to_dict() for item in items],
        "improvement_actions": [a.to_dict() for a in actions],
        **score_summary(items),
    }
    if client_company_id:
        record["client_company_id"] = client_company_id
    return record
