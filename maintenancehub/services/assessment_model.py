"""
Assessment data model — scored scorecard items and derived improvement actions.

Shared by the action engine, the progress tracker and the orchestration
service. Everything here is plain data plus validation; no database access.

Usage:
    from maintenancehub.services.assessment_model import parse_assessment_items, score_summary

    items = parse_assessment_items(payload["items"])
    summary = score_summary(items)   # -> {"total_score", "max_score", "percentage_score"}
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from numbers import Real
from typing import Any, Iterable

from maintenancehub.core.exceptions import ValidationError


# ═════════════════════════════════════════════════════════════════════════════
# Enums
# ═════════════════════════════════════════════════════════════════════════════

class Priority(str, Enum):
    """Urgency of an improvement action, derived from the item's possible score."""
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]


_PRIORITY_RANK = {Priority.CRITICAL: 0, Priority.HIGH: 1, Priority.MEDIUM: 2}


class AssessmentCategory(str, Enum):
    """Scorecard category vocabulary.

    Labels outside this vocabulary map to UNCATEGORIZED; the item keeps its
    original label text so nothing is lost when the catalog evolves.
    """
    EQUIPMENT_RECORDS = "Equipment Records"
    FAILURE_TRACKING = "Failure Tracking"
    FAILURE_CLASSIFICATION = "Failure Classification"
    WORK_ORDER_MANAGEMENT = "Work Order Management"
    DOCUMENTATION = "Documentation"
    PROCESS_DOCUMENTATION = "Process Documentation"
    CRITICALITY_ASSESSMENT = "Criticality Assessment"
    VISUAL_MANAGEMENT = "Visual Management"
    SAFETY = "Safety"
    RCA_PROCESS = "RCA Process"
    CONTINUOUS_IMPROVEMENT = "Continuous Improvement"
    PM_STRATEGY = "PM Strategy"
    PM_EXECUTION = "PM Execution"
    PM_OPTIMIZATION = "PM Optimization"
    INVENTORY_MANAGEMENT = "Inventory Management"
    STOREROOM_MANAGEMENT = "Storeroom Management"
    STOREROOM_OPERATIONS = "Storeroom Operations"
    MAINTENANCE_SKILLS = "Maintenance Skills"
    PERFORMANCE_MANAGEMENT = "Performance Management"
    PLANNING_AND_SCHEDULING = "Planning & Scheduling"
    WORK_SCHEDULING = "Work Scheduling"
    BACKLOG_MANAGEMENT = "Backlog Management"
    FIVE_S_STANDARDS = "5S Standards"
    UNCATEGORIZED = "Uncategorized"

    @classmethod
    def from_label(cls, label: str | None) -> "AssessmentCategory":
        try:
            return cls(label)
        except ValueError:
            return cls.UNCATEGORIZED


# ═════════════════════════════════════════════════════════════════════════════
# Numeric helpers
# ═════════════════════════════════════════════════════════════════════════════

def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (not banker's rounding).

    Percentages shown in the wizard have always been rounded this way;
    ``round(50.5)`` would give 50 where the UI expects 51.
    """
    return int(math.floor(value + 0.5))


def clamp_score(score: float, possible: float) -> float:
    """Clamp an achieved score into [0, possible]."""
    return min(max(0, score), possible)


def percentage(part: float, whole: float) -> int:
    if not whole:
        return 0
    return round_half_up(100 * part / whole)


# ═════════════════════════════════════════════════════════════════════════════
# Data classes
# ═════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class AssessmentItem:
    """One scorecard element with its current score.

    ``actual_score`` is clamped into [0, possible_score] on construction,
    so every AssessmentItem in the system already satisfies the invariant.
    """
    id: str
    activity_code: str
    description: str
    possible_score: int
    actual_score: float = 0
    category: str = ""
    comments: str = ""
    activity_name: str = ""
    element_number: int = 0
    scoring_guide: str = ""

    def __post_init__(self):
        object.__setattr__(self, "actual_score", clamp_score(self.actual_score, self.possible_score))

    @property
    def gap(self) -> float:
        return self.possible_score - self.actual_score

    @property
    def category_key(self) -> AssessmentCategory:
        return AssessmentCategory.from_label(self.category)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "activity_code": self.activity_code,
            "activity_name": self.activity_name,
            "element_number": self.element_number,
            "description": self.description,
            "possible_score": self.possible_score,
            "actual_score": self.actual_score,
            "comments": self.comments,
            "category": self.category,
            "scoring_guide": self.scoring_guide,
        }


@dataclass(frozen=True)
class ImprovementAction:
    """A corrective action derived from one assessment gap. Never edited directly."""
    id: str
    phase: int
    priority: Priority
    action: str
    rationale: str
    source_item_id: str
    category: str
    gap: float = 0

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "phase": self.phase,
            "priority": self.priority.value,
            "action": self.action,
            "rationale": self.rationale,
            "source_item_id": self.source_item_id,
            "category": self.category,
            "gap": self.gap,
        }


@dataclass
class AssessmentHeader:
    """Descriptive fields of a scorecard submission; carried through untouched."""
    plant_name: str = ""
    assessor_name: str = ""
    assessment_date: str = ""
    extra: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "plant_name": self.plant_name,
            "assessor_name": self.assessor_name,
            "assessment_date": self.assessment_date,
            **self.extra,
        }


# ═════════════════════════════════════════════════════════════════════════════
# Parsing & validation
# ═════════════════════════════════════════════════════════════════════════════

def _pick(data: dict, *keys: str, default: Any = None) -> Any:
    """First present key wins; stored payloads may be snake_case or camelCase."""
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


def _number(value: Any, field_name: str, item_id: str) -> float:
    if isinstance(value, bool) or not isinstance(value, Real) or not math.isfinite(value):
        raise ValidationError(
            f"Assessment item {item_id}: {field_name} must be a number",
            details={"item_id": item_id, "field": field_name},
        )
    return value


def _integer(value: Any, field_name: str, item_id: str) -> int:
    if value in (None, ""):
        return 0
    if isinstance(value, bool):
        value = None
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        raise ValidationError(
            f"Assessment item {item_id}: {field_name} must be an integer",
            details={"item_id": item_id, "field": field_name},
        ) from None


def parse_assessment_item(data: dict) -> AssessmentItem:
    """Build an AssessmentItem from a stored or submitted dict.

    Wrong types are rejected; out-of-range scores are clamped, not rejected.
    """
    if not isinstance(data, dict):
        raise ValidationError("Assessment item must be an object")

    item_id = _pick(data, "id")
    if not isinstance(item_id, str) or not item_id.strip():
        raise ValidationError("Assessment item id must be a non-empty string", details={"field": "id"})

    possible = _number(_pick(data, "possible_score", "possibleScore", "max_score"), "possible_score", item_id)
    if possible < 0:
        raise ValidationError(
            f"Assessment item {item_id}: possible_score must not be negative",
            details={"item_id": item_id, "field": "possible_score"},
        )
    actual = _number(_pick(data, "actual_score", "actualScore", default=0), "actual_score", item_id)

    return AssessmentItem(
        id=item_id,
        activity_code=str(_pick(data, "activity_code", "activityCode", default="")),
        activity_name=str(_pick(data, "activity_name", "activityName", default="")),
        element_number=_integer(_pick(data, "element_number", "elementNumber"), "element_number", item_id),
        description=str(_pick(data, "description", default="")),
        possible_score=int(possible) if float(possible).is_integer() else possible,
        actual_score=actual,
        comments=str(_pick(data, "comments", default="")),
        category=str(_pick(data, "category", default="")),
        scoring_guide=str(_pick(data, "scoring_guide", "scoringGuide", default="")),
    )


def parse_assessment_items(raw_items: Any) -> list[AssessmentItem]:
    """Parse a list of item dicts, preserving order and rejecting duplicate ids."""
    if not isinstance(raw_items, list):
        raise ValidationError("items must be an array", details={"field": "items"})

    items = [parse_assessment_item(raw) for raw in raw_items]

    seen: set[str] = set()
    duplicates = []
    for item in items:
        if item.id in seen:
            duplicates.append(item.id)
        seen.add(item.id)
    if duplicates:
        raise ValidationError(
            "Assessment item ids must be unique",
            details={"duplicate_ids": sorted(set(duplicates))},
        )
    return items


def parse_assessment_header(payload: dict) -> AssessmentHeader:
    return AssessmentHeader(
        plant_name=str(_pick(payload, "plant_name", "plantName", default="")),
        assessor_name=str(_pick(payload, "assessor_name", "assessorName", default="")),
        assessment_date=str(_pick(payload, "assessment_date", "assessmentDate", default="")),
    )


# ═════════════════════════════════════════════════════════════════════════════
# Scoring
# ═════════════════════════════════════════════════════════════════════════════

def score_summary(items: Iterable[AssessmentItem]) -> dict:
    """Totals for an assessment: sums of achieved/possible and the rounded percentage.

    An empty assessment reports 0 / 0 / 0%.
    """
    items = list(items)
    total = sum(item.actual_score for item in items)
    maximum = sum(item.possible_score for item in items)
    return {
        "total_score": total,
        "max_score": maximum,
        "percentage_score": percentage(total, maximum),
    }
