"""Tests for the assessment-to-action engine.

Coverage:
  1. detect_gaps keeps exactly the items scored below their maximum, in order
  2. Phase routing by activity code (unknown codes → phase 1)
  3. Priority from possible score only
  4. Action text: category templates, generic fallback, gap formatting
  5. Deterministic action ids
  6. Stable prioritization by (priority, phase)
  7. Assessment record totals, including the empty assessment
  8. Clamping and validation of submitted items
"""

import pytest

from maintenancehub.core.exceptions import ValidationError
from maintenancehub.services.action_engine import (
    DEFAULT_PHASE,
    action_id_for,
    action_text,
    actions_for_phase,
    assign_phase,
    assign_priority,
    build_assessment_record,
    detect_gaps,
    format_gap,
    generate_action,
    generate_improvement_actions,
    prioritize_actions,
    scoped_action_key,
    summarize_actions,
)
from maintenancehub.services.assessment_model import (
    AssessmentHeader,
    AssessmentItem,
    ImprovementAction,
    Priority,
    parse_assessment_items,
    score_summary,
)
from maintenancehub.services.program_catalog import default_assessment_items


def _make_item(item_id="1.1.1", possible=2, actual=0, code="1.1",
               category="Equipment Records", description="Equipment records exist") -> AssessmentItem:
    return AssessmentItem(
        id=item_id,
        activity_code=code,
        description=description,
        possible_score=possible,
        actual_score=actual,
        category=category,
    )


def _make_action(action_id, priority, phase) -> ImprovementAction:
    return ImprovementAction(
        id=action_id, phase=phase, priority=priority, action="do it",
        rationale="", source_item_id=action_id, category="",
    )


class TestDetectGaps:
    """Only items with achieved < possible are gaps."""

    def test_full_score_is_not_a_gap(self):
        assert detect_gaps([_make_item(possible=4, actual=4)]) == []

    def test_fractional_shortfall_is_a_gap(self):
        item = _make_item(possible=2, actual=1.9)
        assert detect_gaps([item]) == [item]

    def test_input_order_preserved(self):
        a = _make_item("a", actual=0)
        b = _make_item("b", actual=2)
        c = _make_item("c", actual=1)
        assert [i.id for i in detect_gaps([a, b, c])] == ["a", "c"]

    def test_action_count_matches_gap_count(self):
        items = [
            _make_item("a", possible=8, actual=8),
            _make_item("b", possible=8, actual=3),
            _make_item("c", possible=4, actual=0),
            _make_item("d", possible=2, actual=2),
            _make_item("e", possible=2, actual=0.5),
        ]
        actions = generate_improvement_actions(items)
        assert len(actions) == 3
        assert {a.source_item_id for a in actions} == {"b", "c", "e"}

    def test_no_action_references_fully_scored_item(self):
        items = [_make_item("full", possible=4, actual=4), _make_item("gap", possible=4, actual=1)]
        actions = generate_improvement_actions(items)
        assert all(a.source_item_id != "full" for a in actions)


class TestPhaseAndPriority:
    """Routing tables."""

    @pytest.mark.parametrize("code,phase", [
        ("1.1", 1), ("1.2", 1), ("1.3", 2), ("1.4", 4), ("1.5", 3), ("1.6", 5),
    ])
    def test_activity_code_routing(self, code, phase):
        assert assign_phase(code) == phase

    def test_unknown_activity_code_defaults_to_phase_1(self):
        assert assign_phase("9.9") == DEFAULT_PHASE == 1
        assert assign_phase("") == 1
        assert assign_phase(None) == 1

    @pytest.mark.parametrize("possible,priority", [
        (8, Priority.CRITICAL), (10, Priority.CRITICAL),
        (4, Priority.HIGH), (7, Priority.HIGH),
        (2, Priority.MEDIUM), (3.9, Priority.MEDIUM), (0, Priority.MEDIUM),
    ])
    def test_priority_from_possible_score(self, possible, priority):
        assert assign_priority(possible) == priority

    def test_priority_ignores_gap_size(self):
        small_gap = generate_action(_make_item(possible=8, actual=7.5))
        large_gap = generate_action(_make_item(possible=2, actual=0))
        assert small_gap.priority == Priority.CRITICAL
        assert large_gap.priority == Priority.MEDIUM


class TestActionText:
    """Template lookup and gap rendering."""

    def test_whole_gap_renders_without_decimal(self):
        assert format_gap(8) == "8"
        assert format_gap(8.0) == "8"

    def test_fractional_gap_renders_shortest_form(self):
        assert format_gap(0.5) == "0.5"
        assert format_gap(1.5) == "1.5"

    def test_category_template_embeds_gap(self):
        text = action_text(_make_item(category="RCA Process"), 4)
        assert text.startswith("Establish formal RCA process")
        assert "(current gap: 4 points)" in text

    def test_unknown_category_uses_generic_text(self):
        item = _make_item(category="Drone Inspections", description="x" * 150)
        text = action_text(item, 2)
        assert text == f"Address gap in Drone Inspections: {'x' * 100}... (gap: 2 points)"

    def test_known_category_without_template_uses_generic_text(self):
        item = _make_item(category="Planning & Scheduling", description="Work is planned")
        assert action_text(item, 0.5) == "Address gap in Planning & Scheduling: Work is planned... (gap: 0.5 points)"

    def test_action_fields(self):
        item = _make_item("1.4.2", possible=8, actual=2, code="1.4",
                          category="PM Strategy", description="PM strategy exists")
        action = generate_action(item)
        assert action.id == "action-1.4.2"
        assert action.phase == 4
        assert action.priority == Priority.CRITICAL
        assert action.rationale == "PM strategy exists"
        assert action.source_item_id == "1.4.2"
        assert action.category == "PM Strategy"
        assert action.gap == 6


class TestActionIds:
    """Ids are derived from the item id only."""

    def test_regeneration_yields_same_ids(self):
        items = default_assessment_items()
        first = [a.id for a in generate_improvement_actions(items)]
        second = [a.id for a in generate_improvement_actions(items)]
        assert first == second

    def test_action_id_prefix(self):
        assert action_id_for("1.2.3") == "action-1.2.3"

    def test_scoped_key_distinguishes_engagements(self):
        assert scoped_action_key("client-a", "action-1.1.1") != scoped_action_key("client-b", "action-1.1.1")
        assert scoped_action_key(None, "action-1.1.1") == "tenant:action-1.1.1"


class TestPrioritizeActions:
    """Critical first, then phase ascending, ties stable."""

    def test_sorted_by_priority_then_phase(self):
        actions = [
            _make_action("m1", Priority.MEDIUM, 1),
            _make_action("h5", Priority.HIGH, 5),
            _make_action("c4", Priority.CRITICAL, 4),
            _make_action("h2", Priority.HIGH, 2),
            _make_action("c1", Priority.CRITICAL, 1),
        ]
        assert [a.id for a in prioritize_actions(actions)] == ["c1", "c4", "h2", "h5", "m1"]

    def test_ties_keep_generation_order(self):
        actions = [
            _make_action("first", Priority.HIGH, 3),
            _make_action("second", Priority.HIGH, 3),
            _make_action("third", Priority.HIGH, 3),
        ]
        assert [a.id for a in prioritize_actions(actions)] == ["first", "second", "third"]

    def test_default_scorecard_ordering_invariant(self):
        actions = generate_improvement_actions(default_assessment_items())
        keys = [(a.priority.rank, a.phase) for a in actions]
        assert keys == sorted(keys)
        assert len(actions) == 23

    def test_actions_for_phase_filters(self):
        actions = generate_improvement_actions(default_assessment_items())
        phase_4 = actions_for_phase(actions, 4)
        assert phase_4
        assert all(a.phase == 4 for a in phase_4)

    def test_summarize_actions_counts(self):
        actions = [
            _make_action("a", Priority.CRITICAL, 1),
            _make_action("b", Priority.HIGH, 1),
            _make_action("c", Priority.HIGH, 4),
        ]
        summary = summarize_actions(actions)
        assert summary["total"] == 3
        assert summary["by_priority"] == {"critical": 1, "high": 2, "medium": 0}
        assert summary["by_phase"] == {1: 2, 2: 0, 3: 0, 4: 1, 5: 0, 6: 0}


class TestAssessmentRecord:
    """Score totals and the phase-0 record."""

    def test_two_item_scenario(self):
        items = [
            _make_item("crit", possible=8, actual=0, category="Safety"),
            _make_item("done", possible=2, actual=2),
        ]
        record = build_assessment_record(items)

        assert len(record["improvement_actions"]) == 1
        action = record["improvement_actions"][0]
        assert action["priority"] == "critical"
        assert action["gap"] == 8
        assert "(current gap: 8 points)" in action["action"]
        assert record["total_score"] == 2
        assert record["max_score"] == 10
        assert record["percentage_score"] == 20

    def test_empty_assessment(self):
        assert score_summary([]) == {"total_score": 0, "max_score": 0, "percentage_score": 0}
        record = build_assessment_record([])
        assert record["improvement_actions"] == []
        assert record["percentage_score"] == 0

    def test_percentage_rounds_half_up(self):
        # 1 of 8 = 12.5% → 13
        assert score_summary([_make_item(possible=8, actual=1)])["percentage_score"] == 13

    def test_header_and_client_carried(self):
        header = AssessmentHeader(plant_name="Mill 2", assessor_name="R. Diaz", assessment_date="2026-10-01")
        record = build_assessment_record([], header, client_company_id="client-9")
        assert record["plant_name"] == "Mill 2"
        assert record["assessor_name"] == "R. Diaz"
        assert record["client_company_id"] == "client-9"

    def test_rescored_item_loses_its_action(self):
        before = build_assessment_record([_make_item("x", possible=4, actual=1)])
        after = build_assessment_record([_make_item("x", possible=4, actual=4)])
        assert len(before["improvement_actions"]) == 1
        assert after["improvement_actions"] == []


class TestItemParsing:
    """Submitted items are clamped, typed and de-duplicated."""

    def test_out_of_range_scores_are_clamped(self):
        items = parse_assessment_items([
            {"id": "a", "activity_code": "1.1", "possible_score": 4, "actual_score": 9},
            {"id": "b", "activity_code": "1.1", "possible_score": 4, "actual_score": -3},
        ])
        assert items[0].actual_score == 4
        assert items[1].actual_score == 0
        assert detect_gaps(items) == [items[1]]

    def test_camel_case_keys_accepted(self):
        items = parse_assessment_items([
            {"id": "a", "activityCode": "1.5", "possibleScore": 8, "actualScore": 2, "category": "Safety"},
        ])
        assert items[0].activity_code == "1.5"
        assert items[0].possible_score == 8
        assert generate_action(items[0]).phase == 3

    def test_missing_actual_score_defaults_to_zero(self):
        items = parse_assessment_items([{"id": "a", "possible_score": 2}])
        assert items[0].actual_score == 0

    def test_non_numeric_score_rejected(self):
        with pytest.raises(ValidationError):
            parse_assessment_items([{"id": "a", "possible_score": 2, "actual_score": "two"}])

    def test_non_numeric_element_number_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_assessment_items([{"id": "a", "possible_score": 2, "element_number": "x"}])
        assert exc_info.value.details == {"item_id": "a", "field": "element_number"}

    def test_element_number_accepts_numeric_text(self):
        items = parse_assessment_items([
            {"id": "a", "possible_score": 2, "elementNumber": "7"},
            {"id": "b", "possible_score": 2, "element_number": ""},
        ])
        assert [item.element_number for item in items] == [7, 0]

    def test_duplicate_ids_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_assessment_items([
                {"id": "a", "possible_score": 2},
                {"id": "a", "possible_score": 4},
            ])
        assert exc_info.value.details["duplicate_ids"] == ["a"]

    def test_items_must_be_a_list(self):
        with pytest.raises(ValidationError):
            parse_assessment_items({"id": "a"})
