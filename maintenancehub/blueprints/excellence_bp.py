"""Path to Excellence blueprint.

REST API for the Path to Excellence program: the phase catalog, per-subject
progress and phase lifecycle, the process assessment with its generated
improvement actions, and client engagements.

Endpoint groups:
  Catalog            GET  /api/v1/excellence/catalog
                     GET  /api/v1/excellence/assessment/template
  Progress           GET  /api/v1/excellence/progress
                     POST /api/v1/excellence/phases/<n>/checklist/<item_id>/toggle
                     PUT  /api/v1/excellence/phases/<n>/notes
                     POST /api/v1/excellence/phases/<n>/complete
                     POST /api/v1/excellence/phases/<n>/uncomplete
  Assessment         GET/POST /api/v1/excellence/assessment
                     GET  /api/v1/excellence/phases/<n>/actions
  Deliverables       GET/POST   /api/v1/excellence/deliverables
                     PUT/DELETE /api/v1/excellence/deliverables/<id>
  Client companies   GET/POST   /api/v1/excellence/client-companies
                     PUT/DELETE /api/v1/excellence/client-companies/<id>

tenant_id and client_company_id are resolved from query param or JSON body.
Mutating progress endpoints accept an optional expected_version.
Service layer owns all business logic and commits.
"""

from __future__ import annotations

import logging

from flask import Blueprint, jsonify, request
from werkzeug.exceptions import HTTPException

import maintenancehub.services.excellence_service as svc
from maintenancehub.core.exceptions import (
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
    PhaseIncompleteError,
    StaleRecordError,
    ValidationError,
)
from maintenancehub.services.program_catalog import (
    PROGRAM_PHASES,
    default_assessment_items,
)
from maintenancehub.utils.errors import E, api_error

logger = logging.getLogger(__name__)

excellence_bp = Blueprint("excellence", __name__, url_prefix="/api/v1/excellence")


# ── Request helpers ───────────────────────────────────────────────────────────


def _body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _tenant_id() -> int | None:
    """Extract tenant_id from query string or JSON body."""
    tid = request.args.get("tenant_id", type=int)
    if tid:
        return tid
    value = _body().get("tenant_id")
    if isinstance(value, int) and not isinstance(value, bool):
        return value or None
    return None


def _tenant_required() -> tuple[int | None, tuple | None]:
    tid = _tenant_id()
    if not tid:
        return None, api_error(E.VALIDATION_REQUIRED, "tenant_id is required")
    return tid, None


def _client_company_id() -> str | None:
    value = request.args.get("client_company_id") or _body().get("client_company_id")
    return str(value) if value else None


def _expected_version() -> tuple[int | None, tuple | None]:
    raw = request.args.get("expected_version")
    if raw is None:
        raw = _body().get("expected_version")
    if raw is None:
        return None, None
    if isinstance(raw, bool):
        return None, api_error(E.VALIDATION_INVALID, "expected_version must be an integer")
    try:
        return int(raw), None
    except (TypeError, ValueError):
        return None, api_error(E.VALIDATION_INVALID, "expected_version must be an integer")


# ── Error handlers ────────────────────────────────────────────────────────────


@excellence_bp.errorhandler(NotFoundError)
def _handle_not_found(error: NotFoundError):
    return api_error(E.NOT_FOUND, f"{error.resource} not found")


@excellence_bp.errorhandler(PhaseIncompleteError)
def _handle_phase_incomplete(error: PhaseIncompleteError):
    return api_error(E.PHASE_INCOMPLETE, str(error), details=error.details)


@excellence_bp.errorhandler(ValidationError)
def _handle_validation(error: ValidationError):
    return api_error(E.VALIDATION_CONSTRAINT, str(error), details=error.details)


@excellence_bp.errorhandler(ConflictError)
def _handle_conflict(error: ConflictError):
    return api_error(E.CONFLICT_DUPLICATE, str(error), details={"field": error.field})


@excellence_bp.errorhandler(InvalidTransitionError)
def _handle_invalid_transition(error: InvalidTransitionError):
    return api_error(
        E.CONFLICT_STATE, str(error),
        details={"action": error.action, "current_state": error.current_state},
    )


@excellence_bp.errorhandler(StaleRecordError)
def _handle_stale(error: StaleRecordError):
    return api_error(
        E.CONFLICT_VERSION, str(error),
        details={"expected_version": error.expected, "current_version": error.actual},
    )


@excellence_bp.errorhandler(Exception)
def _handle_unexpected(error: Exception):
    if isinstance(error, HTTPException):
        return error
    logger.exception("Unexpected error in excellence_bp endpoint=%s", request.endpoint)
    return api_error(E.INTERNAL, "Internal server error")


# ═════════════════════════════════════════════════════════════════════════
# Catalog
# ═════════════════════════════════════════════════════════════════════════


@excellence_bp.route("/catalog", methods=["GET"])
def get_catalog():
    """Return the program phases 0–6 with their checklists.

    Query params: include_checklist (default true)
    """
    include = request.args.get("include_checklist", "true").lower() != "false"
    return jsonify({"phases": [p.to_dict(include_checklist=include) for p in PROGRAM_PHASES]}), 200


@excellence_bp.route("/assessment/template", methods=["GET"])
def get_assessment_template():
    """Return the unscored 23-element Maintenance Process Assessment."""
    items = default_assessment_items()
    return jsonify({
        "items": [item.to_dict() for item in items],
        "max_score": sum(item.possible_score for item in items),
    }), 200


# ═════════════════════════════════════════════════════════════════════════
# Progress & phase lifecycle
# ═════════════════════════════════════════════════════════════════════════


@excellence_bp.route("/progress", methods=["GET"])
def get_progress():
    """Return the subject's program progress (created on first read).

    Query params: tenant_id (required), client_company_id
    """
    tenant_id, err = _tenant_required()
    if err:
        return err
    return jsonify(svc.get_progress(tenant_id, _client_company_id())), 200


@excellence_bp.route("/phases/<int:phase>/checklist/<item_id>/toggle", methods=["POST"])
def toggle_checklist_item(phase: int, item_id: str):
    """Flip one checklist answer.

    Body: { tenant_id, client_company_id?, done?, expected_version? }
    ``done`` sets the answer explicitly instead of flipping it.
    """
    tenant_id, err = _tenant_required()
    if err:
        return err
    expected_version, err = _expected_version()
    if err:
        return err
    done = _body().get("done")
    if done is not None and not isinstance(done, bool):
        return api_error(E.VALIDATION_INVALID, "done must be a boolean")

    result = svc.toggle_checklist_item(
        tenant_id, phase, item_id,
        client_company_id=_client_company_id(),
        done=done,
        expected_version=expected_version,
    )
    return jsonify(result), 200


@excellence_bp.route("/phases/<int:phase>/notes", methods=["PUT"])
def update_notes(phase: int):
    """Replace a phase's notes.

    Body: { tenant_id, notes, client_company_id?, expected_version? }
    """
    tenant_id, err = _tenant_required()
    if err:
        return err
    expected_version, err = _expected_version()
    if err:
        return err
    notes = _body().get("notes")
    if notes is None:
        return api_error(E.VALIDATION_REQUIRED, "notes is required")
    if not isinstance(notes, str):
        return api_error(E.VALIDATION_INVALID, "notes must be a string")

    result = svc.update_notes(
        tenant_id, phase, notes,
        client_company_id=_client_company_id(),
        expected_version=expected_version,
    )
    return jsonify(result), 200


@excellence_bp.route("/phases/<int:phase>/complete", methods=["POST"])
def complete_phase(phase: int):
    """Mark a phase complete. 422 ERR_PHASE_INCOMPLETE while the checklist is below 100%."""
    tenant_id, err = _tenant_required()
    if err:
        return err
    expected_version, err = _expected_version()
    if err:
        return err
    result = svc.complete_phase(
        tenant_id, phase,
        client_company_id=_client_company_id(),
        expected_version=expected_version,
    )
    return jsonify(result), 200


@excellence_bp.route("/phases/<int:phase>/uncomplete", methods=["POST"])
def uncomplete_phase(phase: int):
    """Reopen a completed phase. 409 ERR_CONFLICT_STATE if it is not completed."""
    tenant_id, err = _tenant_required()
    if err:
        return err
    expected_version, err = _expected_version()
    if err:
        return err
    result = svc.uncomplete_phase(
        tenant_id, phase,
        client_company_id=_client_company_id(),
        expected_version=expected_version,
    )
    return jsonify(result), 200


# ═════════════════════════════════════════════════════════════════════════
# Assessment & improvement actions
# ═════════════════════════════════════════════════════════════════════════


@excellence_bp.route("/assessment", methods=["POST"])
def save_assessment():
    """Save the scored process assessment and regenerate improvement actions.

    Body: {
        tenant_id, items: [...], client_company_id?,
        plant_name?, assessor_name?, assessment_date?
    }
    Returns: deliverable dict with payload {items, improvement_actions, total_score, ...}
    """
    tenant_id, err = _tenant_required()
    if err:
        return err
    data = _body()
    if "items" not in data:
        return api_error(E.VALIDATION_REQUIRED, "items is required")
    if not isinstance(data["items"], list):
        return api_error(E.VALIDATION_INVALID, "items must be an array")

    result = svc.save_assessment(tenant_id, data, client_company_id=_client_company_id())
    return jsonify(result), 200


@excellence_bp.route("/assessment", methods=["GET"])
def get_assessment():
    """Return the subject's assessment, or {"assessment": null} if none was saved."""
    tenant_id, err = _tenant_required()
    if err:
        return err
    return jsonify({"assessment": svc.get_assessment(tenant_id, _client_company_id())}), 200


@excellence_bp.route("/phases/<int:phase>/actions", methods=["GET"])
def get_phase_actions(phase: int):
    """Return the prioritized improvement actions routed to phase n (1–6)."""
    tenant_id, err = _tenant_required()
    if err:
        return err
    return jsonify(svc.get_phase_actions(tenant_id, phase, _client_company_id())), 200


# ═════════════════════════════════════════════════════════════════════════
# Deliverables
# ═════════════════════════════════════════════════════════════════════════


@excellence_bp.route("/deliverables", methods=["GET"])
def list_deliverables():
    """List the subject's deliverables.

    Query params: tenant_id (required), client_company_id, phase
    """
    tenant_id, err = _tenant_required()
    if err:
        return err
    phase = request.args.get("phase")
    if phase is not None:
        try:
            phase = int(phase)
        except ValueError:
            return api_error(E.VALIDATION_INVALID, "phase must be an integer")
    items = svc.list_deliverables(tenant_id, _client_company_id(), phase=phase)
    return jsonify({"items": items, "total": len(items)}), 200


@excellence_bp.route("/deliverables", methods=["POST"])
def create_deliverable():
    """Create a form deliverable for one checklist item.

    Body: {
        tenant_id, phase, checklist_item_id, client_company_id?,
        deliverable_type?, title?, description?, payload?, is_complete?, completed_at?
    }
    Returns: created deliverable dict (201). 409 if the subject already has one
    for the same (phase, checklist_item_id, deliverable_type).
    """
    tenant_id, err = _tenant_required()
    if err:
        return err
    data = _body()
    if "phase" not in data:
        return api_error(E.VALIDATION_REQUIRED, "phase is required")
    if isinstance(data["phase"], bool) or not isinstance(data["phase"], int):
        return api_error(E.VALIDATION_INVALID, "phase must be an integer")
    if not data.get("checklist_item_id"):
        return api_error(E.VALIDATION_REQUIRED, "checklist_item_id is required")

    return jsonify(svc.create_deliverable(tenant_id, data, client_company_id=_client_company_id())), 201


@excellence_bp.route("/deliverables/<deliverable_id>", methods=["PUT"])
def update_deliverable(deliverable_id: str):
    """Update a deliverable.

    Body: { tenant_id, title?, description?, payload?, is_complete?, completed_at? }
    """
    tenant_id, err = _tenant_required()
    if err:
        return err
    return jsonify(svc.update_deliverable(tenant_id, deliverable_id, _body())), 200


@excellence_bp.route("/deliverables/<deliverable_id>", methods=["DELETE"])
def delete_deliverable(deliverable_id: str):
    tenant_id, err = _tenant_required()
    if err:
        return err
    svc.delete_deliverable(tenant_id, deliverable_id)
    return "", 204


# ═════════════════════════════════════════════════════════════════════════
# Client companies
# ═════════════════════════════════════════════════════════════════════════


@excellence_bp.route("/client-companies", methods=["GET"])
def list_client_companies():
    tenant_id, err = _tenant_required()
    if err:
        return err
    items = svc.list_client_companies(tenant_id)
    return jsonify({"items": items, "total": len(items)}), 200


@excellence_bp.route("/client-companies", methods=["POST"])
def create_client_company():
    """Create a client engagement.

    Body: { tenant_id, name, industry?, location?, contact_name?, contact_email?, notes? }
    Returns: created client dict (201).
    """
    tenant_id, err = _tenant_required()
    if err:
        return err
    data = _body()
    name = data.get("name")
    if not isinstance(name, str) or not name.strip():
        return api_error(E.VALIDATION_REQUIRED, "name is required")
    if len(name) > 255:
        return api_error(E.VALIDATION_INVALID, "name must be ≤ 255 characters")

    return jsonify(svc.create_client_company(tenant_id, data)), 201


@excellence_bp.route("/client-companies/<client_company_id>", methods=["PUT"])
def update_client_company(client_company_id: str):
    """Update a client engagement. Only the submitted fields change.

    Body: { tenant_id, name?, industry?, location?, contact_name?, contact_email?, notes? }
    """
    tenant_id, err = _tenant_required()
    if err:
        return err
    data = _body()
    name = data.get("name")
    if isinstance(name, str) and len(name) > 255:
        return api_error(E.VALIDATION_INVALID, "name must be ≤ 255 characters")

    return jsonify(svc.update_client_company(tenant_id, client_company_id, data)), 200


@excellence_bp.route("/client-companies/<client_company_id>", methods=["DELETE"])
def delete_client_company(client_company_id: str):
    """Delete a client engagement with its progress and deliverables. Returns 204."""
    tenant_id, err = _tenant_required()
    if err:
        return err
    svc.delete_client_company(tenant_id, client_company_id)
    return "", 204
