"""Path to Excellence service layer.

Loads progress and deliverable rows, runs the pure engine modules
(action_engine, progress_tracker, phase_lifecycle) and writes the returned
records back.

Rules:
  - tenant_id is always an explicit parameter (never from g).
  - client_company_id is optional; None means the tenant's own program.
    Each (tenant, client) pair has its own independent progress record.
  - db.session.commit() happens only in this file.
  - Stored percentages are never trusted; they are recomputed from the
    program catalog on every load.
  - Writes accept an optional expected_version. When given and stale,
    StaleRecordError is raised and nothing is written.
  - Progress UPDATEs are conditional on the version that was loaded. A
    concurrent commit in between is a StaleRecordError when the caller sent
    expected_version, otherwise the write is re-applied on the fresh row.
  - Lazy inserts that lose a race against a unique index re-select the
    row the other request created.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm.exc import StaleDataError

from maintenancehub.core.exceptions import (
    ConflictError,
    NotFoundError,
    StaleRecordError,
    ValidationError,
)
from maintenancehub.models import db
from maintenancehub.models.excellence import (
    ClientCompany,
    ExcellenceDeliverable,
    ExcellenceProgress,
)
from maintenancehub.services import action_engine, phase_lifecycle
from maintenancehub.services.assessment_model import (
    parse_assessment_header,
    parse_assessment_items,
)
from maintenancehub.services.program_catalog import (
    ASSESSMENT_CHECKLIST_ITEM,
    ASSESSMENT_PHASE,
    PROCESS_ASSESSMENT,
    PROGRAM_PHASES,
    IMPLEMENTATION_PHASES,
    validate_phase_number,
)
from maintenancehub.services.progress_tracker import (
    ProgramProgress,
    calculate_total_task_progress,
    count_completed_phases,
    count_completed_tasks,
    implementation_stage,
    overall_progress,
    refresh_progress,
)

logger = logging.getLogger(__name__)

_WRITE_ATTEMPTS = 3


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ── Scope helpers ─────────────────────────────────────────────────────────────


def _require_client(tenant_id: int, client_company_id: str | None) -> ClientCompany | None:
    """Resolve the client engagement, or raise NotFoundError if it is not the tenant's."""
    if not client_company_id:
        return None
    client = db.session.execute(
        select(ClientCompany).where(
            ClientCompany.id == client_company_id,
            ClientCompany.tenant_id == tenant_id,
        )
    ).scalar_one_or_none()
    if client is None:
        raise NotFoundError(resource="ClientCompany", resource_id=client_company_id, tenant_id=tenant_id)
    return client


def _find_progress_row(tenant_id: int, client_company_id: str | None) -> ExcellenceProgress | None:
    stmt = select(ExcellenceProgress).where(ExcellenceProgress.tenant_id == tenant_id)
    if client_company_id:
        stmt = stmt.where(ExcellenceProgress.client_company_id == client_company_id)
    else:
        stmt = stmt.where(ExcellenceProgress.client_company_id.is_(None))
    return db.session.execute(stmt).scalar_one_or_none()


def _progress_row(tenant_id: int, client_company_id: str | None) -> ExcellenceProgress:
    """Load the subject's progress row, creating it on first access.

    Must be called before anything else is pending in the session: a lost
    insert race rolls the session back.
    """
    _require_client(tenant_id, client_company_id)
    row = _find_progress_row(tenant_id, client_company_id)
    if row is not None:
        return row

    program = ProgramProgress()
    row = ExcellenceProgress(
        tenant_id=tenant_id,
        client_company_id=client_company_id or None,
        current_phase=program.current_phase,
        phases=program.phases_to_dict(),
        version=0,
        started_at=_utcnow(),
    )
    db.session.add(row)
    try:
        db.session.flush()
    except IntegrityError:
        db.session.rollback()
        row = _find_progress_row(tenant_id, client_company_id)
        if row is None:
            raise
        logger.info("Excellence progress created concurrently tenant_id=%s client_company_id=%s",
                    tenant_id, client_company_id)
        return row
    logger.info("Excellence progress created tenant_id=%s client_company_id=%s",
                tenant_id, client_company_id)
    return row


def _load_program(row: ExcellenceProgress) -> ProgramProgress:
    program = ProgramProgress.from_record(
        row.phases,
        current_phase=row.current_phase,
        version=row.version,
        started_at=row.started_at,
        completed_at=row.completed_at,
    )
    return refresh_progress(program)


def _check_version(row: ExcellenceProgress, expected_version: int | None) -> None:
    if expected_version is not None and expected_version != row.version:
        raise StaleRecordError("ExcellenceProgress", expected=expected_version, actual=row.version)


def _store_program(row: ExcellenceProgress, program: ProgramProgress) -> None:
    row.phases = program.phases_to_dict()
    row.current_phase = program.current_phase
    row.completed_at = program.completed_at
    row.version = (row.version or 0) + 1


def _snapshot(row: ExcellenceProgress, program: ProgramProgress) -> dict:
    """Progress document returned to callers: stored fields plus every derived value."""
    completed_phases = count_completed_phases(program)
    completed_tasks, total_tasks = calculate_total_task_progress(
        [p for p in PROGRAM_PHASES if p.number in IMPLEMENTATION_PHASES], program,
    )
    phases = []
    for phase in PROGRAM_PHASES:
        record = program.phases[phase.number]
        done, total = count_completed_tasks(phase.checklist, record.checklist)
        phases.append({
            **record.to_dict(),
            "title": phase.title,
            "state": phase_lifecycle.phase_state(record).value,
            "available_transitions": phase_lifecycle.available_transitions(record),
            "completed_tasks": done,
            "total_tasks": total,
        })
    return {
        "id": row.id,
        "tenant_id": row.tenant_id,
        "client_company_id": row.client_company_id,
        "current_phase": program.current_phase,
        "version": row.version,
        "started_at": row.started_at.isoformat() if row.started_at else None,
        "completed_at": program.completed_at.isoformat() if program.completed_at else None,
        "overall_progress": overall_progress(program),
        "completed_phases": completed_phases,
        "stage": implementation_stage(completed_phases),
        "completed_tasks": completed_tasks,
        "total_tasks": total_tasks,
        "phases": phases,
    }


def _current_version(row_id: str) -> int | None:
    return db.session.execute(
        select(ExcellenceProgress.version).where(ExcellenceProgress.id == row_id)
    ).scalar_one_or_none()


def _apply(tenant_id: int, client_company_id: str | None, expected_version: int | None,
           transform, description: str) -> dict:
    """Load → transform → store → commit. ``transform`` maps ProgramProgress to ProgramProgress.

    The commit fails with StaleDataError when another writer committed after
    the load. With an expected_version that is reported as StaleRecordError;
    without one the transform is re-applied to the fresh row.
    """
    for attempt in range(1, _WRITE_ATTEMPTS + 1):
        row = _progress_row(tenant_id, client_company_id)
        row_id, loaded_version = row.id, row.version
        try:
            _check_version(row, expected_version)
            program = transform(_load_program(row))
            _store_program(row, program)
            db.session.commit()
        except StaleDataError:
            db.session.rollback()
            actual = _current_version(row_id)
            if expected_version is not None or attempt == _WRITE_ATTEMPTS:
                raise StaleRecordError(
                    "ExcellenceProgress",
                    expected=loaded_version if expected_version is None else expected_version,
                    actual=actual,
                ) from None
            logger.warning("Excellence %s lost a concurrent write, retrying "
                           "tenant_id=%s client_company_id=%s version=%s",
                           description, tenant_id, client_company_id, actual)
            continue
        except Exception:
            db.session.rollback()
            raise
        logger.info("Excellence %s tenant_id=%s client_company_id=%s version=%s",
                    description, tenant_id, client_company_id, row.version)
        return _snapshot(row, program)


# ── Progress ──────────────────────────────────────────────────────────────────


def get_progress(tenant_id: int, client_company_id: str | None = None) -> dict:
    """Return the subject's progress (created on first read) with recomputed percentages."""
    row = _progress_row(tenant_id, client_company_id)
    program = _load_program(row)
    db.session.commit()
    return _snapshot(row, program)


def toggle_checklist_item(
    tenant_id: int,
    phase: int,
    item_id: str,
    client_company_id: str | None = None,
    done: bool | None = None,
    expected_version: int | None = None,
) -> dict:
    """Flip one checklist answer (or set it when ``done`` is given).

    Raises:
        ValidationError: Unknown phase or checklist item.
        NotFoundError:   client_company_id is not one of the tenant's clients.
        StaleRecordError: expected_version does not match.
    """
    validate_phase_number(phase)
    return _apply(
        tenant_id, client_company_id, expected_version,
        lambda program: phase_lifecycle.toggle_checklist_item(program, phase, item_id, done),
        f"checklist phase={phase} item={item_id}",
    )


def update_notes(
    tenant_id: int,
    phase: int,
    notes: str,
    client_company_id: str | None = None,
    expected_version: int | None = None,
) -> dict:
    validate_phase_number(phase)
    return _apply(
        tenant_id, client_company_id, expected_version,
        lambda program: phase_lifecycle.set_notes(program, phase, notes),
        f"notes phase={phase}",
    )


def complete_phase(
    tenant_id: int,
    phase: int,
    client_company_id: str | None = None,
    expected_version: int | None = None,
) -> dict:
    """Mark a phase complete after re-validating its checklist.

    Raises:
        PhaseIncompleteError: Checklist is below 100%. Nothing is written.
        InvalidTransitionError: Phase is already completed.
    """
    validate_phase_number(phase)
    return _apply(
        tenant_id, client_company_id, expected_version,
        lambda program: phase_lifecycle.complete_phase(program, phase),
        f"phase {phase} completed",
    )


def uncomplete_phase(
    tenant_id: int,
    phase: int,
    client_company_id: str | None = None,
    expected_version: int | None = None,
) -> dict:
    """Reopen a completed phase; checklist answers are kept.

    Raises:
        InvalidTransitionError: Phase is not completed.
    """
    validate_phase_number(phase)
    return _apply(
        tenant_id, client_company_id, expected_version,
        lambda program: phase_lifecycle.uncomplete_phase(program, phase),
        f"phase {phase} reopened",
    )


# ── Assessment ────────────────────────────────────────────────────────────────


def _assessment_row(tenant_id: int, client_company_id: str | None) -> ExcellenceDeliverable | None:
    stmt = select(ExcellenceDeliverable).where(
        ExcellenceDeliverable.tenant_id == tenant_id,
        ExcellenceDeliverable.phase == ASSESSMENT_PHASE,
        ExcellenceDeliverable.checklist_item_id == ASSESSMENT_CHECKLIST_ITEM,
        ExcellenceDeliverable.deliverable_type == PROCESS_ASSESSMENT,
    )
    if client_company_id:
        stmt = stmt.where(ExcellenceDeliverable.client_company_id == client_company_id)
    else:
        stmt = stmt.where(ExcellenceDeliverable.client_company_id.is_(None))
    return db.session.execute(stmt).scalar_one_or_none()


def _assessment_payload(deliverable: ExcellenceDeliverable) -> dict:
    """Stored payload with actions and totals regenerated from the stored items."""
    payload = deliverable.payload or {}
    items = parse_assessment_items(payload.get("items") or [])
    header = parse_assessment_header(payload)
    return action_engine.build_assessment_record(items, header, deliverable.client_company_id)


def save_assessment(tenant_id: int, data: dict, client_company_id: str | None = None) -> dict:
    """Store the scored process assessment and regenerate its improvement actions.

    The whole action list is recomputed and replaces the stored one; an item
    re-scored to its maximum loses its action.

    Args:
        tenant_id:          Owning tenant.
        data:               {items: [...], plant_name?, assessor_name?, assessment_date?}
        client_company_id:  Optional client engagement.

    Returns:
        Serialized deliverable dict, payload included.

    Raises:
        ValidationError: items missing or malformed, duplicate item ids.
        NotFoundError:   client_company_id is not one of the tenant's clients.
    """
    if not isinstance(data, dict):
        raise ValidationError("Assessment must be an object")
    items = parse_assessment_items(data.get("items"))
    header = parse_assessment_header(data)

    record = action_engine.build_assessment_record(items, header, client_company_id)

    for attempt in range(1, _WRITE_ATTEMPTS + 1):
        row = _progress_row(tenant_id, client_company_id)
        deliverable = _assessment_row(tenant_id, client_company_id)
        is_new = deliverable is None
        if is_new:
            deliverable = ExcellenceDeliverable(
                tenant_id=tenant_id,
                client_company_id=client_company_id or None,
                phase=ASSESSMENT_PHASE,
                checklist_item_id=ASSESSMENT_CHECKLIST_ITEM,
                deliverable_type=PROCESS_ASSESSMENT,
                title="Maintenance Process Assessment",
            )
            db.session.add(deliverable)

        deliverable.progress_id = row.id
        deliverable.payload = record
        deliverable.is_complete = True
        deliverable.completed_at = _utcnow()
        try:
            db.session.commit()
        except IntegrityError:
            # Another request inserted the assessment first; update that row.
            db.session.rollback()
            if attempt == _WRITE_ATTEMPTS:
                raise
            continue
        break

    logger.info(
        "Process assessment %s tenant_id=%s client_company_id=%s score=%s/%s actions=%d",
        "created" if is_new else "updated",
        tenant_id, client_company_id,
        record["total_score"], record["max_score"], len(record["improvement_actions"]),
    )
    return deliverable.to_dict()


def get_assessment(tenant_id: int, client_company_id: str | None = None) -> dict | None:
    """Return the subject's assessment deliverable, or None if none was saved."""
    _require_client(tenant_id, client_company_id)
    deliverable = _assessment_row(tenant_id, client_company_id)
    if deliverable is None:
        return None
    result = deliverable.to_dict()
    result["payload"] = _assessment_payload(deliverable)
    return result


def get_phase_actions(tenant_id: int, phase: int, client_company_id: str | None = None) -> dict:
    """Prioritized improvement actions routed to one implementation phase.

    Returns an empty list when no assessment has been saved yet.
    """
    validate_phase_number(phase, allow_assessment=False)
    _require_client(tenant_id, client_company_id)
    deliverable = _assessment_row(tenant_id, client_company_id)
    if deliverable is None:
        return {"phase": phase, "actions": [], "summary": action_engine.summarize_actions([])}

    items = parse_assessment_items((deliverable.payload or {}).get("items") or [])
    actions = action_engine.generate_improvement_actions(items)
    phase_actions = action_engine.actions_for_phase(actions, phase)
    return {
        "phase": phase,
        "actions": [a.to_dict() for a in phase_actions],
        "summary": action_engine.summarize_actions(phase_actions),
    }


# ── Deliverables ──────────────────────────────────────────────────────────────


def list_deliverables(tenant_id: int, client_company_id: str | None = None,
                      phase: int | None = None) -> list[dict]:
    _require_client(tenant_id, client_company_id)
    stmt = select(ExcellenceDeliverable).where(ExcellenceDeliverable.tenant_id == tenant_id)
    if client_company_id:
        stmt = stmt.where(ExcellenceDeliverable.client_company_id == client_company_id)
    else:
        stmt = stmt.where(ExcellenceDeliverable.client_company_id.is_(None))
    if phase is not None:
        stmt = stmt.where(ExcellenceDeliverable.phase == validate_phase_number(phase))
    stmt = stmt.order_by(ExcellenceDeliverable.phase, ExcellenceDeliverable.created_at)
    return [d.to_dict() for d in db.session.execute(stmt).scalars()]


def _require_deliverable(tenant_id: int, deliverable_id: str) -> ExcellenceDeliverable:
    deliverable = db.session.execute(
        select(ExcellenceDeliverable).where(
            ExcellenceDeliverable.id == deliverable_id,
            ExcellenceDeliverable.tenant_id == tenant_id,
        )
    ).scalar_one_or_none()
    if deliverable is None:
        raise NotFoundError(resource="ExcellenceDeliverable", resource_id=deliverable_id, tenant_id=tenant_id)
    return deliverable


def _optional_text(data: dict, key: str, max_length: int | None = None) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{key} must be a string", details={"field": key})
    value = value.strip()
    if max_length is not None and len(value) > max_length:
        raise ValidationError(f"{key} must be ≤ {max_length} characters", details={"field": key})
    return value or None


def _deliverable_payload(deliverable_type: str | None, payload, client_company_id: str | None):
    """Validate a form payload. Process assessments are normalized with regenerated actions."""
    if payload is None:
        return None
    if not isinstance(payload, (dict, list)):
        raise ValidationError("payload must be an object or an array", details={"field": "payload"})
    if deliverable_type == PROCESS_ASSESSMENT:
        if not isinstance(payload, dict):
            raise ValidationError("process_assessment payload must be an object", details={"field": "payload"})
        items = parse_assessment_items(payload.get("items"))
        return action_engine.build_assessment_record(items, parse_assessment_header(payload), client_company_id)
    return payload


def _completion(data: dict, is_complete: bool) -> datetime | None:
    """completed_at for a deliverable: the submitted ISO timestamp, now, or None when open."""
    if not is_complete:
        return None
    raw = data.get("completed_at")
    if raw is None:
        return _utcnow()
    if not isinstance(raw, str):
        raise ValidationError("completed_at must be an ISO 8601 string", details={"field": "completed_at"})
    try:
        value = datetime.fromisoformat(raw)
    except ValueError:
        raise ValidationError(
            "completed_at must be an ISO 8601 string", details={"field": "completed_at"},
        ) from None
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def create_deliverable(tenant_id: int, data: dict, client_company_id: str | None = None) -> dict:
    """Create a form deliverable for one checklist item of one phase.

    A subject holds at most one deliverable per (phase, checklist_item_id,
    deliverable_type). The subject's progress record is created if needed.

    Raises:
        ValidationError: phase outside 0–6, empty checklist_item_id, bad payload.
        NotFoundError:   client_company_id is not one of the tenant's clients.
        ConflictError:   a deliverable with the same key already exists.
    """
    if not isinstance(data, dict):
        raise ValidationError("Deliverable must be an object")
    phase = validate_phase_number(data.get("phase"))
    checklist_item_id = _optional_text(data, "checklist_item_id", max_length=100)
    if not checklist_item_id:
        raise ValidationError("checklist_item_id must be a non-empty string", details={"field": "checklist_item_id"})
    deliverable_type = _optional_text(data, "deliverable_type", max_length=100)
    is_complete = data.get("is_complete", False)
    if not isinstance(is_complete, bool):
        raise ValidationError("is_complete must be a boolean", details={"field": "is_complete"})
    fields = {
        "title": _optional_text(data, "title", max_length=255),
        "description": _optional_text(data, "description"),
        "payload": _deliverable_payload(deliverable_type, data.get("payload"), client_company_id),
        "is_complete": is_complete,
        "completed_at": _completion(data, is_complete),
    }

    row = _progress_row(tenant_id, client_company_id)
    deliverable = ExcellenceDeliverable(
        progress_id=row.id,
        tenant_id=tenant_id,
        client_company_id=client_company_id or None,
        phase=phase,
        checklist_item_id=checklist_item_id,
        deliverable_type=deliverable_type,
        **fields,
    )
    db.session.add(deliverable)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError("ExcellenceDeliverable", "checklist_item_id", checklist_item_id) from None

    logger.info(
        "Deliverable created tenant_id=%s client_company_id=%s phase=%s item=%s type=%s",
        tenant_id, client_company_id, phase, checklist_item_id, deliverable_type,
    )
    return deliverable.to_dict()


def update_deliverable(tenant_id: int, deliverable_id: str, data: dict) -> dict:
    """Update title, description, payload and completion of a deliverable.

    Keys absent from ``data`` are left unchanged. The key fields (phase,
    checklist item, type, client) cannot be changed. Nothing is modified
    unless every submitted field is valid.
    """
    if not isinstance(data, dict):
        raise ValidationError("Deliverable must be an object")
    deliverable = _require_deliverable(tenant_id, deliverable_id)

    updates = {}
    if "title" in data:
        updates["title"] = _optional_text(data, "title", max_length=255)
    if "description" in data:
        updates["description"] = _optional_text(data, "description")
    if "payload" in data:
        updates["payload"] = _deliverable_payload(
            deliverable.deliverable_type, data["payload"], deliverable.client_company_id,
        )
    if "is_complete" in data:
        if not isinstance(data["is_complete"], bool):
            raise ValidationError("is_complete must be a boolean", details={"field": "is_complete"})
        updates["is_complete"] = data["is_complete"]
        updates["completed_at"] = _completion(data, data["is_complete"])
    elif "completed_at" in data and deliverable.is_complete:
        updates["completed_at"] = _completion(data, True)

    for key, value in updates.items():
        setattr(deliverable, key, value)
    db.session.commit()
    logger.info("Deliverable updated tenant_id=%s id=%s fields=%s", tenant_id, deliverable_id, sorted(updates))
    return deliverable.to_dict()


def delete_deliverable(tenant_id: int, deliverable_id: str) -> None:
    deliverable = _require_deliverable(tenant_id, deliverable_id)
    db.session.delete(deliverable)
    db.session.commit()
    logger.info("Deliverable deleted tenant_id=%s id=%s", tenant_id, deliverable_id)


# ── Client companies ──────────────────────────────────────────────────────────


_CLIENT_FIELDS = ("industry", "location", "contact_name", "contact_email", "notes")


def list_client_companies(tenant_id: int) -> list[dict]:
    stmt = (
        select(ClientCompany)
        .where(ClientCompany.tenant_id == tenant_id)
        .order_by(ClientCompany.name)
    )
    return [c.to_dict() for c in db.session.execute(stmt).scalars()]


def create_client_company(tenant_id: int, data: dict) -> dict:
    """Create a client engagement. Names are unique per tenant (case-insensitive).

    Raises:
        ValidationError: name missing.
        ConflictError:   a client with the same name already exists.
    """
    name = (data.get("name") or "").strip()
    if not name:
        raise ValidationError("name is required.", details={"field": "name"})

    existing = db.session.execute(
        select(ClientCompany.id).where(
            ClientCompany.tenant_id == tenant_id,
            func.lower(ClientCompany.name) == name.lower(),
        )
    ).first()
    if existing:
        raise ConflictError("ClientCompany", "name", name)

    client = ClientCompany(tenant_id=tenant_id, name=name)
    for key in _CLIENT_FIELDS:
        value = data.get(key)
        if value is not None:
            setattr(client, key, str(value).strip())
    db.session.add(client)
    db.session.commit()
    logger.info("Client company created tenant_id=%s id=%s", tenant_id, client.id)
    return client.to_dict()


def update_client_company(tenant_id: int, client_company_id: str, data: dict) -> dict:
    """Update a client engagement. Only keys present in ``data`` change.

    Raises:
        NotFoundError:   not one of the tenant's clients.
        ValidationError: name given but blank.
        ConflictError:   another client of the tenant already has the name.
    """
    client = _require_client(tenant_id, client_company_id)
    if client is None:
        raise NotFoundError(resource="ClientCompany", resource_id=client_company_id, tenant_id=tenant_id)

    if "name" in data:
        name = data["name"]
        if not isinstance(name, str) or not name.strip():
            raise ValidationError("name is required.", details={"field": "name"})
        name = name.strip()
        existing = db.session.execute(
            select(ClientCompany.id).where(
                ClientCompany.tenant_id == tenant_id,
                ClientCompany.id != client.id,
                func.lower(ClientCompany.name) == name.lower(),
            )
        ).first()
        if existing:
            raise ConflictError("ClientCompany", "name", name)
        client.name = name

    for key in _CLIENT_FIELDS:
        if key in data:
            value = data[key]
            setattr(client, key, str(value).strip() if value is not None else None)

    db.session.commit()
    logger.info("Client company updated tenant_id=%s id=%s", tenant_id, client.id)
    return client.to_dict()


def delete_client_company(tenant_id: int, client_company_id: str) -> None:
    """Delete a client engagement with its progress record and deliverables."""
    client = _require_client(tenant_id, client_company_id)
    db.session.delete(client)
    db.session.commit()
    logger.info("Client company deleted tenant_id=%s id=%s", tenant_id, client_company_id)
