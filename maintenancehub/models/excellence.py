"""Path to Excellence — persistence models.

These rows are the opaque-record store behind the excellence engine:

  - ClientCompany          consultant-managed client engagements per tenant
  - ExcellenceProgress     one ProgramProgress document per (tenant, client)
  - ExcellenceDeliverable  JSON payloads keyed by (phase, checklist item, type)

Per-phase state is kept in the ``phases`` JSON column as a mapping keyed by
phase number. Derived percentages stored there are never trusted on load;
the service layer recomputes them from the program catalog.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
)

from maintenancehub.models import db


def _uuid():
    return str(uuid.uuid4())


def _utcnow():
    return datetime.now(timezone.utc)


def _iso(value):
    return value.isoformat() if value else None


class ClientCompany(db.Model):
    """A client engagement managed by a tenant (the platform customer)."""

    __tablename__ = "client_companies"

    id = Column(String(36), primary_key=True, default=_uuid)
    tenant_id = Column(Integer, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    industry = Column(String(100), nullable=True)
    location = Column(String(255), nullable=True)
    contact_name = Column(String(255), nullable=True)
    contact_email = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True, default="")
    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    progress_records = db.relationship(
        "ExcellenceProgress", backref="client_company",
        lazy="dynamic", cascade="all, delete-orphan",
    )
    deliverables = db.relationship(
        "ExcellenceDeliverable", backref="client_company",
        lazy="dynamic", cascade="all, delete-orphan",
    )

    def to_dict(self):
        return {
            "id": self.id,
            "tenant_id": self.tenant_id,
            "name": self.name,
            "industry": self.industry,
            "location": self.location,
            "contact_name": self.contact_name,
            "contact_email": self.contact_email,
            "notes": self.notes,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


class ExcellenceProgress(db.Model):
    """Stored ProgramProgress document for one subject (tenant + optional client)."""

    __tablename__ = "excellence_progress"

    id = Column(String(36), primary_key=True, default=_uuid)
    tenant_id = Column(Integer, nullable=False, index=True)
    client_company_id = Column(
        String(36), ForeignKey("client_companies.id", ondelete="CASCADE"), nullable=True,
    )
    current_phase = Column(Integer, nullable=False, default=1)
    phases = Column(JSON, nullable=False, default=dict)  # {"1": {checklist, progress, completed, completed_at, notes}, ...}
    version = Column(Integer, nullable=False, default=0)
    started_at = Column(DateTime(timezone=True), default=_utcnow)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    # UPDATE/DELETE carry "WHERE version = <loaded>"; a concurrent commit
    # makes the flush raise StaleDataError. The service assigns new values.
    __mapper_args__ = {"version_id_col": version, "version_id_generator": False}

    deliverables = db.relationship(
        "ExcellenceDeliverable", backref="progress", lazy="dynamic", passive_deletes=True,
    )

    def to_dict(self):
        return {
            "id": self.id,
            "tenant_id": self.tenant_id,
            "client_company_id": self.client_company_id,
            "current_phase": self.current_phase,
            "phases": self.phases or {},
            "version": self.version,
            "started_at": _iso(self.started_at),
            "completed_at": _iso(self.completed_at),
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


class ExcellenceDeliverable(db.Model):
    """Form payload attached to one checklist item of one phase."""

    __tablename__ = "excellence_deliverables"

    id = Column(String(36), primary_key=True, default=_uuid)
    progress_id = Column(String(36), ForeignKey("excellence_progress.id", ondelete="SET NULL"), nullable=True)
    tenant_id = Column(Integer, nullable=False, index=True)
    client_company_id = Column(
        String(36), ForeignKey("client_companies.id", ondelete="CASCADE"), nullable=True,
    )
    phase = Column(Integer, nullable=False)
    checklist_item_id = Column(String(100), nullable=False)
    deliverable_type = Column(String(100), nullable=True)  # process_assessment | criticality_matrix | fmea_analysis | ...
    title = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    payload = Column(JSON, nullable=True)
    is_complete = Column(Boolean, nullable=False, default=False)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "progress_id": self.progress_id,
            "tenant_id": self.tenant_id,
            "client_company_id": self.client_company_id,
            "phase": self.phase,
            "checklist_item_id": self.checklist_item_id,
            "deliverable_type": self.deliverable_type,
            "title": self.title,
            "description": self.description,
            "payload": self.payload,
            "is_complete": self.is_complete,
            "completed_at": _iso(self.completed_at),
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


# ── Subject uniqueness ────────────────────────────────────────────────────────
# client_company_id is NULL for the tenant's own program, and NULLs never
# collide in a plain UNIQUE constraint, so both indexes key on coalesce().

Index(
    "uq_excellence_progress_subject",
    ExcellenceProgress.tenant_id,
    func.coalesce(ExcellenceProgress.client_company_id, ""),
    unique=True,
)

Index(
    "uq_excellence_deliverables_key",
    ExcellenceDeliverable.tenant_id,
    func.coalesce(ExcellenceDeliverable.client_company_id, ""),
    ExcellenceDeliverable.phase,
    ExcellenceDeliverable.checklist_item_id,
    func.coalesce(ExcellenceDeliverable.deliverable_type, ""),
    unique=True,
)
