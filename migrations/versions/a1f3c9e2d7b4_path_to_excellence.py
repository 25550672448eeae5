"""path_to_excellence

Creates the Path to Excellence tables:
  - client_companies          — consultant-managed client engagements per tenant
  - excellence_progress       — one progress document per (tenant, client)
  - excellence_deliverables   — form payloads per (phase, checklist item, type)

Tables created conditionally (IF NOT EXISTS semantics) to support idempotent
execution against databases that already received these tables via db.create_all()
in a development environment.

Revision ID: a1f3c9e2d7b4
Revises:
Create Date: 2026-10-18 09:12:44.318207
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect as sa_inspect


# revision identifiers, used by Alembic.
revision = 'a1f3c9e2d7b4'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    inspector = sa_inspect(bind)
    existing = set(inspector.get_table_names())

    # ── ClientCompany ─────────────────────────────────────────────────────
    if "client_companies" not in existing:
        op.create_table(
            "client_companies",
            sa.Column("id", sa.String(length=36), nullable=False),
            sa.Column("tenant_id", sa.Integer(), nullable=False),
            sa.Column("name", sa.String(length=255), nullable=False),
            sa.Column("industry", sa.String(length=100), nullable=True),
            sa.Column("location", sa.String(length=255), nullable=True),
            sa.Column("contact_name", sa.String(length=255), nullable=True),
            sa.Column("contact_email", sa.String(length=255), nullable=True),
            sa.Column("notes", sa.Text(), nullable=True),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
            sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_client_companies_tenant_id", "client_companies", ["tenant_id"])

    # ── ExcellenceProgress ────────────────────────────────────────────────
    if "excellence_progress" not in existing:
        op.create_table(
            "excellence_progress",
            sa.Column("id", sa.String(length=36), nullable=False),
            sa.Column("tenant_id", sa.Integer(), nullable=False),
            sa.Column("client_company_id", sa.String(length=36), nullable=True),
            sa.Column("current_phase", sa.Integer(), nullable=False),
            sa.Column(
                "phases", sa.JSON(), nullable=False,
                comment="Per-phase {checklist, progress, completed, completed_at, notes} keyed by phase number.",
            ),
            sa.Column(
                "version", sa.Integer(), nullable=False, server_default="0",
                comment="Incremented on every write; checked against expected_version.",
            ),
            sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
            sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
            sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
            sa.ForeignKeyConstraint(["client_company_id"], ["client_companies.id"], ondelete="CASCADE"),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_excellence_progress_tenant_id", "excellence_progress", ["tenant_id"])
        op.create_index(
            "uq_excellence_progress_subject", "excellence_progress",
            ["tenant_id", sa.text("coalesce(client_company_id, '')")],
            unique=True,
        )

    # ── ExcellenceDeliverable ─────────────────────────────────────────────
    if "excellence_deliverables" not in existing:
        op.create_table(
            "excellence_deliverables",
            sa.Column("id", sa.String(length=36), nullable=False),
            sa.Column("progress_id", sa.String(length=36), nullable=True),
            sa.Column("tenant_id", sa.Integer(), nullable=False),
            sa.Column("client_company_id", sa.String(length=36), nullable=True),
            sa.Column("phase", sa.Integer(), nullable=False),
            sa.Column("checklist_item_id", sa.String(length=100), nullable=False),
            sa.Column(
                "deliverable_type", sa.String(length=100), nullable=True,
                comment="process_assessment | criticality_matrix | fmea_analysis | ...",
            ),
            sa.Column("title", sa.String(length=255), nullable=True),
            sa.Column("description", sa.Text(), nullable=True),
            sa.Column("payload", sa.JSON(), nullable=True),
            sa.Column("is_complete", sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
            sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
            sa.ForeignKeyConstraint(["progress_id"], ["excellence_progress.id"], ondelete="SET NULL"),
            sa.ForeignKeyConstraint(["client_company_id"], ["client_companies.id"], ondelete="CASCADE"),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_excellence_deliverables_tenant_id", "excellence_deliverables", ["tenant_id"])
        op.create_index(
            "uq_excellence_deliverables_key", "excellence_deliverables",
            [
                "tenant_id",
                sa.text("coalesce(client_company_id, '')"),
                "phase",
                "checklist_item_id",
                sa.text("coalesce(deliverable_type, '')"),
            ],
            unique=True,
        )


def downgrade():
    op.drop_index("uq_excellence_deliverables_key", table_name="excellence_deliverables")
    op.drop_index("ix_excellence_deliverables_tenant_id", table_name="excellence_deliverables")
    op.drop_table("excellence_deliverables")
    op.drop_index("uq_excellence_progress_subject", table_name="excellence_progress")
    op.drop_index("ix_excellence_progress_tenant_id", table_name="excellence_progress")
    op.drop_table("excellence_progress")
    op.drop_index("ix_client_companies_tenant_id", table_name="client_companies")
    op.drop_table("client_companies")
