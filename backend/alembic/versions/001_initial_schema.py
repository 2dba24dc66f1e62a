"""Initial schema: projects, materials and logistics tables.

Revision ID: 001
Revises: None
Create Date: 2026-10-18
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True),
                  nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True),
                  nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    # ── Projects ────────────────────────────────────────────
    op.create_table(
        "projects",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("code", sa.String(20), nullable=True, unique=True,
                  comment="Business code, e.g. BRG-0042. Introduced with API v2."),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="planned"),
        sa.Column("start_date", sa.Date, nullable=True),
        sa.Column("end_date", sa.Date, nullable=True),
        sa.Column("budget", sa.Numeric(14, 2), nullable=True),
        sa.Column("manager", sa.String(200), nullable=True),
        *_timestamps(),
    )
    op.create_index("idx_projects_status", "projects", ["status"])

    op.create_table(
        "milestones",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("project_id", sa.Integer,
                  sa.ForeignKey("projects.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("due_date", sa.Date, nullable=True),
        sa.Column("completed", sa.Boolean, nullable=False,
                  server_default=sa.false()),
        *_timestamps(),
    )
    op.create_index("idx_milestones_project", "milestones", ["project_id"])

    # ── Materials ───────────────────────────────────────────
    op.create_table(
        "suppliers",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("country", sa.String(2), nullable=True,
                  comment="ISO 3166-1 alpha-2 country code."),
        *_timestamps(),
    )

    op.create_table(
        "materials",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("sku", sa.String(40), nullable=False, unique=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("category", sa.String(100), nullable=True),
        sa.Column("unit", sa.String(20), nullable=False,
                  comment="Unit of measure: ea, m, m2, m3, kg, t, ..."),
        sa.Column("unit_cost", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("currency", sa.String(3), nullable=False, server_default="USD"),
        sa.Column("quantity_on_hand", sa.Integer, nullable=False, server_default="0"),
        sa.Column("reorder_level", sa.Integer, nullable=False, server_default="0"),
        sa.Column("supplier_id", sa.Integer,
                  sa.ForeignKey("suppliers.id"), nullable=True),
        *_timestamps(),
    )
    op.create_index("idx_materials_category", "materials", ["category"])
    op.create_index("idx_materials_supplier", "materials", ["supplier_id"])

    # ── Logistics ───────────────────────────────────────────
    op.create_table(
        "shipments",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("tracking_number", sa.String(64), nullable=False, unique=True),
        sa.Column("carrier", sa.String(100), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="preparing"),
        sa.Column("shipped_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("delivered_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("idx_shipments_status", "shipments", ["status"])

    op.create_table(
        "orders",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("order_number", sa.String(40), nullable=False, unique=True),
        # Materials may live on another host: SKU, not a foreign key
        sa.Column("material_sku", sa.String(40), nullable=False),
        sa.Column("quantity", sa.Integer, nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("priority", sa.String(10), nullable=False, server_default="normal"),
        sa.Column("requested_delivery_date", sa.Date, nullable=True),
        sa.Column("shipment_id", sa.Integer,
                  sa.ForeignKey("shipments.id", ondelete="SET NULL"), nullable=True),
        *_timestamps(),
    )
    op.create_index("idx_orders_status", "orders", ["status"])
    op.create_index("idx_orders_shipment", "orders", ["shipment_id"])
    op.create_index("idx_orders_material_sku", "orders", ["material_sku"])


def downgrade() -> None:
    op.drop_table("orders")
    op.drop_table("shipments")
    op.drop_table("materials")
    op.drop_table("suppliers")
    op.drop_table("milestones")
    op.drop_table("projects")
