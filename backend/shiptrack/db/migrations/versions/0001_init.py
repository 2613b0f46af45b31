"""init

Revision ID: 0001_init
Revises: 
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa

revision = "0001_init"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()")),
    ]


def upgrade():
    op.create_table(
        "department",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("code", sa.String(length=10), nullable=True),
        sa.Column("is_management", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        *_timestamps(),
        sa.UniqueConstraint("code", name="uq_department_code"),
    )
    op.create_index("ix_department_name", "department", ["name"], unique=True)
    op.create_index("ix_department_created_at", "department", ["created_at"])

    op.create_table(
        "user",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(length=256), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("department_id", sa.Integer(), sa.ForeignKey("department.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("role", sa.String(length=32), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_timestamps(),
    )
    op.create_index("ix_user_email", "user", ["email"], unique=True)
    op.create_index("ix_user_name", "user", ["name"])
    op.create_index("ix_user_department_id", "user", ["department_id"])
    op.create_index("ix_user_created_at", "user", ["created_at"])

    op.create_table(
        "item",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("unit", sa.String(length=20), nullable=True),
        sa.Column("department_id", sa.Integer(), sa.ForeignKey("department.id", ondelete="RESTRICT"), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_item_name", "item", ["name"])
    op.create_index("ix_item_department_id", "item", ["department_id"])
    op.create_index("ix_item_created_at", "item", ["created_at"])

    op.create_table(
        "shipment",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("item_id", sa.Integer(), sa.ForeignKey("item.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("sender_id", sa.Integer(), sa.ForeignKey("user.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("shipment_department_id", sa.Integer(), sa.ForeignKey("department.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("destination_department_id", sa.Integer(), sa.ForeignKey("department.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("shipment_user_id", sa.Integer(), sa.ForeignKey("user.id", ondelete="SET NULL"), nullable=True),
        sa.Column("tracking_number", sa.String(length=100), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("shipped_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_by", sa.Integer(), sa.ForeignKey("user.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("updated_by", sa.Integer(), sa.ForeignKey("user.id", ondelete="RESTRICT"), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("quantity >= 1", name="ck_shipment_quantity_positive"),
    )
    op.create_index("ix_shipment_item_id", "shipment", ["item_id"])
    op.create_index("ix_shipment_shipment_department_id", "shipment", ["shipment_department_id"])
    op.create_index("ix_shipment_destination_department_id", "shipment", ["destination_department_id"])
    op.create_index("ix_shipment_shipped_at", "shipment", ["shipped_at"])
    op.create_index("ix_shipment_created_at", "shipment", ["created_at"])

    op.create_table(
        "import_run",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("file_name", sa.String(length=512), nullable=False),
        sa.Column("total_records", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("success_records", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("error_records", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("uploaded_by", sa.Integer(), sa.ForeignKey("user.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="PROCESSING"),
        *_timestamps(),
    )
    op.create_index("ix_import_run_uploaded_by", "import_run", ["uploaded_by"])
    op.create_index("ix_import_run_created_at", "import_run", ["created_at"])

    op.create_table(
        "import_row_error",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("import_run_id", sa.Integer(), sa.ForeignKey("import_run.id", ondelete="CASCADE"), nullable=False),
        sa.Column("row_number", sa.Integer(), nullable=False),
        sa.Column("error_message", sa.Text(), nullable=False),
        sa.Column("row_data", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()")),
    )
    op.create_index("ix_import_row_error_import_run_id", "import_row_error", ["import_run_id"])


def downgrade():
    op.drop_table("import_row_error")
    op.drop_table("import_run")
    op.drop_table("shipment")
    op.drop_table("item")
    op.drop_table("user")
    op.drop_table("department")
