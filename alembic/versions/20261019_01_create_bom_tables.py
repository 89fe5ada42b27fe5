"""create items, boms, bom child tables and workstations

Revision ID: 20261019_01
Revises:
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20261019_01"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # =====================================================
    # items
    # =====================================================
    op.create_table(
        "items",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("company_id", sa.Uuid(), nullable=False),
        sa.Column("item_code", sa.String(length=100), nullable=False),
        sa.Column("item_name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("stock_uom", sa.String(length=50), nullable=True),
        sa.Column("valuation_rate", sa.Numeric(15, 2), nullable=False, server_default="0"),
        sa.Column("is_stock_item", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("company_id", "item_code", name="uq_items_company_code"),
    )
    op.create_index("ix_items_company_id", "items", ["company_id"])
    op.create_index("ix_items_item_name", "items", ["item_name"])
    op.create_index("ix_items_created_at", "items", ["created_at"])
    op.create_index("ix_items_company_name", "items", ["company_id", "item_name"])

    # =====================================================
    # boms
    # =====================================================
    op.create_table(
        "boms",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("bom_no", sa.String(length=50), nullable=False),
        sa.Column("item_id", sa.Uuid(), sa.ForeignKey("items.id"), nullable=False),
        sa.Column("company_id", sa.Uuid(), nullable=False),
        sa.Column("version", sa.String(length=20), nullable=False, server_default="1.0"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("is_default", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("quantity", sa.Numeric(15, 6), nullable=False, server_default="1"),
        sa.Column("uom", sa.String(length=50), nullable=False),
        sa.Column("raw_material_cost", sa.Numeric(15, 2), nullable=False, server_default="0"),
        sa.Column("operating_cost", sa.Numeric(15, 2), nullable=False, server_default="0"),
        sa.Column("total_cost", sa.Numeric(15, 2), nullable=False, server_default="0"),
        sa.Column("currency", sa.String(length=3), nullable=False, server_default="USD"),
        sa.Column("bom_type", sa.String(length=50), nullable=False, server_default="Manufacturing"),
        sa.Column("with_operations", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("transfer_material_against", sa.String(length=50), nullable=True, server_default="Work Order"),
        sa.Column("allow_alternative_item", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("allow_same_item_multiple_times", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            "set_rate_of_sub_assembly_item_based_on_bom",
            sa.Boolean(),
            nullable=False,
            server_default=sa.true(),
        ),
        sa.Column("inspection_required", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("quality_inspection_template", sa.String(length=255), nullable=True),
        sa.Column("project_id", sa.Uuid(), nullable=True),
        sa.Column("routing_id", sa.Uuid(), nullable=True),
        sa.Column("created_by", sa.Uuid(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("bom_no", "company_id", "version", name="uq_boms_no_company_version"),
    )
    op.create_index("ix_boms_bom_no", "boms", ["bom_no"])
    op.create_index("ix_boms_item_id", "boms", ["item_id"])
    op.create_index("ix_boms_company_id", "boms", ["company_id"])
    op.create_index("ix_boms_version", "boms", ["version"])
    op.create_index("ix_boms_is_active", "boms", ["is_active"])
    op.create_index("ix_boms_created_at", "boms", ["created_at"])
    op.create_index("ix_boms_no_company", "boms", ["bom_no", "company_id"])

    # =====================================================
    # bom_items
    # =====================================================
    op.create_table(
        "bom_items",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("bom_id", sa.Uuid(), sa.ForeignKey("boms.id", ondelete="CASCADE"), nullable=False),
        sa.Column("item_id", sa.Uuid(), nullable=False),
        sa.Column("item_code", sa.String(length=100), nullable=False),
        sa.Column("item_name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("qty", sa.Numeric(15, 6), nullable=False, server_default="0"),
        sa.Column("uom", sa.String(length=50), nullable=False),
        sa.Column("rate", sa.Numeric(15, 2), nullable=False, server_default="0"),
        sa.Column("amount", sa.Numeric(15, 2), nullable=False, server_default="0"),
        sa.Column("conversion_factor", sa.Numeric(15, 6), nullable=False, server_default="1"),
        sa.Column("bom_no", sa.String(length=50), nullable=True),
        sa.Column("allow_alternative_item", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("include_item_in_manufacturing", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("sourced_by_supplier", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("operation_id", sa.Uuid(), nullable=True),
        sa.Column("idx", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_bom_items_bom_id", "bom_items", ["bom_id"])
    op.create_index("ix_bom_items_item_id", "bom_items", ["item_id"])
    op.create_index("ix_bom_items_bom_idx", "bom_items", ["bom_id", "idx"])

    # =====================================================
    # bom_operations
    # =====================================================
    op.create_table(
        "bom_operations",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("bom_id", sa.Uuid(), sa.ForeignKey("boms.id", ondelete="CASCADE"), nullable=False),
        sa.Column("operation_no", sa.String(length=50), nullable=False),
        sa.Column("operation_name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("workstation_id", sa.Uuid(), nullable=True),
        sa.Column("workstation_type", sa.String(length=100), nullable=True),
        sa.Column("time_in_mins", sa.Numeric(15, 2), nullable=False, server_default="0"),
        sa.Column("hour_rate", sa.Numeric(15, 2), nullable=False, server_default="0"),
        sa.Column("operating_cost", sa.Numeric(15, 2), nullable=False, server_default="0"),
        sa.Column("batch_size", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("fixed_time_in_mins", sa.Numeric(15, 2), nullable=False, server_default="0"),
        sa.Column("set_up_time", sa.Numeric(15, 2), nullable=False, server_default="0"),
        sa.Column("tear_down_time", sa.Numeric(15, 2), nullable=False, server_default="0"),
        sa.Column("sequence_id", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("idx", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_bom_operations_bom_id", "bom_operations", ["bom_id"])
    op.create_index("ix_bom_operations_operation_no", "bom_operations", ["operation_no"])
    op.create_index("ix_bom_operations_sequence_id", "bom_operations", ["sequence_id"])

    # =====================================================
    # bom_scrap_items
    # =====================================================
    op.create_table(
        "bom_scrap_items",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("bom_id", sa.Uuid(), sa.ForeignKey("boms.id", ondelete="CASCADE"), nullable=False),
        sa.Column("item_id", sa.Uuid(), nullable=False),
        sa.Column("item_code", sa.String(length=100), nullable=False),
        sa.Column("item_name", sa.String(length=255), nullable=False),
        sa.Column("stock_qty", sa.Numeric(15, 6), nullable=False, server_default="0"),
        sa.Column("rate", sa.Numeric(15, 2), nullable=False, server_default="0"),
        sa.Column("amount", sa.Numeric(15, 2), nullable=False, server_default="0"),
        sa.Column("stock_uom", sa.String(length=50), nullable=True),
        sa.Column("idx", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_bom_scrap_items_bom_id", "bom_scrap_items", ["bom_id"])
    op.create_index("ix_bom_scrap_items_item_id", "bom_scrap_items", ["item_id"])

    # =====================================================
    # bom_alternative_items
    # =====================================================
    op.create_table(
        "bom_alternative_items",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "bom_item_id",
            sa.Uuid(),
            sa.ForeignKey("bom_items.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("alternative_item_id", sa.Uuid(), nullable=False),
        sa.Column("alternative_item_code", sa.String(length=100), nullable=False),
        sa.Column("alternative_item_name", sa.String(length=255), nullable=False),
        sa.Column("conversion_factor", sa.Numeric(15, 6), nullable=False, server_default="1"),
        sa.Column("priority", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_bom_alternative_items_bom_item_id", "bom_alternative_items", ["bom_item_id"])
    op.create_index(
        "ix_bom_alternative_items_alternative_item_id",
        "bom_alternative_items",
        ["alternative_item_id"],
    )

    # =====================================================
    # bom_update_log (no FK: survives BOM deletion)
    # =====================================================
    op.create_table(
        "bom_update_log",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("bom_id", sa.Uuid(), nullable=False),
        sa.Column("update_type", sa.String(length=50), nullable=False),
        sa.Column("change_description", sa.Text(), nullable=True),
        sa.Column("previous_data", sa.JSON(), nullable=True),
        sa.Column("new_data", sa.JSON(), nullable=True),
        sa.Column("updated_by", sa.Uuid(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_bom_update_log_bom_id", "bom_update_log", ["bom_id"])
    op.create_index("ix_bom_update_log_update_type", "bom_update_log", ["update_type"])
    op.create_index("ix_bom_update_log_created_at", "bom_update_log", ["created_at"])

    # =====================================================
    # workstations
    # =====================================================
    op.create_table(
        "workstations",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("workstation_name", sa.String(length=255), nullable=False),
        sa.Column("workstation_type", sa.String(length=100), nullable=True),
        sa.Column("company_id", sa.Uuid(), nullable=False),
        sa.Column("warehouse_id", sa.Uuid(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("hour_rate", sa.Numeric(15, 2), nullable=False, server_default="0"),
        sa.Column("hour_rate_electricity", sa.Numeric(15, 2), nullable=False, server_default="0"),
        sa.Column("hour_rate_consumable", sa.Numeric(15, 2), nullable=False, server_default="0"),
        sa.Column("hour_rate_rent", sa.Numeric(15, 2), nullable=False, server_default="0"),
        sa.Column("hour_rate_labour", sa.Numeric(15, 2), nullable=False, server_default="0"),
        sa.Column("production_capacity", sa.Numeric(15, 2), nullable=False, server_default="1"),
        sa.Column("working_hours_start", sa.String(length=10), nullable=True),
        sa.Column("working_hours_end", sa.String(length=10), nullable=True),
        sa.Column("holiday_list", sa.String(length=255), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("company_id", "workstation_name", name="uq_workstations_company_name"),
    )
    op.create_index("ix_workstations_workstation_name", "workstations", ["workstation_name"])
    op.create_index("ix_workstations_company_id", "workstations", ["company_id"])
    op.create_index("ix_workstations_warehouse_id", "workstations", ["warehouse_id"])
    op.create_index("ix_workstations_created_at", "workstations", ["created_at"])


def downgrade():
    op.drop_table("workstations")
    op.drop_table("bom_update_log")
    op.drop_table("bom_alternative_items")
    op.drop_table("bom_scrap_items")
    op.drop_table("bom_operations")
    op.drop_table("bom_items")
    op.drop_table("boms")
    op.drop_table("items")
