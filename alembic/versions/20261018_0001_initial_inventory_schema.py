"""initial inventory schema

Revision ID: 20261018_0001
Revises:
Create Date: 2026-10-18 09:00:00.000000
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "20261018_0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _table_exists(inspector: sa.Inspector, table_name: str) -> bool:
    return table_name in inspector.get_table_names()


def _index_exists(inspector: sa.Inspector, table_name: str, index_name: str) -> bool:
    return index_name in {index["name"] for index in inspector.get_indexes(table_name)}


_INVENTORY_INDEXES = [
    ("ix_inventory_items_collection_name", ["collection_name"]),
    ("ix_inventory_items_color", ["color"]),
    ("ix_inventory_items_size", ["size"]),
    ("ix_inventory_items_location_code", ["location_code"]),
    ("ix_inventory_items_location_active", ["location_code", "is_active"]),
    ("ix_inventory_items_collection_color_size", ["collection_name", "color", "size"]),
    ("ix_inventory_items_vendor_received_date", ["vendor_name", "received_date"]),
]

_MOVEMENT_INDEXES = [
    ("ix_stock_movements_reference_number", ["reference_number"]),
    ("ix_stock_movements_item_movement_date", ["item_code", "movement_date"]),
    ("ix_stock_movements_type_status", ["movement_type", "status"]),
    ("ix_stock_movements_from_to", ["from_location_code", "to_location_code"]),
]

_SALES_INDEXES = [
    ("ix_sales_item_code", ["item_code"]),
    ("ix_sales_location_code", ["location_code"]),
    ("ix_sales_location_sold_at", ["location_code", "sold_at"]),
    ("ix_sales_collection_sold_at", ["collection_name", "sold_at"]),
    ("ix_sales_sold_by_sold_at", ["sold_by", "sold_at"]),
]


def upgrade() -> None:
    bind = op.get_bind()
    inspector = sa.inspect(bind)

    if not _table_exists(inspector, "inventory_items"):
        op.create_table(
            "inventory_items",
            sa.Column("item_code", sa.String(length=20), nullable=False),
            sa.Column("collection_name", sa.String(length=50), nullable=False),
            sa.Column("design_name", sa.String(length=120), nullable=False),
            sa.Column("color", sa.String(length=50), nullable=False),
            sa.Column("size", sa.String(length=5), nullable=False),
            sa.Column("category", sa.String(length=50), nullable=False, server_default="clothing"),
            sa.Column("location_code", sa.String(length=20), nullable=False),
            sa.Column("quantity", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("in_house_stock", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("out_source_stock", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("quantity_sold", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("vendor_name", sa.String(length=120), nullable=False),
            sa.Column("supplier_name", sa.String(length=120), nullable=True),
            sa.Column("cost_price", sa.Numeric(12, 2), nullable=False),
            sa.Column("selling_price", sa.Numeric(12, 2), nullable=False),
            sa.Column("remarks", sa.String(length=255), nullable=True),
            sa.Column("received_date", sa.DateTime(timezone=True), nullable=False),
            sa.Column("received_by", sa.String(length=120), nullable=False),
            sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
            sa.Column("last_updated", sa.DateTime(timezone=True), nullable=False),
            sa.Column("updated_by", sa.String(length=120), nullable=True),
            sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
            sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
            sa.CheckConstraint("quantity >= 0", name="ck_inventory_items_quantity_non_negative"),
            sa.CheckConstraint("in_house_stock >= 0", name="ck_inventory_items_in_house_stock_non_negative"),
            sa.CheckConstraint("out_source_stock >= 0", name="ck_inventory_items_out_source_stock_non_negative"),
            sa.CheckConstraint("quantity_sold >= 0", name="ck_inventory_items_quantity_sold_non_negative"),
            sa.CheckConstraint(
                "quantity = in_house_stock + out_source_stock",
                name="ck_inventory_items_quantity_matches_parts",
            ),
            sa.PrimaryKeyConstraint("item_code", name="pk_inventory_items"),
        )

    if not _table_exists(inspector, "stock_movements"):
        op.create_table(
            "stock_movements",
            sa.Column("id", sa.String(length=36), nullable=False),
            sa.Column("item_code", sa.String(length=20), nullable=False),
            sa.Column("movement_type", sa.String(length=20), nullable=False),
            sa.Column("from_location_code", sa.String(length=20), nullable=True),
            sa.Column("to_location_code", sa.String(length=20), nullable=True),
            sa.Column("quantity", sa.Integer(), nullable=False),
            sa.Column("processed_by", sa.String(length=120), nullable=False),
            sa.Column("movement_date", sa.DateTime(timezone=True), nullable=False),
            sa.Column("notes", sa.String(length=255), nullable=True),
            sa.Column("reference_number", sa.String(length=64), nullable=True),
            sa.Column("status", sa.String(length=20), nullable=False, server_default="completed"),
            sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
            sa.CheckConstraint("quantity >= 1", name="ck_stock_movements_quantity_positive"),
            sa.ForeignKeyConstraint(
                ["item_code"],
                ["inventory_items.item_code"],
                name="fk_stock_movements_item_code_inventory_items",
            ),
            sa.PrimaryKeyConstraint("id", name="pk_stock_movements"),
        )

    if not _table_exists(inspector, "code_sequences"):
        op.create_table(
            "code_sequences",
            sa.Column("prefix", sa.String(length=10), nullable=False),
            sa.Column("last_value", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
            sa.PrimaryKeyConstraint("prefix", name="pk_code_sequences"),
        )

    if not _table_exists(inspector, "sales"):
        op.create_table(
            "sales",
            sa.Column("sale_code", sa.String(length=20), nullable=False),
            sa.Column("item_code", sa.String(length=20), nullable=False),
            sa.Column("location_code", sa.String(length=20), nullable=False),
            sa.Column("collection_name", sa.String(length=50), nullable=False),
            sa.Column("design_name", sa.String(length=120), nullable=False),
            sa.Column("color", sa.String(length=50), nullable=False),
            sa.Column("size", sa.String(length=5), nullable=False),
            sa.Column("unit_price", sa.Numeric(12, 2), nullable=False),
            sa.Column("quantity_sold", sa.Integer(), nullable=False),
            sa.Column("discount", sa.Numeric(12, 2), nullable=False),
            sa.Column("final_amount", sa.Numeric(12, 2), nullable=False),
            sa.Column("sold_by", sa.String(length=120), nullable=False),
            sa.Column("customer_name", sa.String(length=120), nullable=True),
            sa.Column("customer_phone", sa.String(length=30), nullable=True),
            sa.Column("payment_method", sa.String(length=30), nullable=False),
            sa.Column("notes", sa.String(length=255), nullable=True),
            sa.Column("status", sa.String(length=20), nullable=False, server_default="completed"),
            sa.Column("sold_at", sa.DateTime(timezone=True), nullable=False),
            sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
            sa.CheckConstraint("quantity_sold >= 1", name="ck_sales_quantity_sold_positive"),
            sa.CheckConstraint("final_amount >= 0", name="ck_sales_final_amount_non_negative"),
            sa.ForeignKeyConstraint(
                ["item_code"],
                ["inventory_items.item_code"],
                name="fk_sales_item_code_inventory_items",
            ),
            sa.PrimaryKeyConstraint("sale_code", name="pk_sales"),
        )

    inspector = sa.inspect(bind)
    for table_name, indexes in (
        ("inventory_items", _INVENTORY_INDEXES),
        ("stock_movements", _MOVEMENT_INDEXES),
        ("sales", _SALES_INDEXES),
    ):
        for index_name, columns in indexes:
            if not _index_exists(inspector, table_name, index_name):
                op.create_index(index_name, table_name, columns, unique=False)

    if not _index_exists(inspector, "inventory_items", "ux_inventory_items_identity_location_active"):
        # One active record per design/color/size at a location; inactive rows are history.
        op.create_index(
            "ux_inventory_items_identity_location_active",
            "inventory_items",
            ["collection_name", "design_name", "color", "size", "location_code"],
            unique=True,
            postgresql_where=sa.text("is_active"),
            sqlite_where=sa.text("is_active"),
        )


def downgrade() -> None:
    bind = op.get_bind()
    inspector = sa.inspect(bind)

    for table_name, indexes in (
        ("sales", _SALES_INDEXES),
        ("stock_movements", _MOVEMENT_INDEXES),
        ("inventory_items", _INVENTORY_INDEXES + [("ux_inventory_items_identity_location_active", [])]),
    ):
        if not _table_exists(inspector, table_name):
            continue
        for index_name, _columns in reversed(indexes):
            if _index_exists(inspector, table_name, index_name):
                op.drop_index(index_name, table_name=table_name)

    for table_name in ("sales", "code_sequences", "stock_movements", "inventory_items"):
        if _table_exists(inspector, table_name):
            op.drop_table(table_name)
