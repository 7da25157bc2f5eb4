from alembic import op
import sqlalchemy as sa

revision = "20261018120000"
down_revision = None

NOW = sa.text("CURRENT_TIMESTAMP")

# table -> category specific columns
PRODUCT_TABLES = {
    "chargers": [
        sa.Column("power_kw", sa.Numeric(8, 2), nullable=True),
        sa.Column("connector_type", sa.String(length=64), nullable=True),
    ],
    "cables": [
        sa.Column("connector_from", sa.String(length=64), nullable=True),
        sa.Column("connector_to", sa.String(length=64), nullable=True),
        sa.Column("cable_length", sa.Numeric(8, 2), nullable=True),
        sa.Column("wire_gauge", sa.String(length=32), nullable=True),
    ],
    "stations": [
        sa.Column("connector_type", sa.String(length=64), nullable=True),
        sa.Column("amperage", sa.String(length=32), nullable=True),
        sa.Column("phase", sa.String(length=32), nullable=True),
    ],
    "adapters": [
        sa.Column("voltage", sa.String(length=32), nullable=True),
        sa.Column("current", sa.String(length=32), nullable=True),
    ],
    "boxes": [
        sa.Column("size", sa.String(length=64), nullable=True),
    ],
    "breakers": [
        sa.Column("ampere", sa.String(length=32), nullable=True),
        sa.Column("voltage", sa.String(length=32), nullable=True),
    ],
    "plugs": [
        sa.Column("connector_type", sa.String(length=64), nullable=True),
    ],
    "wires": [
        sa.Column("wire_type", sa.String(length=64), nullable=True),
        sa.Column("length", sa.Numeric(8, 2), nullable=True),
    ],
    "other_products": [],
}

def _line_columns():
    return [
        sa.Column('product_id', sa.Integer(), nullable=False),
        sa.Column('product_type', sa.String(length=32), nullable=False),
        sa.Column('name', sa.String(length=240), nullable=False),
        sa.Column('price', sa.Numeric(12, 2), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('image', sa.String(length=1024), nullable=True),
    ]

def upgrade():
    for table, extra in PRODUCT_TABLES.items():
        op.create_table(
            table,
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('name', sa.String(length=240), nullable=False),
            sa.Column('brand', sa.String(length=120), nullable=True),
            sa.Column('description', sa.Text(), nullable=True),
            sa.Column('price', sa.Numeric(12, 2), nullable=False),
            sa.Column('stock', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('images', sa.JSON(), nullable=True),
            sa.Column('offer_enabled', sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column('offer_discount_percentage', sa.Numeric(5, 2), nullable=False, server_default='0'),
            sa.Column('created_at', sa.DateTime(), nullable=False, server_default=NOW),
            sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=NOW),
            *extra,
        )

    op.create_table(
        'carts',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('session_id', sa.String(length=255), nullable=False, unique=True),
        sa.Column('user_id', sa.String(length=255), nullable=True),
        sa.Column('total_amount', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=NOW),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=NOW),
    )
    op.create_table(
        'cart_items',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('cart_id', sa.Integer(), sa.ForeignKey('carts.id', ondelete='CASCADE'), nullable=False),
        *_line_columns(),
    )
    op.create_table(
        'orders',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('order_number', sa.String(length=32), nullable=False, unique=True),
        sa.Column('name', sa.String(length=240), nullable=False),
        sa.Column('phone', sa.String(length=32), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('address', sa.Text(), nullable=False),
        sa.Column('total_amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('payment_method', sa.String(length=32), nullable=False, server_default='cash'),
        sa.Column('payment_status', sa.String(length=32), nullable=False, server_default='pending'),
        sa.Column('status', sa.String(length=32), nullable=False, server_default='pending'),
        sa.Column('user_id', sa.String(length=255), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=NOW),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=NOW),
    )
    op.create_index('ix_orders_user_id', 'orders', ['user_id'])
    op.create_table(
        'order_items',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('order_id', sa.Integer(), sa.ForeignKey('orders.id', ondelete='CASCADE'), nullable=False),
        *_line_columns(),
    )

def downgrade():
    op.drop_table('order_items')
    op.drop_index('ix_orders_user_id', table_name='orders')
    op.drop_table('orders')
    op.drop_table('cart_items')
    op.drop_table('carts')
    for table in reversed(list(PRODUCT_TABLES)):
        op.drop_table(table)
