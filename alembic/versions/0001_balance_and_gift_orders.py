"""balance_and_gift_orders

Revision ID: 0001
Revises:
Create Date: 2026-10-19 12:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '0001'
down_revision = None
branch_labels = None
depends_on = None

INITIAL_BALANCE = 500


def upgrade() -> None:
    balance = op.create_table(
        'balance',
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('amount', sa.Integer(), server_default='0', nullable=False),
        sa.CheckConstraint('amount >= 0', name=op.f('ck_balance_amount_non_negative')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_balance')),
    )

    op.create_table(
        'gift_orders',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('gift_type', sa.String(), nullable=False),
        sa.Column('delivery_address', sa.Text(), nullable=False),
        sa.Column('delivery_instructions', sa.Text(), nullable=True),
        sa.Column('preferred_time', sa.Text(), nullable=True),
        sa.Column('price', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_gift_orders')),
    )
    op.create_index(op.f('ix_gift_orders_gift_type'), 'gift_orders', ['gift_type'], unique=False)

    op.bulk_insert(balance, [{'id': 1, 'amount': INITIAL_BALANCE}])


def downgrade() -> None:
    op.drop_index(op.f('ix_gift_orders_gift_type'), table_name='gift_orders')
    op.drop_table('gift_orders')
    op.drop_table('balance')
