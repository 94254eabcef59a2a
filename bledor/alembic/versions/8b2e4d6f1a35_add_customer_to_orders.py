"""Link self-service orders to the client who placed them

Revision ID: 8b2e4d6f1a35
Revises: 3f1c9a2b7d10
Create Date: 2025-11-24 16:40:03.118402

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# Revision identifiers used by Alembic
revision: str = '8b2e4d6f1a35'
down_revision: Union[str, Sequence[str], None] = '3f1c9a2b7d10'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    # Client orders used to be matched on customer_name only
    with op.batch_alter_table('orders') as batch_op:
        batch_op.add_column(sa.Column('customer_id', sa.String(length=32), nullable=True))
        batch_op.create_index(batch_op.f('ix_orders_customer_id'), ['customer_id'], unique=False)
        batch_op.create_foreign_key('fk_orders_customer_id_users', 'users', ['customer_id'], ['id'], ondelete='SET NULL')


def downgrade() -> None:
    """Downgrade schema."""
    with op.batch_alter_table('orders') as batch_op:
        batch_op.drop_constraint('fk_orders_customer_id_users', type_='foreignkey')
        batch_op.drop_index(batch_op.f('ix_orders_customer_id'))
        batch_op.drop_column('customer_id')
