"""Create rental lifecycle tables

Revision ID: 20261019_000001
Revises: None
Create Date: 2026-10-19

Creates users, properties, rentals, rental_terminations, rental_renewals
and payments.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '20261019_000001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


RENTAL_STATUSES = ('pending', 'active', 'renewal_pending', 'terminating', 'completed', 'cancelled')
REQUEST_STATUSES = ('pending', 'approved', 'rejected')


def upgrade() -> None:
    """Create the rental lifecycle tables."""
    op.create_table(
        'users',
        sa.Column('id', sa.String(64), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('role', sa.Enum('tenant', 'landlord', 'bank', 'ministry', name='user_role'), nullable=False),
        sa.Column('verified', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'properties',
        sa.Column('id', sa.String(64), nullable=False),
        sa.Column('owner_id', sa.String(64), nullable=False),
        sa.Column('address', sa.String(500), nullable=False),
        sa.Column('rent', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('available', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('start_date', sa.Date(), nullable=True),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.Column('most_recent_rental_end_date', sa.Date(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['owner_id'], ['users.id'], name='fk_properties_owner_id'),
    )
    op.create_index('ix_properties_owner_id', 'properties', ['owner_id'])

    op.create_table(
        'rentals',
        sa.Column('id', sa.String(64), nullable=False),
        sa.Column('tenant_id', sa.String(64), nullable=False),
        sa.Column('landlord_id', sa.String(64), nullable=False),
        sa.Column('property_id', sa.String(64), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.Column('status', sa.Enum(*RENTAL_STATUSES, name='rental_status'), nullable=False),
        sa.Column('monthly_rent', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['tenant_id'], ['users.id'], name='fk_rentals_tenant_id'),
        sa.ForeignKeyConstraint(['landlord_id'], ['users.id'], name='fk_rentals_landlord_id'),
        sa.ForeignKeyConstraint(['property_id'], ['properties.id'], name='fk_rentals_property_id'),
    )
    op.create_index('ix_rentals_tenant_id', 'rentals', ['tenant_id'])
    op.create_index('ix_rentals_landlord_id', 'rentals', ['landlord_id'])
    op.create_index('ix_rentals_property_id', 'rentals', ['property_id'])
    op.create_index('ix_rentals_status', 'rentals', ['status'])

    op.create_table(
        'rental_terminations',
        sa.Column('id', sa.String(64), nullable=False),
        sa.Column('rental_id', sa.String(64), nullable=False),
        sa.Column('tenant_id', sa.String(64), nullable=False),
        sa.Column('landlord_id', sa.String(64), nullable=False),
        sa.Column('requested_end_date', sa.Date(), nullable=False),
        sa.Column('previous_end_date', sa.Date(), nullable=True),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.Column('status', sa.Enum(*REQUEST_STATUSES, name='termination_status'), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['rental_id'], ['rentals.id'], name='fk_rental_terminations_rental_id'),
    )
    op.create_index('ix_rental_terminations_rental_id', 'rental_terminations', ['rental_id'])
    op.create_index('ix_rental_terminations_status', 'rental_terminations', ['status'])

    op.create_table(
        'rental_renewals',
        sa.Column('id', sa.String(64), nullable=False),
        sa.Column('rental_id', sa.String(64), nullable=False),
        sa.Column('tenant_id', sa.String(64), nullable=False),
        sa.Column('landlord_id', sa.String(64), nullable=False),
        sa.Column('renewal_duration', sa.Integer(), nullable=False),
        sa.Column('requested_start_date', sa.Date(), nullable=False),
        sa.Column('status', sa.Enum(*REQUEST_STATUSES, name='renewal_status'), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['rental_id'], ['rentals.id'], name='fk_rental_renewals_rental_id'),
    )
    op.create_index('ix_rental_renewals_rental_id', 'rental_renewals', ['rental_id'])
    op.create_index('ix_rental_renewals_status', 'rental_renewals', ['status'])

    op.create_table(
        'payments',
        sa.Column('id', sa.String(64), nullable=False),
        sa.Column('rental_id', sa.String(64), nullable=False),
        sa.Column('amount', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('month', sa.String(7), nullable=False),
        sa.Column('status', sa.Enum('paid', 'pending', 'overdue', 'failed', name='payment_status'), nullable=False),
        sa.Column('timestamp', sa.DateTime(), nullable=False),
        sa.Column('method', sa.String(50), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['rental_id'], ['rentals.id'], name='fk_payments_rental_id'),
        sa.UniqueConstraint('rental_id', 'month', name='uq_payments_rental_month'),
    )
    op.create_index('ix_payments_rental_id', 'payments', ['rental_id'])


def downgrade() -> None:
    """Drop the rental lifecycle tables."""
    op.drop_index('ix_payments_rental_id', table_name='payments')
    op.drop_table('payments')

    op.drop_index('ix_rental_renewals_status', table_name='rental_renewals')
    op.drop_index('ix_rental_renewals_rental_id', table_name='rental_renewals')
    op.drop_table('rental_renewals')

    op.drop_index('ix_rental_terminations_status', table_name='rental_terminations')
    op.drop_index('ix_rental_terminations_rental_id', table_name='rental_terminations')
    op.drop_table('rental_terminations')

    op.drop_index('ix_rentals_status', table_name='rentals')
    op.drop_index('ix_rentals_property_id', table_name='rentals')
    op.drop_index('ix_rentals_landlord_id', table_name='rentals')
    op.drop_index('ix_rentals_tenant_id', table_name='rentals')
    op.drop_table('rentals')

    op.drop_index('ix_properties_owner_id', table_name='properties')
    op.drop_table('properties')

    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
