"""subscriptions, pre-order settings, waitlist entries and shop sessions

Revision ID: preorder_initial
Revises:
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa

from app.core.types import GUID

# revision identifiers, used by Alembic.
revision = 'preorder_initial'
down_revision = None
branch_labels = None
depends_on = None

def upgrade():
    op.create_table(
        'subscriptions',
        sa.Column('id', GUID(), primary_key=True),
        sa.Column('shop_domain', sa.String(), nullable=False),
        sa.Column('plan', sa.Enum('FREE', 'BASIC', 'PRO', name='planenum'), nullable=False),
        sa.Column('status', sa.Enum('active', 'cancelled', name='subscriptionstatusenum'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_subscriptions_shop_domain', 'subscriptions', ['shop_domain'], unique=True)

    op.create_table(
        'pre_order_settings',
        sa.Column('id', GUID(), primary_key=True),
        sa.Column('shop_domain', sa.String(), nullable=False),
        sa.Column('product_id', sa.String(), nullable=False),
        sa.Column('variant_id', sa.String(), nullable=False),
        sa.Column('enabled', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('expected_date', sa.Date(), nullable=True),
        sa.Column('limit_quantity', sa.Integer(), nullable=True),
        sa.Column('custom_text', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint('shop_domain', 'product_id', 'variant_id', name='uq_preorder_shop_product_variant'),
    )
    op.create_index('ix_pre_order_settings_shop_domain', 'pre_order_settings', ['shop_domain'])

    op.create_table(
        'waitlist_entries',
        sa.Column('id', GUID(), primary_key=True),
        sa.Column('shop_domain', sa.String(), nullable=False),
        sa.Column('product_id', sa.String(), nullable=False),
        sa.Column('variant_id', sa.String(), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('notified', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_waitlist_entries_shop_domain', 'waitlist_entries', ['shop_domain'])
    op.create_index('ix_waitlist_shop_variant_notified', 'waitlist_entries', ['shop_domain', 'variant_id', 'notified'])

    op.create_table(
        'shop_sessions',
        sa.Column('id', GUID(), primary_key=True),
        sa.Column('shop_domain', sa.String(), nullable=False),
        sa.Column('access_token', sa.String(), nullable=False),
        sa.Column('scope', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_shop_sessions_shop_domain', 'shop_sessions', ['shop_domain'], unique=True)

def downgrade():
    op.drop_index('ix_shop_sessions_shop_domain', table_name='shop_sessions')
    op.drop_table('shop_sessions')

    op.drop_index('ix_waitlist_shop_variant_notified', table_name='waitlist_entries')
    op.drop_index('ix_waitlist_entries_shop_domain', table_name='waitlist_entries')
    op.drop_table('waitlist_entries')

    op.drop_index('ix_pre_order_settings_shop_domain', table_name='pre_order_settings')
    op.drop_table('pre_order_settings')

    op.drop_index('ix_subscriptions_shop_domain', table_name='subscriptions')
    op.drop_table('subscriptions')
    sa.Enum(name='subscriptionstatusenum').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='planenum').drop(op.get_bind(), checkfirst=True)
