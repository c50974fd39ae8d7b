"""initial schema

Revision ID: 4a1c2e7f9b10
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '4a1c2e7f9b10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

user_role = sa.Enum('ADMIN', 'CREATOR', 'SUBSCRIBER', name='userrole')
user_status = sa.Enum('ACTIVE', 'SUSPENDED', name='userstatus')
kyc_status = sa.Enum('NONE', 'PENDING', 'VERIFIED', 'REJECTED', name='kycstatus')
subscription_status = sa.Enum('ACTIVE', 'PAST_DUE', 'CANCELLED', name='subscriptionstatus')
subscription_tier = sa.Enum('BASIC', 'PREMIUM', 'VIP', name='subscriptiontier')
earning_source = sa.Enum('SUBSCRIPTION', 'MESSAGE', name='earningsource')
submission_status = sa.Enum('PENDING', 'VERIFIED', 'REJECTED', name='submissionstatus')
government_id_type = sa.Enum('PASSPORT', 'DRIVERS_LICENSE', 'NATIONAL_ID', name='governmentidtype')


def upgrade() -> None:
    op.create_table('users',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('hashed_password', sa.String(), nullable=True),
        sa.Column('name', sa.String(), nullable=True),
        sa.Column('role', user_role, nullable=False),
        sa.Column('status', user_status, nullable=False),
        sa.Column('email_verified_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('image', sa.String(), nullable=True),
        sa.Column('bio', sa.String(), nullable=True),
        sa.Column('location', sa.String(), nullable=True),
        sa.Column('hourly_rate', sa.Float(), nullable=True),
        sa.Column('is_featured', sa.Boolean(), nullable=False),
        sa.Column('kyc_status', kyc_status, nullable=False),
        sa.Column('kyc_verified_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('kyc_rejection_reason', sa.String(), nullable=True),
        sa.Column('stripe_connect_id', sa.String(), nullable=True),
        sa.Column('stripe_customer_id', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)

    op.create_table('subscriptions',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('subscriber_id', sa.UUID(), nullable=False),
        sa.Column('creator_id', sa.UUID(), nullable=False),
        sa.Column('status', subscription_status, nullable=False),
        sa.Column('tier', subscription_tier, nullable=False),
        sa.Column('price', sa.Float(), nullable=False),
        sa.Column('stripe_subscription_id', sa.String(), nullable=True),
        sa.Column('renews_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('cancelled_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['subscriber_id'], ['users.id']),
        sa.ForeignKeyConstraint(['creator_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('stripe_subscription_id')
    )
    op.create_index(op.f('ix_subscriptions_subscriber_id'), 'subscriptions', ['subscriber_id'], unique=False)
    op.create_index(op.f('ix_subscriptions_creator_id'), 'subscriptions', ['creator_id'], unique=False)

    op.create_table('messages',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('sender_id', sa.UUID(), nullable=False),
        sa.Column('recipient_id', sa.UUID(), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('is_paid_message', sa.Boolean(), nullable=False),
        sa.Column('cost_credits', sa.Integer(), nullable=False),
        sa.Column('is_read', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.ForeignKeyConstraint(['sender_id'], ['users.id']),
        sa.ForeignKeyConstraint(['recipient_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_messages_sender_id'), 'messages', ['sender_id'], unique=False)
    op.create_index(op.f('ix_messages_recipient_id'), 'messages', ['recipient_id'], unique=False)

    op.create_table('profile_views',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('viewer_id', sa.UUID(), nullable=False),
        sa.Column('viewed_id', sa.UUID(), nullable=False),
        sa.Column('last_viewed_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['viewer_id'], ['users.id']),
        sa.ForeignKeyConstraint(['viewed_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('viewer_id', 'viewed_id', name='uq_profile_views_viewer_viewed')
    )
    op.create_index(op.f('ix_profile_views_viewer_id'), 'profile_views', ['viewer_id'], unique=False)
    op.create_index(op.f('ix_profile_views_viewed_id'), 'profile_views', ['viewed_id'], unique=False)

    op.create_table('earnings',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('creator_id', sa.UUID(), nullable=False),
        sa.Column('amount', sa.Float(), nullable=False),
        sa.Column('source', earning_source, nullable=False),
        sa.Column('stripe_charge_id', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.ForeignKeyConstraint(['creator_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_earnings_creator_id'), 'earnings', ['creator_id'], unique=False)

    op.create_table('kyc_submissions',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('user_id', sa.UUID(), nullable=False),
        sa.Column('first_name', sa.String(), nullable=False),
        sa.Column('last_name', sa.String(), nullable=False),
        sa.Column('date_of_birth', sa.Date(), nullable=False),
        sa.Column('government_id_type', government_id_type, nullable=False),
        sa.Column('government_id_number', sa.String(), nullable=False),
        sa.Column('government_id_image_url', sa.String(), nullable=False),
        sa.Column('government_id_back_url', sa.String(), nullable=True),
        sa.Column('liveliness_image_url', sa.String(), nullable=False),
        sa.Column('status', submission_status, nullable=False),
        sa.Column('rejection_reason', sa.String(), nullable=True),
        sa.Column('verified_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('reviewed_by', sa.UUID(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.ForeignKeyConstraint(['reviewed_by'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id')
    )

    op.create_table('notifications',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('user_id', sa.UUID(), nullable=False),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('is_read', sa.Boolean(), nullable=False),
        sa.Column('resource_type', sa.String(), nullable=True),
        sa.Column('resource_id', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_notifications_user_id'), 'notifications', ['user_id'], unique=False)


def downgrade() -> None:
    op.drop_table('notifications')
    op.drop_table('kyc_submissions')
    op.drop_table('earnings')
    op.drop_table('profile_views')
    op.drop_table('messages')
    op.drop_table('subscriptions')
    op.drop_table('users')
    bind = op.get_bind()
    for enum_type in (government_id_type, submission_status, earning_source, subscription_tier,
                      subscription_status, kyc_status, user_status, user_role):
        enum_type.drop(bind, checkfirst=True)
