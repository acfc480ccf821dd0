"""create marketplace and moderation tables

Revision ID: a1c4e7f20b13
Revises:
Create Date: 2026-10-16 09:12:44.301527

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
import sqlmodel


# revision identifiers, used by Alembic.
revision: str = 'a1c4e7f20b13'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# SQLModel persists enum member names
user_role = sa.Enum('USER', 'ADMIN', name='userrole')
user_status = sa.Enum('ACTIVE', 'SUSPENDED', 'BANNED', name='userstatus')
property_status = sa.Enum('ACTIVE', 'PENDING_REVIEW', 'REMOVED', name='propertystatus')
booking_status = sa.Enum(
    'PENDING', 'PENDING_REVIEW', 'CONFIRMED', 'CANCELLED', name='bookingstatus'
)
content_type = sa.Enum(
    'PROPERTY', 'BOOKING', 'MESSAGE', 'USER', 'REVIEW', name='contenttype'
)
report_type = sa.Enum('AUTOMATED', 'USER_REPORTED', 'ADMIN_FLAGGED', name='reporttype')
report_category = sa.Enum(
    'SPAM', 'INAPPROPRIATE', 'FAKE_LISTING', 'DUPLICATE', 'MISLEADING', 'OTHER',
    name='reportcategory',
)
severity = sa.Enum('LOW', 'MEDIUM', 'HIGH', 'CRITICAL', name='severity')
report_status = sa.Enum(
    'PENDING', 'UNDER_REVIEW', 'CONFIRMED', 'FALSE_POSITIVE', 'RESOLVED', 'DISMISSED',
    name='reportstatus',
)
appeal_status = sa.Enum('PENDING', 'APPROVED', 'DENIED', name='appealstatus')
action_taken = sa.Enum(
    'NONE', 'WARNING', 'CONTENT_REMOVED', 'USER_SUSPENDED', 'USER_BANNED', 'SHADOWBAN',
    name='actiontaken',
)
notification_type = sa.Enum(
    'SPAM_WARNING', 'ACCOUNT_SUSPENDED', 'ACCOUNT_BANNED', 'CONTENT_REMOVED',
    'APPEAL_DECIDED',
    name='notificationtype',
)


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'user',
        sa.Column('id_user', sa.Integer(), nullable=False),
        sa.Column('username', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('email', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('first_name', sqlmodel.sql.sqltypes.AutoString(length=50), nullable=True),
        sa.Column('last_name', sqlmodel.sql.sqltypes.AutoString(length=50), nullable=True),
        sa.Column('phone', sqlmodel.sql.sqltypes.AutoString(length=20), nullable=True),
        sa.Column('avatar', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('role', user_role, nullable=False),
        sa.Column('status', user_status, nullable=False),
        sa.Column('suspended_until', sa.DateTime(), nullable=True),
        sa.Column('shadow_banned', sa.Boolean(), nullable=False),
        sa.Column('date_creation', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id_user'),
    )
    op.create_index('ix_user_username', 'user', ['username'], unique=True)
    op.create_index('ix_user_email', 'user', ['email'], unique=True)
    op.create_index('ix_user_role', 'user', ['role'])
    op.create_index('ix_user_status', 'user', ['status'])

    op.create_table(
        'property',
        sa.Column('id_property', sa.Integer(), nullable=False),
        sa.Column('title', sqlmodel.sql.sqltypes.AutoString(length=100), nullable=False),
        sa.Column('description', sqlmodel.sql.sqltypes.AutoString(length=1000), nullable=False),
        sa.Column('property_type', sqlmodel.sql.sqltypes.AutoString(length=30), nullable=False),
        sa.Column('price', sa.Float(), nullable=False),
        sa.Column('city', sqlmodel.sql.sqltypes.AutoString(length=80), nullable=False),
        sa.Column('id_owner', sa.Integer(), nullable=False),
        sa.Column('status', property_status, nullable=False),
        sa.Column('requires_review', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['id_owner'], ['user.id_user']),
        sa.PrimaryKeyConstraint('id_property'),
    )
    op.create_index('ix_property_id_owner', 'property', ['id_owner'])
    op.create_index('ix_property_status', 'property', ['status'])
    op.create_index('ix_property_created_at', 'property', ['created_at'])

    op.create_table(
        'booking',
        sa.Column('id_booking', sa.Integer(), nullable=False),
        sa.Column('id_property', sa.Integer(), nullable=False),
        sa.Column('name', sqlmodel.sql.sqltypes.AutoString(length=100), nullable=False),
        sa.Column('message', sqlmodel.sql.sqltypes.AutoString(length=1000), nullable=True),
        sa.Column('guests', sa.Integer(), nullable=False),
        sa.Column('id_user', sa.Integer(), nullable=False),
        sa.Column('status', booking_status, nullable=False),
        sa.Column('requires_review', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['id_property'], ['property.id_property']),
        sa.ForeignKeyConstraint(['id_user'], ['user.id_user']),
        sa.PrimaryKeyConstraint('id_booking'),
    )
    op.create_index('ix_booking_id_property', 'booking', ['id_property'])
    op.create_index('ix_booking_id_user', 'booking', ['id_user'])
    op.create_index('ix_booking_status', 'booking', ['status'])
    op.create_index('ix_booking_created_at', 'booking', ['created_at'])

    op.create_table(
        'spam_report',
        sa.Column('id_report', sa.Integer(), nullable=False),
        sa.Column('content_type', content_type, nullable=False),
        sa.Column('content_id', sa.Integer(), nullable=True),
        sa.Column('id_reporter', sa.Integer(), nullable=True),
        sa.Column('id_user_reported', sa.Integer(), nullable=False),
        sa.Column('report_type', report_type, nullable=False),
        sa.Column('category', report_category, nullable=False),
        sa.Column('severity', severity, nullable=False),
        sa.Column('priority', sa.Integer(), nullable=False),
        sa.Column('status', report_status, nullable=False),
        sa.Column('detection_result', sa.JSON(), nullable=True),
        sa.Column('user_report_details', sa.JSON(), nullable=True),
        sa.Column('action_taken', action_taken, nullable=False),
        sa.Column('action_details', sa.JSON(), nullable=True),
        sa.Column('reviewed_by', sa.Integer(), nullable=True),
        sa.Column('reviewed_at', sa.DateTime(), nullable=True),
        sa.Column('review_notes', sqlmodel.sql.sqltypes.AutoString(length=1000), nullable=True),
        sa.Column('appeal_submitted', sa.Boolean(), nullable=False),
        sa.Column('appeal_submitted_at', sa.DateTime(), nullable=True),
        sa.Column('appeal_reason', sqlmodel.sql.sqltypes.AutoString(length=1000), nullable=True),
        sa.Column('appeal_status', appeal_status, nullable=True),
        sa.Column('appeal_reviewed_by', sa.Integer(), nullable=True),
        sa.Column('appeal_reviewed_at', sa.DateTime(), nullable=True),
        sa.Column('appeal_review_notes', sqlmodel.sql.sqltypes.AutoString(length=1000), nullable=True),
        sa.Column('reported_at', sa.DateTime(), nullable=False),
        sa.Column('resolved_at', sa.DateTime(), nullable=True),
        sa.Column('related_reports', sa.JSON(), nullable=False),
        sa.Column('report_metadata', sa.JSON(), nullable=True),
        sa.ForeignKeyConstraint(['id_reporter'], ['user.id_user']),
        sa.ForeignKeyConstraint(['id_user_reported'], ['user.id_user']),
        sa.ForeignKeyConstraint(['reviewed_by'], ['user.id_user']),
        sa.ForeignKeyConstraint(['appeal_reviewed_by'], ['user.id_user']),
        sa.PrimaryKeyConstraint('id_report'),
    )
    op.create_index('ix_spam_report_content_type', 'spam_report', ['content_type'])
    op.create_index('ix_spam_report_content_id', 'spam_report', ['content_id'])
    op.create_index('ix_spam_report_id_reporter', 'spam_report', ['id_reporter'])
    op.create_index('ix_spam_report_id_user_reported', 'spam_report', ['id_user_reported'])
    op.create_index('ix_spam_report_report_type', 'spam_report', ['report_type'])
    op.create_index('ix_spam_report_severity', 'spam_report', ['severity'])
    op.create_index('ix_spam_report_priority', 'spam_report', ['priority'])
    op.create_index('ix_spam_report_status', 'spam_report', ['status'])
    op.create_index('ix_spam_report_reported_at', 'spam_report', ['reported_at'])

    op.create_table(
        'notification',
        sa.Column('id_notification', sa.Integer(), nullable=False),
        sa.Column('notification_type', notification_type, nullable=False),
        sa.Column('message', sqlmodel.sql.sqltypes.AutoString(length=500), nullable=False),
        sa.Column('related_report_id', sa.Integer(), nullable=True),
        sa.Column('is_read', sa.Boolean(), nullable=False),
        sa.Column('id_user', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(
            ['id_user'], ['user.id_user'],
            name='notification_id_user_fkey', ondelete='CASCADE',
        ),
        sa.PrimaryKeyConstraint('id_notification'),
    )
    op.create_index('ix_notification_id_user', 'notification', ['id_user'])
    op.create_index('ix_notification_created_at', 'notification', ['created_at'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('ix_notification_created_at', table_name='notification')
    op.drop_index('ix_notification_id_user', table_name='notification')
    op.drop_table('notification')

    for index in (
        'ix_spam_report_reported_at', 'ix_spam_report_status', 'ix_spam_report_priority',
        'ix_spam_report_severity', 'ix_spam_report_report_type',
        'ix_spam_report_id_user_reported', 'ix_spam_report_id_reporter',
        'ix_spam_report_content_id', 'ix_spam_report_content_type',
    ):
        op.drop_index(index, table_name='spam_report')
    op.drop_table('spam_report')

    for index in ('ix_booking_created_at', 'ix_booking_status', 'ix_booking_id_user', 'ix_booking_id_property'):
        op.drop_index(index, table_name='booking')
    op.drop_table('booking')

    for index in ('ix_property_created_at', 'ix_property_status', 'ix_property_id_owner'):
        op.drop_index(index, table_name='property')
    op.drop_table('property')

    for index in ('ix_user_status', 'ix_user_role', 'ix_user_email', 'ix_user_username'):
        op.drop_index(index, table_name='user')
    op.drop_table('user')

    bind = op.get_bind()
    for enum_type in (
        notification_type, action_taken, appeal_status, report_status, severity,
        report_category, report_type, content_type, booking_status, property_status,
        user_status, user_role,
    ):
        enum_type.drop(bind, checkfirst=True)
