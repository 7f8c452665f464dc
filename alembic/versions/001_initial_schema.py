"""Initial forms schema

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None

subscription_tier = sa.Enum('FREE', 'PREMIUM', name='subscriptiontier')
payment_status = sa.Enum('ACTIVE', 'GRACE', 'EXPIRED', name='paymentstatus')
analytics_event_type = sa.Enum('VIEW', 'START', 'COMPLETE', 'ABANDON', name='analyticseventtype')
crm_type = sa.Enum('HUBSPOT', 'ZOHO', 'SALESFORCE', name='crmtype')
integration_type = sa.Enum('ZAPIER', 'CRM', 'GOOGLE_SHEETS', name='integrationtype')
sync_status = sa.Enum('SUCCESS', 'FAILED', name='syncstatus')
email_status = sa.Enum('SENT', 'FAILED', 'SKIPPED', name='emailstatus')


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=True),
    ]


def upgrade() -> None:
    op.create_table('users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('uid', sa.String(length=128), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('full_name', sa.String(length=255), nullable=True),
        sa.Column('username', sa.String(length=100), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        sa.Column('subscription', subscription_tier, nullable=False),
        sa.Column('payment_status', payment_status, nullable=False),
        sa.Column('subscription_date', sa.DateTime(), nullable=True),
        sa.Column('subscription_expiry_date', sa.DateTime(), nullable=True),
        sa.Column('grace_period_used', sa.Boolean(), nullable=True),
        sa.Column('paystack_reference', sa.String(length=255), nullable=True),
        sa.Column('max_forms', sa.Integer(), nullable=True),
        sa.Column('max_leads', sa.Integer(), nullable=True),
        sa.Column('last_login', sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_uid', 'users', ['uid'], unique=True)
    op.create_index('ix_users_email', 'users', ['email'])
    op.create_index('ix_users_username', 'users', ['username'], unique=True)

    op.create_table('forms',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('form_name', sa.String(length=255), nullable=True),
        sa.Column('blocks', sa.JSON(), nullable=False),
        sa.Column('questions', sa.JSON(), nullable=False),
        sa.Column('media', sa.JSON(), nullable=False),
        sa.Column('form_style', sa.JSON(), nullable=False),
        sa.Column('is_published', sa.Boolean(), nullable=True),
        sa.Column('share_url', sa.String(length=500), nullable=True),
        sa.Column('responses_count', sa.Integer(), nullable=True),
        sa.Column('last_response_at', sa.DateTime(), nullable=True),
        sa.Column('has_zapier_integration', sa.Boolean(), nullable=True),
        sa.Column('has_crm_integration', sa.Boolean(), nullable=True),
        sa.Column('crm_type', sa.String(length=50), nullable=True),
        sa.Column('has_google_sheets_integration', sa.Boolean(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_forms_user_id', 'forms', ['user_id'])
    op.create_index('ix_forms_is_published', 'forms', ['is_published'])

    op.create_table('form_drafts',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('form_key', sa.String(length=36), nullable=False),
        sa.Column('payload', sa.JSON(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'form_key', name='uq_form_drafts_user_form')
    )
    op.create_index('ix_form_drafts_id', 'form_drafts', ['id'])
    op.create_index('ix_form_drafts_user_id', 'form_drafts', ['user_id'])

    op.create_table('form_submissions',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('form_id', sa.String(length=36), nullable=False),
        sa.Column('form_data', sa.JSON(), nullable=False),
        sa.Column('submitted_at', sa.DateTime(), nullable=False),
        sa.Column('user_agent', sa.Text(), nullable=True),
        sa.Column('ip_address', sa.String(length=45), nullable=True),
        sa.Column('session_id', sa.String(length=255), nullable=True),
        sa.Column('lead_score', sa.Integer(), nullable=True),
        sa.Column('contact_info', sa.JSON(), nullable=False),
        sa.ForeignKeyConstraint(['form_id'], ['forms.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_form_submissions_form_id', 'form_submissions', ['form_id'])
    op.create_index('ix_form_submissions_submitted_at', 'form_submissions', ['submitted_at'])

    op.create_table('analytics_events',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('form_id', sa.String(length=36), nullable=False),
        sa.Column('event_type', analytics_event_type, nullable=False),
        sa.Column('ip_address', sa.String(length=45), nullable=True),
        sa.Column('user_agent', sa.Text(), nullable=True),
        sa.Column('session_id', sa.String(length=255), nullable=True),
        sa.Column('metadata', sa.JSON(), nullable=True),
        sa.Column('timestamp', sa.DateTime(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['form_id'], ['forms.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_analytics_events_id', 'analytics_events', ['id'])
    op.create_index('ix_analytics_events_form_id', 'analytics_events', ['form_id'])
    op.create_index('ix_analytics_events_event_type', 'analytics_events', ['event_type'])
    op.create_index('ix_analytics_events_timestamp', 'analytics_events', ['timestamp'])

    op.create_table('zapier_integrations',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('form_id', sa.String(length=36), nullable=False),
        sa.Column('webhook_url', sa.String(length=1000), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        sa.Column('custom_fields', sa.JSON(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['form_id'], ['forms.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_zapier_integrations_id', 'zapier_integrations', ['id'])
    op.create_index('ix_zapier_integrations_form_id', 'zapier_integrations', ['form_id'])

    op.create_table('crm_integrations',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('form_id', sa.String(length=36), nullable=False),
        sa.Column('crm_type', crm_type, nullable=False),
        sa.Column('access_token', sa.Text(), nullable=False),
        sa.Column('refresh_token', sa.Text(), nullable=True),
        sa.Column('client_id', sa.String(length=255), nullable=True),
        sa.Column('client_secret', sa.String(length=255), nullable=True),
        sa.Column('account_id', sa.String(length=255), nullable=True),
        sa.Column('portal_id', sa.String(length=255), nullable=True),
        sa.Column('instance_url', sa.String(length=500), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['form_id'], ['forms.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_crm_integrations_id', 'crm_integrations', ['id'])
    op.create_index('ix_crm_integrations_form_id', 'crm_integrations', ['form_id'])

    op.create_table('google_sheets_integrations',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('form_id', sa.String(length=36), nullable=False),
        sa.Column('spreadsheet_id', sa.String(length=255), nullable=False),
        sa.Column('sheet_name', sa.String(length=255), nullable=False),
        sa.Column('access_token', sa.Text(), nullable=False),
        sa.Column('refresh_token', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['form_id'], ['forms.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_google_sheets_integrations_id', 'google_sheets_integrations', ['id'])
    op.create_index('ix_google_sheets_integrations_form_id', 'google_sheets_integrations', ['form_id'])

    op.create_table('integration_sync_logs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('integration_type', integration_type, nullable=False),
        sa.Column('form_id', sa.String(length=36), nullable=True),
        sa.Column('submission_id', sa.String(length=36), nullable=True),
        sa.Column('target', sa.String(length=1000), nullable=True),
        sa.Column('payload', sa.JSON(), nullable=True),
        sa.Column('status', sync_status, nullable=False),
        sa.Column('error', sa.Text(), nullable=True),
        sa.Column('synced_at', sa.DateTime(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_integration_sync_logs_id', 'integration_sync_logs', ['id'])
    op.create_index('ix_integration_sync_logs_integration_type', 'integration_sync_logs', ['integration_type'])
    op.create_index('ix_integration_sync_logs_form_id', 'integration_sync_logs', ['form_id'])

    op.create_table('email_notifications',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('to', sa.String(length=255), nullable=False),
        sa.Column('subject', sa.String(length=500), nullable=False),
        sa.Column('html', sa.Text(), nullable=False),
        sa.Column('form_id', sa.String(length=36), nullable=True),
        sa.Column('form_title', sa.String(length=255), nullable=True),
        sa.Column('submission_id', sa.String(length=36), nullable=True),
        sa.Column('status', email_status, nullable=False),
        sa.Column('sent_at', sa.DateTime(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_email_notifications_id', 'email_notifications', ['id'])
    op.create_index('ix_email_notifications_form_id', 'email_notifications', ['form_id'])

    op.create_table('payment_transactions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=True),
        sa.Column('reference', sa.String(length=255), nullable=False),
        sa.Column('amount', sa.Integer(), nullable=False),
        sa.Column('currency', sa.String(length=10), nullable=False),
        sa.Column('status', sa.String(length=50), nullable=False),
        sa.Column('paid_at', sa.DateTime(), nullable=True),
        sa.Column('raw', sa.JSON(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_payment_transactions_id', 'payment_transactions', ['id'])
    op.create_index('ix_payment_transactions_user_id', 'payment_transactions', ['user_id'])
    op.create_index('ix_payment_transactions_reference', 'payment_transactions', ['reference'], unique=True)


def downgrade() -> None:
    op.drop_table('payment_transactions')
    op.drop_table('email_notifications')
    op.drop_table('integration_sync_logs')
    op.drop_table('google_sheets_integrations')
    op.drop_table('crm_integrations')
    op.drop_table('zapier_integrations')
    op.drop_table('analytics_events')
    op.drop_table('form_submissions')
    op.drop_table('form_drafts')
    op.drop_table('forms')
    op.drop_table('users')

    bind = op.get_bind()
    for enum_type in (email_status, sync_status, integration_type, crm_type,
                      analytics_event_type, payment_status, subscription_tier):
        enum_type.drop(bind, checkfirst=True)
