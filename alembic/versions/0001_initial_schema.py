"""Initial schema

Revision ID: 0001
Revises:
Create Date: 2025-06-02

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _order_columns() -> list:
    """Columns shared by catering and on-demand orders."""
    return [
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('pickup_address_id', sa.String(length=36), nullable=False),
        sa.Column('delivery_address_id', sa.String(length=36), nullable=False),
        sa.Column('order_number', sa.String(length=100), nullable=False),
        sa.Column('brokerage', sa.String(length=100), nullable=True),
        sa.Column('pickup_date_time', sa.DateTime(), nullable=True),
        sa.Column('arrival_date_time', sa.DateTime(), nullable=True),
        sa.Column('complete_date_time', sa.DateTime(), nullable=True),
        sa.Column('client_attention', sa.String(length=255), nullable=True),
        sa.Column('pickup_notes', sa.Text(), nullable=True),
        sa.Column('special_notes', sa.Text(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('driver_status', sa.String(length=30), nullable=True),
        sa.Column('order_total', sa.Numeric(precision=10, scale=2), nullable=True),
        sa.Column('tip', sa.Numeric(precision=10, scale=2), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['profiles.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['pickup_address_id'], ['addresses.id']),
        sa.ForeignKeyConstraint(['delivery_address_id'], ['addresses.id']),
        sa.PrimaryKeyConstraint('id'),
    ]


def _order_indexes(table: str) -> None:
    op.create_index(f'ix_{table}_user_id', table, ['user_id'], unique=False)
    op.create_index(f'ix_{table}_order_number', table, ['order_number'], unique=True)
    op.create_index(f'ix_{table}_status', table, ['status'], unique=False)
    op.create_index(f'ix_{table}_created_at', table, ['created_at'], unique=False)


def upgrade() -> None:
    op.create_table(
        'profiles',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=True),
        sa.Column('type', sa.String(length=20), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('company_name', sa.String(length=255), nullable=True),
        sa.Column('contact_name', sa.String(length=255), nullable=True),
        sa.Column('contact_number', sa.String(length=50), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.Column('deleted_by', sa.String(length=36), nullable=True),
        sa.Column('deletion_reason', sa.String(length=1000), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
    )
    op.create_index('ix_profiles_type', 'profiles', ['type'], unique=False)
    op.create_index('ix_profiles_deleted_at', 'profiles', ['deleted_at'], unique=False)

    op.create_table(
        'addresses',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=True),
        sa.Column('street1', sa.String(length=255), nullable=False),
        sa.Column('street2', sa.String(length=255), nullable=True),
        sa.Column('city', sa.String(length=100), nullable=False),
        sa.Column('state', sa.String(length=50), nullable=False),
        sa.Column('zip', sa.String(length=20), nullable=False),
        sa.Column('county', sa.String(length=100), nullable=True),
        sa.Column('is_restaurant', sa.Boolean(), nullable=False),
        sa.Column('is_shared', sa.Boolean(), nullable=False),
        sa.Column('created_by', sa.String(length=36), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['created_by'], ['profiles.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'catering_requests',
        *_order_columns(),
        sa.Column('headcount', sa.Integer(), nullable=True),
        sa.Column('need_host', sa.String(length=5), nullable=False),
        sa.Column('hours_needed', sa.Numeric(precision=5, scale=2), nullable=True),
        sa.Column('number_of_hosts', sa.Integer(), nullable=True),
    )
    _order_indexes('catering_requests')

    op.create_table(
        'on_demand_requests',
        *_order_columns(),
        sa.Column('item_delivered', sa.String(length=255), nullable=True),
        sa.Column('vehicle_type', sa.String(length=10), nullable=False),
        sa.Column('length', sa.Numeric(precision=10, scale=2), nullable=True),
        sa.Column('width', sa.Numeric(precision=10, scale=2), nullable=True),
        sa.Column('height', sa.Numeric(precision=10, scale=2), nullable=True),
        sa.Column('weight', sa.Numeric(precision=10, scale=2), nullable=True),
    )
    _order_indexes('on_demand_requests')

    op.create_table(
        'job_applications',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('profile_id', sa.String(length=36), nullable=True),
        sa.Column('first_name', sa.String(length=100), nullable=False),
        sa.Column('last_name', sa.String(length=100), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('position', sa.String(length=100), nullable=False),
        sa.Column('address_street', sa.String(length=255), nullable=True),
        sa.Column('address_city', sa.String(length=100), nullable=True),
        sa.Column('address_state', sa.String(length=50), nullable=True),
        sa.Column('address_zip', sa.String(length=20), nullable=True),
        sa.Column('education', sa.Text(), nullable=True),
        sa.Column('work_experience', sa.Text(), nullable=True),
        sa.Column('skills', sa.Text(), nullable=True),
        sa.Column('cover_letter', sa.Text(), nullable=True),
        sa.Column('resume_url', sa.String(length=1000), nullable=True),
        sa.Column('drivers_license_url', sa.String(length=1000), nullable=True),
        sa.Column('insurance_url', sa.String(length=1000), nullable=True),
        sa.Column('vehicle_registration_url', sa.String(length=1000), nullable=True),
        sa.Column('food_handler_url', sa.String(length=1000), nullable=True),
        sa.Column('hipaa_url', sa.String(length=1000), nullable=True),
        sa.Column('driver_photo_url', sa.String(length=1000), nullable=True),
        sa.Column('car_photo_url', sa.String(length=1000), nullable=True),
        sa.Column('equipment_photo_url', sa.String(length=1000), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['profile_id'], ['profiles.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_job_applications_email', 'job_applications', ['email'], unique=False)
    op.create_index('ix_job_applications_position', 'job_applications', ['position'], unique=False)
    op.create_index('ix_job_applications_status', 'job_applications', ['status'], unique=False)
    op.create_index('ix_job_applications_created_at', 'job_applications', ['created_at'], unique=False)

    op.create_table(
        'application_sessions',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('session_token', sa.String(length=128), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('upload_count', sa.Integer(), nullable=False),
        sa.Column('max_uploads', sa.Integer(), nullable=False),
        sa.Column('first_name', sa.String(length=100), nullable=False),
        sa.Column('last_name', sa.String(length=100), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('position', sa.String(length=100), nullable=False),
        sa.Column('ip_address', sa.String(length=64), nullable=False),
        sa.Column('user_agent', sa.String(length=500), nullable=True),
        sa.Column('completed', sa.Boolean(), nullable=False),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
        sa.Column('job_application_id', sa.String(length=36), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_application_sessions_session_token', 'application_sessions', ['session_token'], unique=True)
    op.create_index('ix_application_sessions_ip_address', 'application_sessions', ['ip_address'], unique=False)
    op.create_index('ix_application_sessions_created_at', 'application_sessions', ['created_at'], unique=False)

    op.create_table(
        'file_uploads',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=True),
        sa.Column('file_name', sa.String(length=255), nullable=False),
        sa.Column('file_type', sa.String(length=100), nullable=False),
        sa.Column('file_size', sa.Integer(), nullable=False),
        sa.Column('file_url', sa.String(length=1000), nullable=False),
        sa.Column('category', sa.String(length=50), nullable=True),
        sa.Column('is_temporary', sa.Boolean(), nullable=False),
        sa.Column('uploaded_at', sa.DateTime(), nullable=False),
        sa.Column('catering_request_id', sa.String(length=36), nullable=True),
        sa.Column('on_demand_id', sa.String(length=36), nullable=True),
        sa.Column('job_application_id', sa.String(length=36), nullable=True),
        sa.Column('application_session_id', sa.String(length=36), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['profiles.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['catering_request_id'], ['catering_requests.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['on_demand_id'], ['on_demand_requests.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['job_application_id'], ['job_applications.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['application_session_id'], ['application_sessions.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_file_uploads_catering_request_id', 'file_uploads', ['catering_request_id'], unique=False)
    op.create_index('ix_file_uploads_on_demand_id', 'file_uploads', ['on_demand_id'], unique=False)
    op.create_index('ix_file_uploads_job_application_id', 'file_uploads', ['job_application_id'], unique=False)
    op.create_index('ix_file_uploads_application_session_id', 'file_uploads', ['application_session_id'], unique=False)

    op.create_table(
        'upload_errors',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('correlation_id', sa.String(length=64), nullable=False),
        sa.Column('error_type', sa.String(length=50), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('user_message', sa.Text(), nullable=False),
        sa.Column('details', sa.Text(), nullable=True),
        sa.Column('user_id', sa.String(length=36), nullable=True),
        sa.Column('timestamp', sa.DateTime(), nullable=False),
        sa.Column('retryable', sa.Boolean(), nullable=False),
        sa.Column('resolved', sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_upload_errors_correlation_id', 'upload_errors', ['correlation_id'], unique=False)
    op.create_index('ix_upload_errors_error_type', 'upload_errors', ['error_type'], unique=False)
    op.create_index('ix_upload_errors_timestamp', 'upload_errors', ['timestamp'], unique=False)

    op.create_table(
        'user_audits',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('action', sa.String(length=50), nullable=False),
        sa.Column('performed_by', sa.String(length=36), nullable=True),
        sa.Column('changes', sa.JSON(), nullable=True),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.Column('metadata', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_user_audits_user_id', 'user_audits', ['user_id'], unique=False)
    op.create_index('ix_user_audits_action', 'user_audits', ['action'], unique=False)
    op.create_index('ix_user_audits_performed_by', 'user_audits', ['performed_by'], unique=False)
    op.create_index('ix_user_audits_created_at', 'user_audits', ['created_at'], unique=False)

    op.create_table(
        'webhook_logs',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('carrier_id', sa.String(length=50), nullable=False),
        sa.Column('order_number', sa.String(length=100), nullable=False),
        sa.Column('event', sa.String(length=50), nullable=False),
        sa.Column('url', sa.String(length=1000), nullable=False),
        sa.Column('success', sa.Boolean(), nullable=False),
        sa.Column('status_code', sa.Integer(), nullable=True),
        sa.Column('latency_ms', sa.Float(), nullable=False),
        sa.Column('error', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_webhook_logs_carrier_id', 'webhook_logs', ['carrier_id'], unique=False)
    op.create_index('ix_webhook_logs_created_at', 'webhook_logs', ['created_at'], unique=False)


def downgrade() -> None:
    op.drop_table('webhook_logs')
    op.drop_table('user_audits')
    op.drop_table('upload_errors')
    op.drop_table('file_uploads')
    op.drop_table('application_sessions')
    op.drop_table('job_applications')
    op.drop_table('on_demand_requests')
    op.drop_table('catering_requests')
    op.drop_table('addresses')
    op.drop_table('profiles')
