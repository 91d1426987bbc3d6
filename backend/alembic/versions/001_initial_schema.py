"""Initial Property Passport schema

Revision ID: 001_initial
Revises: 
Create Date: 2026-10-19

Twelve tables: accounts, properties, stakeholder grants, evidence (documents,
media), flags, events, tasks, invitations, watchlist, api cache, activity log.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ENUM_TYPES = [
    'primary_role', 'property_lifecycle', 'property_status', 'property_permission',
    'document_type', 'document_status', 'media_type', 'media_status',
    'flag_type', 'flag_severity', 'flag_status', 'task_priority', 'task_status',
    'invitation_permission', 'invitation_property_status', 'invitation_status',
    'api_provider', 'audit_action',
]


def upgrade() -> None:
    # === USERS ===
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('firebase_uid', sa.String(128), unique=True, nullable=False, index=True),
        sa.Column('email', sa.String(255), unique=True, nullable=False, index=True),
        sa.Column('full_name', sa.String(255), nullable=True),
        sa.Column('organisation', sa.String(255), nullable=True),
        sa.Column('avatar_url', sa.String(1024), nullable=True),
        sa.Column('primary_role', sa.Enum('consumer', 'agent', 'conveyancer', 'surveyor', 'admin', name='primary_role'), nullable=False, server_default='consumer'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )

    # === PROPERTIES ===
    op.create_table(
        'properties',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('created_by_user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True, index=True),
        sa.Column('title', sa.String(255), nullable=True),
        sa.Column('display_address', sa.String(500), nullable=False),
        sa.Column('uprn', sa.String(32), nullable=True, index=True),
        sa.Column('property_type', sa.String(50), nullable=True),
        sa.Column('tenure', sa.String(50), nullable=True),
        sa.Column('tags', postgresql.JSONB(), nullable=False, server_default='[]'),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('status', sa.Enum('draft', 'active', 'archived', name='property_lifecycle'), nullable=False, server_default='draft'),
        sa.Column('public_visibility', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('public_slug', sa.String(255), unique=True, nullable=True),
        sa.Column('latitude', sa.Float(), nullable=True),
        sa.Column('longitude', sa.Float(), nullable=True),
        sa.Column('bedrooms', sa.Integer(), nullable=True),
        sa.Column('bathrooms', sa.Integer(), nullable=True),
        sa.Column('price', sa.Integer(), nullable=True),
        sa.Column('epc_rating', sa.String(2), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
    )

    # === PROPERTY STAKEHOLDERS ===
    op.create_table(
        'property_stakeholders',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('property_id', sa.Uuid(), sa.ForeignKey('properties.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('status', sa.Enum('owner', 'buyer', 'tenant', name='property_status'), nullable=True),
        sa.Column('permission', sa.Enum('editor', 'viewer', name='property_permission'), nullable=True),
        sa.Column('granted_by_user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('granted_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('expires_at', sa.DateTime(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.UniqueConstraint('property_id', 'user_id', 'status', name='uq_stakeholder_property_user_status'),
    )

    # === DOCUMENTS ===
    op.create_table(
        'documents',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('property_id', sa.Uuid(), sa.ForeignKey('properties.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('uploaded_by_user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('document_type', sa.Enum('title', 'survey', 'search', 'identity', 'contract', 'warranty', 'planning', 'compliance', 'other', name='document_type'), nullable=False),
        sa.Column('storage_bucket', sa.String(100), nullable=False),
        sa.Column('storage_path', sa.String(1024), nullable=False),
        sa.Column('mime_type', sa.String(100), nullable=False),
        sa.Column('size_bytes', sa.BigInteger(), nullable=False),
        sa.Column('checksum', sa.String(64), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('status', sa.Enum('active', 'archived', name='document_status'), nullable=False, server_default='active'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.CheckConstraint('version >= 1', name='ck_documents_version_positive'),
    )

    # === MEDIA ===
    op.create_table(
        'media',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('property_id', sa.Uuid(), sa.ForeignKey('properties.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('uploaded_by_user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('media_type', sa.Enum('photo', 'video', 'floorplan', 'other', name='media_type'), nullable=False, server_default='photo'),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('storage_bucket', sa.String(100), nullable=False),
        sa.Column('storage_path', sa.String(1024), nullable=False),
        sa.Column('mime_type', sa.String(100), nullable=False),
        sa.Column('size_bytes', sa.BigInteger(), nullable=False),
        sa.Column('status', sa.Enum('active', 'archived', name='media_status'), nullable=False, server_default='active'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
    )

    # === PROPERTY EVENTS ===
    op.create_table(
        'property_events',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('property_id', sa.Uuid(), sa.ForeignKey('properties.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('actor_user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True, index=True),
        sa.Column('event_type', sa.String(64), nullable=False, index=True),
        sa.Column('event_payload', postgresql.JSONB(), nullable=False, server_default='{}'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now(), index=True),
    )

    # === PROPERTY FLAGS ===
    op.create_table(
        'property_flags',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('property_id', sa.Uuid(), sa.ForeignKey('properties.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('created_by_user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('flag_type', sa.Enum('data_quality', 'risk', 'compliance', 'ownership', 'document', 'other', name='flag_type'), nullable=False),
        sa.Column('severity', sa.Enum('low', 'medium', 'high', 'critical', name='flag_severity'), nullable=False, server_default='medium'),
        sa.Column('status', sa.Enum('open', 'in_review', 'resolved', 'dismissed', name='flag_status'), nullable=False, server_default='open', index=True),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('resolved_at', sa.DateTime(), nullable=True),
        sa.Column('resolved_by_user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
    )

    # === TASKS ===
    op.create_table(
        'tasks',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('property_id', sa.Uuid(), sa.ForeignKey('properties.id', ondelete='CASCADE'), nullable=True, index=True),
        sa.Column('created_by_user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('assigned_to_user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('priority', sa.Enum('low', 'medium', 'high', name='task_priority'), nullable=False, server_default='medium'),
        sa.Column('status', sa.Enum('open', 'completed', name='task_status'), nullable=False, server_default='open'),
        sa.Column('due_date', sa.Date(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
    )

    # === INVITATIONS ===
    op.create_table(
        'invitations',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False, index=True),
        sa.Column('property_id', sa.Uuid(), sa.ForeignKey('properties.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('invited_by_user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('role', sa.String(32), nullable=False),
        sa.Column('property_permission', sa.Enum('editor', 'viewer', name='invitation_permission'), nullable=False),
        sa.Column('property_status', sa.Enum('owner', 'buyer', 'tenant', name='invitation_property_status'), nullable=True),
        sa.Column('status', sa.Enum('pending', 'accepted', 'expired', 'revoked', name='invitation_status'), nullable=False, server_default='pending'),
        sa.Column('token', sa.String(64), unique=True, nullable=False, index=True),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('accepted_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )

    # === WATCHLIST ===
    op.create_table(
        'watchlist',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('property_id', sa.Uuid(), sa.ForeignKey('properties.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('notes', sa.String(500), nullable=True),
        sa.Column('alert_on_changes', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint('user_id', 'property_id', name='uq_watchlist_user_property'),
    )

    # === API CACHE ===
    op.create_table(
        'api_cache',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('property_id', sa.Uuid(), sa.ForeignKey('properties.id', ondelete='SET NULL'), nullable=True),
        sa.Column('api_provider', sa.Enum('epc', 'hmlr', 'flood', 'crime', 'planning', 'postcodes', name='api_provider'), nullable=False),
        sa.Column('cache_key', sa.String(512), nullable=False),
        sa.Column('payload', postgresql.JSONB(), nullable=False),
        sa.Column('response_size_bytes', sa.Integer(), nullable=True),
        sa.Column('error_message', sa.Text(), nullable=True),
        sa.Column('fetched_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('expires_at', sa.DateTime(), nullable=False, index=True),
        sa.UniqueConstraint('api_provider', 'cache_key', name='uq_api_cache_provider_key'),
    )

    # === ACTIVITY LOG ===
    op.create_table(
        'activity_log',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('actor_user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True, index=True),
        sa.Column('action', sa.Enum(
            'property_created', 'property_updated', 'visibility_changed', 'access_granted', 'access_revoked',
            'invite_sent', 'invite_accepted', 'invite_revoked', 'stakeholder_removed', 'profile_updated',
            name='audit_action',
        ), nullable=False, index=True),
        sa.Column('resource_type', sa.String(50), nullable=False, index=True),
        sa.Column('resource_id', sa.Uuid(), nullable=True),
        sa.Column('metadata', postgresql.JSONB(), nullable=False, server_default='{}'),
        sa.Column('ip_address', sa.String(45), nullable=True),
        sa.Column('user_agent', sa.String(500), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now(), index=True),
    )


def downgrade() -> None:
    for table in (
        'activity_log', 'api_cache', 'watchlist', 'invitations', 'tasks', 'property_flags',
        'property_events', 'media', 'documents', 'property_stakeholders', 'properties', 'users',
    ):
        op.drop_table(table)
    for enum_name in ENUM_TYPES:
        op.execute(f'DROP TYPE IF EXISTS {enum_name}')
