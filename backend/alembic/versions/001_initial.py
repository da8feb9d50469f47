"""Initial database schema

Revision ID: 001_initial
Revises:
Create Date: 2026-10-17

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

DEFAULT_USER_ID = '00000000-0000-0000-0000-000000000001'


def upgrade() -> None:
    op.execute('CREATE EXTENSION IF NOT EXISTS "uuid-ossp"')

    # Users table
    op.create_table(
        'users',
        sa.Column('id', sa.UUID(), nullable=False, server_default=sa.text('uuid_generate_v4()')),
        sa.Column('auth_id', sa.String(255), nullable=True),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('organization', sa.String(255), nullable=True),
        sa.Column('role', sa.String(50), nullable=False, server_default='user'),
        sa.Column('language_pref', sa.String(10), nullable=False, server_default='en'),
        sa.Column('plan', sa.String(50), nullable=False, server_default='free'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('auth_id'),
        sa.UniqueConstraint('email'),
    )

    # Contracts table
    op.create_table(
        'contracts',
        sa.Column('id', sa.UUID(), nullable=False, server_default=sa.text('uuid_generate_v4()')),
        sa.Column('user_id', sa.UUID(), nullable=False),
        sa.Column('filename', sa.String(255), nullable=False),
        sa.Column('file_size', sa.Integer(), nullable=True),
        sa.Column('mime_type', sa.String(100), nullable=True),
        sa.Column('upload_date', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('analysis_status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('error_message', sa.Text(), nullable=True),
        sa.Column('contract_type', sa.String(255), nullable=True),
        sa.Column('risk_score', sa.String(20), nullable=True),
        sa.Column('jurisdiction', sa.String(255), nullable=True),
        sa.Column('arbitration_present', sa.Boolean(), nullable=True),
        sa.Column('content_text', sa.Text(), nullable=True),
        sa.Column('content_hash', sa.String(64), nullable=True),
        sa.Column('analysis_source', sa.String(20), nullable=True),
        sa.Column('analysis_metadata', postgresql.JSONB(), nullable=False, server_default='{}'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.CheckConstraint(
            "analysis_status IN ('pending', 'analyzing', 'completed', 'failed')",
            name='ck_contracts_analysis_status',
        ),
        sa.CheckConstraint(
            "risk_score IS NULL OR risk_score IN ('low', 'medium', 'high')",
            name='ck_contracts_risk_score',
        ),
    )
    op.create_index('ix_contracts_user_id', 'contracts', ['user_id'])
    op.create_index('ix_contracts_analysis_status', 'contracts', ['analysis_status'])
    op.create_index('ix_contracts_content_hash', 'contracts', ['content_hash'])

    # Clauses table
    op.create_table(
        'clauses',
        sa.Column('id', sa.UUID(), nullable=False, server_default=sa.text('uuid_generate_v4()')),
        sa.Column('contract_id', sa.UUID(), nullable=False),
        sa.Column('clause_number', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(500), nullable=False),
        sa.Column('clause_text', sa.Text(), nullable=False),
        sa.Column('summary_en', sa.Text(), nullable=True),
        sa.Column('summary_hi', sa.Text(), nullable=True),
        sa.Column('risk_score', sa.String(20), nullable=False),
        sa.Column('suggestion', sa.Text(), nullable=True),
        sa.Column('flag_type', sa.String(100), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['contract_id'], ['contracts.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('contract_id', 'clause_number', name='uq_clauses_contract_number'),
        sa.CheckConstraint(
            "risk_score IN ('safe', 'caution', 'risky')",
            name='ck_clauses_risk_score',
        ),
    )
    op.create_index('ix_clauses_contract_id', 'clauses', ['contract_id'])

    # Reports table (one per contract)
    op.create_table(
        'reports',
        sa.Column('id', sa.UUID(), nullable=False, server_default=sa.text('uuid_generate_v4()')),
        sa.Column('contract_id', sa.UUID(), nullable=False),
        sa.Column('pdf_url', sa.Text(), nullable=True),
        sa.Column('generated_on', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['contract_id'], ['contracts.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('contract_id'),
    )

    # Chat queries table
    op.create_table(
        'chat_queries',
        sa.Column('id', sa.UUID(), nullable=False, server_default=sa.text('uuid_generate_v4()')),
        sa.Column('user_id', sa.UUID(), nullable=False),
        sa.Column('contract_id', sa.UUID(), nullable=True),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('response', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['contract_id'], ['contracts.id'], ondelete='SET NULL'),
    )
    op.create_index('ix_chat_queries_user_id', 'chat_queries', ['user_id'])
    op.create_index('ix_chat_queries_contract_id', 'chat_queries', ['contract_id'])

    # Default owner for single-tenant deployments
    op.execute(
        f"""
        INSERT INTO users (id, email, name, role)
        VALUES ('{DEFAULT_USER_ID}', 'owner@contractsathi.local', 'Default User', 'admin')
        ON CONFLICT (id) DO NOTHING
        """
    )


def downgrade() -> None:
    op.drop_table('chat_queries')
    op.drop_table('reports')
    op.drop_table('clauses')
    op.drop_table('contracts')
    op.drop_table('users')
