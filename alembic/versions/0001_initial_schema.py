"""initial_schema

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-18

Creates users, audit logs, reference data (classes, subjects, exams),
students and marks documents.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '0001_initial_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


ID_TYPE = sa.BigInteger().with_variant(sa.Integer(), "sqlite")
JSON_TYPE = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")

USER_ROLES = ('ADMIN', 'TEACHER')
AUDIT_ACTIONS = (
    'USER_CREATED',
    'USER_LOGIN',
    'MARKS_SAVED',
    'MARK_DELETED',
    'UPLOAD_COMPLETED',
    'DATA_CREATED',
    'DATA_UPDATED',
    'DATA_DELETED',
    'DATA_SEEDED',
)


def timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
    ]


def upgrade() -> None:
    """Create all tables."""
    op.create_table(
        'users',
        sa.Column('id', ID_TYPE, primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('username', sa.String(255), nullable=False),
        sa.Column('password_hash', sa.Text(), nullable=False),
        sa.Column('role', sa.Enum(*USER_ROLES, name='userrole'), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('last_login_at', sa.DateTime(timezone=True), nullable=True),
        *timestamps(),
    )
    op.create_index('ix_users_username', 'users', ['username'], unique=True)

    op.create_table(
        'audit_logs',
        sa.Column('id', ID_TYPE, primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.BigInteger(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('action', sa.Enum(*AUDIT_ACTIONS, name='auditaction'), nullable=False),
        sa.Column('resource_type', sa.String(100), nullable=False),
        sa.Column('resource_id', sa.String(100), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('extra_data', JSON_TYPE, nullable=True),
        sa.Column('ip_address', sa.String(50), nullable=True),
        sa.Column('user_agent', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_audit_logs_user_id', 'audit_logs', ['user_id'])
    op.create_index('ix_audit_logs_action', 'audit_logs', ['action'])
    op.create_index('ix_audit_logs_created_at', 'audit_logs', ['created_at'])

    op.create_table(
        'classes',
        sa.Column('id', ID_TYPE, primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(100), nullable=False, unique=True),
    )

    op.create_table(
        'subjects',
        sa.Column('id', ID_TYPE, primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(100), nullable=False, unique=True),
    )

    op.create_table(
        'exams',
        sa.Column('id', ID_TYPE, primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('total_marks', sa.Integer(), nullable=False),
        sa.Column('exam_date', sa.Date(), nullable=True),
        *timestamps(),
        sa.CheckConstraint('total_marks > 0', name='ck_exam_total_marks_positive'),
    )
    op.create_index('ix_exams_name', 'exams', ['name'])

    op.create_table(
        'students',
        sa.Column('id', ID_TYPE, primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('class_id', sa.BigInteger(), sa.ForeignKey('classes.id', ondelete='RESTRICT'), nullable=False),
        *timestamps(),
    )
    op.create_index('ix_students_name', 'students', ['name'])
    op.create_index('ix_students_class_id', 'students', ['class_id'])

    op.create_table(
        'marks_documents',
        sa.Column('id', ID_TYPE, primary_key=True, autoincrement=True),
        sa.Column('class_id', sa.BigInteger(), sa.ForeignKey('classes.id', ondelete='CASCADE'), nullable=False),
        sa.Column('subject_id', sa.BigInteger(), sa.ForeignKey('subjects.id', ondelete='CASCADE'), nullable=False),
        sa.Column('exam_id', sa.BigInteger(), sa.ForeignKey('exams.id', ondelete='CASCADE'), nullable=False),
        sa.Column('exam_name', sa.String(255), nullable=False),
        sa.Column('exam_date', sa.Date(), nullable=True),
        sa.Column('total_marks', sa.Integer(), nullable=False),
        sa.Column('schema_version', sa.Integer(), nullable=False),
        sa.Column('marks', JSON_TYPE, nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('last_updated', sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint('class_id', 'subject_id', 'exam_id', name='uq_marks_class_subject_exam'),
    )
    op.create_index('ix_marks_documents_class_id', 'marks_documents', ['class_id'])
    op.create_index('ix_marks_documents_subject_id', 'marks_documents', ['subject_id'])
    op.create_index('ix_marks_documents_exam_id', 'marks_documents', ['exam_id'])


def downgrade() -> None:
    """Drop all tables."""
    op.drop_table('marks_documents')
    op.drop_table('students')
    op.drop_table('exams')
    op.drop_table('subjects')
    op.drop_table('classes')
    op.drop_table('audit_logs')
    op.drop_table('users')
    sa.Enum(name='auditaction').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='userrole').drop(op.get_bind(), checkfirst=True)
