"""create_salary_engine_tables

Revision ID: a1c4e7f2b901
Revises:
Create Date: 2026-01-12 10:20:31.118402

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = 'a1c4e7f2b901'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Учебные сущности, настройки весов обязательств, записи зарплаты и расшифровка."""

    op.create_table(
        'teachers',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('first_name', sa.String(length=255), nullable=False),
        sa.Column('last_name', sa.String(length=255), nullable=True),
        sa.Column('hourly_rate', sa.Numeric(precision=12, scale=2), nullable=False, server_default='0'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_teachers_id', 'teachers', ['id'])
    op.create_index('ix_teachers_is_active', 'teachers', ['is_active'])

    op.create_table(
        'students',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('first_name', sa.String(length=255), nullable=False),
        sa.Column('last_name', sa.String(length=255), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='ACTIVE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_students_id', 'students', ['id'])
    op.create_index('ix_students_status', 'students', ['status'])

    op.create_table(
        'groups',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('teacher_id', sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(['teacher_id'], ['teachers.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_groups_id', 'groups', ['id'])
    op.create_index('ix_groups_teacher_id', 'groups', ['teacher_id'])

    op.create_table(
        'group_enrollments',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('group_id', sa.Integer(), nullable=False),
        sa.Column('student_id', sa.Integer(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('enrolled_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['group_id'], ['groups.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['student_id'], ['students.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('group_id', 'student_id', name='uq_group_enrollment')
    )
    op.create_index('ix_group_enrollments_id', 'group_enrollments', ['id'])
    op.create_index('ix_group_enrollments_group_id', 'group_enrollments', ['group_id'])
    op.create_index('ix_group_enrollments_student_id', 'group_enrollments', ['student_id'])

    op.create_table(
        'lessons',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('teacher_id', sa.Integer(), nullable=False),
        sa.Column('group_id', sa.Integer(), nullable=True),
        sa.Column('topic', sa.String(length=255), nullable=True),
        sa.Column('scheduled_at', sa.DateTime(), nullable=False),
        sa.Column('duration_minutes', sa.Integer(), nullable=False, server_default='60'),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='SCHEDULED'),
        sa.Column('hourly_rate_snapshot', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['teacher_id'], ['teachers.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['group_id'], ['groups.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_lessons_id', 'lessons', ['id'])
    op.create_index('ix_lessons_teacher_id', 'lessons', ['teacher_id'])
    op.create_index('ix_lessons_group_id', 'lessons', ['group_id'])
    op.create_index('ix_lessons_scheduled_at', 'lessons', ['scheduled_at'])
    op.create_index('ix_lessons_status', 'lessons', ['status'])

    op.create_table(
        'attendances',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('lesson_id', sa.Integer(), nullable=False),
        sa.Column('student_id', sa.Integer(), nullable=False),
        sa.Column('is_present', sa.Boolean(), nullable=False),
        sa.Column('marked_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['lesson_id'], ['lessons.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['student_id'], ['students.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('lesson_id', 'student_id', name='uq_attendance_lesson_student')
    )
    op.create_index('ix_attendances_id', 'attendances', ['id'])
    op.create_index('ix_attendances_lesson_id', 'attendances', ['lesson_id'])
    op.create_index('ix_attendances_student_id', 'attendances', ['student_id'])

    op.create_table(
        'lesson_feedbacks',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('lesson_id', sa.Integer(), nullable=False),
        sa.Column('student_id', sa.Integer(), nullable=False),
        sa.Column('content', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['lesson_id'], ['lessons.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['student_id'], ['students.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_lesson_feedbacks_id', 'lesson_feedbacks', ['id'])
    op.create_index('ix_lesson_feedbacks_lesson_id', 'lesson_feedbacks', ['lesson_id'])
    op.create_index('ix_lesson_feedbacks_student_id', 'lesson_feedbacks', ['student_id'])

    op.create_table(
        'chats',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('group_id', sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(['group_id'], ['groups.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_chats_id', 'chats', ['id'])
    op.create_index('ix_chats_group_id', 'chats', ['group_id'])

    op.create_table(
        'chat_messages',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('chat_id', sa.Integer(), nullable=False),
        sa.Column('lesson_id', sa.Integer(), nullable=True),
        sa.Column('kind', sa.String(length=20), nullable=False),
        sa.Column('sent_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['chat_id'], ['chats.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['lesson_id'], ['lessons.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_chat_messages_id', 'chat_messages', ['id'])
    op.create_index('ix_chat_messages_chat_id', 'chat_messages', ['chat_id'])
    op.create_index('ix_chat_messages_lesson_id', 'chat_messages', ['lesson_id'])

    op.create_table(
        'obligation_settings',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('absence_percent', sa.Integer(), nullable=False, server_default='25'),
        sa.Column('feedback_percent', sa.Integer(), nullable=False, server_default='25'),
        sa.Column('voice_percent', sa.Integer(), nullable=False, server_default='25'),
        sa.Column('text_percent', sa.Integer(), nullable=False, server_default='25'),
        sa.Column('version', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_by', sa.String(length=255), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('absence_percent BETWEEN 0 AND 100', name='ck_absence_percent_range'),
        sa.CheckConstraint('feedback_percent BETWEEN 0 AND 100', name='ck_feedback_percent_range'),
        sa.CheckConstraint('voice_percent BETWEEN 0 AND 100', name='ck_voice_percent_range'),
        sa.CheckConstraint('text_percent BETWEEN 0 AND 100', name='ck_text_percent_range'),
        sa.CheckConstraint(
            'absence_percent + feedback_percent + voice_percent + text_percent = 100',
            name='ck_obligation_percents_sum'
        )
    )

    op.create_table(
        'salary_records',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('teacher_id', sa.Integer(), nullable=False),
        sa.Column('year', sa.Integer(), nullable=False),
        sa.Column('month', sa.Integer(), nullable=False),
        sa.Column('lessons_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('gross_amount', sa.Numeric(precision=12, scale=2), nullable=False, server_default='0'),
        sa.Column('deduction_amount', sa.Numeric(precision=12, scale=2), nullable=False, server_default='0'),
        sa.Column('net_amount', sa.Numeric(precision=12, scale=2), nullable=False, server_default='0'),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='PENDING'),
        sa.Column('generated_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('paid_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('config_version', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('config_snapshot', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.ForeignKeyConstraint(['teacher_id'], ['teachers.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('teacher_id', 'year', 'month', name='uq_salary_record_teacher_period')
    )
    op.create_index('ix_salary_records_id', 'salary_records', ['id'])
    op.create_index('ix_salary_records_teacher_id', 'salary_records', ['teacher_id'])
    op.create_index('ix_salary_records_status', 'salary_records', ['status'])

    op.create_table(
        'salary_breakdown_lines',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('salary_record_id', sa.Integer(), nullable=False),
        sa.Column('lesson_id', sa.Integer(), nullable=False),
        sa.Column('lesson_name', sa.String(length=255), nullable=False),
        sa.Column('lesson_date', sa.DateTime(), nullable=False),
        sa.Column('duration_minutes', sa.Integer(), nullable=False),
        sa.Column('hourly_rate_snapshot', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('gross_amount', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('deduction_amount', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('net_amount', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('penalty_percent', sa.Integer(), nullable=False),
        sa.Column('absence_marked', sa.Boolean(), nullable=False),
        sa.Column('feedback_complete', sa.Boolean(), nullable=False),
        sa.Column('voice_sent', sa.Boolean(), nullable=False),
        sa.Column('text_sent', sa.Boolean(), nullable=False),
        sa.Column('missing_obligations', postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['salary_record_id'], ['salary_records.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('salary_record_id', 'lesson_id', name='uq_breakdown_line_record_lesson')
    )
    op.create_index('ix_salary_breakdown_lines_id', 'salary_breakdown_lines', ['id'])
    op.create_index('ix_salary_breakdown_lines_salary_record_id', 'salary_breakdown_lines', ['salary_record_id'])
    op.create_index('ix_salary_breakdown_lines_lesson_id', 'salary_breakdown_lines', ['lesson_id'])

    op.execute("COMMENT ON TABLE obligation_settings IS 'Веса обязательств преподавателя (одна строка)'")
    op.execute("COMMENT ON COLUMN salary_records.config_snapshot IS 'Веса обязательств, с которыми выполнен расчёт'")
    op.execute("COMMENT ON TABLE salary_breakdown_lines IS 'Расшифровка зарплаты по урокам'")


def downgrade() -> None:
    """Удаление таблиц движка расчёта зарплат."""
    op.drop_table('salary_breakdown_lines')
    op.drop_table('salary_records')
    op.drop_table('obligation_settings')
    op.drop_table('chat_messages')
    op.drop_table('chats')
    op.drop_table('lesson_feedbacks')
    op.drop_table('attendances')
    op.drop_table('lessons')
    op.drop_table('group_enrollments')
    op.drop_table('groups')
    op.drop_table('students')
    op.drop_table('teachers')
