"""create timetable slots

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""

from alembic import op
import sqlalchemy as sa

revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None

slot_type_enum = sa.Enum("period", "break", name="slot_type")


def upgrade() -> None:
    op.create_table(
        "timetable_slots",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("school_code", sa.String(length=50), nullable=False),
        sa.Column("class_instance_id", sa.String(length=36), nullable=False),
        sa.Column("class_date", sa.Date(), nullable=False),
        sa.Column("period_number", sa.Integer(), nullable=False),
        sa.Column("slot_type", slot_type_enum, nullable=False),
        sa.Column("start_time", sa.String(length=8), nullable=False),
        sa.Column("end_time", sa.String(length=8), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=True),
        sa.Column("subject_id", sa.String(length=36), nullable=True),
        sa.Column("teacher_id", sa.String(length=36), nullable=True),
        sa.Column("syllabus_chapter_id", sa.String(length=36), nullable=True),
        sa.Column("syllabus_topic_id", sa.String(length=36), nullable=True),
        sa.Column("plan_text", sa.Text(), nullable=True),
        sa.Column("status", sa.String(length=30), nullable=False, server_default="planned"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("class_instance_id", "class_date", "period_number", name="uq_timetable_slot_period"),
    )
    op.create_index("ix_timetable_slots_school_code", "timetable_slots", ["school_code"])
    op.create_index("ix_timetable_slots_class_day", "timetable_slots", ["class_instance_id", "class_date"])


def downgrade() -> None:
    op.drop_index("ix_timetable_slots_class_day", table_name="timetable_slots")
    op.drop_index("ix_timetable_slots_school_code", table_name="timetable_slots")
    op.drop_table("timetable_slots")
    slot_type_enum.drop(op.get_bind(), checkfirst=True)
