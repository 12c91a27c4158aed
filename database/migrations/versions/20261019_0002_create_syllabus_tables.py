"""create syllabus tables

Revision ID: 20261019_0002
Revises: 20261019_0001
Create Date: 2026-10-19 00:00:00.000000

"""

from alembic import op
import sqlalchemy as sa

revision = "20261019_0002"
down_revision = "20261019_0001"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "syllabi",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("school_code", sa.String(length=50), nullable=False),
        sa.Column("class_instance_id", sa.String(length=36), nullable=False),
        sa.Column("subject_id", sa.String(length=36), nullable=False),
    )
    op.create_index("ix_syllabi_school_code", "syllabi", ["school_code"])
    op.create_index("ix_syllabi_class_instance_id", "syllabi", ["class_instance_id"])

    op.create_table(
        "syllabus_chapters",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("syllabus_id", sa.String(length=36), sa.ForeignKey("syllabi.id", ondelete="CASCADE"), nullable=False),
        sa.Column("chapter_no", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
    )
    op.create_index("ix_syllabus_chapters_syllabus_id", "syllabus_chapters", ["syllabus_id"])

    op.create_table(
        "syllabus_topics",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column(
            "chapter_id",
            sa.String(length=36),
            sa.ForeignKey("syllabus_chapters.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("topic_no", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
    )
    op.create_index("ix_syllabus_topics_chapter_id", "syllabus_topics", ["chapter_id"])


def downgrade() -> None:
    op.drop_index("ix_syllabus_topics_chapter_id", table_name="syllabus_topics")
    op.drop_table("syllabus_topics")
    op.drop_index("ix_syllabus_chapters_syllabus_id", table_name="syllabus_chapters")
    op.drop_table("syllabus_chapters")
    op.drop_index("ix_syllabi_class_instance_id", table_name="syllabi")
    op.drop_index("ix_syllabi_school_code", table_name="syllabi")
    op.drop_table("syllabi")
