import uuid

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base


class Syllabus(Base):
    __tablename__ = "syllabi"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    school_code: Mapped[str] = mapped_column(String(50), index=True, nullable=False)
    class_instance_id: Mapped[str] = mapped_column(String(36), index=True, nullable=False)
    subject_id: Mapped[str] = mapped_column(String(36), nullable=False)

    chapters: Mapped[list["SyllabusChapter"]] = relationship(
        back_populates="syllabus", order_by="SyllabusChapter.chapter_no"
    )


class SyllabusChapter(Base):
    __tablename__ = "syllabus_chapters"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    syllabus_id: Mapped[str] = mapped_column(ForeignKey("syllabi.id", ondelete="CASCADE"), index=True, nullable=False)
    chapter_no: Mapped[int] = mapped_column(Integer, nullable=False)
    title: Mapped[str] = mapped_column(String(200), nullable=False)

    syllabus: Mapped[Syllabus] = relationship(back_populates="chapters")
    topics: Mapped[list["SyllabusTopic"]] = relationship(
        back_populates="chapter", order_by="SyllabusTopic.topic_no"
    )


class SyllabusTopic(Base):
    __tablename__ = "syllabus_topics"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    chapter_id: Mapped[str] = mapped_column(
        ForeignKey("syllabus_chapters.id", ondelete="CASCADE"), index=True, nullable=False
    )
    topic_no: Mapped[int] = mapped_column(Integer, nullable=False)
    title: Mapped[str] = mapped_column(String(200), nullable=False)

    chapter: Mapped[SyllabusChapter] = relationship(back_populates="topics")
