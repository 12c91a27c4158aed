from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from app.models.syllabus import Syllabus, SyllabusChapter
from app.services.slots import PeriodContent, TimeSlot


class LabelState(str, Enum):
    not_assigned = "not_assigned"
    not_loaded = "not_loaded"
    unresolved = "unresolved"
    resolved = "resolved"


@dataclass(frozen=True)
class ChapterEntry:
    id: str
    chapter_no: int
    title: str
    subject_id: str


@dataclass(frozen=True)
class TopicEntry:
    id: str
    topic_no: int
    title: str
    chapter_id: str


@dataclass
class SyllabusIndex:
    """Read-only chapter/topic lookup for one class, scoped per subject."""

    chapters: dict[str, ChapterEntry] = field(default_factory=dict)
    topics: dict[str, TopicEntry] = field(default_factory=dict)
    loaded_subjects: set[str] = field(default_factory=set)

    def is_loaded(self, subject_id: str | None) -> bool:
        return subject_id is not None and subject_id in self.loaded_subjects

    def add_chapter(self, entry: ChapterEntry) -> None:
        self.chapters[entry.id] = entry
        self.loaded_subjects.add(entry.subject_id)

    def add_topic(self, entry: TopicEntry) -> None:
        self.topics[entry.id] = entry

    def chapter_of(self, topic_id: str) -> str | None:
        topic = self.topics.get(topic_id)
        return topic.chapter_id if topic else None


@dataclass(frozen=True)
class SyllabusLabel:
    state: LabelState
    text: str
    chapter_no: int | None = None
    chapter_title: str | None = None
    topic_no: int | None = None
    topic_title: str | None = None


NOT_ASSIGNED = SyllabusLabel(LabelState.not_assigned, "Not assigned")
NOT_LOADED = SyllabusLabel(LabelState.not_loaded, "Content not loaded")
UNRESOLVED = SyllabusLabel(LabelState.unresolved, "Content missing")


def resolve(content: PeriodContent | TimeSlot | None, index: SyllabusIndex) -> SyllabusLabel:
    """Resolve a slot's chapter/topic reference to a display label.

    "Not assigned" (no reference) and "content not loaded" (reference set,
    subject's syllabus not yet in the index) are distinct states and must
    stay that way.
    """
    if isinstance(content, TimeSlot):
        content = content.content
    if not isinstance(content, PeriodContent) or not (content.chapter_id or content.topic_id):
        return NOT_ASSIGNED
    if not index.is_loaded(content.subject_id):
        return NOT_LOADED

    if content.topic_id:
        topic = index.topics.get(content.topic_id)
        chapter = index.chapters.get(topic.chapter_id) if topic else None
        if topic is None or chapter is None:
            return UNRESOLVED
        return SyllabusLabel(
            LabelState.resolved,
            f"Ch.{chapter.chapter_no}.{topic.topic_no} {topic.title}",
            chapter_no=chapter.chapter_no,
            chapter_title=chapter.title,
            topic_no=topic.topic_no,
            topic_title=topic.title,
        )

    chapter = index.chapters.get(content.chapter_id)
    if chapter is None:
        return UNRESOLVED
    return SyllabusLabel(
        LabelState.resolved,
        f"Ch.{chapter.chapter_no} {chapter.title}",
        chapter_no=chapter.chapter_no,
        chapter_title=chapter.title,
    )


def load_syllabus_index(db: Session, *, school_code: str, class_id: str) -> SyllabusIndex:
    index = SyllabusIndex()
    syllabi = db.execute(
        select(Syllabus)
        .where(Syllabus.school_code == school_code, Syllabus.class_instance_id == class_id)
        .options(selectinload(Syllabus.chapters).selectinload(SyllabusChapter.topics))
    ).scalars()
    for syllabus in syllabi:
        # A subject with a syllabus but no chapters is still loaded, just empty.
        index.loaded_subjects.add(syllabus.subject_id)
        for chapter in syllabus.chapters:
            index.add_chapter(
                ChapterEntry(
                    id=chapter.id,
                    chapter_no=chapter.chapter_no,
                    title=chapter.title,
                    subject_id=syllabus.subject_id,
                )
            )
            for topic in chapter.topics:
                index.add_topic(
                    TopicEntry(id=topic.id, topic_no=topic.topic_no, title=topic.title, chapter_id=chapter.id)
                )
    return index
