from app.models.syllabus import Syllabus, SyllabusChapter, SyllabusTopic
from app.services.slots import PeriodContent
from app.services.syllabus_resolver import (
    ChapterEntry,
    LabelState,
    SyllabusIndex,
    TopicEntry,
    load_syllabus_index,
    resolve,
)


def math_index() -> SyllabusIndex:
    index = SyllabusIndex()
    index.add_chapter(ChapterEntry(id="ch-3", chapter_no=3, title="Fractions", subject_id="math"))
    index.add_topic(TopicEntry(id="tp-2", topic_no=2, title="Adding like fractions", chapter_id="ch-3"))
    return index


def test_no_reference_is_not_assigned():
    label = resolve(PeriodContent(subject_id="math", teacher_id="t-1"), math_index())
    assert label.state == LabelState.not_assigned
    assert label.text == "Not assigned"


def test_reference_to_unloaded_subject_is_not_loaded():
    label = resolve(PeriodContent(subject_id="science", chapter_id="ch-9"), math_index())
    assert label.state == LabelState.not_loaded
    assert label.text == "Content not loaded"


def test_chapter_label():
    label = resolve(PeriodContent(subject_id="math", chapter_id="ch-3"), math_index())
    assert label.state == LabelState.resolved
    assert label.text == "Ch.3 Fractions"
    assert label.topic_no is None


def test_topic_label_takes_precedence():
    label = resolve(PeriodContent(subject_id="math", chapter_id="ch-3", topic_id="tp-2"), math_index())
    assert label.text == "Ch.3.2 Adding like fractions"
    assert (label.chapter_no, label.chapter_title, label.topic_no) == (3, "Fractions", 2)


def test_missing_entry_in_loaded_subject_is_unresolved():
    index = math_index()
    assert resolve(PeriodContent(subject_id="math", chapter_id="gone"), index).state == LabelState.unresolved
    assert resolve(PeriodContent(subject_id="math", chapter_id="ch-3", topic_id="gone"), index).state == (
        LabelState.unresolved
    )


def test_load_syllabus_index_scopes_by_school_and_class(db_session):
    syllabus = Syllabus(school_code="SCH1", class_instance_id="class-7a", subject_id="math")
    chapter = SyllabusChapter(chapter_no=1, title="Numbers")
    chapter.topics.append(SyllabusTopic(topic_no=1, title="Place value"))
    syllabus.chapters.append(chapter)
    empty = Syllabus(school_code="SCH1", class_instance_id="class-7a", subject_id="art")
    other_class = Syllabus(school_code="SCH1", class_instance_id="class-8b", subject_id="science")
    db_session.add_all([syllabus, empty, other_class])
    db_session.commit()

    index = load_syllabus_index(db_session, school_code="SCH1", class_id="class-7a")

    assert index.loaded_subjects == {"math", "art"}
    assert index.chapter_of(chapter.topics[0].id) == chapter.id
    label = resolve(PeriodContent(subject_id="math", topic_id=chapter.topics[0].id, chapter_id=chapter.id), index)
    assert label.text == "Ch.1.1 Place value"
    assert resolve(PeriodContent(subject_id="art", chapter_id="x"), index).state == LabelState.unresolved
    assert resolve(PeriodContent(subject_id="science", chapter_id="x"), index).state == LabelState.not_loaded
