import pytest

from setukpa.core.config import settings
from setukpa.core.exceptions import (
    DuplicatePaperError,
    InvalidTransitionError,
    OutOfRangeError,
    PermissionDeniedError,
)
from setukpa.models.assignment import Assignment, PaperTemplate
from setukpa.services import paper_service
from setukpa.services.structure import (
    ChapterSeed,
    initialize_structure,
    missing_chapters,
    template_word_target,
    total_words_target,
)


def test_default_skeleton_without_template():
    seeds = initialize_structure(None)
    assert [s.title for s in seeds] == settings.DEFAULT_CHAPTER_TITLES
    assert len(seeds) == 2


def test_template_without_structured_pages_falls_back_to_skeleton():
    template = PaperTemplate(name="Kosong", pages=[{"name": "Sampul"}])
    assert len(initialize_structure(template)) == 2


def test_chapters_come_from_structured_pages(template):
    seeds = initialize_structure(template)
    assert [s.title for s in seeds] == [
        "BAB I: PENDAHULUAN",
        "BAB II: PEMBAHASAN",
        "BAB III: PENUTUP",
    ]
    # subsection words count toward their chapter
    assert seeds[1] == ChapterSeed(title="BAB II: PEMBAHASAN", min_words=1200)


def test_chapter_title_falls_back_to_page_name():
    template = PaperTemplate(
        name="t", pages=[{"name": "Lampiran", "structure": [{"minWords": 10}]}]
    )
    assert initialize_structure(template) == [ChapterSeed(title="Lampiran", min_words=10)]


def test_total_words_target_is_recursive(template):
    assert total_words_target([{"minWords": 5, "subsections": [{"minWords": 7}]}]) == 12
    assert template_word_target(template) == 1700


def test_missing_chapters_matches_by_title(template):
    missing = missing_chapters(["BAB I: PENDAHULUAN", "BAB III: PENUTUP"], template)
    assert [m.title for m in missing] == ["BAB II: PEMBAHASAN"]
    assert missing_chapters(["x"], None) == []


def test_new_paper_has_draft_chapters(paper):
    assert len(paper.chapters) == 3
    for position, chapter in enumerate(paper.chapters):
        assert chapter.position == position
        assert chapter.status == "DRAFT"
        assert chapter.content == ""
        assert chapter.feedback_history == []
    assert paper.total_words == 1700
    assert paper.content_approval_status == "PENDING"


def test_paper_without_template_gets_skeleton(db_session, student):
    assignment = Assignment(title="Tugas", subject="Umum")
    db_session.add(assignment)
    db_session.commit()

    paper = paper_service.create_paper(db_session, student=student, assignment=assignment)
    assert [c.title for c in paper.chapters] == settings.DEFAULT_CHAPTER_TITLES
    assert all(c.status == "DRAFT" for c in paper.chapters)


def test_one_paper_per_assignment_and_student(db_session, paper, student, assignment):
    with pytest.raises(DuplicatePaperError):
        paper_service.create_paper(db_session, student=student, assignment=assignment)


def test_update_chapter_content_keeps_status(db_session, paper, student):
    chapter = paper.chapters[0]
    updated = paper_service.update_chapter_content(
        db_session,
        paper_id=paper.id,
        chapter_index=0,
        content="<p>Latar belakang</p>",
        version=chapter.version,
        user=student,
    )
    assert updated.content == "<p>Latar belakang</p>"
    assert updated.status == "DRAFT"
    assert updated.version == 2


@pytest.mark.parametrize("index", [-1, 3, 99])
def test_update_chapter_content_out_of_range(db_session, paper, student, index):
    with pytest.raises(OutOfRangeError):
        paper_service.update_chapter_content(
            db_session, paper_id=paper.id, chapter_index=index, content="x", version=1, user=student
        )


def test_only_owner_edits_content(db_session, paper, other_student, advisor):
    for user in (other_student, advisor):
        with pytest.raises(PermissionDeniedError):
            paper_service.update_chapter_content(
                db_session, paper_id=paper.id, chapter_index=0, content="x", version=1, user=user
            )


def test_approved_chapter_is_locked(db_session, paper, student, advisor):
    submitted = paper_service.submit_chapter(
        db_session, paper_id=paper.id, chapter_index=0, version=1, user=student
    )
    approved = paper_service.review_chapter(
        db_session,
        paper_id=paper.id,
        chapter_index=0,
        decision="APPROVED",
        version=submitted.version,
        user=advisor,
    )
    with pytest.raises(InvalidTransitionError):
        paper_service.update_chapter_content(
            db_session,
            paper_id=paper.id,
            chapter_index=0,
            content="x",
            version=approved.version,
            user=student,
        )


def test_sync_structure_appends_new_template_chapters(db_session, paper, template):
    template.pages = template.pages + [
        {"name": "Lampiran", "structure": [{"title": "LAMPIRAN", "minWords": 0}]}
    ]
    db_session.add(template)
    db_session.commit()

    synced = paper_service.sync_structure(db_session, paper=paper)
    assert [c.title for c in synced.chapters][-1] == "LAMPIRAN"
    assert synced.chapters[-1].position == 3
    assert len(synced.chapters) == 4

    # second sync is a no-op
    assert len(paper_service.sync_structure(db_session, paper=synced).chapters) == 4
