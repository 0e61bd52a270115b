"""
Unit tests for src/resume_import/staging.py

Tests the draft lifecycle (pending -> editing -> pending -> saving ->
committed), commit-all ordering and partial failure, and session reset.
"""

import pytest
from pydantic import ValidationError
from unittest.mock import MagicMock

from src.common.error_handling import DraftCommitError, DraftNotFoundError, DraftStateError
from src.resume_import.staging import (
    MSG_NOTHING_TO_SAVE,
    MSG_SAVE_FAILED,
    DraftStatus,
    ImportSession,
    begin_edit,
    cancel_edit,
    clear_session,
    commit_all,
    commit_draft,
    initialize_session,
    remove_draft,
    update_draft,
    update_profile_draft,
)
from src.resume_import.types import (
    ExtractedSkill,
    ExtractedWorkExperience,
    ImportSectionKey,
    ProfileExtraction,
    ProfileFieldsDraft,
)

WORK = ImportSectionKey.WORK_EXPERIENCES
SKILLS = ImportSectionKey.SKILLS


@pytest.fixture
def payload():
    return ProfileExtraction(
        profile=ProfileFieldsDraft(first_name="Jane"),
        work_experiences=[
            ExtractedWorkExperience(job_title="Engineer", company="Acme", start_date="2020-01"),
            ExtractedWorkExperience(job_title="Consultant"),
        ],
        skills=[ExtractedSkill(name="Python"), ExtractedSkill(name="SQL")],
        warnings=["Model warning"],
    )


@pytest.fixture
def session(payload):
    return initialize_session(ImportSession(), payload, {"work_experiences": 3})


def _work_draft(session):
    return session.items(WORK)[0]


class TestInitializeSession:

    def test_builds_drafts_with_existing_counts(self, session):
        assert _work_draft(session).request.display_order == 3
        assert [d.request.display_order for d in session.items(SKILLS)] == [0, 1]
        assert session.items(ImportSectionKey.EDUCATION) == []

    def test_all_drafts_start_pending(self, session):
        statuses = {d.status for drafts in session.sections.values() for d in drafts}

        assert statuses == {DraftStatus.PENDING}

    def test_global_warnings_follow_import_then_sections(self, session):
        assert session.warnings == [
            "Model warning",
            "Work experience #2: Missing company.",
            "Work experience #2: Missing or invalid start date.",
        ]

    def test_profile_and_metadata(self, session):
        assert session.profile.first_name == "Jane"
        assert session.profile_warnings == ["Model warning"]
        assert session.context_counts.work_experiences == 3
        assert session.last_imported_at is not None

    def test_reinitializing_replaces_contents(self, session):
        initialize_session(session, ProfileExtraction(), None)

        assert session.staged_count() == 0
        assert session.warnings == []

    def test_session_serializes_with_camel_case_requests(self, session):
        data = session.model_dump(mode="json", by_alias=True)

        work = data["sections"]["work_experiences"][0]
        assert work["request"]["jobTitle"] == "Engineer"
        assert work["status"] == "pending"
        assert data["contextCounts"]["workExperiences"] == 3


class TestEditing:

    def test_edit_cycle(self, session):
        draft = _work_draft(session)

        assert begin_edit(session, WORK, draft.id).status == DraftStatus.EDITING
        assert cancel_edit(session, WORK, draft.id).status == DraftStatus.PENDING

    def test_update_merges_patch_and_clears_warnings(self, session):
        draft = _work_draft(session)
        draft.warnings = ["Something to review"]
        begin_edit(session, WORK, draft.id)

        updated = update_draft(session, WORK, draft.id, {"jobTitle": "Staff Engineer"})

        assert updated.request.job_title == "Staff Engineer"
        assert updated.request.company == "Acme"
        assert updated.request.display_order == 3
        assert updated.warnings == []
        assert updated.status == DraftStatus.PENDING

    def test_invalid_update_leaves_draft_untouched(self, session):
        draft = _work_draft(session)
        begin_edit(session, WORK, draft.id)

        with pytest.raises(ValidationError):
            update_draft(session, WORK, draft.id, {"startDate": "last spring"})

        assert draft.request.start_date == "2020-01"
        assert draft.status == DraftStatus.EDITING

    def test_unknown_fields_are_rejected(self, session):
        with pytest.raises(ValidationError):
            update_draft(session, WORK, _work_draft(session).id, {"salary": 100})

    def test_unknown_item(self, session):
        with pytest.raises(DraftNotFoundError) as exc_info:
            begin_edit(session, WORK, "missing")

        assert exc_info.value.status == 404

    def test_remove_discards_without_persisting(self, session):
        draft = _work_draft(session)

        removed = remove_draft(session, WORK, draft.id)

        assert removed.status == DraftStatus.DISCARDED
        assert session.items(WORK) == []
        with pytest.raises(DraftNotFoundError):
            begin_edit(session, WORK, draft.id)


class TestCommitDraft:

    def test_commit_persists_and_removes(self, session):
        draft = _work_draft(session)
        create = MagicMock(return_value={"id": "rec-1"})

        record = commit_draft(session, WORK, draft.id, create)

        assert record == {"id": "rec-1"}
        assert draft.status == DraftStatus.COMMITTED
        assert session.items(WORK) == []
        section, body = create.call_args[0]
        assert section == "work_experiences"
        assert body["jobTitle"] == "Engineer"
        assert body["displayOrder"] == 3

    def test_failure_returns_draft_to_pending(self, session):
        draft = _work_draft(session)
        cause = RuntimeError("database down")
        create = MagicMock(side_effect=cause)

        with pytest.raises(DraftCommitError) as exc_info:
            commit_draft(session, WORK, draft.id, create)

        assert exc_info.value.__cause__ is cause
        assert draft.status == DraftStatus.PENDING
        assert session.items(WORK) == [draft]

    def test_cannot_commit_while_editing(self, session):
        draft = _work_draft(session)
        begin_edit(session, WORK, draft.id)
        create = MagicMock()

        with pytest.raises(DraftStateError) as exc_info:
            commit_draft(session, WORK, draft.id, create)

        assert exc_info.value.status == 409
        create.assert_not_called()

    def test_saving_draft_rejects_every_action(self, session):
        draft = _work_draft(session)
        draft.status = DraftStatus.SAVING

        for action in (begin_edit, cancel_edit, remove_draft):
            with pytest.raises(DraftStateError):
                action(session, WORK, draft.id)
        with pytest.raises(DraftStateError):
            update_draft(session, WORK, draft.id, {"jobTitle": "X"})
        with pytest.raises(DraftStateError):
            commit_draft(session, WORK, draft.id, MagicMock())


class TestCommitAll:

    def test_commits_everything_in_section_order(self, session):
        create = MagicMock(side_effect=lambda section, body: {"id": section})
        warnings = list(session.warnings)

        result = commit_all(session, create)

        assert result.success is True
        assert [c[0][0] for c in create.call_args_list] == ["work_experiences", "skills", "skills"]
        assert result.committed == {"work_experiences": 1, "skills": 2}
        assert result.summary == ["1 work experience", "2 skills"]
        assert result.message == "Saved 1 work experience, 2 skills."
        assert result.warnings == warnings

    def test_full_success_clears_session(self, session):
        commit_all(session, MagicMock(return_value={}))

        assert session.staged_count() == 0
        assert session.last_imported_at is None
        assert session.profile.is_empty()

    def test_stops_at_first_failure(self, session):
        skill_ids = [d.id for d in session.items(SKILLS)]
        create = MagicMock(side_effect=[{"id": "1"}, RuntimeError("down")])

        result = commit_all(session, create)

        assert result.success is False
        assert result.message == MSG_SAVE_FAILED
        assert result.committed == {"work_experiences": 1}
        assert result.failed_section == "skills"
        assert result.failed_item_id == skill_ids[0]
        assert [d.id for d in session.items(SKILLS)] == skill_ids
        assert all(d.status == DraftStatus.PENDING for d in session.items(SKILLS))
        assert create.call_count == 2

    def test_third_of_five_failure_keeps_the_rest_staged(self):
        payload = ProfileExtraction(skills=[ExtractedSkill(name=n) for n in "ABCDE"])
        session = initialize_session(ImportSession(), payload, {})
        skill_ids = [d.id for d in session.items(SKILLS)]
        create = MagicMock(side_effect=[{}, {}, RuntimeError("down"), {}, {}])

        result = commit_all(session, create)

        assert result.success is False
        assert result.committed == {"skills": 2}
        assert result.failed_item_id == skill_ids[2]
        assert [d.id for d in session.items(SKILLS)] == skill_ids[2:]
        assert all(d.status == DraftStatus.PENDING for d in session.items(SKILLS))
        assert create.call_count == 3

    def test_nothing_pending(self):
        create = MagicMock()

        result = commit_all(ImportSession(), create)

        assert result.success is True
        assert result.message == MSG_NOTHING_TO_SAVE
        create.assert_not_called()

    def test_drafts_being_edited_stay_staged(self, session):
        draft = _work_draft(session)
        begin_edit(session, WORK, draft.id)

        result = commit_all(session, MagicMock(return_value={}))

        assert result.committed == {"skills": 2}
        assert session.items(WORK) == [draft]
        assert session.last_imported_at is not None

    def test_result_to_dict(self, session):
        data = commit_all(session, MagicMock(return_value={})).to_dict()

        assert data["success"] is True
        assert data["failed_section"] is None


class TestProfileAndClear:

    def test_update_profile_from_mapping(self, session):
        profile = update_profile_draft(
            session, {"firstName": "Janet", "email": "janet@example.com"}, ["Reviewed"]
        )

        assert profile.first_name == "Janet"
        assert session.profile.email == "janet@example.com"
        assert session.profile_warnings == ["Reviewed"]

    def test_update_profile_rejects_bad_email(self, session):
        with pytest.raises(ValidationError):
            update_profile_draft(session, {"email": "not-an-email"})

        assert session.profile.first_name == "Jane"

    def test_clear_session(self, session):
        drafts = [d for drafts in session.sections.values() for d in drafts]

        clear_session(session)

        assert session.is_empty()
        assert session.warnings == []
        assert all(d.status == DraftStatus.DISCARDED for d in drafts)
