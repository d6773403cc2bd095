"""Tests for convention mutations: audit entries, diffs, versions, atomicity."""

from datetime import date

import pytest
from sqlalchemy.exc import OperationalError

from compliance.exceptions import ConflictError, NotFoundError, PersistenceError, ValidationError
from compliance.models.convention import AppendOnlyViolation, ConventionHistoryEntry
from compliance.services import convention_service


@pytest.fixture
def convention(db, enterprise, inspector):
    return convention_service.create_convention(
        db,
        acting_user_id=inspector.id,
        enterprise_id=enterprise.id,
        signed_date=date(2025, 12, 15),
        start_date=date(2026, 1, 1),
        end_date=date(2026, 12, 31),
        type="ANNUAL",
        advantages={"taxRelief": 0.1},
        obligations=["quarterly report"],
    )


class TestCreate:

    def test_create_records_created_entry(self, convention, inspector):
        assert convention.status == "DRAFT"
        assert convention.version == 1
        assert convention.created_by == inspector.id
        assert convention.last_modified_by == inspector.id
        assert len(convention.history) == 1
        entry = convention.history[0]
        assert entry.action == "CREATED"
        assert entry.changes == {"type": "ANNUAL"}
        assert entry.user_id == inspector.id

    def test_unknown_enterprise_is_not_found(self, db, inspector):
        with pytest.raises(NotFoundError) as exc:
            convention_service.create_convention(
                db,
                acting_user_id=inspector.id,
                enterprise_id="missing",
                start_date=date(2026, 1, 1),
                end_date=date(2026, 12, 31),
                type="ANNUAL",
            )
        assert exc.value.message == "Enterprise not found"
        assert db.query(ConventionHistoryEntry).count() == 0

    def test_start_after_end_is_rejected(self, db, enterprise, inspector):
        with pytest.raises(ValidationError):
            convention_service.create_convention(
                db,
                acting_user_id=inspector.id,
                enterprise_id=enterprise.id,
                start_date=date(2026, 6, 1),
                end_date=date(2026, 1, 1),
                type="ANNUAL",
            )

    def test_single_day_window_is_allowed(self, db, enterprise, inspector):
        convention = convention_service.create_convention(
            db,
            acting_user_id=inspector.id,
            enterprise_id=enterprise.id,
            start_date=date(2026, 6, 1),
            end_date=date(2026, 6, 1),
            type="ONE_OFF",
        )
        assert convention.start_date == convention.end_date


class TestUpdate:

    def test_scenario_unchanged_then_changed_type(self, db, convention, admin):
        """Unchanged update still logs an empty entry; a real change logs from/to."""
        convention = convention_service.update_convention(db, convention.id, {"type": "ANNUAL"}, admin.id)
        assert len(convention.history) == 2
        assert convention.history[1].action == "UPDATED"
        assert convention.history[1].changes == {}

        convention = convention_service.update_convention(db, convention.id, {"type": "BIENNIAL"}, admin.id)
        assert len(convention.history) == 3
        assert convention.history[2].changes == {"type": {"from": "ANNUAL", "to": "BIENNIAL"}}
        assert convention.type == "BIENNIAL"

    def test_update_sets_last_modified_by_and_bumps_version(self, db, convention, admin):
        updated = convention_service.update_convention(db, convention.id, {"type": "BIENNIAL"}, admin.id)
        assert updated.last_modified_by == admin.id
        assert updated.created_by != admin.id
        assert updated.version == 2

    def test_dates_and_payloads_are_diffed_by_value(self, db, convention, admin):
        updated = convention_service.update_convention(
            db,
            convention.id,
            {
                "start_date": date(2026, 1, 1),
                "end_date": date(2027, 6, 30),
                "advantages": {"taxRelief": 0.1},
            },
            admin.id,
        )
        assert updated.history[-1].changes == {"endDate": {"from": "2026-12-31", "to": "2027-06-30"}}
        assert updated.end_date == date(2027, 6, 30)

    def test_missing_convention_is_not_found(self, db, convention, admin):
        with pytest.raises(NotFoundError) as exc:
            convention_service.update_convention(db, "missing", {"type": "X"}, admin.id)
        assert exc.value.message == "Convention not found"
        assert db.query(ConventionHistoryEntry).count() == 1

    def test_protected_fields_are_rejected(self, db, convention, admin):
        with pytest.raises(ValidationError):
            convention_service.update_convention(db, convention.id, {"status": "ACTIVE"}, admin.id)
        db.expire_all()
        assert len(convention_service.get_convention(db, convention.id).history) == 1

    def test_required_field_cannot_be_nulled(self, db, convention, admin):
        with pytest.raises(ValidationError):
            convention_service.update_convention(db, convention.id, {"type": None}, admin.id)

    def test_update_cannot_invert_window(self, db, convention, admin):
        with pytest.raises(ValidationError):
            convention_service.update_convention(db, convention.id, {"end_date": date(2025, 1, 1)}, admin.id)
        db.expire_all()
        assert convention_service.get_convention(db, convention.id).end_date == date(2026, 12, 31)


class TestUpdateStatus:

    def test_status_transition_is_recorded(self, db, convention, admin):
        updated = convention_service.update_status(db, convention.id, "ACTIVE", admin.id)
        assert updated.status == "ACTIVE"
        assert updated.history[-1].action == "STATUS_CHANGED"
        assert updated.history[-1].changes == {"from": "DRAFT", "to": "ACTIVE"}
        assert updated.last_modified_by == admin.id

    def test_invalid_status_is_rejected(self, db, convention, admin):
        with pytest.raises(ValidationError):
            convention_service.update_status(db, convention.id, "ARCHIVED", admin.id)

    def test_missing_convention_is_not_found(self, db, admin):
        with pytest.raises(NotFoundError):
            convention_service.update_status(db, "missing", "ACTIVE", admin.id)


class TestAddDocument:

    def test_documents_are_appended_in_order(self, db, convention, admin):
        convention_service.add_document(db, convention.id, "doc-a", admin.id)
        updated = convention_service.add_document(db, convention.id, "doc-b", admin.id)

        assert updated.document_ids == ["doc-a", "doc-b"]
        assert [h.action for h in updated.history] == ["CREATED", "DOCUMENT_ADDED", "DOCUMENT_ADDED"]
        assert updated.history[-1].changes == {"documentId": "doc-b"}

    def test_missing_convention_is_not_found(self, db, admin):
        with pytest.raises(NotFoundError):
            convention_service.add_document(db, "missing", "doc-a", admin.id)


class TestHistoryIsAppendOnly:

    def test_history_length_grows_by_one_per_mutation(self, db, convention, admin):
        snapshot = [(h.id, h.action, dict(h.changes)) for h in convention.history]

        convention_service.update_convention(db, convention.id, {"type": "BIENNIAL"}, admin.id)
        convention_service.update_status(db, convention.id, "ACTIVE", admin.id)
        updated = convention_service.add_document(db, convention.id, "doc-a", admin.id)

        assert len(updated.history) == len(snapshot) + 3
        assert [(h.id, h.action, dict(h.changes)) for h in updated.history[: len(snapshot)]] == snapshot
        assert [h.sequence for h in updated.history] == [1, 2, 3, 4]

    def test_persisted_entry_cannot_be_modified(self, db, convention):
        entry = convention.history[0]
        entry.changes = {"type": "FORGED"}
        with pytest.raises(AppendOnlyViolation):
            db.commit()
        db.rollback()

    def test_persisted_entry_cannot_be_deleted(self, db, convention):
        db.delete(convention.history[0])
        with pytest.raises(AppendOnlyViolation):
            db.commit()
        db.rollback()


class TestConcurrency:

    def test_stale_version_is_rejected_without_appending(self, db, convention, admin):
        with pytest.raises(ConflictError):
            convention_service.update_convention(
                db, convention.id, {"type": "BIENNIAL"}, admin.id, expected_version=99
            )
        db.expire_all()
        stored = convention_service.get_convention(db, convention.id)
        assert stored.type == "ANNUAL"
        assert len(stored.history) == 1

    def test_matching_version_is_accepted(self, db, convention, admin):
        updated = convention_service.update_status(db, convention.id, "ACTIVE", admin.id, expected_version=1)
        assert updated.version == 2

    def test_concurrent_writer_loses_with_conflict(self, session_factory, convention, admin, inspector):
        first = session_factory()
        second = session_factory()
        try:
            # Both requests read version 1 before either writes.
            stale_first = convention_service.get_convention(first, convention.id)  # noqa: F841
            stale_second = convention_service.get_convention(second, convention.id)  # noqa: F841

            convention_service.update_convention(first, convention.id, {"type": "BIENNIAL"}, admin.id)
            with pytest.raises(ConflictError):
                convention_service.update_status(second, convention.id, "ACTIVE", inspector.id)

            second.expire_all()
            stored = convention_service.get_convention(second, convention.id)
            assert stored.type == "BIENNIAL"
            assert stored.status == "DRAFT"
            assert [h.action for h in stored.history] == ["CREATED", "UPDATED"]
        finally:
            first.close()
            second.close()


class TestPersistenceFailure:

    def test_failed_commit_rolls_back_mutation_and_entry(self, db, convention, admin, monkeypatch):
        def failing_commit():
            raise OperationalError("COMMIT", {}, Exception("database is locked"))

        monkeypatch.setattr(db, "commit", failing_commit)
        with pytest.raises(PersistenceError):
            convention_service.update_status(db, convention.id, "ACTIVE", admin.id)
        monkeypatch.undo()

        db.expire_all()
        stored = convention_service.get_convention(db, convention.id)
        assert stored.status == "DRAFT"
        assert len(stored.history) == 1
