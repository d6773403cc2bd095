"""Tests for site visit scheduling and the /visits routes."""

import uuid
from datetime import datetime, timedelta, timezone

import pytest

from compliance.exceptions import NotFoundError, PermissionDenied, ValidationError
from compliance.models.visit import Visit, VisitStatus
from compliance.services import visit_service

NOW = datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc)


def _visit(db, enterprise, scheduled_at, status=VisitStatus.SCHEDULED.value, inspector=None):
    visit = Visit(
        id=str(uuid.uuid4()),
        enterprise_id=enterprise.id,
        scheduled_at=scheduled_at,
        status=status,
        inspector_id=inspector.id if inspector else None,
    )
    db.add(visit)
    db.commit()
    return visit


class TestRequestAndCancel:

    def test_request_starts_scheduled(self, db, enterprise, viewer):
        visit = visit_service.request_visit(
            db, enterprise.id, datetime(2026, 7, 1, 9, 0), viewer.id, type="ANNUAL_AUDIT", comment="Gate B"
        )
        assert visit.status == "SCHEDULED"
        assert visit.requested_by == viewer.id
        assert visit.inspector_id is None

    def test_aware_times_are_stored_as_utc(self, db, enterprise, viewer):
        plus_one = timezone(timedelta(hours=1))
        visit = visit_service.request_visit(db, enterprise.id, datetime(2026, 7, 1, 10, 0, tzinfo=plus_one), viewer.id)
        assert visit.scheduled_at == datetime(2026, 7, 1, 9, 0)

    def test_unknown_enterprise(self, db, viewer):
        with pytest.raises(NotFoundError):
            visit_service.request_visit(db, "missing", datetime(2026, 7, 1), viewer.id)

    def test_cancel_records_reason(self, db, enterprise, viewer):
        visit = _visit(db, enterprise, datetime(2026, 7, 1, 9, 0))
        cancelled = visit_service.cancel_visit(db, visit.id, viewer.id, reason="Plant shutdown")
        assert cancelled.status == "CANCELLED"
        assert cancelled.cancellation_reason == "Plant shutdown"

    def test_completed_visit_cannot_be_cancelled(self, db, enterprise, viewer):
        visit = _visit(db, enterprise, datetime(2026, 5, 1, 9, 0), status="COMPLETED")
        with pytest.raises(ValidationError):
            visit_service.cancel_visit(db, visit.id, viewer.id)
        db.refresh(visit)
        assert visit.status == "COMPLETED"


class TestInspectorWorkflow:

    def test_assign_requires_inspector_role(self, db, enterprise, admin, viewer):
        visit = _visit(db, enterprise, datetime(2026, 7, 1, 9, 0))
        with pytest.raises(ValidationError):
            visit_service.assign_inspector(db, visit.id, viewer.id, admin.id)
        with pytest.raises(NotFoundError):
            visit_service.assign_inspector(db, visit.id, "nobody", admin.id)

    def test_only_assigned_inspector_moves_status(self, db, enterprise, admin, inspector):
        visit = _visit(db, enterprise, datetime(2026, 7, 1, 9, 0))
        visit_service.assign_inspector(db, visit.id, inspector.id, admin.id)

        with pytest.raises(PermissionDenied):
            visit_service.update_status(db, visit.id, "IN_PROGRESS", admin)

        updated = visit_service.update_status(db, visit.id, "IN_PROGRESS", inspector, outcome="On site")
        assert updated.status == "IN_PROGRESS"
        assert updated.outcome == "On site"

    def test_unassigned_visit_status_is_refused(self, db, enterprise, inspector):
        visit = _visit(db, enterprise, datetime(2026, 7, 1, 9, 0))
        with pytest.raises(PermissionDenied):
            visit_service.update_status(db, visit.id, "IN_PROGRESS", inspector)

    def test_report_completes_the_visit(self, db, enterprise, inspector):
        visit = _visit(db, enterprise, datetime(2026, 5, 1, 9, 0), inspector=inspector)
        done = visit_service.submit_report(db, visit.id, "All obligations met", inspector.id, outcome="COMPLIANT")
        assert done.status == "COMPLETED"
        assert done.report_content == "All obligations met"
        assert done.report_submitted_by == inspector.id
        assert done.report_submitted_at is not None
        assert done.outcome == "COMPLIANT"

    def test_no_report_on_cancelled_visit(self, db, enterprise, inspector):
        visit = _visit(db, enterprise, datetime(2026, 5, 1, 9, 0), status="CANCELLED")
        with pytest.raises(ValidationError):
            visit_service.submit_report(db, visit.id, "n/a", inspector.id)


class TestListings:

    def test_upcoming_and_past(self, db, enterprise):
        soon = _visit(db, enterprise, datetime(2026, 6, 2, 9, 0))
        later = _visit(db, enterprise, datetime(2026, 6, 20, 9, 0))
        _visit(db, enterprise, datetime(2026, 6, 10, 9, 0), status="CANCELLED")
        missed = _visit(db, enterprise, datetime(2026, 5, 1, 9, 0))
        done_early = _visit(db, enterprise, datetime(2026, 6, 30, 9, 0), status="COMPLETED")

        upcoming = visit_service.list_upcoming(db, enterprise.id, now=NOW)
        past = visit_service.list_past(db, enterprise.id, now=NOW)

        assert [v.id for v in upcoming] == [soon.id, later.id]
        assert [v.id for v in past] == [done_early.id, missed.id]

    def test_by_enterprise_latest_first(self, db, enterprise):
        first = _visit(db, enterprise, datetime(2026, 1, 1, 9, 0))
        second = _visit(db, enterprise, datetime(2026, 3, 1, 9, 0))
        assert [v.id for v in visit_service.list_by_enterprise(db, enterprise.id)] == [second.id, first.id]


class TestVisitRoutes:

    def test_request_assign_report_flow(self, client, enterprise, viewer, admin, inspector, headers_for):
        scheduled = (datetime.now(timezone.utc) + timedelta(days=3)).replace(microsecond=0)
        created = client.post(
            "/visits/request",
            json={"enterpriseId": enterprise.id, "scheduledAt": scheduled.isoformat(), "type": "FOLLOW_UP"},
            headers=headers_for(viewer),
        )
        assert created.status_code == 201
        visit = created.json()["data"]
        assert visit["status"] == "SCHEDULED"
        assert visit["enterpriseName"] == "Sodeco SA"

        upcoming = client.get(f"/visits/enterprise/{enterprise.id}/upcoming", headers=headers_for(viewer)).json()
        assert [v["id"] for v in upcoming["data"]] == [visit["id"]]

        denied = client.put(
            f"/visits/{visit['id']}/assign-inspector", json={"inspectorId": inspector.id}, headers=headers_for(viewer)
        )
        assert denied.status_code == 403

        assigned = client.put(
            f"/visits/{visit['id']}/assign-inspector", json={"inspectorId": inspector.id}, headers=headers_for(admin)
        ).json()["data"]
        assert assigned["inspector"] == {"id": inspector.id, "name": inspector.name, "email": inspector.email}

        mine = client.get("/visits/inspector/my-visits", headers=headers_for(inspector)).json()["data"]
        assert [v["id"] for v in mine] == [visit["id"]]

        reported = client.post(
            f"/visits/{visit['id']}/report",
            json={"content": "Site compliant", "outcome": "COMPLIANT"},
            headers=headers_for(inspector),
        ).json()["data"]
        assert reported["status"] == "COMPLETED"

        past = client.get(f"/visits/enterprise/{enterprise.id}/past", headers=headers_for(viewer)).json()["data"]
        assert [v["id"] for v in past] == [visit["id"]]

        cancel = client.put(f"/visits/{visit['id']}/cancel", json={"reason": "late"}, headers=headers_for(viewer))
        assert cancel.status_code == 400
        assert cancel.json() == {"message": "Cannot cancel a completed visit"}

    def test_status_by_someone_else_is_403(self, client, db, enterprise, inspector, admin, headers_for):
        visit = _visit(db, enterprise, datetime(2026, 7, 1, 9, 0), inspector=inspector)
        resp = client.put(f"/visits/{visit.id}/status", json={"status": "IN_PROGRESS"}, headers=headers_for(admin))
        assert resp.status_code == 403

        resp = client.put(f"/visits/{visit.id}/status", json={"status": "IN_PROGRESS"}, headers=headers_for(inspector))
        assert resp.status_code == 200
        assert resp.json()["data"]["status"] == "IN_PROGRESS"

    def test_unknown_status_is_422(self, client, db, enterprise, inspector, headers_for):
        visit = _visit(db, enterprise, datetime(2026, 7, 1, 9, 0), inspector=inspector)
        resp = client.put(f"/visits/{visit.id}/status", json={"status": "POSTPONED"}, headers=headers_for(inspector))
        assert resp.status_code == 422

    def test_missing_visit_is_404(self, client, viewer, headers_for):
        resp = client.get("/visits/missing", headers=headers_for(viewer))
        assert resp.status_code == 404
        assert resp.json() == {"message": "Visit not found"}
