"""Report status/comment workflow against a scripted backend."""

import pytest

from conftest import report_json
from eventdesk.errors import ValidationError
from eventdesk.models import Role
from eventdesk.stores.report_store import ReportStore

ADMIN_PREFIX = "/api/admin/reports"


@pytest.fixture
def admin_store(api_client):
    return ReportStore(api_client, Role.ADMIN)


class TestPrefixes:
    @pytest.mark.parametrize(
        "role, prefix",
        [
            ("ADMIN", "/api/admin/reports"),
            ("ORGANIZER", "/api/organizer/reports"),
            ("ATTENDEE", "/api/attendee/reports"),
        ],
    )
    def test_role_selects_prefix(self, backend, api_client, role, prefix):
        backend.add("GET", prefix, body=[report_json("1")])

        store = ReportStore(api_client, role)
        reports, _ = store.fetch_reports()

        assert [r.id for r in reports] == ["1"]
        assert backend.calls[0].path == prefix

    def test_unknown_role_is_rejected(self, api_client):
        with pytest.raises(ValueError):
            ReportStore(api_client, "GUEST")


class TestFetch:
    def test_status_filter_is_sent_as_query(self, backend, admin_store):
        backend.add("GET", ADMIN_PREFIX, body=[])
        admin_store.fetch_reports("RESOLVED")
        assert backend.calls[0].params == {"status": "RESOLVED"}

    def test_invalid_status_filter_makes_no_request(self, backend, admin_store):
        reports, message = admin_store.fetch_reports("CLOSED")
        assert reports is None
        assert "Invalid report status" in message
        assert backend.calls == []

    def test_failed_list_fetch_clears_list(self, backend, admin_store):
        backend.add("GET", ADMIN_PREFIX, body=[report_json("1")])
        backend.add("GET", ADMIN_PREFIX, status=500, body={"message": "boom"})

        admin_store.fetch_reports()
        reports, message = admin_store.fetch_reports()

        assert reports is None
        assert admin_store.reports == []
        assert admin_store.error == "boom"
        assert admin_store.error_status == 500

    def test_fetch_report_parses_comments(self, backend, admin_store):
        comments = [
            {"id": "c1", "message": "Looking into it", "responderRole": "ADMIN", "createdAt": "2026-10-02T10:00:00Z"}
        ]
        backend.add("GET", f"{ADMIN_PREFIX}/1", body=report_json("1", comments=comments))

        report, _ = admin_store.fetch_report("1")

        assert admin_store.selected_report is report
        assert report.comments[0].message == "Looking into it"
        assert report.comments[0].responder_role == "ADMIN"

    def test_forbidden_fetch_sets_error_verbatim_and_no_report(self, backend, admin_store):
        backend.add("GET", f"{ADMIN_PREFIX}/9", status=403, body={"message": "Access denied for this report"})

        report, message = admin_store.fetch_report("9")

        assert report is None
        assert admin_store.error == "Access denied for this report"
        assert message == "Access denied for this report"
        assert admin_store.error_status == 403
        assert admin_store.selected_report is None
        assert not admin_store.loading

    def test_failed_fetch_keeps_previous_selection(self, backend, admin_store):
        backend.add("GET", f"{ADMIN_PREFIX}/1", body=report_json("1"))
        backend.add("GET", f"{ADMIN_PREFIX}/2", status=404, body={"message": "Report not found"})

        admin_store.fetch_report("1")
        admin_store.fetch_report("2")

        assert admin_store.selected_report.id == "1"
        assert admin_store.error == "Report not found"


class TestStatusUpdate:
    def test_single_patch_then_single_refetch(self, backend, admin_store):
        backend.add("PATCH", f"{ADMIN_PREFIX}/1/status", status=200, body=report_json("1", status="ON_PROGRESS"))
        backend.add("GET", f"{ADMIN_PREFIX}/1", body=report_json("1", status="ON_PROGRESS"))

        success, _ = admin_store.update_status("1", "ON_PROGRESS")

        assert success
        patches = backend.calls_to("PATCH", f"{ADMIN_PREFIX}/1/status")
        assert len(patches) == 1
        assert patches[0].params == {"status": "ON_PROGRESS"}
        assert len(backend.calls_to("GET", f"{ADMIN_PREFIX}/1")) == 1
        assert [c.method for c in backend.calls] == ["PATCH", "GET"]
        assert admin_store.selected_report.status == "ON_PROGRESS"

    def test_repeated_same_status_is_not_short_circuited(self, backend, admin_store):
        backend.add("PATCH", f"{ADMIN_PREFIX}/1/status", status=204)
        backend.add("GET", f"{ADMIN_PREFIX}/1", body=report_json("1", status="RESOLVED"))

        admin_store.update_status("1", "RESOLVED")
        admin_store.update_status("1", "RESOLVED")

        assert [c.method for c in backend.calls] == ["PATCH", "GET", "PATCH", "GET"]

    def test_refetch_patches_list_entry(self, backend, admin_store):
        backend.add("GET", ADMIN_PREFIX, body=[report_json("1"), report_json("2")])
        backend.add("PATCH", f"{ADMIN_PREFIX}/2/status", status=204)
        backend.add("GET", f"{ADMIN_PREFIX}/2", body=report_json("2", status="RESOLVED"))

        admin_store.fetch_reports()
        admin_store.update_status("2", "RESOLVED")

        assert [r.status for r in admin_store.reports] == ["PENDING", "RESOLVED"]

    def test_organizer_uses_organizer_prefix(self, backend, api_client):
        store = ReportStore(api_client, Role.ORGANIZER)
        backend.add("PATCH", "/api/organizer/reports/3/status", status=204)
        backend.add("GET", "/api/organizer/reports/3", body=report_json("3", status="PENDING"))

        success, _ = store.update_status("3", "PENDING")

        assert success
        assert backend.calls[0].params == {"status": "PENDING"}

    def test_attendee_cannot_change_status(self, backend, api_client):
        store = ReportStore(api_client, Role.ATTENDEE)
        success, _ = store.update_status("1", "RESOLVED")
        assert not success
        assert backend.calls == []

    def test_unknown_status_is_rejected_locally(self, backend, admin_store):
        success, _ = admin_store.update_status("1", "CLOSED")
        assert not success
        assert isinstance(admin_store.last_error, ValidationError)
        assert backend.calls == []

    def test_rejected_patch_leaves_state_untouched(self, backend, admin_store):
        backend.add("GET", f"{ADMIN_PREFIX}/1", body=report_json("1", status="PENDING"))
        backend.add("PATCH", f"{ADMIN_PREFIX}/1/status", status=400, body="Status unchanged", content_type="text/plain")

        admin_store.fetch_report("1")
        success, message = admin_store.update_status("1", "PENDING")

        assert not success
        assert message == "Status unchanged"
        assert admin_store.selected_report.status == "PENDING"
        assert len(backend.calls_to("GET", f"{ADMIN_PREFIX}/1")) == 1


class TestComments:
    def test_short_comment_rejected_without_request(self, backend, admin_store):
        success, message = admin_store.add_comment("1", "ok")

        assert not success
        assert "must be at least 5 characters" in message
        assert admin_store.comment_error == message
        assert admin_store.last_error.field == "message"
        assert backend.calls == []

    def test_blank_comment_rejected(self, backend, admin_store):
        success, message = admin_store.add_comment("1", "     ")
        assert not success
        assert message == "Please enter a comment"
        assert backend.calls == []

    def test_comment_over_limit_rejected(self, backend, admin_store):
        success, _ = admin_store.add_comment("1", "x" * 501)
        assert not success
        assert backend.calls == []

    def test_comment_posts_trimmed_message_then_refetches(self, backend, admin_store):
        path = f"{ADMIN_PREFIX}/1/comments"
        backend.add("POST", path, status=201, body={"id": "c9", "message": "Refund issued"})
        backend.add(
            "GET",
            f"{ADMIN_PREFIX}/1",
            body=report_json("1", comments=[{"id": "c9", "message": "Refund issued", "responderRole": "ADMIN"}]),
        )

        success, _ = admin_store.add_comment("1", "  Refund issued  ")

        assert success
        assert backend.calls_to("POST", path)[0].json == {"message": "Refund issued"}
        assert [c.method for c in backend.calls] == ["POST", "GET"]
        assert [c.id for c in admin_store.selected_report.comments] == ["c9"]

    def test_exactly_max_length_is_accepted(self, backend, admin_store):
        backend.add("POST", f"{ADMIN_PREFIX}/1/comments", status=201, body={})
        backend.add("GET", f"{ADMIN_PREFIX}/1", body=report_json("1"))

        success, _ = admin_store.add_comment("1", "y" * 500)

        assert success

    def test_failed_comment_does_not_touch_report(self, backend, admin_store):
        backend.add("GET", f"{ADMIN_PREFIX}/1", body=report_json("1"))
        backend.add("POST", f"{ADMIN_PREFIX}/1/comments", status=500, body={"message": "Database unavailable"})

        admin_store.fetch_report("1")
        success, message = admin_store.add_comment("1", "Please check again")

        assert not success
        assert message == "Database unavailable"
        assert admin_store.selected_report.comments == []
        assert admin_store.comment_error is None


class TestDelete:
    def test_requires_confirmation(self, backend, admin_store):
        success, _ = admin_store.delete_report("1")
        assert not success
        assert backend.calls == []

    def test_only_admin_may_delete(self, backend, api_client):
        store = ReportStore(api_client, Role.ORGANIZER)
        success, _ = store.delete_report("1", confirmed=True)
        assert not success
        assert backend.calls == []

    def test_confirmed_delete_drops_report(self, backend, admin_store):
        backend.add("GET", ADMIN_PREFIX, body=[report_json("1"), report_json("2")])
        backend.add("GET", f"{ADMIN_PREFIX}/1", body=report_json("1"))
        backend.add("DELETE", f"{ADMIN_PREFIX}/1", status=204)

        admin_store.fetch_reports()
        admin_store.fetch_report("1")
        success, _ = admin_store.delete_report("1", confirmed=True)

        assert success
        assert admin_store.selected_report is None
        assert [r.id for r in admin_store.reports] == ["2"]


class TestCreate:
    def test_attendee_creates_and_reloads(self, backend, api_client):
        store = ReportStore(api_client, Role.ATTENDEE)
        backend.add("POST", "/api/attendee/reports", status=201, body=report_json("7"))
        backend.add("GET", "/api/attendee/reports", body=[report_json("7")])

        report, _ = store.create_report("PAYMENT", "Charged twice for one ticket")

        assert report.id == "7"
        assert backend.calls[0].json == {"category": "PAYMENT", "description": "Charged twice for one ticket"}
        assert [r.id for r in store.reports] == ["7"]

    def test_filed_report_survives_failed_reload(self, backend, api_client):
        store = ReportStore(api_client, Role.ATTENDEE)
        backend.add("POST", "/api/attendee/reports", status=201, body="Created", content_type="text/plain")
        backend.add("GET", "/api/attendee/reports", status=500, body={"message": "Database unavailable"})

        report, message = store.create_report("TICKET", "QR code does not scan")

        assert report is not None
        assert report.category == "TICKET"
        assert message == "Report submitted, but reloading reports failed: Database unavailable"

    def test_short_description_rejected(self, backend, api_client):
        store = ReportStore(api_client, Role.ATTENDEE)
        report, _ = store.create_report("TICKET", "broken")
        assert report is None
        assert backend.calls == []

    def test_admin_cannot_create(self, backend, admin_store):
        report, _ = admin_store.create_report("OTHER", "Something else went wrong")
        assert report is None
        assert backend.calls == []
