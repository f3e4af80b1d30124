from datetime import datetime, timezone
from decimal import Decimal

from conftest import event_json, report_json
from eventdesk.bot import UserContext
from eventdesk.models import Event, LinkedAccount, Report, TopUpResult, Transaction, UserProfile


class TestParsing:
    def test_report_defaults(self):
        report = Report.from_dict({"id": 3, "category": "EVENT"})
        assert report.id == "3"
        assert report.status == "PENDING"
        assert report.comments == []

    def test_report_timestamps(self):
        report = Report.from_dict(report_json("1"))
        assert report.created_at == datetime(2026, 10, 1, 9, 0, tzinfo=timezone.utc)

    def test_event_accepts_both_flag_spellings(self):
        assert Event.from_dict(event_json(cancelled=True, isCancelled=None)).cancelled
        assert not Event.from_dict(event_json(active=False, isActive=None)).active

    def test_soft_cancel_needs_flag_and_time(self):
        assert not Event.from_dict(event_json(isCancelled=True)).is_soft_cancelled()
        assert Event.from_dict(
            event_json(isCancelled=True, cancellationTime="2026-10-19T12:00:00Z")
        ).is_soft_cancelled()

    def test_transaction_sort_time_falls_back_to_created_at(self):
        transaction = Transaction.from_dict({"id": "1", "type": "TOP_UP", "amount": 5, "createdAt": 1700000000000})
        assert transaction.timestamp is None
        assert transaction.sort_time == datetime.fromtimestamp(1700000000, tz=timezone.utc)

    def test_transaction_amount_keeps_fraction(self):
        transaction = Transaction.from_dict({"id": "1", "type": "TOP_UP", "amount": 50.75})
        assert transaction.amount == Decimal("50.75")

    def test_profile_balance_never_negative(self):
        assert UserProfile.from_dict({"balance": -1}).balance == 0

    def test_top_up_result_without_balance(self):
        assert TopUpResult.from_dict({"message": "ok"}).new_balance is None


class TestUserContext:
    def test_context_uses_linked_role_and_token(self, backend, anonymous_client):
        account = LinkedAccount(discord_id="1", token="jwt-9", email="o@example.com", role="ORGANIZER", linked_at=0)

        context = UserContext(anonymous_client, account)

        assert context.role == "ORGANIZER"
        assert context.reports.prefix == "/api/organizer/reports"
        assert context.session.token == "jwt-9"
        assert context.events.client.token == "jwt-9"
        assert context.transaction_view.page_size == 10
