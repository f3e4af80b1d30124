"""Local validation run before any request is made."""

from datetime import datetime, timedelta

import pytest

from eventdesk.validators import (
    can_submit_comment,
    validate_comment,
    validate_email,
    validate_event_form,
    validate_password,
    validate_report_category,
    validate_report_status,
    validate_review,
    validate_ticket_form,
    validate_top_up,
    validate_user_update,
)

NOW = datetime(2026, 10, 19, 12, 0)


class TestComment:
    def test_two_characters_rejected(self):
        is_valid, message = validate_comment("ok")
        assert not is_valid
        assert "must be at least 5 characters" in message

    def test_length_is_measured_after_trimming(self):
        assert not validate_comment("   abc   ")[0]
        assert validate_comment("  abcde  ")[0]

    def test_exactly_500_accepted(self):
        assert validate_comment("a" * 500) == (True, "")
        assert can_submit_comment("a" * 500)

    def test_501_disables_submit(self):
        assert not can_submit_comment("a" * 501)
        assert not validate_comment("a" * 501)[0]

    @pytest.mark.parametrize("message", [None, "", "   "])
    def test_blank_disables_submit(self, message):
        assert not can_submit_comment(message)
        assert validate_comment(message) == (False, "Please enter a comment")


class TestReportEnums:
    @pytest.mark.parametrize("status", ["PENDING", "ON_PROGRESS", "RESOLVED"])
    def test_known_statuses(self, status):
        assert validate_report_status(status)[0]

    @pytest.mark.parametrize("status", ["CLOSED", "REOPENED", "pending", None])
    def test_unknown_statuses(self, status):
        assert not validate_report_status(status)[0]

    def test_category(self):
        assert validate_report_category("TICKET")[0]
        assert not validate_report_category("REFUND")[0]
        assert validate_report_category("") == (False, "Please select a category for your report")


class TestTopUp:
    def test_fixed_amount_must_be_preset(self):
        assert validate_top_up(100000, "FIXED")[0]
        assert not validate_top_up(123456, "FIXED")[0]

    def test_custom_amount_bounds(self):
        assert validate_top_up(10000, "CUSTOM")[0]
        assert validate_top_up(1000000, "CUSTOM")[0]
        assert validate_top_up(9999, "CUSTOM") == (False, "Custom top-up amount must be at least 10000")
        assert validate_top_up(1000001, "CUSTOM") == (False, "Custom top-up amount must be at most 1000000")

    @pytest.mark.parametrize("amount", [None, "abc", 0, -5])
    def test_missing_or_non_positive_amount(self, amount):
        assert validate_top_up(amount, "CUSTOM") == (False, "Please select or enter a top-up amount")

    def test_unknown_type(self):
        assert not validate_top_up(100000, "BONUS")[0]


class TestEventForm:
    def form(self, **overrides):
        data = {
            "title": "Jazz Night",
            "description": "Live jazz",
            "eventDate": (NOW + timedelta(days=30)).isoformat(),
            "location": "Jakarta",
            "price": 150000,
        }
        data.update(overrides)
        return data

    def test_valid_form(self):
        assert validate_event_form(self.form(), NOW) == (True, "")

    @pytest.mark.parametrize("field", ["title", "description", "location"])
    def test_required_text_fields(self, field):
        is_valid, message = validate_event_form(self.form(**{field: "  "}), NOW)
        assert not is_valid
        assert message.endswith("is required")

    def test_date_must_be_in_future(self):
        past = (NOW - timedelta(hours=1)).isoformat()
        assert validate_event_form(self.form(eventDate=past), NOW) == (False, "Event date must be in the future")

    def test_unparseable_date(self):
        assert validate_event_form(self.form(eventDate="next friday"), NOW) == (
            False,
            "Event date is not a valid date",
        )

    @pytest.mark.parametrize("price", [0, -1, "free"])
    def test_price_must_be_positive_number(self, price):
        assert not validate_event_form(self.form(price=price), NOW)[0]


class TestCredentials:
    def test_email(self):
        assert validate_email("user@example.com")[0]
        assert not validate_email("user@")[0]

    def test_password_length(self):
        assert validate_password("secret")[0]
        assert not validate_password("12345")[0]


class TestTicketForm:
    def form(self, **overrides):
        data = {"name": "VIP Pass", "eventId": "10", "category": "VIP", "price": 250000, "quota": 50}
        data.update(overrides)
        return data

    def test_valid(self):
        assert validate_ticket_form(self.form()) == (True, "")

    @pytest.mark.parametrize("price", [0, -5, "abc", "NaN"])
    def test_price_must_be_positive(self, price):
        assert not validate_ticket_form(self.form(price=price))[0]

    @pytest.mark.parametrize("quota", [0, 1.5, "Infinity"])
    def test_quota_must_be_positive_whole_number(self, quota):
        assert validate_ticket_form(self.form(quota=quota)) == (
            False,
            "Quota must be a whole number greater than zero",
        )

    def test_event_required(self):
        assert validate_ticket_form(self.form(eventId="")) == (False, "Event is required")


class TestReview:
    @pytest.mark.parametrize("rating", [1, 5, "3"])
    def test_rating_in_range(self, rating):
        assert validate_review(rating, "Nice")[0]

    @pytest.mark.parametrize("rating", [0, 6])
    def test_rating_out_of_range(self, rating):
        assert validate_review(rating, "Nice") == (False, "Rating must be between 1 and 5")


class TestUserUpdate:
    def test_partial_update_is_valid(self):
        assert validate_user_update({"fullName": "Ana B"}) == (True, "")

    def test_email_checked(self):
        assert validate_user_update({"email": "nope"}) == (False, "Please enter a valid email address")

    def test_blank_full_name(self):
        assert validate_user_update({"fullName": "  "}) == (False, "Full name cannot be empty")

    def test_balance_must_be_whole_number(self):
        assert validate_user_update({"balance": "lots"}) == (False, "Balance must be a whole number")
