"""Input validation run before any request reaches the backend.

Each validator returns (is_valid, error_message); the message is empty on success.
"""

import re
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional, Tuple

from eventdesk.config import get_config_value
from eventdesk.models import (
    ReportCategory,
    ReportStatus,
    Role,
    TicketCategory,
    TopUpType,
    parse_timestamp,
)

EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")


def _comment_bounds() -> Tuple[int, int]:
    return (
        get_config_value("reports.comment_min_length", 5),
        get_config_value("reports.comment_max_length", 500),
    )


def validate_comment(message: Optional[str]) -> Tuple[bool, str]:
    """Comment text is trimmed, then checked against the configured length bounds."""
    min_length, max_length = _comment_bounds()
    trimmed = (message or "").strip()
    if not trimmed:
        return False, "Please enter a comment"
    if len(trimmed) < min_length:
        return False, f"Comment must be at least {min_length} characters long"
    if len(trimmed) > max_length:
        return False, f"Comment must be at most {max_length} characters long"
    return True, ""


def can_submit_comment(message: Optional[str]) -> bool:
    """Whether the comment form's submit control is enabled.

    Mirrors the form: disabled for blank input or when the raw text
    exceeds the maximum length.
    """
    _, max_length = _comment_bounds()
    message = message or ""
    return bool(message.strip()) and len(message) <= max_length


def validate_report_status(status: Optional[str]) -> Tuple[bool, str]:
    allowed = [s.value for s in ReportStatus]
    if status not in allowed:
        return False, f"Invalid report status '{status}'. Expected one of: {', '.join(allowed)}"
    return True, ""


def validate_report_category(category: Optional[str]) -> Tuple[bool, str]:
    if not category:
        return False, "Please select a category for your report"
    allowed = [c.value for c in ReportCategory]
    if category not in allowed:
        return False, f"Invalid report category '{category}'. Expected one of: {', '.join(allowed)}"
    return True, ""


def validate_report_description(description: Optional[str]) -> Tuple[bool, str]:
    min_length = get_config_value("reports.description_min_length", 10)
    trimmed = (description or "").strip()
    if not trimmed:
        return False, "Please provide a description of your issue"
    if len(trimmed) < min_length:
        return False, f"Description must be at least {min_length} characters long"
    return True, ""


def validate_top_up(amount: Any, top_up_type: str) -> Tuple[bool, str]:
    """FIXED amounts must be one of the presets; CUSTOM amounts must fall in range."""
    try:
        value = int(amount)
    except (TypeError, ValueError):
        return False, "Please select or enter a top-up amount"
    if value <= 0:
        return False, "Please select or enter a top-up amount"

    if top_up_type == TopUpType.FIXED.value:
        fixed_amounts = get_config_value(
            "topup.fixed_amounts", [50000, 100000, 250000, 500000, 1000000]
        )
        if value not in fixed_amounts:
            return False, f"Fixed top-up amount must be one of: {', '.join(str(a) for a in fixed_amounts)}"
    elif top_up_type == TopUpType.CUSTOM.value:
        custom_min = get_config_value("topup.custom_min", 10000)
        custom_max = get_config_value("topup.custom_max", 1000000)
        if value < custom_min:
            return False, f"Custom top-up amount must be at least {custom_min}"
        if value > custom_max:
            return False, f"Custom top-up amount must be at most {custom_max}"
    else:
        return False, f"Invalid top-up type '{top_up_type}'"
    return True, ""


def validate_event_form(
    data: Dict[str, Any], now: Optional[datetime] = None
) -> Tuple[bool, str]:
    """Checks the event create/update form: required fields, future date, positive price."""
    for field_name, label in (
        ("title", "Title"),
        ("description", "Description"),
        ("location", "Location"),
    ):
        if not str(data.get(field_name) or "").strip():
            return False, f"{label} is required"

    raw_date = data.get("eventDate")
    if not raw_date:
        return False, "Event date is required"
    try:
        event_date = parse_timestamp(raw_date)
    except (TypeError, ValueError):
        return False, "Event date is not a valid date"
    if now is None:
        now = datetime.now(event_date.tzinfo)
    if event_date <= now:
        return False, "Event date must be in the future"

    raw_price = data.get("price")
    if raw_price is None or raw_price == "":
        return False, "Price is required"
    try:
        price = Decimal(str(raw_price))
    except (InvalidOperation, ValueError):
        return False, "Price must be a number"
    if price <= 0:
        return False, "Price must be greater than zero"
    return True, ""


def validate_email(email: Optional[str]) -> Tuple[bool, str]:
    if not email or not EMAIL_PATTERN.match(email):
        return False, "Please enter a valid email address"
    return True, ""


def validate_password(password: Optional[str]) -> Tuple[bool, str]:
    if not password or len(password) < 6:
        return False, "Password must be at least 6 characters long"
    return True, ""


def validate_ticket_form(data: Dict[str, Any]) -> Tuple[bool, str]:
    """Name, event, category, a positive price and a positive whole-number quota are all required."""
    if not str(data.get("name") or "").strip():
        return False, "Ticket name is required"
    if not str(data.get("eventId") or "").strip():
        return False, "Event is required"

    category = data.get("category")
    allowed = [c.value for c in TicketCategory]
    if category not in allowed:
        return False, f"Invalid ticket category '{category}'. Expected one of: {', '.join(allowed)}"

    try:
        price = Decimal(str(data.get("price")))
    except (InvalidOperation, ValueError):
        return False, "Price must be a number"
    if not price.is_finite() or price <= 0:
        return False, "Price must be greater than zero"

    try:
        quota = Decimal(str(data.get("quota")))
    except (InvalidOperation, ValueError):
        return False, "Quota must be a number"
    if not quota.is_finite() or quota <= 0 or quota != quota.to_integral_value():
        return False, "Quota must be a whole number greater than zero"
    return True, ""


def validate_review(rating: Any, content: Optional[str]) -> Tuple[bool, str]:
    try:
        value = int(rating)
    except (TypeError, ValueError):
        return False, "Please select a rating"
    if value < 1 or value > 5:
        return False, "Rating must be between 1 and 5"
    if not (content or "").strip():
        return False, "Please write your review"
    return True, ""


def validate_user_update(data: Dict[str, Any]) -> Tuple[bool, str]:
    """An admin edit must change something, and every field it changes must be valid."""
    if not data:
        return False, "Nothing to update"
    if "email" in data:
        is_valid, message = validate_email(data["email"])
        if not is_valid:
            return False, message
    if "fullName" in data and not str(data["fullName"] or "").strip():
        return False, "Full name cannot be empty"
    if "role" in data and data["role"] not in [r.value for r in Role]:
        return False, f"Invalid role '{data['role']}'"
    if "balance" in data:
        try:
            balance = int(data["balance"])
        except (TypeError, ValueError):
            return False, "Balance must be a whole number"
        if balance < 0:
            return False, "Balance cannot be negative"
    if "password" in data:
        return validate_password(data["password"])
    return True, ""
