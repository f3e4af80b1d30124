"""Display helpers: Rupiah amounts, Indonesian dates and enum labels."""

from datetime import datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Optional

from eventdesk.models import parse_timestamp

INDONESIAN_MONTHS = [
    "Januari",
    "Februari",
    "Maret",
    "April",
    "Mei",
    "Juni",
    "Juli",
    "Agustus",
    "September",
    "Oktober",
    "November",
    "Desember",
]

REPORT_CATEGORY_LABELS = {
    "PAYMENT": "Payment Issue",
    "TICKET": "Ticket Issue",
    "EVENT": "Event Issue",
    "OTHER": "Other Issue",
}

REPORT_STATUS_LABELS = {
    "PENDING": "Pending",
    "ON_PROGRESS": "On Progress",
    "RESOLVED": "Resolved",
}

TRANSACTION_TYPE_LABELS = {
    "TOP_UP": "Top Up",
    "TICKET_PURCHASE": "Ticket Purchase",
}

TRANSACTION_STATUS_LABELS = {
    "SUCCESS": "Success",
    "FAILED": "Failed",
    "PENDING": "Pending",
}


def format_currency(amount: Any) -> str:
    """Rupiah with dot thousands separators and no fraction digits, e.g. 'Rp 100.000'."""
    try:
        value = Decimal(str(amount if amount is not None else 0))
    except (InvalidOperation, ValueError):
        value = Decimal("0")
    rounded = int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    grouped = f"{abs(rounded):,}".replace(",", ".")
    sign = "-" if rounded < 0 else ""
    return f"{sign}Rp {grouped}"


def format_datetime(value: Any) -> str:
    """Long-form Indonesian timestamp, e.g. '19 Oktober 2026 pukul 14.30'."""
    if value is None or value == "":
        return "N/A"
    try:
        moment: Optional[datetime] = parse_timestamp(value)
    except (TypeError, ValueError, OverflowError):
        return "Invalid Date"
    if moment is None:
        return "N/A"
    month = INDONESIAN_MONTHS[moment.month - 1]
    return f"{moment.day} {month} {moment.year} pukul {moment.hour:02d}.{moment.minute:02d}"


def _label(labels: dict, value: Optional[str]) -> str:
    if value is None:
        return "N/A"
    return labels.get(value, value.replace("_", " ").title())


def report_category_label(category: Optional[str]) -> str:
    return _label(REPORT_CATEGORY_LABELS, category)


def report_status_label(status: Optional[str]) -> str:
    return _label(REPORT_STATUS_LABELS, status)


def transaction_type_label(transaction_type: Optional[str]) -> str:
    return _label(TRANSACTION_TYPE_LABELS, transaction_type)


def transaction_status_label(status: Optional[str]) -> str:
    return _label(TRANSACTION_STATUS_LABELS, status)
