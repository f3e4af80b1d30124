"""Data models for the application."""

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Dict, List, Optional


class Role(str, Enum):
    ADMIN = "ADMIN"
    ORGANIZER = "ORGANIZER"
    ATTENDEE = "ATTENDEE"


class ResponderRole(str, Enum):
    ADMIN = "ADMIN"
    ORGANIZER = "ORGANIZER"
    ATTENDEE = "ATTENDEE"
    SYSTEM = "SYSTEM"


class ReportCategory(str, Enum):
    PAYMENT = "PAYMENT"
    TICKET = "TICKET"
    EVENT = "EVENT"
    OTHER = "OTHER"


class ReportStatus(str, Enum):
    """Report lifecycle. Any status may be set from any other."""

    PENDING = "PENDING"
    ON_PROGRESS = "ON_PROGRESS"
    RESOLVED = "RESOLVED"


class TransactionType(str, Enum):
    TOP_UP = "TOP_UP"
    TICKET_PURCHASE = "TICKET_PURCHASE"


class TransactionStatus(str, Enum):
    PENDING = "PENDING"
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"


class TopUpType(str, Enum):
    FIXED = "FIXED"
    CUSTOM = "CUSTOM"


class TicketCategory(str, Enum):
    REGULAR = "REGULAR"
    VIP = "VIP"


class NotificationType(str, Enum):
    NEW_REPORT = "NEW_REPORT"
    STATUS_UPDATE = "STATUS_UPDATE"
    NEW_RESPONSE = "NEW_RESPONSE"


class ReviewSort(str, Enum):
    NEWEST = "newest"
    OLDEST = "oldest"
    HIGHEST = "highest"
    LOWEST = "lowest"


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 string (with or without a trailing Z) or epoch millis."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def _safe_timestamp(value: Any) -> Optional[datetime]:
    try:
        return parse_timestamp(value)
    except (TypeError, ValueError):
        return None


def _first(data: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


def _to_decimal(value: Any) -> Decimal:
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return Decimal("0")


@dataclass
class Comment:
    """A reply on a report. Never edited or deleted by this client."""

    id: str
    message: str
    responder_role: str
    responder_email: Optional[str] = None
    created_at: Optional[datetime] = None

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "Comment":
        return Comment(
            id=str(_first(data, "id", default="")),
            message=_first(data, "message", default=""),
            responder_role=_first(data, "responderRole", "role", default=ResponderRole.SYSTEM.value),
            responder_email=_first(data, "responderEmail", "email"),
            created_at=_safe_timestamp(_first(data, "createdAt")),
        )


@dataclass
class Report:
    """Support report raised against a payment, ticket, event or anything else."""

    id: str
    category: str
    status: str = ReportStatus.PENDING.value
    description: str = ""
    user_email: Optional[str] = None
    comments: List[Comment] = field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "Report":
        return Report(
            id=str(_first(data, "id", default="")),
            category=_first(data, "category", default=ReportCategory.OTHER.value),
            status=_first(data, "status", default=ReportStatus.PENDING.value),
            description=_first(data, "description", default=""),
            user_email=_first(data, "userEmail", "email"),
            comments=[Comment.from_dict(c) for c in data.get("comments") or []],
            created_at=_safe_timestamp(_first(data, "createdAt")),
            updated_at=_safe_timestamp(_first(data, "updatedAt")),
        )


@dataclass
class Event:
    id: str
    title: str
    description: str = ""
    event_date: Optional[datetime] = None
    location: str = ""
    price: Decimal = Decimal("0")
    organizer_id: Optional[str] = None
    organizer_name: Optional[str] = None
    organizer_role: Optional[str] = None
    active: bool = True
    cancelled: bool = False
    cancellation_time: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def is_soft_cancelled(self) -> bool:
        """Cancelled events carry both the flag and the cancellation time."""
        return self.cancelled and self.cancellation_time is not None

    def is_upcoming_and_active(self, now: Optional[datetime] = None) -> bool:
        if not self.active or self.cancelled or self.event_date is None:
            return False
        if now is None:
            now = datetime.now(self.event_date.tzinfo)
        return self.event_date > now

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "Event":
        return Event(
            id=str(_first(data, "id", default="")),
            title=_first(data, "title", default=""),
            description=_first(data, "description", default=""),
            event_date=_safe_timestamp(_first(data, "eventDate")),
            location=_first(data, "location", default=""),
            price=_to_decimal(_first(data, "price", default=0)),
            organizer_id=_first(data, "organizerId"),
            organizer_name=_first(data, "organizerName"),
            organizer_role=_first(data, "organizerRole"),
            active=bool(_first(data, "isActive", "active", default=True)),
            cancelled=bool(_first(data, "isCancelled", "cancelled", default=False)),
            cancellation_time=_safe_timestamp(_first(data, "cancellationTime")),
            created_at=_safe_timestamp(_first(data, "createdAt")),
            updated_at=_safe_timestamp(_first(data, "updatedAt")),
        )


@dataclass
class Transaction:
    id: str
    type: str
    amount: Decimal
    status: str = TransactionStatus.PENDING.value
    timestamp: Optional[datetime] = None
    created_at: Optional[datetime] = None
    event_id: Optional[str] = None
    description: Optional[str] = None
    username: Optional[str] = None

    @property
    def sort_time(self) -> Optional[datetime]:
        return self.timestamp or self.created_at

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "Transaction":
        return Transaction(
            id=str(_first(data, "id", default="")),
            type=_first(data, "type", default=""),
            amount=_to_decimal(_first(data, "amount", default=0)),
            status=_first(data, "status", default=TransactionStatus.PENDING.value),
            timestamp=_safe_timestamp(_first(data, "timestamp")),
            created_at=_safe_timestamp(_first(data, "createdAt")),
            event_id=_first(data, "eventId"),
            description=_first(data, "description"),
            username=_first(data, "username"),
        )


@dataclass
class UserProfile:
    """The authenticated user as returned by /api/auth/me."""

    id: str
    email: str
    role: str
    full_name: Optional[str] = None
    balance: int = 0

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "UserProfile":
        return UserProfile(
            id=str(_first(data, "id", default="")),
            email=_first(data, "email", default=""),
            role=str(_first(data, "role", default="")).upper(),
            full_name=_first(data, "fullName", "name"),
            balance=max(0, int(_to_decimal(_first(data, "balance", default=0)))),
        )


@dataclass
class TopUpResult:
    new_balance: Optional[int]
    message: Optional[str] = None
    transaction: Optional[Transaction] = None

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "TopUpResult":
        new_balance = data.get("newBalance")
        raw_transaction = data.get("transaction")
        return TopUpResult(
            new_balance=int(_to_decimal(new_balance)) if new_balance is not None else None,
            message=data.get("message"),
            transaction=Transaction.from_dict(raw_transaction)
            if isinstance(raw_transaction, dict)
            else None,
        )


@dataclass
class Ticket:
    """A ticket type on sale for an event, with a remaining quota."""

    id: str
    name: str
    event_id: Optional[str] = None
    price: Decimal = Decimal("0")
    quota: int = 0
    category: str = TicketCategory.REGULAR.value
    sold_out: bool = False

    def is_available(self) -> bool:
        return not self.sold_out and self.quota > 0

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "Ticket":
        event_id = _first(data, "eventId")
        return Ticket(
            id=str(_first(data, "id", default="")),
            name=_first(data, "name", default=""),
            event_id=str(event_id) if event_id is not None else None,
            price=_to_decimal(_first(data, "price", default=0)),
            quota=int(_to_decimal(_first(data, "quota", default=0))),
            category=_first(data, "category", default=TicketCategory.REGULAR.value),
            sold_out=bool(_first(data, "soldOut", default=False)),
        )


@dataclass
class Notification:
    id: str
    title: str
    message: str = ""
    type: Optional[str] = None
    read: bool = False
    related_entity_id: Optional[str] = None
    sender_role: Optional[str] = None
    created_at: Optional[datetime] = None

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "Notification":
        related = _first(data, "relatedEntityId")
        return Notification(
            id=str(_first(data, "id", default="")),
            title=_first(data, "title", default=""),
            message=_first(data, "message", default=""),
            type=_first(data, "type"),
            read=bool(_first(data, "read", "isRead", default=False)),
            related_entity_id=str(related) if related is not None else None,
            sender_role=_first(data, "senderRole"),
            created_at=_safe_timestamp(_first(data, "createdAt")),
        )


@dataclass
class ReviewResponse:
    """An organizer's public reply to a review."""

    content: str
    created_at: Optional[datetime] = None

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "ReviewResponse":
        return ReviewResponse(
            content=_first(data, "content", default=""),
            created_at=_safe_timestamp(_first(data, "createdAt")),
        )


@dataclass
class Review:
    id: str
    event_id: Optional[str]
    rating: int
    content: str = ""
    user_name: Optional[str] = None
    hidden: bool = False
    reported: bool = False
    organizer_response: Optional[ReviewResponse] = None
    created_at: Optional[datetime] = None

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "Review":
        event_id = _first(data, "eventId")
        response = data.get("organizerResponse")
        return Review(
            id=str(_first(data, "id", default="")),
            event_id=str(event_id) if event_id is not None else None,
            rating=int(_to_decimal(_first(data, "rating", default=0))),
            content=_first(data, "content", default=""),
            user_name=_first(data, "userName"),
            hidden=bool(_first(data, "hidden", default=False)),
            reported=bool(_first(data, "reported", default=False)),
            organizer_response=ReviewResponse.from_dict(response)
            if isinstance(response, dict)
            else None,
            created_at=_safe_timestamp(_first(data, "createdAt")),
        )


@dataclass
class ReviewPage:
    """One page of an event's reviews. Pages are zero-based, as the backend counts them."""

    reviews: List[Review]
    page: int = 0
    total_pages: int = 0
    total_items: int = 0

    @staticmethod
    def from_response(data: Any) -> "ReviewPage":
        """Accepts a bare list or a Spring-style page object ({content, totalElements, ...})."""
        if isinstance(data, list):
            reviews = [Review.from_dict(r) for r in data]
            return ReviewPage(reviews, page=0, total_pages=1, total_items=len(reviews))
        if isinstance(data, dict) and isinstance(data.get("content"), list):
            reviews = [Review.from_dict(r) for r in data["content"]]
            return ReviewPage(
                reviews,
                page=data.get("number") or 0,
                total_pages=data.get("totalPages") or 1,
                total_items=data.get("totalElements") or len(reviews),
            )
        return ReviewPage([])


@dataclass
class LinkedAccount:
    """A Discord user's stored bearer token for the ticketing backend."""

    discord_id: str
    token: str
    email: str
    role: str
    linked_at: int


@dataclass
class AdminAction:
    """Model for admin actions."""

    admin_id: str
    admin_username: str
    action_type: str
    target_id: str
    details: Optional[str]
    performed_at: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
