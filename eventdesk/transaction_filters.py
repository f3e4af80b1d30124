"""Client-side filtering, sorting and paging of already-fetched transactions.

Everything here is pure: no network access and no hidden state beyond what a
TransactionListView holds for its caller.
"""

import math
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from eventdesk.models import Transaction

ALL = "ALL"
DEFAULT_PAGE_SIZE = 10

SORT_TIMESTAMP_DESC = "timestamp_desc"
SORT_TIMESTAMP_ASC = "timestamp_asc"
SORT_AMOUNT_HIGH = "amount_high"
SORT_AMOUNT_LOW = "amount_low"
SORT_TYPE = "type"
SORT_OPTIONS = (
    SORT_TIMESTAMP_DESC,
    SORT_TIMESTAMP_ASC,
    SORT_AMOUNT_HIGH,
    SORT_AMOUNT_LOW,
    SORT_TYPE,
)

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


@dataclass(frozen=True)
class TransactionCriteria:
    status: str = ALL
    type: str = ALL
    search: str = ""
    sort: str = SORT_TIMESTAMP_DESC


@dataclass
class Page:
    items: List[Transaction]
    page: int
    total_pages: int
    total_items: int
    page_size: int = DEFAULT_PAGE_SIZE

    @property
    def start_index(self) -> int:
        """1-based index of the first item shown, 0 when empty."""
        return (self.page - 1) * self.page_size + 1 if self.items else 0

    @property
    def end_index(self) -> int:
        return self.start_index + len(self.items) - 1 if self.items else 0

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages


def _matches_search(transaction: Transaction, term: str) -> bool:
    term = term.lower()
    return any(
        value and term in value.lower()
        for value in (transaction.id, transaction.username, transaction.description)
    )


def filter_transactions(
    transactions: Sequence[Transaction], criteria: TransactionCriteria
) -> List[Transaction]:
    """Keep transactions matching every active criterion."""
    result = list(transactions)
    if criteria.status != ALL:
        result = [t for t in result if t.status == criteria.status]
    if criteria.type != ALL:
        result = [t for t in result if t.type == criteria.type]
    if criteria.search:
        result = [t for t in result if _matches_search(t, criteria.search)]
    return result


def _time_key(transaction: Transaction) -> datetime:
    moment = transaction.sort_time
    if moment is None:
        return _EPOCH
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def sort_transactions(
    transactions: Sequence[Transaction], sort: str = SORT_TIMESTAMP_DESC
) -> List[Transaction]:
    """Stable sort by one of SORT_OPTIONS; unknown keys fall back to newest first."""
    if sort == SORT_TIMESTAMP_ASC:
        return sorted(transactions, key=_time_key)
    if sort == SORT_AMOUNT_HIGH:
        return sorted(transactions, key=lambda t: t.amount, reverse=True)
    if sort == SORT_AMOUNT_LOW:
        return sorted(transactions, key=lambda t: t.amount)
    if sort == SORT_TYPE:
        return sorted(transactions, key=lambda t: t.type or "")
    return sorted(transactions, key=_time_key, reverse=True)


def paginate(
    items: Sequence[Transaction], page: int = 1, page_size: int = DEFAULT_PAGE_SIZE
) -> Page:
    """Slice one page out of items; the page number is clamped to the valid range."""
    total_items = len(items)
    total_pages = max(1, math.ceil(total_items / page_size))
    page = max(1, min(total_pages, page))
    start = (page - 1) * page_size
    return Page(
        items=list(items[start:start + page_size]),
        page=page,
        total_pages=total_pages,
        total_items=total_items,
        page_size=page_size,
    )


def apply_criteria(
    transactions: Sequence[Transaction], criteria: TransactionCriteria
) -> List[Transaction]:
    return sort_transactions(filter_transactions(transactions, criteria), criteria.sort)


@dataclass
class TransactionListView:
    """A filtered, sorted, paged view over a transaction list.

    Any change to the filters resets the view to the first page.
    """

    transactions: List[Transaction] = field(default_factory=list)
    criteria: TransactionCriteria = field(default_factory=TransactionCriteria)
    page_size: int = DEFAULT_PAGE_SIZE
    current_page: int = 1

    @property
    def filtered(self) -> List[Transaction]:
        return apply_criteria(self.transactions, self.criteria)

    def set_transactions(self, transactions: Sequence[Transaction]) -> None:
        self.transactions = list(transactions)
        self.current_page = 1

    def update_criteria(
        self,
        status: Optional[str] = None,
        type: Optional[str] = None,
        search: Optional[str] = None,
        sort: Optional[str] = None,
    ) -> None:
        changes = {
            key: value
            for key, value in (("status", status), ("type", type), ("search", search), ("sort", sort))
            if value is not None
        }
        self.criteria = replace(self.criteria, **changes)
        self.current_page = 1

    def go_to_page(self, page: int) -> Page:
        result = paginate(self.filtered, page, self.page_size)
        self.current_page = result.page
        return result

    def current(self) -> Page:
        return paginate(self.filtered, self.current_page, self.page_size)
