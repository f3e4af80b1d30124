"""Attendee and admin views over transactions, plus balance top-ups."""

from typing import Any, Dict, List, Optional, Tuple

from eventdesk.errors import ApiError
from eventdesk.models import (
    TopUpResult,
    Transaction,
    TransactionStatus,
    UserProfile,
)
from eventdesk.stores.base import BaseStore
from eventdesk.validators import validate_top_up

TRANSACTIONS_PATH = "/api/transactions"


def _parse_transactions(data: Any) -> List[Transaction]:
    return [Transaction.from_dict(t) for t in data] if isinstance(data, list) else []


class TransactionStore(BaseStore):
    """The signed-in attendee's own transactions."""

    def __init__(self, client):
        super().__init__(client)
        self.transactions: List[Transaction] = []

    def fetch_my_transactions(self) -> Tuple[Optional[List[Transaction]], str]:
        with self._request():
            try:
                data = self.client.get(f"{TRANSACTIONS_PATH}/my-transactions")
            except ApiError as e:
                self.transactions = []
                return None, self._fail("Fetching my transactions", e)
        self.transactions = _parse_transactions(data)
        return self.transactions, f"Found {len(self.transactions)} transactions"

    def get_transaction(self, transaction_id: str) -> Tuple[Optional[Transaction], str]:
        with self._request():
            try:
                data = self.client.get(f"{TRANSACTIONS_PATH}/{transaction_id}")
            except ApiError as e:
                return None, self._fail(f"Fetching transaction {transaction_id}", e)
        return Transaction.from_dict(data or {}), "Transaction loaded"

    def purchase_ticket(self, ticket_id: str) -> Tuple[Optional[Dict[str, Any]], str]:
        """Buy a ticket, then reload the transaction history.

        The balance lives in TopUpStore; callers re-fetch it separately.
        """
        with self._request():
            try:
                data = self.client.post(f"{TRANSACTIONS_PATH}/purchase/ticket/{ticket_id}")
            except ApiError as e:
                return None, self._fail(f"Purchasing ticket {ticket_id}", e)

        self.logger.info(f"Ticket {ticket_id} purchased")
        self.fetch_my_transactions()
        return data if isinstance(data, dict) else {}, "Ticket purchased"

    def by_type(
        self, transaction_type: str, transactions: Optional[List[Transaction]] = None
    ) -> List[Transaction]:
        source = self.transactions if transactions is None else transactions
        return [t for t in source if t.type == transaction_type]

    def by_status(
        self, status: str, transactions: Optional[List[Transaction]] = None
    ) -> List[Transaction]:
        source = self.transactions if transactions is None else transactions
        return [t for t in source if t.status == status]


class AdminTransactionStore(BaseStore):
    """Every transaction in the system, with admin-only corrections."""

    def __init__(self, client):
        super().__init__(client)
        self.transactions: List[Transaction] = []

    def fetch_all_transactions(self) -> Tuple[Optional[List[Transaction]], str]:
        with self._request():
            try:
                data = self.client.get(TRANSACTIONS_PATH)
            except ApiError as e:
                return None, self._fail("Fetching all transactions", e)
        self.transactions = _parse_transactions(data)
        self.logger.info(f"Fetched {len(self.transactions)} transactions")
        return self.transactions, f"Found {len(self.transactions)} transactions"

    def delete_transaction(
        self, transaction_id: str, confirmed: bool = False
    ) -> Tuple[bool, str]:
        if not confirmed:
            return False, self._reject(
                "confirmation", "Deleting a transaction must be confirmed first"
            )
        with self._request():
            try:
                self.client.delete(f"{TRANSACTIONS_PATH}/{transaction_id}")
            except ApiError as e:
                return False, self._fail(f"Deleting transaction {transaction_id}", e)

        self.transactions = [t for t in self.transactions if t.id != str(transaction_id)]
        self.logger.info(f"Deleted transaction {transaction_id}")
        return True, "Transaction deleted successfully"

    def mark_failed(self, transaction_id: str, confirmed: bool = False) -> Tuple[bool, str]:
        """Override a transaction's status to FAILED. There is no way back."""
        if not confirmed:
            return False, self._reject(
                "confirmation", "Marking a transaction as failed must be confirmed first"
            )
        with self._request():
            try:
                self.client.patch(f"{TRANSACTIONS_PATH}/{transaction_id}/failed")
            except ApiError as e:
                return False, self._fail(f"Marking transaction {transaction_id} as failed", e)

        for transaction in self.transactions:
            if transaction.id == str(transaction_id):
                transaction.status = TransactionStatus.FAILED.value
        self.logger.info(f"Marked transaction {transaction_id} as FAILED")
        return True, "Transaction marked as failed"

    def status_counts(self) -> Dict[str, int]:
        counts = {s.value: 0 for s in TransactionStatus}
        for transaction in self.transactions:
            counts[transaction.status] = counts.get(transaction.status, 0) + 1
        return counts


class TopUpStore(BaseStore):
    """Mirrors the attendee's balance and top-up history."""

    def __init__(self, client):
        super().__init__(client)
        self.balance: int = 0
        self.history: List[Transaction] = []

    def fetch_balance(self) -> Tuple[Optional[int], str]:
        with self._request():
            try:
                data = self.client.get("/api/auth/me")
            except ApiError as e:
                return None, self._fail("Fetching balance", e)
        self.balance = UserProfile.from_dict(data or {}).balance
        return self.balance, "Balance loaded"

    def fetch_history(self) -> Tuple[Optional[List[Transaction]], str]:
        with self._request():
            try:
                data = self.client.get("/api/topup/history")
            except ApiError as e:
                self.history = []
                return None, self._fail("Fetching top-up history", e)
        self.history = _parse_transactions(data)
        return self.history, f"Found {len(self.history)} top-ups"

    def process_top_up(self, amount: Any, top_up_type: str = "FIXED") -> Tuple[Optional[TopUpResult], str]:
        is_valid, message = validate_top_up(amount, top_up_type)
        if not is_valid:
            return None, self._reject("amount", message)

        with self._request():
            try:
                data = self.client.post(
                    "/api/topup",
                    payload={"amount": int(amount), "topUpType": top_up_type},
                )
            except ApiError as e:
                return None, self._fail("Processing top-up", e)

        result = TopUpResult.from_dict(data if isinstance(data, dict) else {})
        if result.new_balance is not None:
            self.balance = result.new_balance
        self.logger.info(
            f"Top-up of {int(amount)} ({top_up_type}) succeeded, new balance: {self.balance}"
        )
        self.fetch_history()
        return result, "Top-up successful"
