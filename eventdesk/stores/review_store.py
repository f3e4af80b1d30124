"""Event reviews: browsing, writing, organizer replies and admin moderation."""

from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from eventdesk.errors import ApiError
from eventdesk.models import Review, ReviewPage, ReviewSort
from eventdesk.stores.base import BaseStore
from eventdesk.validators import validate_review

REVIEWS_PATH = "/api/reviews"


def _purchase_event_id(transaction: Dict[str, Any]) -> Optional[str]:
    """A purchase may name its event directly, through the event, or through the ticket."""
    event = transaction.get("event")
    ticket = transaction.get("ticket")
    for candidate in (
        transaction.get("eventId"),
        event.get("id") if isinstance(event, dict) else None,
        ticket.get("eventId") if isinstance(ticket, dict) else None,
    ):
        if candidate is not None:
            return str(candidate)
    return None


class ReviewStore(BaseStore):
    def __init__(self, client):
        super().__init__(client)
        self.page = ReviewPage([])
        self.my_reviews: List[Review] = []
        self.average_rating: Optional[Decimal] = None

    @property
    def reviews(self) -> List[Review]:
        return self.page.reviews

    def _load_page(self, path: str, params: Dict[str, Any], action: str) -> Tuple[Optional[ReviewPage], str]:
        with self._request():
            try:
                data = self.client.get(path, params=params)
            except ApiError as e:
                self.page = ReviewPage([])
                return None, self._fail(action, e)
        self.page = ReviewPage.from_response(data)
        return self.page, f"Found {self.page.total_items} reviews"

    def fetch_event_reviews(
        self, event_id: str, page: int = 0, size: int = 10, sort: str = ReviewSort.NEWEST.value
    ) -> Tuple[Optional[ReviewPage], str]:
        if sort not in [s.value for s in ReviewSort]:
            return None, self._reject("sort", f"Invalid sort order '{sort}'")
        return self._load_page(
            f"{REVIEWS_PATH}/event/{event_id}/paginated",
            {"page": max(page, 0), "size": size, "sortBy": sort},
            f"Fetching reviews for event {event_id}",
        )

    def search_reviews(
        self, event_id: str, keyword: str, page: int = 0, size: int = 10
    ) -> Tuple[Optional[ReviewPage], str]:
        return self._load_page(
            f"{REVIEWS_PATH}/event/{event_id}/search",
            {"keyword": keyword.strip(), "page": max(page, 0), "size": size},
            f"Searching reviews for event {event_id}",
        )

    def fetch_average_rating(self, event_id: str) -> Tuple[Optional[Decimal], str]:
        with self._request():
            try:
                data = self.client.get(f"{REVIEWS_PATH}/event/{event_id}/rating")
            except ApiError as e:
                return None, self._fail(f"Fetching rating for event {event_id}", e)
        raw = data.get("averageRating") if isinstance(data, dict) else data
        try:
            self.average_rating = Decimal(str(raw)) if raw is not None else Decimal("0")
        except ArithmeticError:
            self.average_rating = Decimal("0")
        return self.average_rating, "Rating loaded"

    def fetch_my_reviews(self) -> Tuple[Optional[List[Review]], str]:
        with self._request():
            try:
                data = self.client.get(f"{REVIEWS_PATH}/my-reviews")
            except ApiError as e:
                self.my_reviews = []
                return None, self._fail("Fetching my reviews", e)
        self.my_reviews = [Review.from_dict(r) for r in data] if isinstance(data, list) else []
        return self.my_reviews, f"Found {len(self.my_reviews)} reviews"

    def fetch_review(self, review_id: str) -> Tuple[Optional[Review], str]:
        with self._request():
            try:
                data = self.client.get(f"{REVIEWS_PATH}/{review_id}")
            except ApiError as e:
                return None, self._fail(f"Fetching review {review_id}", e)
        return Review.from_dict(data or {}), "Review loaded"

    def has_purchased_event(self, event_id: str) -> Tuple[Optional[bool], str]:
        with self._request():
            try:
                data = self.client.get("/api/transactions/my-transactions")
            except ApiError as e:
                return None, self._fail("Checking purchases", e)
        transactions = data if isinstance(data, list) else []
        purchased = any(
            _purchase_event_id(t) == str(event_id) for t in transactions if isinstance(t, dict)
        )
        return purchased, "Purchase found" if purchased else "No purchase found"

    def create_review(self, event_id: str, rating: int, content: str) -> Tuple[Optional[Review], str]:
        """Only attendees holding a ticket for the event may review it."""
        is_valid, message = validate_review(rating, content)
        if not is_valid:
            return None, self._reject("review", message)

        purchased, message = self.has_purchased_event(event_id)
        if purchased is None:
            return None, message
        if not purchased:
            return None, self._reject(
                "review", "You can only review events you have purchased tickets for."
            )

        with self._request():
            try:
                data = self.client.post(
                    REVIEWS_PATH,
                    payload={"eventId": str(event_id), "rating": int(rating), "content": content.strip()},
                )
            except ApiError as e:
                return None, self._fail(f"Creating review for event {event_id}", e)

        review = Review.from_dict(data or {})
        self.my_reviews = self.my_reviews + [review]
        self.logger.info(f"Review {review.id} created for event {event_id} ({rating} stars)")
        return review, "Review submitted"

    def update_review(self, review_id: str, rating: int, content: str) -> Tuple[Optional[Review], str]:
        is_valid, message = validate_review(rating, content)
        if not is_valid:
            return None, self._reject("review", message)

        with self._request():
            try:
                data = self.client.put(
                    f"{REVIEWS_PATH}/{review_id}",
                    payload={"rating": int(rating), "content": content.strip()},
                )
            except ApiError as e:
                return None, self._fail(f"Updating review {review_id}", e)

        review = Review.from_dict(data or {})
        self.my_reviews = [review if r.id == str(review_id) else r for r in self.my_reviews]
        self.page.reviews = [review if r.id == str(review_id) else r for r in self.page.reviews]
        return review, "Review updated"

    def delete_review(self, review_id: str, confirmed: bool = False) -> Tuple[bool, str]:
        if not confirmed:
            return False, self._reject("confirmation", "Deleting a review must be confirmed first")
        with self._request():
            try:
                self.client.delete(f"{REVIEWS_PATH}/{review_id}")
            except ApiError as e:
                return False, self._fail(f"Deleting review {review_id}", e)
        self.my_reviews = [r for r in self.my_reviews if r.id != str(review_id)]
        self.page.reviews = [r for r in self.page.reviews if r.id != str(review_id)]
        return True, "Review deleted"

    def respond(self, review_id: str, content: str) -> Tuple[bool, str]:
        if not (content or "").strip():
            return False, self._reject("response", "Please write a response")
        with self._request():
            try:
                self.client.post(f"{REVIEWS_PATH}/{review_id}/respond", payload={"content": content.strip()})
            except ApiError as e:
                return False, self._fail(f"Responding to review {review_id}", e)
        self.logger.info(f"Response posted on review {review_id}")
        return True, "Response posted"

    def report(self, review_id: str, reason: str) -> Tuple[bool, str]:
        if not (reason or "").strip():
            return False, self._reject("reason", "Please give a reason for reporting this review")
        with self._request():
            try:
                self.client.post(f"{REVIEWS_PATH}/{review_id}/report", payload={"reason": reason.strip()})
            except ApiError as e:
                return False, self._fail(f"Reporting review {review_id}", e)
        return True, "Review reported"

    def _set_hidden(self, review_id: str, hidden: bool) -> Tuple[bool, str]:
        action = "hide" if hidden else "restore"
        with self._request():
            try:
                self.client.patch(f"{REVIEWS_PATH}/{review_id}/{action}")
            except ApiError as e:
                return False, self._fail(f"Trying to {action} review {review_id}", e)
        for review in self.page.reviews:
            if review.id == str(review_id):
                review.hidden = hidden
        self.logger.info(f"Review {review_id} {'hidden' if hidden else 'restored'}")
        return True, "Review hidden" if hidden else "Review restored"

    def hide(self, review_id: str) -> Tuple[bool, str]:
        return self._set_hidden(review_id, True)

    def restore(self, review_id: str) -> Tuple[bool, str]:
        return self._set_hidden(review_id, False)
