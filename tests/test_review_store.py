"""Review store: paging, the purchase check on create, replies and moderation."""

from decimal import Decimal

import pytest

from conftest import transaction_json
from eventdesk.errors import ValidationError
from eventdesk.stores.review_store import ReviewStore

MY_TRANSACTIONS = "/api/transactions/my-transactions"


def review_json(review_id, event_id="10", rating=4, **extra):
    data = {
        "id": review_id,
        "eventId": event_id,
        "rating": rating,
        "content": "Great sound, long queues",
        "userName": "Budi",
        "createdAt": "2026-10-02T20:00:00Z",
    }
    data.update(extra)
    return data


def spring_page(reviews, number=0, total_pages=1, total_elements=None):
    return {
        "content": reviews,
        "number": number,
        "totalPages": total_pages,
        "totalElements": len(reviews) if total_elements is None else total_elements,
    }


@pytest.fixture
def store(api_client):
    return ReviewStore(api_client)


class TestBrowse:
    def test_paginated_reviews_from_spring_page(self, backend, store):
        backend.add(
            "GET",
            "/api/reviews/event/10/paginated",
            body=spring_page([review_json("1"), review_json("2")], number=1, total_pages=3, total_elements=12),
        )

        page, message = store.fetch_event_reviews("10", page=1, size=2, sort="highest")

        assert [r.id for r in page.reviews] == ["1", "2"]
        assert (page.page, page.total_pages, page.total_items) == (1, 3, 12)
        assert message == "Found 12 reviews"
        assert backend.calls[0].params == {"page": 1, "size": 2, "sortBy": "highest"}
        assert store.reviews == page.reviews

    def test_plain_list_is_one_page(self, backend, store):
        backend.add("GET", "/api/reviews/event/10/paginated", body=[review_json("1")])

        page, _ = store.fetch_event_reviews("10")

        assert page.total_pages == 1
        assert page.total_items == 1

    def test_invalid_sort_makes_no_request(self, backend, store):
        page, message = store.fetch_event_reviews("10", sort="random")

        assert page is None
        assert message == "Invalid sort order 'random'"
        assert isinstance(store.last_error, ValidationError)
        assert backend.calls == []

    def test_failure_clears_page(self, backend, store):
        backend.add("GET", "/api/reviews/event/10/paginated", body=[review_json("1")])
        backend.add("GET", "/api/reviews/event/10/paginated", status=500, body={"message": "Down"})
        store.fetch_event_reviews("10")

        page, message = store.fetch_event_reviews("10")

        assert page is None
        assert message == "Down"
        assert store.reviews == []

    def test_search_sends_trimmed_keyword(self, backend, store):
        backend.add("GET", "/api/reviews/event/10/search", body=spring_page([review_json("3")]))

        page, _ = store.search_reviews("10", "  queue ")

        assert [r.id for r in page.reviews] == ["3"]
        assert backend.calls[0].params["keyword"] == "queue"

    @pytest.mark.parametrize(
        "body, expected",
        [(4.5, Decimal("4.5")), ({"averageRating": 3.25}, Decimal("3.25")), (None, Decimal("0"))],
    )
    def test_average_rating(self, backend, store, body, expected):
        backend.add("GET", "/api/reviews/event/10/rating", body=body)

        rating, _ = store.fetch_average_rating("10")

        assert rating == expected

    def test_organizer_response_is_parsed(self, backend, store):
        backend.add(
            "GET",
            "/api/reviews/7",
            body=review_json("7", organizerResponse={"content": "Thanks for coming"}),
        )

        review, _ = store.fetch_review("7")

        assert review.organizer_response.content == "Thanks for coming"


class TestPurchaseCheck:
    @pytest.mark.parametrize(
        "purchase",
        [
            transaction_json("t1", type="TICKET_PURCHASE", eventId="10"),
            transaction_json("t2", type="TICKET_PURCHASE", event={"id": 10}),
            transaction_json("t3", type="TICKET_PURCHASE", ticket={"eventId": "10"}),
        ],
    )
    def test_purchase_found_through_any_reference(self, backend, store, purchase):
        backend.add("GET", MY_TRANSACTIONS, body=[transaction_json("t0"), purchase])

        purchased, _ = store.has_purchased_event("10")

        assert purchased is True

    def test_create_without_purchase_is_rejected(self, backend, store):
        backend.add("GET", MY_TRANSACTIONS, body=[transaction_json("t1", type="TICKET_PURCHASE", eventId="99")])

        review, message = store.create_review("10", 5, "Loved it")

        assert review is None
        assert message == "You can only review events you have purchased tickets for."
        assert backend.calls_to("POST", "/api/reviews") == []

    def test_create_after_purchase(self, backend, store):
        backend.add("GET", MY_TRANSACTIONS, body=[transaction_json("t1", type="TICKET_PURCHASE", eventId="10")])
        backend.add("POST", "/api/reviews", status=201, body=review_json("8", rating=5))

        review, message = store.create_review("10", 5, "  Loved it ")

        assert review.id == "8"
        assert message == "Review submitted"
        assert backend.calls[-1].json == {"eventId": "10", "rating": 5, "content": "Loved it"}
        assert [r.id for r in store.my_reviews] == ["8"]

    def test_failed_purchase_lookup_stops_create(self, backend, store):
        backend.add("GET", MY_TRANSACTIONS, status=500, body={"message": "Down"})

        review, message = store.create_review("10", 5, "Loved it")

        assert review is None
        assert message == "Down"

    @pytest.mark.parametrize(
        "rating, content, expected",
        [(0, "ok", "Rating must be between 1 and 5"), (None, "ok", "Please select a rating"), (3, " ", "Please write your review")],
    )
    def test_invalid_review_makes_no_request(self, backend, store, rating, content, expected):
        review, message = store.create_review("10", rating, content)

        assert review is None
        assert message == expected
        assert backend.calls == []


class TestWrites:
    def test_update_replaces_own_review(self, backend, store):
        backend.add("GET", "/api/reviews/my-reviews", body=[review_json("1"), review_json("2")])
        backend.add("PUT", "/api/reviews/2", body=review_json("2", rating=2, content="Meh"))
        store.fetch_my_reviews()

        review, message = store.update_review("2", 2, "Meh")

        assert message == "Review updated"
        assert [r.rating for r in store.my_reviews] == [4, 2]

    def test_delete_requires_confirmation(self, backend, store):
        success, _ = store.delete_review("1")
        assert not success
        assert backend.calls == []

    def test_delete_removes_own_review(self, backend, store):
        backend.add("GET", "/api/reviews/my-reviews", body=[review_json("1")])
        backend.add("DELETE", "/api/reviews/1", status=204)
        store.fetch_my_reviews()

        success, message = store.delete_review("1", confirmed=True)

        assert success
        assert message == "Review deleted"
        assert store.my_reviews == []

    def test_respond(self, backend, store):
        backend.add("POST", "/api/reviews/1/respond", status=200, body=review_json("1"))

        success, message = store.respond("1", " Thank you! ")

        assert success
        assert message == "Response posted"
        assert backend.calls[0].json == {"content": "Thank you!"}

    def test_report_requires_reason(self, backend, store):
        success, message = store.report("1", "")
        assert not success
        assert message == "Please give a reason for reporting this review"
        assert backend.calls == []

    def test_hide_and_restore_update_page(self, backend, store):
        backend.add("GET", "/api/reviews/event/10/paginated", body=[review_json("1")])
        backend.add("PATCH", "/api/reviews/1/hide", status=200)
        backend.add("PATCH", "/api/reviews/1/restore", status=200)
        store.fetch_event_reviews("10")

        assert store.hide("1") == (True, "Review hidden")
        assert store.reviews[0].hidden
        assert store.restore("1") == (True, "Review restored")
        assert not store.reviews[0].hidden
