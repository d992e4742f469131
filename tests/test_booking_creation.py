from datetime import timedelta
from decimal import Decimal

import pytest
import requests
from razorpay.errors import BadRequestError

from src.models import UserBooking, TrekCityPrice
from tests.factories import NOW, GATEWAY_KEY_ID, make_trek, make_tour, booking_payload

BOOK_URL = "/api/v1/bookings/book"

def test_ridge_trek_booking_creates_pending_row_and_order(client, db, razorpay_client):
    trek = make_trek(db)

    response = client.post(BOOK_URL, json=booking_payload(trek.id, membersCount=3))

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "Booking created, proceed to payment"

    data = body["data"]
    assert Decimal(str(data["finalPrice"])) == Decimal("4500")
    assert data["eventName"] == "Ridge Trek"
    assert data["eventKind"] == "trek"
    assert data["availableCities"] == ["Pune", "Mumbai"]
    assert data["order"]["amount"] == 450000
    assert data["order"]["currency"] == "INR"
    assert data["order"]["keyId"] == GATEWAY_KEY_ID

    booking = db.query(UserBooking).filter(UserBooking.id == data["bookingId"]).one()
    assert booking.payment_status == "pending"
    assert booking.payment_mode == "online"
    assert booking.gateway_order_id == data["order"]["id"]
    assert booking.event_kind == "trek"
    assert booking.event_id == trek.id
    assert booking.final_price == Decimal("4500.00")

def test_order_request_carries_receipt_notes_and_timeout(client, db, razorpay_client):
    trek = make_trek(db)

    response = client.post(BOOK_URL, json=booking_payload(trek.id, membersCount=2))
    booking_id = response.json()["data"]["bookingId"]

    created = razorpay_client.order.created[0]
    payload = created["data"]
    assert created["kwargs"]["timeout"] == 5.0
    assert payload["amount"] == 300000
    assert payload["receipt"] == f"rcpt_{booking_id.replace('-', '')}"
    assert len(payload["receipt"]) <= 40
    assert payload["notes"] == {
        "itemId": trek.id,
        "itemType": "trek",
        "city": "Pune",
        "membersCount": "2",
        "bookingFor": "Asha Patil",
        "bookingId": booking_id,
    }

def test_tour_booking_uses_tour_pricing(client, db):
    tour = make_tour(db)

    response = client.post(BOOK_URL, json=booking_payload(tour.id, kind="tour", city="mumbai", membersCount=2))

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["eventKind"] == "tour"
    assert Decimal(str(data["finalPrice"])) == Decimal("16000")

    booking = db.query(UserBooking).one()
    assert booking.event_kind == "tour"
    assert booking.city == "Mumbai"

def test_final_price_is_fixed_at_booking_time(client, db):
    trek = make_trek(db)
    response = client.post(BOOK_URL, json=booking_payload(trek.id, membersCount=3))
    booking_id = response.json()["data"]["bookingId"]

    tier = db.query(TrekCityPrice).filter(TrekCityPrice.trek_id == trek.id, TrekCityPrice.city == "Pune").one()
    tier.discount_price = Decimal("1000")
    db.commit()

    booking = db.query(UserBooking).filter(UserBooking.id == booking_id).one()
    assert booking.final_price == Decimal("4500.00")

def test_missing_fields_are_named(client, db):
    trek = make_trek(db)

    response = client.post(BOOK_URL, json={"trekId": trek.id, "name": "Asha", "phoneNumber": ""})

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["code"] == "MissingField"
    assert body["missingFields"] == ["email", "phoneNumber", "city", "membersCount"]

def test_missing_field_is_reported_before_bad_phone(client, db):
    trek = make_trek(db)
    payload = booking_payload(trek.id, phoneNumber="123")
    del payload["email"]

    response = client.post(BOOK_URL, json=payload)

    assert response.json()["code"] == "MissingField"

@pytest.mark.parametrize("ids", [{}, {"trekId": "a", "tourId": "b"}])
def test_exactly_one_event_id_is_required(client, ids):
    payload = booking_payload("unused")
    del payload["trekId"]
    payload.update(ids)

    response = client.post(BOOK_URL, json=payload)

    assert response.status_code == 400
    assert response.json()["code"] == "AmbiguousEventReference"

@pytest.mark.parametrize("phone", ["98765", "98765432101", "98765abcde", "+919876543210"])
def test_phone_must_be_ten_digits(client, db, phone):
    trek = make_trek(db)

    response = client.post(BOOK_URL, json=booking_payload(trek.id, phoneNumber=phone))

    assert response.status_code == 400
    assert response.json()["code"] == "InvalidPhone"

@pytest.mark.parametrize("members", [0, 21, -1, 2.5, "many"])
def test_members_count_must_be_whole_number_in_range(client, db, members):
    trek = make_trek(db)

    response = client.post(BOOK_URL, json=booking_payload(trek.id, membersCount=members))

    assert response.status_code == 400
    assert response.json()["code"] == "InvalidMemberCount"

@pytest.mark.parametrize("members", [1, 20, "4"])
def test_members_count_bounds_are_inclusive(client, db, members):
    trek = make_trek(db)

    response = client.post(BOOK_URL, json=booking_payload(trek.id, membersCount=members))

    assert response.status_code == 201

def test_unknown_event_is_not_found(client, db):
    response = client.post(BOOK_URL, json=booking_payload("no-such-trek"))

    assert response.status_code == 404
    assert response.json()["message"] == "Trek not found"

def test_inactive_event_lists_available_cities(client, db):
    tour = make_tour(db, is_active=False)

    response = client.post(BOOK_URL, json=booking_payload(tour.id, kind="tour"))

    assert response.status_code == 400
    body = response.json()
    assert body["code"] == "EventInactive"
    assert body["availableCities"] == ["Pune", "Mumbai"]

def test_event_that_already_ended_cannot_be_booked(client, db):
    trek = make_trek(db, start=NOW - timedelta(days=3), end=NOW - timedelta(days=1))

    response = client.post(BOOK_URL, json=booking_payload(trek.id))

    assert response.status_code == 400
    body = response.json()
    assert body["code"] == "EventInactive"
    assert "already ended" in body["message"]

def test_city_without_pricing_is_rejected(client, db):
    trek = make_trek(db)

    response = client.post(BOOK_URL, json=booking_payload(trek.id, city="Nashik"))

    assert response.status_code == 400
    body = response.json()
    assert body["code"] == "NoPricingForCity"
    assert body["availableCities"] == ["Pune", "Mumbai"]
    assert db.query(UserBooking).count() == 0

def test_gateway_timeout_leaves_no_pending_booking(client, db, razorpay_client):
    trek = make_trek(db)
    razorpay_client.order.error = requests.exceptions.Timeout("read timed out")

    response = client.post(BOOK_URL, json=booking_payload(trek.id))

    assert response.status_code == 503
    body = response.json()
    assert body["code"] == "GatewayUnavailable"
    assert body["retryable"] is True
    assert db.query(UserBooking).count() == 0

def test_gateway_rejection_leaves_no_pending_booking(client, db, razorpay_client):
    trek = make_trek(db)
    razorpay_client.order.error = BadRequestError("The amount must be atleast INR 1.00")

    response = client.post(BOOK_URL, json=booking_payload(trek.id))

    assert response.status_code == 400
    body = response.json()
    assert body["code"] == "GatewayRejected"
    assert "amount" in body["message"]
    assert db.query(UserBooking).count() == 0

def test_unconfigured_gateway_is_unavailable(client, db, monkeypatch):
    from src.config import settings
    from src.main import app
    from src.payments.gateway import get_payment_gateway

    monkeypatch.setattr(settings, "RAZORPAY_KEY_ID", "")
    trek = make_trek(db)
    app.dependency_overrides.pop(get_payment_gateway)

    response = client.post(BOOK_URL, json=booking_payload(trek.id))

    assert response.status_code == 503
    assert response.json()["message"] == "Payment gateway is not configured"

def test_numeric_phone_number_is_accepted(client, db):
    trek = make_trek(db)

    response = client.post(BOOK_URL, json=booking_payload(trek.id, phoneNumber=9876543210))

    assert response.status_code == 201
    booking = db.query(UserBooking).one()
    assert booking.phone_number == "9876543210"

def test_numeric_phone_number_still_needs_ten_digits(client, db):
    trek = make_trek(db)

    response = client.post(BOOK_URL, json=booking_payload(trek.id, phoneNumber=98765))

    assert response.status_code == 400
    assert response.json()["code"] == "InvalidPhone"

def test_wrong_typed_field_uses_error_envelope(client, db):
    trek = make_trek(db)

    response = client.post(BOOK_URL, json=booking_payload(trek.id, name=["x"]))

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["code"] == "ValidationError"
    assert body["message"].startswith("name: ")
    assert "detail" not in body
    assert db.query(UserBooking).count() == 0
