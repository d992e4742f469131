from decimal import Decimal

from src.main import app
from src.models import UserBooking
from src.notifications.service import BookingNotificationService, get_notification_service
from tests.factories import OPS_EMAIL, make_tour, make_trek, booking_payload

OFFLINE_URL = "/api/v1/admin/offline-booking"

def test_offline_tour_booking_is_recorded_paid(client, db, admin_headers, email_sender):
    tour = make_tour(db)

    response = client.post(
        OFFLINE_URL,
        json=booking_payload(tour.id, kind="tour", membersCount=2),
        headers=admin_headers
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    data = body["data"]
    assert data["eventKind"] == "tour"
    assert data["eventName"] == "Konkan Coastal Tour"
    assert data["notificationStatus"] == "sent"

    record = data["booking"]
    assert record["status"] == "paid"
    assert record["paymentMode"] == "offline"
    assert Decimal(str(record["amount"])) == Decimal("15998")
    assert record["gatewayOrderId"].startswith("offline_order_")
    assert record["gatewayPaymentId"].startswith("offline_pay_")

    booking = db.query(UserBooking).one()
    assert booking.payment_status == "paid"
    assert booking.event_kind == "tour"
    assert booking.gateway_signature.startswith("offline_sig_")
    assert [m["to"] for m in email_sender.sent] == ["asha@example.com", OPS_EMAIL]

def test_synthetic_ids_are_unique(client, db, admin_headers):
    trek = make_trek(db)

    for _ in range(2):
        client.post(OFFLINE_URL, json=booking_payload(trek.id), headers=admin_headers)

    order_ids = {b.gateway_order_id for b in db.query(UserBooking).all()}
    assert len(order_ids) == 2

def test_offline_booking_uses_the_same_validation(client, db, admin_headers):
    trek = make_trek(db)

    response = client.post(OFFLINE_URL, json=booking_payload(trek.id, phoneNumber="12345"), headers=admin_headers)

    assert response.status_code == 400
    assert response.json()["code"] == "InvalidPhone"
    assert db.query(UserBooking).count() == 0

def test_email_failure_is_reported_not_raised(client, db, admin_headers, email_sender):
    trek = make_trek(db)
    email_sender.fail_for.add(OPS_EMAIL)

    response = client.post(OFFLINE_URL, json=booking_payload(trek.id), headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["data"]["notificationStatus"] == "failed"
    assert db.query(UserBooking).count() == 1

def test_disabled_email_is_not_attempted(client, db, admin_headers, email_sender):
    trek = make_trek(db)
    app.dependency_overrides[get_notification_service] = lambda: BookingNotificationService(
        email_sender, admin_email=OPS_EMAIL, enabled=False
    )

    response = client.post(OFFLINE_URL, json=booking_payload(trek.id), headers=admin_headers)

    assert response.json()["data"]["notificationStatus"] == "not_attempted"
    assert email_sender.sent == []

def test_offline_booking_requires_admin_key(client, db, admin_headers):
    trek = make_trek(db)

    response = client.post(OFFLINE_URL, json=booking_payload(trek.id), headers={"X-Admin-Key": "wrong"})

    assert response.status_code == 403
    assert response.json() == {
        "success": False,
        "message": "Unauthorized: Admin access only",
        "code": "AdminUnauthorized",
    }
    assert db.query(UserBooking).count() == 0
