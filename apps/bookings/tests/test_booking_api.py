"""Integration tests for booking API endpoints."""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal

from django.core import mail
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from apps.bookings.models import Booking
from apps.equipment.models import Equipment
from apps.notifications.models import Notification
from apps.users.models import User


class BookingAPITests(APITestCase):
    """Covers creation, conflicts, listing and status changes."""

    def setUp(self) -> None:
        self.renter = User.objects.create_user(
            email="ama@example.com",
            phone="0241234567",
            password="RenterPass123",
            full_name="Ama Mensah",
            role=User.RoleChoices.RENTER,
        )
        self.other_renter = User.objects.create_user(
            email="kojo@example.com",
            password="RenterPass123",
            role=User.RoleChoices.RENTER,
        )
        self.owner = User.objects.create_user(
            email="kwame@example.com",
            phone="+233201234567",
            password="OwnerPass123",
            full_name="Kwame Boateng",
            role=User.RoleChoices.OWNER,
        )
        self.equipment = Equipment.objects.create(
            owner=self.owner,
            name="DJI Ronin RS3",
            category=Equipment.Category.ACCESSORIES,
            description="Three-axis gimbal.",
            price_per_day=Decimal("100.00"),
            location="East Legon",
        )
        self.client.force_authenticate(self.renter)
        self.list_url = reverse("booking-list")
        self.today = timezone.localdate()

    def _payload(self, start: date, end: date) -> dict:
        return {
            "equipment_id": self.equipment.id,
            "start_date": str(start),
            "end_date": str(end),
        }

    def _create(self, offset: int = 1, days: int = 3):
        start = self.today + timedelta(days=offset)
        return self.client.post(self.list_url, self._payload(start, start + timedelta(days=days - 1)), format="json")

    def _status_url(self, booking_id: int) -> str:
        return reverse("booking-status", args=[booking_id])

    def test_renter_can_create_booking(self) -> None:
        response = self._create()

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["total_days"], 3)
        self.assertEqual(Decimal(response.data["total_amount"]), Decimal("300.00"))
        self.assertEqual(response.data["status"], "pending")
        self.assertEqual(response.data["payment_status"], "pending")
        self.assertEqual(response.data["owner_id"], self.owner.id)
        booking = Booking.objects.get()
        self.assertEqual(booking.renter, self.renter)

    def test_owner_is_notified_of_new_request(self) -> None:
        with self.captureOnCommitCallbacks(execute=True):
            response = self._create()

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        notification = Notification.objects.get(user=self.owner)
        self.assertEqual(notification.booking_number, response.data["booking_number"])
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, [self.owner.email])

    def test_overlap_returns_conflict(self) -> None:
        self.assertEqual(self._create(offset=1).status_code, status.HTTP_201_CREATED)
        self.client.force_authenticate(self.other_renter)

        response = self._create(offset=2)

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT, response.data)
        self.assertEqual(response.data["code"], "booking_conflict")
        self.assertEqual(Booking.objects.count(), 1)

    def test_invalid_dates_are_rejected(self) -> None:
        start = self.today + timedelta(days=5)
        same_day = self.client.post(self.list_url, self._payload(start, start), format="json")
        self.assertEqual(same_day.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("dates", same_day.data["errors"])

        past = self.client.post(
            self.list_url,
            self._payload(self.today - timedelta(days=1), self.today + timedelta(days=1)),
            format="json",
        )
        self.assertEqual(past.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("start_date", past.data["errors"])

        malformed = self.client.post(
            self.list_url,
            {"equipment_id": self.equipment.id, "start_date": "01/02/2024", "end_date": "2024-01-05"},
            format="json",
        )
        self.assertEqual(malformed.status_code, status.HTTP_400_BAD_REQUEST)

    def test_unknown_equipment_returns_404(self) -> None:
        start = self.today + timedelta(days=1)
        payload = self._payload(start, start + timedelta(days=1))
        payload["equipment_id"] = self.equipment.id + 100

        response = self.client.post(self.list_url, payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND, response.data)

    def test_owner_cannot_book(self) -> None:
        self.client.force_authenticate(self.owner)
        response = self._create()
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN, response.data)

    def test_anonymous_requests_are_rejected(self) -> None:
        self.client.force_authenticate(None)
        self.assertEqual(self.client.get(self.list_url).status_code, status.HTTP_401_UNAUTHORIZED)

    def test_list_returns_bookings_and_stats(self) -> None:
        self._create(offset=1)
        self._create(offset=10)

        response = self.client.get(self.list_url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data["bookings"]), 2)
        self.assertEqual(response.data["stats"]["pending_count"], 2)
        self.assertEqual(response.data["stats"]["active_count"], 0)
        self.assertEqual(Decimal(response.data["stats"]["total_paid"]), Decimal("0"))

        self.client.force_authenticate(self.owner)
        owner_view = self.client.get(self.list_url, {"status": "pending"})
        self.assertEqual(len(owner_view.data["bookings"]), 2)

        bad = self.client.get(self.list_url, {"status": "archived"})
        self.assertEqual(bad.status_code, status.HTTP_400_BAD_REQUEST)

    def test_owner_approves_booking(self) -> None:
        booking_id = self._create().data["id"]

        renter_attempt = self.client.post(self._status_url(booking_id), {"status": "approved"}, format="json")
        self.assertEqual(renter_attempt.status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(self.owner)
        with self.captureOnCommitCallbacks(execute=True):
            response = self.client.post(self._status_url(booking_id), {"status": "approved"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["status"], "approved")
        self.assertTrue(Notification.objects.filter(user=self.renter, booking_number=response.data["booking_number"]).exists())

    def test_direct_activation_is_forbidden(self) -> None:
        booking_id = self._create().data["id"]
        self.client.force_authenticate(self.owner)
        self.client.post(self._status_url(booking_id), {"status": "approved"}, format="json")

        response = self.client.post(self._status_url(booking_id), {"status": "active"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_invalid_transition_returns_conflict(self) -> None:
        booking_id = self._create().data["id"]
        self.client.force_authenticate(self.owner)

        response = self.client.post(self._status_url(booking_id), {"status": "completed"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["code"], "invalid_transition")

    def test_unknown_status_is_validation_error(self) -> None:
        booking_id = self._create().data["id"]
        response = self.client.post(self._status_url(booking_id), {"status": "archived"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_renter_cancels_paid_booking_and_gets_refund(self) -> None:
        booking_id = self._create().data["id"]
        booking = Booking.objects.get(pk=booking_id)
        booking.status = Booking.Status.APPROVED
        booking.payment_status = Booking.PaymentStatus.PAID
        booking.save()

        response = self.client.post(
            self._status_url(booking_id),
            {"status": "cancelled", "reason": "Shoot postponed"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["status"], "cancelled")
        self.assertEqual(response.data["payment_status"], "refunded")
        self.assertEqual(response.data["cancellation_reason"], "Shoot postponed")

    def test_outsider_cannot_see_or_change_booking(self) -> None:
        booking_id = self._create().data["id"]
        self.client.force_authenticate(self.other_renter)

        detail = self.client.get(reverse("booking-detail", args=[booking_id]))
        change = self.client.post(self._status_url(booking_id), {"status": "cancelled"}, format="json")

        self.assertEqual(detail.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(change.status_code, status.HTTP_404_NOT_FOUND)
