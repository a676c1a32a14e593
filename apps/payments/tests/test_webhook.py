"""Tests for the Paystack webhook."""

from __future__ import annotations

import json
from datetime import timedelta
from decimal import Decimal

from django.test import override_settings
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from apps.bookings import services as booking_services
from apps.bookings.models import Booking
from apps.equipment.models import Equipment
from apps.notifications.models import Notification
from apps.payments.services import compute_signature, verify_webhook_signature
from apps.users.models import User


class PaystackWebhookTests(APITestCase):
    def setUp(self) -> None:
        self.renter = User.objects.create_user(email="renter@example.com", role=User.RoleChoices.RENTER)
        self.owner = User.objects.create_user(email="owner@example.com", role=User.RoleChoices.OWNER)
        equipment = Equipment.objects.create(
            owner=self.owner,
            name="Godox SL60W",
            category=Equipment.Category.LIGHTING,
            price_per_day=Decimal("80.00"),
            location="Madina",
        )
        start = timezone.localdate() + timedelta(days=1)
        self.booking = booking_services.create_booking(self.renter, equipment.id, start, start + timedelta(days=1))
        self.url = reverse("payment-webhook")

    def _event(self, event: str = "charge.success", booking_number: str | None = None) -> dict:
        return {
            "event": event,
            "data": {
                "reference": "PSK_REF_001",
                "amount": 16000,
                "metadata": {"booking_number": booking_number or self.booking.booking_number},
            },
        }

    def _post(self, event: dict, signature: str | None = None):
        body = json.dumps(event).encode()
        headers = {"HTTP_X_PAYSTACK_SIGNATURE": signature if signature is not None else compute_signature(body)}
        return self.client.post(self.url, data=body, content_type="application/json", **headers)

    def _approve(self) -> None:
        booking_services.transition_status(self.booking.id, self.owner, Booking.Status.APPROVED)

    def test_signature_helpers(self) -> None:
        body = b'{"event": "charge.success"}'
        self.assertTrue(verify_webhook_signature(body, compute_signature(body)))
        self.assertFalse(verify_webhook_signature(body, compute_signature(body, secret="other")))
        self.assertFalse(verify_webhook_signature(body, None))

    def test_invalid_signature_is_rejected(self) -> None:
        self._approve()
        response = self._post(self._event(), signature="deadbeef")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.payment_status, Booking.PaymentStatus.PENDING)

    def test_charge_success_activates_booking(self) -> None:
        self._approve()

        with self.captureOnCommitCallbacks(execute=True):
            response = self._post(self._event())

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["status"], "processed")
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.status, Booking.Status.ACTIVE)
        self.assertEqual(self.booking.payment_status, Booking.PaymentStatus.PAID)
        self.assertEqual(self.booking.payment_reference, "PSK_REF_001")
        self.assertEqual(
            set(Notification.objects.filter(booking_number=self.booking.booking_number).values_list("user", flat=True)),
            {self.renter.id, self.owner.id},
        )

    def test_redelivery_is_a_noop(self) -> None:
        self._approve()
        self._post(self._event())
        updated_at = Booking.objects.get(pk=self.booking.pk).updated_at

        response = self._post(self._event())

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Booking.objects.get(pk=self.booking.pk).updated_at, updated_at)

    def test_unapproved_booking_is_acknowledged_but_untouched(self) -> None:
        with self.assertLogs("apps.payments", level="WARNING"):
            response = self._post(self._event())

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["status"], "ignored")
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.status, Booking.Status.PENDING)

    def test_unknown_booking_is_acknowledged(self) -> None:
        response = self._post(self._event(booking_number="BK20990101FFFFFFFFFFFF"))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["status"], "ignored")

    def test_other_events_are_ignored(self) -> None:
        self._approve()
        response = self._post(self._event(event="transfer.success"))

        self.assertEqual(response.data["status"], "ignored")
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.status, Booking.Status.APPROVED)

    @override_settings(PAYSTACK_SECRET_KEY="sk_live_rotated")
    def test_signature_uses_configured_secret(self) -> None:
        body = json.dumps(self._event()).encode()
        stale = compute_signature(body, secret="sk_test_webhook_secret")

        response = self._post(self._event(), signature=stale)

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_malformed_payloads_are_acknowledged(self) -> None:
        self._approve()
        malformed = [
            {"event": "charge.success", "data": "oops"},
            {"event": "charge.success", "data": ["PSK_REF_001"]},
            {"event": "charge.success", "data": {"reference": "PSK_REF_001", "metadata": "oops"}},
            {"event": "charge.success", "data": {"metadata": {"booking_number": ["BK1", "BK2"]}}},
        ]

        for event in malformed:
            with self.subTest(event=event):
                with self.assertLogs("apps.payments", level="WARNING"):
                    response = self._post(event)
                self.assertEqual(response.status_code, status.HTTP_200_OK)
                self.assertEqual(response.data["status"], "ignored")

        self.booking.refresh_from_db()
        self.assertEqual(self.booking.status, Booking.Status.APPROVED)
