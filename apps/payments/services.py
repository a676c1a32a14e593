"""Paystack webhook helpers."""

from __future__ import annotations

import hashlib
import hmac
import logging

from django.conf import settings  # type: ignore

from apps.bookings.exceptions import BookingNotFound, InvalidTransitionError
from apps.bookings.models import Booking
from apps.bookings.services import confirm_payment

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "X-Paystack-Signature"
CHARGE_SUCCESS = "charge.success"


def compute_signature(payload: bytes, secret: str | None = None) -> str:
    """HMAC-SHA512 hex digest of the raw request body."""
    key = (secret if secret is not None else settings.PAYSTACK_SECRET_KEY).encode()
    return hmac.new(key, payload, hashlib.sha512).hexdigest()


def verify_webhook_signature(payload: bytes, signature: str | None) -> bool:
    if not signature:
        return False
    return hmac.compare_digest(compute_signature(payload), signature)


def handle_gateway_event(event: dict) -> tuple[str, Booking | None]:
    """
    Apply a verified gateway event.

    Returns an outcome label and the affected booking, if any. Unknown
    bookings and bookings that can no longer be activated are logged and
    reported as ignored so the gateway stops redelivering.
    """
    event_type = event.get("event")
    if event_type != CHARGE_SUCCESS:
        logger.info(f"Ignoring payment event '{event_type}'")
        return "ignored", None

    data = event.get("data") or {}
    if not isinstance(data, dict):
        logger.warning(f"Payment event '{event_type}' has malformed data of type {type(data).__name__}")
        return "ignored", None
    metadata = data.get("metadata") or {}
    if not isinstance(metadata, dict):
        logger.warning(f"Payment event '{event_type}' has malformed metadata of type {type(metadata).__name__}")
        return "ignored", None
    booking_number = metadata.get("booking_number")
    reference = str(data.get("reference") or "")
    if not booking_number or not isinstance(booking_number, str):
        logger.warning(f"Payment event {reference or '<no reference>'} carries no booking number")
        return "ignored", None

    try:
        booking = confirm_payment(booking_number, payment_reference=reference)
    except BookingNotFound:
        logger.warning(f"Payment {reference} received for unknown booking {booking_number}")
        return "ignored", None
    except InvalidTransitionError as exc:
        logger.warning(f"Payment {reference} for booking {booking_number} not applied: {exc}")
        return "ignored", None

    return "processed", booking
