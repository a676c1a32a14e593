"""Notification services for sending emails and in-app messages."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from django.conf import settings  # type: ignore
from django.core.mail import send_mail  # type: ignore
from django.utils.html import strip_tags  # type: ignore

if TYPE_CHECKING:  # pragma: no cover
    from apps.users.models import CustomUser
    from apps.bookings.models import Booking

logger = logging.getLogger(__name__)


# ============================================================================
# CHANNELS
# ============================================================================

def send_email_notification(
    recipient_email: str,
    subject: str,
    message: str,
    *,
    html_message: str | None = None,
) -> bool:
    """
    Send a single email through Django's mail backend.

    Returns:
        bool: True if the message was handed to the backend
    """
    try:
        text_message = strip_tags(html_message) if html_message else message
        send_mail(
            subject=subject,
            message=text_message,
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[recipient_email],
            html_message=html_message,
            fail_silently=False,
        )
        logger.info(f"Email sent successfully to {recipient_email}: {subject}")
        return True

    except Exception as e:
        logger.error(f"Failed to send email to {recipient_email}: {e}", exc_info=True)
        return False


def create_in_app_notification(
    user: "CustomUser",
    title: str,
    message: str,
    *,
    booking_number: str = "",
) -> bool:
    """Store a notification row for the web app."""
    try:
        from .models import Notification

        Notification.objects.create(
            user=user,
            title=title,
            message=message,
            booking_number=booking_number,
        )
        logger.info(f"In-app notification created for {user.email}: {title}")
        return True

    except Exception as e:
        logger.error(f"Failed to create in-app notification for {user.email}: {e}", exc_info=True)
        return False


def notify_user_all_channels(
    user: "CustomUser",
    title: str,
    message: str,
    *,
    booking_number: str = "",
) -> dict[str, bool]:
    """
    Notify a user by every available channel.

    Returns:
        dict: Delivery result per channel
    """
    results = {"email": False, "in_app": False}

    if user.email:
        results["email"] = send_email_notification(user.email, title, message)

    results["in_app"] = create_in_app_notification(user, title, message, booking_number=booking_number)
    return results


# ============================================================================
# BOOKING NOTIFICATIONS
# ============================================================================

STATUS_MESSAGES = {
    "approved": "Your booking {number} for {equipment} was approved. Complete payment to activate it.",
    "rejected": "Your booking {number} for {equipment} was declined.",
    "cancelled": "Booking {number} for {equipment} was cancelled.",
    "completed": "Booking {number} for {equipment} is complete. Thanks for renting with Cr8Kit!",
    "active": "Booking {number} for {equipment} is now active.",
}


def notify_booking_requested(booking: "Booking") -> dict[str, bool]:
    """Tell the owner a renter requested their equipment."""
    message = (
        f"{booking.renter.display_name} requested {booking.equipment.name} "
        f"from {booking.start_date:%d %b %Y} to {booking.end_date:%d %b %Y} "
        f"({booking.total_days} days, {booking.total_amount} {booking.currency})."
    )
    return notify_user_all_channels(
        booking.owner,
        f"New booking request {booking.booking_number}",
        message,
        booking_number=booking.booking_number,
    )


def notify_booking_status_changed(booking: "Booking", actor_id: int | None = None) -> dict[str, bool]:
    """Tell the participant who did not make the change about the new status."""
    recipient = booking.owner if actor_id == booking.renter_id else booking.renter
    template = STATUS_MESSAGES.get(booking.status, "Booking {number} is now {status}.")
    message = template.format(
        number=booking.booking_number,
        equipment=booking.equipment.name,
        status=booking.status,
    )
    if booking.status == "cancelled" and booking.payment_status == "refunded":
        message += " The payment will be refunded."
    if booking.cancellation_reason and booking.status == "cancelled":
        message += f" Reason: {booking.cancellation_reason}"
    return notify_user_all_channels(
        recipient,
        f"Booking {booking.booking_number} {booking.get_status_display().lower()}",
        message,
        booking_number=booking.booking_number,
    )


def notify_booking_paid(booking: "Booking") -> dict[str, dict[str, bool]]:
    """Confirm payment to the renter and tell the owner to hand over the kit."""
    return {
        "renter": notify_user_all_channels(
            booking.renter,
            f"Payment received for {booking.booking_number}",
            f"We received {booking.total_amount} {booking.currency} for {booking.equipment.name}. "
            f"Your rental starts on {booking.start_date:%d %b %Y}.",
            booking_number=booking.booking_number,
        ),
        "owner": notify_user_all_channels(
            booking.owner,
            f"Booking {booking.booking_number} paid",
            f"{booking.renter.display_name} paid for {booking.equipment.name}. "
            f"Rental runs {booking.start_date:%d %b %Y} to {booking.end_date:%d %b %Y}.",
            booking_number=booking.booking_number,
        ),
    }
