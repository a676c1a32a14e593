"""Booking lifecycle service tests."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from unittest import mock

import pytest
from django.db import IntegrityError, OperationalError

from apps.bookings import services
from apps.bookings.exceptions import (
    BookingBusyError,
    BookingConflictError,
    BookingForbidden,
    BookingNotFound,
    BookingValidationError,
    EquipmentNotFound,
    InvalidTransitionError,
)
from apps.bookings.models import Booking
from apps.equipment.models import Equipment
from apps.users.models import User

TODAY = date(2023, 12, 20)


def make_user(email: str, role: str) -> User:
    return User.objects.create_user(email=email, password="Secret123", role=role, full_name=email.split("@")[0])


@pytest.fixture
def renter(db):
    return make_user("ama@example.com", User.RoleChoices.RENTER)


@pytest.fixture
def other_renter(db):
    return make_user("kojo@example.com", User.RoleChoices.RENTER)


@pytest.fixture
def owner(db):
    return make_user("kwame@example.com", User.RoleChoices.OWNER)


@pytest.fixture
def camera(owner):
    return Equipment.objects.create(
        owner=owner,
        name="Sony A7 III",
        category=Equipment.Category.CAMERAS,
        price_per_day=Decimal("100.00"),
        location="Osu",
    )


def book(renter, equipment, start, end):
    return services.create_booking(renter, equipment.id, start, end, today=TODAY)


@pytest.mark.django_db
def test_create_booking_prices_inclusive_days(renter, camera):
    booking = book(renter, camera, date(2024, 1, 1), date(2024, 1, 3))

    assert booking.total_days == 3
    assert booking.total_amount == Decimal("300.00")
    assert booking.price_per_day == Decimal("100.00")
    assert booking.status == Booking.Status.PENDING
    assert booking.payment_status == Booking.PaymentStatus.PENDING
    assert booking.owner == camera.owner
    assert booking.currency == "GHS"
    assert booking.booking_number.startswith("BK")
    assert len(booking.booking_number) == 22


@pytest.mark.django_db
def test_price_is_captured_at_creation(renter, camera):
    booking = book(renter, camera, date(2024, 1, 1), date(2024, 1, 2))
    camera.price_per_day = Decimal("250.00")
    camera.save()

    booking.refresh_from_db()
    assert booking.total_amount == Decimal("200.00")


@pytest.mark.django_db
@pytest.mark.parametrize(
    "start, end, field",
    [
        (date(2024, 1, 3), date(2024, 1, 3), "dates"),
        (date(2024, 1, 5), date(2024, 1, 3), "dates"),
        (date(2023, 12, 19), date(2024, 1, 3), "start_date"),
    ],
)
def test_create_booking_rejects_bad_dates(renter, camera, start, end, field):
    with pytest.raises(BookingValidationError) as excinfo:
        book(renter, camera, start, end)
    assert field in excinfo.value.errors
    assert Booking.objects.count() == 0


@pytest.mark.django_db
def test_create_booking_rejects_unavailable_equipment(renter, camera):
    camera.is_available = False
    camera.save()

    with pytest.raises(BookingValidationError):
        book(renter, camera, date(2024, 1, 1), date(2024, 1, 3))


@pytest.mark.django_db
def test_create_booking_unknown_equipment(renter):
    with pytest.raises(EquipmentNotFound):
        services.create_booking(renter, 9999, date(2024, 1, 1), date(2024, 1, 3), today=TODAY)


@pytest.mark.django_db
def test_only_renters_create_bookings(owner, camera):
    with pytest.raises(BookingForbidden):
        book(owner, camera, date(2024, 1, 1), date(2024, 1, 3))


@pytest.mark.django_db
def test_overlapping_booking_conflicts(renter, other_renter, camera):
    book(renter, camera, date(2024, 1, 1), date(2024, 1, 3))

    with pytest.raises(BookingConflictError) as excinfo:
        book(other_renter, camera, date(2024, 1, 2), date(2024, 1, 4))
    assert excinfo.value.status_code == 409

    # Shared boundary day counts as overlap
    with pytest.raises(BookingConflictError):
        book(other_renter, camera, date(2024, 1, 3), date(2024, 1, 5))

    book(other_renter, camera, date(2024, 1, 4), date(2024, 1, 6))
    assert Booking.objects.count() == 2


@pytest.mark.django_db
def test_terminal_bookings_release_dates(renter, other_renter, owner, camera):
    first = book(renter, camera, date(2024, 1, 1), date(2024, 1, 3))
    services.transition_status(first.id, owner, Booking.Status.REJECTED)

    second = book(other_renter, camera, date(2024, 1, 2), date(2024, 1, 4))
    assert second.status == Booking.Status.PENDING


@pytest.mark.django_db
def test_storage_conflict_maps_to_conflict(renter, camera):
    with mock.patch.object(Booking.objects, "create", side_effect=IntegrityError("overlap")):
        with pytest.raises(BookingConflictError):
            book(renter, camera, date(2024, 1, 1), date(2024, 1, 3))


@pytest.mark.django_db
def test_locked_database_maps_to_retryable_conflict(renter, camera):
    with mock.patch.object(Booking.objects, "create", side_effect=OperationalError("database is locked")):
        with pytest.raises(BookingBusyError) as excinfo:
            book(renter, camera, date(2024, 1, 1), date(2024, 1, 3))
    assert excinfo.value.status_code == 409
    assert excinfo.value.code == "booking_busy"
    assert not Booking.objects.exists()


@pytest.mark.django_db
def test_other_operational_errors_propagate(renter, camera):
    with mock.patch.object(Booking.objects, "create", side_effect=OperationalError("no such table")):
        with pytest.raises(OperationalError):
            book(renter, camera, date(2024, 1, 1), date(2024, 1, 3))


@pytest.mark.django_db
def test_booking_numbers_are_unique(renter, camera):
    numbers = {
        book(renter, camera, date(2024, 1, day), date(2024, 1, day + 1)).booking_number
        for day in range(1, 28, 3)
    }
    assert len(numbers) == 9


@pytest.mark.django_db
def test_owner_approves_and_renter_cannot(renter, owner, camera):
    booking = book(renter, camera, date(2024, 1, 1), date(2024, 1, 3))

    with pytest.raises(BookingForbidden):
        services.transition_status(booking.id, renter, Booking.Status.APPROVED)

    approved = services.transition_status(booking.id, owner, Booking.Status.APPROVED)
    assert approved.status == Booking.Status.APPROVED


@pytest.mark.django_db
def test_outsider_cannot_touch_booking(renter, other_renter, camera):
    booking = book(renter, camera, date(2024, 1, 1), date(2024, 1, 3))

    with pytest.raises(BookingForbidden):
        services.transition_status(booking.id, other_renter, Booking.Status.CANCELLED)


@pytest.mark.django_db
def test_transition_errors(renter, owner, camera):
    booking = book(renter, camera, date(2024, 1, 1), date(2024, 1, 3))

    with pytest.raises(BookingValidationError):
        services.transition_status(booking.id, owner, "archived")
    with pytest.raises(BookingNotFound):
        services.transition_status(booking.id + 100, owner, Booking.Status.APPROVED)
    with pytest.raises(InvalidTransitionError):
        services.transition_status(booking.id, owner, Booking.Status.COMPLETED)
    with pytest.raises(BookingForbidden):
        services.transition_status(
            services.transition_status(booking.id, owner, Booking.Status.APPROVED).id,
            owner,
            Booking.Status.ACTIVE,
        )


@pytest.mark.django_db
def test_terminal_booking_is_immutable(renter, owner, camera):
    booking = book(renter, camera, date(2024, 1, 1), date(2024, 1, 3))
    services.transition_status(booking.id, renter, Booking.Status.CANCELLED, reason="Shoot moved")

    for status in (Booking.Status.APPROVED, Booking.Status.PENDING, Booking.Status.CANCELLED):
        with pytest.raises(InvalidTransitionError):
            services.transition_status(booking.id, owner, status)

    booking.refresh_from_db()
    assert booking.cancellation_reason == "Shoot moved"


@pytest.mark.django_db
def test_full_lifecycle_through_payment(renter, owner, camera):
    booking = book(renter, camera, date(2024, 1, 1), date(2024, 1, 3))
    services.transition_status(booking.id, owner, Booking.Status.APPROVED)

    paid = services.confirm_payment(booking.booking_number, payment_reference="PSK_123")
    assert paid.status == Booking.Status.ACTIVE
    assert paid.payment_status == Booking.PaymentStatus.PAID
    assert paid.payment_reference == "PSK_123"

    completed = services.transition_status(booking.id, renter, Booking.Status.COMPLETED)
    assert completed.status == Booking.Status.COMPLETED
    assert completed.payment_status == Booking.PaymentStatus.PAID


@pytest.mark.django_db
def test_confirm_payment_is_idempotent(renter, owner, camera):
    booking = book(renter, camera, date(2024, 1, 1), date(2024, 1, 3))
    services.transition_status(booking.id, owner, Booking.Status.APPROVED)

    first = services.confirm_payment(booking.booking_number, payment_reference="PSK_1")
    second = services.confirm_payment(booking.booking_number, payment_reference="PSK_2")

    assert second.status == Booking.Status.ACTIVE
    assert second.payment_reference == "PSK_1"
    assert first.updated_at == second.updated_at


@pytest.mark.django_db
def test_confirm_payment_requires_approval(renter, camera):
    booking = book(renter, camera, date(2024, 1, 1), date(2024, 1, 3))

    with pytest.raises(InvalidTransitionError):
        services.confirm_payment(booking.booking_number)
    with pytest.raises(BookingNotFound):
        services.confirm_payment("BK20240101000000000000")


@pytest.mark.django_db
def test_cancelling_paid_booking_refunds(renter, owner, camera):
    booking = book(renter, camera, date(2024, 1, 1), date(2024, 1, 3))
    services.transition_status(booking.id, owner, Booking.Status.APPROVED)
    services.confirm_payment(booking.booking_number)

    cancelled = services.transition_status(booking.id, renter, Booking.Status.CANCELLED)

    assert cancelled.status == Booking.Status.CANCELLED
    assert cancelled.payment_status == Booking.PaymentStatus.REFUNDED


@pytest.mark.django_db
def test_cancelling_unpaid_booking_keeps_payment_pending(renter, owner, camera):
    booking = book(renter, camera, date(2024, 1, 1), date(2024, 1, 3))
    services.transition_status(booking.id, owner, Booking.Status.APPROVED)

    cancelled = services.transition_status(booking.id, owner, Booking.Status.CANCELLED)
    assert cancelled.payment_status == Booking.PaymentStatus.PENDING


@pytest.mark.django_db
def test_list_bookings_by_role_with_stats(renter, other_renter, owner, camera):
    first = book(renter, camera, date(2024, 1, 1), date(2024, 1, 3))
    second = book(renter, camera, date(2024, 2, 1), date(2024, 2, 2))
    book(other_renter, camera, date(2024, 3, 1), date(2024, 3, 2))
    services.transition_status(first.id, owner, Booking.Status.APPROVED)
    services.confirm_payment(first.booking_number)

    bookings, stats = services.list_bookings(renter)
    assert [b.id for b in bookings] == [second.id, first.id]
    assert stats == {"active_count": 1, "pending_count": 1, "total_paid": Decimal("300.00")}

    owner_bookings, owner_stats = services.list_bookings(owner)
    assert len(owner_bookings) == 3
    assert owner_stats["pending_count"] == 2

    pending_only, _ = services.list_bookings(owner, role="owner", status=Booking.Status.PENDING)
    assert {b.status for b in pending_only} == {Booking.Status.PENDING}

    as_renter, _ = services.list_bookings(owner, role="renter")
    assert list(as_renter) == []


@pytest.mark.django_db
def test_list_bookings_rejects_unknown_filters(renter):
    with pytest.raises(BookingValidationError):
        services.list_bookings(renter, status="archived")
    with pytest.raises(BookingValidationError):
        services.list_bookings(renter, role="admin")


@pytest.mark.django_db
def test_check_availability_lists_held_ranges(renter, other_renter, owner, camera):
    book(renter, camera, date(2024, 2, 1), date(2024, 2, 3))
    rejected = book(other_renter, camera, date(2024, 1, 10), date(2024, 1, 12))
    book(other_renter, camera, date(2024, 1, 1), date(2024, 1, 3))
    services.transition_status(rejected.id, owner, Booking.Status.REJECTED)

    ranges = services.check_availability(camera.id, as_of=date(2024, 1, 1))
    assert [(r.start_date, r.end_date) for r in ranges] == [
        (date(2024, 1, 1), date(2024, 1, 3)),
        (date(2024, 2, 1), date(2024, 2, 3)),
    ]

    later = services.check_availability(camera.id, as_of=date(2024, 1, 4))
    assert [(r.start_date, r.end_date) for r in later] == [(date(2024, 2, 1), date(2024, 2, 3))]

    with pytest.raises(EquipmentNotFound):
        services.check_availability(camera.id + 100)
