"""Booking lifecycle: requests, approvals, payment confirmation and cancellation."""
