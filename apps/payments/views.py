"""Payment gateway webhook."""

from __future__ import annotations

import json
import logging

from rest_framework import permissions, status  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from .services import SIGNATURE_HEADER, handle_gateway_event, verify_webhook_signature

logger = logging.getLogger(__name__)


class PaystackWebhookView(APIView):
    """Receives Paystack charge notifications signed with the account secret."""

    authentication_classes: list = []
    permission_classes = [permissions.AllowAny]

    def post(self, request, *args, **kwargs):  # type: ignore
        payload = request.body
        if not verify_webhook_signature(payload, request.headers.get(SIGNATURE_HEADER)):
            logger.error("Payment webhook rejected: invalid signature")
            return Response(
                {"detail": "Invalid signature.", "code": "invalid_signature"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        try:
            event = json.loads(payload)
        except (json.JSONDecodeError, UnicodeDecodeError):
            logger.error("Payment webhook rejected: body is not valid JSON")
            return Response(
                {"detail": "Invalid JSON.", "code": "invalid_payload"},
                status=status.HTTP_400_BAD_REQUEST,
            )
        if not isinstance(event, dict):
            return Response(
                {"detail": "Invalid payload.", "code": "invalid_payload"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        outcome, booking = handle_gateway_event(event)
        body = {"status": outcome}
        if booking is not None:
            body["booking_number"] = booking.booking_number
        return Response(body, status=status.HTTP_200_OK)
