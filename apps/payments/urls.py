"""URL routing for payment callbacks."""

from django.urls import path  # type: ignore

from .views import PaystackWebhookView

urlpatterns = [
    path("webhook/", PaystackWebhookView.as_view(), name="payment-webhook"),
]
