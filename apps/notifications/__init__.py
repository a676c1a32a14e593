"""Notifications app package.

Delivers booking updates to users by email and as in-app messages. Delivery
runs in Celery tasks triggered by booking events.
"""
