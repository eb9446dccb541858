"""Notifications app package.

Stores the messages users receive about their reservations and delivers
them asynchronously through Celery.
"""
