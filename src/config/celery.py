"""Celery application for the pharmacy orders project.

``DJANGO_SETTINGS_MODULE`` is set before the app is created so Celery reads
its configuration from Django settings (``CELERY_`` prefix). The only
periodic job is the outbox relay scheduled in ``CELERY_BEAT_SCHEDULE``.
"""

import os

from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

app = Celery("pharmacy_orders")

app.config_from_object("django.conf:settings", namespace="CELERY")

# Discovers tasks.py in every installed app
app.autodiscover_tasks()
