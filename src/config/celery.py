"""
Celery application for the marketplace.

DJANGO_SETTINGS_MODULE is set before the app is instantiated so Celery reads
the Django settings (``CELERY_`` namespace), including the beat schedule that
refreshes statistics snapshots.
"""

import os

from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

app = Celery("marketplace")

app.config_from_object("django.conf:settings", namespace="CELERY")

# Discovers tasks.py in every installed app
app.autodiscover_tasks()
