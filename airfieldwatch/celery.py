import os
from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "airfieldwatch.settings")

app = Celery("airfieldwatch")
# Prefer configuration from Django settings, using a CELERY namespace
app.config_from_object("django.conf:settings", namespace="CELERY")

# Autodiscover tasks in installed apps under tasks.py
app.autodiscover_tasks()
