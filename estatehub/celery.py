import os
from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "estatehub.settings.dev")

app = Celery("estatehub")
app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()
