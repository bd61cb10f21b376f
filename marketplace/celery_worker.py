# marketplace/celery_worker.py
from celery import Celery

from marketplace.utils.settings import CELERY_BROKER_URL, CELERY_RESULT_BACKEND

celery_app = Celery(
    "marketplace",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

# WAŻNE: Explicite importuj taski, żeby Celery je zarejestrował
celery_app.conf.imports = (
    "marketplace.services.notification_service",
)

celery_app.conf.timezone = "UTC"
