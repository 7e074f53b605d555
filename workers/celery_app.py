"""Celery application configuration."""
from __future__ import annotations

from celery import Celery
from kombu import Queue

from shared.config import get_settings

IMPORT_QUEUE = "templates.imports"

settings = get_settings()

celery_app = Celery(
    "adtemplate",
    broker=settings.broker_url,
    backend=settings.result_backend,
    include=["workers.tasks"],
)

celery_app.conf.task_default_queue = "adtemplate"
celery_app.conf.task_queues = (
    Queue("adtemplate", routing_key="adtemplate"),
    Queue(IMPORT_QUEUE, routing_key=IMPORT_QUEUE),
)
celery_app.conf.task_routes = {
    "templates.*": {
        "queue": IMPORT_QUEUE,
        "routing_key": IMPORT_QUEUE,
    }
}
celery_app.conf.update(task_serializer="json", accept_content=["json"], result_serializer="json")
