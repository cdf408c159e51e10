from celery import Celery

from foodcity.core.config import settings

EMAIL_QUEUE = "emails"

celery_app = Celery(
    "foodcity",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=["foodcity.tasks.email_tasks"],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="Asia/Kolkata",
    enable_utc=True,

    # Confirmation mails are small; anything slower is a stuck SMTP session.
    task_time_limit=120,
    task_soft_time_limit=90,

    task_acks_late=True,
    task_reject_on_worker_lost=True,
    worker_prefetch_multiplier=1,

    task_ignore_result=True,
    task_default_queue=EMAIL_QUEUE,
    task_routes={"foodcity.tasks.email_tasks.*": {"queue": EMAIL_QUEUE}},
)
