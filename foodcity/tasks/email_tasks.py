from celery import Task
from celery.utils.log import get_task_logger

from foodcity.core.celery_app import celery_app
from foodcity.core.config import settings
from foodcity.utils.email import compose_message, send_smtp_message
from foodcity.utils.email_templates import order_confirmation_template

logger = get_task_logger(__name__)


class EmailTask(Task):
    """Retries transient SMTP failures with jittered exponential backoff."""

    autoretry_for = (Exception,)
    retry_kwargs = {"max_retries": 3}
    retry_backoff = True
    retry_backoff_max = 600
    retry_jitter = True
    acks_late = True


@celery_app.task(base=EmailTask, bind=True)
def send_order_confirmation(self, order_id: int):
    from foodcity.db.session import SessionLocal
    from foodcity.models.order import Order

    db = SessionLocal()
    try:
        order = db.get(Order, order_id)
        if order is None:
            logger.error("order_confirmation_missing_order order_id=%s", order_id)
            return

        recipient = order.customer_email or (order.user.email if order.user else None)
        if not recipient:
            logger.warning("order_confirmation_no_recipient order_number=%s", order.order_number)
            return

        send_smtp_message(
            compose_message(
                to=recipient,
                subject=f"Order Placed - {order.order_number}",
                text=f"Thanks for ordering from FoodCity. Your order {order.order_number} is in the kitchen queue.",
                html=order_confirmation_template(order),
                sender=settings.EMAILS_FROM_ORDERS or None,
            )
        )
        logger.info("order_confirmation_sent order_number=%s", order.order_number)
    except Exception as exc:
        logger.exception("order_confirmation_error order_id=%s", order_id)
        raise self.retry(exc=exc)
    finally:
        db.close()
