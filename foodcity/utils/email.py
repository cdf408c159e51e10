import smtplib
from email.message import EmailMessage
from typing import Optional

from foodcity.core.config import settings


def compose_message(to: str, subject: str, text: str, html: Optional[str] = None, sender: Optional[str] = None) -> EmailMessage:
    message = EmailMessage()
    message["From"] = sender or f"{settings.EMAILS_FROM_NAME} <{settings.EMAILS_FROM_EMAIL}>"
    message["To"] = to
    message["Subject"] = subject
    message.set_content(text)
    if html:
        message.add_alternative(html, subtype="html")
    return message


def send_smtp_message(message: EmailMessage) -> None:
    """Deliver over STARTTLS. Blocking, so only call it from Celery workers."""
    with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=30) as smtp:
        smtp.starttls()
        if settings.SMTP_USER and settings.SMTP_PASSWORD:
            smtp.login(settings.SMTP_USER, settings.SMTP_PASSWORD)
        smtp.send_message(message)
