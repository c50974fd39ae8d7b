import asyncio
import logging
import smtplib
from email.message import EmailMessage

from app.core.config import settings
from app.core.errors import UpstreamServiceError

logger = logging.getLogger(__name__)

class MailError(UpstreamServiceError):
    pass

def mail_configured() -> bool:
    return bool(settings.SMTP_HOST)

def _send(message: EmailMessage) -> None:
    with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=10) as smtp:
        if settings.SMTP_USE_TLS:
            smtp.starttls()
        if settings.SMTP_USER:
            smtp.login(settings.SMTP_USER, settings.SMTP_PASSWORD or "")
        smtp.send_message(message)

async def send_email(to: str, subject: str, body: str) -> None:
    if not mail_configured():
        raise MailError("E-mail delivery is not configured", status_code=503)

    message = EmailMessage()
    message["From"] = settings.MAIL_FROM
    message["To"] = to
    message["Subject"] = subject
    message.set_content(body)
    try:
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, _send, message)
    except (smtplib.SMTPException, OSError) as e:
        logger.error(f"Failed to send '{subject}' to {to}: {e}")
        raise MailError("Failed to send e-mail")
    logger.info(f"Sent '{subject}' to {to}")

async def send_verification_email(to: str, name: str, verification_url: str) -> None:
    body = (
        f"Hi {name},\n\n"
        f"Please verify your email address to get started:\n{verification_url}\n\n"
        f"This link expires in {settings.EMAIL_VERIFICATION_EXPIRE_HOURS} hours.\n"
    )
    await send_email(to, "Verify your email address", body)
