'''
Transactional email. Resend's HTTP API is used when an API key is
configured; otherwise an SMTP (STARTTLS) relay, if its login is set.
'''
import asyncio
import html as html_lib
import smtplib
from email.message import EmailMessage
from typing import Optional

import httpx

from ..common.config import settings
from ..common.exceptions import EmailDeliveryError, EmailNotConfiguredError
from ..common.logger import log
from ..database import models as db_models
from ..models import contact as contact_models

CONFIGURATION_HINT = (
    "Email is not configured. Set RESEND_API_KEY, or SMTP_USER and SMTP_PASSWORD, "
    "in the server environment."
)

class EmailService:
    """
    Sends email through whichever relay is configured.
    """
    # Tests swap this for an httpx.MockTransport.
    transport: Optional[httpx.AsyncBaseTransport] = None

    @property
    def uses_resend(self) -> bool:
        return bool(settings.RESEND_API_KEY)

    @property
    def uses_smtp(self) -> bool:
        return bool(settings.SMTP_USER and settings.SMTP_PASSWORD)

    @property
    def is_configured(self) -> bool:
        return self.uses_resend or self.uses_smtp

    async def send_email(
        self,
        to: str,
        subject: str,
        html: str,
        text: Optional[str] = None,
        reply_to: Optional[str] = None
    ) -> contact_models.EmailSendResult:
        if self.uses_resend:
            return await self._send_via_resend(to, subject, html, text, reply_to)
        if self.uses_smtp:
            return await self._send_via_smtp(to, subject, html, text, reply_to)
        log.error("Email send requested but no relay is configured.")
        raise EmailNotConfiguredError(CONFIGURATION_HINT)

    async def _send_via_resend(self, to, subject, html, text, reply_to) -> contact_models.EmailSendResult:
        payload = {
            "from": settings.EMAIL_FROM,
            "to": [to],
            "subject": subject,
            "html": html,
        }
        if text:
            payload["text"] = text
        if reply_to:
            payload["reply_to"] = reply_to

        log.info(f"Sending email to {to} via Resend: '{subject}'")
        try:
            async with httpx.AsyncClient(transport=self.transport, timeout=settings.HTTP_TIMEOUT_SECONDS) as client:
                response = await client.post(
                    settings.RESEND_API_URL,
                    json=payload,
                    headers={"Authorization": f"Bearer {settings.RESEND_API_KEY}"},
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            log.error(f"Resend rejected email to {to}: {e.response.status_code} - {e.response.text}")
            raise EmailDeliveryError(f"Resend API error {e.response.status_code}: {e.response.text}")
        except httpx.RequestError as e:
            log.error(f"Resend request failed for {to}: {e}", exc_info=True)
            raise EmailDeliveryError(f"Could not reach the email service: {e}")

        return contact_models.EmailSendResult(success=True, message="Email sent successfully", id=data.get("id"))

    async def _send_via_smtp(self, to, subject, html, text, reply_to) -> contact_models.EmailSendResult:
        message = EmailMessage()
        message["From"] = settings.EMAIL_FROM
        message["To"] = to
        message["Subject"] = subject
        if reply_to:
            message["Reply-To"] = reply_to
        message.set_content(text or "This message requires an HTML-capable email client.")
        message.add_alternative(html, subtype="html")

        def send_sync():
            with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=settings.HTTP_TIMEOUT_SECONDS) as smtp:
                smtp.starttls()
                smtp.login(settings.SMTP_USER, settings.SMTP_PASSWORD)
                smtp.send_message(message)

        log.info(f"Sending email to {to} via SMTP {settings.SMTP_HOST}: '{subject}'")
        try:
            # smtplib blocks, keep it off the event loop
            await asyncio.to_thread(send_sync)
        except (smtplib.SMTPException, OSError) as e:
            log.error(f"SMTP delivery to {to} failed: {e}", exc_info=True)
            raise EmailDeliveryError(f"SMTP delivery failed: {e}")

        return contact_models.EmailSendResult(success=True, message="Email sent successfully")

    async def send_support_request(
        self,
        data: contact_models.SupportRequest,
        sender: db_models.Profiles
    ) -> contact_models.EmailSendResult:
        """Forwards an in-app issue report or feature request to the support inbox."""
        if not settings.SUPPORT_EMAIL:
            raise EmailNotConfiguredError("SUPPORT_EMAIL is not set in the server environment.")

        label = "Issue report" if data.type.value == "issue" else "Feature request"
        subject = f"[{label}] {data.subject}"
        name = sender.full_name or sender.email
        html = (
            f"<h2>{label}</h2>"
            f"<p><strong>From:</strong> {html_lib.escape(name)} &lt;{html_lib.escape(sender.email)}&gt;</p>"
            f"<p><strong>Subject:</strong> {html_lib.escape(data.subject)}</p>"
            f"<p>{html_lib.escape(data.message).replace(chr(10), '<br>')}</p>"
        )
        text = f"{label}\nFrom: {name} <{sender.email}>\nSubject: {data.subject}\n\n{data.message}"
        return await self.send_email(settings.SUPPORT_EMAIL, subject, html, text, reply_to=sender.email)

    async def send_password_reset(self, to: str, reset_link: str) -> contact_models.EmailSendResult:
        subject = "Reset your TutorSessions password"
        html = (
            "<p>We received a request to reset your password.</p>"
            f"<p><a href=\"{html_lib.escape(reset_link)}\">Choose a new password</a></p>"
            f"<p>This link expires in {settings.PASSWORD_RESET_EXPIRE_MINUTES} minutes. "
            "If you did not ask for this, you can ignore this email.</p>"
        )
        text = f"Reset your password: {reset_link}"
        return await self.send_email(to, subject, html, text)
