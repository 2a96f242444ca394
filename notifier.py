"""
notifier.py

Outbound notification channels for mcnotify.

`Notifier` is the capability the router talks to: `send_email` and `send_sms`, each raising a
NotificationError subclass on failure. `TransportNotifier` implements it with SMTP over implicit
TLS for mail and the Twilio REST API (via requests) for text messages.
"""

import smtplib
import ssl
import logging
from email.message import EmailMessage

import requests

logger = logging.getLogger(__name__)

TWILIO_MESSAGES_URL = "https://api.twilio.com/2010-04-01/Accounts/{sid}/Messages.json"
REQUEST_TIMEOUT = 10  # Sekunden, pro Empfänger

class NotificationError(Exception):
    """Basisklasse für Benachrichtigungsfehler"""
    pass

class EmailError(NotificationError):
    """Wird ausgelöst, wenn eine E-Mail nicht versendet werden konnte"""
    pass

class SmsError(NotificationError):
    """Wird ausgelöst, wenn eine SMS nicht versendet werden konnte"""
    pass

class Notifier:
    """Capability interface for the two notification channels."""

    def send_email(self, sender, recipients, subject, body):
        raise NotImplementedError

    def send_sms(self, recipients, body):
        raise NotImplementedError

class TransportNotifier(Notifier):
    def __init__(self, settings, session=None):
        self.settings = settings
        self.session = session or requests.Session()

    def send_email(self, sender, recipients, subject, body):
        """
        Sends one message to all recipients through an authenticated SMTP_SSL connection.
        An empty recipient list is a no-op.

        Raises:
            EmailError: wenn SMTP nicht konfiguriert ist oder der Versand fehlschlägt
        """
        recipients = list(recipients)
        if not recipients:
            return

        settings = self.settings
        if not settings.smtp_host:
            raise EmailError("SMTP_HOST is not configured")

        msg = EmailMessage()
        msg["From"] = sender
        msg["To"] = ", ".join(recipients)
        msg["Subject"] = subject
        msg.set_content(body)

        try:
            context = ssl.create_default_context()
            with smtplib.SMTP_SSL(settings.smtp_host, settings.smtp_port, context=context, timeout=REQUEST_TIMEOUT) as smtp:
                if settings.smtp_user or settings.smtp_pass:
                    smtp.login(settings.smtp_user, settings.smtp_pass)
                smtp.send_message(msg, from_addr=sender, to_addrs=recipients)
        except (smtplib.SMTPException, OSError) as e:
            raise EmailError(f"Failed to send email via {settings.smtp_host}:{settings.smtp_port}: {e}") from e

        logger.debug(f"E-Mail an {len(recipients)} Empfänger versendet")

    def send_sms(self, recipients, body):
        """
        Posts one Twilio message per recipient. The first failing recipient aborts the rest
        of the batch; messages already sent to earlier recipients stay sent.

        Raises:
            SmsError: wenn Twilio nicht konfiguriert ist, die Anfrage scheitert oder kein 2xx zurückkommt
        """
        recipients = list(recipients)
        if not recipients:
            return

        settings = self.settings
        if not settings.twilio_sid:
            raise SmsError("TWILIO_SID is not configured")

        url = TWILIO_MESSAGES_URL.format(sid=settings.twilio_sid)
        for phone in recipients:
            try:
                response = self.session.post(
                    url,
                    data={"To": phone, "From": settings.twilio_phone, "Body": body},
                    auth=(settings.twilio_sid, settings.twilio_token),
                    headers={"Accept": "application/json"},
                    timeout=REQUEST_TIMEOUT,
                )
            except requests.RequestException as e:
                raise SmsError(f"SMS to {phone} failed: {e}") from e

            if not 200 <= response.status_code < 300:
                raise SmsError(f"SMS to {phone} failed: {response.status_code} {response.reason}")
            logger.debug(f"SMS an {phone} versendet")
