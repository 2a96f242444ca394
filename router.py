import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from config import NotificationTargets
from notifier import Notifier

# Logger für diese Datei einrichten
logger = logging.getLogger(__name__)

JOIN_MESSAGE = "{actor} joined your Minecraft server"

@dataclass(frozen=True)
class Route:
    actor: str
    sms_recipients: Tuple[str, ...]
    email_recipients: Tuple[str, ...]
    body: str

@dataclass
class DispatchResult:
    sms_error: Optional[Exception] = None
    email_error: Optional[Exception] = None

    @property
    def ok(self):
        return self.sms_error is None and self.email_error is None

class NotificationRouter:
    """
    Decides who hears about a join and hands the message to the notifier.

    Email goes to the whole static list. SMS goes to the static list minus the joining
    player's own registered number, so nobody gets texted about themselves.
    """

    def __init__(self, targets: NotificationTargets, notifier: Notifier, sender: str = ""):
        self.targets = targets
        self.notifier = notifier
        self.sender = sender

    def route(self, actor: str) -> Route:
        own_phone = self.targets.phone_for(actor)
        if own_phone is not None:
            sms_recipients = tuple(phone for phone in self.targets.sms_recipients if phone != own_phone)
        else:
            sms_recipients = tuple(self.targets.sms_recipients)

        return Route(
            actor=actor,
            sms_recipients=sms_recipients,
            email_recipients=tuple(self.targets.email_recipients),
            body=JOIN_MESSAGE.format(actor=actor),
        )

    def dispatch(self, route: Route) -> DispatchResult:
        """Sends SMS, then email. A failing channel is logged and never stops the other one."""
        result = DispatchResult()

        if route.sms_recipients:
            try:
                self.notifier.send_sms(route.sms_recipients, route.body)
                logger.info(f"SMS für {route.actor} an {len(route.sms_recipients)} Empfänger gesendet")
            except Exception as e:
                result.sms_error = e
                logger.error(f"Failed to notify via SMS about {route.actor}: {e}", exc_info=True)
        else:
            logger.debug(f"Keine SMS-Empfänger für {route.actor}")

        if route.email_recipients:
            try:
                self.notifier.send_email(self.sender, route.email_recipients, route.body, route.body)
                logger.info(f"E-Mail für {route.actor} an {len(route.email_recipients)} Empfänger gesendet")
            except Exception as e:
                result.email_error = e
                logger.error(f"Failed to notify via email about {route.actor}: {e}", exc_info=True)
        else:
            logger.debug(f"Keine E-Mail-Empfänger für {route.actor}")

        return result

    def notify_joined(self, actor: str) -> DispatchResult:
        return self.dispatch(self.route(actor))
