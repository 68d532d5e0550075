"""
Account notifications
Delivery of password-reset and email-verification tokens to the user
"""
from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional

import structlog

from app.config import settings

logger = structlog.get_logger(__name__)


class NotificationPurpose(str, Enum):
    """What a single-use token is for."""

    PASSWORD_RESET = "password_reset"
    EMAIL_VERIFICATION = "email_verification"


# Frontend route that consumes each kind of token
_LINK_PATHS = {
    NotificationPurpose.PASSWORD_RESET: "reset-password",
    NotificationPurpose.EMAIL_VERIFICATION: "verify-email",
}


def build_link(token: str, purpose: NotificationPurpose, client_url: Optional[str] = None) -> str:
    base = (client_url or settings.CLIENT_URL).rstrip("/")
    return f"{base}/{_LINK_PATHS[purpose]}/{token}"


class Notifier(ABC):
    """Base class for token delivery channels (SMTP, queue, ...)"""

    @abstractmethod
    async def send(self, recipient: str, token: str, purpose: NotificationPurpose) -> None:
        """
        Deliver ``token`` to ``recipient``.

        Args:
            recipient: Email address of the account owner
            token: Raw single-use token (never persisted)
            purpose: Which flow the token belongs to
        """
        pass


class LoggingNotifier(Notifier):
    """Writes the link to the application log instead of sending mail."""

    def __init__(self, client_url: Optional[str] = None):
        self.client_url = client_url

    async def send(self, recipient: str, token: str, purpose: NotificationPurpose) -> None:
        link = build_link(token, purpose, self.client_url)
        logger.info("account_link_issued", purpose=purpose.value, recipient=recipient, link=link)
