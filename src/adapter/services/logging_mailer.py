import logging

from src.app.services.mailer import IMailer

logger = logging.getLogger(__name__)


class LoggingMailer(IMailer):
    """
    Mailer that only records what would have been sent.

    Used when no email transport is configured. Token values are never logged.
    """

    def __init__(self, base_url: str):
        self.base_url = base_url.rstrip("/")

    async def send_verification_email(self, email: str, username: str, token: str) -> None:
        logger.info(
            f"Verification email queued for user {username} <{email}> "
            f"(link {self.base_url}/verify-email)"
        )

    async def send_password_reset_email(self, email: str, username: str, token: str) -> None:
        logger.info(
            f"Password reset email queued for user {username} <{email}> "
            f"(link {self.base_url}/reset-password)"
        )

    async def send_security_notification(self, email: str, username: str, event: str) -> None:
        logger.info(f"Security notification '{event}' queued for user {username} <{email}>")
