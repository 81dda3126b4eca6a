from abc import ABC, abstractmethod


class IMailer(ABC):
    """Outbound account email - delivery is owned by an external service"""

    @abstractmethod
    async def send_verification_email(self, email: str, username: str, token: str) -> None:
        pass

    @abstractmethod
    async def send_password_reset_email(self, email: str, username: str, token: str) -> None:
        pass

    @abstractmethod
    async def send_security_notification(self, email: str, username: str, event: str) -> None:
        pass
