"""Notification dispatcher port: abstract interface for in-app/email/push delivery."""

from abc import ABC, abstractmethod


class NotificationDispatcher(ABC):
    @abstractmethod
    def send(
        self,
        recipient_id: str,
        title: str,
        message: str,
        link: str | None = None,
    ) -> dict:
        """Deliver a notification to a user account.

        Returns:
            dict with keys: notification_id, status ("sent" or "failed"), error (optional)
        """
        ...
