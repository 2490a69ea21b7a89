"""Fake notification dispatcher: records notifications for testing."""

from uuid import uuid4

from marketplace.notification.port import NotificationDispatcher


class DispatchError(Exception):
    pass


class FakeDispatcher(NotificationDispatcher):
    """Dispatcher that keeps sent notifications in memory for test assertions."""

    def __init__(self):
        self.sent: list[dict] = []
        self.should_succeed = True
        self.failure_reason = "Notification delivery failed"

    def configure(self, should_succeed: bool = True, failure_reason: str = "Notification delivery failed"):
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def send(self, recipient_id: str, title: str, message: str, link: str | None = None) -> dict:
        if not self.should_succeed:
            raise DispatchError(self.failure_reason)

        notification_id = f"ntf-{uuid4().hex[:12]}"
        self.sent.append(
            {
                "notification_id": notification_id,
                "recipient_id": recipient_id,
                "title": title,
                "message": message,
                "link": link,
            }
        )
        return {"notification_id": notification_id, "status": "sent"}

    def sent_to(self, recipient_id: str) -> list[dict]:
        return [n for n in self.sent if n["recipient_id"] == str(recipient_id)]

    def reset(self):
        self.sent.clear()
        self.should_succeed = True
        self.failure_reason = "Notification delivery failed"
