"""In-memory push transport for local runs and tests."""

from uuid import uuid4

from notifications.channel.push_port import PushPort

_DEFAULT_FAILURE = "Push delivery failed"


class FakePushAdapter(PushPort):
    """Keeps every delivered notification in ``sent_pushes``."""

    def __init__(self):
        self.sent_pushes: list[dict] = []
        self._apply(should_succeed=True, failure_reason=_DEFAULT_FAILURE, should_raise=False)

    def _apply(self, should_succeed, failure_reason, should_raise):
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason
        self.should_raise = should_raise

    def configure(self, should_succeed: bool = True, failure_reason: str = _DEFAULT_FAILURE, should_raise=False):
        """Make later sends report failure, or raise as a broken transport would."""
        self._apply(should_succeed, failure_reason, should_raise)

    def send(self, recipient: str, title: str, body: str, data: dict | None = None) -> dict:
        if self.should_raise:
            raise ConnectionError(self.failure_reason)
        if not self.should_succeed:
            return {"message_id": None, "status": "failed", "error": self.failure_reason}

        message_id = f"push-{uuid4().hex[:12]}"
        self.sent_pushes.append(dict(message_id=message_id, recipient=recipient, title=title, body=body, data=data))
        return {"message_id": message_id, "status": "sent"}

    def sent_to(self, recipient: str) -> list[dict]:
        return [push for push in self.sent_pushes if push["recipient"] == recipient]

    def reset(self):
        self.sent_pushes.clear()
        self._apply(should_succeed=True, failure_reason=_DEFAULT_FAILURE, should_raise=False)
