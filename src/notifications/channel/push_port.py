"""Contract for push transports used by the order notification dispatcher."""

from abc import ABC, abstractmethod


class PushPort(ABC):
    """A push transport addressed by recipient keys.

    Recipients are ``customer:<id>``, ``restaurant:<id>`` or the shared
    admin topic. Device fan-out is the transport's concern.
    """

    @abstractmethod
    def send(self, recipient: str, title: str, body: str, data: dict | None = None) -> dict:
        """Deliver one notification and report the outcome.

        The returned mapping carries ``message_id`` and ``status`` (``"sent"``
        or ``"failed"``), plus ``error`` when delivery did not happen. Transport
        faults may also surface as exceptions.
        """
