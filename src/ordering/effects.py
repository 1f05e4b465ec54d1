"""Outbound side effects run after a Unit of Work has committed.

Command handlers only change state. The service functions that wrap them
queue refunds and notifications here and flush the queue once
``current_domain.process`` has returned. Each effect runs on its own: a
failure is logged with its context and the rest still run.
"""

from collections.abc import Callable
from dataclasses import dataclass, field

import structlog

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Effect:
    name: str
    action: Callable[[], object]
    context: dict = field(default_factory=dict)


class Outbox:
    def __init__(self) -> None:
        self._effects: list[Effect] = []

    def add(self, name: str, action: Callable[[], object], **context) -> None:
        self._effects.append(Effect(name=name, action=action, context=context))

    def __len__(self) -> int:
        return len(self._effects)

    def flush(self) -> dict[str, bool]:
        """Run every queued effect once. Returns effect name -> succeeded."""
        results: dict[str, bool] = {}
        effects, self._effects = self._effects, []
        for effect in effects:
            try:
                effect.action()
            except Exception as exc:
                logger.warning("side_effect_failed", effect=effect.name, error=str(exc), **effect.context)
                results[effect.name] = False
            else:
                results[effect.name] = True
        return results
