"""Runtime settings for the Ordering domain, read from environment variables."""

import os
from dataclasses import dataclass
from enum import Enum


class UnknownOptionPolicy(Enum):
    SKIP = "skip"
    REJECT = "reject"


@dataclass(frozen=True)
class Settings:
    environment: str = "development"
    unknown_option_policy: UnknownOptionPolicy = UnknownOptionPolicy.SKIP
    order_number_attempts: int = 5
    reason_min_length: int = 3
    reason_max_length: int = 500
    currency: str = "USD"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the process environment.

        Read on every call so tests can override variables with monkeypatch.
        """
        return cls(
            environment=os.environ.get("PROTEAN_ENV", "development"),
            unknown_option_policy=UnknownOptionPolicy(os.environ.get("UNKNOWN_OPTION_POLICY", "skip").lower()),
            order_number_attempts=int(os.environ.get("ORDER_NUMBER_ATTEMPTS", "5")),
            reason_min_length=int(os.environ.get("CANCELLATION_REASON_MIN", "3")),
            reason_max_length=int(os.environ.get("CANCELLATION_REASON_MAX", "500")),
            currency=os.environ.get("CURRENCY", "USD"),
        )


def get_settings() -> Settings:
    return Settings.from_env()
