"""Error taxonomy shared by the auth, fetch, usage and prediction layers.

Every failure that can end a refresh cycle derives from
:class:`EmotionWellbeingError`, so the orchestrator can turn any of them into a
single human-readable message.
"""

from __future__ import annotations


class EmotionWellbeingError(Exception):
    """Base class for all errors raised by this package."""


class AuthError(EmotionWellbeingError):
    """Authorization request failed or the redirect carried no usable token."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class HttpError(EmotionWellbeingError):
    """A remote endpoint answered with a non-success status code."""

    def __init__(self, status_code: int, endpoint: str = "") -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(f"HTTP {status_code}" + (f" from {endpoint}" if endpoint else ""))


class NetworkError(EmotionWellbeingError):
    """Transport-level failure: DNS, TLS, connection reset, timeout."""


class PayloadError(EmotionWellbeingError):
    """A success response whose body does not match the expected schema."""


class MetricsFetchError(EmotionWellbeingError):
    """The fitness or the sleep read failed.

    Both status codes are always reported, even when only one of the two
    requests failed.
    """

    def __init__(self, fitness_status: int, sleep_status: int) -> None:
        self.fitness_status = fitness_status
        self.sleep_status = sleep_status
        super().__init__(f"Fitness: {fitness_status}, Sleep: {sleep_status}")


class PermissionUnavailable(EmotionWellbeingError):
    """Usage-statistics access has not been granted on this host.

    Not fatal: the usage aggregator converts it into an empty result.
    """
