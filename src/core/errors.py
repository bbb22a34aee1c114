from __future__ import annotations

"""Error taxonomy surfaced by the orchestration layer."""


class AdvocacyError(Exception):
    """Base class for every error raised by this package."""


class ConfigurationError(AdvocacyError):
    """No backend could be registered, or a backend is missing its setup."""


class BackendError(AdvocacyError):
    """A single backend call failed.

    Adapters raise this for transport failures so the orchestrator can classify
    the failure from the message text and ``status_code``.
    """

    def __init__(
        self,
        message: str,
        backend: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.backend = backend
        self.status_code = status_code


class BackendsExhaustedError(AdvocacyError):
    def __init__(self, message: str, last_error: BaseException | None = None) -> None:
        super().__init__(message)
        self.last_error = last_error


class AllBackendsUnavailableError(BackendsExhaustedError):
    """Every backend is cooling down; no call was attempted."""


class AllBackendsFailedError(BackendsExhaustedError):
    """Every eligible backend was tried and failed within one operation."""


class OperationCancelledError(AdvocacyError):
    pass


__all__ = [
    "AdvocacyError",
    "ConfigurationError",
    "BackendError",
    "BackendsExhaustedError",
    "AllBackendsUnavailableError",
    "AllBackendsFailedError",
    "OperationCancelledError",
]
