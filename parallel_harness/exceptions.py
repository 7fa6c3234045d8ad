"""Custom exception hierarchy for the parallel test harness."""


class HarnessError(Exception):
    """Base exception for all harness errors."""

    pass


class ConfigurationError(HarnessError):
    """Raised when configuration or runner input is invalid."""

    pass


class DuplicateBindingError(HarnessError):
    """Raised when a context binds a session while one is still bound."""

    def __init__(self, context_id: str):
        self.context_id = context_id
        super().__init__(f"Context {context_id} already has a bound session")


class NoResourceBoundError(HarnessError):
    """Raised when no session is bound for a context id."""

    def __init__(self, context_id: str):
        self.context_id = context_id
        super().__init__(f"No session bound for context {context_id}")


class ObserverError(HarnessError):
    """Raised after a dispatch in which one or more observers failed.

    ``failures`` keeps ``(observer, exception)`` pairs in invocation order.
    """

    def __init__(self, event, failures):
        self.event = event
        self.failures = list(failures)
        names = ", ".join(
            f"{type(obs).__name__}: {exc}" for obs, exc in self.failures
        )
        super().__init__(
            f"{len(self.failures)} observer(s) failed on {event.kind.value}: {names}"
        )


class ResourceTeardownError(HarnessError):
    """Raised when a session fails to close cleanly."""

    pass


class SessionOpenError(HarnessError):
    """Raised when a session capability cannot be opened."""

    pass


class RunIdCollisionError(HarnessError):
    """Raised when run ID already exists and cannot be overwritten."""

    pass


class UnitRegistrationError(HarnessError):
    """Raised when unit registration fails (e.g., duplicate names)."""

    pass
