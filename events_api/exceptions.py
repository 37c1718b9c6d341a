"""Error types shared by the repository and HTTP layers."""


class ConfigurationError(RuntimeError):
    """Raised when required settings are missing or unusable."""


class RepositoryError(Exception):
    """Base exception for repository errors.

    Wraps lower-level storage exceptions so callers only deal with this
    hierarchy.
    """


class EventNotFoundError(RepositoryError):
    """Raised when no event matches the requested identifier."""

    def __init__(self, event_id) -> None:
        super().__init__(f"event {event_id} not found")
        self.event_id = event_id


class RepositoryTimeoutError(RepositoryError):
    """Raised when a storage call exceeds its deadline."""
