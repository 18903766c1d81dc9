"""Error types for the content-addressable store."""


class CASError(Exception):
    """Base exception for content-addressable store errors."""
    pass


class ConfigError(CASError):
    """Configuration error."""
    pass


class InvalidReferenceError(CASError, ValueError):
    """A storage reference could not be parsed or failed validation."""
    pass


class BackendUnavailable(CASError):
    """Storage backend cannot be reached or the container cannot be created."""
    pass


class WriteFailed(CASError):
    """Backend reported a failure while writing an object."""
    pass


class NotFound(CASError, LookupError):
    """No object exists at the location a reference points to."""
    pass


class Corrupted(CASError):
    """Retrieved bytes do not hash to the digest recorded in the reference."""

    def __init__(self, expected: str, actual: str, location: str):
        self.expected = expected
        self.actual = actual
        self.location = location
        super().__init__(
            f"Data corruption detected at {location}: expected {expected}, got {actual}"
        )
