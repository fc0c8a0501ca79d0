"""Error taxonomy for the attention engine."""


class AttentionError(Exception):
    """Base class. ``status_code`` is the HTTP status the error maps to."""
    status_code = 500
    public_message = "Internal server error"

    def __init__(self, message: str = ""):
        super().__init__(message or self.public_message)
        self.message = message or self.public_message

    @property
    def client_message(self) -> str:
        return self.message


class InvalidArgumentError(AttentionError):
    """Missing or malformed field on a request."""
    status_code = 400
    public_message = "Invalid argument"


class UnauthorizedError(AttentionError):
    """Missing or unresolvable caller identity."""
    status_code = 401
    public_message = "Missing authorization"


class UpstreamError(AttentionError):
    """A collector or the overlay store failed."""
    status_code = 500

    @property
    def client_message(self) -> str:
        # Underlying failure is logged, never returned
        return self.public_message


class InternalError(AttentionError):
    """Unexpected failure in hashing, scoring or assembly."""
    status_code = 500

    @property
    def client_message(self) -> str:
        return self.public_message
