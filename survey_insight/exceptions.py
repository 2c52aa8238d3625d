"""Project-wide custom exception types."""


class ParseWarning(UserWarning):
    """Attached to rows that could not be interpreted; never raised."""


class InvalidInput(ValueError):
    """Raised when caller-supplied input is unusable (e.g., password too short)."""


class DecryptionFailed(RuntimeError):
    """Raised when a share payload cannot be decrypted.

    A wrong password and a corrupted payload are deliberately reported with
    the same error.
    """


class FormatError(DecryptionFailed):
    """Raised when a share payload is structurally invalid."""


class CollaboratorUnavailable(RuntimeError):
    """Raised when the summarization collaborator fails or times out."""
