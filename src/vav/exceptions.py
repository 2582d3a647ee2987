"""Exception types raised by vav."""

__all__ = [
    "AlignmentFetchError",
    "InconsistentAlignment",
    "MalformedVariant",
    "VavError",
]


class VavError(Exception):
    """Base class for all vav errors."""


class MalformedVariant(VavError, ValueError):
    """A variant string could not be parsed."""

    def __init__(self, text: str, offending: str, reason: str):
        self.text = text
        self.offending = offending
        self.reason = reason
        super().__init__(f"Malformed variant '{text}': {reason} (near '{offending}')")


class InconsistentAlignment(VavError, ValueError):
    """CIGAR and MD tag of a read disagree, or one of them is malformed."""

    def __init__(self, message: str, read_name: str | None = None):
        self.read_name = read_name
        if read_name:
            message = f"{read_name}: {message}"
        super().__init__(message)


class AlignmentFetchError(VavError, IOError):
    """The alignment file could not be opened, indexed or queried."""
