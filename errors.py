"""Exceptions that abort booklet generation.

Layout overflow is deliberately absent: it is resolved by truncation in
Stage 4 and never surfaces to the caller.
"""


class BookletError(Exception):
    """Base class for failures that prevent a booklet from being produced."""


class ValidationError(BookletError):
    """The request is missing required content or is malformed."""


class UpstreamImageError(BookletError):
    """An illustration could not be fetched or decoded."""

    def __init__(self, reference: str, reason: str):
        self.reference = reference
        self.reason = reason
        super().__init__(f"Could not load image {_short_ref(reference)}: {reason}")


def _short_ref(reference: str, limit: int = 80) -> str:
    # Data URIs can be megabytes long
    if len(reference) <= limit:
        return reference
    return reference[:limit] + "..."
