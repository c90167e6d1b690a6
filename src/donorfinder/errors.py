"""Error taxonomy for the donor search pipeline.

Collaborators translate library failures (httpx, postgrest, file IO) into these
types at their boundary. The pipeline itself never catches them; the HTTP layer
maps ``ValidationError`` to a client error and everything else to an opaque
server error.
"""

from __future__ import annotations


class DonorSearchError(Exception):
    """Base class for every failure surfaced by the donor search."""

    def __init__(self, message: str, *, stage: str | None = None) -> None:
        super().__init__(message)
        self.stage = stage


class ValidationError(DonorSearchError):
    """Missing or malformed request input."""


class NotFoundError(DonorSearchError):
    """The postal code has no geocoding match."""


class ProviderError(DonorSearchError):
    """The geocoding call failed or returned something unusable."""


class RepositoryError(DonorSearchError):
    """A donor query or result-store operation failed."""


class UpstreamTimeoutError(DonorSearchError, TimeoutError):
    """An external call exceeded its time bound."""
