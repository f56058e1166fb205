"""Cache store protocol for derived, non-durable data."""

from typing import Protocol, Optional


class AnalysisCacheStore(Protocol):
    """
    Key/value store with per-entry expiry.

    Both operations raise CacheUnavailableError when the backing service
    cannot be reached; callers treat that as non-fatal.
    """

    def get(self, key: str) -> Optional[str]:
        """Return the stored value, or None on miss/expiry."""
        ...

    def set_with_expiry(self, key: str, value: str, ttl_seconds: int) -> None:
        """Store a value that expires after ttl_seconds."""
        ...
