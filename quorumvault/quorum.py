"""Quorum helpers.

Small, pure functions deciding whether a transaction has gathered enough
distinct confirmations. Kept apart from the engine so they can be unit
tested in isolation.
"""

from __future__ import annotations

from quorumvault.errors import InvalidThreshold


def validate_threshold(threshold: int, owner_count: int) -> int:
    """Return *threshold* if ``1 <= threshold <= owner_count``.

    Raises:
        InvalidThreshold: When the bound is violated or *threshold* is not an
            integer.
    """
    if isinstance(threshold, bool) or not isinstance(threshold, int):
        raise InvalidThreshold(threshold, owner_count)
    if threshold < 1 or threshold > owner_count:
        raise InvalidThreshold(threshold, owner_count)
    return threshold


def has_quorum(confirmations: int, threshold: int) -> bool:
    """Return True once *confirmations* reaches *threshold*."""
    return confirmations >= threshold


def required_confirmations(confirmations: int, threshold: int) -> int:
    """Return how many more confirmations are needed (never negative)."""
    return max(threshold - confirmations, 0)


__all__ = [
    "validate_threshold",
    "has_quorum",
    "required_confirmations",
]
