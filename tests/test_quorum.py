"""Unit tests for quorum helpers."""

from __future__ import annotations

import pytest

from quorumvault.errors import InvalidThreshold
from quorumvault.quorum import (
    has_quorum,
    required_confirmations,
    validate_threshold,
)


def test_validate_threshold_bounds() -> None:
    """Threshold must lie within 1..owner_count."""
    assert validate_threshold(1, 1) == 1
    assert validate_threshold(3, 3) == 3
    with pytest.raises(InvalidThreshold):
        validate_threshold(0, 3)
    with pytest.raises(InvalidThreshold):
        validate_threshold(4, 3)


def test_has_quorum() -> None:
    assert has_quorum(2, 2) is True
    assert has_quorum(3, 2) is True
    assert has_quorum(1, 2) is False


def test_required_confirmations_never_negative() -> None:
    assert required_confirmations(0, 3) == 3
    assert required_confirmations(2, 3) == 1
    assert required_confirmations(5, 3) == 0
