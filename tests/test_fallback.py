"""Tests for best-effort calls (core/fallback.py)."""

from __future__ import annotations

import pytest

from rain_cli.core.fallback import attempt
from rain_cli.exceptions import NetworkError, NotFoundError


class TestAttempt:
    def test_success(self) -> None:
        result = attempt(lambda: {"tags": ["a"]})
        assert result.succeeded
        assert result.value_or({}) == {"tags": ["a"]}

    def test_domain_error_is_discarded(self) -> None:
        def boom() -> dict:
            raise NetworkError("offline")

        result = attempt(boom)
        assert not result.succeeded
        assert isinstance(result.discarded, NetworkError)
        assert result.value_or({"fallback": True}) == {"fallback": True}

    def test_programming_errors_propagate(self) -> None:
        def broken() -> dict:
            raise KeyError("bug")

        with pytest.raises(KeyError):
            attempt(broken)

    def test_none_value_uses_default(self) -> None:
        assert attempt(lambda: None).value_or(3) == 3

    def test_not_found_is_also_discarded(self) -> None:
        def missing() -> int:
            raise NotFoundError("gone")

        assert attempt(missing).discarded is not None
