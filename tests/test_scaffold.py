"""Smoke tests: verify package wiring.

These tests prove that:
* Version is accessible.
* The exception hierarchy is correctly structured.
* Every error code maps to its documented exit code.
"""

from __future__ import annotations

import pytest

from rain_cli import __version__
from rain_cli.cli import exit_codes
from rain_cli.exceptions import (
    ApiError,
    AuthInvalidError,
    AuthMissingError,
    InvalidArgumentsError,
    NetworkError,
    NotFoundError,
    RainError,
    RateLimitedError,
)


# ---------------------------------------------------------------------------
# Version
# ---------------------------------------------------------------------------

class TestVersion:
    def test_version_is_semver_like(self) -> None:
        parts = __version__.split(".")
        assert len(parts) == 3
        assert all(part.isdigit() for part in parts)


# ---------------------------------------------------------------------------
# Exception hierarchy
# ---------------------------------------------------------------------------

ALL_ERRORS = [
    InvalidArgumentsError,
    AuthMissingError,
    AuthInvalidError,
    NotFoundError,
    RateLimitedError,
    ApiError,
    NetworkError,
]


class TestExceptions:
    @pytest.mark.parametrize("exc_class", ALL_ERRORS)
    def test_all_exceptions_inherit_from_base(self, exc_class: type[RainError]) -> None:
        assert issubclass(exc_class, RainError)

    @pytest.mark.parametrize("exc_class", ALL_ERRORS)
    def test_suggest_is_never_empty(self, exc_class: type[RainError]) -> None:
        assert exc_class("boom").suggest

    def test_hint_comes_first(self) -> None:
        err = NotFoundError("gone", hint="try this")
        assert err.suggest[0] == "try this"
        assert err.message == "gone"

    def test_suggest_is_deduplicated(self) -> None:
        err = RainError("x", hint="a", suggest=["a", "b"])
        assert err.suggest.count("a") == 1

    def test_api_error_keeps_status_and_body(self) -> None:
        err = ApiError("bad", status=502, body={"error": "x"})
        assert err.status == 502
        assert err.body == {"error": "x"}


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

class TestExitCodes:
    @pytest.mark.parametrize(
        ("exc_class", "expected"),
        [
            (InvalidArgumentsError, 2),
            (AuthMissingError, 3),
            (AuthInvalidError, 3),
            (NotFoundError, 1),
            (RateLimitedError, 4),
            (ApiError, 5),
            (NetworkError, 5),
        ],
    )
    def test_error_code_mapping(self, exc_class: type[RainError], expected: int) -> None:
        assert exit_codes.for_error_code(exc_class.code) == expected

    def test_unknown_code_is_api_failure(self) -> None:
        assert exit_codes.for_error_code("SOMETHING_ELSE") == exit_codes.API_FAILURE
