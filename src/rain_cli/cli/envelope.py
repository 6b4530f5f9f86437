"""Envelope formatter: the one JSON shape every invocation prints.

* success → ``{"ok": true, "data": ..., "meta": {...}}`` (``meta`` optional)
* failure → ``{"ok": false, "error": {"code", "message", "suggest": [...]}}``

This module is also the only place that picks the exit code for an
:class:`~rain_cli.core.models.Outcome`.
"""

from __future__ import annotations

import json
from typing import Any

from rain_cli.cli import exit_codes
from rain_cli.core.models import Failure, Outcome, Success
from rain_cli.exceptions import RainError


def failure_from(exc: RainError) -> Failure:
    return Failure(
        code=exc.code,
        message=exc.message or exc.code,
        suggest=tuple(exc.suggest),
        exit_code=exit_codes.for_error_code(exc.code),
    )


def internal_failure(exc: BaseException) -> Failure:
    return Failure(
        code="INTERNAL_ERROR",
        message=f"Unexpected error: {type(exc).__name__}: {exc}",
        suggest=("Please report this issue with the command you ran.",),
        exit_code=exit_codes.API_FAILURE,
    )


def to_envelope(outcome: Outcome) -> dict[str, Any]:
    if isinstance(outcome, Success):
        envelope: dict[str, Any] = {"ok": True, "data": outcome.data}
        if outcome.meta:
            envelope["meta"] = outcome.meta
        return envelope
    return {
        "ok": False,
        "error": {
            "code": outcome.code,
            "message": outcome.message,
            "suggest": list(outcome.suggest),
        },
    }


def exit_code_for(outcome: Outcome) -> int:
    if isinstance(outcome, Success):
        return exit_codes.SUCCESS if outcome.found else exit_codes.NOT_FOUND
    return outcome.exit_code


def dumps(outcome: Outcome) -> str:
    return json.dumps(to_envelope(outcome), indent=2, ensure_ascii=False, default=str)
