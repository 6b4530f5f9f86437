"""Shared pytest fixtures and configuration for the raindrop-cli test suite.

Guidelines
----------
* No internet access in any test; httpx is mocked with respx.
* The environment is isolated: no real token, no real home directory.
* CLI tests run :func:`rain_cli.cli.app.main` in-process and parse the
  single JSON envelope from captured stdout.
"""

from __future__ import annotations

import io
import json
from collections.abc import Callable, Iterator
from typing import Any

import pytest
import respx

from rain_cli.cli.app import main

API_BASE = "https://api.test/rest/v1"

SAMPLE_RAINDROP: dict[str, Any] = {
    "_id": 483920,
    "title": "Testing TypeScript APIs",
    "link": "https://example.com/article",
    "excerpt": "A guide to...",
    "note": "",
    "type": "article",
    "tags": ["api", "testing"],
    "collection": {"$id": 123},
    "created": "2024-06-15T10:30:00Z",
    "lastUpdate": "2024-06-15T10:30:00Z",
    "important": False,
    "domain": "example.com",
}


def _raindrop(**overrides: Any) -> dict[str, Any]:
    return {**SAMPLE_RAINDROP, **overrides}


@pytest.fixture
def raindrop() -> Callable[..., dict[str, Any]]:
    """Factory for raw API raindrops: ``raindrop(tags=[...])``."""
    return _raindrop


class TtyStream(io.StringIO):
    """A stream that claims to be an interactive terminal."""

    def isatty(self) -> bool:
        return True


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Any) -> None:
    for name in ("RAINDROP_TOKEN", "RAINDROP_API_BASE", "RAINDROP_TIMEOUT", "RAIN_DEBUG"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))


@pytest.fixture
def api(monkeypatch: pytest.MonkeyPatch) -> Iterator[respx.MockRouter]:
    """Mocked Raindrop API with a token in the environment."""
    monkeypatch.setenv("RAINDROP_API_BASE", API_BASE)
    monkeypatch.setenv("RAINDROP_TOKEN", "test-token")
    with respx.mock(base_url=API_BASE, assert_all_called=False) as router:
        yield router


RunResult = tuple[int, dict[str, Any]]


@pytest.fixture
def rain(capsys: pytest.CaptureFixture[str]) -> Callable[..., RunResult]:
    """Run the CLI with ``--json`` and return ``(exit_code, envelope)``."""

    def _run(*argv: str, stdin: str | io.StringIO | None = None) -> RunResult:
        if stdin is None:
            stream: io.StringIO = TtyStream("")
        elif isinstance(stdin, str):
            stream = io.StringIO(stdin)
        else:
            stream = stdin
        code = main([*argv, "--json"], stdin=stream)
        captured = capsys.readouterr()
        assert captured.err == ""
        return code, json.loads(captured.out)

    return _run


def _sent_json(route: respx.Route, index: int = -1) -> Any:
    return json.loads(route.calls[index].request.content)


@pytest.fixture
def sent_json() -> Callable[..., Any]:
    """Decoded JSON body of a recorded call: ``sent_json(route, index)``."""
    return _sent_json

