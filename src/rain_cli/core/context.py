"""Per-invocation collaborators handed to every command handler."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from rain_cli.core.protocols import BatchSource, QueryValue, Transport


class CommandContext:
    """Bundles the transport, batch input and credential lookup.

    The credential is resolved lazily on the first remote call and then
    reused, so a handler that fails validation never looks for a token
    and a handler without a token never issues a request.
    """

    def __init__(
        self,
        transport: Transport,
        batch: BatchSource,
        resolve_credential: Callable[[], str],
    ) -> None:
        self.transport: Transport = transport
        self.batch: BatchSource = batch
        self._resolve_credential = resolve_credential
        self._credential: str | None = None

    def credential(self) -> str:
        if self._credential is None:
            self._credential = self._resolve_credential()
        return self._credential

    def call(
        self,
        method: str,
        path: str,
        *,
        query: Mapping[str, QueryValue] | None = None,
        body: Any = None,
    ) -> Any:
        """Issue one authenticated request through the transport."""
        return self.transport.request(
            method,
            path,
            self.credential(),
            query=query,
            body=body,
        )
