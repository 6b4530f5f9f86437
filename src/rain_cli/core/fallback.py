"""Best-effort calls: attempt, discard a domain failure, continue.

Used where a command may enrich its input but must not fail because of
the enrichment (``add --from-suggest``).  The discarded error stays on
the :class:`Attempt` so callers and tests can see what was dropped.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

from rain_cli.exceptions import RainError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Attempt(Generic[T]):
    """Outcome of :func:`attempt`: a value, or the error that was discarded."""

    value: T | None = None
    discarded: RainError | None = None

    @property
    def succeeded(self) -> bool:
        return self.discarded is None

    def value_or(self, default: T) -> T:
        return self.value if self.succeeded and self.value is not None else default


def attempt(call: Callable[[], T]) -> Attempt[T]:
    """Run *call*; a :class:`RainError` becomes a discarded failure.

    Only domain errors are discarded.  Programming errors propagate.
    """
    try:
        return Attempt(value=call())
    except RainError as exc:
        logger.debug("best-effort call failed, continuing: %s (%s)", exc, exc.code)
        return Attempt(discarded=exc)
