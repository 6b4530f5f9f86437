"""Infrastructure layer: external system integration.

This layer wraps all interaction with the Raindrop.io REST API (httpx)
and standard input.  Every raw third-party exception must be caught
here and re-raised as a :class:`~rain_cli.exceptions.RainError`
subclass.

Rules
-----
* No imports from ``cli``.
* No user-facing output.
"""

from rain_cli.infra.batch_input import BatchInput
from rain_cli.infra.http_transport import HttpTransport

__all__: list[str] = [
    "BatchInput",
    "HttpTransport",
]
