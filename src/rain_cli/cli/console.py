"""Rich console and debug-logging helpers.

Rich is imported lazily so the JSON path (scripts, pipes) never pays
for it.  Debug logs go to stderr and only when ``RAIN_DEBUG`` is set.
"""

from __future__ import annotations

import logging
from typing import Any


def get_rich_console(*, stderr: bool = False) -> Any:
    """Create a Rich console targeting stdout (or stderr)."""
    from rich.console import Console

    return Console(stderr=stderr)


def configure_logging(debug: bool) -> None:
    """Route ``rain_cli`` debug logs to a Rich handler on stderr."""
    package_logger = logging.getLogger("rain_cli")
    if not debug:
        package_logger.handlers = [logging.NullHandler()]
        package_logger.setLevel(logging.NOTSET)
        package_logger.propagate = True
        return

    from rich.logging import RichHandler

    handler = RichHandler(console=get_rich_console(stderr=True), show_path=False)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    package_logger.handlers = [handler]
    package_logger.setLevel(logging.DEBUG)
    package_logger.propagate = False
