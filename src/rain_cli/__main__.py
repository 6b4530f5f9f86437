"""Allow ``python -m rain_cli`` invocation.

This module simply delegates to the CLI error-boundary entry point so
that ``python -m rain_cli`` behaves identically to the ``rain``
console script.
"""

from __future__ import annotations

from rain_cli.cli.app import cli

if __name__ == "__main__":
    cli()
