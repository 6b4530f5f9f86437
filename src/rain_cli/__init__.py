"""raindrop-cli: a machine-friendly command-line client for Raindrop.io.

Every command prints one JSON envelope and exits with a deterministic
code, so the tool composes cleanly with scripts and agents.
"""

from rain_cli.version import __version__

__all__: list[str] = ["__version__"]
