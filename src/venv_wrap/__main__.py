"""``python -m venv_wrap`` entry point.

Equivalent to the ``venv-wrap`` console script, including its error
boundary and exit codes.
"""

from __future__ import annotations

from venv_wrap.cli.app import cli

if __name__ == "__main__":
    cli()
