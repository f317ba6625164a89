"""Process exit codes returned by ``venv-wrap``.

``venv-wrap run`` does not use these: it exits with the script's own
code so that callers can chain it like plain ``python``.
"""

from __future__ import annotations

SUCCESS: int = 0
"""The command finished and every requested package succeeded."""

GENERAL_ERROR: int = 1
"""A VenvWrapError reached the boundary, or at least one package failed."""

UNEXPECTED_ERROR: int = 2
"""Any other exception reached the boundary."""

KEYBOARD_INTERRUPT: int = 130
"""Interrupted with Ctrl+C (128 + SIGINT)."""
