"""CLI console and logging helpers with optional Rich support.

This module intentionally avoids module-level imports of optional UI
dependencies so bootstrap paths (``--help``, ``--version``) remain
functional even when Rich is not installed.

Results go to :data:`console` (stdout); diagnostics go to
:data:`err_console` (stderr) and to the log handler installed by
:func:`configure_logging`.
"""

from __future__ import annotations

import logging
import re
import sys
from typing import Any

from venv_wrap.exceptions import EnvironmentError

_MARKUP_RE = re.compile(r"\[/?[a-z][a-z ]*\]")


def _load_rich_console_class() -> type[Any]:
	"""Return ``rich.console.Console`` class or raise ``EnvironmentError``."""
	try:
		from rich.console import Console
	except ModuleNotFoundError as exc:
		raise EnvironmentError(
			"rich is not installed. Install with: pip install rich",
		) from exc
	return Console


def get_rich_console(*, stderr: bool = False) -> Any:
	"""Create a Rich console instance targeting stdout or stderr."""
	console_class = _load_rich_console_class()
	return console_class(stderr=stderr)


def strip_markup(text: str) -> str:
	"""Remove simple Rich markup tags such as ``[bold red]``."""
	return _MARKUP_RE.sub("", text).replace("\\[", "[")


def escape_markup(text: str) -> str:
	"""Escape *text* so Rich prints square brackets literally."""
	try:
		from rich.markup import escape
	except ModuleNotFoundError:
		return text
	return escape(text)


class _ConsoleProxy:
	"""Minimal ``print``-compatible proxy with Rich fallback."""

	def __init__(self, *, stderr: bool) -> None:
		self._stderr = stderr

	def print(self, *objects: object, markup: bool = True) -> None:
		"""Render with Rich when available, else plain print."""
		try:
			rich_console = get_rich_console(stderr=self._stderr)
		except EnvironmentError:
			stream = sys.stderr if self._stderr else sys.stdout
			plain = [
				strip_markup(o) if markup and isinstance(o, str) else o
				for o in objects
			]
			print(*plain, file=stream)
			return
		rich_console.print(*objects, markup=markup, soft_wrap=True)


console = _ConsoleProxy(stderr=False)
err_console = _ConsoleProxy(stderr=True)


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

_HANDLER_MARKER = "_venv_wrap_handler"


def _build_log_handler() -> logging.Handler:
	try:
		from rich.logging import RichHandler
	except ModuleNotFoundError:
		handler: logging.Handler = logging.StreamHandler(sys.stderr)
		handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
		return handler
	return RichHandler(
		console=get_rich_console(stderr=True),
		show_time=False,
		show_path=False,
		markup=False,
	)


def configure_logging(*, verbose: bool = False) -> None:
	"""Route ``venv_wrap.*`` log records to stderr.

	WARNING and above by default, DEBUG with ``verbose``.  Calling this
	again replaces the handler installed by the previous call.
	"""
	logger = logging.getLogger("venv_wrap")
	for existing in list(logger.handlers):
		if getattr(existing, _HANDLER_MARKER, False):
			logger.removeHandler(existing)

	handler = _build_log_handler()
	setattr(handler, _HANDLER_MARKER, True)
	logger.addHandler(handler)
	logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
