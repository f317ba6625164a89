"""venv-wrap — a virtual environment and package manager for Python projects.

Drives ``pip`` inside a per-project ``.venv`` and keeps ``requirements.txt``
in step with what is installed.
"""

from venv_wrap.version import __version__

__all__: list[str] = ["__version__"]
