"""Infrastructure: the ``requirements.txt`` manifest file.

:class:`ManifestStore` exclusively owns the on-disk format — one
``name==major.minor.patch`` line per requirement, UTF-8, trailing
newline.  Nothing else reads or writes the file.

Reads favour availability over strictness: a missing file or a bad line
is logged and skipped, never raised.  Writes replace the whole file.
"""

from __future__ import annotations

import logging
import os
import tempfile
from collections.abc import Sequence
from pathlib import Path

from venv_wrap.core.models import Requirement
from venv_wrap.core.semver import SemanticVersion
from venv_wrap.exceptions import InvalidVersionError, ManifestIOError

logger = logging.getLogger(__name__)

_SEPARATOR: str = "=="


class ManifestStore:
    """Concrete :class:`~venv_wrap.core.protocols.ManifestRepository`.

    Parameters
    ----------
    path:
        Location of the manifest file.
    """

    def __init__(self, path: Path) -> None:
        self._path: Path = path

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.is_file()

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def read(self) -> list[Requirement]:
        """Return every valid requirement in file order.

        Missing/unreadable files give an empty list; malformed lines are
        skipped.  Both cases are logged as warnings.
        """
        try:
            text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.warning("No %s found", self._path.name)
            return []
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Could not read %s: %s", self._path, exc)
            return []
        return parse_manifest(text)

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def write(self, requirements: Sequence[Requirement]) -> None:
        """Replace the manifest with *requirements*, preserving their order.

        The content goes to a temporary file next to the manifest which
        then replaces it, so a reader never sees a partial file.

        Raises
        ------
        ManifestIOError
            When the file cannot be written.
        """
        content = render_manifest(requirements)
        directory = self._path.parent
        try:
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self._path.name}.", suffix=".tmp", dir=directory,
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as handle:
                    handle.write(content)
                os.chmod(tmp_name, self._file_mode())
                os.replace(tmp_name, self._path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise ManifestIOError(
                f"Could not write {self._path}: {exc}",
            ) from exc
        logger.debug("wrote %d requirement(s) to %s", len(requirements), self._path)

    def _file_mode(self) -> int:
        """Keep the current permissions; new files get ``0o644``."""
        try:
            return self._path.stat().st_mode & 0o777
        except OSError:
            return 0o644

    def create_empty(self) -> None:
        """Create an empty manifest; an existing file is left untouched."""
        try:
            self._path.touch(exist_ok=True)
        except OSError as exc:
            raise ManifestIOError(f"Could not create {self._path}: {exc}") from exc


# ---------------------------------------------------------------------------
# Format (pure)
# ---------------------------------------------------------------------------

def parse_manifest(text: str) -> list[Requirement]:
    """Parse manifest *text*, skipping blank and malformed lines."""
    requirements: list[Requirement] = []
    for lineno, raw_line in enumerate(text.splitlines(), start=1):
        line = raw_line.strip()
        if not line:
            continue
        name, sep, version_text = line.partition(_SEPARATOR)
        name = name.strip()
        version_text = version_text.strip()
        if not sep or not name or not version_text:
            logger.warning("Skipping malformed manifest line %d: %r", lineno, line)
            continue
        try:
            version = SemanticVersion.parse(version_text)
        except InvalidVersionError:
            logger.warning(
                "Invalid semver for %s: %s, skipping...", name, version_text,
            )
            continue
        requirements.append(Requirement(name=name, version=version))
    return requirements


def render_manifest(requirements: Sequence[Requirement]) -> str:
    """Render *requirements* as manifest text with a trailing newline.

    An empty manifest renders as an empty file.
    """
    if not requirements:
        return ""
    return "\n".join(req.to_line() for req in requirements) + "\n"
