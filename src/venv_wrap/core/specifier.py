"""Package specifier parsing.

A specifier is whatever the user typed after ``venv-wrap install``:

* bare name          — ``flask``
* pinned / ranged    — ``flask==2.0.1``, ``flask >= 2.0``
* scoped             — ``@scope/name`` or ``@scope/name@1.0.0``
* source URL         — ``git+https://github.com/org/repo.git@main``

:func:`extract_name` and :func:`extract_version_token` are deliberately
independent: neither validates the other's result.
"""

from __future__ import annotations

import re

from packaging.utils import canonicalize_name

_SCOPED_RE = re.compile(r"^(@[\w.-]+/[\w.-]+)(?:@.*)?$")

# A name, optional extras, then optionally a version constraint: an
# operator followed by a non-empty token.  Free text after the name does
# not qualify.
_NAME_RE = re.compile(
    r"^([\w.-]+)(?:\[[\w.,\s-]*\])?(?:\s*(?:@|===?|~=|!=|<=|>=|<|>|~|\^)\s*\S.*)?$"
)

_URL_RE = re.compile(
    r"^(?:git\+)?https?://[\w.-]+/[\w.-]+/(?P<repo>[\w.-]+?)(?:\.git)?(?:@.*)?$"
)

_LEADING_NON_DIGITS_RE = re.compile(r"^\D+")


def extract_name(spec: str | None) -> str | None:
    """Return the package name in *spec* as written, or ``None``.

    Rules are tried in order and the first match wins: scoped name,
    plain name with optional version constraint, source URL.
    """
    if not isinstance(spec, str):
        return None
    spec = spec.strip()
    if not spec:
        return None

    if spec.startswith("@"):
        scoped = _SCOPED_RE.match(spec)
        if scoped:
            return scoped.group(1)

    plain = _NAME_RE.match(spec)
    if plain:
        return plain.group(1)

    url = _URL_RE.match(spec)
    if url:
        return url.group("repo")

    return None


def extract_version_token(spec: str | None) -> str | None:
    """Strip leading non-digit characters from *spec* and return the rest.

    ``"flask==2.0.1"`` gives ``"2.0.1"``.  The result is a best-effort
    token, not a validated version; parse it with
    :meth:`~venv_wrap.core.semver.SemanticVersion.parse` before use.
    """
    if not isinstance(spec, str):
        return None
    token = _LEADING_NON_DIGITS_RE.sub("", spec.strip())
    return token or None


def canonical_name(name: str) -> str:
    """Return the PEP 503 form of *name* used to compare package names.

    ``Flask``, ``flask`` and ``FLASK`` are one package, as are
    ``flask_foo`` and ``Flask-Foo``.
    """
    return canonicalize_name(name)
