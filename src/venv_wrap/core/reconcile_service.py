"""Core reconciliation service — keeps the manifest in step with the environment.

The service drives an :class:`~venv_wrap.core.protocols.EnvironmentTool`
concurrently, one task per requested package, and commits the whole
batch to the :class:`~venv_wrap.core.protocols.ManifestRepository` with
a single read-modify-write once every task has finished.

Guarantees
----------
* Per-package failures are captured as :class:`Failed` outcomes and
  never abort sibling packages.
* The manifest is read once before a batch and written at most once
  after it — package tasks never touch the manifest themselves.
* Only :class:`~venv_wrap.exceptions.VenvWrapError` subclasses escape.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence

from venv_wrap.core.models import (
    AlreadyAbsent,
    BatchResult,
    Failed,
    Installed,
    InstalledPackage,
    OutdatedPackage,
    Outcome,
    Requirement,
    Uninstalled,
    Updated,
)
from venv_wrap.core.protocols import EnvironmentTool, ManifestRepository
from venv_wrap.core.semver import Ordering, SemanticVersion, compare
from venv_wrap.core.specifier import canonical_name, extract_name
from venv_wrap.exceptions import (
    AlreadyAbsentError,
    InvalidSpecifierError,
    InvalidVersionError,
    ToolExecutionError,
    VenvWrapError,
)

logger = logging.getLogger(__name__)

BOOKKEEPING_PACKAGES: frozenset[str] = frozenset({"pip"})
"""Packages the tool installs for itself; never reported or updated."""


class ReconcileService:
    """Runs install/uninstall/list/update batches.

    Parameters
    ----------
    tool:
        Any object satisfying the :class:`EnvironmentTool` protocol.
    manifest:
        Any object satisfying the :class:`ManifestRepository` protocol.
    """

    def __init__(self, tool: EnvironmentTool, manifest: ManifestRepository) -> None:
        self._tool: EnvironmentTool = tool
        self._manifest: ManifestRepository = manifest

    # ------------------------------------------------------------------
    # install
    # ------------------------------------------------------------------

    async def install(self, specs: Sequence[str]) -> BatchResult:
        """Install every spec concurrently and record the results.

        Each successful package replaces any existing manifest entry
        with the same canonical name, so ``Flask`` replaces ``flask``.
        """
        current = await self._read_manifest()
        outcomes = await self._gather(specs, self._install_one)

        installed = [o for o in outcomes if isinstance(o, Installed)]
        if installed:
            updated = list(current)
            for outcome in installed:
                key = canonical_name(outcome.name)
                updated = [r for r in updated if canonical_name(r.name) != key]
                updated.append(Requirement(outcome.name, outcome.version))
            await self._write_manifest(updated)

        return BatchResult(outcomes=tuple(outcomes))

    async def install_all(self) -> int:
        """Install everything the manifest declares; return the tool's exit code."""
        return await self._tool.install_manifest(self._manifest.path)

    async def _install_one(self, spec: str) -> Outcome:
        name = _require_name(spec)
        await self._tool.install(spec)
        raw_version = await self._tool.show_version(name)
        version = SemanticVersion.parse(raw_version)
        logger.debug("installed %s==%s", name, version.to_string())
        return Installed(name=name, version=version)

    # ------------------------------------------------------------------
    # uninstall
    # ------------------------------------------------------------------

    async def uninstall(self, specs: Sequence[str]) -> BatchResult:
        """Uninstall every spec concurrently and drop them from the manifest.

        Packages the tool reports as not installed count as
        :class:`AlreadyAbsent`, not as failures.
        """
        current = await self._read_manifest()
        outcomes = await self._gather(specs, self._uninstall_one)

        removed = {
            canonical_name(o.name)
            for o in outcomes
            if isinstance(o, (Uninstalled, AlreadyAbsent))
        }
        remaining = [r for r in current if canonical_name(r.name) not in removed]
        if len(remaining) != len(current):
            await self._write_manifest(remaining)

        return BatchResult(outcomes=tuple(outcomes))

    async def _uninstall_one(self, spec: str) -> Outcome:
        name = _require_name(spec)
        try:
            await self._tool.uninstall(name)
        except AlreadyAbsentError:
            return AlreadyAbsent(name=name)
        return Uninstalled(name=name)

    # ------------------------------------------------------------------
    # list
    # ------------------------------------------------------------------

    async def list_packages(self) -> list[InstalledPackage]:
        """Return the installed packages, bookkeeping package excluded.

        Raises
        ------
        InvalidVersionError
            If any reported version is malformed; the listing is trusted
            tool output, so one bad row fails the whole operation.
        """
        rows = await self._call_tool(self._tool.list_installed)
        packages: list[InstalledPackage] = []
        for name, raw_version in rows:
            if canonical_name(name) in BOOKKEEPING_PACKAGES:
                continue
            try:
                version = SemanticVersion.parse(raw_version)
            except InvalidVersionError as exc:
                raise InvalidVersionError(
                    f"Invalid version for {name}: {raw_version!r}",
                ) from exc
            packages.append(InstalledPackage(name=name, version=version))
        return packages

    # ------------------------------------------------------------------
    # update
    # ------------------------------------------------------------------

    async def update(self) -> BatchResult:
        """Reinstall every outdated package at its latest version.

        Manifest entries of updated packages are refreshed to the new
        version; packages that are not declared are not added.
        """
        rows = await self._call_tool(self._tool.list_outdated)
        candidates = [
            OutdatedPackage(name=name, current=current, latest=latest)
            for name, current, latest in rows
            if canonical_name(name) not in BOOKKEEPING_PACKAGES
            and _is_newer(current, latest)
        ]
        if not candidates:
            return BatchResult(outcomes=())

        current_manifest = await self._read_manifest()
        outcomes = await asyncio.gather(
            *(self._guard(pkg.name, self._update_one(pkg)) for pkg in candidates)
        )

        refreshed = _refresh_versions(current_manifest, outcomes)
        if refreshed != current_manifest:
            await self._write_manifest(refreshed)

        return BatchResult(outcomes=tuple(outcomes))

    async def _update_one(self, pkg: OutdatedPackage) -> Outcome:
        await self._tool.install(f"{pkg.name}=={pkg.latest}")
        return Updated(name=pkg.name, current=pkg.current, latest=pkg.latest)

    # ------------------------------------------------------------------
    # Concurrency helpers
    # ------------------------------------------------------------------

    async def _gather(
        self,
        specs: Sequence[str],
        operation: Callable[[str], Awaitable[Outcome]],
    ) -> list[Outcome]:
        """Run *operation* for every spec, preserving order.

        Specs naming the same package (``flask==2.0.1`` and ``Flask``)
        run one after another in request order, so the last of them is
        also the last to reach the environment. Distinct packages run
        concurrently.
        """
        groups: dict[str, list[int]] = {}
        for index, spec in enumerate(specs):
            name = extract_name(spec)
            # unnamed specs fail on their own; keep them in separate groups
            key = canonical_name(name) if name else f"\0{index}"
            groups.setdefault(key, []).append(index)

        results: list[Outcome | None] = [None] * len(specs)

        async def run_group(indices: list[int]) -> None:
            for index in indices:
                spec = specs[index]
                results[index] = await self._guard(spec, operation(spec))

        await asyncio.gather(*(run_group(indices) for indices in groups.values()))
        return [outcome for outcome in results if outcome is not None]

    @staticmethod
    async def _guard(label: str, task: Awaitable[Outcome]) -> Outcome:
        """Turn any error of one package task into a :class:`Failed` outcome."""
        try:
            return await task
        except VenvWrapError as exc:
            logger.debug("%s failed: %s", label, exc)
            return Failed(name=label, error=exc)
        except Exception as exc:
            error = ToolExecutionError(f"Unexpected tool error: {exc}")
            error.__cause__ = exc
            return Failed(name=label, error=error)

    async def _call_tool(self, method: Callable[[], Awaitable[list]]) -> list:
        """Call a tool query and ensure only our exceptions escape."""
        try:
            return await method()
        except VenvWrapError:
            raise
        except Exception as exc:
            raise ToolExecutionError(f"Unexpected tool error: {exc}") from exc

    # ------------------------------------------------------------------
    # Manifest access (file I/O off the event loop)
    # ------------------------------------------------------------------

    async def _read_manifest(self) -> list[Requirement]:
        return await asyncio.to_thread(self._manifest.read)

    async def _write_manifest(self, requirements: list[Requirement]) -> None:
        await asyncio.to_thread(self._manifest.write, requirements)


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------

def _require_name(spec: str) -> str:
    name = extract_name(spec)
    if name is None:
        raise InvalidSpecifierError(
            f"Cannot determine a package name from {spec!r}",
            hint="Use a name such as `flask` or `flask==2.0.1`.",
        )
    return name


def _is_newer(current: str, latest: str) -> bool:
    """Return ``False`` only when both versions parse and *latest* is not newer."""
    try:
        return compare(
            SemanticVersion.parse(current), SemanticVersion.parse(latest)
        ) is Ordering.LESS
    except InvalidVersionError:
        return True


def _refresh_versions(
    requirements: list[Requirement],
    outcomes: Sequence[Outcome],
) -> list[Requirement]:
    """Return *requirements* with updated packages pinned to their new version."""
    latest: dict[str, SemanticVersion] = {}
    for outcome in outcomes:
        if not isinstance(outcome, Updated):
            continue
        try:
            latest[canonical_name(outcome.name)] = SemanticVersion.parse(outcome.latest)
        except InvalidVersionError:
            logger.warning(
                "Not recording %s==%s in the manifest: not a semantic version",
                outcome.name,
                outcome.latest,
            )
    refreshed: list[Requirement] = []
    for requirement in requirements:
        key = canonical_name(requirement.name)
        if key in latest:
            requirement = Requirement(requirement.name, latest[key])
        refreshed.append(requirement)
    return refreshed
