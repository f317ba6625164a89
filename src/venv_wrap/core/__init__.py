"""Core / service layer — business logic and pure data transformations.

Rules
-----
* No ``print()`` calls.
* No direct filesystem or subprocess work — services reach the outside
  world only through the protocols in :mod:`venv_wrap.core.protocols`.
* No imports from ``cli`` or ``infra``.
"""

from venv_wrap.core.models import (
    AlreadyAbsent,
    BatchResult,
    Failed,
    Installed,
    InstalledPackage,
    OutdatedPackage,
    Requirement,
    ScaffoldTransaction,
    Uninstalled,
    Updated,
)
from venv_wrap.core.protocols import EnvironmentTool, ManifestRepository, ScaffoldWorkspace
from venv_wrap.core.reconcile_service import ReconcileService
from venv_wrap.core.scaffold_service import ScaffoldService
from venv_wrap.core.semver import Ordering, SemanticVersion, compare
from venv_wrap.core.specifier import extract_name, extract_version_token

__all__: list[str] = [
    "AlreadyAbsent",
    "BatchResult",
    "EnvironmentTool",
    "Failed",
    "Installed",
    "InstalledPackage",
    "ManifestRepository",
    "Ordering",
    "OutdatedPackage",
    "ReconcileService",
    "Requirement",
    "ScaffoldService",
    "ScaffoldTransaction",
    "ScaffoldWorkspace",
    "SemanticVersion",
    "Uninstalled",
    "Updated",
    "compare",
    "extract_name",
    "extract_version_token",
]
