# buildpack-packager/src/buildpack/packager/__init__.py
"""
This package contains the core logic for packaging a buildpack directory into
a distributable zip archive, either with only its own sources (uncached) or
with its checksum-verified dependencies bundled alongside (cached).
"""

from .config import PackagerConfig
from .models import (
    DependencySpec,
    ExitOutcome,
    Manifest,
    PackagingMode,
    ResolvedDependency,
    SelectedFileSet,
)
from .packaging.orchestrator import PackagingOrchestrator, run

__all__ = [
    "DependencySpec",
    "ExitOutcome",
    "Manifest",
    "PackagerConfig",
    "PackagingMode",
    "PackagingOrchestrator",
    "ResolvedDependency",
    "SelectedFileSet",
    "run",
]
