"""Core logic for packaging a buildpack in cached or uncached mode."""

from pathlib import Path

from pyvider.telemetry import logger

from ..config import PackagerConfig
from ..exceptions import PackagerError
from ..models import ExitOutcome, PackagingMode
from .archive import ArchiveBuilder, archive_name, read_version
from .manifest import load_manifest
from .resolver import DependencyResolver
from .selector import select_files


class PackagingOrchestrator:
    def __init__(
        self,
        buildpack_root: Path,
        config: PackagerConfig | None = None,
        resolver: DependencyResolver | None = None,
    ) -> None:
        self.buildpack_root = buildpack_root
        self.config = config or PackagerConfig()
        self.resolver = resolver or DependencyResolver(self.config)

    def package(self, mode: PackagingMode | str) -> Path:
        """Builds the buildpack archive for `mode` and returns its path."""
        mode = PackagingMode.parse(mode)
        logger.info(f"Packaging {mode} buildpack in {self.buildpack_root}...")

        manifest = load_manifest(self.buildpack_root, mode)
        version = read_version(self.buildpack_root)

        # Archives from earlier runs sit in the root; never package them.
        previous_outputs = {
            archive_name(manifest.language, version, m) for m in PackagingMode
        }
        selected_files = select_files(
            self.buildpack_root, manifest.exclude_files | previous_outputs
        )
        logger.info(f"Selected {len(selected_files)} files for packaging")

        resolved_dependencies = ()
        if mode is PackagingMode.CACHED:
            resolved_dependencies = self.resolver.resolve(
                manifest.dependencies, self.buildpack_root
            )

        return ArchiveBuilder(self.buildpack_root).build(
            mode, manifest, version, selected_files, resolved_dependencies
        )


def run(
    mode: PackagingMode | str,
    buildpack_root: Path,
    config: PackagerConfig | None = None,
) -> ExitOutcome:
    """Packages the buildpack, reporting failure as an outcome instead of raising."""
    try:
        archive_path = PackagingOrchestrator(buildpack_root, config).package(mode)
    except PackagerError as e:
        logger.debug(f"Packaging failed: {e}", error_type=type(e).__name__)
        return ExitOutcome(exit_code=1, error=e)
    return ExitOutcome(exit_code=0, archive_path=archive_path)
