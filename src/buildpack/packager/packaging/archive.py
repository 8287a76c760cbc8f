"""Assembly of the buildpack zip archive."""

from collections.abc import Sequence
import os
from pathlib import Path
import tempfile
import zipfile

from pyvider.telemetry import logger

from ..exceptions import ArchivePackagingError
from ..models import (
    PATH_SEPARATORS,
    Manifest,
    PackagingMode,
    ResolvedDependency,
    SelectedFileSet,
)

VERSION_FILENAME = "VERSION"


def read_version(buildpack_root: Path) -> str:
    """Returns the trimmed contents of the buildpack's VERSION file."""
    version_path = buildpack_root / VERSION_FILENAME
    try:
        version = version_path.read_text(encoding="utf-8").strip()
    except (OSError, UnicodeDecodeError) as e:
        raise ArchivePackagingError(
            f"Could not read {VERSION_FILENAME} in {buildpack_root}: {e}"
        ) from e
    if not version:
        raise ArchivePackagingError(f"{version_path} is empty")
    if any(sep in version for sep in PATH_SEPARATORS):
        raise ArchivePackagingError(
            f"{version_path} must not contain path separators: {version!r}"
        )
    return version


def archive_name(language: str, version: str, mode: PackagingMode) -> str:
    cached = "-cached" if mode is PackagingMode.CACHED else ""
    return f"{language}_buildpack{cached}-v{version}.zip"


class ArchiveBuilder:
    """Writes selected buildpack files and resolved dependencies into one zip."""

    def __init__(self, buildpack_root: Path) -> None:
        self.buildpack_root = buildpack_root

    def build(
        self,
        mode: PackagingMode,
        manifest: Manifest,
        version: str,
        selected_files: SelectedFileSet,
        resolved_dependencies: Sequence[ResolvedDependency] = (),
    ) -> Path:
        if mode is PackagingMode.UNCACHED and resolved_dependencies:
            raise ArchivePackagingError(
                "Dependencies cannot be bundled into an uncached buildpack."
            )

        self._check_entry_names(selected_files, resolved_dependencies)

        archive_path = self.buildpack_root / archive_name(
            manifest.language, version, mode
        )
        logger.info(
            f"Writing {archive_path.name}",
            files=len(selected_files),
            dependencies=len(resolved_dependencies),
        )

        try:
            fd, temp_name = tempfile.mkstemp(
                prefix=f".{archive_path.name}.",
                suffix=".partial",
                dir=self.buildpack_root,
            )
        except OSError as e:
            raise ArchivePackagingError(f"Failed to create {archive_path}: {e}") from e

        # The archive only appears under its final name once fully written.
        temp_path = Path(temp_name)
        try:
            # Files dated before 1980 are stored with the earliest zip timestamp.
            with os.fdopen(fd, "wb") as raw, zipfile.ZipFile(
                raw, "w", compression=zipfile.ZIP_DEFLATED, strict_timestamps=False
            ) as zf:
                for rel_path in selected_files:
                    try:
                        zf.write(selected_files.root / rel_path, arcname=rel_path)
                    except UnicodeEncodeError as e:
                        raise ArchivePackagingError(
                            f"Cannot store {rel_path!r} in {archive_path.name}: "
                            "the file name is not valid UTF-8"
                        ) from e
                for dependency in resolved_dependencies:
                    zf.writestr(dependency.archive_entry_name, dependency.content)
            temp_path.chmod(0o644)
            os.replace(temp_path, archive_path)
        except (OSError, ValueError, zipfile.LargeZipFile) as e:
            raise ArchivePackagingError(f"Failed to write {archive_path}: {e}") from e
        finally:
            temp_path.unlink(missing_ok=True)

        logger.info(f"Successfully built buildpack: {archive_path.name}")
        return archive_path

    @staticmethod
    def _check_entry_names(
        selected_files: SelectedFileSet,
        resolved_dependencies: Sequence[ResolvedDependency],
    ) -> None:
        seen = set(selected_files)
        for dependency in resolved_dependencies:
            name = dependency.archive_entry_name
            if name in seen:
                raise ArchivePackagingError(
                    f"Archive entry '{name}' for dependency {dependency.spec.uri} "
                    "collides with another entry."
                )
            seen.add(name)
