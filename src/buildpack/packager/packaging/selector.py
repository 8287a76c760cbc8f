"""Selection of the buildpack files that go into an archive."""

from collections.abc import Callable, Iterable
import fnmatch
import os
from pathlib import Path

from pyvider.telemetry import logger

from ..models import SelectedFileSet

VCS_DIRECTORIES = frozenset({".git"})
_GLOB_CHARS = frozenset("*?[")


def _normalize_pattern(pattern: str) -> str:
    pattern = pattern.strip().replace("\\", "/")
    while pattern.startswith("./"):
        pattern = pattern[2:]
    return pattern.rstrip("/")


def create_exclude_func(patterns: Iterable[str]) -> Callable[[str], bool]:
    """Creates a predicate telling whether a root-relative POSIX path is excluded.

    A pattern excludes the path it names and everything beneath it. Patterns
    containing glob characters are also matched with fnmatch.
    """
    normalized = {p for p in map(_normalize_pattern, patterns) if p}
    globs = [p for p in normalized if _GLOB_CHARS & set(p)]

    def is_excluded(rel_path: str) -> bool:
        if rel_path in normalized:
            return True
        for pattern in normalized:
            if rel_path.startswith(pattern + "/"):
                return True
        return any(fnmatch.fnmatchcase(rel_path, pattern) for pattern in globs)

    return is_excluded


def select_files(buildpack_root: Path, exclude_patterns: Iterable[str]) -> SelectedFileSet:
    """Lists every regular file under `buildpack_root` that is not excluded."""
    is_excluded = create_exclude_func(exclude_patterns)
    selected: set[str] = set()

    for dir_path, dir_names, file_names in os.walk(buildpack_root):
        rel_dir = Path(dir_path).relative_to(buildpack_root)
        # Prune in place so os.walk never descends into excluded directories.
        dir_names[:] = sorted(
            name
            for name in dir_names
            if name not in VCS_DIRECTORIES
            and not is_excluded((rel_dir / name).as_posix())
        )
        for name in file_names:
            if name in VCS_DIRECTORIES:
                continue
            full_path = Path(dir_path) / name
            rel_path = (rel_dir / name).as_posix()
            if not full_path.is_file() or is_excluded(rel_path):
                continue
            selected.add(rel_path)

    logger.debug(f"Selected {len(selected)} files from {buildpack_root}")
    return SelectedFileSet(root=buildpack_root, paths=tuple(sorted(selected)))
