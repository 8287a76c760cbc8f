"""Loading and validation of a buildpack's manifest.yml."""

from pathlib import Path
import re
from typing import Any

from pyvider.telemetry import logger
import yaml

from ..exceptions import ManifestNotFoundError, ManifestParseError
from ..models import (
    PATH_SEPARATORS,
    DependencySpec,
    Manifest,
    PackagingMode,
    UrlPattern,
    referenced_groups,
)

MANIFEST_FILENAME = "manifest.yml"


def load_manifest(
    buildpack_root: Path, mode: PackagingMode = PackagingMode.UNCACHED
) -> Manifest:
    """Reads `<buildpack_root>/manifest.yml` and validates it for `mode`."""
    manifest_path = buildpack_root / MANIFEST_FILENAME
    if not manifest_path.is_file():
        raise ManifestNotFoundError(
            f"Could not find {MANIFEST_FILENAME} in {buildpack_root}"
        )

    try:
        with manifest_path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ManifestParseError(f"{MANIFEST_FILENAME} is not valid YAML: {e}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise ManifestParseError(f"could not read {manifest_path}: {e}") from e

    manifest = parse_manifest(data, mode)
    logger.debug(
        "Loaded manifest",
        path=str(manifest_path),
        language=manifest.language,
        dependencies=len(manifest.dependencies),
    )
    return manifest


def parse_manifest(
    data: Any, mode: PackagingMode = PackagingMode.UNCACHED
) -> Manifest:
    """Turns the raw YAML document into a validated Manifest."""
    if not isinstance(data, dict):
        raise ManifestParseError(f"{MANIFEST_FILENAME} must contain a mapping")

    language = data.get("language")
    if not isinstance(language, str) or not language.strip():
        raise ManifestParseError("'language' must be a non-empty string")
    # The language names the archive written into the buildpack root.
    if any(sep in language for sep in PATH_SEPARATORS):
        raise ManifestParseError(
            f"'language' must not contain path separators: {language!r}"
        )

    raw_dependencies = data.get("dependencies")
    if raw_dependencies is None:
        if mode is PackagingMode.CACHED:
            raise ManifestParseError(
                "'dependencies' is required to build a cached buildpack"
            )
        raw_dependencies = []
    if not isinstance(raw_dependencies, list):
        raise ManifestParseError("'dependencies' must be a list")

    return Manifest(
        language=language.strip(),
        dependencies=tuple(
            _parse_dependency(index, entry)
            for index, entry in enumerate(raw_dependencies)
        ),
        exclude_files=frozenset(_parse_exclude_files(data.get("exclude_files"))),
        url_to_dependency_map=tuple(
            _parse_url_pattern(index, entry)
            for index, entry in enumerate(data.get("url_to_dependency_map") or [])
        ),
    )


def _scalar(value: Any) -> str:
    # YAML reads `version: 1.2` as a float.
    return "" if value is None else str(value).strip()


def _parse_dependency(index: int, entry: Any) -> DependencySpec:
    if not isinstance(entry, dict):
        raise ManifestParseError(f"dependencies[{index}] must be a mapping")

    missing = [key for key in ("uri", "md5") if not _scalar(entry.get(key))]
    if missing:
        raise ManifestParseError(
            f"dependencies[{index}] ({_scalar(entry.get('name')) or 'unnamed'}) "
            f"is missing required field(s): {', '.join(missing)}"
        )

    cf_stacks = entry.get("cf_stacks") or []
    if not isinstance(cf_stacks, list):
        raise ManifestParseError(f"dependencies[{index}].cf_stacks must be a list")

    return DependencySpec(
        name=_scalar(entry.get("name")),
        version=_scalar(entry.get("version")),
        uri=_scalar(entry["uri"]),
        md5=_scalar(entry["md5"]),
        cf_stacks=frozenset(_scalar(stack) for stack in cf_stacks),
    )


def _parse_exclude_files(raw: Any) -> list[str]:
    if raw is None:
        return []
    if not isinstance(raw, list) or not all(isinstance(p, str) for p in raw):
        raise ManifestParseError("'exclude_files' must be a list of strings")
    return raw


def _parse_url_pattern(index: int, entry: Any) -> UrlPattern:
    if not isinstance(entry, dict):
        raise ManifestParseError(f"url_to_dependency_map[{index}] must be a mapping")

    missing = [key for key in ("match", "name", "version") if not _scalar(entry.get(key))]
    if missing:
        raise ManifestParseError(
            f"url_to_dependency_map[{index}] is missing required field(s): "
            f"{', '.join(missing)}"
        )

    try:
        compiled = re.compile(_scalar(entry["match"]))
    except re.error as e:
        raise ManifestParseError(
            f"url_to_dependency_map[{index}].match is not a valid pattern: {e}"
        ) from e

    name, version = _scalar(entry["name"]), _scalar(entry["version"])
    unknown = sorted(
        n for n in referenced_groups(name) | referenced_groups(version)
        if n > compiled.groups
    )
    if unknown:
        raise ManifestParseError(
            f"url_to_dependency_map[{index}] refers to "
            f"{', '.join(f'${n}' for n in unknown)} but its match pattern has "
            f"{compiled.groups} group(s)"
        )

    return UrlPattern(match=compiled, name=name, version=version)
