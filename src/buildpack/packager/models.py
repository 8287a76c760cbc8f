import enum
from collections.abc import Iterator
from pathlib import Path
import re
from typing import Self

from attrs import define, field

from .exceptions import PackagerError, UsageError

USAGE = "Usage:\n  buildpack-packager cached|uncached"

DEPENDENCIES_PREFIX = "dependencies/"

PATH_SEPARATORS = ("/", "\\")

_GROUP_REFERENCE = re.compile(r"\$(\d+)")


def referenced_groups(template: str) -> set[int]:
    """Returns the capture group numbers a `$N` name or version template uses."""
    return {int(number) for number in _GROUP_REFERENCE.findall(template)}


class PackagingMode(enum.StrEnum):
    CACHED = "cached"
    UNCACHED = "uncached"

    @classmethod
    def parse(cls, value: str | None) -> Self:
        """Accepts exactly the literal mode names; anything else is a usage error."""
        try:
            return cls(value)
        except ValueError as e:
            raise UsageError(USAGE) from e


@define(frozen=True, slots=True)
class UrlPattern:
    match: re.Pattern[str]
    name: str
    version: str

    def extract(self, url: str) -> tuple[str, str] | None:
        """Returns the (name, version) described by `url`, or None if it does not match.

        `$N` in the name or version template expands to the Nth capture group.
        """
        found = self.match.search(url)
        if found is None:
            return None

        def expand(template: str) -> str:
            return _GROUP_REFERENCE.sub(
                lambda ref: found.group(int(ref.group(1))) or "", template
            )

        return expand(self.name), expand(self.version)


@define(frozen=True, slots=True)
class DependencySpec:
    name: str
    version: str
    uri: str
    md5: str
    cf_stacks: frozenset[str] = field(factory=frozenset)


@define(frozen=True, slots=True)
class Manifest:
    language: str
    dependencies: tuple[DependencySpec, ...] = ()
    exclude_files: frozenset[str] = field(factory=frozenset)
    url_to_dependency_map: tuple[UrlPattern, ...] = ()

    def dependency_for_url(self, url: str) -> tuple[str, str] | None:
        """Looks up a dependency name and version using the manifest's URL patterns."""
        for pattern in self.url_to_dependency_map:
            extracted = pattern.extract(url)
            if extracted is not None:
                return extracted
        return None


@define(frozen=True, slots=True)
class ResolvedDependency:
    spec: DependencySpec
    content: bytes = field(repr=lambda content: f"<{len(content)} bytes>")
    archive_entry_name: str


@define(frozen=True, slots=True)
class SelectedFileSet:
    root: Path
    paths: tuple[str, ...]

    def __iter__(self) -> Iterator[str]:
        return iter(self.paths)

    def __len__(self) -> int:
        return len(self.paths)

    def __contains__(self, path: object) -> bool:
        return path in self.paths


@define(frozen=True, slots=True)
class ExitOutcome:
    exit_code: int
    archive_path: Path | None = None
    error: PackagerError | None = None

    @property
    def ok(self) -> bool:
        return self.exit_code == 0
