"""Pytest fixtures for the entire buildpack-packager test suite."""

import hashlib
from pathlib import Path
from typing import Callable

import pytest

FILES_TO_INCLUDE = ["VERSION", "README.md", "lib/sai.to", "lib/rash"]
FILES_TO_EXCLUDE = [".gitignore", "lib/ephemeral_junkpile"]


def make_fake_files(root: Path, names: list[str]) -> None:
    for name in names:
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(f"contents of {name}\n")


def md5_of(path: Path) -> str:
    return hashlib.md5(path.read_bytes()).hexdigest()


@pytest.fixture
def remote_dependency(tmp_path: Path) -> Path:
    """A dependency file living outside the buildpack, referenced via file://."""
    remote_dir = tmp_path / "remote_dependencies"
    make_fake_files(remote_dir, ["dep1.txt"])
    return remote_dir / "dep1.txt"


@pytest.fixture
def buildpack_dir(tmp_path: Path) -> Path:
    """A sample buildpack root with sources, junk files and git metadata."""
    root = tmp_path / "sample-buildpack-root-dir"
    make_fake_files(root, FILES_TO_INCLUDE + FILES_TO_EXCLUDE)
    make_fake_files(root, [".git/HEAD", ".git/objects/ab/cdef"])
    (root / "VERSION").write_text("1.2.3\n")
    return root


@pytest.fixture
def write_manifest(
    buildpack_dir: Path, remote_dependency: Path
) -> Callable[..., Path]:
    """A factory fixture writing manifest.yml into the sample buildpack."""

    def _write(md5: str | None = None, content: str | None = None) -> Path:
        if content is None:
            checksum = md5 if md5 is not None else md5_of(remote_dependency)
            content = f"""---
language: sample

url_to_dependency_map:
  - match: fake_name(\\d+\\.\\d+(\\.\\d+)?)
    name: fake_name
    version: $1

dependencies:
  - name: fake_name
    version: 1.2
    uri: file://{remote_dependency}
    md5: {checksum}
    cf_stacks:
      - lucid64
      - cflinuxfs2

exclude_files:
  - .gitignore
  - lib/ephemeral_junkpile
"""
        manifest_path = buildpack_dir / "manifest.yml"
        manifest_path.write_text(content)
        return manifest_path

    return _write


@pytest.fixture
def invalid_manifest_content(remote_dependency: Path) -> str:
    """A manifest whose only dependency lacks its md5."""
    return f"""---
language: sample

dependencies:
  - name: fake_name
    version: 1.2
    uri: file://{remote_dependency}
"""
