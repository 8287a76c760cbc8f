"""
Integration tests that run the packager as a separate process, the way
build scripts invoke it.
"""

from pathlib import Path
import subprocess
import sys
from typing import Callable
import zipfile

import pytest

from buildpack.packager.packaging.resolver import translate_uri

from conftest import FILES_TO_INCLUDE


def run_packager(buildpack_dir: Path, *args: str) -> subprocess.CompletedProcess[str]:
    return subprocess.run(
        [sys.executable, "-m", "buildpack.packager", *args],
        cwd=buildpack_dir,
        capture_output=True,
        text=True,
        check=False,
    )


def get_zip_contents(zip_file_path: Path) -> list[str]:
    with zipfile.ZipFile(zip_file_path) as zf:
        return sorted(zf.namelist())


def test_without_a_manifest(buildpack_dir: Path) -> None:
    result = run_packager(buildpack_dir, "uncached")
    assert "Could not find manifest.yml" in result.stderr
    assert result.returncode != 0


def test_with_an_invalid_manifest(
    buildpack_dir: Path,
    write_manifest: Callable[..., Path],
    invalid_manifest_content: str,
) -> None:
    write_manifest(content=invalid_manifest_content)
    result = run_packager(buildpack_dir, "uncached")
    assert "parser_error" in result.stderr
    assert result.returncode != 0


@pytest.mark.parametrize("mode", ["", "beast"])
def test_usage(buildpack_dir: Path, mode: str) -> None:
    result = run_packager(buildpack_dir, mode)
    assert "Usage:\n  buildpack-packager cached|uncached" in result.stdout
    assert result.returncode != 0
    assert not list(buildpack_dir.glob("*.zip"))


def test_uncached_buildpack(buildpack_dir: Path, write_manifest: Callable[..., Path]) -> None:
    write_manifest()
    result = run_packager(buildpack_dir, "uncached")

    assert result.returncode == 0, result.stderr
    zip_file_path = buildpack_dir / "sample_buildpack-v1.2.3.zip"
    assert get_zip_contents(zip_file_path) == sorted(FILES_TO_INCLUDE + ["manifest.yml"])


def test_cached_buildpack(
    buildpack_dir: Path, remote_dependency: Path, write_manifest: Callable[..., Path]
) -> None:
    write_manifest()
    result = run_packager(buildpack_dir, "cached")

    assert result.returncode == 0, result.stderr
    zip_file_path = buildpack_dir / "sample_buildpack-cached-v1.2.3.zip"
    dependency = "dependencies/" + translate_uri(f"file://{remote_dependency}")
    assert get_zip_contents(zip_file_path) == sorted(
        FILES_TO_INCLUDE + ["manifest.yml", dependency]
    )


def test_cached_buildpack_with_invalid_checksum(
    buildpack_dir: Path, write_manifest: Callable[..., Path]
) -> None:
    write_manifest(md5="InvalidMD5_123")
    result = run_packager(buildpack_dir, "cached")

    assert result.returncode != 0
    assert not (buildpack_dir / "sample_buildpack-cached-v1.2.3.zip").exists()
