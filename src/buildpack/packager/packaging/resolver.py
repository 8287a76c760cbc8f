"""Fetching and checksum verification of a buildpack's declared dependencies."""

import asyncio
from collections.abc import Sequence
from pathlib import Path
from urllib.parse import unquote, urlsplit

import httpx
from pyvider.telemetry import logger

from ..config import PackagerConfig
from ..crypto import checksums_match, md5_hexdigest
from ..exceptions import ChecksumMismatchError, DependencyFetchError
from ..models import DEPENDENCIES_PREFIX, DependencySpec, ResolvedDependency

HTTP_SCHEMES = frozenset({"http", "https"})


def translate_uri(uri: str) -> str:
    """Flattens a URI into a single path segment by replacing ':' and '/' with '_'."""
    return uri.replace(":", "_").replace("/", "_")


def dependency_entry_name(uri: str) -> str:
    """Returns the archive entry a dependency fetched from `uri` is stored under."""
    return f"{DEPENDENCIES_PREFIX}{translate_uri(uri)}"


def local_path_for(uri: str, root: Path) -> Path | None:
    """Maps a file:// URI or a bare path to a filesystem path; None for other schemes."""
    parts = urlsplit(uri)
    if parts.scheme == "file":
        if parts.netloc not in ("", "localhost"):
            raise DependencyFetchError(
                f"Unsupported file URI host '{parts.netloc}' in {uri}"
            )
        path = Path(unquote(parts.path))
    elif len(parts.scheme) <= 1:
        # A one-letter scheme is a Windows drive letter.
        path = Path(uri)
    else:
        return None
    return path if path.is_absolute() else root / path


class DependencyResolver:
    """Fetches every declared dependency and verifies it against its md5."""

    def __init__(
        self,
        config: PackagerConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config or PackagerConfig()
        self.transport = transport

    def resolve(
        self, dependencies: Sequence[DependencySpec], root: Path
    ) -> tuple[ResolvedDependency, ...]:
        return asyncio.run(self.resolve_async(dependencies, root))

    async def resolve_async(
        self, dependencies: Sequence[DependencySpec], root: Path
    ) -> tuple[ResolvedDependency, ...]:
        """Resolves all dependencies concurrently, preserving declaration order.

        The first failing fetch cancels the others and is re-raised as-is.
        """
        if not dependencies:
            return ()

        logger.info(f"Resolving {len(dependencies)} dependencies...")
        results: list[ResolvedDependency | None] = [None] * len(dependencies)
        semaphore = asyncio.Semaphore(self.config.max_concurrent_fetches)

        async with httpx.AsyncClient(
            timeout=httpx.Timeout(self.config.fetch_timeout),
            transport=self.transport,
            follow_redirects=True,
        ) as client:

            async def resolve_one(index: int, spec: DependencySpec) -> None:
                async with semaphore:
                    results[index] = await self._resolve_one(spec, root, client)

            try:
                async with asyncio.TaskGroup() as tg:
                    for index, spec in enumerate(dependencies):
                        tg.create_task(resolve_one(index, spec))
            except ExceptionGroup as group:
                raise group.exceptions[0] from None

        return tuple(r for r in results if r is not None)

    async def _resolve_one(
        self, spec: DependencySpec, root: Path, client: httpx.AsyncClient
    ) -> ResolvedDependency:
        content = await self._fetch(spec.uri, root, client)
        if not content:
            raise DependencyFetchError(f"Fetching {spec.uri} returned no data")

        actual = md5_hexdigest(content)
        if not checksums_match(spec.md5, actual):
            raise ChecksumMismatchError(
                f"Checksum mismatch for {spec.name or spec.uri} ({spec.uri}): "
                f"expected md5 {spec.md5}, got {actual}"
            )

        logger.info(
            "Dependency verified",
            name=spec.name,
            version=spec.version,
            uri=spec.uri,
            size=len(content),
        )
        return ResolvedDependency(
            spec=spec,
            content=content,
            archive_entry_name=dependency_entry_name(spec.uri),
        )

    async def _fetch(self, uri: str, root: Path, client: httpx.AsyncClient) -> bytes:
        local_path = local_path_for(uri, root)
        if local_path is not None:
            try:
                return await asyncio.to_thread(local_path.read_bytes)
            except OSError as e:
                raise DependencyFetchError(f"Could not read {uri}: {e}") from e

        scheme = urlsplit(uri).scheme
        if scheme not in HTTP_SCHEMES:
            raise DependencyFetchError(f"Unsupported URI scheme '{scheme}' in {uri}")

        logger.debug(f"Downloading {uri}")
        try:
            response = await client.get(uri)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise DependencyFetchError(f"Could not download {uri}: {e}") from e
        return response.content
