class PackagerError(Exception):
    pass


class UsageError(PackagerError):
    pass


class ManifestError(PackagerError):
    pass


class ManifestNotFoundError(ManifestError):
    pass


class ManifestParseError(ManifestError):
    """Raised for a manifest.yml that is unreadable or fails validation."""

    def __init__(self, detail: str) -> None:
        super().__init__(f"parser_error: {detail}")
        self.detail = detail


class DependencyError(PackagerError):
    pass


class DependencyFetchError(DependencyError):
    pass


class ChecksumMismatchError(DependencyError):
    pass


class ArchivePackagingError(PackagerError):
    pass
