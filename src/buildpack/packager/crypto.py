"""
Centralized digest operations for the buildpack packager.
"""

from cryptography.hazmat.primitives import hashes


def md5_hexdigest(content: bytes) -> str:
    """Returns the lowercase hex MD5 digest of `content`.

    MD5 is what buildpack manifests declare; it guards against vendoring the
    wrong or a corrupted file, not against tampering.
    """
    digest = hashes.Hash(hashes.MD5())
    digest.update(content)
    return digest.finalize().hex()


def checksums_match(expected: str, actual: str) -> bool:
    """Compares two hex digests case-insensitively."""
    return expected.strip().lower() == actual.strip().lower()
