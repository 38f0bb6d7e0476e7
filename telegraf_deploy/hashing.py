"""SHA-256 comparison of source and deployed files."""

import hashlib
import logging
from pathlib import Path

from .errors import IOFailure, MissingReferenceDigest

logger = logging.getLogger("telegraf-deploy")

CHUNK_SIZE = 1024 * 1024


def file_digest(path: Path) -> str:
    """Compute the SHA-256 of a file.

    Args:
        path: File to hash

    Returns:
        Lowercase hex digest
    """
    digest = hashlib.sha256()
    try:
        with open(path, "rb") as fh:
            for chunk in iter(lambda: fh.read(CHUNK_SIZE), b""):
                digest.update(chunk)
    except OSError as e:
        raise IOFailure(f"Cannot read {path}: {e}", path) from e
    return digest.hexdigest()


def read_reference_digest(path: Path) -> str:
    """Read a checksum file holding a single hash and nothing else.

    Raises:
        MissingReferenceDigest: if the file does not exist
    """
    if not path.is_file():
        raise MissingReferenceDigest(path)
    try:
        text = path.read_text(encoding="utf-8-sig")
    except OSError as e:
        raise IOFailure(f"Cannot read {path}: {e}", path) from e
    return text.strip().lower()


def digests_match(source: Path, destination: Path) -> bool:
    """Compare two files by content digest."""
    source_hash = file_digest(source)
    destination_hash = file_digest(destination)
    logger.debug(f"{source.name}: source={source_hash} destination={destination_hash}")
    return source_hash == destination_hash


def binary_matches(reference_file: Path, destination: Path) -> bool:
    """Compare a deployed binary against its shipped checksum file.

    The reference digest comes from the text file rather than from the
    source binary, so the binary may come from a different pipeline.
    """
    expected = read_reference_digest(reference_file)
    actual = file_digest(destination)
    logger.debug(f"{destination.name}: reference={expected} destination={actual}")
    return expected == actual
