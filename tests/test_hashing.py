"""Tests for digest comparison."""

import hashlib

import pytest

from telegraf_deploy.errors import IOFailure, MissingReferenceDigest
from telegraf_deploy.hashing import binary_matches, digests_match, file_digest, read_reference_digest


def test_file_digest_is_sha256(tmp_path):
    path = tmp_path / "a.conf"
    path.write_bytes(b"hello")
    assert file_digest(path) == hashlib.sha256(b"hello").hexdigest()


def test_digests_match(tmp_path):
    a = tmp_path / "a"
    b = tmp_path / "b"
    a.write_text("same")
    b.write_text("same")
    assert digests_match(a, b)

    b.write_text("different")
    assert not digests_match(a, b)


def test_reference_digest_is_normalized(tmp_path):
    path = tmp_path / "telegraf.exe.sha256"
    path.write_text("  ABCDEF0123\r\n")
    assert read_reference_digest(path) == "abcdef0123"


def test_missing_reference_digest(tmp_path):
    with pytest.raises(MissingReferenceDigest) as exc:
        read_reference_digest(tmp_path / "absent.sha256")
    assert exc.value.exit_code == 2


def test_binary_matches_reference_file(tmp_path):
    binary = tmp_path / "telegraf"
    binary.write_bytes(b"binary")
    reference = tmp_path / "telegraf.sha256"

    reference.write_text(hashlib.sha256(b"binary").hexdigest().upper())
    assert binary_matches(reference, binary)

    reference.write_text(hashlib.sha256(b"other").hexdigest())
    assert not binary_matches(reference, binary)


def test_unreadable_file_raises_io_failure(tmp_path):
    with pytest.raises(IOFailure):
        file_digest(tmp_path / "missing")
