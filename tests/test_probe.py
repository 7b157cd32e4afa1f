import gzip
import logging

import pytest

from fpwrap import PROBE_FAILURE, GzipHandle, StreamHandle, probe_size
from fpwrap.config import get_settings
from fpwrap.models import BackendKind

from factories.payload_factories import PayloadFactory, StoredFileFactory


@pytest.mark.parametrize("length", [0, 5, 32768, 32769, 150_000])
def test_probe_matches_bytes_written(tmp_path, kind, suffix, length):
    path = tmp_path / f"p{suffix}"
    data = PayloadFactory(length=length)["data"]
    with StreamHandle(path, "wb", kind=kind) as h:
        h.write(data)
    assert probe_size(path, kind) == length


def test_probe_missing_path_returns_sentinel(tmp_path, kind):
    assert probe_size(tmp_path / "missing", kind) == PROBE_FAILURE
    assert PROBE_FAILURE == 2**64 - 1


def test_probe_directory_returns_sentinel(tmp_path, kind):
    assert probe_size(tmp_path, kind) == PROBE_FAILURE


def test_probe_reports_uncompressed_length(tmp_path):
    path = tmp_path / "t.gz"
    with GzipHandle(path, "wb") as h:
        h.write(b"hello")
    assert probe_size(path, BackendKind.COMPRESSED) == 5
    assert probe_size(str(path), "compressed") == 5
    assert probe_size(path, BackendKind.PLAIN) == path.stat().st_size
    assert path.stat().st_size != 5


def test_probe_of_existing_gzip(tmp_path):
    stored = StoredFileFactory(root=tmp_path, kind=BackendKind.COMPRESSED, length=70_000)
    assert probe_size(stored.path, BackendKind.COMPRESSED) == len(stored.data)


def test_probe_with_small_chunks(tmp_path, monkeypatch):
    monkeypatch.setenv("FPWRAP_PROBE_CHUNK_SIZE", "7")
    get_settings.cache_clear()
    stored = StoredFileFactory(root=tmp_path, kind=BackendKind.COMPRESSED, length=1000)
    assert probe_size(stored.path, BackendKind.COMPRESSED) == 1000


def test_probe_truncated_gzip_returns_lower_bound(tmp_path, caplog):
    data = PayloadFactory(length=200_000)["data"]
    path = tmp_path / "cut.gz"
    compressed = gzip.compress(data)
    path.write_bytes(compressed[: len(compressed) // 2])

    with caplog.at_level(logging.WARNING, logger="fpwrap.probe"):
        size = probe_size(path, BackendKind.COMPRESSED)

    assert 0 < size < len(data)
    assert size % get_settings().probe_chunk_size == 0
    assert any("lower bound" in r.getMessage() for r in caplog.records)


def test_probe_non_gzip_content_as_compressed(tmp_path, caplog):
    path = tmp_path / "plain.txt"
    path.write_bytes(b"not compressed at all")
    with caplog.at_level(logging.WARNING, logger="fpwrap.probe"):
        assert probe_size(path, BackendKind.COMPRESSED) == 21
    assert not caplog.records


def test_probe_transparent_gzip_write(tmp_path):
    path = tmp_path / "raw.gz"
    data = b"stored without compression\n" * 2000
    with GzipHandle(path, "wT") as h:
        assert h.write(data) == len(data)
    assert path.read_bytes() == data
    assert probe_size(path, BackendKind.COMPRESSED) == len(data)
