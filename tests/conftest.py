import os

import pytest

from fpwrap.config import get_settings
from fpwrap.models import BackendKind

from factories.payload_factories import StoredFileFactory


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch):
    # Settings are cached per process; isolate tests from FPWRAP_* in the environment
    for key in list(os.environ):
        if key.startswith("FPWRAP_"):
            monkeypatch.delenv(key)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(params=[BackendKind.PLAIN, BackendKind.COMPRESSED], ids=["plain", "gzip"])
def kind(request) -> BackendKind:
    return request.param


@pytest.fixture()
def suffix(kind) -> str:
    return ".bin.gz" if kind is BackendKind.COMPRESSED else ".bin"


@pytest.fixture()
def stored_file(tmp_path, kind):
    return StoredFileFactory(root=tmp_path, kind=kind, length=50_000)
