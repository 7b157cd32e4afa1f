from __future__ import annotations

import logging
import os

from .backends import BACKEND_ERRORS, GzipResource, PlainResource, get_backend
from .config import get_settings
from .models import PROBE_FAILURE, BackendKind

logger = logging.getLogger(__name__)


def probe_size(path: str | os.PathLike[str], kind: BackendKind | str = BackendKind.PLAIN) -> int:
    """Return the (uncompressed) byte length of ``path``, or PROBE_FAILURE.

    Plain files are measured with ``fstat``. Gzip streams carry no reliable
    uncompressed length, so they are decompressed in full; if decompression
    fails part way the bytes counted so far are returned and a warning is
    logged. A file without the gzip magic probed as COMPRESSED is counted as
    it is. PROBE_FAILURE is returned only when the path cannot be opened.
    """
    kind = BackendKind(kind)
    path = os.fspath(path)
    settings = get_settings()
    backend = get_backend(kind)
    try:
        resource = backend.open(path, "rb", settings.default_buffer_size)
    except (OSError, ValueError):
        logger.debug("probe_size: could not open %s", path, exc_info=True)
        return PROBE_FAILURE
    try:
        if kind is BackendKind.PLAIN:
            return _plain_size(resource)
        return _gzip_size(resource, path, settings.probe_chunk_size)
    finally:
        try:
            backend.close(resource)
        except Exception:
            logger.debug("probe_size: error while closing %s", path, exc_info=True)


def _plain_size(resource: PlainResource) -> int:
    return os.fstat(resource.fileno()).st_size


def _gzip_size(resource: GzipResource, path: str, chunk_size: int) -> int:
    total = 0
    buf = bytearray(chunk_size)
    view = memoryview(buf)
    while True:
        try:
            n = resource.stream.readinto(view) or 0
        except BACKEND_ERRORS as e:
            logger.warning("Error %r when reading from gzip stream %s; size is a lower bound", e, path)
            break
        total += n
        if n < chunk_size:
            break
    return total
