from __future__ import annotations

from ..models import BackendKind
from .base import BACKEND_ERRORS, StreamBackend, normalize_mode
from .compressed import GzipBackend, GzipResource, parse_gzip_mode
from .plain import PlainBackend, PlainResource


def get_backend(kind: BackendKind | str) -> StreamBackend:
    """Return the backend implementing ``kind``."""
    kind = BackendKind(kind)
    if kind is BackendKind.COMPRESSED:
        return GzipBackend()
    return PlainBackend()


__all__ = [
    "BACKEND_ERRORS",
    "GzipBackend",
    "GzipResource",
    "PlainBackend",
    "PlainResource",
    "StreamBackend",
    "get_backend",
    "normalize_mode",
    "parse_gzip_mode",
]
