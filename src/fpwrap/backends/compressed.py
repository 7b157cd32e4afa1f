from __future__ import annotations

import gzip
import logging
from dataclasses import dataclass
from typing import Any

from ..config import get_settings
from ..models import BackendKind
from .base import StreamBackend, normalize_mode
from .plain import wrap_raw

logger = logging.getLogger(__name__)

# zlib gzopen strategy flags: filtered, huffman-only, RLE, fixed
_STRATEGY_FLAGS = frozenset("fhRF")

GZIP_MAGIC = b"\x1f\x8b"


def parse_gzip_mode(mode: str, default_level: int) -> tuple[str, int, bool]:
    """Split a gzopen-style mode (e.g. ``"wb9"``) into file mode, level and transparency.

    ``T`` requests transparent writing: bytes go to the file uncompressed.
    Strategy letters are accepted but have no equivalent in ``gzip`` and are
    dropped.
    """
    level = default_level
    transparent = False
    kept: list[str] = []
    for ch in mode:
        if ch.isdigit():
            level = int(ch)
        elif ch == "T":
            transparent = True
        elif ch in _STRATEGY_FLAGS:
            logger.debug("ignoring gzip strategy flag %r in mode %r", ch, mode)
        else:
            kept.append(ch)
    return normalize_mode("".join(kept)), level, transparent


@dataclass
class GzipResource:
    # A GzipFile, or the file object itself when the data is not compressed
    stream: Any
    # GzipFile does not close a file object it was handed, so it is kept here
    fileobj: Any
    transparent: bool = False


class GzipBackend(StreamBackend):
    """gzip-compressed stream; all offsets are in uncompressed bytes.

    Like zlib's gzopen, files without the gzip magic are read as they are,
    and a ``T`` in the mode writes without compression.
    """

    kind = BackendKind.COMPRESSED

    def __init__(self, compresslevel: int | None = None):
        self.compresslevel = compresslevel

    def open(self, path: str, mode: str, buffer_size: int) -> GzipResource:
        level = self.compresslevel
        if level is None:
            level = get_settings().gzip_compresslevel
        file_mode, level, transparent = parse_gzip_mode(mode, level)
        raw = open(path, file_mode, buffering=0)
        try:
            fileobj = wrap_raw(raw, buffer_size)
        except Exception:
            raw.close()
            raise
        try:
            if file_mode.startswith("r"):
                # write-only flag, zlib ignores it when reading
                transparent = fileobj.peek(2)[:2] != GZIP_MAGIC
            if transparent:
                logger.debug("%s opened without compression (mode %r)", path, mode)
                return GzipResource(stream=fileobj, fileobj=fileobj, transparent=True)
            gz = gzip.GzipFile(fileobj=fileobj, mode=file_mode, compresslevel=level)
        except Exception:
            fileobj.close()
            raise
        return GzipResource(stream=gz, fileobj=fileobj)

    def close(self, resource: GzipResource) -> None:
        try:
            if not resource.transparent:
                resource.stream.close()
        finally:
            resource.fileobj.close()

    def readinto(self, resource: GzipResource, view: memoryview) -> int:
        n = resource.stream.readinto(view)
        return n or 0

    def bulk_read(self, resource: GzipResource, size: int) -> bytes:
        # no unbuffered equivalent for a compressed stream
        return resource.stream.read(size)

    def write(self, resource: GzipResource, data: Any) -> int:
        return resource.stream.write(data)

    def seek(self, resource: GzipResource, offset: int, whence: int) -> int:
        return resource.stream.seek(offset, whence)

    def tell(self, resource: GzipResource) -> int:
        return resource.stream.tell()

    def seekable(self, resource: GzipResource) -> bool:
        return False

    def set_buffer(self, resource: GzipResource, size: int) -> bool:
        # Only a hint: the handle keeps the size and applies it on the next open
        return True
