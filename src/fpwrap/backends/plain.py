from __future__ import annotations

import io
import logging
import os
import stat
from dataclasses import dataclass
from typing import Any

from ..models import BackendKind
from .base import StreamBackend, normalize_mode

logger = logging.getLogger(__name__)


def wrap_raw(raw: io.RawIOBase, buffer_size: int) -> io.BufferedIOBase:
    """Attach a buffered wrapper of ``buffer_size`` bytes to an unbuffered file."""
    if raw.readable() and raw.writable():
        return io.BufferedRandom(raw, buffer_size)
    if raw.writable():
        return io.BufferedWriter(raw, buffer_size)
    return io.BufferedReader(raw, buffer_size)


@dataclass
class PlainResource:
    # The buffered wrapper owns its buffer. It is replaced, never resized in place.
    stream: io.BufferedIOBase

    @property
    def raw(self) -> io.RawIOBase:
        return self.stream.raw  # type: ignore[attr-defined]

    def fileno(self) -> int:
        return self.stream.fileno()


class PlainBackend(StreamBackend):
    """Uncompressed buffered file backed by ``io.FileIO``."""

    kind = BackendKind.PLAIN

    def open(self, path: str, mode: str, buffer_size: int) -> PlainResource:
        raw = open(path, normalize_mode(mode), buffering=0)
        try:
            return PlainResource(stream=wrap_raw(raw, buffer_size))
        except Exception:
            raw.close()
            raise

    def close(self, resource: PlainResource) -> None:
        resource.stream.close()

    def readinto(self, resource: PlainResource, view: memoryview) -> int:
        n = resource.stream.readinto(view)
        return n or 0

    def bulk_read(self, resource: PlainResource, size: int) -> bytes:
        # Goes straight to the descriptor: data already read ahead into the
        # buffered wrapper is not returned here.
        return os.read(resource.fileno(), size)

    def write(self, resource: PlainResource, data: Any) -> int:
        return resource.stream.write(data)

    def seek(self, resource: PlainResource, offset: int, whence: int) -> int:
        return resource.stream.seek(offset, whence)

    def tell(self, resource: PlainResource) -> int:
        return resource.stream.tell()

    def seekable(self, resource: PlainResource) -> bool:
        return not stat.S_ISFIFO(os.fstat(resource.fileno()).st_mode)

    def set_buffer(self, resource: PlainResource, size: int) -> bool:
        old = resource.stream
        raw_seekable = resource.raw.seekable()
        if old.readable() and not raw_seekable:
            # Read-ahead held by the old wrapper cannot be pushed back into a pipe
            logger.debug("deferring buffer resize on non-seekable reader %s", getattr(old, "name", "?"))
            return False
        position = old.tell() if raw_seekable else None
        old.flush()
        raw = old.detach()
        if position is not None:
            raw.seek(position)
        resource.stream = wrap_raw(raw, size)
        return True
