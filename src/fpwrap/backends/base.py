from __future__ import annotations

import zlib
from typing import Any, Protocol, runtime_checkable

from ..models import BackendKind

# Exceptions a backend primitive may raise for a failed read/write/seek/tell.
# StreamHandle converts these into return-value sentinels.
BACKEND_ERRORS: tuple[type[BaseException], ...] = (OSError, ValueError, EOFError, zlib.error)


def normalize_mode(mode: str) -> str:
    """Return ``mode`` as a binary mode string understood by ``open``.

    C-style modes distinguish text and binary only on some platforms; the
    handle is always binary, so ``t`` is dropped and ``b`` is added.
    """
    mode = mode.replace("t", "")
    if "b" not in mode:
        mode += "b"
    return mode


@runtime_checkable
class StreamBackend(Protocol):
    """The narrow set of primitives a StreamHandle forwards to.

    There are exactly two implementations, PlainBackend and GzipBackend.
    ``open`` returns a backend-specific resource object that is passed back
    into every other primitive. Primitives raise one of BACKEND_ERRORS on
    failure; they never retry.
    """

    kind: BackendKind

    def open(self, path: str, mode: str, buffer_size: int) -> Any:
        ...

    def close(self, resource: Any) -> None:
        ...

    def readinto(self, resource: Any, view: memoryview) -> int:
        """Fill ``view`` from the stream; fewer bytes only at end-of-stream."""
        ...

    def bulk_read(self, resource: Any, size: int) -> bytes:
        ...

    def write(self, resource: Any, data: Any) -> int:
        ...

    def seek(self, resource: Any, offset: int, whence: int) -> int:
        ...

    def tell(self, resource: Any) -> int:
        ...

    def seekable(self, resource: Any) -> bool:
        ...

    def set_buffer(self, resource: Any, size: int) -> bool:
        """Apply a new buffer size to an open resource.

        Returns False when the size can only take effect on the next open.
        """
        ...
