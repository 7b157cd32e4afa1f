from __future__ import annotations

import logging
import os
import struct
from typing import Any, ClassVar

from .backends import BACKEND_ERRORS, StreamBackend, get_backend
from .config import get_settings
from .errors import HandleClosedError, OpenError
from .models import BackendKind, StreamInfo

logger = logging.getLogger(__name__)

_DEFAULT_FORMATS: dict[type, str] = {bool: "?", int: "=q", float: "=d"}


class StreamHandle:
    """One open file or gzip stream behind a single read/write/seek interface.

    The backend is chosen once, at construction, from ``kind`` and never
    changes for the lifetime of the handle. Code written against a
    StreamHandle runs unchanged over either backend.

    Args:
        path: Optional path to open immediately.
        mode: C-style mode string (``"rb"``, ``"w"``, ``"ab"``; gzip modes may
            carry a level digit such as ``"wb9"``).
        kind: BackendKind.PLAIN or BackendKind.COMPRESSED.
        buffer_size: Size of the I/O buffer; defaults to
            ``Settings.default_buffer_size``.

    Error policy:
        - ``open`` raises OpenError; the handle is left closed.
        - Data operations on a closed handle raise HandleClosedError.
        - Backend failures during read/write/tell are reported as sentinels
          (``-1``, ``b""``, ``0``) with ``last_error`` set; ``seek`` returns
          False. Nothing is retried.
        - ``close`` never raises.

    The handle is a context manager, and an open handle is closed when it is
    garbage collected, so the resource is always released exactly once.
    """

    default_kind: ClassVar[BackendKind] = BackendKind.PLAIN

    def __init__(
        self,
        path: str | os.PathLike[str] | None = None,
        mode: str = "rb",
        *,
        kind: BackendKind | str | None = None,
        buffer_size: int | None = None,
    ):
        self._resource: Any = None
        self._path = ""
        self._mode = ""
        self._eof = False
        self.last_error: str | None = None
        self._kind = BackendKind(kind) if kind is not None else self.default_kind
        self._backend: StreamBackend = get_backend(self._kind)
        if buffer_size is None:
            buffer_size = get_settings().default_buffer_size
        if buffer_size < 1:
            raise ValueError(f"buffer_size must be positive, got {buffer_size}")
        self._buffer_size = buffer_size
        if path is not None:
            self.open(path, mode)

    # --- capabilities ---

    @property
    def kind(self) -> BackendKind:
        return self._kind

    @property
    def is_gz(self) -> bool:
        return self._kind.is_gz

    @property
    def maybe_seekable(self) -> bool:
        """False when no resource of this kind can ever be seekable."""
        return not self._kind.is_gz

    @property
    def path(self) -> str:
        return self._path

    @property
    def mode(self) -> str:
        return self._mode

    @property
    def resource(self) -> Any:
        """The live backend resource, or None when closed."""
        return self._resource

    @property
    def buffer_size(self) -> int:
        return self._buffer_size

    def is_open(self) -> bool:
        return self._resource is not None

    def _require_open(self, operation: str) -> Any:
        if self._resource is None:
            raise HandleClosedError(operation)
        return self._resource

    def _record_error(self, operation: str, exc: BaseException) -> None:
        self.last_error = f"{operation}: {exc}"
        logger.warning("%s failed on %s: %s", operation, self._path, exc)

    def clear_error(self) -> None:
        self.last_error = None

    # --- lifecycle ---

    def open(self, path: str | os.PathLike[str], mode: str = "rb") -> None:
        if self._resource is not None:
            self.close()
        path = os.fspath(path)
        try:
            resource = self._backend.open(path, mode, self._buffer_size)
        except (OSError, ValueError) as e:
            raise OpenError(path, mode) from e
        self._resource = resource
        self._path = path
        self._mode = mode
        self._eof = False
        self.last_error = None
        logger.debug("Opened file at path %s with mode '%s'", path, mode)

    def close(self) -> None:
        resource = self._resource
        if resource is None:
            return
        # Cleared first so a failing close still leaves the handle closed
        self._resource = None
        try:
            self._backend.close(resource)
        except Exception:
            logger.debug("error while closing %s", self._path, exc_info=True)
        logger.debug("Closed file at %s", self._path)
        self._path = ""
        self._mode = ""

    def __enter__(self) -> StreamHandle:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __del__(self) -> None:
        # __init__ may have failed before _resource was set
        if getattr(self, "_resource", None) is not None:
            self.close()

    def __repr__(self) -> str:
        state = f"open {self._path!r} mode={self._mode!r}" if self.is_open() else "closed"
        return f"<{type(self).__name__} {self._kind.value} {state}>"

    # --- reading ---

    def readinto(self, buffer: Any, size: int | None = None) -> int:
        """Read up to ``size`` bytes into a writable buffer.

        Returns the number of bytes read, which is less than requested only at
        end-of-stream, or -1 if the backend failed.
        """
        resource = self._require_open("readinto")
        view = memoryview(buffer).cast("B")
        if size is not None:
            view = view[:size]
        try:
            n = self._backend.readinto(resource, view)
        except BACKEND_ERRORS as e:
            self._record_error("read", e)
            return -1
        if n < len(view):
            self._eof = True
        return n

    def read(self, size: int = -1) -> bytes:
        """Read up to ``size`` bytes; returns fewer only at end-of-stream.

        A negative ``size`` reads until end-of-stream, as ``io`` does.
        """
        if size < 0:
            chunks: list[bytes] = []
            while True:
                chunk = self.read(self._buffer_size)
                chunks.append(chunk)
                if len(chunk) < self._buffer_size:
                    return b"".join(chunks)
        buf = bytearray(size)
        n = self.readinto(buf)
        if n <= 0:
            return b""
        del buf[n:]
        return bytes(buf)

    def read_raw_bytes(self, fmt: str) -> Any:
        """Read ``struct.calcsize(fmt)`` raw bytes and unpack them.

        Returns a single value for one-field formats, a tuple otherwise, and
        None on a short read.
        """
        size = struct.calcsize(fmt)
        data = self.read(size)
        if len(data) < size:
            return None
        values = struct.unpack(fmt, data)
        return values[0] if len(values) == 1 else values

    def bulk_read(self, size: int) -> bytes:
        """Read without the buffered layer (plain files only).

        Mixing with ``read`` on the same plain handle skips any data already
        held in the buffer. On gzip streams this is the same as ``read``.
        """
        resource = self._require_open("bulk_read")
        try:
            data = self._backend.bulk_read(resource, size)
        except BACKEND_ERRORS as e:
            self._record_error("bulk_read", e)
            return b""
        if len(data) < size:
            self._eof = True
        return data

    def getc(self) -> int:
        """Return the next byte as an int, or -1 at end-of-stream or on error."""
        data = self.read(1)
        return data[0] if data else -1

    def eof(self) -> bool:
        """True once a read has hit end-of-stream; cleared by a successful seek."""
        self._require_open("eof")
        return self._eof

    # --- writing ---

    def write(self, data: Any) -> int:
        """Write a bytes-like object; returns bytes accepted (0 on failure)."""
        resource = self._require_open("write")
        try:
            n = self._backend.write(resource, data)
        except BACKEND_ERRORS as e:
            self._record_error("write", e)
            return 0
        return n if n is not None else 0

    def write_text(self, text: str, encoding: str = "utf-8") -> int:
        return self.write(text.encode(encoding))

    def write_raw_bytes(self, value: Any, fmt: str | None = None) -> int:
        """Write the binary representation of ``value``, not its text.

        Scalars are packed with ``struct``; without ``fmt`` an int is written as
        a native-order int64, a float as a double and a bool as one byte.
        Bytes-like values are written as they are. Strings must go through
        ``write_text``.
        """
        if isinstance(value, str):
            raise TypeError("write_raw_bytes() does not accept str; use write_text()")
        if fmt is None:
            if isinstance(value, (bytes, bytearray, memoryview)):
                return self.write(value)
            fmt = _DEFAULT_FORMATS.get(type(value))
            if fmt is None:
                raise TypeError(f"no default format for {type(value).__name__}; pass fmt")
        return self.write(struct.pack(fmt, value))

    def printf(self, fmt: str, *args: Any) -> int:
        """printf-style formatted write; returns the number of bytes written."""
        return self.write_text(fmt % args)

    # --- positioning ---

    def seek(self, offset: int, whence: int = os.SEEK_SET) -> bool:
        resource = self._require_open("seek")
        try:
            self._backend.seek(resource, offset, whence)
        except BACKEND_ERRORS as e:
            self._record_error("seek", e)
            return False
        self._eof = False
        return True

    def tell(self) -> int:
        resource = self._require_open("tell")
        try:
            return self._backend.tell(resource)
        except BACKEND_ERRORS as e:
            self._record_error("tell", e)
            return -1

    def seekable(self) -> bool:
        resource = self._require_open("seekable")
        if not self.maybe_seekable:
            return False
        try:
            return self._backend.seekable(resource)
        except OSError:
            logger.debug("fstat failed for %s", self._path, exc_info=True)
            return False

    def resize_buffer(self, size: int) -> bool:
        """Change the I/O buffer size.

        Plain files get a new buffer immediately, at the same logical position.
        Returns False when the new size can only apply from the next ``open``
        (a readable pipe, whose read-ahead cannot be kept).
        """
        if size < 1:
            raise ValueError(f"buffer size must be positive, got {size}")
        self._buffer_size = size
        if self._resource is None:
            return True
        try:
            return self._backend.set_buffer(self._resource, size)
        except BACKEND_ERRORS as e:
            self._record_error("resize_buffer", e)
            return False

    def info(self) -> StreamInfo:
        is_open = self.is_open()
        position = None
        if is_open:
            try:
                position = self._backend.tell(self._resource)
            except BACKEND_ERRORS:
                # pipes have no position
                position = None
        return StreamInfo(
            path=self._path,
            mode=self._mode,
            kind=self._kind,
            is_open=is_open,
            seekable=self.seekable() if is_open else False,
            buffer_size=self._buffer_size,
            position=position,
        )


class FileHandle(StreamHandle):
    """StreamHandle fixed to the plain-file backend."""

    default_kind = BackendKind.PLAIN

    def __init__(self, path=None, mode: str = "rb", *, buffer_size: int | None = None):
        super().__init__(path, mode, kind=self.default_kind, buffer_size=buffer_size)


class GzipHandle(StreamHandle):
    """StreamHandle fixed to the gzip backend."""

    default_kind = BackendKind.COMPRESSED

    def __init__(self, path=None, mode: str = "rb", *, buffer_size: int | None = None):
        super().__init__(path, mode, kind=self.default_kind, buffer_size=buffer_size)
