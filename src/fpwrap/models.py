from __future__ import annotations

import enum

from pydantic import BaseModel


class BackendKind(str, enum.Enum):
    PLAIN = "plain"
    COMPRESSED = "compressed"

    @property
    def is_gz(self) -> bool:
        return self is BackendKind.COMPRESSED


# Returned by probe_size when the path cannot be opened (UINT64_MAX)
PROBE_FAILURE = (1 << 64) - 1


class StreamInfo(BaseModel):
    """Snapshot of a handle's state, suitable for logging or JSON output."""
    path: str
    mode: str
    kind: BackendKind
    is_open: bool
    seekable: bool
    buffer_size: int
    position: int | None = None


class ProbeReport(BaseModel):
    path: str
    kind: BackendKind
    size: int | None
    ok: bool
