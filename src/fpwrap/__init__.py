"""Uniform stream handles over plain and gzip-compressed files."""

from .errors import FpWrapError, HandleClosedError, OpenError
from .handle import FileHandle, GzipHandle, StreamHandle
from .models import PROBE_FAILURE, BackendKind, ProbeReport, StreamInfo
from .probe import probe_size

__version__ = "0.1.0"

__all__ = [
    "BackendKind",
    "FileHandle",
    "FpWrapError",
    "GzipHandle",
    "HandleClosedError",
    "OpenError",
    "PROBE_FAILURE",
    "ProbeReport",
    "StreamHandle",
    "StreamInfo",
    "probe_size",
]
