from __future__ import annotations


class FpWrapError(Exception):
    """Base class for errors raised by fpwrap."""


class OpenError(FpWrapError, OSError):
    """The backend could not open ``path`` with ``mode``.

    The handle that raised it is left closed.
    """

    def __init__(self, path: str, mode: str):
        super().__init__(f"Could not open file at {path} with mode {mode}")
        self.path = path
        self.mode = mode


class HandleClosedError(FpWrapError, ValueError):
    def __init__(self, operation: str):
        super().__init__(f"{operation} on a closed handle")
        self.operation = operation
