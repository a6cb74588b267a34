#!/usr/bin/env python3
"""
Hyper Demon Practice Patcher - Error Taxonomy
=============================================

Date: October 19, 2026
License: GNU General Public License v3.0 (GPL-3.0)

Description:
    Closed set of failure reasons shared by the patch engine, the driver
    and the CLI. Every failure is fatal for the current run; nothing is
    retried. Each kind has a fixed message that the CLI prints as-is.

Classes:
    ErrorKind(Enum) - Identifier for each failure reason
    PatchError(Exception) - Base class of all run failures
    MissingBinaryError, ReadFailError, WriteFailError,
    AlreadyPatchedError, AlreadyUnpatchedError, BinaryModifiedError,
    StrangeInputError - One subclass per ErrorKind
"""

from enum import Enum
from typing import Any, Optional


class ErrorKind(Enum):
    """Failure reasons, named after the messages the user sees."""
    MISSING_BINARY = "missing_binary"
    READ_FAIL = "read_fail"
    WRITE_FAIL = "write_fail"
    ALREADY_PATCHED = "already_patched"
    ALREADY_UNPATCHED = "already_unpatched"
    BINARY_MODIFIED = "binary_modified"
    STRANGE_INPUT = "strange_input"


class PatchError(Exception):
    """Raised when a patch/unpatch run cannot complete.

    Subclasses set ``kind`` and ``message``. The optional ``descriptor``
    is the leaf that failed, kept for logging only.
    """

    kind: ErrorKind
    message: str = "Err: Patching failed!"

    def __init__(self, detail: Optional[str] = None, descriptor: Any = None):
        self.detail = detail
        self.descriptor = descriptor
        super().__init__(detail or self.message)

    @property
    def is_failure(self) -> bool:
        """False only for the harmless 'nothing selected' outcome."""
        return True

    def __repr__(self):
        return f"{type(self).__name__}({self.detail or self.message!r})"


class MissingBinaryError(PatchError):
    """Target binary could not be opened."""
    kind = ErrorKind.MISSING_BINARY
    message = "Err: Could not find hyperdemon.exe!"

    def __init__(self, detail: Optional[str] = None, binary_name: str = "hyperdemon.exe"):
        self.binary_name = binary_name
        self.message = f"Err: Could not find {binary_name}!"
        super().__init__(detail)

    @property
    def hint(self) -> str:
        return 'Move this patcher program to "steamapps\\common\\hyperdemon" and run it there.'


class ReadFailError(PatchError):
    """File could not be read, or a region lies outside of it."""
    kind = ErrorKind.READ_FAIL
    message = "Err: An error occured while reading the game binary!"


class WriteFailError(PatchError):
    kind = ErrorKind.WRITE_FAIL
    message = "Err: Something went wrong while writing to the game binary!"


class AlreadyPatchedError(PatchError):
    kind = ErrorKind.ALREADY_PATCHED
    message = "Err: The game is already patched!"


class AlreadyUnpatchedError(PatchError):
    kind = ErrorKind.ALREADY_UNPATCHED
    message = "Err: The game is already unpatched!"


class BinaryModifiedError(PatchError):
    """Region matches neither the original nor the patched bytes."""
    kind = ErrorKind.BINARY_MODIFIED
    message = "Err: The game has been modifed (was there an update?)"


class StrangeInputError(PatchError):
    """User chose neither patch nor unpatch. Not a real failure."""
    kind = ErrorKind.STRANGE_INPUT
    message = "Nothing happened."

    @property
    def is_failure(self) -> bool:
        return False

