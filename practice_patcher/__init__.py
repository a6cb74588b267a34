"""
Practice Patcher - Hyper Demon practice patch tool

Applies and removes a catalog of verified byte patches on the game
binary. Every region is checked against its expected bytes before it is
overwritten, and the file is only rewritten when every patch succeeded.
"""

__version__ = "0.1.0"
__author__ = "Practice Patcher Development Team"

from .errors import (  # noqa: F401
    AlreadyPatchedError,
    AlreadyUnpatchedError,
    BinaryModifiedError,
    ErrorKind,
    MissingBinaryError,
    PatchError,
    ReadFailError,
    StrangeInputError,
    WriteFailError,
)
from .patch import CompositePatch, PatchDescriptor, PatchState, find_overlaps  # noqa: F401
