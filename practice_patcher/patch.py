#!/usr/bin/env python3
"""
Hyper Demon Practice Patcher - Patch Engine
===========================================

Date: October 19, 2026
License: GNU General Public License v3.0 (GPL-3.0)

Description:
    Verify-then-overwrite byte substitutions on an in-memory copy of the
    game binary. A PatchDescriptor only writes when the region holds
    exactly the bytes it expects, so an updated or hand-edited binary is
    reported instead of silently corrupted. CompositePatch groups
    descriptors (and other composites) into one ordered, fail-fast call.

    The engine never touches the filesystem; the caller owns the buffer
    and decides whether to persist it.

Classes:
    PatchState(Enum) - Read-only state of a region or group of regions
    PatchDescriptor - One region substitution (location, before, after)
    CompositePatch - Ordered, nestable group of patch nodes

Functions:
    find_overlaps(node: PatchNode) -> List[Tuple[PatchDescriptor, PatchDescriptor]]

Variables (Module-level):
    logger: logging.Logger - Module logger
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Tuple, Type, Union

from .errors import (
    AlreadyPatchedError,
    AlreadyUnpatchedError,
    BinaryModifiedError,
    PatchError,
    ReadFailError,
)

logger = logging.getLogger(__name__)


class PatchState(Enum):
    UNPATCHED = "unpatched"
    PATCHED = "patched"
    MODIFIED = "modified"
    OUT_OF_BOUNDS = "out_of_bounds"
    MIXED = "mixed"


@dataclass(frozen=True)
class PatchDescriptor:
    """A single region of the binary that can be swapped between two states.

    ``patch`` checks ``len(before)`` bytes at ``location`` and writes
    ``after``; ``unpatch`` checks ``len(after)`` bytes and writes
    ``before``. Equality with the expected bytes is tested first, so a
    descriptor whose before and after are identical always succeeds.

    Example:
        >>> beef_to_face = PatchDescriptor(0x02, b"\\xbe\\xef", b"\\xfa\\xce")
        >>> buf = bytearray(b"\\xde\\xad\\xbe\\xef")
        >>> beef_to_face.patch(buf)
        >>> bytes(buf)
        b'\\xde\\xad\\xfa\\xce'
    """
    location: int
    before: bytes
    after: bytes
    name: str = ""
    description: str = ""

    def __post_init__(self):
        if self.location < 0:
            raise ValueError(f"Patch location must be unsigned, got {self.location}")
        # Accept bytearray/list input but always store immutable bytes
        object.__setattr__(self, "before", bytes(self.before))
        object.__setattr__(self, "after", bytes(self.after))

    @property
    def label(self) -> str:
        return self.name or f"patch@0x{self.location:08X}"

    def patch(self, buf: bytearray) -> None:
        """Write ``after`` over the region if it currently holds ``before``.

        Raises:
            ReadFailError: Region lies past the end of the buffer
            AlreadyPatchedError: Region already holds ``after``
            BinaryModifiedError: Region holds neither form
        """
        self._swap(buf, self.before, self.after, AlreadyPatchedError)
        logger.debug(f"Patched {self.label} @ 0x{self.location:08X} ({len(self.after)} bytes)")

    def unpatch(self, buf: bytearray) -> None:
        """Restore ``before`` over the region if it currently holds ``after``.

        Raises:
            ReadFailError: Region lies past the end of the buffer
            AlreadyUnpatchedError: Region already holds ``before``
            BinaryModifiedError: Region holds neither form
        """
        self._swap(buf, self.after, self.before, AlreadyUnpatchedError)
        logger.debug(f"Unpatched {self.label} @ 0x{self.location:08X} ({len(self.before)} bytes)")

    def _swap(self, buf: bytearray, expected: bytes, replacement: bytes,
              already_error: Type[PatchError]) -> None:
        end = self.location + len(expected)
        if end > len(buf):
            raise ReadFailError(
                f"{self.label}: region 0x{self.location:08X}-0x{end:08X} "
                f"is outside the binary ({len(buf)} bytes)",
                descriptor=self,
            )

        region = bytes(buf[self.location:end])
        if region != expected:
            if region == replacement:
                raise already_error(f"{self.label}: region already holds {replacement.hex()}",
                                    descriptor=self)
            raise BinaryModifiedError(
                f"{self.label}: expected {expected.hex()} @ 0x{self.location:08X}, "
                f"found {region.hex()}",
                descriptor=self,
            )

        buf[self.location:end] = replacement

    def state(self, buf: bytes) -> PatchState:
        """Inspect the region without modifying it."""
        before_end = self.location + len(self.before)
        after_end = self.location + len(self.after)
        if before_end > len(buf) and after_end > len(buf):
            return PatchState.OUT_OF_BOUNDS
        if before_end <= len(buf) and bytes(buf[self.location:before_end]) == self.before:
            return PatchState.UNPATCHED
        if after_end <= len(buf) and bytes(buf[self.location:after_end]) == self.after:
            return PatchState.PATCHED
        return PatchState.MODIFIED

    def descriptors(self) -> Iterator["PatchDescriptor"]:
        yield self

    @property
    def span(self) -> Tuple[int, int]:
        """Widest [start, end) range this descriptor can touch."""
        return self.location, self.location + max(len(self.before), len(self.after))

    def __repr__(self):
        return (f"PatchDescriptor({self.label}, @0x{self.location:08X}, "
                f"{self.before.hex()} -> {self.after.hex()})")


@dataclass(frozen=True)
class CompositePatch:
    """Ordered group of descriptors and/or nested groups.

    Members run in declared order for both directions. The first failure
    propagates unchanged and the remaining members are not called; members
    that already succeeded are left applied in the buffer.
    """
    members: Tuple["PatchNode", ...] = field(default_factory=tuple)
    name: str = ""
    description: str = ""

    def __post_init__(self):
        members = tuple(self.members)
        for member in members:
            if not isinstance(member, (PatchDescriptor, CompositePatch)):
                raise TypeError(f"Unsupported patch member: {member!r}")
        object.__setattr__(self, "members", members)

    @classmethod
    def of(cls, *members: "PatchNode", name: str = "", description: str = "") -> "CompositePatch":
        return cls(members=members, name=name, description=description)

    @property
    def label(self) -> str:
        return self.name or f"group of {len(self.members)}"

    def patch(self, buf: bytearray) -> None:
        logger.debug(f"Patching {self.label} ({len(self.members)} members)")
        for member in self.members:
            member.patch(buf)

    def unpatch(self, buf: bytearray) -> None:
        logger.debug(f"Unpatching {self.label} ({len(self.members)} members)")
        for member in self.members:
            member.unpatch(buf)

    def descriptors(self) -> Iterator[PatchDescriptor]:
        """Leaf descriptors, depth first, in application order."""
        for member in self.members:
            yield from member.descriptors()

    def state(self, buf: bytes) -> PatchState:
        states = {d.state(buf) for d in self.descriptors()}
        if not states:
            return PatchState.UNPATCHED
        if len(states) == 1:
            return states.pop()
        if PatchState.OUT_OF_BOUNDS in states:
            return PatchState.OUT_OF_BOUNDS
        if PatchState.MODIFIED in states:
            return PatchState.MODIFIED
        return PatchState.MIXED

    def __len__(self):
        return len(self.members)

    def __repr__(self):
        return f"CompositePatch({self.label}, {len(self.members)} members)"


PatchNode = Union[PatchDescriptor, CompositePatch]


def find_overlaps(node: PatchNode) -> List[Tuple[PatchDescriptor, PatchDescriptor]]:
    """Return every pair of leaf descriptors whose regions intersect.

    patch/unpatch never call this; the result of applying overlapping
    descriptors depends on their order.
    """
    leaves = sorted(node.descriptors(), key=lambda d: d.span)
    overlaps: List[Tuple[PatchDescriptor, PatchDescriptor]] = []
    for i, first in enumerate(leaves):
        _, first_end = first.span
        for second in leaves[i + 1:]:
            second_start, _ = second.span
            if second_start >= first_end:
                break
            overlaps.append((first, second))
    if overlaps:
        logger.debug(f"Found {len(overlaps)} overlapping region pair(s)")
    return overlaps
