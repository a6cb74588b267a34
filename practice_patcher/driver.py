#!/usr/bin/env python3
"""
Hyper Demon Practice Patcher - Binary Driver
============================================

Date: October 19, 2026
License: GNU General Public License v3.0 (GPL-3.0)

Description:
    Owns the game binary for one run: opens it read/write, loads it
    fully into memory, runs the patch tree in the chosen direction and
    writes the buffer back only if every patch succeeded. On any failure
    the file on disk is left exactly as it was.

Classes:
    Action(Enum) - Patch or unpatch
    RunResult - Outcome of a successful run
    PatchDriver - Open/run/close lifecycle around one binary

Functions:
    parse_action(text: str) -> Action
    patch_binary(binary_path: Path, catalog: PatchNode, action: Action, ...) -> RunResult

Variables (Module-level):
    logger: logging.Logger - Module logger
"""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import BinaryIO, Optional

from . import backup_manager
from .catalog import CatalogError
from .errors import (
    MissingBinaryError,
    ReadFailError,
    StrangeInputError,
    WriteFailError,
)
from .patch import PatchNode, find_overlaps

logger = logging.getLogger(__name__)


class Action(Enum):
    PATCH = "patch"
    UNPATCH = "unpatch"


def parse_action(text: str) -> Action:
    """
    Map the user's answer to an Action by its first character.

    Raises:
        StrangeInputError: Answer starts with neither 'p' nor 'u'

    Example:
        >>> parse_action("Patch")
        <Action.PATCH: 'patch'>
    """
    answer = (text or "").strip()
    first = answer[:1].lower()
    if first == "p":
        return Action.PATCH
    if first == "u":
        return Action.UNPATCH
    raise StrangeInputError(f"Unrecognized choice: {answer!r}")


@dataclass
class RunResult:
    action: Action
    binary_path: Path
    patch_count: int
    bytes_written: int
    backup_path: Optional[Path] = None


class PatchDriver:
    """Runs a patch tree against one binary file.

    Usage:
        with PatchDriver(Path("hyperdemon.exe"), catalog) as driver:
            result = driver.run(Action.PATCH)
    """

    def __init__(self, binary_path: Path, catalog: PatchNode,
                 backups_dir: Optional[Path] = None,
                 reject_overlaps: bool = False):
        """
        Args:
            binary_path: Game binary to modify in place
            catalog: Patch tree to apply
            backups_dir: Where to keep a copy of the original bytes before
                writing. None disables backups.
            reject_overlaps: Refuse to run when two patches share bytes
        """
        self.binary_path = Path(binary_path)
        self.catalog = catalog
        self.backups_dir = Path(backups_dir) if backups_dir is not None else None
        self.reject_overlaps = reject_overlaps
        self._file: Optional[BinaryIO] = None
        self._original: bytes = b""

    def open(self) -> None:
        """
        Open the binary read/write and load its contents.

        Raises:
            MissingBinaryError: File cannot be opened
            ReadFailError: File cannot be read
        """
        try:
            self._file = open(self.binary_path, "r+b")
        except OSError as e:
            logger.error(f"Cannot open {self.binary_path}: {e}")
            raise MissingBinaryError(str(e), binary_name=self.binary_path.name) from e

        try:
            self._original = self._file.read()
        except OSError as e:
            self.close()
            logger.error(f"Cannot read {self.binary_path}: {e}")
            raise ReadFailError(str(e)) from e

        logger.info(f"Loaded {self.binary_path} ({len(self._original)} bytes)")

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None

    def __enter__(self) -> "PatchDriver":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def patch_count(self) -> int:
        return sum(1 for _ in self.catalog.descriptors())

    def check_overlaps(self) -> None:
        """
        Report overlapping regions in the catalog.

        Raises:
            CatalogError: Overlaps found and reject_overlaps is set
        """
        overlaps = find_overlaps(self.catalog)
        for first, second in overlaps:
            logger.warning(f"Overlapping patches: {first.label} and {second.label}")
        if overlaps and self.reject_overlaps:
            names = ", ".join(f"{a.label}/{b.label}" for a, b in overlaps)
            raise CatalogError(f"Catalog has overlapping patches: {names}")

    def run(self, action: Action) -> RunResult:
        """
        Apply the catalog in the given direction and persist on success.

        The first PatchError raised by the catalog propagates unchanged and
        nothing is written.
        """
        if self._file is None:
            raise RuntimeError("PatchDriver.run() called before open()")

        self.check_overlaps()

        buf = bytearray(self._original)
        logger.info(f"{action.value.capitalize()}ing {self.patch_count} region(s) in {self.binary_path.name}")
        if action is Action.PATCH:
            self.catalog.patch(buf)
        else:
            self.catalog.unpatch(buf)

        backup_path = None
        if self.backups_dir is not None:
            try:
                backup_path = backup_manager.create_backup(
                    self._original, self.binary_path.name, self.backups_dir)
            except backup_manager.BackupError as e:
                raise WriteFailError(str(e)) from e

        self._write(bytes(buf))
        self._original = bytes(buf)

        logger.info(f"Saved {self.binary_path} ({len(buf)} bytes)")
        return RunResult(
            action=action,
            binary_path=self.binary_path,
            patch_count=self.patch_count,
            bytes_written=len(buf),
            backup_path=backup_path,
        )

    def _write(self, data: bytes) -> None:
        try:
            self._file.seek(0)
            self._file.write(data)
            self._file.truncate()
            self._file.flush()
        except OSError as e:
            logger.error(f"Cannot write {self.binary_path}: {e}")
            raise WriteFailError(str(e)) from e


def patch_binary(binary_path: Path, catalog: PatchNode, action: Action,
                 backups_dir: Optional[Path] = None,
                 reject_overlaps: bool = False) -> RunResult:
    """One-shot helper: open, run and close."""
    with PatchDriver(binary_path, catalog, backups_dir=backups_dir,
                     reject_overlaps=reject_overlaps) as driver:
        return driver.run(action)
