#!/usr/bin/env python3
"""
Hyper Demon Practice Patcher - Backup Manager
=============================================

Date: October 19, 2026
License: GNU General Public License v3.0 (GPL-3.0)

Description:
    Keeps a timestamped copy of the game binary before the patcher
    rewrites it, with a sha256 sidecar for later verification.

Backup File Naming Convention:
    Format: backup_YYYYMMDD_HHMMSS_<binary stem>.bin
    Example: backup_20261019_143022_hyperdemon.bin
             backup_20261019_143022_hyperdemon.bin.sha256

Classes:
    BackupError(Exception) - Backup operation errors

Functions:
    generate_backup_filename(binary_name: str) -> str
    calculate_checksum(data: bytes) -> str
    create_backup(data: bytes, binary_name: str, backups_dir: Path) -> Path
    verify_backup(backup_file: Path) -> Dict[str, Any]
    list_backups(backups_dir: Path) -> List[Path]

Variables (Module-level):
    logger: logging.Logger - Module logger
"""

import hashlib
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List

logger = logging.getLogger(__name__)

CHECKSUM_SUFFIX = ".sha256"


class BackupError(Exception):
    """Raised when backup operation fails"""
    pass


def generate_backup_filename(binary_name: str) -> str:
    """
    Generate standardized backup filename with timestamp.

    Example:
        >>> generate_backup_filename("hyperdemon.exe")
        'backup_20261019_143022_hyperdemon.bin'
    """
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return f"backup_{timestamp}_{Path(binary_name).stem}.bin"


def calculate_checksum(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def create_backup(data: bytes, binary_name: str, backups_dir: Path) -> Path:
    """
    Write ``data`` to a new backup file and its checksum sidecar.

    An existing backup with the same name (same second) gets a numeric
    suffix instead of being overwritten.

    Raises:
        BackupError: If the directory or files cannot be written
    """
    backups_dir = Path(backups_dir)
    base_name = generate_backup_filename(binary_name)
    backup_file = backups_dir / base_name
    counter = 1
    while backup_file.exists():
        backup_file = backups_dir / f"{Path(base_name).stem}_{counter}.bin"
        counter += 1

    checksum = calculate_checksum(data)
    try:
        backups_dir.mkdir(parents=True, exist_ok=True)
        backup_file.write_bytes(data)
        Path(str(backup_file) + CHECKSUM_SUFFIX).write_text(checksum + "\n", encoding="utf-8")
    except OSError as e:
        logger.error(f"Backup failed: {e}")
        raise BackupError(f"Cannot write backup {backup_file}: {e}") from e

    logger.info(f"Backup created: {backup_file} ({len(data)} bytes, sha256 {checksum[:16]}...)")
    return backup_file


def verify_backup(backup_file: Path) -> Dict[str, Any]:
    """
    Recompute a backup's checksum and compare it with its sidecar.

    Returns:
        {'valid': bool, 'file_size': int, 'checksum': str | None, 'errors': List[str]}
    """
    backup_file = Path(backup_file)
    result: Dict[str, Any] = {
        'valid': False,
        'file_size': 0,
        'checksum': None,
        'errors': []
    }

    if not backup_file.is_file():
        result['errors'].append(f"File not found: {backup_file}")
        return result

    data = backup_file.read_bytes()
    result['file_size'] = len(data)
    result['checksum'] = calculate_checksum(data)

    sidecar = Path(str(backup_file) + CHECKSUM_SUFFIX)
    if not sidecar.is_file():
        result['errors'].append(f"Checksum file missing: {sidecar.name}")
    else:
        expected = sidecar.read_text(encoding="utf-8").strip()
        if expected != result['checksum']:
            result['errors'].append("Checksum mismatch")

    result['valid'] = not result['errors']
    return result


def list_backups(backups_dir: Path) -> List[Path]:
    """Backup files in ``backups_dir``, newest first."""
    backups_dir = Path(backups_dir)
    if not backups_dir.is_dir():
        return []
    return sorted(backups_dir.glob("backup_*.bin"), reverse=True)
