#!/usr/bin/env python3
"""
Hyper Demon Practice Patcher - Operation Logger
===============================================

Date: October 19, 2026
License: GNU General Public License v3.0 (GPL-3.0)

Description:
    JSON-lines audit trail of patch/unpatch runs. Every run is appended
    to operations.log; failures are also appended to errors.log. A
    failure to write the log is reported through the module logger and
    never aborts the run being logged.

Classes:
    OperationLogger - Append and read back operation entries

Variables (Module-level):
    logger: logging.Logger - Module logger
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


class OperationLogger:
    """Manages the operations/errors log files in one directory."""

    def __init__(self, log_dir: Path):
        self.log_dir = Path(log_dir)
        self.operations_log = self.log_dir / 'operations.log'
        self.errors_log = self.log_dir / 'errors.log'

    def log_operation(self, operation: str, status: str, details: Optional[str] = None) -> bool:
        """
        Log an operation with status and optional details.

        Args:
            operation: Name of the operation ('patch', 'unpatch', ...)
            status: 'success', 'failure', 'warning' or 'info'
            details: Additional context

        Returns:
            True if logged successfully

        Example:
            >>> oplog = OperationLogger(Path('logs'))
            >>> oplog.log_operation('patch', 'success', '12 regions written')
        """
        entry = {
            'timestamp': datetime.now().isoformat(),
            'operation': operation,
            'status': status.upper(),
            'details': details or ''
        }
        line = json.dumps(entry) + '\n'

        try:
            self.log_dir.mkdir(parents=True, exist_ok=True)
            with open(self.operations_log, 'a', encoding='utf-8') as f:
                f.write(line)
            if entry['status'] in ('FAILURE', 'ERROR'):
                with open(self.errors_log, 'a', encoding='utf-8') as f:
                    f.write(line)
        except OSError as e:
            logger.error(f"Error logging operation: {e}")
            return False
        return True

    def get_recent_logs(self, count: int = 50) -> List[Dict[str, Any]]:
        """Most recent entries first."""
        if count <= 0:
            return []
        return self._read_entries(self.operations_log)[-count:][::-1]

    def get_error_logs(self, count: int = 50) -> List[Dict[str, Any]]:
        if count <= 0:
            return []
        return self._read_entries(self.errors_log)[-count:][::-1]

    def _read_entries(self, path: Path) -> List[Dict[str, Any]]:
        if not path.exists():
            return []

        entries = []
        with open(path, 'r', encoding='utf-8') as f:
            for line in f:
                line = line.strip()
                if not line:
                    continue
                try:
                    entries.append(json.loads(line))
                except json.JSONDecodeError:
                    # Skip malformed entries
                    continue
        return entries
