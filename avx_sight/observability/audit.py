"""Audit logging interfaces and implementations for AVX Sight.

This module provides the AuditSink abstract interface for recording access
and scan operations, along with concrete implementations for different
logging backends.
"""

import json
from abc import ABC, abstractmethod
from pathlib import Path

from avx_sight.models import AuditEvent


class AuditSink(ABC):
    """Abstract interface for audit logging.

    Access decisions (granted, denied, cancelled), grant changes, per-root
    scan completions and surfaced errors are all reported through an
    AuditSink so that a scan can be reconstructed after the fact.
    """

    @abstractmethod
    def log(self, event: AuditEvent) -> None:
        """Record an audit event.

        Args:
            event: The AuditEvent to record

        Raises:
            Implementation-specific exceptions for logging failures.
        """
        pass


class JSONLAuditSink(AuditSink):
    """Appends audit events to a JSONL (JSON Lines) file.

    Example log file content:
        {"ts":"2024-01-01T12:00:00","kind":"access","path":"/Library",...}
        {"ts":"2024-01-01T12:00:01","kind":"scan","path":"/Library","domain":"system","count":42,...}
    """

    def __init__(self, log_path: Path):
        """Initialize JSONLAuditSink with log file path.

        Args:
            log_path: Path to the JSONL log file. Parent directories are
                      created if they don't exist.
        """
        self.log_path = Path(log_path)
        self.log_path.parent.mkdir(parents=True, exist_ok=True)

    def log(self, event: AuditEvent) -> None:
        """Append audit event as a JSON line to the log file.

        Raises:
            OSError: If the log file cannot be written to.
        """
        json_line = json.dumps(event.to_dict(), separators=(',', ':'))

        with open(self.log_path, 'a', encoding='utf-8') as f:
            f.write(json_line + '\n')


class StdoutAuditSink(AuditSink):
    """Prints audit events to stdout, one JSON line each."""

    def log(self, event: AuditEvent) -> None:
        print(json.dumps(event.to_dict(), separators=(',', ':')))
