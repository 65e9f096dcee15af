"""Observability module for audit logging."""

from avx_sight.observability.audit import AuditSink, JSONLAuditSink, StdoutAuditSink

__all__ = ["AuditSink", "JSONLAuditSink", "StdoutAuditSink"]
