"""Audit trail and logging helpers."""

from .audit import AuditLog
from .logger import configure_logging

__all__ = ['AuditLog', 'configure_logging']
