"""
Audit logger adapter - Implements AuditLogger protocol.

Writes the authentication audit trail to the dedicated "auth" logger so it
can be routed separately from application logs.
"""

import logging

auth_logger = logging.getLogger("auth")


class LoggingAuditLogger:
    """Implements AuditLogger protocol via the standard logging module."""

    def append(self, line: str) -> None:
        auth_logger.info(line)
