# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from enum import Enum
from typing import Any

from remember_me.shared.logging import logger


class AuditAction(str, Enum):
    # Primary authentication
    LOGIN_SUCCESS = "login_success"
    LOGIN_FAILED = "login_failed"
    LOGOUT = "logout"

    # Remember-me lifecycle
    REMEMBER_ME_ISSUED = "remember_me_issued"
    REMEMBER_ME_ISSUE_FAILED = "remember_me_issue_failed"
    REMEMBER_ME_VERIFIED = "remember_me_verified"
    REMEMBER_ME_DENIED = "remember_me_denied"
    REMEMBER_ME_CLEARED = "remember_me_cleared"
    REMEMBER_ME_INVALIDATED = "remember_me_invalidated"


_SENSITIVE_KEYS = {
    "password",
    "token",
    "cookie",
    "hash",
    "secret",
    "key",
}


def _sanitize_details(details: dict[str, Any]) -> dict[str, Any]:
    sanitized = {}
    for key, value in details.items():
        key_lower = key.lower()

        if any(sensitive in key_lower for sensitive in _SENSITIVE_KEYS):
            sanitized[key] = "***REDACTED***"
        else:
            sanitized[key] = value

    return sanitized


class AuditLogger:
    @staticmethod
    def log(
        action: AuditAction,
        user_id: int | None = None,
        ip_address: str | None = None,
        details: dict[str, Any] | None = None,
        success: bool = True,
    ) -> None:
        safe_details = _sanitize_details(details) if details else {}

        log_message = (
            f"AUDIT: {action.value} | "
            f"user_id={user_id} | "
            f"ip={ip_address} | "
            f"success={success}"
        )
        if safe_details:
            log_message += f" | details={safe_details}"

        if success:
            logger.info(log_message)
        else:
            logger.warning(log_message)


audit = AuditLogger()


def audit_log(
    action: AuditAction,
    user_id: int | None = None,
    ip_address: str | None = None,
    details: dict[str, Any] | None = None,
    success: bool = True,
) -> None:
    audit.log(action, user_id, ip_address, details, success)


__all__ = [
    "AuditAction",
    "AuditLogger",
    "audit",
    "audit_log",
]
