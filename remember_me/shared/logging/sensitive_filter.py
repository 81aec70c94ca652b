# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import re
from typing import Any

SENSITIVE_PATTERNS = [
    # Secrets
    (r"(secret[_-]?key\s*[:=]\s*['\"]?)([^\s'\"]{4,})(['\"]?)", r"\1***REDACTED***\3", re.IGNORECASE),

    # Tokens and token hashes
    (r"(bearer\s+)([a-zA-Z0-9_\-\.]{20,})", r"\1***REDACTED***", re.IGNORECASE),
    (r"(token(?:_hash)?\s*[:=]\s*['\"]?)([a-zA-Z0-9_\-\.:$=]{20,})(['\"]?)", r"\1***REDACTED***\3", re.IGNORECASE),
    (r"(login_cookie\s*[:=]\s*['\"]?)([^\s'\"]{8,})(['\"]?)", r"\1***REDACTED***\3", re.IGNORECASE),

    # Cookies (rememberMe=<fernet token>, Cookie/Set-Cookie headers)
    (r"(remember[_-]?me\s*=\s*['\"]?)([a-zA-Z0-9_\-=]{20,})(['\"]?)", r"\1***REDACTED***\3", re.IGNORECASE),
    (r"((?:set-)?cookie\s*:\s*)([^\r\n]+)", r"\1***REDACTED***", re.IGNORECASE),

    # Passwords
    (r"(password\s*[:=]\s*['\"]?)([^'\"]{6,})(['\"]?)", r"\1***REDACTED***\3", re.IGNORECASE),

    # Fernet tokens anywhere in free text
    (r"\bgAAAAA[a-zA-Z0-9_\-]{40,}={0,2}", r"***FERNET***"),

    # Database URLs with credentials
    (r"(postgres|postgresql|mysql|mongodb)://([^:]+):([^@]+)@", r"\1://\2:***REDACTED***@"),
]


def sanitize_message(message: str) -> str:
    sanitized = message

    for pattern_tuple in SENSITIVE_PATTERNS:
        if len(pattern_tuple) == 2:
            pattern, replacement = pattern_tuple
            flags = 0
        else:
            pattern, replacement, flags = pattern_tuple

        sanitized = re.sub(pattern, replacement, sanitized, flags=flags)

    return sanitized


def sanitize_record(record: dict[str, Any]) -> bool:
    if "message" in record:
        record["message"] = sanitize_message(record["message"])
    return True
