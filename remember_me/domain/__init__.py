# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .exceptions import InvariantViolation
from .users.entities import CookiePayload, CookieSpec, RememberToken, StoredCredential, User

__all__ = [
    "CookiePayload",
    "CookieSpec",
    "RememberToken",
    "StoredCredential",
    "User",
    "InvariantViolation",
]
