# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .interfaces import CookieTransport
from .services.authenticator import AuthOutcome, AuthState, RememberMeAuthenticator
from .services.token_store import TokenStore

__all__ = [
    "AuthOutcome",
    "AuthState",
    "CookieTransport",
    "RememberMeAuthenticator",
    "TokenStore",
]
