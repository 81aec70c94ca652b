# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Protocol

from .entities import User


class UserRepository(Protocol):
    def find_by_username(
        self,
        username: str,
        *,
        scope: Mapping[str, Any] | None = None,
        contain: Sequence[str] | None = None,
    ) -> User | None: ...

    def find_by_id(self, user_id: int) -> User | None: ...

    def add(self, user: User) -> User: ...

    def update_token_hash(self, user_id: int, token_hash: str | None) -> bool:
        """Overwrite the stored token hash; False when the user does not exist."""
        ...


class PasswordHasher(Protocol):
    def hash(self, password: str) -> str: ...
    def verify(self, password: str, hashed: str) -> bool: ...
