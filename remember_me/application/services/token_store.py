# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from remember_me.domain.users.entities import StoredCredential, User
from remember_me.domain.users.exceptions import MismatchError, NotFoundError, StoreError
from remember_me.domain.users.repositories import UserRepository
from remember_me.infrastructure.crypto import CryptoAdapter
from remember_me.shared.logging import logger


class TokenStore:
    """Keeps the hashed remember-me token on the user record."""

    def __init__(
        self,
        *,
        users: UserRepository,
        crypto: CryptoAdapter,
        scope: Mapping[str, Any] | None = None,
        contain: Sequence[str] | None = None,
    ) -> None:
        self._users = users
        self._crypto = crypto
        self._scope = dict(scope or {})
        self._contain = list(contain) if contain else None

    def persist(self, user_id: int, raw_token: str) -> StoredCredential:
        """Replace the user's stored hash with the hash of ``raw_token``.

        Concurrent issuances for one user race here; the last write wins.

        Raises:
            StoreError: the user does not exist or the write failed.
        """
        credential = StoredCredential(user_id=user_id, token_hash=self._crypto.hash(raw_token))
        if not self._users.update_token_hash(user_id, credential.token_hash):
            raise StoreError(context={"reason": "user_not_found", "user_id": user_id})
        logger.debug(f"remember_me.store: token hash replaced for user_id={user_id}")
        return credential

    def invalidate(self, user_id: int) -> None:
        if not self._users.update_token_hash(user_id, None):
            raise StoreError(context={"reason": "user_not_found", "user_id": user_id})
        logger.debug(f"remember_me.store: token hash cleared for user_id={user_id}")

    def verify(self, username: str, raw_token: str) -> User:
        user = self._users.find_by_username(
            username, scope=self._scope, contain=self._contain
        )
        if user is None:
            raise NotFoundError(context={"reason": "unknown_user"})
        if not self._crypto.verify(raw_token, user.token_hash):
            raise MismatchError(context={"reason": "token_mismatch", "user_id": user.id})
        return user


__all__ = ["TokenStore"]
