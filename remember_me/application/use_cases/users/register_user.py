# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from datetime import UTC, datetime

from remember_me.domain.users.entities import User
from remember_me.domain.users.exceptions import UserAlreadyExistsError
from remember_me.domain.users.repositories import PasswordHasher, UserRepository


class RegisterUserUseCase:
    def __init__(self, *, users: UserRepository, password_hasher: PasswordHasher) -> None:
        self._users = users
        self._password_hasher = password_hasher

    def execute(self, username: str, password: str) -> User:
        if self._users.find_by_username(username):
            raise UserAlreadyExistsError()
        user = User(
            id=0,
            username=username,
            password_hash=self._password_hasher.hash(password),
            created_at=datetime.now(UTC),
        )
        return self._users.add(user)
