# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from remember_me.domain.users.entities import User
from remember_me.domain.users.exceptions import InvalidCredentialsError
from remember_me.domain.users.repositories import PasswordHasher, UserRepository

# Compared against when the username is unknown so both paths hash once.
_DUMMY_HASH = "pbkdf2:sha256:1000$dummy$0000000000000000000000000000000000000000000000000000000000000000"


class LoginUserUseCase:
    """Primary username/password check done by the host application."""

    def __init__(self, *, users: UserRepository, password_hasher: PasswordHasher) -> None:
        self._users = users
        self._password_hasher = password_hasher

    def execute(self, username: str, password: str) -> User:
        user = self._users.find_by_username(username)
        if user is None:
            self._password_hasher.verify(password, _DUMMY_HASH)
            raise InvalidCredentialsError()
        if not user.is_active or not self._password_hasher.verify(password, user.password_hash):
            raise InvalidCredentialsError()
        return user
