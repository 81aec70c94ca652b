from __future__ import annotations

import os
import tempfile
from collections.abc import Mapping, Sequence
from dataclasses import replace
from datetime import UTC, datetime
from typing import Any

import pytest

# The engine is built from DATABASE_URL at import time.
_DB_DIR = tempfile.mkdtemp(prefix="remember-me-tests-")
os.environ.setdefault("DATABASE_URL", f"sqlite:///{_DB_DIR}/test.db")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("REMEMBER_ME_HASH_METHOD", "pbkdf2:sha256:1000")

from remember_me.application.services.authenticator import RememberMeAuthenticator  # noqa: E402
from remember_me.application.services.password_hashing import WerkzeugPasswordHasher  # noqa: E402
from remember_me.application.services.token_store import TokenStore  # noqa: E402
from remember_me.domain.users.entities import CookieSpec, User  # noqa: E402
from remember_me.domain.users.exceptions import StoreError  # noqa: E402
from remember_me.infrastructure.crypto import CryptoAdapter  # noqa: E402
from remember_me.infrastructure.token_codec import TokenCodec  # noqa: E402
from remember_me.shared.config import RememberMeConfig  # noqa: E402

SECRET = "unit-test-secret"


class InMemoryUserRepository:
    def __init__(self) -> None:
        self._users: dict[int, User] = {}
        self._seq = 1
        self.fail_writes = False
        self.token_writes: list[tuple[int, str | None]] = []
        self.lookups: list[tuple[str, dict[str, Any], list[str] | None]] = []

    def find_by_username(
        self,
        username: str,
        *,
        scope: Mapping[str, Any] | None = None,
        contain: Sequence[str] | None = None,
    ) -> User | None:
        self.lookups.append((username, dict(scope or {}), list(contain) if contain else None))
        for user in self._users.values():
            if user.username != username:
                continue
            if any(getattr(user, key, None) != value for key, value in (scope or {}).items()):
                return None
            return user
        return None

    def find_by_id(self, user_id: int) -> User | None:
        return self._users.get(user_id)

    def add(self, user: User) -> User:
        new_user = replace(user, id=self._seq)
        self._seq += 1
        self._users[new_user.id] = new_user
        return new_user

    def update_token_hash(self, user_id: int, token_hash: str | None) -> bool:
        if self.fail_writes:
            raise StoreError(context={"reason": "write_failed", "user_id": user_id})
        user = self._users.get(user_id)
        if user is None:
            return False
        self._users[user_id] = replace(user, token_hash=token_hash)
        self.token_writes.append((user_id, token_hash))
        return True


class DeterministicHasher:
    def hash(self, password: str) -> str:
        return f"hashed:{password}"

    def verify(self, password: str, hashed: str) -> bool:
        return hashed == f"hashed:{password}"


class FakeCookieTransport:
    def __init__(self, cookies: dict[str, Any] | None = None) -> None:
        self.cookies: dict[str, Any] = dict(cookies or {})
        self.written: list[CookieSpec] = []

    @property
    def client_ip(self) -> str | None:
        return "127.0.0.1"

    def read(self, name: str) -> Any:
        return self.cookies.get(name)

    def write(self, cookie: CookieSpec) -> None:
        self.written.append(cookie)
        # Mimic a browser: expired or empty cookies disappear.
        if cookie.value == "" or cookie.expires <= datetime.now(UTC):
            self.cookies.pop(cookie.name, None)
        else:
            self.cookies[cookie.name] = cookie.value

    @property
    def last(self) -> CookieSpec:
        return self.written[-1]


@pytest.fixture()
def crypto() -> CryptoAdapter:
    return CryptoAdapter(WerkzeugPasswordHasher(method="pbkdf2:sha256:1000"))


@pytest.fixture()
def codec(crypto: CryptoAdapter) -> TokenCodec:
    return TokenCodec(crypto)


@pytest.fixture()
def users() -> InMemoryUserRepository:
    repo = InMemoryUserRepository()
    repo.add(
        User(
            id=0,
            username="alice",
            password_hash="unused",
            created_at=datetime(2025, 1, 1, tzinfo=UTC),
        )
    )
    return repo


@pytest.fixture()
def alice(users: InMemoryUserRepository) -> User:
    user = users.find_by_id(1)
    assert user is not None
    return user


@pytest.fixture()
def remember_config() -> RememberMeConfig:
    return RememberMeConfig(hash_method="pbkdf2:sha256:1000")


@pytest.fixture()
def token_store(users: InMemoryUserRepository, crypto: CryptoAdapter) -> TokenStore:
    return TokenStore(users=users, crypto=crypto)


@pytest.fixture()
def authenticator(
    codec: TokenCodec,
    token_store: TokenStore,
    crypto: CryptoAdapter,
    remember_config: RememberMeConfig,
) -> RememberMeAuthenticator:
    return RememberMeAuthenticator(
        codec=codec,
        tokens=token_store,
        crypto=crypto,
        config=remember_config,
        secret=SECRET,
    )
