# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any

from remember_me.domain.exceptions import InvariantViolation


@dataclass(slots=True, frozen=True)
class User:

    id: int
    username: str
    password_hash: str = field(repr=False)
    token_hash: str | None = field(default=None, repr=False)
    is_active: bool = True
    created_at: datetime | None = None
    extra: dict[str, Any] = field(default_factory=dict, compare=False)

    def as_record(self) -> dict[str, Any]:
        """Full user record, used as context when minting tokens."""
        return asdict(self)


@dataclass(slots=True, frozen=True)
class RememberToken:
    """Freshly minted token; only its hash is ever persisted."""

    username: str
    raw_token: str = field(repr=False)

    def __post_init__(self) -> None:
        if not self.username:
            raise InvariantViolation("RememberToken", "username")
        if not self.raw_token:
            raise InvariantViolation("RememberToken", "raw_token")


@dataclass(slots=True, frozen=True)
class CookiePayload:
    """Decrypted content of the remember-me cookie."""

    username: str
    token: str = field(repr=False)

    def to_wire(self) -> dict[str, str]:
        return {"username": self.username, "token": self.token}


@dataclass(slots=True, frozen=True)
class StoredCredential:

    user_id: int
    token_hash: str | None = field(repr=False)


@dataclass(slots=True, frozen=True)
class CookieSpec:
    """A cookie to be written by a cookie transport."""

    name: str
    value: str = field(repr=False)
    expires: datetime
    secure: bool = False
    http_only: bool = True
    samesite: str | None = "Lax"
    path: str = "/"
    domain: str | None = None

    @property
    def is_clearing(self) -> bool:
        return self.value == ""
