# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Remember-me cookie authentication.

The host application calls three entry points:

* :meth:`RememberMeAuthenticator.authenticate` on an incoming request that
  nothing else has authenticated yet;
* :meth:`RememberMeAuthenticator.on_after_primary_authentication` after its
  own credential check, whether it succeeded or not;
* :meth:`RememberMeAuthenticator.on_logout` when the user logs out.

Verification failures never raise: the authenticator simply has no opinion
and the request falls through to the normal login. Issuance failures raise
:class:`StoreError` and no cookie is written.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from remember_me.application.interfaces import CookieTransport
from remember_me.application.services.token_store import TokenStore
from remember_me.domain.users.entities import CookieSpec, RememberToken, User
from remember_me.domain.users.exceptions import (
    DecodeError,
    MismatchError,
    NotFoundError,
    StoreError,
)
from remember_me.infrastructure.audit import AuditAction, audit_log
from remember_me.infrastructure.crypto import CryptoAdapter
from remember_me.infrastructure.token_codec import TokenCodec
from remember_me.shared.config import RememberMeConfig
from remember_me.shared.logging import logger

_TRUTHY = {"1", "true", "yes", "on"}


def _utcnow() -> datetime:
    return datetime.now(UTC)


class AuthState(str, Enum):
    NO_COOKIE = "no_cookie"
    DECODED = "decoded"
    VERIFIED = "verified"
    DENIED = "denied"


@dataclass(slots=True, frozen=True)
class AuthOutcome:
    state: AuthState
    user: User | None = None
    reason: str | None = None


class RememberMeAuthenticator:
    def __init__(
        self,
        *,
        codec: TokenCodec,
        tokens: TokenStore,
        crypto: CryptoAdapter,
        config: RememberMeConfig,
        secret: str,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        if not secret:
            raise ValueError("secret must not be empty")
        self._codec = codec
        self._tokens = tokens
        self._crypto = crypto
        self._config = config
        self._secret = secret
        self._clock = clock

    @property
    def config(self) -> RememberMeConfig:
        return self._config

    def is_opted_in(self, data: Mapping[str, Any] | None) -> bool:
        """True when the request data carries a truthy opt-in flag."""
        if not data:
            return False
        value = data.get(self._config.input_key)
        if isinstance(value, str):
            return value.strip().lower() in _TRUTHY
        return bool(value)

    def generate_token(self, user: User) -> RememberToken:
        raw = self._crypto.random_hash(user.as_record())
        return RememberToken(username=user.username, raw_token=raw)

    def authenticate_with_state(self, transport: CookieTransport) -> AuthOutcome:
        cookie = transport.read(self._config.cookie.name)
        if not cookie or not isinstance(cookie, str):
            return AuthOutcome(AuthState.NO_COOKIE)

        max_age = int(self._config.cookie.expires.total_seconds())
        try:
            payload = self._codec.decode(cookie, self._secret, max_age=max_age)
        except DecodeError as exc:
            return self._deny(transport, exc, user_id=None)

        logger.debug(f"remember_me: cookie decoded, state={AuthState.DECODED.value}")
        try:
            user = self._tokens.verify(payload.username, payload.token)
        except (NotFoundError, MismatchError) as exc:
            user_id = exc.context.get("user_id") if exc.context else None
            return self._deny(transport, exc, user_id=user_id)

        audit_log(
            AuditAction.REMEMBER_ME_VERIFIED,
            user_id=user.id,
            ip_address=transport.client_ip,
        )
        return AuthOutcome(AuthState.VERIFIED, user=user)

    def authenticate(self, transport: CookieTransport) -> User | None:
        return self.authenticate_with_state(transport).user

    get_user = authenticate

    def on_after_primary_authentication(
        self,
        user: User | None,
        transport: CookieTransport,
        *,
        opted_in: bool,
    ) -> RememberToken | None:
        if user is None:
            # Drop any cookie left over from an earlier session.
            self.clear_cookie(transport)
            audit_log(
                AuditAction.REMEMBER_ME_CLEARED,
                ip_address=transport.client_ip,
                details={"trigger": "primary_login_failed"},
            )
            return None

        if not opted_in:
            return None

        token = self.generate_token(user)
        try:
            self._tokens.persist(user.id, token.raw_token)
        except StoreError as exc:
            audit_log(
                AuditAction.REMEMBER_ME_ISSUE_FAILED,
                user_id=user.id,
                ip_address=transport.client_ip,
                details={"reason": exc.reason},
                success=False,
            )
            raise

        value = self._codec.encode(token.username, token.raw_token, self._secret)
        transport.write(self._cookie(value, self._clock() + self._config.cookie.expires))
        audit_log(
            AuditAction.REMEMBER_ME_ISSUED,
            user_id=user.id,
            ip_address=transport.client_ip,
        )
        return token

    def on_logout(self, user: User | None, transport: CookieTransport) -> None:
        self.clear_cookie(transport)
        audit_log(
            AuditAction.REMEMBER_ME_CLEARED,
            user_id=user.id if user else None,
            ip_address=transport.client_ip,
            details={"trigger": "logout"},
        )
        if user is None or not self._config.invalidate_on_logout:
            return
        try:
            self._tokens.invalidate(user.id)
        except StoreError as exc:
            logger.warning(
                f"remember_me.logout: could not invalidate token for user_id={user.id} "
                f"({exc.reason})"
            )
            return
        audit_log(
            AuditAction.REMEMBER_ME_INVALIDATED,
            user_id=user.id,
            ip_address=transport.client_ip,
        )

    def clear_cookie(self, transport: CookieTransport) -> None:
        transport.write(self._cookie("", datetime.fromtimestamp(0, UTC)))

    def _cookie(self, value: str, expires: datetime) -> CookieSpec:
        cfg = self._config.cookie
        return CookieSpec(
            name=cfg.name,
            value=value,
            expires=expires,
            secure=cfg.secure,
            http_only=cfg.http_only,
            samesite=cfg.samesite,
            path=cfg.path,
            domain=cfg.domain,
        )

    def _deny(
        self,
        transport: CookieTransport,
        exc: DecodeError | NotFoundError | MismatchError,
        *,
        user_id: int | None,
    ) -> AuthOutcome:
        audit_log(
            AuditAction.REMEMBER_ME_DENIED,
            user_id=user_id,
            ip_address=transport.client_ip,
            details={"error": exc.code, "reason": exc.reason},
            success=False,
        )
        if self._config.clear_on_denied:
            self.clear_cookie(transport)
        return AuthOutcome(AuthState.DENIED, reason=exc.code)


__all__ = ["AuthOutcome", "AuthState", "RememberMeAuthenticator"]
