# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import json
from typing import Any

from remember_me.domain.users.entities import CookiePayload
from remember_me.domain.users.exceptions import DecodeError, DecryptError
from remember_me.infrastructure.crypto import CryptoAdapter


class TokenCodec:
    """Packs ``{username, token}`` into an encrypted cookie value and back."""

    def __init__(self, crypto: CryptoAdapter) -> None:
        self._crypto = crypto

    def encode(self, username: str, raw_token: str, secret: str) -> str:
        payload = CookiePayload(username=username, token=raw_token)
        body = json.dumps(payload.to_wire(), separators=(",", ":"))
        return self._crypto.encrypt(body, secret)

    def decode(self, cookie: Any, secret: str, *, max_age: int | None = None) -> CookiePayload:
        """Decrypt and validate a cookie value.

        Raises:
            DecodeError: empty or non-string cookie, failed decryption, or a
                payload without both a non-empty ``username`` and ``token``.
        """
        if not isinstance(cookie, str):
            raise DecodeError(context={"reason": "not_a_string"})
        if not cookie:
            raise DecodeError(context={"reason": "empty"})

        try:
            body = self._crypto.decrypt(cookie, secret, ttl=max_age)
        except DecryptError as exc:
            raise DecodeError(context={"reason": exc.reason or "decrypt_failed"}) from exc

        try:
            data = json.loads(body)
        except json.JSONDecodeError as exc:
            raise DecodeError(context={"reason": "invalid_json"}) from exc
        if not isinstance(data, dict):
            raise DecodeError(context={"reason": "not_an_object"})

        username = data.get("username")
        token = data.get("token")
        if not isinstance(username, str) or not username:
            raise DecodeError(context={"reason": "missing_username"})
        if not isinstance(token, str) or not token:
            raise DecodeError(context={"reason": "missing_token"})

        return CookiePayload(username=username, token=token)


__all__ = ["TokenCodec"]
