# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Symmetric encryption and one-way hashing for remember-me tokens.

Ciphertexts are Fernet tokens (AES-128-CBC with an HMAC-SHA256 tag), keyed
by a PBKDF2 derivation of the server secret. The secret is always passed in
by the caller.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import json
import secrets
import time
from collections.abc import Mapping
from functools import lru_cache
from typing import Any

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from remember_me.domain.users.exceptions import DecryptError
from remember_me.domain.users.repositories import PasswordHasher

_KDF_SALT = b"remember-me.cookie.v1"
_KDF_ITERATIONS = 100_000


@lru_cache(maxsize=8)
def derive_key(secret: str) -> bytes:
    """Derive a url-safe base64 Fernet key from an arbitrary secret string."""
    if not secret:
        raise ValueError("secret must not be empty")
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=32,
        salt=_KDF_SALT,
        iterations=_KDF_ITERATIONS,
    )
    return base64.urlsafe_b64encode(kdf.derive(secret.encode("utf-8")))


def _is_canonical_b64(value: str) -> bool:
    # Fernet's decoder tolerates stray characters and non-zero padding bits,
    # so two different strings can decode to the same token.
    try:
        raw = base64.b64decode(value.encode("ascii"), altchars=b"-_", validate=True)
    except (binascii.Error, UnicodeEncodeError, ValueError):
        return False
    return base64.urlsafe_b64encode(raw).decode("ascii") == value


def canonical_json(data: Mapping[str, Any]) -> str:
    return json.dumps(data, sort_keys=True, separators=(",", ":"), default=str)


class CryptoAdapter:
    def __init__(self, hasher: PasswordHasher) -> None:
        self._hasher = hasher

    def encrypt(self, plaintext: str, secret: str) -> str:
        if not isinstance(plaintext, str):
            raise TypeError(f"Expected str, got {type(plaintext).__name__}")
        return Fernet(derive_key(secret)).encrypt(plaintext.encode("utf-8")).decode("ascii")

    def decrypt(self, ciphertext: str, secret: str, *, ttl: int | None = None) -> str:
        """Decrypt ``ciphertext``; ``ttl`` bounds the token age in seconds.

        Raises:
            DecryptError: malformed, truncated, tampered, expired, or
                encrypted under a different secret.
        """
        if not isinstance(ciphertext, str) or not ciphertext:
            raise DecryptError(context={"reason": "empty_ciphertext"})
        if not _is_canonical_b64(ciphertext):
            raise DecryptError(context={"reason": "malformed_ciphertext"})
        try:
            plaintext = Fernet(derive_key(secret)).decrypt(ciphertext.encode("ascii"), ttl=ttl)
        except InvalidToken as exc:
            raise DecryptError(context={"reason": "invalid_token"}) from exc
        try:
            return plaintext.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DecryptError(context={"reason": "invalid_encoding"}) from exc

    def hash(self, value: str) -> str:
        return self._hasher.hash(value)

    def verify(self, candidate: str, digest: str | None) -> bool:
        if not candidate or not digest:
            return False
        return self._hasher.verify(candidate, digest)

    def random_hash(self, context: Mapping[str, Any]) -> str:
        """Mint a raw token from the clock, a random nonce and ``context``."""
        seed = f"{time.time_ns()}|{secrets.token_hex(16)}|{canonical_json(context)}"
        return hashlib.sha256(seed.encode("utf-8")).hexdigest()


__all__ = ["CryptoAdapter", "canonical_json", "derive_key"]
