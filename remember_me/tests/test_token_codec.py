from __future__ import annotations

import json

import pytest

from remember_me.domain.users.exceptions import DecodeError
from remember_me.infrastructure.crypto import CryptoAdapter
from remember_me.infrastructure.token_codec import TokenCodec

SECRET = "codec-secret"


def test_encode_then_decode_returns_username_and_token(codec: TokenCodec) -> None:
    cookie = codec.encode("alice", "abc123", SECRET)

    payload = codec.decode(cookie, SECRET)

    assert payload.username == "alice"
    assert payload.token == "abc123"


def test_encoded_cookie_is_opaque_and_cookie_safe(codec: TokenCodec) -> None:
    cookie = codec.encode("alice", "abc123", SECRET)

    assert "alice" not in cookie
    assert "abc123" not in cookie
    assert all(ch.isalnum() or ch in "-_=" for ch in cookie)


def test_flipping_any_character_is_detected(codec: TokenCodec) -> None:
    cookie = codec.encode("bob", "0123456789abcdef", SECRET)

    for index, char in enumerate(cookie):
        replacement = "A" if char != "A" else "B"
        tampered = cookie[:index] + replacement + cookie[index + 1 :]
        with pytest.raises(DecodeError):
            codec.decode(tampered, SECRET)


@pytest.mark.parametrize("cookie", [None, "", 42, b"bytes", ["list"]])
def test_decode_rejects_empty_or_non_string(codec: TokenCodec, cookie) -> None:
    with pytest.raises(DecodeError):
        codec.decode(cookie, SECRET)


def test_decode_with_wrong_secret_fails(codec: TokenCodec) -> None:
    cookie = codec.encode("alice", "abc123", SECRET)

    with pytest.raises(DecodeError) as excinfo:
        codec.decode(cookie, "another-secret")

    assert excinfo.value.reason == "invalid_token"


@pytest.mark.parametrize(
    "body",
    [
        {"username": "alice"},
        {"token": "abc"},
        {"username": "", "token": "abc"},
        {"username": "alice", "token": ""},
        {"username": 1, "token": "abc"},
        {"username": "alice", "token": None},
        ["alice", "abc"],
    ],
)
def test_decode_rejects_partial_payloads(crypto: CryptoAdapter, codec: TokenCodec, body) -> None:
    cookie = crypto.encrypt(json.dumps(body), SECRET)

    with pytest.raises(DecodeError):
        codec.decode(cookie, SECRET)


def test_decode_rejects_non_json_plaintext(crypto: CryptoAdapter, codec: TokenCodec) -> None:
    cookie = crypto.encrypt("username=alice;token=abc", SECRET)

    with pytest.raises(DecodeError) as excinfo:
        codec.decode(cookie, SECRET)

    assert excinfo.value.reason == "invalid_json"


def test_decode_error_does_not_expose_reason_over_http(codec: TokenCodec) -> None:
    with pytest.raises(DecodeError) as excinfo:
        codec.decode("garbage", SECRET)

    assert excinfo.value.to_dict() == {"error": "cookie_decode_failed"}
