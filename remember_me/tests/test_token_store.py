from __future__ import annotations

import pytest

from conftest import InMemoryUserRepository
from remember_me.application.services.token_store import TokenStore
from remember_me.domain.users.exceptions import MismatchError, NotFoundError, StoreError
from remember_me.infrastructure.crypto import CryptoAdapter


def test_verify_succeeds_right_after_persist(token_store: TokenStore) -> None:
    token_store.persist(1, "token-one")

    user = token_store.verify("alice", "token-one")

    assert user.id == 1
    assert user.username == "alice"


def test_persisted_value_is_a_hash(
    token_store: TokenStore, users: InMemoryUserRepository
) -> None:
    credential = token_store.persist(1, "token-one")

    stored = users.find_by_id(1)
    assert stored is not None
    assert stored.token_hash == credential.token_hash
    assert stored.token_hash != "token-one"


def test_verify_fails_for_a_different_token(token_store: TokenStore) -> None:
    token_store.persist(1, "token-one")

    with pytest.raises(MismatchError):
        token_store.verify("alice", "token-two")


def test_new_issuance_replaces_previous_token(token_store: TokenStore) -> None:
    token_store.persist(1, "token-one")
    token_store.persist(1, "token-two")

    assert token_store.verify("alice", "token-two").id == 1
    with pytest.raises(MismatchError):
        token_store.verify("alice", "token-one")


def test_verify_without_stored_hash_is_a_mismatch(token_store: TokenStore) -> None:
    with pytest.raises(MismatchError):
        token_store.verify("alice", "anything")


def test_verify_unknown_user(token_store: TokenStore) -> None:
    with pytest.raises(NotFoundError):
        token_store.verify("mallory", "anything")


def test_persist_for_missing_user_raises_store_error(token_store: TokenStore) -> None:
    with pytest.raises(StoreError) as excinfo:
        token_store.persist(99, "token")

    assert excinfo.value.reason == "user_not_found"


def test_persist_propagates_write_failures(
    token_store: TokenStore, users: InMemoryUserRepository
) -> None:
    users.fail_writes = True

    with pytest.raises(StoreError):
        token_store.persist(1, "token")


def test_invalidate_clears_hash(token_store: TokenStore) -> None:
    token_store.persist(1, "token-one")

    token_store.invalidate(1)

    with pytest.raises(MismatchError):
        token_store.verify("alice", "token-one")


def test_scope_and_contain_are_passed_to_lookup(
    users: InMemoryUserRepository, crypto: CryptoAdapter
) -> None:
    store = TokenStore(
        users=users, crypto=crypto, scope={"is_active": True}, contain=["profile"]
    )
    store.persist(1, "token-one")

    store.verify("alice", "token-one")

    assert users.lookups[-1] == ("alice", {"is_active": True}, ["profile"])


def test_scope_excludes_users(users: InMemoryUserRepository, crypto: CryptoAdapter) -> None:
    store = TokenStore(users=users, crypto=crypto, scope={"is_active": False})
    store.persist(1, "token-one")

    with pytest.raises(NotFoundError):
        store.verify("alice", "token-one")
