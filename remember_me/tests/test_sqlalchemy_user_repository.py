from __future__ import annotations

from collections.abc import Iterator

import pytest

from remember_me.application.services.password_hashing import WerkzeugPasswordHasher
from remember_me.application.services.token_store import TokenStore
from remember_me.domain.users.entities import User
from remember_me.domain.users.exceptions import MismatchError, NotFoundError
from remember_me.infrastructure.crypto import CryptoAdapter
from remember_me.infrastructure.db import ENGINE, Base, session_scope
from remember_me.infrastructure.db.models import User as UserRow
from remember_me.infrastructure.db.models import UserProfile
from remember_me.infrastructure.repositories.users.sqlalchemy_user_repository import (
    SqlAlchemyUserRepository,
    resolve_model,
)
from remember_me.shared.config import FieldsConfig


@pytest.fixture(autouse=True)
def reset_database() -> Iterator[None]:
    Base.metadata.drop_all(bind=ENGINE)
    Base.metadata.create_all(bind=ENGINE)
    yield
    Base.metadata.drop_all(bind=ENGINE)


@pytest.fixture()
def repo() -> SqlAlchemyUserRepository:
    return SqlAlchemyUserRepository()


def _add(repo: SqlAlchemyUserRepository, username: str, *, active: bool = True) -> User:
    return repo.add(User(id=0, username=username, password_hash="pw", is_active=active))


def test_add_and_find(repo: SqlAlchemyUserRepository) -> None:
    created = _add(repo, "alice")

    assert created.id > 0
    found = repo.find_by_username("alice")
    assert found is not None
    assert found.id == created.id
    assert found.token_hash is None
    assert repo.find_by_id(created.id) == found
    assert repo.find_by_username("bob") is None


def test_update_token_hash_overwrites(repo: SqlAlchemyUserRepository) -> None:
    user = _add(repo, "alice")

    assert repo.update_token_hash(user.id, "hash-1") is True
    assert repo.update_token_hash(user.id, "hash-2") is True

    found = repo.find_by_id(user.id)
    assert found is not None and found.token_hash == "hash-2"
    with session_scope() as session:
        assert session.get(UserRow, user.id).login_cookie == "hash-2"


def test_update_token_hash_for_missing_user(repo: SqlAlchemyUserRepository) -> None:
    assert repo.update_token_hash(404, "hash") is False


def test_scope_filters_lookup(repo: SqlAlchemyUserRepository) -> None:
    _add(repo, "alice", active=False)

    assert repo.find_by_username("alice", scope={"is_active": True}) is None
    assert repo.find_by_username("alice", scope={"is_active": False}) is not None


def test_contain_loads_relations(repo: SqlAlchemyUserRepository) -> None:
    user = _add(repo, "alice")
    with session_scope() as session:
        session.add(UserProfile(user_id=user.id, display_name="Alice", email="a@example.org"))

    found = repo.find_by_username("alice", contain=["profile"])

    assert found is not None
    assert found.extra["profile"]["display_name"] == "Alice"
    assert repo.find_by_username("alice").extra == {}


def test_resolve_model_by_class_or_table_name() -> None:
    assert resolve_model("User") is UserRow
    assert resolve_model("users") is UserRow
    with pytest.raises(LookupError):
        resolve_model("Nope")


def test_unknown_field_names_are_rejected() -> None:
    with pytest.raises(ValueError):
        SqlAlchemyUserRepository(fields=FieldsConfig(token="missing_column"))


def test_token_store_round_trip_against_database(repo: SqlAlchemyUserRepository) -> None:
    user = _add(repo, "alice")
    store = TokenStore(
        users=repo,
        crypto=CryptoAdapter(WerkzeugPasswordHasher(method="pbkdf2:sha256:1000")),
        scope={"is_active": True},
    )

    store.persist(user.id, "raw-token")

    assert store.verify("alice", "raw-token").id == user.id
    with pytest.raises(MismatchError):
        store.verify("alice", "other-token")
    with pytest.raises(NotFoundError):
        store.verify("bob", "raw-token")
