# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from sqlalchemy import inspect, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload

from remember_me.domain.users.entities import User as DomainUser
from remember_me.domain.users.exceptions import StoreError
from remember_me.domain.users.repositories import UserRepository
from remember_me.infrastructure.db.session import Base, session_scope
from remember_me.shared.config import FieldsConfig


def resolve_model(name: str) -> type[Any]:
    """Find a mapped class by class name or table name."""
    for mapper in Base.registry.mappers:
        cls = mapper.class_
        if cls.__name__ == name or getattr(cls, "__tablename__", None) == name:
            return cls
    raise LookupError(f"no mapped user model named {name!r}")


def _columns_of(row: Any) -> dict[str, Any]:
    mapper = inspect(row).mapper
    return {attr.key: getattr(row, attr.key) for attr in mapper.column_attrs}


class SqlAlchemyUserRepository(UserRepository):
    def __init__(
        self,
        *,
        model: str | type[Any] = "User",
        fields: FieldsConfig | None = None,
    ) -> None:
        if isinstance(model, str):
            # Importing the models module fills the declarative registry.
            from remember_me.infrastructure.db import models  # noqa: F401

            model = resolve_model(model)
        self._model = model
        self._fields = fields or FieldsConfig()
        self._pk = inspect(model).primary_key[0].key
        for name in (self._fields.username, self._fields.token):
            if name not in inspect(model).column_attrs:
                raise ValueError(f"{model.__name__} has no column {name!r}")

    def _column(self, name: str) -> Any:
        try:
            return getattr(self._model, name)
        except AttributeError as exc:
            raise ValueError(f"{self._model.__name__} has no attribute {name!r}") from exc

    def _to_domain(self, row: Any, contain: Sequence[str] | None = None) -> DomainUser:
        extra: dict[str, Any] = {}
        for name in contain or ():
            related = getattr(row, name)
            if related is None:
                extra[name] = None
            elif isinstance(related, (list, tuple, set)):
                extra[name] = [_columns_of(item) for item in related]
            else:
                extra[name] = _columns_of(related)
        return DomainUser(
            id=getattr(row, self._pk),
            username=getattr(row, self._fields.username),
            password_hash=getattr(row, "password_hash", "") or "",
            token_hash=getattr(row, self._fields.token),
            is_active=bool(getattr(row, "is_active", True)),
            created_at=getattr(row, "created_at", None),
            extra=extra,
        )

    def find_by_username(
        self,
        username: str,
        *,
        scope: Mapping[str, Any] | None = None,
        contain: Sequence[str] | None = None,
    ) -> DomainUser | None:
        stmt = select(self._model).where(self._column(self._fields.username) == username)
        for name, value in (scope or {}).items():
            stmt = stmt.where(self._column(name) == value)
        for name in contain or ():
            stmt = stmt.options(selectinload(self._column(name)))
        with session_scope() as session:
            row = session.scalars(stmt).first()
            if not row:
                return None
            return self._to_domain(row, contain)

    def find_by_id(self, user_id: int) -> DomainUser | None:
        with session_scope() as session:
            row = session.get(self._model, user_id)
            if not row:
                return None
            return self._to_domain(row)

    def add(self, user: DomainUser) -> DomainUser:
        with session_scope() as session:
            row = self._model(
                **{
                    self._fields.username: user.username,
                    "password_hash": user.password_hash,
                    self._fields.token: user.token_hash,
                    "is_active": user.is_active,
                }
            )
            session.add(row)
            session.flush()
            session.refresh(row)
            return self._to_domain(row)

    def update_token_hash(self, user_id: int, token_hash: str | None) -> bool:
        try:
            with session_scope() as session:
                row = session.get(self._model, user_id)
                if not row:
                    return False
                setattr(row, self._fields.token, token_hash)
                return True
        except SQLAlchemyError as exc:
            raise StoreError(
                context={"reason": "write_failed", "user_id": user_id}
            ) from exc
