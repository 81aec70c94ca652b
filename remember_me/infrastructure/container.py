# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from functools import cached_property

from remember_me.application.services.authenticator import RememberMeAuthenticator
from remember_me.application.services.password_hashing import WerkzeugPasswordHasher
from remember_me.application.services.token_store import TokenStore
from remember_me.application.use_cases.users.login_user import LoginUserUseCase
from remember_me.application.use_cases.users.register_user import RegisterUserUseCase
from remember_me.infrastructure.crypto import CryptoAdapter
from remember_me.infrastructure.repositories.users.sqlalchemy_user_repository import (
    SqlAlchemyUserRepository,
)
from remember_me.infrastructure.token_codec import TokenCodec
from remember_me.interfaces.http.controllers.auth_controller import AuthController
from remember_me.interfaces.http.extension import RememberMe
from remember_me.shared.config import AppConfig, load_config


class Container:
    def __init__(self, config: AppConfig | None = None) -> None:
        self._config = config

    @cached_property
    def config(self) -> AppConfig:
        return self._config or load_config()

    @cached_property
    def password_hasher(self) -> WerkzeugPasswordHasher:
        return WerkzeugPasswordHasher()

    @cached_property
    def token_hasher(self) -> WerkzeugPasswordHasher:
        return WerkzeugPasswordHasher(method=self.config.remember_me.hash_method)

    @cached_property
    def user_repository(self) -> SqlAlchemyUserRepository:
        return SqlAlchemyUserRepository(
            model=self.config.remember_me.user_model,
            fields=self.config.remember_me.fields,
        )

    @cached_property
    def crypto(self) -> CryptoAdapter:
        return CryptoAdapter(self.token_hasher)

    @cached_property
    def token_codec(self) -> TokenCodec:
        return TokenCodec(self.crypto)

    @cached_property
    def token_store(self) -> TokenStore:
        return TokenStore(
            users=self.user_repository,
            crypto=self.crypto,
            scope=self.config.remember_me.scope,
            contain=self.config.remember_me.contain,
        )

    @cached_property
    def authenticator(self) -> RememberMeAuthenticator:
        return RememberMeAuthenticator(
            codec=self.token_codec,
            tokens=self.token_store,
            crypto=self.crypto,
            config=self.config.remember_me,
            secret=self.config.secret_key,
        )

    @cached_property
    def remember_me(self) -> RememberMe:
        return RememberMe(self.authenticator)

    @cached_property
    def register_user_use_case(self) -> RegisterUserUseCase:
        return RegisterUserUseCase(
            users=self.user_repository,
            password_hasher=self.password_hasher,
        )

    @cached_property
    def login_user_use_case(self) -> LoginUserUseCase:
        return LoginUserUseCase(
            users=self.user_repository,
            password_hasher=self.password_hasher,
        )

    @cached_property
    def auth_controller(self) -> AuthController:
        return AuthController(
            register_use_case=self.register_user_use_case,
            login_use_case=self.login_user_use_case,
            remember_me=self.remember_me,
        )


container = Container()
