# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from http import HTTPStatus

from remember_me.shared.errors.base import DomainError


class UserAlreadyExistsError(DomainError):
    code = "user_already_exists"
    status = HTTPStatus.CONFLICT


class InvalidCredentialsError(DomainError):
    code = "invalid_credentials"
    status = HTTPStatus.UNAUTHORIZED


class RememberMeError(DomainError):
    code = "remember_me_error"
    expose_context = False


class DecryptError(RememberMeError):
    code = "cookie_decrypt_failed"


class DecodeError(RememberMeError):
    code = "cookie_decode_failed"


class NotFoundError(RememberMeError):
    code = "remember_me_user_not_found"


class MismatchError(RememberMeError):
    code = "remember_me_token_mismatch"


class StoreError(RememberMeError):
    code = "token_store_error"
    status = HTTPStatus.INTERNAL_SERVER_ERROR
