# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from flask import Blueprint, Response, g, jsonify, request
from pydantic import ValidationError

from remember_me.application.services.authenticator import AuthState
from remember_me.application.use_cases.users.login_user import LoginUserUseCase
from remember_me.application.use_cases.users.register_user import RegisterUserUseCase
from remember_me.domain.users.exceptions import InvalidCredentialsError
from remember_me.infrastructure.audit import AuditAction, audit_log
from remember_me.interfaces.http.cookie_transport import client_ip
from remember_me.interfaces.http.dto.auth import (
    AuthSuccessDTO,
    CurrentUserDTO,
    LoginRequestDTO,
)
from remember_me.interfaces.http.extension import RememberMe, current_user
from remember_me.shared.errors.validation import raise_validation_error
from remember_me.shared.logging import logger


class AuthController:
    def __init__(
        self,
        *,
        register_use_case: RegisterUserUseCase,
        login_use_case: LoginUserUseCase,
        remember_me: RememberMe,
    ) -> None:
        self._register_use_case = register_use_case
        self._login_use_case = login_use_case
        self._remember_me = remember_me

    def register(self) -> tuple[Response, int]:
        try:
            dto = LoginRequestDTO.model_validate(request.get_json(silent=True) or {})
        except ValidationError as exc:
            raise_validation_error(exc)

        user = self._register_use_case.execute(dto.username, dto.password)
        logger.info(f"auth.register: ok user_id={user.id}")
        return jsonify(CurrentUserDTO(id=user.id, username=user.username).model_dump()), 201

    def login(self) -> tuple[Response, int]:
        try:
            dto = LoginRequestDTO.model_validate(request.get_json(silent=True) or {})
        except ValidationError as exc:
            raise_validation_error(exc)

        ip_address = client_ip(request)

        try:
            user = self._login_use_case.execute(dto.username, dto.password)
        except InvalidCredentialsError as exc:
            audit_log(
                AuditAction.LOGIN_FAILED,
                ip_address=ip_address,
                details={"username": dto.username},
                success=False,
            )
            response = jsonify(exc.to_dict())
            self._remember_me.after_login(None, response)
            return response, int(exc.status)

        audit_log(
            AuditAction.LOGIN_SUCCESS,
            user_id=user.id,
            ip_address=ip_address,
            details={"username": dto.username},
        )
        response = jsonify(AuthSuccessDTO().model_dump())
        token = self._remember_me.after_login(user, response)
        logger.info(f"auth.login: ok user_id={user.id} remember_me={token is not None}")
        return response, 200

    def logout(self) -> tuple[Response, int]:
        user = current_user()
        response = jsonify(AuthSuccessDTO().model_dump())
        self._remember_me.after_logout(user, response)
        audit_log(
            AuditAction.LOGOUT,
            user_id=user.id if user else None,
            ip_address=client_ip(request),
        )
        logger.info("auth.logout: ok")
        return response, 200

    def me(self) -> tuple[Response, int]:
        user = current_user()
        if user is None:
            return jsonify({"error": "unauthorized"}), 401
        remembered = getattr(g, "remember_me_state", None) is AuthState.VERIFIED
        dto = CurrentUserDTO(id=user.id, username=user.username, remembered=remembered)
        return jsonify(dto.model_dump()), 200

    def as_blueprint(self) -> Blueprint:
        bp = Blueprint("auth", __name__, url_prefix="/api/auth")
        bp.add_url_rule("/register", view_func=self.register, methods=["POST"])
        bp.add_url_rule("/login", view_func=self.login, methods=["POST"])
        bp.add_url_rule("/logout", view_func=self.logout, methods=["DELETE", "POST"])
        bp.add_url_rule("/me", view_func=self.me, methods=["GET"])
        return bp
