# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Flask wiring for the remember-me authenticator."""

from __future__ import annotations

from typing import Any

from flask import Flask, Response, g, request

from remember_me.application.services.authenticator import AuthState, RememberMeAuthenticator
from remember_me.domain.users.entities import RememberToken, User
from remember_me.interfaces.http.cookie_transport import FlaskCookieTransport
from remember_me.shared.logging import logger

_TRANSPORT_KEY = "_remember_me_transport"


def _request_data() -> dict[str, Any]:
    data: dict[str, Any] = dict(request.form.items())
    payload = request.get_json(silent=True)
    if isinstance(payload, dict):
        data.update(payload)
    return data


def current_user() -> User | None:
    return getattr(g, "user", None)


class RememberMe:
    """Authenticates requests from the remember-me cookie.

    The ``before_request`` guard only runs when nothing earlier in the
    request set ``g.user``. Cookie writes made by the guard are applied to
    the response in ``after_request``.
    """

    def __init__(self, authenticator: RememberMeAuthenticator, app: Flask | None = None) -> None:
        self._authenticator = authenticator
        if app is not None:
            self.init_app(app)

    @property
    def authenticator(self) -> RememberMeAuthenticator:
        return self._authenticator

    def init_app(self, app: Flask) -> None:
        app.extensions["remember_me"] = self
        app.before_request(self._load_user)
        app.after_request(self._flush_cookies)

    def _load_user(self) -> None:
        if current_user() is not None:
            return
        transport = FlaskCookieTransport(request)
        setattr(g, _TRANSPORT_KEY, transport)
        outcome = self._authenticator.authenticate_with_state(transport)
        g.remember_me_state = outcome.state
        if outcome.state is AuthState.VERIFIED and outcome.user is not None:
            g.user = outcome.user
            g.user_id = outcome.user.id
            logger.debug(f"remember_me: request authenticated as user_id={outcome.user.id}")

    def _flush_cookies(self, response: Response) -> Response:
        transport: FlaskCookieTransport | None = g.pop(_TRANSPORT_KEY, None)
        if transport is not None:
            transport.flush(response)
        return response

    def _response_transport(self, response: Response) -> FlaskCookieTransport:
        # Cookies written directly to the response supersede queued writes.
        queued: FlaskCookieTransport | None = g.pop(_TRANSPORT_KEY, None)
        if queued is not None:
            queued.pending.clear()
        return FlaskCookieTransport(request, response)

    def after_login(
        self,
        user: User | None,
        response: Response,
        *,
        opted_in: bool | None = None,
    ) -> RememberToken | None:
        """Run after the host's own credential check, successful or not."""
        if opted_in is None:
            opted_in = self._authenticator.is_opted_in(_request_data())
        transport = self._response_transport(response)
        return self._authenticator.on_after_primary_authentication(
            user, transport, opted_in=opted_in
        )

    def after_logout(self, user: User | None, response: Response) -> None:
        transport = self._response_transport(response)
        self._authenticator.on_logout(user, transport)


__all__ = ["RememberMe", "current_user"]
