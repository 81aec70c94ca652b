# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from typing import Any

from flask import Request, Response

from remember_me.application.interfaces import CookieTransport
from remember_me.domain.users.entities import CookieSpec


def client_ip(request: Request) -> str | None:
    ip_address = request.headers.get("X-Forwarded-For", request.remote_addr)
    if ip_address and "," in ip_address:
        ip_address = ip_address.split(",")[0].strip()
    return ip_address


class FlaskCookieTransport(CookieTransport):
    """Cookie transport over a Flask request/response pair.

    Without a response, writes are kept in :attr:`pending` until
    :meth:`flush` is called with the outgoing response.
    """

    def __init__(self, request: Request, response: Response | None = None) -> None:
        self._request = request
        self._response = response
        self.pending: list[CookieSpec] = []

    @property
    def client_ip(self) -> str | None:
        return client_ip(self._request)

    def read(self, name: str) -> Any:
        return self._request.cookies.get(name)

    def write(self, cookie: CookieSpec) -> None:
        if self._response is None:
            self.pending.append(cookie)
            return
        _set_cookie(self._response, cookie)

    def flush(self, response: Response) -> Response:
        for cookie in self.pending:
            _set_cookie(response, cookie)
        self.pending.clear()
        return response


def _set_cookie(response: Response, cookie: CookieSpec) -> None:
    response.set_cookie(
        cookie.name,
        cookie.value,
        max_age=0 if cookie.is_clearing else None,
        expires=cookie.expires,
        path=cookie.path,
        domain=cookie.domain,
        secure=cookie.secure,
        httponly=cookie.http_only,
        samesite=cookie.samesite,
    )


__all__ = ["FlaskCookieTransport", "client_ip"]
