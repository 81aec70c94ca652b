# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from typing import Any, Protocol

from remember_me.domain.users.entities import CookieSpec


class CookieTransport(Protocol):
    """Reads request cookies and writes response cookies."""

    def read(self, name: str) -> Any: ...

    def write(self, cookie: CookieSpec) -> None: ...

    @property
    def client_ip(self) -> str | None: ...
