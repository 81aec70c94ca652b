# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .settings import (
    AppConfig,
    CookieConfig,
    DatabaseConfig,
    FieldsConfig,
    RememberMeConfig,
    load_config,
    parse_relative_delta,
)

__all__ = [
    "AppConfig",
    "CookieConfig",
    "DatabaseConfig",
    "FieldsConfig",
    "RememberMeConfig",
    "load_config",
    "parse_relative_delta",
]
