# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations


class InvariantViolation(ValueError):
    """A domain value object was built from invalid data."""

    def __init__(self, entity: str, field: str, message: str = "must not be empty") -> None:
        super().__init__(f"{entity}.{field}: {message}")
        self.entity = entity
        self.field = field
