from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


class LoginRequestDTO(BaseModel):
    username: str = Field(min_length=1, max_length=64)
    password: str = Field(min_length=1, max_length=128)
    # The opt-in flag is read by the remember-me extension under its
    # configured input key.
    model_config = ConfigDict(extra="allow")

    @field_validator("username")
    @classmethod
    def strip_username(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Username cannot be blank")
        return value


class AuthSuccessDTO(BaseModel):
    ok: bool = True


class CurrentUserDTO(BaseModel):
    id: int
    username: str
    remembered: bool = False
