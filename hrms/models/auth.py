"""Authenticated user derived from a validated access token."""

from __future__ import annotations

from pydantic import BaseModel


class UserInfo(BaseModel):
    id: str | None = None
    email: str | None = None
    role: str | None = None
    roles: list[str] = []
