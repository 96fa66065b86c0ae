"""Pydantic models for session state."""

from __future__ import annotations

from pydantic import BaseModel, Field


class AuthCheck(BaseModel):
    """Authentication verdict derived from the current cookie jar."""

    authenticated: bool = False
    note: str = ""
    matched: list[str] = Field(default_factory=list)  # "name@domain"
