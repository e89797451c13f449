"""
Account model for the Book Lending Tracker.

Accounts are owned by an external identity system; the tracker only needs the
login and profile email to label lending history entries.
"""

from uuid import UUID

from pydantic import BaseModel, Field, field_validator


class Account(BaseModel):
    """An account joined with its profile."""

    id: UUID
    login: str = Field(..., min_length=1, max_length=100)
    email: str | None = Field(None, max_length=255)
    first_name: str | None = None
    last_name: str | None = None

    @property
    def display_name(self) -> str:
        full = " ".join(part for part in (self.first_name, self.last_name) if part)
        return full or self.login


class AccountCreateSchema(BaseModel):
    """Schema for registering an account and its profile."""

    login: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., max_length=255)
    first_name: str | None = None
    last_name: str | None = None

    @field_validator("login")
    @classmethod
    def strip_login(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Login cannot be blank")
        return v

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        v = v.strip().lower()
        if "@" not in v or v.startswith("@") or v.endswith("@"):
            raise ValueError("Invalid email address")
        return v
