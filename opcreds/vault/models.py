"""Vault data models — the subset of `op item get --format json` this tool reads."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, field_validator


class FieldType(str, Enum):
    """1Password item field types as reported by the op CLI."""

    CONCEALED = "CONCEALED"
    STRING = "STRING"
    EMAIL = "EMAIL"
    URL = "URL"
    DATE = "DATE"
    MONTH_YEAR = "MONTH_YEAR"
    PHONE = "PHONE"
    OTP = "OTP"
    MENU = "MENU"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            for member in cls:
                if member.value == value.upper():
                    return member
        return cls.UNKNOWN


class FieldSection(BaseModel):
    id: str
    label: str | None = None


class ItemField(BaseModel):
    """A single field. Top-level fields have no section."""

    id: str
    type: FieldType = FieldType.UNKNOWN
    label: str | None = None
    section: FieldSection | None = None
    value: str | None = Field(default=None, repr=False)

    @field_validator("type", mode="before")
    @classmethod
    def coerce_type(cls, v):
        return FieldType(v) if isinstance(v, str) else v

    @property
    def concealed(self) -> bool:
        return self.type is FieldType.CONCEALED

    @property
    def top_level(self) -> bool:
        return self.section is None

    @property
    def display_name(self) -> str:
        return self.label or self.id


class VaultListEntry(BaseModel):
    """One row of `op item list --format json`."""

    id: str
    title: str


class VaultItem(BaseModel):
    id: str
    title: str
    category: str = ""
    fields: list[ItemField] = Field(default_factory=list)

    def __str__(self) -> str:
        return f"{self.title} (id: {self.id})"
