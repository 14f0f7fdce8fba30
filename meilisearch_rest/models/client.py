from __future__ import annotations

from datetime import datetime

import pydantic
from camel_converter.pydantic_base import CamelBase

from meilisearch_rest._utils import iso_to_date_time
from meilisearch_rest.models.index import IndexStats


class ClientStats(CamelBase):
    database_size: int
    used_database_size: int | None = None
    last_update: datetime | None = None
    indexes: dict[str, IndexStats] | None = None

    @pydantic.field_validator("last_update", mode="before")  # type: ignore[attr-defined]
    @classmethod
    def validate_last_update(cls, v: str) -> datetime | None:
        return iso_to_date_time(v)


class Key(CamelBase):
    uid: str
    key: str
    name: str | None = None
    description: str | None = None
    actions: list[str]
    indexes: list[str]
    expires_at: datetime | None = None
    created_at: datetime
    updated_at: datetime | None = None

    @pydantic.field_validator("created_at", mode="before")  # type: ignore[attr-defined]
    @classmethod
    def validate_created_at(cls, v: str) -> datetime:
        converted = iso_to_date_time(v)

        if not converted:  # pragma: no cover
            raise ValueError("created_at is required")

        return converted

    @pydantic.field_validator("expires_at", "updated_at", mode="before")  # type: ignore[attr-defined]
    @classmethod
    def validate_optional_dates(cls, v: str | None) -> datetime | None:
        return iso_to_date_time(v)


class KeyCreate(CamelBase):
    name: str | None = None
    description: str | None = None
    actions: list[str]
    indexes: list[str]
    expires_at: datetime | None = None


class KeyUpdate(CamelBase):
    key: str
    name: str | None = None
    description: str | None = None


class KeySearch(CamelBase):
    results: list[Key]
    offset: int
    limit: int
    total: int
