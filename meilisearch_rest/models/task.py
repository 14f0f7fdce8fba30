from __future__ import annotations

from datetime import datetime

import pydantic
from camel_converter.pydantic_base import CamelBase
from pydantic import Field

from meilisearch_rest._utils import iso_to_date_time
from meilisearch_rest.types import JsonDict

TERMINAL_STATUSES = ("succeeded", "failed", "canceled")


class TaskInfo(CamelBase):
    """The summary Meilisearch sends back when a task is enqueued."""

    task_uid: int
    index_uid: str | None = None
    status: str
    task_type: str | JsonDict = Field(..., alias="type")
    enqueued_at: datetime
    batch_uid: int | None = None

    @pydantic.field_validator("enqueued_at", mode="before")  # type: ignore[attr-defined]
    @classmethod
    def validate_enqueued_at(cls, v: str) -> datetime:
        converted = iso_to_date_time(v)

        if not converted:  # pragma: no cover
            raise ValueError("enqueued_at is required")

        return converted


class TaskResult(CamelBase):
    """The full record of a task."""

    uid: int
    index_uid: str | None = None
    status: str
    task_type: str | JsonDict = Field(..., alias="type")
    details: JsonDict | None = None
    error: JsonDict | None = None
    canceled_by: int | None = None
    duration: str | None = None
    enqueued_at: datetime
    started_at: datetime | None = None
    finished_at: datetime | None = None
    batch_uid: int | None = None

    @pydantic.field_validator("enqueued_at", mode="before")  # type: ignore[attr-defined]
    @classmethod
    def validate_enqueued_at(cls, v: str) -> datetime:
        converted = iso_to_date_time(v)

        if not converted:  # pragma: no cover
            raise ValueError("enqueued_at is required")

        return converted

    @pydantic.field_validator("started_at", "finished_at", mode="before")  # type: ignore[attr-defined]
    @classmethod
    def validate_optional_dates(cls, v: str | None) -> datetime | None:
        return iso_to_date_time(v)

    @property
    def is_finished(self) -> bool:
        return self.status in TERMINAL_STATUSES


class TaskStatus(CamelBase):
    results: list[TaskResult]
    total: int | None = None
    limit: int
    from_: int | None = Field(None, alias="from")
    next: int | None = None
