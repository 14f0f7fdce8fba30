from __future__ import annotations

from collections.abc import Generator, Mapping, Sequence
from datetime import datetime
from functools import wraps
from typing import Any, Callable, TypeVar

from camel_converter import to_camel

from meilisearch_rest.errors import MeilisearchApiError, MeilisearchVersionError

T = TypeVar("T")


def iso_to_date_time(iso_date: datetime | str | None) -> datetime | None:
    """Convert an iso string from Meilisearch to a datetime.

    Meilisearch can send more microsecond digits than `strptime` accepts, in which case the
    extra digits are dropped.
    """
    if not iso_date:
        return None

    if isinstance(iso_date, datetime):
        return iso_date

    try:
        return datetime.strptime(iso_date, "%Y-%m-%dT%H:%M:%S.%fZ")
    except ValueError:
        split = iso_date.split(".")
        if len(split) < 2:
            raise
        reduce = len(split[1]) - 6
        reduced = f"{split[0]}.{split[1][:-reduce]}Z"
        return datetime.strptime(reduced, "%Y-%m-%dT%H:%M:%S.%fZ")


def transform_attributes(value: Any) -> Any:
    """Recursively camelCase the keys of a mapping.

    Keys that are already camelCase pass through unchanged. Values that are not mappings or
    lists are returned as is.
    """
    if isinstance(value, Mapping):
        return {
            to_camel(k) if isinstance(k, str) else k: transform_attributes(v)
            for k, v in value.items()
        }

    if isinstance(value, list):
        return [transform_attributes(x) for x in value]

    return value


def batch(items: Sequence[T], batch_size: int) -> Generator[Sequence[T], None, None]:
    if batch_size < 1:
        raise ValueError("batch_size must be at least 1")

    for i in range(0, len(items), batch_size):
        yield items[i : i + batch_size]


def split_lines(text: str) -> list[str]:
    """Split text into lines keeping line endings, dropping blank lines."""
    return [line for line in text.splitlines(keepends=True) if line.strip()]


def version_error_handler(method_name: str) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Re-raise API errors as MeilisearchVersionError with a hint naming the method."""

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            try:
                return func(*args, **kwargs)
            except MeilisearchVersionError:
                raise
            except MeilisearchApiError as err:
                raise MeilisearchVersionError(err, method_name) from err

        return wrapper

    return decorator
