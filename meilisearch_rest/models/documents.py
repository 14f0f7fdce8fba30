from __future__ import annotations

from camel_converter.pydantic_base import CamelBase

from meilisearch_rest.types import Filter, JsonDict


class DocumentsQuery(CamelBase):
    """Options for listing documents.

    Only the fields that are set are sent. When `filter` is set the query is sent as a json
    body to the fetch route, otherwise it is sent as a query string.
    """

    offset: int | None = None
    limit: int | None = None
    fields: list[str] | None = None
    filter: Filter | None = None
    sort: list[str] | None = None
    ids: list[str | int] | None = None
    retrieve_vectors: bool | None = None


class DocumentsInfo(CamelBase):
    results: list[JsonDict]
    offset: int
    limit: int
    total: int
