from __future__ import annotations

from typing import Literal

from camel_converter.pydantic_base import CamelBase
from pydantic import Field, field_validator

from meilisearch_rest.errors import MeilisearchError
from meilisearch_rest.types import Filter, JsonDict


def _check_threshold(v: float | None) -> float | None:
    if v is not None and not 0.0 <= v <= 1.0:
        raise MeilisearchError("ranking_score_threshold must be between 0.0 and 1.0")

    return v


class Hybrid(CamelBase):
    semantic_ratio: float
    embedder: str


class SearchParams(CamelBase):
    """Search options.

    Every field defaults to None and only the fields that are set end up in the request body,
    so the Meilisearch defaults apply to everything else.
    """

    query: str | None = Field(None, alias="q")
    offset: int | None = None
    limit: int | None = None
    hits_per_page: int | None = None
    page: int | None = None
    filter: Filter | None = None
    facets: list[str] | None = None
    attributes_to_retrieve: list[str] | None = None
    attributes_to_crop: list[str] | None = None
    crop_length: int | None = None
    crop_marker: str | None = None
    attributes_to_highlight: list[str] | None = None
    highlight_pre_tag: str | None = None
    highlight_post_tag: str | None = None
    show_matches_position: bool | None = None
    sort: list[str] | None = None
    matching_strategy: Literal["all", "last", "frequency"] | None = None
    attributes_to_search_on: list[str] | None = None
    distinct: str | None = None
    show_ranking_score: bool | None = None
    show_ranking_score_details: bool | None = None
    ranking_score_threshold: float | None = None
    vector: list[float] | None = None
    hybrid: Hybrid | None = None
    locales: list[str] | None = None
    retrieve_vectors: bool | None = None

    @field_validator("ranking_score_threshold", mode="before")  # type: ignore[attr-defined]
    @classmethod
    def validate_ranking_score_threshold(cls, v: float | None) -> float | None:
        return _check_threshold(v)


class MultiSearchQuery(SearchParams):
    index_uid: str


class FacetSearchParams(CamelBase):
    facet_name: str
    facet_query: str = ""
    query: str | None = Field(None, alias="q")
    filter: Filter | None = None
    matching_strategy: Literal["all", "last", "frequency"] | None = None
    attributes_to_search_on: list[str] | None = None
    exhaustive_facet_count: bool | None = None


class SimilarSearchParams(CamelBase):
    id: str | int
    embedder: str = "default"
    offset: int | None = None
    limit: int | None = None
    filter: Filter | None = None
    attributes_to_retrieve: list[str] | None = None
    retrieve_vectors: bool | None = None
    show_ranking_score: bool | None = None
    show_ranking_score_details: bool | None = None
    ranking_score_threshold: float | None = None

    @field_validator("ranking_score_threshold", mode="before")  # type: ignore[attr-defined]
    @classmethod
    def validate_ranking_score_threshold(cls, v: float | None) -> float | None:
        return _check_threshold(v)


def normalize_hit_count(response: JsonDict) -> JsonDict:
    """Fill `nbHits` from `estimatedTotalHits` for offset/limit searches.

    Searches paginated with `page`/`hits_per_page` report `totalHits` and `totalPages`
    instead and are left untouched.
    """
    if "totalPages" not in response and response.get("nbHits") is None:
        response["nbHits"] = response.get("estimatedTotalHits")

    return response
