from __future__ import annotations

from enum import Enum
from typing import Literal, TypeAlias

import pydantic
from camel_converter.pydantic_base import CamelBase

from meilisearch_rest.types import JsonDict


class MinWordSizeForTypos(CamelBase):
    one_typo: int | None = None
    two_typos: int | None = None


class TypoTolerance(CamelBase):
    enabled: bool = True
    disable_on_attributes: list[str] | None = None
    disable_on_words: list[str] | None = None
    disable_on_numbers: bool | None = None
    min_word_size_for_typos: MinWordSizeForTypos | None = None


class Faceting(CamelBase):
    max_values_per_facet: int
    sort_facet_values_by: dict[str, Literal["alpha", "count"]] | None = None


class Pagination(CamelBase):
    max_total_hits: int


class ProximityPrecision(str, Enum):
    BY_WORD = "byWord"
    BY_ATTRIBUTE = "byAttribute"


class LocalizedAttributes(CamelBase):
    locales: list[str]
    attribute_patterns: list[str]


class FilterFeatures(CamelBase):
    equality: bool
    comparison: bool


class FilterableAttributeFeatures(CamelBase):
    facet_search: bool
    filter: FilterFeatures


class FilterableAttributes(CamelBase):
    attribute_patterns: list[str]
    features: FilterableAttributeFeatures


class Distribution(CamelBase):
    mean: float
    sigma: float


class _EmbedderBase(CamelBase):
    document_template: str | None = None
    document_template_max_bytes: int | None = None
    distribution: Distribution | None = None
    binary_quantized: bool | None = None


class OpenAiEmbedder(_EmbedderBase):
    source: Literal["openAi"] = "openAi"
    url: str | None = None
    model: str | None = None
    dimensions: int | None = None
    api_key: str | None = None


class HuggingFaceEmbedder(_EmbedderBase):
    source: Literal["huggingFace"] = "huggingFace"
    model: str | None = None
    revision: str | None = None
    dimensions: int | None = None
    pooling: Literal["useModel", "forceMean", "forceCls"] | None = None


class OllamaEmbedder(_EmbedderBase):
    source: Literal["ollama"] = "ollama"
    url: str | None = None
    api_key: str | None = None
    model: str
    dimensions: int | None = None


class RestEmbedder(_EmbedderBase):
    source: Literal["rest"] = "rest"
    url: str
    api_key: str | None = None
    dimensions: int | None = None
    headers: JsonDict | None = None
    request: JsonDict
    response: JsonDict


class UserProvidedEmbedder(CamelBase):
    source: Literal["userProvided"] = "userProvided"
    dimensions: int
    distribution: Distribution | None = None
    binary_quantized: bool | None = None


SingleEmbedder: TypeAlias = (
    OpenAiEmbedder | HuggingFaceEmbedder | OllamaEmbedder | RestEmbedder | UserProvidedEmbedder
)


class CompositeEmbedder(CamelBase):
    source: Literal["composite"] = "composite"
    search_embedder: SingleEmbedder
    indexing_embedder: SingleEmbedder


Embedder: TypeAlias = SingleEmbedder | CompositeEmbedder

_EMBEDDER_SOURCES: dict[str, type[CamelBase]] = {
    "openAi": OpenAiEmbedder,
    "huggingFace": HuggingFaceEmbedder,
    "ollama": OllamaEmbedder,
    "rest": RestEmbedder,
    "userProvided": UserProvidedEmbedder,
    "composite": CompositeEmbedder,
}


def embedder_from_json(data: JsonDict) -> Embedder:
    """Build the embedder model that matches the `source` of a json embedder config."""
    model = _EMBEDDER_SOURCES.get(data.get("source", "userProvided"), UserProvidedEmbedder)
    return model(**data)  # type: ignore[return-value]


class Embedders(CamelBase):
    embedders: dict[str, Embedder]

    @classmethod
    def from_json(cls, data: JsonDict | None) -> Embedders | None:
        if not data:
            return None

        return cls(embedders={k: embedder_from_json(v) for k, v in data.items()})

    def to_json(self) -> JsonDict:
        return {
            name: embedder.model_dump(by_alias=True, exclude_none=True)
            for name, embedder in self.embedders.items()
        }


class MeilisearchSettings(CamelBase):
    synonyms: dict[str, list[str]] | None = None
    stop_words: list[str] | None = None
    ranking_rules: list[str] | None = None
    filterable_attributes: list[str] | list[FilterableAttributes] | None = None
    distinct_attribute: str | None = None
    searchable_attributes: list[str] | None = None
    displayed_attributes: list[str] | None = None
    sortable_attributes: list[str] | None = None
    typo_tolerance: TypoTolerance | None = None
    faceting: Faceting | None = None
    pagination: Pagination | None = None
    proximity_precision: ProximityPrecision | None = None
    separator_tokens: list[str] | None = None
    non_separator_tokens: list[str] | None = None
    search_cutoff_ms: int | None = None
    dictionary: list[str] | None = None
    embedders: dict[str, Embedder] | None = None
    localized_attributes: list[LocalizedAttributes] | None = None
    facet_search: bool | None = None
    prefix_search: Literal["disabled", "indexingTime", "searchTime"] | None = None

    @pydantic.field_validator("embedders", mode="before")  # type: ignore[attr-defined]
    @classmethod
    def validate_embedders(cls, v: JsonDict | None) -> JsonDict | None:
        if not v:
            return None

        return {k: embedder_from_json(x) if isinstance(x, dict) else x for k, x in v.items()}

    def to_json(self) -> JsonDict:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")
