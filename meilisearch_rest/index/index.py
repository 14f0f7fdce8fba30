from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any, Literal

from httpx import Client

from meilisearch_rest._http_requests import (
    CSV_CONTENT_TYPE,
    JSON_CONTENT_TYPE,
    NDJSON_CONTENT_TYPE,
    HttpRequests,
    build_encoded_url,
)
from meilisearch_rest._utils import batch, transform_attributes, version_error_handler
from meilisearch_rest.errors import MeilisearchApiError, MeilisearchError
from meilisearch_rest.index._common import (
    BaseIndex,
    csv_batches,
    document_url,
    load_documents_from_file,
    ndjson_batches,
    validate_csv_delimiter,
)
from meilisearch_rest.json_handler import JsonHandler
from meilisearch_rest.models.documents import DocumentsInfo, DocumentsQuery
from meilisearch_rest.models.index import IndexStats
from meilisearch_rest.models.search import (
    FacetSearchParams,
    Hybrid,
    SearchParams,
    SimilarSearchParams,
    normalize_hit_count,
)
from meilisearch_rest.models.settings import (
    Embedders,
    Faceting,
    FilterableAttributes,
    LocalizedAttributes,
    MeilisearchSettings,
    Pagination,
    ProximityPrecision,
    TypoTolerance,
)
from meilisearch_rest.models.task import TaskResult, TaskStatus
from meilisearch_rest.task import (
    DEFAULT_INTERVAL_IN_MS,
    DEFAULT_TIMEOUT_IN_MS,
    Task,
    TaskEndpoint,
)

if TYPE_CHECKING:  # pragma: no cover
    import sys

    from meilisearch_rest.types import Filter, JsonDict, JsonMapping

    if sys.version_info >= (3, 11):
        from typing import Self
    else:
        from typing_extensions import Self

logger = logging.getLogger(__name__)


class Index(BaseIndex):
    """Index class gives access to the index routes and their child routes.

    https://www.meilisearch.com/docs/reference/api/indexes
    """

    def __init__(
        self,
        http_client: Client,
        uid: str,
        primary_key: str | None = None,
        created_at: str | datetime | None = None,
        updated_at: str | datetime | None = None,
        json_handler: JsonHandler | None = None,
        *,
        task_endpoint: TaskEndpoint | None = None,
    ):
        """Class initializer.

        Args:
            http_client: The httpx Client to send requests with. The `Client` passes its own
                when it creates an Index.
            uid: Name of the index.
            primary_key: The primary key of the documents. Defaults to None.
            created_at: The date and time the index was created. Defaults to None.
            updated_at: The date and time the index was last updated. Defaults to None.
            json_handler: The module to use for json operations. Default: BuiltinHandler.
            task_endpoint: The task endpoint used by the returned tasks. The `Client` shares
                one across all of its indexes. When None one is built on `http_client`.
        """
        super().__init__(
            uid=uid,
            primary_key=primary_key,
            created_at=created_at,
            updated_at=updated_at,
            json_handler=json_handler,
        )
        self.http_client = http_client
        self._http_requests = HttpRequests(http_client, json_handler=self._json_handler)
        self._task_endpoint = (
            task_endpoint if task_endpoint else TaskEndpoint(self._http_requests)
        )

    def _task(self, response: Any) -> Task:
        return Task.from_response(self._http_requests.parse_json(response), self._task_endpoint)

    @classmethod
    def create(
        cls,
        http_client: Client,
        uid: str,
        primary_key: str | None = None,
        *,
        json_handler: JsonHandler | None = None,
        task_endpoint: TaskEndpoint | None = None,
    ) -> Task:
        """Enqueue the creation of an index.

        In general this should not be used directly, use `Client.create_index` instead.

        Returns:
            The index creation task.
        """
        payload = {"uid": uid, "primaryKey": primary_key} if primary_key else {"uid": uid}
        http_requests = HttpRequests(http_client, json_handler)
        endpoint = task_endpoint if task_endpoint else TaskEndpoint(http_requests)
        response = http_requests.post("indexes", payload)

        return Task.from_response(http_requests.parse_json(response), endpoint)

    def fetch_info(self) -> Self:
        """Refresh the primary key and timestamps of this index from Meilisearch.

        Returns:
            This index with the updated information.

        Raises:
            MeilisearchCommunicationError: If the server could not be reached.
            MeilisearchApiError: If Meilisearch answered with an error status.

        Examples
            >>> from meilisearch_rest import Client
            >>> with Client("http://127.0.0.1:7700", "masterKey") as client:
            >>>     index = client.index("movies")
            >>>     index.fetch_info()
        """
        self.fetch_raw_info()
        return self

    def fetch_raw_info(self) -> JsonDict:
        """Same as `fetch_info` but returns the json sent by Meilisearch."""
        response = self._http_requests.get(self._base_url_with_uid)
        index_dict = self._http_requests.parse_json(response)
        self._set_fetch_info(index_dict)

        return index_dict

    def fetch_primary_key(self) -> str | None:
        """Fetch the index information and return the primary key.

        Deprecated name: `get_primary_key`.
        """
        return self.fetch_info().primary_key

    def update(self, *, primary_key: str | None = None, uid: str | None = None) -> Task:
        """Change the primary key of the index and/or rename it.

        The local `uid` and `primary_key` are not changed until `fetch_info` is called after
        the task has finished.

        Deprecated name: `update_index`.

        Args:
            primary_key: The new primary key. Defaults to None (unchanged).
            uid: The new name of the index. Defaults to None (unchanged).

        Returns:
            The update task.

        Raises:
            ValueError: If neither value is given.
            MeilisearchCommunicationError: If the server could not be reached.
            MeilisearchApiError: If Meilisearch answered with an error status.
        """
        body = {k: v for k, v in {"primary_key": primary_key, "uid": uid}.items() if v}
        if not body:
            raise ValueError("Either primary_key or uid must be provided")

        response = self._http_requests.patch(self._base_url_with_uid, transform_attributes(body))

        return self._task(response)

    def delete(self) -> Task:
        """Deletes the index.

        Deprecated name: `delete_index`.

        Returns:
            The deletion task.

        Raises:
            MeilisearchCommunicationError: If the server could not be reached.
            MeilisearchApiError: If Meilisearch answered with an error status.
        """
        response = self._http_requests.delete(self._base_url_with_uid)
        return self._task(response)

    def delete_if_exists(self, timeout_in_ms: int | None = 100000) -> bool:
        """Delete the index and wait for the deletion.

        Returns:
            True if the index was deleted, False if it did not exist.

        Raises:
            MeilisearchCommunicationError: If the server could not be reached.
            MeilisearchApiError: If Meilisearch answered with an error status.
        """
        try:
            task = self.delete()
        except MeilisearchApiError as err:
            if err.code != "index_not_found":
                raise
            return False

        return task.wait(timeout_in_ms=timeout_in_ms).succeeded

    def compact(self) -> Task:
        """Enqueue the compaction of the index database.

        Only available in Meilisearch v1.23.0+.
        """
        response = self._http_requests.post(f"{self._base_url_with_uid}/compact")
        return self._task(response)

    def task(self, task_id: int) -> TaskResult:
        return self._task_endpoint.get_task(task_id)

    def tasks(self) -> TaskStatus:
        """Get the tasks of this index."""
        return self._task_endpoint.index_tasks(self.uid)

    def wait_for_task(
        self,
        task_id: int,
        timeout_in_ms: int | None = DEFAULT_TIMEOUT_IN_MS,
        interval_in_ms: int = DEFAULT_INTERVAL_IN_MS,
    ) -> TaskResult:
        """Wait for a task to finish. See `TaskEndpoint.wait_for_task`."""
        return self._task_endpoint.wait_for_task(
            task_id, timeout_in_ms=timeout_in_ms, interval_in_ms=interval_in_ms
        )

    # Stats

    def get_stats(self) -> IndexStats:
        """Get stats of the index.

        Returns:
            Stats of the index.

        Raises:
            MeilisearchCommunicationError: If the server could not be reached.
            MeilisearchApiError: If Meilisearch answered with an error status.

        Examples
            >>> from meilisearch_rest import Client
            >>> with Client("http://127.0.0.1:7700", "masterKey") as client:
            >>>     index = client.index("movies")
            >>>     stats = index.get_stats()
        """
        response = self._http_requests.get(f"{self._base_url_with_uid}/stats")

        return IndexStats(**self._http_requests.parse_json(response))

    def number_of_documents(self) -> int:
        return self.get_stats().number_of_documents

    def field_distribution(self) -> dict[str, int]:
        return self.get_stats().field_distribution

    def is_indexing(self) -> bool:
        return self.get_stats().is_indexing

    # Search

    def search(
        self,
        query: str | None = None,
        *,
        offset: int | None = None,
        limit: int | None = None,
        hits_per_page: int | None = None,
        page: int | None = None,
        filter: Filter | None = None,
        facets: list[str] | None = None,
        attributes_to_retrieve: list[str] | None = None,
        attributes_to_crop: list[str] | None = None,
        crop_length: int | None = None,
        crop_marker: str | None = None,
        attributes_to_highlight: list[str] | None = None,
        highlight_pre_tag: str | None = None,
        highlight_post_tag: str | None = None,
        show_matches_position: bool | None = None,
        sort: list[str] | None = None,
        matching_strategy: Literal["all", "last", "frequency"] | None = None,
        attributes_to_search_on: list[str] | None = None,
        distinct: str | None = None,
        show_ranking_score: bool | None = None,
        show_ranking_score_details: bool | None = None,
        ranking_score_threshold: float | None = None,
        vector: list[float] | None = None,
        hybrid: Hybrid | None = None,
        locales: list[str] | None = None,
        retrieve_vectors: bool | None = None,
    ) -> JsonDict:
        """Search the index.

        Only the options that are given are sent, Meilisearch applies its own defaults to the
        rest. See `SearchParams` for the meaning of each option.

        When the search is paginated with `offset`/`limit` the response gets an `nbHits` key
        holding the `estimatedTotalHits` value, so callers can read the hit count the same way
        whatever the Meilisearch version. Page based searches (`page`/`hits_per_page`) return
        `totalHits` and are left as is.

        Args:
            query: String containing the word(s) to search. Defaults to None (placeholder
                search).

        Returns:
            The decoded search response.

        Raises:
            MeilisearchError: If ranking_score_threshold is not between 0.0 and 1.0.
            MeilisearchCommunicationError: If the server could not be reached.
            MeilisearchApiError: If Meilisearch answered with an error status.

        Examples
            >>> from meilisearch_rest import Client
            >>> with Client("http://127.0.0.1:7700", "masterKey") as client:
            >>>     index = client.index("movies")
            >>>     results = index.search("matrix", limit=5)
            >>>     results["nbHits"]
        """
        params = SearchParams(
            q=query,
            offset=offset,
            limit=limit,
            hits_per_page=hits_per_page,
            page=page,
            filter=filter,
            facets=facets,
            attributes_to_retrieve=attributes_to_retrieve,
            attributes_to_crop=attributes_to_crop,
            crop_length=crop_length,
            crop_marker=crop_marker,
            attributes_to_highlight=attributes_to_highlight,
            highlight_pre_tag=highlight_pre_tag,
            highlight_post_tag=highlight_post_tag,
            show_matches_position=show_matches_position,
            sort=sort,
            matching_strategy=matching_strategy,
            attributes_to_search_on=attributes_to_search_on,
            distinct=distinct,
            show_ranking_score=show_ranking_score,
            show_ranking_score_details=show_ranking_score_details,
            ranking_score_threshold=ranking_score_threshold,
            vector=vector,
            hybrid=hybrid,
            locales=locales,
            retrieve_vectors=retrieve_vectors,
        )
        response = self._http_requests.post(
            f"{self._base_url_with_uid}/search",
            params.model_dump(by_alias=True, exclude_none=True),
        )

        return normalize_hit_count(self._http_requests.parse_json(response))

    def facet_search(
        self,
        facet_name: str,
        facet_query: str = "",
        *,
        query: str | None = None,
        filter: Filter | None = None,
        matching_strategy: Literal["all", "last", "frequency"] | None = None,
        attributes_to_search_on: list[str] | None = None,
        exhaustive_facet_count: bool | None = None,
    ) -> JsonDict:
        """Search the values of a facet.

        The facet must be in the filterable attributes of the index.

        Args:
            facet_name: The name of the facet to search.
            facet_query: The value to search for. Defaults to "" (all values).
            query: Restrict the facet values to the documents matching this search query.
            filter: Restrict the facet values to the documents matching this filter.
            matching_strategy: The matching strategy used for `query`.
            attributes_to_search_on: Restrict `query` to these attributes.
            exhaustive_facet_count: Count facet values exactly instead of estimating.

        Returns:
            The decoded response, with `facetHits` holding the values and their counts.

        Raises:
            MeilisearchCommunicationError: If the server could not be reached.
            MeilisearchApiError: If Meilisearch answered with an error status.

        Examples
            >>> from meilisearch_rest import Client
            >>> with Client("http://127.0.0.1:7700", "masterKey") as client:
            >>>     index = client.index("movies")
            >>>     index.facet_search("genres", "fic", filter="rating > 3")
        """
        params = FacetSearchParams(
            facet_name=facet_name,
            facet_query=facet_query,
            q=query,
            filter=filter,
            matching_strategy=matching_strategy,
            attributes_to_search_on=attributes_to_search_on,
            exhaustive_facet_count=exhaustive_facet_count,
        )
        response = self._http_requests.post(
            f"{self._base_url_with_uid}/facet-search",
            params.model_dump(by_alias=True, exclude_none=True),
        )

        return self._http_requests.parse_json(response)

    def search_similar_documents(
        self,
        document_id: str | int,
        *,
        embedder: str = "default",
        offset: int | None = None,
        limit: int | None = None,
        filter: Filter | None = None,
        attributes_to_retrieve: list[str] | None = None,
        retrieve_vectors: bool | None = None,
        show_ranking_score: bool | None = None,
        show_ranking_score_details: bool | None = None,
        ranking_score_threshold: float | None = None,
    ) -> JsonDict:
        """Find the documents that are the most similar to a document.

        Needs an embedder to be configured for the index.

        Args:
            document_id: The id of the target document.
            embedder: The name of the embedder to use. Defaults to "default".

        Returns:
            The decoded response.

        Raises:
            MeilisearchError: If ranking_score_threshold is not between 0.0 and 1.0.
            MeilisearchCommunicationError: If the server could not be reached.
            MeilisearchApiError: If Meilisearch answered with an error status.
        """
        params = SimilarSearchParams(
            id=document_id,
            embedder=embedder,
            offset=offset,
            limit=limit,
            filter=filter,
            attributes_to_retrieve=attributes_to_retrieve,
            retrieve_vectors=retrieve_vectors,
            show_ranking_score=show_ranking_score,
            show_ranking_score_details=show_ranking_score_details,
            ranking_score_threshold=ranking_score_threshold,
        )
        response = self._http_requests.post(
            f"{self._base_url_with_uid}/similar",
            params.model_dump(by_alias=True, exclude_none=True),
        )

        return self._http_requests.parse_json(response)

    # Documents

    def get_document(self, document_id: str | int, *, fields: list[str] | None = None) -> JsonDict:
        """Get one document.

        Args:
            document_id: Unique identifier of the document. It is url encoded before sending.
            fields: Document attributes to return. Defaults to None (all attributes).

        Returns:
            The document.

        Raises:
            InvalidDocumentIdError: If document_id is empty.
            MeilisearchCommunicationError: If the server could not be reached.
            MeilisearchApiError: If Meilisearch answered with an error status.

        Examples
            >>> from meilisearch_rest import Client
            >>> with Client("http://127.0.0.1:7700", "masterKey") as client:
            >>>     index = client.index("movies")
            >>>     document = index.get_document("1234", fields=["title"])
        """
        url = build_encoded_url(
            document_url(self._documents_url, document_id), {"fields": fields or None}
        )
        response = self._http_requests.get(url)

        return self._http_requests.parse_json(response)

    @version_error_handler("get_documents")
    def get_documents(
        self,
        *,
        offset: int | None = None,
        limit: int | None = None,
        fields: list[str] | None = None,
        filter: Filter | None = None,
        sort: list[str] | None = None,
        ids: list[str | int] | None = None,
        retrieve_vectors: bool | None = None,
    ) -> DocumentsInfo:
        """Get a page of documents.

        Without a filter the options are sent as a query string to `GET /documents`. With a
        filter they are sent as a json body to `POST /documents/fetch`, which needs
        Meilisearch >= v1.2.0.

        Args:
            offset: Number of documents to skip. Defaults to the Meilisearch default.
            limit: Maximum number of documents returned. Defaults to the Meilisearch default.
            fields: Document attributes to return. Defaults to None (all attributes).
            filter: Only return documents matching this filter. Defaults to None.
            sort: Attributes to sort the documents by. Defaults to None.
            ids: Only return documents with these primary keys. Defaults to None.
            retrieve_vectors: Return the vectors of the documents. Defaults to None.

        Returns:
            Documents info.

        Raises:
            MeilisearchVersionError: If the Meilisearch API returned an error, with a hint that the
                server may be too old for the options used.
            MeilisearchCommunicationError: If the server could not be reached.

        Examples
            >>> from meilisearch_rest import Client
            >>> with Client("http://127.0.0.1:7700", "masterKey") as client:
            >>>     index = client.index("movies")
            >>>     documents = index.get_documents(limit=5, filter="genre = horror")
        """
        query = DocumentsQuery(
            offset=offset,
            limit=limit,
            fields=fields,
            filter=filter,
            sort=sort,
            ids=ids,
            retrieve_vectors=retrieve_vectors,
        )
        params = query.model_dump(by_alias=True, exclude_none=True)

        if filter is None:
            response = self._http_requests.get(build_encoded_url(self._documents_url, params))
        else:
            response = self._http_requests.post(f"{self._documents_url}/fetch", params)

        return DocumentsInfo(**self._http_requests.parse_json(response))

    def _send_documents(
        self,
        method: Literal["post", "put"],
        body: Any,
        *,
        primary_key: str | None = None,
        csv_delimiter: str | None = None,
        content_type: str = JSON_CONTENT_TYPE,
        serialize_body: bool = True,
        compress: bool = False,
    ) -> Task:
        url = build_encoded_url(
            self._documents_url, {"primaryKey": primary_key, "csvDelimiter": csv_delimiter}
        )
        send = self._http_requests.post if method == "post" else self._http_requests.put
        response = send(
            url,
            body,
            content_type=content_type,
            compress=compress,
            serialize_body=serialize_body,
        )

        return self._task(response)

    def add_documents(
        self,
        documents: Sequence[JsonMapping] | JsonMapping,
        primary_key: str | None = None,
        *,
        compress: bool = False,
    ) -> Task:
        """Add documents to the index, replacing documents that already exist.

        Existing documents with the same primary key are replaced entirely, fields missing from
        the new version are removed.

        Deprecated names: `replace_documents`, `add_or_replace_documents`.

        Args:
            documents: List of documents. A single document is accepted and sent as a list.
            primary_key: The primary key of the documents. Ignored if already set on the
                index. Defaults to None (inferred by Meilisearch).
            compress: If set to True the data will be sent in gzip format. Defaults to False.

        Returns:
            The indexing task.

        Raises:
            MeilisearchCommunicationError: If the server could not be reached.
            MeilisearchApiError: If Meilisearch answered with an error status.

        Examples
            >>> from meilisearch_rest import Client
            >>> documents = [
            >>>     {"id": 1, "title": "Movie 1", "genre": "comedy"},
            >>>     {"id": 2, "title": "Movie 2", "genre": "drama"},
            >>> ]
            >>> with Client("http://127.0.0.1:7700", "masterKey") as client:
            >>>     index = client.index("movies")
            >>>     index.add_documents(documents).wait()
        """
        if isinstance(documents, Mapping):
            documents = [documents]

        return self._send_documents(
            "post", list(documents), primary_key=primary_key, compress=compress
        )

    def add_documents_json(
        self, documents: str, primary_key: str | None = None, *, compress: bool = False
    ) -> Task:
        """Add documents from a string holding a json array. The string is sent unchanged.

        Deprecated names: `replace_documents_json`, `add_or_replace_documents_json`.
        """
        return self._send_documents(
            "post", documents, primary_key=primary_key, serialize_body=False, compress=compress
        )

    def add_documents_ndjson(
        self, documents: str, primary_key: str | None = None, *, compress: bool = False
    ) -> Task:
        """Add documents from newline delimited json text.

        Deprecated names: `replace_documents_ndjson`, `add_or_replace_documents_ndjson`.
        """
        return self._send_documents(
            "post",
            documents,
            primary_key=primary_key,
            content_type=NDJSON_CONTENT_TYPE,
            compress=compress,
        )

    def add_documents_csv(
        self,
        documents: str,
        primary_key: str | None = None,
        csv_delimiter: str | None = None,
        *,
        compress: bool = False,
    ) -> Task:
        """Add documents from csv text.

        Deprecated names: `replace_documents_csv`, `add_or_replace_documents_csv`.

        Args:
            documents: The csv text, the first line is the header.
            primary_key: The primary key of the documents. Defaults to None.
            csv_delimiter: A single ascii character separating the values. Defaults to None
                (comma).
            compress: If set to True the data will be sent in gzip format. Defaults to False.

        Raises:
            ValueError: If csv_delimiter is not a single ascii character.
        """
        validate_csv_delimiter(csv_delimiter)
        return self._send_documents(
            "post",
            documents,
            primary_key=primary_key,
            csv_delimiter=csv_delimiter,
            content_type=CSV_CONTENT_TYPE,
            compress=compress,
        )

    def update_documents(
        self,
        documents: Sequence[JsonMapping] | JsonMapping,
        primary_key: str | None = None,
        *,
        compress: bool = False,
    ) -> Task:
        """Add documents or update the fields of documents that already exist.

        Unlike `add_documents`, fields that are not in the new version are kept.

        Deprecated name: `add_or_update_documents`.

        Args:
            documents: List of documents. A single document is accepted and sent as a list.
            primary_key: The primary key of the documents. Defaults to None.
            compress: If set to True the data will be sent in gzip format. Defaults to False.

        Returns:
            The indexing task.

        Raises:
            MeilisearchCommunicationError: If the server could not be reached.
            MeilisearchApiError: If Meilisearch answered with an error status.
        """
        if isinstance(documents, Mapping):
            documents = [documents]

        return self._send_documents(
            "put", list(documents), primary_key=primary_key, compress=compress
        )

    def update_documents_json(
        self, documents: str, primary_key: str | None = None, *, compress: bool = False
    ) -> Task:
        return self._send_documents(
            "put", documents, primary_key=primary_key, serialize_body=False, compress=compress
        )

    def update_documents_ndjson(
        self, documents: str, primary_key: str | None = None, *, compress: bool = False
    ) -> Task:
        return self._send_documents(
            "put",
            documents,
            primary_key=primary_key,
            content_type=NDJSON_CONTENT_TYPE,
            compress=compress,
        )

    def update_documents_csv(
        self,
        documents: str,
        primary_key: str | None = None,
        csv_delimiter: str | None = None,
        *,
        compress: bool = False,
    ) -> Task:
        validate_csv_delimiter(csv_delimiter)
        return self._send_documents(
            "put",
            documents,
            primary_key=primary_key,
            csv_delimiter=csv_delimiter,
            content_type=CSV_CONTENT_TYPE,
            compress=compress,
        )

    def add_documents_in_batches(
        self,
        documents: Sequence[JsonMapping],
        batch_size: int = 1000,
        primary_key: str | None = None,
        *,
        compress: bool = False,
    ) -> list[Task]:
        """Add documents in batches to reduce RAM usage while indexing.

        The batches are sent one after the other in the order of `documents`. Each batch gets
        its own task and one failing batch does not affect the others.

        Args:
            documents: List of documents.
            batch_size: The number of documents in each batch. Defaults to 1000.
            primary_key: The primary key of the documents. Defaults to None.
            compress: If set to True the data will be sent in gzip format. Defaults to False.

        Returns:
            One task per batch, in order.

        Raises:
            MeilisearchCommunicationError: If the server could not be reached.
            MeilisearchApiError: If Meilisearch answered with an error status.

        Examples
            >>> from meilisearch_rest import Client
            >>> with Client("http://127.0.0.1:7700", "masterKey") as client:
            >>>     index = client.index("movies")
            >>>     tasks = index.add_documents_in_batches(documents, batch_size=500)
            >>>     for task in tasks:
            >>>         task.wait()
        """
        tasks = []
        chunks = list(batch(documents, batch_size))
        for number, chunk in enumerate(chunks, start=1):
            self._log_batch(number, len(chunks))
            tasks.append(self.add_documents(chunk, primary_key, compress=compress))

        return tasks

    def update_documents_in_batches(
        self,
        documents: Sequence[JsonMapping],
        batch_size: int = 1000,
        primary_key: str | None = None,
        *,
        compress: bool = False,
    ) -> list[Task]:
        """Update documents in batches. See `add_documents_in_batches`."""
        tasks = []
        chunks = list(batch(documents, batch_size))
        for number, chunk in enumerate(chunks, start=1):
            self._log_batch(number, len(chunks))
            tasks.append(self.update_documents(chunk, primary_key, compress=compress))

        return tasks

    def add_documents_ndjson_in_batches(
        self, documents: str, batch_size: int = 1000, primary_key: str | None = None
    ) -> list[Task]:
        """Send newline delimited json text in batches of `batch_size` lines."""
        tasks = []
        chunks = ndjson_batches(documents, batch_size)
        for number, chunk in enumerate(chunks, start=1):
            self._log_batch(number, len(chunks))
            tasks.append(self.add_documents_ndjson(chunk, primary_key))

        return tasks

    def update_documents_ndjson_in_batches(
        self, documents: str, batch_size: int = 1000, primary_key: str | None = None
    ) -> list[Task]:
        tasks = []
        chunks = ndjson_batches(documents, batch_size)
        for number, chunk in enumerate(chunks, start=1):
            self._log_batch(number, len(chunks))
            tasks.append(self.update_documents_ndjson(chunk, primary_key))

        return tasks

    def add_documents_csv_in_batches(
        self,
        documents: str,
        batch_size: int = 1000,
        primary_key: str | None = None,
        csv_delimiter: str | None = None,
    ) -> list[Task]:
        """Send csv text in batches of `batch_size` data rows.

        Every batch starts with the header line of `documents`, so a csv with 5 data rows and a
        batch size of 2 is sent as 3 requests.
        """
        validate_csv_delimiter(csv_delimiter)
        tasks = []
        chunks = csv_batches(documents, batch_size)
        for number, chunk in enumerate(chunks, start=1):
            self._log_batch(number, len(chunks))
            tasks.append(self.add_documents_csv(chunk, primary_key, csv_delimiter))

        return tasks

    def update_documents_csv_in_batches(
        self,
        documents: str,
        batch_size: int = 1000,
        primary_key: str | None = None,
        csv_delimiter: str | None = None,
    ) -> list[Task]:
        validate_csv_delimiter(csv_delimiter)
        tasks = []
        chunks = csv_batches(documents, batch_size)
        for number, chunk in enumerate(chunks, start=1):
            self._log_batch(number, len(chunks))
            tasks.append(self.update_documents_csv(chunk, primary_key, csv_delimiter))

        return tasks

    def _log_batch(self, number: int, total: int) -> None:
        logger.debug("sending batch %s of %s to index %s", number, total, self.uid)

    def add_documents_from_file(
        self,
        file_path: Path | str,
        primary_key: str | None = None,
        *,
        csv_delimiter: str | None = None,
        batch_size: int | None = None,
    ) -> list[Task]:
        """Load documents from a json, ndjson or csv file and add them.

        Args:
            file_path: Path to the file.
            primary_key: The primary key of the documents. Defaults to None.
            csv_delimiter: Delimiter for csv files. Defaults to None (comma).
            batch_size: When set the documents are sent in batches of this size. Defaults to
                None (one request).

        Returns:
            The tasks, one per request.

        Raises:
            MeilisearchError: If the file does not exist or is not a json, ndjson or csv file.
            InvalidDocumentError: If a json file does not hold a list of documents.
            ValueError: If csv_delimiter is not a single ascii character.
        """
        documents = load_documents_from_file(
            file_path, csv_delimiter, json_handler=self._json_handler
        )

        if batch_size:
            return self.add_documents_in_batches(documents, batch_size, primary_key)

        return [self.add_documents(documents, primary_key)]

    def add_documents_from_raw_file(
        self,
        file_path: Path | str,
        primary_key: str | None = None,
        *,
        csv_delimiter: str | None = None,
        compress: bool = False,
    ) -> Task:
        """Send a csv or ndjson file to Meilisearch without parsing it.

        Raises:
            MeilisearchError: If the file does not exist.
            ValueError: If the file is not csv or ndjson, or a csv_delimiter is given for a
                non-csv file.
        """
        upload_path = Path(file_path)
        if not upload_path.exists():
            raise MeilisearchError("No file found at the specified path")

        if upload_path.suffix not in (".csv", ".ndjson"):
            raise ValueError("Only csv and ndjson files can be sent as raw files")

        if csv_delimiter and upload_path.suffix != ".csv":
            raise ValueError("A csv_delimiter can only be used with csv files")

        with open(upload_path) as f:
            data = f.read()

        if upload_path.suffix == ".csv":
            return self.add_documents_csv(data, primary_key, csv_delimiter, compress=compress)

        return self.add_documents_ndjson(data, primary_key, compress=compress)

    def update_documents_by_function(
        self, function: str, *, context: JsonDict | None = None, filter: Filter | None = None
    ) -> Task:
        """Edit documents with a Rhai function.

        Experimental in Meilisearch v1.10.0, enable `editDocumentsByFunction` first.

        Args:
            function: The Rhai function applied to each document.
            context: Values made available to the function. Defaults to None.
            filter: Only edit the documents matching this filter. Defaults to None.

        Returns:
            The edition task.

        Examples
            >>> from meilisearch_rest import Client
            >>> with Client("http://127.0.0.1:7700", "masterKey") as client:
            >>>     index = client.index("movies")
            >>>     index.update_documents_by_function("doc.title = doc.title.to_upper()")
        """
        payload: JsonDict = {"function": function}

        if context:
            payload["context"] = context

        if filter:
            payload["filter"] = filter

        response = self._http_requests.post(f"{self._documents_url}/edit", payload)

        return self._task(response)

    def delete_document(self, document_id: str | int) -> Task:
        """Delete one document.

        Deprecated name: `delete_one_document`.

        Args:
            document_id: Unique identifier of the document.

        Returns:
            The deletion task.

        Raises:
            InvalidDocumentIdError: If document_id is empty or None. Nothing is sent.
            MeilisearchCommunicationError: If the server could not be reached.
            MeilisearchApiError: If Meilisearch answered with an error status.
        """
        url = document_url(self._documents_url, document_id)
        response = self._http_requests.delete(url)

        return self._task(response)

    @version_error_handler("delete_documents")
    def delete_documents(self, ids: str | int | Sequence[str | int]) -> Task:
        """Delete documents by primary key.

        A single id is sent as a list of one.

        Deprecated name: `delete_multiple_documents`.

        Raises:
            MeilisearchVersionError: If the Meilisearch API returned an error.
        """
        if isinstance(ids, (str, int)):
            ids = [ids]

        response = self._http_requests.post(f"{self._documents_url}/delete-batch", list(ids))

        return self._task(response)

    @version_error_handler("delete_documents_by_filter")
    def delete_documents_by_filter(self, filter: Filter) -> Task:
        """Delete the documents matching a filter. Needs Meilisearch >= v1.2.0.

        Raises:
            MeilisearchVersionError: If the Meilisearch API returned an error.
        """
        response = self._http_requests.post(f"{self._documents_url}/delete", {"filter": filter})

        return self._task(response)

    def delete_all_documents(self) -> Task:
        response = self._http_requests.delete(self._documents_url)
        return self._task(response)

    # Settings

    def _get_setting(self, name: str) -> Any:
        response = self._http_requests.get(f"{self._settings_url}/{name}")
        return self._http_requests.parse_json(response)

    def _update_setting(
        self, name: str, body: Any, *, method: Literal["put", "patch"] = "put"
    ) -> Task:
        url = f"{self._settings_url}/{name}"
        if method == "patch":
            response = self._http_requests.patch(url, body)
        else:
            response = self._http_requests.put(url, body)

        return self._task(response)

    def _reset_setting(self, name: str) -> Task:
        response = self._http_requests.delete(f"{self._settings_url}/{name}")
        return self._task(response)

    def get_settings(self) -> MeilisearchSettings:
        """Get all the settings of the index.

        Returns:
            Settings of the index.

        Raises:
            MeilisearchCommunicationError: If the server could not be reached.
            MeilisearchApiError: If Meilisearch answered with an error status.
        """
        response = self._http_requests.get(self._settings_url)

        return MeilisearchSettings(**self._http_requests.parse_json(response))

    def update_settings(self, body: MeilisearchSettings) -> Task:
        """Update several settings at once.

        Settings left to None in `body` are not sent and keep their current value.

        Examples
            >>> from meilisearch_rest import Client
            >>> from meilisearch_rest.models.settings import MeilisearchSettings
            >>> new_settings = MeilisearchSettings(
            >>>     synonyms={"wolverine": ["xmen", "logan"], "logan": ["wolverine"]},
            >>>     stop_words=["the", "a", "an"],
            >>>     filterable_attributes=["genre", "director"],
            >>> )
            >>> with Client("http://127.0.0.1:7700", "masterKey") as client:
            >>>     client.index("movies").update_settings(new_settings).wait()
        """
        response = self._http_requests.patch(self._settings_url, body.to_json())

        return self._task(response)

    def reset_settings(self) -> Task:
        """Reset every setting of the index to its default value."""
        response = self._http_requests.delete(self._settings_url)

        return self._task(response)

    def get_ranking_rules(self) -> list[str]:
        return self._get_setting("ranking-rules")

    def update_ranking_rules(self, ranking_rules: list[str]) -> Task:
        """Replace the ranking rules.

        Args:
            ranking_rules: The rules in order of importance, for example
                `["words", "typo", "proximity", "attribute", "sort", "exactness", "rank:desc"]`.
        """
        return self._update_setting("ranking-rules", ranking_rules)

    def reset_ranking_rules(self) -> Task:
        return self._reset_setting("ranking-rules")

    def get_distinct_attribute(self) -> str | None:
        return self._get_setting("distinct-attribute") or None

    def update_distinct_attribute(self, distinct_attribute: str) -> Task:
        return self._update_setting("distinct-attribute", distinct_attribute)

    def reset_distinct_attribute(self) -> Task:
        return self._reset_setting("distinct-attribute")

    def get_searchable_attributes(self) -> list[str]:
        return self._get_setting("searchable-attributes")

    def update_searchable_attributes(self, searchable_attributes: list[str]) -> Task:
        return self._update_setting("searchable-attributes", searchable_attributes)

    def reset_searchable_attributes(self) -> Task:
        return self._reset_setting("searchable-attributes")

    def get_displayed_attributes(self) -> list[str]:
        return self._get_setting("displayed-attributes")

    def update_displayed_attributes(self, displayed_attributes: list[str]) -> Task:
        return self._update_setting("displayed-attributes", displayed_attributes)

    def reset_displayed_attributes(self) -> Task:
        return self._reset_setting("displayed-attributes")

    def get_stop_words(self) -> list[str] | None:
        """Get the stop words, None when there are none."""
        return self._get_setting("stop-words") or None

    def update_stop_words(self, stop_words: list[str]) -> Task:
        """Replace the stop words. Meilisearch stores them as a set, order is not kept."""
        return self._update_setting("stop-words", stop_words)

    def reset_stop_words(self) -> Task:
        return self._reset_setting("stop-words")

    def get_synonyms(self) -> dict[str, list[str]] | None:
        return self._get_setting("synonyms") or None

    def update_synonyms(self, synonyms: dict[str, list[str]]) -> Task:
        """Replace the synonyms.

        Args:
            synonyms: Mapping of a word to the words that should be considered equivalent to it,
                for example `{"wolverine": ["xmen", "logan"]}`.
        """
        return self._update_setting("synonyms", synonyms)

    def reset_synonyms(self) -> Task:
        return self._reset_setting("synonyms")

    def get_filterable_attributes(self) -> list[str | FilterableAttributes] | None:
        response = self._get_setting("filterable-attributes")
        if not response:
            return None

        return [x if isinstance(x, str) else FilterableAttributes(**x) for x in response]

    def update_filterable_attributes(
        self, filterable_attributes: list[str | FilterableAttributes]
    ) -> Task:
        body = [
            x if isinstance(x, str) else x.model_dump(by_alias=True)
            for x in filterable_attributes
        ]
        return self._update_setting("filterable-attributes", body)

    def reset_filterable_attributes(self) -> Task:
        return self._reset_setting("filterable-attributes")

    def get_sortable_attributes(self) -> list[str]:
        return self._get_setting("sortable-attributes")

    def update_sortable_attributes(self, sortable_attributes: list[str]) -> Task:
        return self._update_setting("sortable-attributes", sortable_attributes)

    def reset_sortable_attributes(self) -> Task:
        return self._reset_setting("sortable-attributes")

    def get_typo_tolerance(self) -> TypoTolerance:
        return TypoTolerance(**self._get_setting("typo-tolerance"))

    def update_typo_tolerance(self, typo_tolerance: TypoTolerance) -> Task:
        return self._update_setting(
            "typo-tolerance",
            typo_tolerance.model_dump(by_alias=True, exclude_none=True),
            method="patch",
        )

    def reset_typo_tolerance(self) -> Task:
        return self._reset_setting("typo-tolerance")

    def get_faceting(self) -> Faceting:
        return Faceting(**self._get_setting("faceting"))

    def update_faceting(self, faceting: Faceting) -> Task:
        """Update the faceting settings.

        Args:
            faceting: The maximum number of values returned per facet and, optionally, how the
                values of each facet are sorted (`alpha` or `count`).
        """
        return self._update_setting(
            "faceting", faceting.model_dump(by_alias=True, exclude_none=True), method="patch"
        )

    def reset_faceting(self) -> Task:
        return self._reset_setting("faceting")

    def get_pagination(self) -> Pagination:
        return Pagination(**self._get_setting("pagination"))

    def update_pagination(self, pagination: Pagination) -> Task:
        return self._update_setting(
            "pagination", pagination.model_dump(by_alias=True), method="patch"
        )

    def reset_pagination(self) -> Task:
        return self._reset_setting("pagination")

    def get_separator_tokens(self) -> list[str]:
        return self._get_setting("separator-tokens")

    def update_separator_tokens(self, separator_tokens: list[str]) -> Task:
        return self._update_setting("separator-tokens", separator_tokens)

    def reset_separator_tokens(self) -> Task:
        return self._reset_setting("separator-tokens")

    def get_non_separator_tokens(self) -> list[str]:
        return self._get_setting("non-separator-tokens")

    def update_non_separator_tokens(self, non_separator_tokens: list[str]) -> Task:
        return self._update_setting("non-separator-tokens", non_separator_tokens)

    def reset_non_separator_tokens(self) -> Task:
        return self._reset_setting("non-separator-tokens")

    def get_search_cutoff_ms(self) -> int | None:
        return self._get_setting("search-cutoff-ms")

    def update_search_cutoff_ms(self, search_cutoff_ms: int) -> Task:
        return self._update_setting("search-cutoff-ms", search_cutoff_ms)

    def reset_search_cutoff_ms(self) -> Task:
        return self._reset_setting("search-cutoff-ms")

    def get_dictionary(self) -> list[str]:
        return self._get_setting("dictionary")

    def update_dictionary(self, dictionary: list[str]) -> Task:
        return self._update_setting("dictionary", dictionary)

    def reset_dictionary(self) -> Task:
        return self._reset_setting("dictionary")

    def get_proximity_precision(self) -> ProximityPrecision:
        return ProximityPrecision(self._get_setting("proximity-precision"))

    def update_proximity_precision(self, proximity_precision: ProximityPrecision) -> Task:
        return self._update_setting(
            "proximity-precision", ProximityPrecision(proximity_precision).value
        )

    def reset_proximity_precision(self) -> Task:
        return self._reset_setting("proximity-precision")

    def get_embedders(self) -> Embedders | None:
        """Get the embedders, None when no embedder is configured."""
        return Embedders.from_json(self._get_setting("embedders"))

    def update_embedders(self, embedders: Embedders) -> Task:
        """Add or update embedders.

        Embedders not named in `embedders` are kept. Fields left to None are not sent.

        Examples
            >>> from meilisearch_rest import Client
            >>> from meilisearch_rest.models.settings import Embedders, UserProvidedEmbedder
            >>> with Client("http://127.0.0.1:7700", "masterKey") as client:
            >>>     index = client.index("movies")
            >>>     index.update_embedders(
            >>>         Embedders(embedders={"default": UserProvidedEmbedder(dimensions=512)})
            >>>     )
        """
        return self._update_setting("embedders", embedders.to_json(), method="patch")

    def reset_embedders(self) -> Task:
        return self._reset_setting("embedders")

    def get_localized_attributes(self) -> list[LocalizedAttributes] | None:
        response = self._get_setting("localized-attributes")
        if not response:
            return None

        return [LocalizedAttributes(**x) for x in response]

    def update_localized_attributes(
        self, localized_attributes: list[LocalizedAttributes]
    ) -> Task:
        return self._update_setting(
            "localized-attributes", [x.model_dump(by_alias=True) for x in localized_attributes]
        )

    def reset_localized_attributes(self) -> Task:
        return self._reset_setting("localized-attributes")

    def get_facet_search(self) -> bool:
        return self._get_setting("facet-search")

    def update_facet_search(self, facet_search: bool) -> Task:
        return self._update_setting("facet-search", facet_search)

    def reset_facet_search(self) -> Task:
        return self._reset_setting("facet-search")

    def get_prefix_search(self) -> str:
        return self._get_setting("prefix-search")

    def update_prefix_search(
        self, prefix_search: Literal["disabled", "indexingTime", "searchTime"]
    ) -> Task:
        return self._update_setting("prefix-search", prefix_search)

    def reset_prefix_search(self) -> Task:
        return self._reset_setting("prefix-search")
