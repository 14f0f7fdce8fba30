from __future__ import annotations

from datetime import datetime, timezone
from ssl import SSLContext
from typing import TYPE_CHECKING, Any

import jwt
from httpx import BaseTransport
from httpx import Client as HttpxClient

from meilisearch_rest._http_requests import HttpRequests, build_encoded_url
from meilisearch_rest._utils import transform_attributes
from meilisearch_rest.errors import (
    InvalidRestriction,
    MeilisearchApiError,
    MeilisearchCommunicationError,
)
from meilisearch_rest.index import Index
from meilisearch_rest.json_handler import BuiltinHandler, JsonHandler
from meilisearch_rest.models.client import ClientStats, Key, KeyCreate, KeySearch, KeyUpdate
from meilisearch_rest.models.health import Health
from meilisearch_rest.models.index import IndexInfo
from meilisearch_rest.models.search import MultiSearchQuery, normalize_hit_count
from meilisearch_rest.models.task import TaskResult, TaskStatus
from meilisearch_rest.models.version import Version
from meilisearch_rest.task import DEFAULT_INTERVAL_IN_MS, DEFAULT_TIMEOUT_IN_MS, Task, TaskEndpoint

if TYPE_CHECKING:  # pragma: no cover
    import sys
    from types import TracebackType

    from meilisearch_rest.types import JsonDict, JsonMapping

    if sys.version_info >= (3, 11):
        from typing import Self
    else:
        from typing_extensions import Self


class Client:
    """Client to connect to the Meilisearch API."""

    def __init__(
        self,
        url: str,
        api_key: str | None = None,
        *,
        timeout: int | None = None,
        verify: bool | SSLContext = True,
        custom_headers: dict[str, str] | None = None,
        json_handler: JsonHandler | None = None,
        http2: bool = False,
        transport: BaseTransport | None = None,
    ) -> None:
        """Class initializer.

        Args:
            url: The url to the Meilisearch API (ex: http://localhost:7700)
            api_key: The optional API key for Meilisearch. Defaults to None.
            timeout: The amount of time in seconds that the client will wait for a response before
                timing out. Defaults to None.
            verify: SSL certificates (a.k.a CA bundle) used to
                verify the identity of requested hosts. Either `True` (default CA bundle),
                a path to an SSL certificate file, or `False` (disable verification)
            custom_headers: Custom headers to add when sending data to Meilisearch. Defaults to
                None.
            json_handler: The module to use for json operations. The options are BuiltinHandler
                (uses the json module from the standard library), OrjsonHandler (uses orjson), or
                UjsonHandler (uses ujson). Note that in order use orjson or ujson the corresponding
                extra needs to be included. Default: BuiltinHandler.
            http2: If set to True, the client will use HTTP/2. Defaults to False.
            transport: A custom httpx transport, mostly useful in tests. Defaults to None.
        """
        self.json_handler = json_handler if json_handler else BuiltinHandler()
        self._headers: dict[str, str] | None = None
        if api_key:
            self._headers = {"Authorization": f"Bearer {api_key}"}

        if custom_headers:
            if self._headers:
                self._headers.update(custom_headers)
            else:
                self._headers = custom_headers

        self.http_client = HttpxClient(
            base_url=url,
            timeout=timeout,
            headers=self._headers,
            verify=verify,
            http2=http2,
            transport=transport,
        )
        self._http_requests = HttpRequests(self.http_client, json_handler=self.json_handler)
        self.task_endpoint = TaskEndpoint(self._http_requests)

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        et: type[BaseException] | None,
        ev: type[BaseException] | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        """Closes the client.

        This only needs to be used if the client was not created with a context manager.
        """
        self.http_client.close()

    def _task(self, response: Any) -> Task:
        return Task.from_response(self._http_requests.parse_json(response), self.task_endpoint)

    # Indexes

    def index(self, uid: str) -> Index:
        """Create a local reference to an index identified by UID, without making an HTTP call.

        Args:
            uid: Name of the index.

        Returns:
            An Index instance.

        Examples
            >>> from meilisearch_rest import Client
            >>> with Client("http://127.0.0.1:7700", "masterKey") as client:
            >>>     index = client.index("movies")
        """
        return Index(
            self.http_client,
            uid=uid,
            json_handler=self.json_handler,
            task_endpoint=self.task_endpoint,
        )

    def get_index(self, uid: str) -> Index:
        """Gets a single index based on the uid of the index.

        Args:
            uid: Name of the index.

        Returns:
            An Index instance containing the information of the fetched index.

        Raises:
            MeilisearchCommunicationError: If the server could not be reached.
            MeilisearchApiError: If Meilisearch answered with an error status.
        """
        return self.index(uid).fetch_info()

    def get_raw_index(self, uid: str) -> IndexInfo | None:
        """Gets the index information rather than an Index instance.

        Returns:
            The index information, or None if the index does not exist.
        """
        try:
            response = self._http_requests.get(f"indexes/{uid}")
        except MeilisearchApiError as err:
            if err.status_code == 404:
                return None
            raise

        return IndexInfo(**self._http_requests.parse_json(response))

    def _index_results(self, offset: int | None, limit: int | None) -> list[JsonDict]:
        url = build_encoded_url("indexes", {"offset": offset, "limit": limit})
        response = self._http_requests.get(url)

        return self._http_requests.parse_json(response)["results"]

    def get_indexes(
        self, *, offset: int | None = None, limit: int | None = None
    ) -> list[Index] | None:
        """Get all indexes.

        Args:
            offset: Number of indexes to skip. The default of None will use the Meilisearch
                default.
            limit: Number of indexes to return. The default of None will use the Meilisearch
                default.

        Returns:
            A list of all indexes, or None if there are none.

        Raises:
            MeilisearchCommunicationError: If the server could not be reached.
            MeilisearchApiError: If Meilisearch answered with an error status.

        Examples
            >>> from meilisearch_rest import Client
            >>> with Client("http://127.0.0.1:7700", "masterKey") as client:
            >>>     indexes = client.get_indexes()
        """
        results = self._index_results(offset, limit)
        if not results:
            return None

        return [
            Index(
                self.http_client,
                uid=x["uid"],
                primary_key=x.get("primaryKey"),
                created_at=x.get("createdAt"),
                updated_at=x.get("updatedAt"),
                json_handler=self.json_handler,
                task_endpoint=self.task_endpoint,
            )
            for x in results
        ]

    def get_raw_indexes(
        self, *, offset: int | None = None, limit: int | None = None
    ) -> list[IndexInfo] | None:
        """Same as `get_indexes` but returns the index information instead of Index instances."""
        results = self._index_results(offset, limit)
        if not results:
            return None

        return [IndexInfo(**x) for x in results]

    def create_index(self, uid: str, primary_key: str | None = None) -> Task:
        """Enqueue the creation of an index.

        Args:
            uid: Name of the index.
            primary_key: The primary key of the documents. Defaults to None.

        Returns:
            The index creation task. The index exists once the task has succeeded.

        Raises:
            MeilisearchCommunicationError: If the server could not be reached.
            MeilisearchApiError: If Meilisearch answered with an error status.

        Examples
            >>> from meilisearch_rest import Client
            >>> with Client("http://127.0.0.1:7700", "masterKey") as client:
            >>>     client.create_index("movies", primary_key="id").wait()
        """
        return Index.create(
            self.http_client,
            uid,
            primary_key,
            json_handler=self.json_handler,
            task_endpoint=self.task_endpoint,
        )

    def get_or_create_index(
        self, uid: str, primary_key: str | None = None, *, timeout_in_ms: int | None = None
    ) -> Index:
        """Get an index, or create it and wait for the creation if it doesn't exist.

        Args:
            uid: Name of the index.
            primary_key: The primary key of the documents. Defaults to None.
            timeout_in_ms: Amount of time in milliseconds to wait for the creation before raising
                a MeilisearchTimeoutError. `None` waits indefinitely. Defaults to None.

        Returns:
            An instance of Index containing the information of the retrieved or newly created index.

        Raises:
            MeilisearchCommunicationError: If the server could not be reached.
            MeilisearchApiError: If Meilisearch answered with an error status.
            MeilisearchTimeoutError: If the creation did not finish in time.
        """
        try:
            return self.get_index(uid)
        except MeilisearchApiError as err:
            if "index_not_found" not in err.code:
                raise

        self.create_index(uid, primary_key).wait(timeout_in_ms=timeout_in_ms)

        return self.get_index(uid)

    def delete_index(self, uid: str) -> Task:
        """Enqueue the deletion of an index."""
        return self.index(uid).delete()

    def delete_index_if_exists(self, uid: str) -> bool:
        """Deletes an index if it already exists.

        Args:
            uid: Name of the index.

        Returns:
            True if an index was deleted for False if not.

        Raises:
            MeilisearchCommunicationError: If the server could not be reached.
            MeilisearchApiError: If Meilisearch answered with an error status.
        """
        return self.index(uid).delete_if_exists()

    def swap_indexes(self, indexes: list[tuple[str, str]]) -> Task:
        """Swap pairs of indexes.

        Args:
            indexes: A list of tuples, each tuple should contain the indexes to swap.

        Returns:
            The swap task.

        Examples
            >>> from meilisearch_rest import Client
            >>> with Client("http://127.0.0.1:7700", "masterKey") as client:
            >>>     client.swap_indexes([("index_a", "index_b")])
        """
        processed_indexes = [{"indexes": list(x)} for x in indexes]
        response = self._http_requests.post("swap-indexes", processed_indexes)

        return self._task(response)

    def multi_search(self, queries: list[MultiSearchQuery]) -> JsonDict:
        """Run several searches, possibly on different indexes, in one request.

        Args:
            queries: The searches to run. Each one names the index it targets.

        Returns:
            The decoded response. `results` holds one search response per query, in order.

        Raises:
            MeilisearchCommunicationError: If the server could not be reached.
            MeilisearchApiError: If Meilisearch answered with an error status.

        Examples
            >>> from meilisearch_rest import Client
            >>> from meilisearch_rest.models.search import MultiSearchQuery
            >>> with Client("http://127.0.0.1:7700", "masterKey") as client:
            >>>     client.multi_search([
            >>>         MultiSearchQuery(index_uid="movies", q="matrix"),
            >>>         MultiSearchQuery(index_uid="books", q="dune", limit=5),
            >>>     ])
        """
        body = {"queries": [x.model_dump(by_alias=True, exclude_none=True) for x in queries]}
        response = self._http_requests.post("multi-search", body)
        result = self._http_requests.parse_json(response)

        for search_result in result.get("results", []):
            normalize_hit_count(search_result)

        return result

    # Instance

    def get_all_stats(self) -> ClientStats:
        """Get stats for all indexes.

        Returns:
            Information about database size and all indexes.
            https://www.meilisearch.com/docs/reference/api/stats
        """
        response = self._http_requests.get("stats")

        return ClientStats(**self._http_requests.parse_json(response))

    def health(self) -> Health:
        """Get health of the Meilisearch server.

        Raises:
            MeilisearchCommunicationError: If the server could not be reached.
            MeilisearchApiError: If Meilisearch answered with an error status.
        """
        response = self._http_requests.get("health")

        return Health(**self._http_requests.parse_json(response))

    def is_healthy(self) -> bool:
        """True if the server answers and reports itself as available, False otherwise."""
        try:
            return self.health().status == "available"
        except (MeilisearchCommunicationError, MeilisearchApiError):
            return False

    def get_version(self) -> Version:
        response = self._http_requests.get("version")

        return Version(**self._http_requests.parse_json(response))

    def create_dump(self) -> Task:
        """Trigger the creation of a Meilisearch dump."""
        response = self._http_requests.post("dumps")

        return self._task(response)

    def create_snapshot(self) -> Task:
        """Trigger the creation of a Meilisearch snapshot."""
        response = self._http_requests.post("snapshots")

        return self._task(response)

    def get_experimental_features(self) -> JsonDict:
        response = self._http_requests.get("experimental-features")

        return self._http_requests.parse_json(response)

    def update_experimental_features(self, features: JsonMapping) -> JsonDict:
        """Enable or disable experimental features.

        Args:
            features: Mapping of feature name to enabled flag. Keys can be given in snake_case,
                for example `{"edit_documents_by_function": True}`.

        Returns:
            The state of all experimental features after the update.
        """
        response = self._http_requests.patch(
            "experimental-features", transform_attributes(features)
        )

        return self._http_requests.parse_json(response)

    # Keys

    def get_keys(self, *, offset: int | None = None, limit: int | None = None) -> KeySearch:
        """Gets the Meilisearch API keys.

        Args:
            offset: Number of keys to skip. The default of None will use the Meilisearch
                default.
            limit: Number of keys to return. The default of None will use the Meilisearch
                default.
        """
        url = build_encoded_url("keys", {"offset": offset, "limit": limit})
        response = self._http_requests.get(url)

        return KeySearch(**self._http_requests.parse_json(response))

    def get_key(self, key: str) -> Key:
        """Gets information about a specific API key.

        Args:
            key: The key or uid for which to retrieve the information.

        Raises:
            MeilisearchCommunicationError: If the server could not be reached.
            MeilisearchApiError: If Meilisearch answered with an error status.
        """
        response = self._http_requests.get(f"keys/{key}")

        return Key(**self._http_requests.parse_json(response))

    def create_key(self, key: KeyCreate) -> Key:
        """Creates a new API key.

        Args:
            key: The information to use in creating the key. Note that if an expires_at value
                is included it should be in UTC time.

        Returns:
            The new API key.

        Examples
            >>> from meilisearch_rest import Client
            >>> from meilisearch_rest.models.client import KeyCreate
            >>> with Client("http://127.0.0.1:7700", "masterKey") as client:
            >>>     key_info = KeyCreate(
            >>>         description="My new key",
            >>>         actions=["search"],
            >>>         indexes=["movies"],
            >>>     )
            >>>     key = client.create_key(key_info)
        """
        payload = key.model_dump(by_alias=True, mode="json")
        response = self._http_requests.post("keys", payload)

        return Key(**self._http_requests.parse_json(response))

    def update_key(self, key: KeyUpdate) -> Key:
        """Update the name and/or description of an API key."""
        payload = {
            k: v
            for k, v in key.model_dump(by_alias=True, mode="json").items()
            if v is not None and k != "key"
        }
        response = self._http_requests.patch(f"keys/{key.key}", payload)

        return Key(**self._http_requests.parse_json(response))

    def delete_key(self, key: str) -> int:
        """Deletes an API key.

        Args:
            key: The key or uid to delete.

        Returns:
            The Response status code. 204 signifies a successful delete.
        """
        response = self._http_requests.delete(f"keys/{key}")

        return response.status_code

    def generate_tenant_token(
        self,
        search_rules: JsonMapping | list[str],
        *,
        api_key: Key,
        expires_at: datetime | None = None,
    ) -> str:
        """Generates a JWT token to use for searching.

        Args:
            search_rules: Contains restrictions to use for the token. The default rules used for
                the API key used for signing can be used by setting searchRules to ["*"]. If
                "indexes" is included it must be equal to or more restrictive than the key used to
                generate the token.
            api_key: The API key to use to generate the token.
            expires_at: The timepoint at which the token should expire. If value is provided it
                should be a UTC time in the future. Default = None.

        Returns:
            A JWT token

        Raises:
            InvalidRestriction: If the restrictions are less strict than the permissions allowed
                in the API key.
            ValueError: If expires_at is not in the future.

        Examples
            >>> from datetime import datetime, timedelta, timezone
            >>> from meilisearch_rest import Client
            >>>
            >>> expires_at = datetime.now(tz=timezone.utc) + timedelta(days=7)
            >>>
            >>> with Client("http://127.0.0.1:7700", "masterKey") as client:
            >>>     token = client.generate_tenant_token(
            >>>         search_rules=["*"], api_key=api_key, expires_at=expires_at
            >>>     )
        """
        if isinstance(search_rules, dict) and search_rules.get("indexes"):
            for index in search_rules["indexes"]:
                if api_key.indexes != ["*"] and index not in api_key.indexes:
                    raise InvalidRestriction(
                        "Invalid index. The token cannot be less restrictive than the API key"
                    )

        payload: JsonDict = {"searchRules": search_rules, "apiKeyUid": api_key.uid}

        if expires_at:
            if expires_at.tzinfo is None:
                expires_at = expires_at.replace(tzinfo=timezone.utc)
            if expires_at <= datetime.now(tz=timezone.utc):
                raise ValueError("expires_at must be a time in the future")

            payload["exp"] = int(datetime.timestamp(expires_at))

        return jwt.encode(payload, api_key.key, algorithm="HS256")

    # Tasks

    def get_task(self, task_id: int) -> TaskResult:
        return self.task_endpoint.get_task(task_id)

    def get_tasks(
        self,
        *,
        index_ids: list[str] | None = None,
        types: str | list[str] | None = None,
        statuses: list[str] | None = None,
        limit: int | None = None,
        from_: int | None = None,
    ) -> TaskStatus:
        """Get a page of tasks. See `TaskEndpoint.get_tasks`."""
        return self.task_endpoint.get_tasks(
            index_ids=index_ids, types=types, statuses=statuses, limit=limit, from_=from_
        )

    def cancel_tasks(
        self,
        *,
        uids: list[int] | None = None,
        index_uids: list[str] | None = None,
        statuses: list[str] | None = None,
        types: list[str] | None = None,
        before_enqueued_at: datetime | None = None,
        after_enqueued_at: datetime | None = None,
        before_started_at: datetime | None = None,
        after_finished_at: datetime | None = None,
    ) -> Task:
        """Cancel tasks. With no filters every enqueued and processing task is canceled."""
        return self.task_endpoint.cancel_tasks(
            uids=uids,
            index_uids=index_uids,
            statuses=statuses,
            types=types,
            before_enqueued_at=before_enqueued_at,
            after_enqueued_at=after_enqueued_at,
            before_started_at=before_started_at,
            after_finished_at=after_finished_at,
        )

    def delete_tasks(
        self,
        *,
        uids: list[int] | None = None,
        index_uids: list[str] | None = None,
        statuses: list[str] | None = None,
        types: list[str] | None = None,
        before_enqueued_at: datetime | None = None,
        after_enqueued_at: datetime | None = None,
        before_started_at: datetime | None = None,
        after_finished_at: datetime | None = None,
    ) -> Task:
        """Delete finished tasks. With no filters the whole history is deleted."""
        return self.task_endpoint.delete_tasks(
            uids=uids,
            index_uids=index_uids,
            statuses=statuses,
            types=types,
            before_enqueued_at=before_enqueued_at,
            after_enqueued_at=after_enqueued_at,
            before_started_at=before_started_at,
            after_finished_at=after_finished_at,
        )

    def wait_for_task(
        self,
        task_id: int,
        *,
        timeout_in_ms: int | None = DEFAULT_TIMEOUT_IN_MS,
        interval_in_ms: int = DEFAULT_INTERVAL_IN_MS,
    ) -> TaskResult:
        """Wait until a task reaches a terminal status. See `TaskEndpoint.wait_for_task`."""
        return self.task_endpoint.wait_for_task(
            task_id, timeout_in_ms=timeout_in_ms, interval_in_ms=interval_in_ms
        )
