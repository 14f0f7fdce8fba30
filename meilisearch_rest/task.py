from __future__ import annotations

import logging
import time
from datetime import datetime
from typing import TYPE_CHECKING, Any

from meilisearch_rest._http_requests import HttpRequests, build_encoded_url
from meilisearch_rest.errors import MeilisearchTimeoutError
from meilisearch_rest.models.task import TERMINAL_STATUSES, TaskInfo, TaskResult, TaskStatus

if TYPE_CHECKING:  # pragma: no cover
    from meilisearch_rest.types import JsonDict

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_IN_MS = 5000
DEFAULT_INTERVAL_IN_MS = 50


class TaskEndpoint:
    """Access to the `/tasks` routes.

    One instance is created by the `Client` and handed to every `Index` and `Task` it builds so
    they all poll through the same http client.
    """

    def __init__(self, http_requests: HttpRequests) -> None:
        self._http_requests = http_requests

    def get_task(self, task_id: int) -> TaskResult:
        """Get the full record of a task.

        Args:
            task_id: Identifier of the task.

        Returns:
            The task record.

        Raises:
            MeilisearchCommunicationError: If the server could not be reached.
            MeilisearchApiError: If Meilisearch answered with an error status.
        """
        response = self._http_requests.get(f"tasks/{task_id}")

        return TaskResult(**self._http_requests.parse_json(response))

    def get_tasks(
        self,
        *,
        index_ids: list[str] | None = None,
        types: str | list[str] | None = None,
        statuses: list[str] | None = None,
        limit: int | None = None,
        from_: int | None = None,
    ) -> TaskStatus:
        """Get a page of tasks, newest first.

        Args:
            index_ids: Only tasks for these indexes. Defaults to None (all indexes).
            types: Only tasks of these types. Defaults to None.
            statuses: Only tasks in these statuses. Defaults to None.
            limit: Maximum number of tasks to return. Defaults to the Meilisearch default.
            from_: Uid of the first task returned, used for paging. Defaults to None.

        Returns:
            The page of tasks.
        """
        url = build_encoded_url(
            "tasks",
            {
                "indexUids": index_ids or None,
                "types": [types] if isinstance(types, str) else types or None,
                "statuses": statuses or None,
                "limit": limit,
                "from": from_,
            },
        )
        response = self._http_requests.get(url)

        return TaskStatus(**self._http_requests.parse_json(response))

    def index_tasks(self, index_uid: str) -> TaskStatus:
        return self.get_tasks(index_ids=[index_uid])

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
        """Cancel enqueued or processing tasks.

        With no filters every enqueued and processing task is canceled.

        Returns:
            The cancelation task.

        Raises:
            MeilisearchCommunicationError: If the server could not be reached.
            MeilisearchApiError: If Meilisearch answered with an error status.
        """
        parameters = _process_params(
            uids,
            index_uids,
            statuses,
            types,
            before_enqueued_at,
            after_enqueued_at,
            before_started_at,
            after_finished_at,
        )

        if not parameters:
            parameters["statuses"] = "enqueued,processing"

        response = self._http_requests.post(build_encoded_url("tasks/cancel", parameters))

        return Task(TaskInfo(**self._http_requests.parse_json(response)), self)

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
        """Delete finished tasks from the task history.

        With no filters the whole history is deleted.
        """
        parameters = _process_params(
            uids,
            index_uids,
            statuses,
            types,
            before_enqueued_at,
            after_enqueued_at,
            before_started_at,
            after_finished_at,
        )

        if not parameters:
            parameters["statuses"] = "canceled,enqueued,failed,processing,succeeded"

        response = self._http_requests.delete(build_encoded_url("tasks", parameters))

        return Task(TaskInfo(**self._http_requests.parse_json(response)), self)

    def wait_for_task(
        self,
        task_id: int,
        *,
        timeout_in_ms: int | None = DEFAULT_TIMEOUT_IN_MS,
        interval_in_ms: int = DEFAULT_INTERVAL_IN_MS,
    ) -> TaskResult:
        """Block until a task reaches a terminal status.

        The task is fetched every `interval_in_ms` milliseconds. There is no backoff. A task
        that ends as `failed` or `canceled` is returned like a successful one, check its
        `status` and `error`.

        Args:
            task_id: Identifier of the task.
            timeout_in_ms: Time to wait before giving up. `None` waits forever. Defaults to 5000.
            interval_in_ms: Time between two checks. Defaults to 50.

        Returns:
            The terminal task record.

        Raises:
            MeilisearchTimeoutError: If the timeout passes before the task finishes.
            MeilisearchCommunicationError: If the server could not be reached.
            MeilisearchApiError: If Meilisearch answered with an error status.
        """
        start = time.monotonic()

        while True:
            result = self.get_task(task_id)
            logger.debug("task %s is %s", task_id, result.status)
            if result.status in TERMINAL_STATUSES:
                return result

            elapsed_ms = (time.monotonic() - start) * 1000
            if timeout_in_ms is not None and elapsed_ms >= timeout_in_ms:
                logger.warning("gave up waiting for task %s after %sms", task_id, timeout_in_ms)
                raise MeilisearchTimeoutError(
                    f"timeout of {timeout_in_ms}ms has exceeded on process {task_id} when waiting for pending update to resolve."
                )

            time.sleep(interval_in_ms / 1000)


class Task:
    """Handle on an asynchronous operation enqueued in Meilisearch.

    Every write returns one of these. The operation may still be pending; call `wait` before
    relying on its effects.

    Examples
        >>> from meilisearch_rest import Client
        >>> with Client("http://127.0.0.1:7700", "masterKey") as client:
        >>>     task = client.index("movies").add_documents([{"id": 1, "title": "Tron"}])
        >>>     task.wait()
        >>>     task.succeeded
        True
    """

    def __init__(self, metadata: TaskInfo | TaskResult, task_endpoint: TaskEndpoint) -> None:
        self._metadata = metadata
        self._task_endpoint = task_endpoint

    @classmethod
    def from_response(cls, response: JsonDict, task_endpoint: TaskEndpoint) -> Task:
        return cls(TaskInfo(**response), task_endpoint)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(uid={self.uid!r}, index_uid={self.index_uid!r}, status={self.status!r}, task_type={self.task_type!r})"

    @property
    def metadata(self) -> TaskInfo | TaskResult:
        return self._metadata

    @property
    def uid(self) -> int:
        if isinstance(self._metadata, TaskInfo):
            return self._metadata.task_uid

        return self._metadata.uid

    @property
    def index_uid(self) -> str | None:
        return self._metadata.index_uid

    @property
    def status(self) -> str:
        return self._metadata.status

    @property
    def task_type(self) -> str | JsonDict:
        return self._metadata.task_type

    @property
    def enqueued_at(self) -> datetime:
        return self._metadata.enqueued_at

    def _result_field(self, name: str) -> Any:
        if isinstance(self._metadata, TaskResult):
            return getattr(self._metadata, name)

        return None

    @property
    def details(self) -> JsonDict | None:
        return self._result_field("details")

    @property
    def error(self) -> JsonDict | None:
        return self._result_field("error")

    @property
    def duration(self) -> str | None:
        return self._result_field("duration")

    @property
    def started_at(self) -> datetime | None:
        return self._result_field("started_at")

    @property
    def finished_at(self) -> datetime | None:
        return self._result_field("finished_at")

    @property
    def enqueued(self) -> bool:
        return self.status == "enqueued"

    @property
    def processing(self) -> bool:
        return self.status == "processing"

    @property
    def finished(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def succeeded(self) -> bool:
        return self.status == "succeeded"

    @property
    def failed(self) -> bool:
        return self.status == "failed"

    @property
    def canceled(self) -> bool:
        return self.status == "canceled"

    def refresh(self) -> Task:
        """Fetch the current record of the task once."""
        self._metadata = self._task_endpoint.get_task(self.uid)
        return self

    def wait(
        self,
        timeout_in_ms: int | None = DEFAULT_TIMEOUT_IN_MS,
        interval_in_ms: int = DEFAULT_INTERVAL_IN_MS,
    ) -> Task:
        """Poll the task until it is finished.

        Returns immediately, without a request, when the task is already known to be finished.

        Args:
            timeout_in_ms: Time to wait before giving up. `None` waits forever. Defaults to 5000.
            interval_in_ms: Time between two checks. Defaults to 50.

        Returns:
            This task, holding the terminal record.

        Raises:
            MeilisearchTimeoutError: If the timeout passes before the task finishes.
        """
        if isinstance(self._metadata, TaskResult) and self.finished:
            return self

        self._metadata = self._task_endpoint.wait_for_task(
            self.uid, timeout_in_ms=timeout_in_ms, interval_in_ms=interval_in_ms
        )
        return self

    def cancel(self) -> Task:
        """Enqueue the cancelation of this task."""
        return self._task_endpoint.cancel_tasks(uids=[self.uid])


def _process_params(
    uids: list[int] | None = None,
    index_uids: list[str] | None = None,
    statuses: list[str] | None = None,
    types: list[str] | None = None,
    before_enqueued_at: datetime | None = None,
    after_enqueued_at: datetime | None = None,
    before_started_at: datetime | None = None,
    after_finished_at: datetime | None = None,
) -> dict[str, str]:
    parameters = {}
    if uids:
        parameters["uids"] = ",".join([str(x) for x in uids])
    if index_uids:
        parameters["indexUids"] = ",".join(index_uids)
    if statuses:
        parameters["statuses"] = ",".join(statuses)
    if types:
        parameters["types"] = ",".join(types)
    if before_enqueued_at:
        parameters["beforeEnqueuedAt"] = f"{before_enqueued_at.isoformat()}Z"
    if after_enqueued_at:
        parameters["afterEnqueuedAt"] = f"{after_enqueued_at.isoformat()}Z"
    if before_started_at:
        parameters["beforeStartedAt"] = f"{before_started_at.isoformat()}Z"
    if after_finished_at:
        parameters["afterFinishedAt"] = f"{after_finished_at.isoformat()}Z"

    return parameters
