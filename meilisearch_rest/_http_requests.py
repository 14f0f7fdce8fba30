from __future__ import annotations

import gzip
import logging
from collections.abc import Mapping
from functools import lru_cache
from typing import Any, Callable
from urllib.parse import urlencode

from httpx import (
    Client,
    ConnectError,
    ConnectTimeout,
    HTTPError,
    ReadTimeout,
    RemoteProtocolError,
    Response,
)

from meilisearch_rest._version import VERSION
from meilisearch_rest.errors import (
    MeilisearchApiError,
    MeilisearchCommunicationError,
    MeilisearchError,
)
from meilisearch_rest.json_handler import BuiltinHandler, JsonHandler

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"
NDJSON_CONTENT_TYPE = "application/x-ndjson"
CSV_CONTENT_TYPE = "text/csv"


class HttpRequests:
    def __init__(self, http_client: Client, json_handler: JsonHandler | None = None) -> None:
        self.http_client = http_client
        self.json_handler = json_handler if json_handler else BuiltinHandler()

    def _send_request(
        self,
        http_method: Callable,
        path: str,
        body: Any | None = None,
        content_type: str = JSON_CONTENT_TYPE,
        compress: bool = False,
        serialize_body: bool = True,
    ) -> Response:
        method_name = getattr(http_method, "__name__", "request").upper()
        logger.debug("%s %s %s", method_name, path, content_type if body is not None else "")
        headers = build_headers(content_type, compress)

        try:
            if body is None:
                response = http_method(path, headers=headers)
            else:
                if content_type == JSON_CONTENT_TYPE and serialize_body:
                    content = self.json_handler.dumps(body)
                else:
                    content = body

                if compress:
                    raw = content.encode("utf-8") if isinstance(content, str) else bytes(content)
                    content = gzip.compress(raw)

                response = http_method(path, content=content, headers=headers)

            response.raise_for_status()
            return response

        except (ConnectError, ConnectTimeout, ReadTimeout, RemoteProtocolError) as err:
            raise MeilisearchCommunicationError(str(err)) from err
        except HTTPError as err:
            if "response" in locals():
                if JSON_CONTENT_TYPE in response.headers.get("content-type", ""):
                    raise MeilisearchApiError(str(err), response) from err
                else:
                    raise
            else:
                # Fail safe just in case error happens before response is created
                raise MeilisearchError(str(err)) from err  # pragma: no cover

    def get(self, path: str) -> Response:
        return self._send_request(self.http_client.get, path)

    def patch(
        self,
        path: str,
        body: Any | None = None,
        content_type: str = JSON_CONTENT_TYPE,
        compress: bool = False,
    ) -> Response:
        return self._send_request(self.http_client.patch, path, body, content_type, compress)

    def post(
        self,
        path: str,
        body: Any | None = None,
        content_type: str = JSON_CONTENT_TYPE,
        compress: bool = False,
        serialize_body: bool = True,
    ) -> Response:
        return self._send_request(
            self.http_client.post, path, body, content_type, compress, serialize_body
        )

    def put(
        self,
        path: str,
        body: Any | None = None,
        content_type: str = JSON_CONTENT_TYPE,
        compress: bool = False,
        serialize_body: bool = True,
    ) -> Response:
        return self._send_request(
            self.http_client.put, path, body, content_type, compress, serialize_body
        )

    def delete(self, path: str) -> Response:
        return self._send_request(self.http_client.delete, path)

    def parse_json(self, response: Response) -> Any:
        if not response.content:
            return None

        return self.json_handler.loads(response.content)


def build_headers(content_type: str, compress: bool) -> dict[str, str]:
    headers = {"user-agent": user_agent(), "Content-Type": content_type}

    if compress:
        headers["Content-Encoding"] = "gzip"

    return headers


def build_encoded_url(base_url: str, params: Mapping[str, Any]) -> str:
    """Append a query string to a path.

    `None` values are dropped, lists are joined with commas and booleans are lower cased to
    match what Meilisearch expects.
    """
    query: dict[str, str] = {}
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, bool):
            query[key] = "true" if value else "false"
        elif isinstance(value, (list, tuple)):
            query[key] = ",".join(str(x) for x in value)
        else:
            query[key] = str(value)

    if not query:
        return base_url

    return f"{base_url}?{urlencode(query)}"


@lru_cache(maxsize=1)
def user_agent() -> str:
    return f"Meilisearch REST client (v{VERSION})"
