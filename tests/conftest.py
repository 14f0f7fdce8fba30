import csv
import gzip
import io
import json
from copy import deepcopy
from urllib.parse import unquote_plus

import httpx
import pytest

from meilisearch_rest import Client
from meilisearch_rest.json_handler import OrjsonHandler, UjsonHandler

MASTER_KEY = "masterKey"
BASE_URL = "http://meilisearch.test"
TIMESTAMP = "2024-05-01T10:00:00.000000Z"

DEFAULT_SETTINGS = {
    "displayedAttributes": ["*"],
    "searchableAttributes": ["*"],
    "filterableAttributes": [],
    "sortableAttributes": [],
    "rankingRules": ["words", "typo", "proximity", "attribute", "sort", "exactness"],
    "stopWords": [],
    "nonSeparatorTokens": [],
    "separatorTokens": [],
    "dictionary": [],
    "synonyms": {},
    "distinctAttribute": None,
    "proximityPrecision": "byWord",
    "typoTolerance": {
        "enabled": True,
        "minWordSizeForTypos": {"oneTypo": 5, "twoTypos": 9},
        "disableOnWords": [],
        "disableOnAttributes": [],
    },
    "faceting": {"maxValuesPerFacet": 100, "sortFacetValuesBy": {"*": "alpha"}},
    "pagination": {"maxTotalHits": 1000},
    "embedders": {},
    "searchCutoffMs": None,
    "localizedAttributes": None,
    "facetSearch": True,
    "prefixSearch": "indexingTime",
}

SMALL_MOVIES = [
    {"id": "287947", "title": "Shazam!", "genre": "action", "release_date": 1553299200},
    {"id": "299537", "title": "Captain Marvel", "genre": "action", "release_date": 1551830400},
    {"id": "522681", "title": "Escape Room", "genre": "horror", "release_date": 1546560000},
    {"id": "166428", "title": "How to Train Your Dragon", "genre": "animation", "release_date": 1546473600},
    {"id": "450465", "title": "Glass", "genre": "thriller", "release_date": 1547596800},
    {"id": "603", "title": "The Matrix", "genre": "action", "release_date": 922838400},
    {"id": "604", "title": "The Matrix Reloaded", "genre": "action", "release_date": 1052352000},
]


def _error(status_code, code, message, error_type="invalid_request"):
    return httpx.Response(
        status_code,
        json={
            "message": message,
            "code": code,
            "type": error_type,
            "link": f"https://docs.meilisearch.com/errors#{code}",
        },
    )


def _kebab_to_camel(name):
    first, *rest = name.split("-")
    return first + "".join(x.title() for x in rest)


def _matches(document, filter_):
    """Very small filter support: `attr = value` expressions joined by AND, or a list of them."""
    if filter_ is None:
        return True

    if isinstance(filter_, list):
        return all(_matches(document, x) for x in filter_)

    for expression in filter_.split(" AND "):
        attribute, _, value = expression.partition("=")
        if str(document.get(attribute.strip())) != value.strip().strip("'\""):
            return False

    return True


class FakeMeilisearch:
    """In memory stand-in for a Meilisearch server, used through httpx.MockTransport.

    Every write is applied as soon as it is received and returns an enqueued task. Polling a
    task walks it through `task_statuses`, the last status sticks once the list is exhausted.
    """

    def __init__(self):
        self.indexes = {}
        self.tasks = {}
        self.keys = {}
        self.requests = []
        self.experimental_features = {
            "metrics": False,
            "logsRoute": False,
            "editDocumentsByFunction": False,
            "containsFilter": False,
        }
        self.task_statuses = ["processing", "succeeded"]
        self.healthy = True

    # helpers used by the tests

    def requests_to(self, method, path):
        return [x for x in self.requests if x.method == method and x.url.path == path]

    @property
    def last_request(self):
        return self.requests[-1]

    def documents(self, uid):
        return list(self.indexes[uid]["documents"].values())

    # routing

    def handler(self, request):
        self.requests.append(request)
        path = request.url.raw_path.decode("ascii").split("?")[0]
        parts = [unquote_plus(x) for x in path.split("/") if x]
        method = request.method

        if not parts:
            return httpx.Response(404)

        root = parts[0]
        if root == "health":
            if not self.healthy:
                return _error(503, "unavailable", "Meilisearch is not available", "system")
            return httpx.Response(200, json={"status": "available"})
        if root == "version":
            return httpx.Response(
                200,
                json={"commitSha": "b46889b5", "commitDate": TIMESTAMP, "pkgVersion": "1.12.0"},
            )
        if root == "stats":
            return httpx.Response(
                200,
                json={
                    "databaseSize": 447819776,
                    "usedDatabaseSize": 196608,
                    "lastUpdate": TIMESTAMP,
                    "indexes": {uid: self._index_stats(uid) for uid in self.indexes},
                },
            )
        if root == "indexes":
            return self._indexes_route(request, parts[1:])
        if root == "tasks":
            return self._tasks_route(request, parts[1:])
        if root == "keys":
            return self._keys_route(request, parts[1:])
        if root == "multi-search" and method == "POST":
            body = self._json(request)
            results = []
            for query in body["queries"]:
                uid = query.pop("indexUid")
                if uid not in self.indexes:
                    return _error(404, "index_not_found", f"Index `{uid}` not found.")
                results.append({"indexUid": uid, **self._search(uid, query)})
            return httpx.Response(200, json={"results": results})
        if root == "swap-indexes" and method == "POST":
            for swap in self._json(request):
                first, second = swap["indexes"]
                self.indexes[first], self.indexes[second] = (
                    self.indexes[second],
                    self.indexes[first],
                )
            return self._enqueue(None, "indexSwap", {"swaps": self._json(request)})
        if root == "dumps" and method == "POST":
            return self._enqueue(None, "dumpCreation")
        if root == "snapshots" and method == "POST":
            return self._enqueue(None, "snapshotCreation")
        if root == "experimental-features":
            if method == "PATCH":
                self.experimental_features.update(self._json(request))
            return httpx.Response(200, json=self.experimental_features)

        return _error(404, "not_found", f"{method} {request.url.path} not found")

    def _json(self, request):
        content = request.content
        if request.headers.get("content-encoding") == "gzip":
            content = gzip.decompress(content)
        return json.loads(content) if content else None

    def _text(self, request):
        content = request.content
        if request.headers.get("content-encoding") == "gzip":
            content = gzip.decompress(content)
        return content.decode("utf-8")

    # tasks

    def _enqueue(self, index_uid, task_type, details=None, error=None):
        uid = len(self.tasks)
        statuses = [
            "failed" if error and x == "succeeded" else x for x in self.task_statuses
        ]
        self.tasks[uid] = {
            "uid": uid,
            "batchUid": uid,
            "indexUid": index_uid,
            "status": "enqueued",
            "type": task_type,
            "canceledBy": None,
            "details": details,
            "error": None,
            "duration": None,
            "enqueuedAt": TIMESTAMP,
            "startedAt": None,
            "finishedAt": None,
            "_statuses": statuses,
            "_error": error,
        }
        return httpx.Response(
            202,
            json={
                "taskUid": uid,
                "indexUid": index_uid,
                "status": "enqueued",
                "type": task_type,
                "enqueuedAt": TIMESTAMP,
            },
        )

    def _poll(self, uid):
        task = self.tasks[uid]
        if task["_statuses"]:
            task["status"] = task["_statuses"].pop(0)
            if task["status"] != "enqueued":
                task["startedAt"] = TIMESTAMP
            if task["status"] in ("succeeded", "failed", "canceled"):
                task["finishedAt"] = TIMESTAMP
                task["duration"] = "PT0.01S"
            if task["status"] == "failed":
                task["error"] = task["_error"]
        return self._public_task(task)

    @staticmethod
    def _public_task(task):
        return {k: v for k, v in task.items() if not k.startswith("_")}

    def _tasks_route(self, request, parts):
        params = request.url.params
        if parts and parts[0] == "cancel" and request.method == "POST":
            return self._enqueue(None, "taskCancelation", {"originalFilter": str(params)})
        if not parts and request.method == "DELETE":
            return self._enqueue(None, "taskDeletion", {"originalFilter": str(params)})
        if parts:
            uid = int(parts[0])
            if uid not in self.tasks:
                return _error(404, "task_not_found", f"Task `{uid}` not found.")
            return httpx.Response(200, json=self._poll(uid))

        results = sorted(self.tasks.values(), key=lambda x: x["uid"], reverse=True)
        if "indexUids" in params:
            index_uids = params["indexUids"].split(",")
            results = [x for x in results if x["indexUid"] in index_uids]
        if "statuses" in params:
            statuses = params["statuses"].split(",")
            results = [x for x in results if x["status"] in statuses]
        if "types" in params:
            types = params["types"].split(",")
            results = [x for x in results if x["type"] in types]
        limit = int(params.get("limit", 20))
        return httpx.Response(
            200,
            json={
                "results": [self._public_task(x) for x in results[:limit]],
                "total": len(results),
                "limit": limit,
                "from": results[0]["uid"] if results else None,
                "next": None,
            },
        )

    # indexes

    def _new_index(self, uid, primary_key=None):
        self.indexes[uid] = {
            "uid": uid,
            "primaryKey": primary_key,
            "createdAt": TIMESTAMP,
            "updatedAt": TIMESTAMP,
            "documents": {},
            "settings": deepcopy(DEFAULT_SETTINGS),
        }

    def _index_info(self, uid):
        index = self.indexes[uid]
        return {k: index[k] for k in ("uid", "primaryKey", "createdAt", "updatedAt")}

    def _index_stats(self, uid):
        distribution = {}
        for document in self.indexes[uid]["documents"].values():
            for field in document:
                distribution[field] = distribution.get(field, 0) + 1
        return {
            "numberOfDocuments": len(self.indexes[uid]["documents"]),
            "numberOfEmbeddedDocuments": 0,
            "numberOfEmbeddings": 0,
            "isIndexing": False,
            "fieldDistribution": distribution,
        }

    def _indexes_route(self, request, parts):
        method = request.method
        if not parts:
            if method == "POST":
                body = self._json(request)
                uid = body["uid"]
                if uid in self.indexes:
                    return self._enqueue(
                        uid,
                        "indexCreation",
                        error={"code": "index_already_exists", "message": "exists"},
                    )
                self._new_index(uid, body.get("primaryKey"))
                return self._enqueue(uid, "indexCreation", {"primaryKey": body.get("primaryKey")})

            offset = int(request.url.params.get("offset", 0))
            limit = int(request.url.params.get("limit", 20))
            uids = sorted(self.indexes)
            return httpx.Response(
                200,
                json={
                    "results": [self._index_info(x) for x in uids[offset : offset + limit]],
                    "offset": offset,
                    "limit": limit,
                    "total": len(uids),
                },
            )

        uid, rest = parts[0], parts[1:]

        if not rest and method == "DELETE":
            if uid not in self.indexes:
                return self._enqueue(
                    uid,
                    "indexDeletion",
                    error={"code": "index_not_found", "message": f"Index `{uid}` not found."},
                )
            del self.indexes[uid]
            return self._enqueue(uid, "indexDeletion")

        writes_documents = (
            rest
            and rest[0] == "documents"
            and (method in ("POST", "PUT") and len(rest) == 1)
        )
        if uid not in self.indexes:
            if not writes_documents:
                return _error(404, "index_not_found", f"Index `{uid}` not found.")
            self._new_index(uid)

        if not rest:
            if method == "PATCH":
                body = self._json(request)
                if "primaryKey" in body:
                    self.indexes[uid]["primaryKey"] = body["primaryKey"]
                if "uid" in body:
                    self.indexes[body["uid"]] = self.indexes.pop(uid)
                    self.indexes[body["uid"]]["uid"] = body["uid"]
                return self._enqueue(uid, "indexUpdate", body)
            return httpx.Response(200, json=self._index_info(uid))

        section = rest[0]
        if section == "stats":
            return httpx.Response(200, json=self._index_stats(uid))
        if section == "compact":
            return self._enqueue(uid, "indexCompaction")
        if section == "documents":
            return self._documents_route(request, uid, rest[1:])
        if section == "settings":
            return self._settings_route(request, uid, rest[1:])
        if section == "search":
            return httpx.Response(200, json=self._search(uid, self._json(request)))
        if section == "facet-search":
            return httpx.Response(200, json=self._facet_search(uid, self._json(request)))
        if section == "similar":
            return httpx.Response(200, json=self._similar(uid, self._json(request)))

        return _error(404, "not_found", f"{method} {request.url.path} not found")

    # documents

    def _parse_documents(self, request):
        content_type = request.headers.get("content-type", "")
        if content_type.startswith("application/x-ndjson"):
            return [json.loads(x) for x in self._text(request).splitlines() if x.strip()]
        if content_type.startswith("text/csv"):
            delimiter = request.url.params.get("csvDelimiter", ",")
            return list(csv.DictReader(io.StringIO(self._text(request)), delimiter=delimiter))
        return self._json(request)

    def _documents_route(self, request, uid, parts):
        method = request.method
        index = self.indexes[uid]
        documents = index["documents"]

        if not parts and method in ("POST", "PUT"):
            new_documents = self._parse_documents(request)
            primary_key = request.url.params.get("primaryKey") or index["primaryKey"]
            if primary_key is None and new_documents:
                primary_key = next(
                    (k for k in new_documents[0] if k.lower().endswith("id")), None
                )
            if primary_key is None or any(primary_key not in x for x in new_documents):
                return self._enqueue(
                    uid,
                    "documentAdditionOrUpdate",
                    {"receivedDocuments": len(new_documents), "indexedDocuments": 0},
                    error={
                        "message": "Document doesn't have a `id` attribute",
                        "code": "missing_document_id",
                        "type": "invalid_request",
                        "link": "https://docs.meilisearch.com/errors#missing_document_id",
                    },
                )
            index["primaryKey"] = primary_key
            for document in new_documents:
                key = str(document[primary_key])
                if method == "PUT" and key in documents:
                    documents[key] = {**documents[key], **document}
                else:
                    documents[key] = document
            return self._enqueue(
                uid,
                "documentAdditionOrUpdate",
                {"receivedDocuments": len(new_documents), "indexedDocuments": len(new_documents)},
            )

        if not parts and method == "DELETE":
            deleted = len(documents)
            documents.clear()
            return self._enqueue(uid, "documentDeletion", {"deletedDocuments": deleted})

        if not parts and method == "GET":
            params = request.url.params
            query = {
                "offset": int(params.get("offset", 0)),
                "limit": int(params.get("limit", 20)),
                "fields": params["fields"].split(",") if "fields" in params else None,
                "ids": params["ids"].split(",") if "ids" in params else None,
            }
            return httpx.Response(200, json=self._list_documents(uid, query))

        action = parts[0]
        if action == "fetch" and method == "POST":
            return httpx.Response(200, json=self._list_documents(uid, self._json(request)))
        if action == "delete-batch" and method == "POST":
            ids = [str(x) for x in self._json(request)]
            for document_id in ids:
                documents.pop(document_id, None)
            return self._enqueue(uid, "documentDeletion", {"providedIds": len(ids)})
        if action == "delete" and method == "POST":
            filter_ = self._json(request)["filter"]
            matching = [k for k, v in documents.items() if _matches(v, filter_)]
            for document_id in matching:
                del documents[document_id]
            return self._enqueue(
                uid, "documentDeletion", {"originalFilter": filter_, "deletedDocuments": len(matching)}
            )
        if action == "edit" and method == "POST":
            return self._enqueue(uid, "documentEdition", self._json(request))

        if method == "DELETE":
            documents.pop(action, None)
            return self._enqueue(uid, "documentDeletion", {"deletedDocuments": 1})

        if action not in documents:
            return _error(404, "document_not_found", f"Document `{action}` not found.")
        document = documents[action]
        if "fields" in request.url.params:
            fields = request.url.params["fields"].split(",")
            document = {k: v for k, v in document.items() if k in fields}
        return httpx.Response(200, json=document)

    def _list_documents(self, uid, query):
        offset = query.get("offset") or 0
        limit = query.get("limit") or 20
        results = [x for x in self.documents(uid) if _matches(x, query.get("filter"))]
        if query.get("ids"):
            ids = [str(x) for x in query["ids"]]
            primary_key = self.indexes[uid]["primaryKey"]
            results = [x for x in results if str(x[primary_key]) in ids]
        page = results[offset : offset + limit]
        if query.get("fields"):
            page = [{k: v for k, v in x.items() if k in query["fields"]} for x in page]
        return {"results": page, "offset": offset, "limit": limit, "total": len(results)}

    # search

    def _search(self, uid, body):
        query = (body.get("q") or "").lower()
        hits = [
            x
            for x in self.documents(uid)
            if _matches(x, body.get("filter"))
            and (not query or any(query in str(v).lower() for v in x.values()))
        ]
        if body.get("attributesToRetrieve"):
            hits = [
                {k: v for k, v in x.items() if k in body["attributesToRetrieve"]} for x in hits
            ]

        result = {"query": body.get("q") or "", "processingTimeMs": 1}
        if "page" in body or "hitsPerPage" in body:
            page = body.get("page", 1)
            hits_per_page = body.get("hitsPerPage", 20)
            start = (page - 1) * hits_per_page
            result.update(
                {
                    "hits": hits[start : start + hits_per_page],
                    "page": page,
                    "hitsPerPage": hits_per_page,
                    "totalHits": len(hits),
                    "totalPages": -(-len(hits) // hits_per_page),
                }
            )
        else:
            offset = body.get("offset", 0)
            limit = body.get("limit", 20)
            result.update(
                {
                    "hits": hits[offset : offset + limit],
                    "offset": offset,
                    "limit": limit,
                    "estimatedTotalHits": len(hits),
                }
            )
        return result

    def _facet_search(self, uid, body):
        facet_query = (body.get("facetQuery") or "").lower()
        counts = {}
        for document in self.documents(uid):
            if not _matches(document, body.get("filter")):
                continue
            value = document.get(body["facetName"])
            if value is not None and str(value).lower().startswith(facet_query):
                counts[value] = counts.get(value, 0) + 1
        return {
            "facetHits": [{"value": k, "count": v} for k, v in sorted(counts.items())],
            "facetQuery": body.get("facetQuery"),
            "processingTimeMs": 1,
        }

    def _similar(self, uid, body):
        primary_key = self.indexes[uid]["primaryKey"]
        hits = [x for x in self.documents(uid) if str(x[primary_key]) != str(body["id"])]
        limit = body.get("limit", 20)
        return {
            "hits": hits[:limit],
            "id": str(body["id"]),
            "processingTimeMs": 1,
            "limit": limit,
            "offset": body.get("offset", 0),
            "estimatedTotalHits": len(hits),
        }

    # settings

    def _settings_route(self, request, uid, parts):
        method = request.method
        settings = self.indexes[uid]["settings"]

        if not parts:
            if method == "GET":
                return httpx.Response(200, json=settings)
            if method == "PATCH":
                body = self._json(request)
                settings.update(body)
                return self._enqueue(uid, "settingsUpdate", body)
            if method == "DELETE":
                self.indexes[uid]["settings"] = deepcopy(DEFAULT_SETTINGS)
                return self._enqueue(uid, "settingsUpdate")

        name = _kebab_to_camel(parts[0])
        if name not in DEFAULT_SETTINGS:
            return _error(404, "not_found", f"Unknown setting {parts[0]}")

        if method == "GET":
            return httpx.Response(200, json=settings[name])
        if method == "PUT":
            settings[name] = self._json(request)
        elif method == "PATCH":
            settings[name] = {**(settings[name] or {}), **self._json(request)}
        elif method == "DELETE":
            settings[name] = deepcopy(DEFAULT_SETTINGS[name])
        return self._enqueue(uid, "settingsUpdate", {name: settings[name]})

    # keys

    def _keys_route(self, request, parts):
        method = request.method
        if not parts:
            if method == "POST":
                body = self._json(request)
                number = len(self.keys) + 1
                key = {
                    "uid": f"00000000-0000-0000-0000-00000000000{number}",
                    "key": f"secret-key-{number}",
                    "name": body.get("name"),
                    "description": body.get("description"),
                    "actions": body["actions"],
                    "indexes": body["indexes"],
                    "expiresAt": body.get("expiresAt"),
                    "createdAt": TIMESTAMP,
                    "updatedAt": TIMESTAMP,
                }
                self.keys[key["uid"]] = key
                return httpx.Response(201, json=key)

            offset = int(request.url.params.get("offset", 0))
            limit = int(request.url.params.get("limit", 20))
            keys = list(self.keys.values())
            return httpx.Response(
                200,
                json={
                    "results": keys[offset : offset + limit],
                    "offset": offset,
                    "limit": limit,
                    "total": len(keys),
                },
            )

        key = next((x for x in self.keys.values() if parts[0] in (x["uid"], x["key"])), None)
        if key is None:
            return _error(404, "api_key_not_found", f"API key `{parts[0]}` not found.")
        if method == "PATCH":
            key.update(self._json(request))
            return httpx.Response(200, json=key)
        if method == "DELETE":
            del self.keys[key["uid"]]
            return httpx.Response(204)
        return httpx.Response(200, json=key)


@pytest.fixture
def server():
    return FakeMeilisearch()


@pytest.fixture
def client(server):
    with Client(BASE_URL, MASTER_KEY, transport=httpx.MockTransport(server.handler)) as client:
        yield client


@pytest.fixture
def client_orjson_handler(server):
    with Client(
        BASE_URL,
        MASTER_KEY,
        json_handler=OrjsonHandler(),
        transport=httpx.MockTransport(server.handler),
    ) as client:
        yield client


@pytest.fixture
def client_ujson_handler(server):
    with Client(
        BASE_URL,
        MASTER_KEY,
        json_handler=UjsonHandler(),
        transport=httpx.MockTransport(server.handler),
    ) as client:
        yield client


@pytest.fixture
def small_movies():
    return deepcopy(SMALL_MOVIES)


@pytest.fixture
def index_uid():
    return "movies"


@pytest.fixture
def empty_index(client, index_uid):
    client.create_index(index_uid).wait()
    return client.index(index_uid)


@pytest.fixture
def index_with_documents(client, small_movies, index_uid):
    index = client.index(index_uid)
    index.add_documents(small_movies).wait()
    return index


@pytest.fixture
def small_movies_csv(small_movies):
    header = "id,title,genre,release_date\n"
    rows = [f"{x['id']},{x['title']},{x['genre']},{x['release_date']}\n" for x in small_movies]
    return header + "".join(rows)


@pytest.fixture
def small_movies_ndjson(small_movies):
    return "".join(f"{json.dumps(x)}\n" for x in small_movies)
