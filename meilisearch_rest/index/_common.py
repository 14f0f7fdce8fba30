from __future__ import annotations

from csv import DictReader
from datetime import datetime
from pathlib import Path
from typing import Any
from urllib.parse import quote_plus

from meilisearch_rest._utils import batch, iso_to_date_time, split_lines
from meilisearch_rest.errors import InvalidDocumentError, InvalidDocumentIdError, MeilisearchError
from meilisearch_rest.json_handler import BuiltinHandler, JsonHandler


class BaseIndex:
    def __init__(
        self,
        uid: str,
        primary_key: str | None = None,
        created_at: str | datetime | None = None,
        updated_at: str | datetime | None = None,
        json_handler: JsonHandler | None = None,
    ):
        self.uid = uid
        self.primary_key = primary_key
        self.created_at: datetime | None = iso_to_date_time(created_at)
        self.updated_at: datetime | None = iso_to_date_time(updated_at)
        self._json_handler = json_handler if json_handler else BuiltinHandler()

    @property
    def _base_url_with_uid(self) -> str:
        return f"indexes/{self.uid}"

    @property
    def _documents_url(self) -> str:
        return f"{self._base_url_with_uid}/documents"

    @property
    def _settings_url(self) -> str:
        return f"{self._base_url_with_uid}/settings"

    def __str__(self) -> str:
        return f"{type(self).__name__}(uid={self.uid}, primary_key={self.primary_key}, created_at={self.created_at}, updated_at={self.updated_at})"

    def __repr__(self) -> str:
        return f"{type(self).__name__}(uid={self.uid!r}, primary_key={self.primary_key!r}, created_at={self.created_at!r}, updated_at={self.updated_at!r})"

    def _set_fetch_info(self, index_dict: dict[str, Any]) -> None:
        self.uid = index_dict.get("uid", self.uid)
        self.primary_key = index_dict.get("primaryKey")
        self.created_at = iso_to_date_time(index_dict.get("createdAt"))
        self.updated_at = iso_to_date_time(index_dict.get("updatedAt"))


def document_url(documents_url: str, document_id: str | int | None) -> str:
    if document_id is None or str(document_id) == "":
        raise InvalidDocumentIdError("document_id cannot be empty or None")

    return f"{documents_url}/{quote_plus(str(document_id))}"


def ndjson_batches(documents: str, batch_size: int) -> list[str]:
    return ["".join(x) for x in batch(split_lines(documents), batch_size)]


def csv_batches(documents: str, batch_size: int) -> list[str]:
    """Split csv text into chunks that each repeat the header line."""
    lines = split_lines(documents)
    if not lines:
        return []

    header = lines[0] if lines[0].endswith("\n") else f"{lines[0]}\n"
    return [header + "".join(x) for x in batch(lines[1:], batch_size)]


def validate_csv_delimiter(csv_delimiter: str | None) -> None:
    if csv_delimiter is None:
        return

    if len(csv_delimiter) != 1 or not csv_delimiter.isascii():
        raise ValueError("csv_delimiter must be a single ascii character")


def load_documents_from_file(
    file_path: Path | str,
    csv_delimiter: str | None = None,
    *,
    json_handler: JsonHandler,
) -> list[dict[str, Any]]:
    file_path = Path(file_path)

    if not file_path.exists():
        raise MeilisearchError(f"No file found at {file_path}")

    if file_path.suffix not in (".json", ".csv", ".ndjson"):
        raise MeilisearchError("File must be a json, ndjson, or csv file")

    if file_path.suffix == ".csv":
        validate_csv_delimiter(csv_delimiter)
        with open(file_path, newline="") as f:
            reader = DictReader(f, delimiter=csv_delimiter) if csv_delimiter else DictReader(f)
            return list(reader)

    with open(file_path) as f:
        data = f.read()

    if file_path.suffix == ".ndjson":
        return json_handler.loads_lines(data)

    documents = json_handler.loads(data)
    if not isinstance(documents, list):
        raise InvalidDocumentError("Meilisearch requires documents to be in a list")

    return documents
