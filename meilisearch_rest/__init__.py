import logging

from meilisearch_rest._client import Client
from meilisearch_rest._version import VERSION
from meilisearch_rest.errors import (
    InvalidDocumentError,
    InvalidDocumentIdError,
    InvalidRestriction,
    MeilisearchApiError,
    MeilisearchCommunicationError,
    MeilisearchError,
    MeilisearchTimeoutError,
    MeilisearchVersionError,
)
from meilisearch_rest.index import Index
from meilisearch_rest.task import Task, TaskEndpoint

__version__ = VERSION

logging.getLogger(__name__).addHandler(logging.NullHandler())


__all__ = [
    "Client",
    "Index",
    "InvalidDocumentError",
    "InvalidDocumentIdError",
    "InvalidRestriction",
    "MeilisearchApiError",
    "MeilisearchCommunicationError",
    "MeilisearchError",
    "MeilisearchTimeoutError",
    "MeilisearchVersionError",
    "Task",
    "TaskEndpoint",
]
