from __future__ import annotations

from httpx import Response


class MeilisearchError(Exception):
    """Base class for every error raised by the client."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"MeilisearchError. Error message: {self.message}."


class InvalidDocumentError(MeilisearchError):
    """Documents loaded from a file are not in a format Meilisearch accepts."""

    def __str__(self) -> str:
        return f"InvalidDocumentError, {self.message}"


class InvalidDocumentIdError(MeilisearchError):
    """A document id was empty or missing. Raised before any request is sent."""

    def __str__(self) -> str:
        return f"InvalidDocumentIdError, {self.message}"


class InvalidRestriction(MeilisearchError):
    def __str__(self) -> str:
        return f"InvalidRestriction, {self.message}"


class MeilisearchApiError(MeilisearchError):
    """Error returned by the Meilisearch API.

    The structured error body sent by the server is split into `code`, `message`,
    `error_type` and `link`. When the body is empty the httpx error text is used as the
    message.
    """

    def __init__(self, error: str, response: Response) -> None:
        self.status_code = response.status_code
        self.code = ""
        self.message = error
        self.error_type = ""
        self.link = ""
        self.body: dict | None = None

        if response.content:
            body = response.json()
            self.body = body if isinstance(body, dict) else None
            if self.body is not None:
                self.message = self.body.get("message") or error
                self.code = self.body.get("code") or ""
                self.error_type = self.body.get("type") or ""
                self.link = self.body.get("link") or ""

        # Skip MeilisearchError.__init__ so message keeps the server text
        Exception.__init__(self, self.message)

    def __str__(self) -> str:
        text = f"MeilisearchApiError. {self.status_code} {self.code} Error message: {self.message}"
        if self.error_type:
            text = f"{text} Error type: {self.error_type}"
        if self.link:
            text = f"{text} Error documentation: {self.link}"

        return text


class MeilisearchVersionError(MeilisearchApiError):
    """An API error from an operation that needs a recent version of Meilisearch."""

    def __init__(self, api_error: MeilisearchApiError, method_name: str) -> None:
        self.status_code = api_error.status_code
        self.code = api_error.code
        self.error_type = api_error.error_type
        self.link = api_error.link
        self.body = api_error.body
        self.method_name = method_name
        self.message = (
            f"{api_error.message}\nHint: It might not be working because you're not up to date "
            f"with the Meilisearch version that `{method_name}` requires."
        )
        Exception.__init__(self, self.message)

    def __str__(self) -> str:
        return f"MeilisearchVersionError. {self.status_code} {self.code} Error message: {self.message}"


class MeilisearchCommunicationError(MeilisearchError):
    """The server could not be reached."""

    def __str__(self) -> str:
        return f"MeilisearchCommunicationError, {self.message}"


class MeilisearchTimeoutError(MeilisearchError):
    """A task did not reach a terminal status in the allotted time."""

    def __str__(self) -> str:
        return f"MeilisearchTimeoutError, {self.message}"
