from __future__ import annotations

import json
from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Any

try:
    import orjson
except ImportError:  # pragma: nocover
    orjson = None  # type: ignore

try:
    import ujson
except ImportError:  # pragma: nocover
    ujson = None  # type: ignore


class _JsonHandler(ABC):
    @staticmethod
    @abstractmethod
    def dumps(obj: Any) -> str: ...

    @staticmethod
    @abstractmethod
    def loads(json_string: str | bytes | bytearray) -> Any: ...

    def dumps_lines(self, documents: Iterable[Any]) -> str:
        """Serialize documents to newline delimited json."""
        return "".join(f"{self.dumps(x)}\n" for x in documents)

    def loads_lines(self, text: str) -> list[Any]:
        return [self.loads(line) for line in text.splitlines() if line.strip()]


class BuiltinHandler(_JsonHandler):
    def __init__(self, serializer: type[json.JSONEncoder] | None = None) -> None:
        """Uses the json module from the standard library.

        Args:
            serializer: A custom JSONEncoder for values json.dumps cannot handle on its own,
                UUID or datetime for example. Defaults to None.
        """
        self.serializer = serializer

    def dumps(self, obj: Any) -> str:  # type: ignore[override]
        return json.dumps(obj, cls=self.serializer)

    @staticmethod
    def loads(json_string: str | bytes | bytearray) -> Any:
        return json.loads(json_string)


class OrjsonHandler(_JsonHandler):
    def __init__(self) -> None:
        if orjson is None:  # pragma: no cover
            raise ValueError("orjson must be installed to use the OrjsonHandler")

    @staticmethod
    def dumps(obj: Any) -> str:
        return orjson.dumps(obj).decode("utf-8")

    @staticmethod
    def loads(json_string: str | bytes | bytearray) -> Any:
        return orjson.loads(json_string)


class UjsonHandler(_JsonHandler):
    def __init__(self) -> None:
        if ujson is None:  # pragma: no cover
            raise ValueError("ujson must be installed to use the UjsonHandler")

    @staticmethod
    def dumps(obj: Any) -> str:
        return ujson.dumps(obj)

    @staticmethod
    def loads(json_string: str | bytes | bytearray) -> Any:
        return ujson.loads(json_string)


JsonHandler = BuiltinHandler | OrjsonHandler | UjsonHandler
