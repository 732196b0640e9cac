"""
Readers that populate a context's value tree from documents.

A reader flattens a JSON-shaped document into one ``register_value`` call per
scalar. Object keys become path segments and array positions become decimal
indices, so ``{"a": {"b": 5}, "c": ["x", 6]}`` registers ``a.b``, ``c.0``
and ``c.1``. Whether the resulting paths fit together is left to the value
tree.
"""

import json
import logging
import os
from abc import ABC, abstractmethod
from collections import deque
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional, TextIO, Union

from appcontext.errors import InvalidArgumentError, UnsupportedOperationError

if TYPE_CHECKING:
    from appcontext.context import AppContext

__all__ = ["ContextValueReader", "MappingValueReader", "JsonContextValueReader"]

logger = logging.getLogger(__name__)


class ContextValueReader(ABC):
    """Source of values to register into a context."""

    @abstractmethod
    def read_into(self, context: "AppContext") -> None:
        ...


class MappingValueReader(ContextValueReader):
    """Register every scalar of an already parsed document.

    Args:
        data: The document. Its root must be a mapping.
        prefix: Optional path under which the whole document is registered.
    """

    def __init__(self, data: Mapping[str, Any], prefix: Optional[str] = None):
        self._data = data
        self._prefix = prefix

    def read_into(self, context: "AppContext") -> None:
        """Register the document's scalars into ``context``, breadth first.

        Raises:
            InvalidArgumentError: If the document root is not a mapping.
            UnsupportedOperationError: If the document holds a boolean.
        """
        if not isinstance(self._data, Mapping):
            raise InvalidArgumentError(
                "Root level of a document read into a context must be an object, "
                f"was {type(self._data).__name__}"
            )

        def path_of(key: Any) -> str:
            return context.join_path(self._prefix, key) if self._prefix else str(key)

        pending = deque((path_of(key), value) for key, value in self._data.items())
        registered = 0
        while pending:
            path, value = pending.popleft()
            if value is None:
                logger.debug("Skipped null value at path '%s'", path)
            elif isinstance(value, bool):
                raise UnsupportedOperationError(
                    f"Value at path '{path}' is {json.dumps(value)}; "
                    "booleans cannot be registered"
                )
            elif isinstance(value, Mapping):
                pending.extend(
                    (context.join_path(path, key), child) for key, child in value.items()
                )
            elif isinstance(value, (list, tuple)):
                pending.extend(
                    (context.join_path(path, index), child)
                    for index, child in enumerate(value)
                )
            else:
                context.register_value(path, value)
                registered += 1

        logger.debug("Registered %d values from document", registered)


class JsonContextValueReader(ContextValueReader):
    """
    Register the values of a JSON document.

    The document is parsed on first use and kept, so one reader can populate
    several contexts.

    Example:
        >>> JsonContextValueReader.from_path("config.json").read_into(context)
        >>> context.get_value("server.port").as_number()
        8080
    """

    def __init__(self, content: str, prefix: Optional[str] = None):
        self._content = content
        self._prefix = prefix
        self._document: Optional[Any] = None

    @classmethod
    def from_string(cls, content: str, prefix: Optional[str] = None) -> "JsonContextValueReader":
        return cls(content, prefix)

    @classmethod
    def from_path(
        cls, path: Union[str, os.PathLike], prefix: Optional[str] = None
    ) -> "JsonContextValueReader":
        """Read a JSON file.

        Raises:
            InvalidArgumentError: If the file cannot be read.
        """
        try:
            content = Path(path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise InvalidArgumentError(f"Failed to read JSON file '{path}'") from exc
        return cls(content, prefix)

    @classmethod
    def from_stream(cls, stream: TextIO, prefix: Optional[str] = None) -> "JsonContextValueReader":
        try:
            content = stream.read()
        except (OSError, UnicodeDecodeError) as exc:
            raise InvalidArgumentError("Failed to read JSON from stream") from exc
        return cls(content, prefix)

    def read_into(self, context: "AppContext") -> None:
        """Parse the document if needed and register its values.

        Raises:
            InvalidArgumentError: If the content is not valid JSON or its root
                is not an object.
        """
        if self._document is None:
            try:
                self._document = json.loads(self._content)
            except json.JSONDecodeError as exc:
                raise InvalidArgumentError(f"Failed to parse JSON document: {exc}") from exc
            logger.debug("Parsed JSON document of %d characters", len(self._content))

        MappingValueReader(self._document, self._prefix).read_into(context)
