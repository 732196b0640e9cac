"""
Path-addressed tree of configuration values.

Values are shaped like JSON. A path is a series of keys used to traverse the
tree, and the path alone dictates the structure that is created to reach a
value:

- ``"a"``: ``a`` is a leaf holding a string or number
- ``"a.b"``: ``a`` is an object, ``b`` is a leaf
- ``"a.0"``: ``a`` is an array, its first element is a leaf
- ``"a.0.b"``: ``a`` is an array whose first element is an object holding the leaf ``b``

The root of the tree is always an object, so a path may not start with an
array index. Only leaves are registered explicitly; containers are created on
the way to them and never change shape afterwards.
"""

import logging
import re
import weakref
from abc import ABC
from decimal import Decimal
from numbers import Real
from typing import Any, Iterator, Optional, Union

from appcontext.errors import (
    DuplicatePathError,
    InvalidArgumentError,
    TypeConversionError,
    UnsupportedOperationError,
    ValueShapeError,
)
from appcontext.settings import ContextSettings

__all__ = [
    "Scalar",
    "ContextValue",
    "ObjectContainerValue",
    "ArrayContainerValue",
    "LeafValue",
    "ValueTree",
    "is_scalar",
]

logger = logging.getLogger(__name__)

Scalar = Union[str, int, float, Decimal]
"""Payload types a leaf can hold."""

_NUMBER_TYPES = (Real, Decimal)
_INDEX_PATTERN = re.compile(r"[0-9]+")


def is_scalar(value: Any) -> bool:
    """Return True if ``value`` can be stored in a leaf (a string or a non-boolean number)."""
    if isinstance(value, bool):
        return False
    return isinstance(value, str) or isinstance(value, _NUMBER_TYPES)


def _is_index(segment: str) -> bool:
    return _INDEX_PATTERN.fullmatch(segment) is not None


class _HoleType:
    """Placeholder for array slots that have not been filled yet."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "<HOLE>"


_HOLE = _HoleType()


class ContextValue(ABC):
    """
    A node of the value tree.

    Nodes are one of three variants: an object container keyed by strings, an
    array container keyed by integers, or a leaf holding a single scalar. The
    base class rejects every operation; each variant enables the ones that
    make sense for it.
    """

    is_container = False
    is_object = False
    is_array = False
    is_leaf = False

    def __init__(self, parent: Optional["ContextValue"] = None):
        self._parent = weakref.ref(parent) if parent is not None else None

    @property
    def parent(self) -> Optional["ContextValue"]:
        """The containing node, or None for the root."""
        return self._parent() if self._parent is not None else None

    def child(self, key: Union[str, int]) -> Optional["ContextValue"]:
        raise UnsupportedOperationError(f"Cannot get a child of {self._describe()}")

    def update(self, new_value: Any) -> Any:
        raise UnsupportedOperationError(f"Cannot update {self._describe()}")

    def as_string(self) -> str:
        raise UnsupportedOperationError(
            f"Cannot represent {self._describe()} as a string"
        )

    def as_number(self) -> Union[int, float, Decimal]:
        raise UnsupportedOperationError(
            f"Cannot represent {self._describe()} as a number"
        )

    def _describe(self) -> str:
        return "a value"


class ObjectContainerValue(ContextValue):
    """Container whose children are addressed by string keys."""

    is_container = True
    is_object = True

    def __init__(self, parent: Optional[ContextValue] = None):
        super().__init__(parent)
        self._children: dict[str, ContextValue] = {}

    def child(self, key: Union[str, int]) -> Optional[ContextValue]:
        if not isinstance(key, str):
            raise UnsupportedOperationError(
                f"Cannot get index {key!r} from an object container"
            )
        return self._children.get(key)

    def items(self) -> list[tuple[str, ContextValue]]:
        return list(self._children.items())

    def _attach(self, key: str, node: ContextValue) -> None:
        self._children[key] = node

    def _describe(self) -> str:
        return "an object container"

    def __len__(self) -> int:
        return len(self._children)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._children))

    def __contains__(self, key: object) -> bool:
        return key in self._children

    def __repr__(self) -> str:
        return f"ObjectContainerValue(keys={list(self._children)})"


class ArrayContainerValue(ContextValue):
    """
    Container whose children are addressed by non-negative integer indices.

    Indices may be filled in any order. Filling index ``n`` of a shorter array
    pads the slots in between with holes, which read back as None until they
    are filled in turn.
    """

    is_container = True
    is_array = True

    def __init__(self, parent: Optional[ContextValue] = None):
        super().__init__(parent)
        self._slots: list[Union[ContextValue, _HoleType]] = []

    def child(self, key: Union[str, int]) -> Optional[ContextValue]:
        if isinstance(key, bool) or not isinstance(key, int):
            raise UnsupportedOperationError(
                f"Cannot get key {key!r} from an array container"
            )
        if key < 0 or key >= len(self._slots):
            return None
        slot = self._slots[key]
        return None if slot is _HOLE else slot

    def items(self) -> list[tuple[int, ContextValue]]:
        return [
            (index, slot)
            for index, slot in enumerate(self._slots)
            if slot is not _HOLE
        ]

    def _attach(self, index: int, node: ContextValue) -> None:
        if index >= len(self._slots):
            self._slots.extend([_HOLE] * (index + 1 - len(self._slots)))
        self._slots[index] = node

    def _describe(self) -> str:
        return "an array container"

    def __len__(self) -> int:
        return len(self._slots)

    def __iter__(self) -> Iterator[Optional[ContextValue]]:
        return iter([None if slot is _HOLE else slot for slot in self._slots])

    def __repr__(self) -> str:
        return f"ArrayContainerValue(length={len(self._slots)})"


class LeafValue(ContextValue):
    """Terminal node holding one string or numeric payload."""

    is_leaf = True

    def __init__(self, parent: ContextValue, value: Scalar):
        super().__init__(parent)
        self._value = value

    @property
    def value(self) -> Any:
        return self._value

    def update(self, new_value: Any) -> Any:
        """Replace the payload and return the one it replaced."""
        old = self._value
        self._value = new_value
        return old

    def as_string(self) -> str:
        return str(self._value)

    def as_number(self) -> Union[int, float, Decimal]:
        """Return the payload as a number.

        Numeric payloads are returned unchanged. String payloads are parsed as an
        integer first and as a float second. Digit separators and surrounding
        whitespace are not accepted.

        Raises:
            TypeConversionError: If the payload is a string that is neither.
        """
        if is_scalar(self._value) and not isinstance(self._value, str):
            return self._value

        text = str(self._value)
        if "_" in text or text != text.strip():
            raise TypeConversionError(f"Cannot represent the value {text!r} as a number")
        for parse in (int, float):
            try:
                return parse(text)
            except ValueError:
                continue
        raise TypeConversionError(f"Cannot represent the value {text!r} as a number")

    def _describe(self) -> str:
        return "a leaf value"

    def __repr__(self) -> str:
        return f"LeafValue({self._value!r})"


class ValueTree:
    """
    Owns the root of the value tree and resolves dotted paths against it.

    Every leaf path can be registered exactly once. Leaves, and the containers
    created on the way to them, are indexed by their normalised path so they
    can be fetched again without walking the tree.
    """

    def __init__(self, settings: Optional[ContextSettings] = None):
        self._settings = settings if settings is not None else ContextSettings()
        self._root = ObjectContainerValue()
        self._registered_paths: set[str] = set()
        self._nodes: dict[str, ContextValue] = {}

    @property
    def root(self) -> ObjectContainerValue:
        return self._root

    @property
    def settings(self) -> ContextSettings:
        return self._settings

    def join_path(self, *parts: Union[str, int]) -> str:
        """Join path segments with the configured separator."""
        return self._settings.path_separator.join(str(part) for part in parts)

    def register_value(self, path: str, value: Scalar) -> LeafValue:
        """Create the leaf at ``path`` holding ``value``.

        Containers missing along the path are created: an array when the
        following segment is an index, an object otherwise. The whole path is
        checked against the existing tree before anything is created.

        Args:
            path: Separator-delimited path to the leaf.
            value: A string or number.

        Returns:
            The new :class:`LeafValue`.

        Raises:
            InvalidArgumentError: If the path is blank, has a blank segment,
                starts with an index, or the value is not a string or number.
            DuplicatePathError: If a leaf was already registered at the path.
            ValueShapeError: If the path disagrees with the existing tree.
        """
        normalised = self._normalise(path)
        if not is_scalar(value):
            raise InvalidArgumentError(
                f"Value for path '{path}' must be a string or number, "
                f"was {type(value).__name__}"
            )
        if normalised in self._registered_paths:
            raise DuplicatePathError(
                f"Path '{path}' has already been registered with a value"
            )
        segments = self._split(normalised, path)

        parent = self._root
        position = 0
        while position < len(segments) - 1:
            existing = self._existing_child(parent, segments, position, path)
            if existing is None:
                break
            parent = existing
            position += 1
        else:
            existing = self._existing_child(parent, segments, position, path)
            if isinstance(existing, LeafValue):
                raise DuplicatePathError(
                    f"Path '{path}' has already been registered with a value"
                )
            if existing is not None:
                raise ValueShapeError(
                    f"Path '{path}' already holds {existing._describe()} "
                    "and cannot become a leaf"
                )

        for position in range(position, len(segments) - 1):
            container = (
                ArrayContainerValue(parent)
                if _is_index(segments[position + 1])
                else ObjectContainerValue(parent)
            )
            self._attach(parent, segments[position], container)
            container_path = self.join_path(*segments[: position + 1])
            self._nodes[container_path] = container
            logger.debug("Created %r at path '%s'", container, container_path)
            parent = container

        leaf = LeafValue(parent, value)
        self._attach(parent, segments[-1], leaf)
        self._nodes[normalised] = leaf
        self._registered_paths.add(normalised)
        logger.debug("Registered value at path '%s'", normalised)
        return leaf

    def get_value(self, path: str) -> ContextValue:
        """Return the node registered, or created as a container, at ``path``.

        Raises:
            InvalidArgumentError: If nothing has been registered at the path.
        """
        node = self._nodes.get(self._normalise(path))
        if node is None:
            raise InvalidArgumentError(f"Path '{path}' has not been registered")
        return node

    def has_value(self, path: str) -> bool:
        if not isinstance(path, str) or not path.strip():
            return False
        return self._normalise(path) in self._nodes

    def _normalise(self, path: str) -> str:
        if not isinstance(path, str):
            raise InvalidArgumentError(
                f"Path must be a string, was {type(path).__name__}"
            )
        if not path.strip():
            raise InvalidArgumentError("Path must contain non-whitespace characters")
        return path if self._settings.case_sensitive_paths else path.lower()

    def _split(self, normalised: str, path: str) -> list[str]:
        segments = normalised.split(self._settings.path_separator)
        for position, segment in enumerate(segments):
            if not segment.strip():
                raise InvalidArgumentError(
                    f"Segment {position} of path '{path}' is blank"
                )
        if _is_index(segments[0]):
            raise InvalidArgumentError(
                f"Path '{path}' starts with an array index; the root is always an object"
            )
        return segments

    @staticmethod
    def _existing_child(
        parent: ContextValue, segments: list[str], position: int, path: str
    ) -> Optional[ContextValue]:
        segment = segments[position]
        if _is_index(segment):
            if not parent.is_array:
                raise ValueShapeError(
                    f"Segment {position} ('{segment}') of path '{path}' is an array "
                    f"index, but it indexes {parent._describe()}"
                )
            return parent.child(int(segment))
        if not parent.is_object:
            raise ValueShapeError(
                f"Segment {position} ('{segment}') of path '{path}' is an object "
                f"key, but it indexes {parent._describe()}"
            )
        return parent.child(segment)

    @staticmethod
    def _attach(parent: ContextValue, segment: str, node: ContextValue) -> None:
        if parent.is_array:
            parent._attach(int(segment), node)
        else:
            parent._attach(segment, node)
