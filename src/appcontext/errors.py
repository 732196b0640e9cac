__all__ = [
    "AppContextError",
    "InvalidArgumentError",
    "DuplicatePathError",
    "ValueShapeError",
    "AlreadyRegisteredError",
    "DependencyError",
    "NotRegisteredError",
    "UnsupportedOperationError",
    "TypeConversionError",
]


class AppContextError(Exception):
    """Base class for every error raised by an application context."""

    pass


class InvalidArgumentError(AppContextError, ValueError):
    """Raised when a path or value handed to the context is malformed."""

    pass


class DuplicatePathError(InvalidArgumentError):
    """Raised when a value path is registered a second time."""

    pass


class ValueShapeError(InvalidArgumentError):
    """Raised when a path disagrees with the shape of nodes already in the tree."""

    pass


class AlreadyRegisteredError(AppContextError):
    """Raised when a bundle type and qualifier pair is registered twice."""

    pass


class DependencyError(AppContextError):
    """Raised when a bundle requires a bundle that has not been registered yet."""

    pass


class NotRegisteredError(AppContextError, LookupError):
    """Raised when looking up a bundle that was never registered."""

    pass


class UnsupportedOperationError(AppContextError, TypeError):
    """Raised when an operation does not apply to a value node or document value."""

    pass


class TypeConversionError(AppContextError, ValueError):
    """Raised when a leaf value cannot be read as a number."""

    pass
