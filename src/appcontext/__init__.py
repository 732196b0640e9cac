"""Application bootstrap context.

appcontext assembles an application from bundles of setup logic that share a
single context. Bundles are registered explicitly, in dependency order, and
each one may populate a JSON-shaped tree of configuration values or register
further bundles of its own. Nothing is resolved lazily: registering a bundle
applies it on the spot.

Key Features:
    - Bundles addressed by type and an optional qualifier
    - Declared dependencies checked at registration time
    - Provenance of bundles registered by other bundles
    - Dotted-path value tree with on-demand objects and arrays
    - JSON documents flattened into the value tree

Basic Usage:
    >>> from appcontext import AppContext, ContextBundle, JsonContextValueReader
    >>>
    >>> class DatabaseBundle(ContextBundle):
    ...     def apply(self, context):
    ...         self.host = context.get_value("db.host").as_string()
    >>>
    >>> context = AppContext()
    >>> JsonContextValueReader.from_string('{"db": {"host": "localhost"}}').read_into(context)
    >>> context.register_bundle(DatabaseBundle())
    >>> context.get_bundle(DatabaseBundle).host
    'localhost'

The package consists of several modules:
    - context: The AppContext facade handed to bundles
    - bundle: Bundle base class, qualified references and the requires decorator
    - registry: Bundle registration, lookup and provenance
    - values: Value tree nodes and path resolution
    - readers: Document readers that populate the value tree
    - settings: Path interpretation settings
    - errors: Library exceptions
"""

import logging

from appcontext.bundle import NO_QUALIFIER, ContextBundle, QualifiedBundle, requires
from appcontext.context import AppContext, join_path
from appcontext.errors import (
    AlreadyRegisteredError,
    AppContextError,
    DependencyError,
    DuplicatePathError,
    InvalidArgumentError,
    NotRegisteredError,
    TypeConversionError,
    UnsupportedOperationError,
    ValueShapeError,
)
from appcontext.readers import ContextValueReader, JsonContextValueReader, MappingValueReader
from appcontext.settings import VALUE_PATH_SEPARATOR, ContextSettings
from appcontext.values import ContextValue, LeafValue

__all__ = [
    "AppContext",
    "ContextBundle",
    "QualifiedBundle",
    "NO_QUALIFIER",
    "requires",
    "join_path",
    "ContextSettings",
    "VALUE_PATH_SEPARATOR",
    "ContextValue",
    "LeafValue",
    "ContextValueReader",
    "MappingValueReader",
    "JsonContextValueReader",
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

logging.getLogger(__name__).addHandler(logging.NullHandler())
