"""The application context shared by every bundle during assembly."""

from typing import Any, Callable, Hashable, Optional, Union

from appcontext.bundle import NO_QUALIFIER, BundleRef, ContextBundle, QualifiedBundle
from appcontext.registry import BundleRegistry
from appcontext.settings import VALUE_PATH_SEPARATOR, ContextSettings
from appcontext.values import ContextValue, LeafValue, Scalar, ValueTree

__all__ = ["AppContext", "join_path"]


def join_path(*parts: Union[str, int]) -> str:
    """Join path segments with the default separator."""
    return VALUE_PATH_SEPARATOR.join(str(part) for part in parts)


class AppContext:
    """
    Container passed to every bundle's ``apply``.

    Combines a :class:`~appcontext.registry.BundleRegistry` with a
    :class:`~appcontext.values.ValueTree`. Contexts are plain objects: create
    one per application assembly and drop it when done.

    Example:
        >>> context = AppContext()
        >>> context.register_value("db.host", "localhost")
        >>> context.register_bundle(DatabaseBundle())
        >>> context.get_value("db.host").as_string()
        'localhost'
    """

    def __init__(self, settings: Optional[ContextSettings] = None):
        self._bundles = BundleRegistry()
        self._values = ValueTree(settings)

    @property
    def settings(self) -> ContextSettings:
        return self._values.settings

    def register_bundle(
        self,
        bundle: Union[ContextBundle, QualifiedBundle],
        qualifier: Hashable = NO_QUALIFIER,
    ) -> None:
        self._bundles.register(self, bundle, qualifier)

    def get_bundle(self, ref: BundleRef, qualifier: Hashable = NO_QUALIFIER) -> Any:
        return self._bundles.get(ref, qualifier)

    def use_bundle(
        self,
        ref: BundleRef,
        fn: Callable[[Any], Any],
        qualifier: Hashable = NO_QUALIFIER,
    ) -> Any:
        return self._bundles.use(ref, fn, qualifier)

    def is_bundle_registered(
        self, ref: BundleRef, qualifier: Hashable = NO_QUALIFIER
    ) -> bool:
        return self._bundles.is_registered(ref, qualifier)

    def provided_by(
        self, ref: BundleRef, qualifier: Hashable = NO_QUALIFIER
    ) -> list[ContextBundle]:
        return self._bundles.provided_by(ref, qualifier)

    def registered_bundles(self) -> list[ContextBundle]:
        return self._bundles.registered_bundles()

    def register_value(self, path: str, value: Scalar) -> LeafValue:
        return self._values.register_value(path, value)

    def get_value(self, path: str) -> ContextValue:
        return self._values.get_value(path)

    def has_value(self, path: str) -> bool:
        return self._values.has_value(path)

    def join_path(self, *parts: Union[str, int]) -> str:
        return self._values.join_path(*parts)
