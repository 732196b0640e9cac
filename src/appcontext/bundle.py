"""
Bundles of application setup logic and the references used to address them.

A bundle is identified by its concrete type and a qualifier. The qualifier
defaults to :data:`NO_QUALIFIER`; registering the same bundle type under
different qualifiers yields independent bundles.
"""

import inspect
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Hashable, Optional, Union

from appcontext.errors import InvalidArgumentError

if TYPE_CHECKING:
    from appcontext.context import AppContext

__all__ = [
    "NO_QUALIFIER",
    "ContextBundle",
    "QualifiedBundle",
    "BundleRef",
    "qualified",
    "requires",
]


class _NoQualifierType:
    """Sentinel type for bundles registered without a qualifier."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "NO_QUALIFIER"


NO_QUALIFIER = _NoQualifierType()


class ContextBundle(ABC):
    """
    A self-contained unit of application setup.

    Subclasses implement :meth:`apply`, which is invoked once when the bundle
    is registered. It receives the context, which it may populate with values
    or further bundles, followed by the instances of the bundles it requires,
    in the order :meth:`required_bundles` declares them.

    Example:
        >>> @requires(DatabaseBundle)
        ... class RepositoryBundle(ContextBundle):
        ...     def apply(self, context, database):
        ...         self.users = UserRepository(database.connection)
    """

    @abstractmethod
    def apply(self, context: "AppContext", *required_bundles: "ContextBundle") -> None:
        ...

    def required_bundles(self) -> list["QualifiedBundle"]:
        """Bundles that must be registered before this one.

        Defaults to the references declared with :func:`requires`, or none.
        """
        return list(getattr(type(self), "__required_bundles__", ()))


@dataclass(frozen=True)
class QualifiedBundle:
    """Reference to a bundle by type and qualifier.

    Attributes:
        bundle_type: The concrete bundle class.
        qualifier: Discriminator between bundles of the same type.
        bundle: The instance to register, when the reference is handed to
            ``register``. It plays no part in equality.
    """

    bundle_type: type
    qualifier: Hashable = NO_QUALIFIER
    bundle: Optional[ContextBundle] = field(default=None, compare=False, repr=False)

    @staticmethod
    def of(bundle_type: type, qualifier: Hashable = NO_QUALIFIER) -> "QualifiedBundle":
        return qualified(bundle_type, qualifier)

    @staticmethod
    def for_bundle(
        bundle: ContextBundle, qualifier: Hashable = NO_QUALIFIER
    ) -> "QualifiedBundle":
        if not isinstance(bundle, ContextBundle):
            raise InvalidArgumentError(f"{bundle!r} is not a ContextBundle")
        key = qualified(type(bundle), qualifier)
        return QualifiedBundle(key.bundle_type, key.qualifier, bundle)

    def __str__(self) -> str:
        name = self.bundle_type.__qualname__
        if self.qualifier is NO_QUALIFIER:
            return name
        return f"{name}[{self.qualifier!r}]"


BundleRef = Union[type, QualifiedBundle]
"""Type alias for the ways a registered bundle can be addressed.

Example:
    >>> context.get_bundle(DatabaseBundle)
    >>> context.get_bundle(DatabaseBundle, Region.EU)
    >>> context.get_bundle(QualifiedBundle.of(DatabaseBundle, Region.EU))
"""


def qualified(ref: BundleRef, qualifier: Hashable = NO_QUALIFIER) -> QualifiedBundle:
    """Normalise a bundle type or reference into an instance-free QualifiedBundle.

    Raises:
        InvalidArgumentError: If ``ref`` is not a bundle type or reference, if
            a qualifier is supplied both in ``ref`` and separately, or if the
            qualifier is not hashable.
    """
    if isinstance(ref, QualifiedBundle):
        if qualifier is not NO_QUALIFIER and qualifier != ref.qualifier:
            raise InvalidArgumentError(
                f"Qualifier {qualifier!r} conflicts with the qualifier of {ref}"
            )
        bundle_type, qualifier = ref.bundle_type, ref.qualifier
    else:
        bundle_type = ref

    if not (inspect.isclass(bundle_type) and issubclass(bundle_type, ContextBundle)):
        raise InvalidArgumentError(f"{bundle_type!r} is not a ContextBundle type")
    try:
        hash(qualifier)
    except TypeError as exc:
        raise InvalidArgumentError(f"Qualifier {qualifier!r} is not hashable") from exc

    return QualifiedBundle(bundle_type, qualifier)


def requires(*refs: BundleRef) -> Callable[[Any], Any]:
    """Class decorator declaring the bundles a bundle requires.

    The required bundles are handed to :meth:`ContextBundle.apply` in the
    order given here.

    Example:
        @requires(DatabaseBundle, QualifiedBundle.of(CacheBundle, "sessions"))
        class SessionBundle(ContextBundle):
            def apply(self, context, database, cache):
                ...
    """
    declared = tuple(qualified(ref) for ref in refs)

    def decorator(cls: Any) -> Any:
        if not (inspect.isclass(cls) and issubclass(cls, ContextBundle)):
            raise InvalidArgumentError(f"{cls!r} is not a ContextBundle type")
        cls.__required_bundles__ = declared
        return cls

    return decorator
