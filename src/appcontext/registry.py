"""Registration and lookup of bundles by type and qualifier."""

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Callable, Hashable, Iterator, Union

from appcontext.bundle import NO_QUALIFIER, BundleRef, ContextBundle, QualifiedBundle, qualified
from appcontext.errors import (
    AlreadyRegisteredError,
    DependencyError,
    InvalidArgumentError,
    NotRegisteredError,
)

if TYPE_CHECKING:
    from appcontext.context import AppContext

__all__ = ["BundleRegistry"]

logger = logging.getLogger(__name__)


class BundleRegistry:
    """
    Registry of bundles keyed by (type, qualifier).

    Registering a bundle applies it immediately. While a bundle's ``apply`` is
    running its key sits on the registration stack, and every bundle registered
    in the meantime is recorded as provided by it. Only the bundle on top of
    the stack is credited, so a bundle registered two levels down belongs to
    its immediate parent.
    """

    def __init__(self):
        self._bundles: dict[QualifiedBundle, ContextBundle] = {}
        self._provided: dict[QualifiedBundle, list[ContextBundle]] = {}
        self._register_stack: list[QualifiedBundle] = []

    def register(
        self,
        context: "AppContext",
        bundle: Union[ContextBundle, QualifiedBundle],
        qualifier: Hashable = NO_QUALIFIER,
    ) -> None:
        """Register a bundle and apply it to ``context``.

        The bundle is stored before ``apply`` runs. If ``apply`` raises, the
        error propagates and everything registered up to that point stays
        registered.

        Args:
            context: The context passed to the bundle's ``apply``.
            bundle: The bundle, or a QualifiedBundle carrying one.
            qualifier: Discriminator for bundles of the same type.

        Raises:
            AlreadyRegisteredError: If the type and qualifier are already registered.
            DependencyError: If a required bundle has not been registered.
        """
        key, bundle = _registration_key(bundle, qualifier)
        if key in self._bundles:
            raise AlreadyRegisteredError(
                f"Bundle {key} has already been registered with {self._bundles[key]!r}"
            )

        required = []
        for required_ref in bundle.required_bundles():
            required_key = qualified(required_ref)
            if required_key not in self._bundles:
                raise DependencyError(
                    f"Bundle {key} requires bundle {required_key} "
                    "which has not been registered yet"
                )
            required.append(self._bundles[required_key])

        self._bundles[key] = bundle
        self._provided[key] = []
        if self._register_stack:
            self._provided[self._register_stack[-1]].append(bundle)
            logger.debug("Registered bundle %s provided by %s", key, self._register_stack[-1])
        else:
            logger.debug("Registered bundle %s", key)

        with self._applying(key):
            bundle.apply(context, *required)

    def get(self, ref: BundleRef, qualifier: Hashable = NO_QUALIFIER) -> Any:
        """Return the bundle registered for ``ref`` and ``qualifier``.

        Raises:
            NotRegisteredError: If no such bundle has been registered.
        """
        key = qualified(ref, qualifier)
        try:
            return self._bundles[key]
        except KeyError:
            raise NotRegisteredError(f"Bundle {key} has not been registered") from None

    def is_registered(self, ref: BundleRef, qualifier: Hashable = NO_QUALIFIER) -> bool:
        return qualified(ref, qualifier) in self._bundles

    def use(
        self,
        ref: BundleRef,
        fn: Callable[[Any], Any],
        qualifier: Hashable = NO_QUALIFIER,
    ) -> Any:
        """Call ``fn`` with the registered bundle and return its result."""
        return fn(self.get(ref, qualifier))

    def provided_by(
        self, ref: BundleRef, qualifier: Hashable = NO_QUALIFIER
    ) -> list[ContextBundle]:
        """Return the bundles registered while the given bundle was being applied.

        Raises:
            NotRegisteredError: If the given bundle has not been registered.
        """
        key = qualified(ref, qualifier)
        if key not in self._provided:
            raise NotRegisteredError(
                f"Bundle {key} has not been registered, thus cannot provide any bundles"
            )
        return list(self._provided[key])

    def registered_bundles(self) -> list[ContextBundle]:
        """All registered bundles, in the order they were registered."""
        return list(self._bundles.values())

    @contextmanager
    def _applying(self, key: QualifiedBundle) -> Iterator[None]:
        self._register_stack.append(key)
        try:
            yield
        except Exception:
            logger.warning("Bundle %s failed while being applied", key)
            raise
        finally:
            self._register_stack.pop()


def _registration_key(
    bundle: Union[ContextBundle, QualifiedBundle], qualifier: Hashable
) -> tuple[QualifiedBundle, ContextBundle]:
    if isinstance(bundle, QualifiedBundle):
        if bundle.bundle is None:
            raise InvalidArgumentError(
                f"QualifiedBundle {bundle} does not carry a bundle instance to register"
            )
        if type(bundle.bundle) is not bundle.bundle_type:
            raise InvalidArgumentError(
                f"QualifiedBundle {bundle} carries an instance of "
                f"{type(bundle.bundle).__name__}, not {bundle.bundle_type.__name__}"
            )
        return qualified(bundle, qualifier), bundle.bundle
    if isinstance(bundle, ContextBundle):
        return qualified(type(bundle), qualifier), bundle
    raise InvalidArgumentError(f"{bundle!r} is not a ContextBundle")
