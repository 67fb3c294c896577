"""Directive registry for pairing lookup.

The registry maps directive names to DirectiveDescriptors. Unknown names
are not errors: lookup returns None and the caller treats the directive as
an opaque standalone leaf, so custom directives degrade gracefully.

Thread Safety:
DirectiveRegistry is immutable after creation. Safe to share.
Use DirectiveRegistryBuilder for mutable construction.

Example:
    >>> registry = (
    ...     create_registry_with_defaults()
    ...     .register(DirectiveDescriptor("feature", Pairing.OPENS, family="feature"))
    ...     .register(DirectiveDescriptor("endfeature", Pairing.CLOSES, family="feature"))
    ...     .build()
    ... )
    >>> registry.lookup("feature").pairing
    <Pairing.OPENS: 'opens'>
"""

from __future__ import annotations

from bladefmt.directives.builtins import build_builtin_descriptors
from bladefmt.directives.descriptor import DirectiveDescriptor, Pairing


class DirectiveRegistry:
    """Immutable registry of directive descriptors.

    Lookup is exact first, then case-insensitive, mirroring Blade's
    case-insensitive resolution of its built-in directives.

    Thread Safety:
        Immutable after creation. Safe to share across threads.
    """

    __slots__ = ("_descriptors", "_by_name", "_by_lower", "_families")

    def __init__(
        self,
        descriptors: tuple[DirectiveDescriptor, ...],
        by_name: dict[str, DirectiveDescriptor],
    ) -> None:
        """Initialize registry with pre-built mappings.

        Use DirectiveRegistryBuilder to create instances.
        """
        self._descriptors = descriptors
        self._by_name = by_name
        self._by_lower = {name.lower(): d for name, d in by_name.items()}
        families: dict[str, list[DirectiveDescriptor]] = {}
        for d in descriptors:
            if d.family is not None:
                families.setdefault(d.family, []).append(d)
        self._families = {k: tuple(v) for k, v in families.items()}

    def lookup(self, name: str) -> DirectiveDescriptor | None:
        """Get the descriptor for a directive name (without ``@``).

        Returns:
            Descriptor if registered, None for unknown directives
        """
        descriptor = self._by_name.get(name)
        if descriptor is None:
            descriptor = self._by_lower.get(name.lower())
        return descriptor

    def closers(self, family: str) -> tuple[DirectiveDescriptor, ...]:
        """All closing descriptors of a family (``section`` has several)."""
        return tuple(d for d in self._families.get(family, ()) if d.pairing is Pairing.CLOSES)

    def has(self, name: str) -> bool:
        """Check if directive name is registered."""
        return self.lookup(name) is not None

    @property
    def names(self) -> frozenset[str]:
        """Get all registered directive names (registry casing)."""
        return frozenset(self._by_name)

    @property
    def descriptors(self) -> tuple[DirectiveDescriptor, ...]:
        return self._descriptors

    def __contains__(self, name: str) -> bool:
        return self.has(name)

    def __len__(self) -> int:
        return len(self._by_name)


class DirectiveRegistryBuilder:
    """Mutable builder for DirectiveRegistry.

    Register descriptors, then call build() to create an immutable registry.
    """

    __slots__ = ("_descriptors", "_by_name")

    def __init__(self) -> None:
        self._descriptors: list[DirectiveDescriptor] = []
        self._by_name: dict[str, DirectiveDescriptor] = {}

    def register(
        self, descriptor: DirectiveDescriptor, *, replace: bool = False
    ) -> DirectiveRegistryBuilder:
        """Register a directive descriptor.

        Args:
            descriptor: Descriptor to add
            replace: Allow overriding an existing registration

        Returns:
            Self for chaining

        Raises:
            ValueError: If the name is already registered and replace is False,
                or if an opening/closing descriptor has no family
        """
        if descriptor.pairing in (Pairing.OPENS, Pairing.CLOSES) and not descriptor.family:
            msg = f"Directive '{descriptor.name}' is {descriptor.pairing.value} but has no family"
            raise ValueError(msg)

        key = descriptor.name.lower()
        existing = next((n for n in self._by_name if n.lower() == key), None)
        if existing is not None:
            if not replace:
                msg = f"Directive '{descriptor.name}' already registered"
                raise ValueError(msg)
            old = self._by_name.pop(existing)
            self._descriptors.remove(old)

        self._by_name[descriptor.name] = descriptor
        self._descriptors.append(descriptor)
        return self

    def register_all(
        self, descriptors: list[DirectiveDescriptor] | tuple[DirectiveDescriptor, ...]
    ) -> DirectiveRegistryBuilder:
        for descriptor in descriptors:
            self.register(descriptor)
        return self

    def build(self) -> DirectiveRegistry:
        """Build immutable registry from registered descriptors."""
        return DirectiveRegistry(
            descriptors=tuple(self._descriptors),
            by_name=dict(self._by_name),
        )

    def __len__(self) -> int:
        return len(self._descriptors)


# Cached singleton, thread-safe since DirectiveRegistry is immutable
_DEFAULT_REGISTRY: DirectiveRegistry | None = None


def create_default_registry() -> DirectiveRegistry:
    """Get the default directive registry (cached singleton).

    Thread Safety:
        Returns a cached immutable registry. Safe for concurrent access.
    """
    global _DEFAULT_REGISTRY
    if _DEFAULT_REGISTRY is None:
        _DEFAULT_REGISTRY = create_registry_with_defaults().build()
    return _DEFAULT_REGISTRY


def create_registry_with_defaults() -> DirectiveRegistryBuilder:
    """Create a builder pre-populated with the built-in Blade directives.

    Use this to register custom block directives:

        >>> registry = create_registry_with_defaults().register(DirectiveDescriptor("datetime")).build()
        >>> registry.has("datetime")
        True
    """
    return DirectiveRegistryBuilder().register_all(build_builtin_descriptors())
