"""Directive registry: pairing metadata for Blade ``@name`` directives.

Example:
    >>> from bladefmt.directives import create_default_registry
    >>> registry = create_default_registry()
    >>> registry.lookup("endif").family
    'if'
"""

from bladefmt.directives.descriptor import CloseKind, DirectiveDescriptor, Pairing
from bladefmt.directives.registry import (
    DirectiveRegistry,
    DirectiveRegistryBuilder,
    create_default_registry,
    create_registry_with_defaults,
)

__all__ = [
    "CloseKind",
    "DirectiveDescriptor",
    "DirectiveRegistry",
    "DirectiveRegistryBuilder",
    "Pairing",
    "create_default_registry",
    "create_registry_with_defaults",
]
