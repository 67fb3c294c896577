"""Built-in Blade directive table.

Covers control structures, loops, template inheritance, stacks,
authorization, components and the Livewire block directives. Anything not
listed here is an unknown directive and passes through as a standalone
leaf.
"""

from __future__ import annotations

from bladefmt.directives.descriptor import CloseKind, DirectiveDescriptor, Pairing

# Families whose branches may be separated by a bare @else
_CONDITIONALS = (
    "if",
    "unless",
    "isset",
    "empty",
    "auth",
    "guest",
    "can",
    "cannot",
    "canany",
    "env",
    "production",
    "session",
    "error",
)

_SPACED = frozenset({"if", "elseif", "unless", "for", "foreach", "forelse", "while"})


def _opener(name: str, **kwargs: object) -> DirectiveDescriptor:
    kwargs.setdefault("family", name)
    kwargs.setdefault("spaced_args", name in _SPACED)
    return DirectiveDescriptor(name=name, pairing=Pairing.OPENS, **kwargs)  # type: ignore[arg-type]


def _closer(name: str, family: str, kind: CloseKind = CloseKind.END) -> DirectiveDescriptor:
    return DirectiveDescriptor(
        name=name,
        pairing=Pairing.CLOSES,
        family=family,
        accepts_args=False,
        close_kind=kind,
    )


def _middle(name: str, *families: str, accepts_args: bool = True) -> DirectiveDescriptor:
    return DirectiveDescriptor(
        name=name,
        pairing=Pairing.MIDDLE,
        middle_of=frozenset(families),
        accepts_args=accepts_args,
        spaced_args=name in _SPACED,
    )


def _pair(name: str, closer: str | None = None, **kwargs: object) -> list[DirectiveDescriptor]:
    return [_opener(name, **kwargs), _closer(closer or f"end{name}", name)]


def _standalone(name: str, *, accepts_args: bool = True, **kwargs: object) -> DirectiveDescriptor:
    return DirectiveDescriptor(name=name, accepts_args=accepts_args, **kwargs)  # type: ignore[arg-type]


def build_builtin_descriptors() -> tuple[DirectiveDescriptor, ...]:
    """Return the default descriptor table."""
    table: list[DirectiveDescriptor] = []

    # Conditionals
    table += _pair("if")
    table.append(_middle("elseif", "if"))
    table.append(_middle("else", *_CONDITIONALS, accepts_args=False))
    table += _pair("unless")
    table += _pair("isset")
    table += _pair("auth")
    table.append(_middle("elseauth", "auth"))
    table += _pair("guest")
    table.append(_middle("elseguest", "guest"))
    for name in ("can", "cannot", "canany"):
        table += _pair(name)
        table.append(_middle(f"else{name}", name))
    table += _pair("env")
    table += _pair("production", accepts_args=False)
    table += _pair("session")
    table += _pair("error")
    # @hasSection / @sectionMissing are closed by @endif
    table.append(_opener("hasSection", family="if"))
    table.append(_opener("sectionMissing", family="if"))

    # Switch
    table += _pair("switch", indent_middles=True)
    table.append(_middle("case", "switch"))
    table.append(_middle("default", "switch", accepts_args=False))

    # Loops
    table += _pair("foreach")
    table += _pair("forelse")
    # bare @empty separates the forelse body from its fallback; @empty($x) opens a block
    table.append(
        DirectiveDescriptor(
            name="empty",
            pairing=Pairing.MIDDLE,
            middle_of=frozenset({"forelse"}),
            args_family="empty",
        )
    )
    table.append(_closer("endempty", "empty"))
    table += _pair("for")
    table += _pair("while")
    table.append(
        _standalone("break", allows_inline_condition=True, bare_middle_of="switch")
    )
    table.append(_standalone("continue", allows_inline_condition=True))

    # Template inheritance
    table.append(_opener("section", inline_arity=2))
    table.append(_closer("endsection", "section"))
    table.append(_closer("show", "section", CloseKind.SHOW))
    table.append(_closer("overwrite", "section", CloseKind.OVERWRITE))
    table.append(_closer("stop", "section", CloseKind.STOP))
    table.append(_closer("append", "section", CloseKind.APPEND))
    table += [
        _standalone("extends"),
        _standalone("extendsFirst"),
        _standalone("yield"),
        _standalone("parent", accepts_args=False),
        _standalone("include"),
        _standalone("includeIf"),
        _standalone("includeWhen"),
        _standalone("includeUnless"),
        _standalone("includeFirst"),
        _standalone("includeIsolated"),
        _standalone("each"),
    ]

    # Stacks
    table += _pair("push")
    table += _pair("prepend")
    table += _pair("pushOnce", "endPushOnce")
    table += _pair("prependOnce", "endPrependOnce")
    table += _pair("pushIf", "endPushIf")
    table += _pair("once", accepts_args=False)
    table.append(_standalone("stack"))

    # Components (directive form), fragments, Livewire blocks
    table += _pair("component")
    table += _pair("componentFirst", "endComponentFirst")
    table.append(_opener("slot", inline_arity=2))
    table.append(_closer("endslot", "slot"))
    table += _pair("fragment")
    table += _pair("teleport")
    table += _pair("persist")
    table += _pair("script", accepts_args=False)
    table += _pair("assets", accepts_args=False)

    # Opaque bodies: @php(...) with arguments is an inline statement
    table.append(_opener("php", inline_arity=1, opaque_body=True))
    table.append(_closer("endphp", "php"))
    table.append(_opener("verbatim", accepts_args=False, opaque_body=True))
    table.append(_closer("endverbatim", "verbatim"))

    # Standalone helpers
    table += [
        _standalone("csrf", accepts_args=False),
        _standalone("method"),
        _standalone("json"),
        _standalone("js"),
        _standalone("class"),
        _standalone("style"),
        _standalone("checked"),
        _standalone("selected"),
        _standalone("disabled"),
        _standalone("readonly"),
        _standalone("required"),
        _standalone("props"),
        _standalone("aware"),
        _standalone("inject"),
        _standalone("use"),
        _standalone("lang"),
        _standalone("choice"),
        _standalone("dump"),
        _standalone("dd"),
        _standalone("unset"),
        _standalone("vite"),
        _standalone("viteReactRefresh", accepts_args=False),
        _standalone("livewire"),
        _standalone("livewireStyles", accepts_args=False),
        _standalone("livewireScripts", accepts_args=False),
        _standalone("livewireScriptConfig", accepts_args=False),
        _standalone("entangle"),
        _standalone("this"),
    ]
    return tuple(table)
