"""Format-template compilation.

A template such as ``{timestamp} {level} [{logger}] {message}`` is compiled
once into an immutable token tuple. ``{{`` and ``}}`` emit literal braces;
unknown placeholder names look up extra fields by name.
"""

from __future__ import annotations

from dataclasses import dataclass

from .models import Role

DEFAULT_TEMPLATE = "{timestamp} {level} [{logger}] {message}"

TEMPLATE_ROLES: dict[str, Role] = {
    "level": Role.LEVEL,
    "timestamp": Role.TIMESTAMP,
    "logger": Role.LOGGER,
    "message": Role.MESSAGE,
}


@dataclass(frozen=True, slots=True)
class LiteralToken:
    text: str


@dataclass(frozen=True, slots=True)
class CanonicalToken:
    role: Role


@dataclass(frozen=True, slots=True)
class CustomToken:
    name: str


FormatToken = LiteralToken | CanonicalToken | CustomToken


def compile_template(template: str) -> tuple[FormatToken, ...]:
    """Split a template into literal and placeholder tokens."""
    tokens: list[FormatToken] = []
    literal: list[str] = []
    i = 0
    n = len(template)

    def flush() -> None:
        if literal:
            tokens.append(LiteralToken("".join(literal)))
            literal.clear()

    while i < n:
        ch = template[i]
        if ch == "{":
            if template.startswith("{{", i):
                literal.append("{")
                i += 2
                continue
            end = template.find("}", i + 1)
            if end == -1:
                end = n  # unterminated placeholder runs to the end
            name = template[i + 1 : end]
            flush()
            role = TEMPLATE_ROLES.get(name)
            tokens.append(CanonicalToken(role) if role is not None else CustomToken(name))
            i = end + 1
            continue
        if ch == "}" and template.startswith("}}", i):
            literal.append("}")
            i += 2
            continue
        literal.append(ch)
        i += 1

    flush()
    return tuple(tokens)


def custom_field_names(tokens: tuple[FormatToken, ...]) -> frozenset[str]:
    """Names of extra fields referenced positionally by the template."""
    return frozenset(t.name for t in tokens if isinstance(t, CustomToken))
