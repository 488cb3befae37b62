# parsers/splitter.py
"""
Delimiter-aware splitting of CraftTweaker call arguments.

A parameter string such as

    <item:minecraft:stew>, [<item:a>, <item:b> | <item:c>], (<item:bowl>).mutable(), 1.0, 200

is split into its top-level fields. Reference tokens (`<item:...>`,
`<tag:...>`, `<chemical:...>`) are opaque, so nothing inside them affects
splitting. Parentheses, square brackets and braces nest; separators inside
double-quoted strings are ignored.
"""

OPENERS = "([{"
CLOSERS = ")]}"


def split_top_level(text: str, separator: str = ",") -> list[str]:
    """
    Split `text` on `separator` wherever it sits at nesting depth 0 and
    outside a reference token or string literal.

    Fields are trimmed. A trailing empty field (e.g. after a trailing comma)
    is dropped; unmatched closers never push the depth below zero.
    """
    fields: list[str] = []
    current: list[str] = []
    depth = 0
    in_reference = False
    in_string = False
    escaped = False

    for char in text or "":
        if in_string:
            current.append(char)
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue

        if char == "<":
            in_reference = True
        elif char == ">":
            in_reference = False
        elif in_reference:
            pass
        elif char == '"':
            in_string = True
        elif char in OPENERS:
            depth += 1
        elif char in CLOSERS:
            depth = max(depth - 1, 0)
        elif char == separator and depth == 0:
            fields.append("".join(current).strip())
            current = []
            continue

        current.append(char)

    tail = "".join(current).strip()
    if tail:
        fields.append(tail)
    return fields


def split_parameters(text: str) -> list[str]:
    """Top-level comma-separated fields of a call's argument list."""
    return split_top_level(text, ",")


def split_alternatives(text: str) -> list[str]:
    """Members of an `a | b | c` alternation chain (a single member if none)."""
    return split_top_level(text, "|")
