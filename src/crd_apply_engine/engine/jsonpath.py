"""
Relaxed JSONPath evaluation against remote documents.

Supports the wildcard-free subset of kubectl's relaxed JSONPath syntax:

    status.phase
    .status.conditions[0].type
    {.status.conditions[-1].status}
    metadata.labels['app.kubernetes.io/name']
    metadata.labels.app\\.kubernetes\\.io/name

Expressions are parsed once, before any network I/O, so a malformed
expression is reported as a configuration error instead of at poll time.
Evaluation never raises: a missing key, an out-of-range index or a type
mismatch all resolve to NOT_FOUND.
"""

import json
import re
from dataclasses import dataclass

from crd_apply_engine.errors import MalformedWaitSpecificationError
from crd_apply_engine.models.types import JsonValue

_INDEX_PATTERN = re.compile(r"-?\d+")

# Characters that end a bare field name
_NAME_TERMINATORS = frozenset(".[")

# Characters that only appear in unsupported JSONPath constructs
_UNSUPPORTED = {
    "*": "wildcards are not supported",
    "?": "filter expressions are not supported",
    ",": "union expressions are not supported",
    ":": "slice expressions are not supported",
    "(": "script expressions are not supported",
    ")": "script expressions are not supported",
    "@": "current-node references are not supported",
    "{": "multiple template expressions are not supported",
    "}": "multiple template expressions are not supported",
    "]": "unbalanced ']'",
    "'": "quoted field names must be written in brackets",
    '"': "quoted field names must be written in brackets",
}


@dataclass(frozen=True)
class FieldSegment:
    """Select a key of an object."""

    name: str


@dataclass(frozen=True)
class IndexSegment:
    """Select an element of an array; negative positions count from the end."""

    position: int


type PathSegment = FieldSegment | IndexSegment


@dataclass(frozen=True)
class FieldPath:
    """A parsed path expression."""

    expression: str
    segments: tuple[PathSegment, ...]

    def __str__(self) -> str:
        return self.expression


@dataclass(frozen=True)
class Found:
    """The path resolved to a value, rendered as kubectl would print it."""

    value: str


@dataclass(frozen=True)
class NotFound:
    """The path did not resolve to a value."""


NOT_FOUND = NotFound()

type Resolution = Found | NotFound


class _Missing:
    pass


_MISSING = _Missing()


def parse_path(expression: str) -> FieldPath:
    """
    Parse a relaxed JSONPath expression.

    Args:
        expression: Path such as 'status.conditions[0].type' or '{.status.phase}'

    Returns:
        Parsed path

    Raises:
        MalformedWaitSpecificationError: If the expression is not supported
    """
    text = expression.strip()
    if text.startswith("{"):
        if not text.endswith("}"):
            raise MalformedWaitSpecificationError(expression, "unbalanced '{'")
        text = text[1:-1].strip()
    elif text.endswith("}"):
        raise MalformedWaitSpecificationError(expression, "unbalanced '}'")

    if text.startswith("$"):
        text = text[1:]
    if text.startswith(".."):
        raise MalformedWaitSpecificationError(
            expression, "recursive descent is not supported"
        )
    if text.startswith("."):
        text = text[1:]
    if not text:
        raise MalformedWaitSpecificationError(expression, "no field selected")

    return FieldPath(expression=expression, segments=_scan(expression, text))


def _scan(expression: str, text: str) -> tuple[PathSegment, ...]:
    segments: list[PathSegment] = []
    # "start" | "field" (after '.') | "any" (after a segment)
    expect = "start"
    i = 0
    while i < len(text):
        char = text[i]

        if char == ".":
            if expect != "any":
                raise MalformedWaitSpecificationError(
                    expression,
                    "recursive descent is not supported"
                    if expect == "field"
                    else "empty field name",
                )
            expect = "field"
            i += 1
            continue

        if char == "[":
            if expect == "field":
                raise MalformedWaitSpecificationError(
                    expression, "'[' must follow a field name, not '.'"
                )
            segment, i = _scan_subscript(expression, text, i)
            segments.append(segment)
            expect = "any"
            continue

        if char in _UNSUPPORTED:
            raise MalformedWaitSpecificationError(expression, _UNSUPPORTED[char])
        if char.isspace():
            raise MalformedWaitSpecificationError(
                expression, "whitespace is not allowed in field names"
            )
        if expect == "any":
            raise MalformedWaitSpecificationError(
                expression, f"expected '.' or '[' at position {i}"
            )

        name, i = _scan_name(expression, text, i)
        segments.append(FieldSegment(name))
        expect = "any"

    if expect == "field":
        raise MalformedWaitSpecificationError(expression, "trailing '.'")
    return tuple(segments)


def _scan_name(expression: str, text: str, start: int) -> tuple[str, int]:
    chars: list[str] = []
    i = start
    while i < len(text) and text[i] not in _NAME_TERMINATORS:
        char = text[i]
        if char == "\\":
            if i + 1 >= len(text):
                raise MalformedWaitSpecificationError(expression, "dangling escape")
            chars.append(text[i + 1])
            i += 2
            continue
        if char in _UNSUPPORTED:
            raise MalformedWaitSpecificationError(expression, _UNSUPPORTED[char])
        if char.isspace():
            raise MalformedWaitSpecificationError(
                expression, "whitespace is not allowed in field names"
            )
        chars.append(char)
        i += 1
    return "".join(chars), i


def _scan_subscript(expression: str, text: str, start: int) -> tuple[PathSegment, int]:
    i = start + 1
    if i < len(text) and text[i] in "'\"":
        quote = text[i]
        end = text.find(quote, i + 1)
        if end == -1:
            raise MalformedWaitSpecificationError(expression, "unterminated quote")
        if end + 1 >= len(text) or text[end + 1] != "]":
            raise MalformedWaitSpecificationError(
                expression, "expected ']' after quoted field name"
            )
        name = text[i + 1 : end]
        if not name:
            raise MalformedWaitSpecificationError(expression, "empty field name")
        return FieldSegment(name), end + 2

    end = text.find("]", i)
    if end == -1:
        raise MalformedWaitSpecificationError(expression, "unbalanced '['")
    content = text[i:end].strip()
    if _INDEX_PATTERN.fullmatch(content):
        return IndexSegment(int(content)), end + 1
    if not content:
        raise MalformedWaitSpecificationError(expression, "empty subscript")
    for char in content:
        if char in _UNSUPPORTED:
            raise MalformedWaitSpecificationError(expression, _UNSUPPORTED[char])
    raise MalformedWaitSpecificationError(
        expression, f"unsupported subscript '[{content}]'"
    )


def _resolve(document: JsonValue, segments: tuple[PathSegment, ...]) -> JsonValue | _Missing:
    node: JsonValue = document
    for segment in segments:
        match segment, node:
            case FieldSegment(name=name), dict() if name in node:
                node = node[name]
            case IndexSegment(position=position), list() if (
                -len(node) <= position < len(node)
            ):
                node = node[position]
            case _:
                return _MISSING
    return node


def render_value(value: JsonValue) -> str | None:
    """Render a JSON node the way kubectl prints JSONPath results.

    Returns None for null, which callers treat as "no value".
    """
    match value:
        case None:
            return None
        case bool():
            return "true" if value else "false"
        case int():
            return str(value)
        case float():
            if value.is_integer():
                return str(int(value))
            return repr(value)
        case str():
            return value
        case dict() | list():
            return json.dumps(value, separators=(",", ":"), sort_keys=True)
        case _:
            return None


def evaluate(document: JsonValue, path: FieldPath | str) -> Resolution:
    """
    Evaluate a path expression against a document.

    Args:
        document: Decoded JSON tree (usually the remote object)
        path: Parsed path, or an expression to parse

    Returns:
        Found with the rendered value, or NOT_FOUND

    Raises:
        MalformedWaitSpecificationError: Only when given an unparsable string
    """
    if isinstance(path, str):
        path = parse_path(path)

    node = _resolve(document, path.segments)
    if isinstance(node, _Missing):
        return NOT_FOUND

    rendered = render_value(node)
    if rendered is None:
        return NOT_FOUND
    return Found(rendered)


def condition_met(
    document: JsonValue, path: FieldPath | str, expected_value: str | None = None
) -> bool:
    """Check a wait condition against a document.

    Without an expected value, any non-null, non-empty value satisfies it.
    """
    match evaluate(document, path):
        case Found(value=value):
            if expected_value is None:
                return value != ""
            return value == expected_value
        case _:
            return False
