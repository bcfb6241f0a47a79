"""
Filter conditions attached to subscriptions.

A subscription's table filter is stored as the canonical string form of a
condition. This module provides the immutable condition types, a parser for
the canonical syntax and the ``FilterParser`` seam the record codec uses, so
a different condition language can be plugged in.

Supported syntax:
- alwaysTrue(), alwaysFalse()
- not(c), and(c, ...), or(c, ...)
- intrinsic("name")=<literal>
- intrinsic("name":<literal>, ...)   (matches any of the listed values)

Literals are JSON strings, numbers, true, false or null. Whitespace between
tokens is ignored. Evaluating conditions against events is left to the
dispatch layer.
"""

from __future__ import annotations

import json
import re
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from subregistry.errors import FilterParseError

FilterParser = Callable[[str], "Condition"]

_IDENTIFIER = re.compile(r"[A-Za-z]+")
_NUMBER = re.compile(r"-?(?:0|[1-9][0-9]*)(?:\.[0-9]+)?(?:[eE][+-]?[0-9]+)?")
_KEYWORDS: dict[str, Any] = {"true": True, "false": False, "null": None}


def _literal(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False)


class Condition(ABC):
    """Base class for filter conditions.

    ``str()`` returns the canonical form accepted by ``parse_condition``.
    """

    @abstractmethod
    def __str__(self) -> str:
        pass


@dataclass(frozen=True)
class ConstantCondition(Condition):
    """alwaysTrue() / alwaysFalse()."""

    value: bool

    def __str__(self) -> str:
        return "alwaysTrue()" if self.value else "alwaysFalse()"


@dataclass(frozen=True)
class NotCondition(Condition):
    condition: Condition

    def __str__(self) -> str:
        return f"not({self.condition})"


@dataclass(frozen=True)
class AndCondition(Condition):
    conditions: tuple[Condition, ...]

    def __str__(self) -> str:
        return "and(" + ",".join(str(c) for c in self.conditions) + ")"


@dataclass(frozen=True)
class OrCondition(Condition):
    conditions: tuple[Condition, ...]

    def __str__(self) -> str:
        return "or(" + ",".join(str(c) for c in self.conditions) + ")"


@dataclass(frozen=True, eq=False)
class IntrinsicCondition(Condition):
    """Matches when the named event intrinsic equals one of ``values``.

    Values compare by their JSON literal, so ``1``, ``1.0`` and ``true`` are
    distinct even though Python treats them as equal.
    """

    name: str
    values: tuple[Any, ...]

    def __post_init__(self) -> None:
        if not self.values:
            raise ValueError("intrinsic condition requires at least one value")

    def __str__(self) -> str:
        if len(self.values) == 1:
            return f"intrinsic({_literal(self.name)})={_literal(self.values[0])}"
        values = ",".join(_literal(v) for v in self.values)
        return f"intrinsic({_literal(self.name)}:{values})"

    def _key(self) -> tuple[str, tuple[str, ...]]:
        return self.name, tuple(_literal(v) for v in self.values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, IntrinsicCondition):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())


def always_true() -> Condition:
    return ConstantCondition(True)


def always_false() -> Condition:
    return ConstantCondition(False)


def intrinsic(name: str, *values: Any) -> Condition:
    return IntrinsicCondition(name, tuple(values))


class _Parser:
    """Recursive-descent parser over the canonical condition syntax."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0

    def error(self, message: str) -> FilterParseError:
        return FilterParseError(message, text=self.text, position=self.pos)

    def skip_whitespace(self) -> None:
        while self.pos < len(self.text) and self.text[self.pos].isspace():
            self.pos += 1

    def peek(self) -> str:
        self.skip_whitespace()
        return self.text[self.pos] if self.pos < len(self.text) else ""

    def expect(self, char: str) -> None:
        if self.peek() != char:
            raise self.error(f"Expected {char!r}")
        self.pos += 1

    def parse(self) -> Condition:
        condition = self.condition()
        if self.peek():
            raise self.error("Unexpected trailing input")
        return condition

    def condition(self) -> Condition:
        self.skip_whitespace()
        match = _IDENTIFIER.match(self.text, self.pos)
        if match is None:
            raise self.error("Expected a condition")
        name = match.group()
        self.pos = match.end()
        self.expect("(")

        if name in ("alwaysTrue", "alwaysFalse"):
            self.expect(")")
            return ConstantCondition(name == "alwaysTrue")
        if name == "not":
            inner = self.condition()
            self.expect(")")
            return NotCondition(inner)
        if name in ("and", "or"):
            conditions = self.condition_list()
            return AndCondition(conditions) if name == "and" else OrCondition(conditions)
        if name == "intrinsic":
            return self.intrinsic()

        self.pos = match.start()
        raise self.error(f"Unknown condition {name!r}")

    def condition_list(self) -> tuple[Condition, ...]:
        conditions: list[Condition] = []
        if self.peek() == ")":
            self.pos += 1
            return ()
        while True:
            conditions.append(self.condition())
            if self.peek() == ",":
                self.pos += 1
                continue
            self.expect(")")
            return tuple(conditions)

    def intrinsic(self) -> Condition:
        if self.peek() != '"':
            raise self.error("Expected intrinsic name")
        name = self.literal()
        if self.peek() == ":":
            self.pos += 1
            values = [self.literal()]
            while self.peek() == ",":
                self.pos += 1
                values.append(self.literal())
            self.expect(")")
            return IntrinsicCondition(name, tuple(values))
        self.expect(")")
        self.expect("=")
        return IntrinsicCondition(name, (self.literal(),))

    def literal(self) -> Any:
        char = self.peek()
        start = self.pos
        if char == '"':
            end = start + 1
            while end < len(self.text) and self.text[end] != '"':
                end += 2 if self.text[end] == "\\" else 1
            if end >= len(self.text):
                raise self.error("Unterminated string")
            self.pos = end + 1
        else:
            match = _NUMBER.match(self.text, start) or _IDENTIFIER.match(self.text, start)
            if match is None or (
                match.re is _IDENTIFIER and match.group() not in _KEYWORDS
            ):
                raise self.error("Expected a literal")
            self.pos = match.end()
        try:
            return json.loads(self.text[start : self.pos])
        except json.JSONDecodeError as e:
            self.pos = start
            raise self.error(f"Invalid literal ({e.msg})") from e


def parse_condition(text: str) -> Condition:
    """Parse the canonical string form of a condition.

    Args:
        text: Condition string, e.g. ``intrinsic("type")="foo"``

    Returns:
        The parsed condition

    Raises:
        FilterParseError: If the text is not a valid condition
    """
    if not isinstance(text, str):
        raise FilterParseError("Condition must be a string", text=repr(text), position=0)
    return _Parser(text).parse()
