"""Annotation filters written in Kubernetes label-selector syntax.

An expression is a comma separated list of requirements that must all hold::

    environment=prod,tier in (web, edge),!legacy

Supported forms are ``key``, ``!key``, ``key=value``, ``key==value``, ``key!=value``,
``key in (a,b)``, ``key notin (a,b)``, ``key>N`` and ``key<N``. The empty expression
compiles to a selector that matches everything.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Final

from .errors import FilterSyntaxError

if TYPE_CHECKING:
    from collections.abc import Mapping

_NAME_MAX_LENGTH: Final[int] = 63
_PREFIX_MAX_LENGTH: Final[int] = 253
_NAME = re.compile(r"[A-Za-z0-9]([-A-Za-z0-9_.]*[A-Za-z0-9])?")
_DNS_SUBDOMAIN = re.compile(r"[a-z0-9]([-a-z0-9]*[a-z0-9])?(\.[a-z0-9]([-a-z0-9]*[a-z0-9])?)*")
_INTEGER = re.compile(r"[+-]?\d+")
_SPECIAL_CHARACTERS: Final[str] = "!=(),<>"


class Operator(StrEnum):
    EQUALS = "="
    DOUBLE_EQUALS = "=="
    NOT_EQUALS = "!="
    IN = "in"
    NOT_IN = "notin"
    EXISTS = "exists"
    DOES_NOT_EXIST = "!"
    GREATER_THAN = "gt"
    LESS_THAN = "lt"


@dataclass(frozen=True, slots=True)
class Requirement:
    key: str
    operator: Operator
    values: tuple[str, ...] = ()

    def matches(self, labels: Mapping[str, str]) -> bool:
        match self.operator:
            case Operator.IN | Operator.EQUALS | Operator.DOUBLE_EQUALS:
                return self.key in labels and labels[self.key] in self.values
            case Operator.NOT_IN | Operator.NOT_EQUALS:
                return self.key not in labels or labels[self.key] not in self.values
            case Operator.EXISTS:
                return self.key in labels
            case Operator.DOES_NOT_EXIST:
                return self.key not in labels
            case Operator.GREATER_THAN | Operator.LESS_THAN:
                value = labels.get(self.key)
                if value is None or _INTEGER.fullmatch(value) is None:
                    return False
                if self.operator is Operator.GREATER_THAN:
                    return int(value) > int(self.values[0])
                return int(value) < int(self.values[0])

    def __str__(self) -> str:
        match self.operator:
            case Operator.EXISTS:
                return self.key
            case Operator.DOES_NOT_EXIST:
                return f"!{self.key}"
            case Operator.IN | Operator.NOT_IN:
                return f"{self.key} {self.operator} ({','.join(self.values)})"
            case Operator.GREATER_THAN:
                return f"{self.key}>{self.values[0]}"
            case Operator.LESS_THAN:
                return f"{self.key}<{self.values[0]}"
            case _:
                return f"{self.key}{self.operator}{self.values[0]}"


@dataclass(frozen=True, slots=True)
class Selector:
    """A compiled filter. All requirements must match (logical AND)."""

    requirements: tuple[Requirement, ...] = ()

    @property
    def empty(self) -> bool:
        return not self.requirements

    def matches(self, labels: Mapping[str, str]) -> bool:
        return all(requirement.matches(labels) for requirement in self.requirements)

    def __str__(self) -> str:
        return ",".join(str(requirement) for requirement in self.requirements)


EVERYTHING: Final[Selector] = Selector()


class _Token(StrEnum):
    IDENTIFIER = "identifier"
    DOES_NOT_EXIST = "!"
    EQUALS = "="
    DOUBLE_EQUALS = "=="
    NOT_EQUALS = "!="
    GREATER_THAN = ">"
    LESS_THAN = "<"
    IN = "in"
    NOT_IN = "notin"
    OPEN_PAR = "("
    CLOSED_PAR = ")"
    COMMA = ","
    END = "end of string"


_OPERATOR_TOKENS: Final[dict[_Token, Operator]] = {
    _Token.EQUALS: Operator.EQUALS,
    _Token.DOUBLE_EQUALS: Operator.DOUBLE_EQUALS,
    _Token.NOT_EQUALS: Operator.NOT_EQUALS,
    _Token.IN: Operator.IN,
    _Token.NOT_IN: Operator.NOT_IN,
    _Token.GREATER_THAN: Operator.GREATER_THAN,
    _Token.LESS_THAN: Operator.LESS_THAN,
}
_SYMBOLS: Final[dict[str, _Token]] = {
    "!=": _Token.NOT_EQUALS,
    "==": _Token.DOUBLE_EQUALS,
    "!": _Token.DOES_NOT_EXIST,
    "=": _Token.EQUALS,
    ">": _Token.GREATER_THAN,
    "<": _Token.LESS_THAN,
    "(": _Token.OPEN_PAR,
    ")": _Token.CLOSED_PAR,
    ",": _Token.COMMA,
}
_KEYWORDS: Final[dict[str, _Token]] = {"in": _Token.IN, "notin": _Token.NOT_IN}


def _tokenize(expression: str) -> list[tuple[_Token, str]]:
    tokens: list[tuple[_Token, str]] = []
    position = 0
    length = len(expression)
    while position < length:
        char = expression[position]
        if char.isspace():
            position += 1
            continue
        if char in _SPECIAL_CHARACTERS:
            pair = expression[position : position + 2]
            if len(pair) == 2 and pair in _SYMBOLS:
                tokens.append((_SYMBOLS[pair], pair))
                position += 2
            else:
                tokens.append((_SYMBOLS[char], char))
                position += 1
            continue
        start = position
        while (
            position < length
            and not expression[position].isspace()
            and expression[position] not in _SPECIAL_CHARACTERS
        ):
            position += 1
        word = expression[start:position]
        tokens.append((_KEYWORDS.get(word, _Token.IDENTIFIER), word))
    tokens.append((_Token.END, ""))
    return tokens


class _Parser:
    def __init__(self, expression: str) -> None:
        self._expression = expression
        self._tokens = _tokenize(expression)
        self._position = 0

    def _error(self, reason: str) -> FilterSyntaxError:
        return FilterSyntaxError(self._expression, reason)

    def _lookahead(self) -> tuple[_Token, str]:
        return self._tokens[self._position]

    def _consume(self) -> tuple[_Token, str]:
        token = self._tokens[self._position]
        if token[0] is not _Token.END:
            self._position += 1
        return token

    def parse(self) -> Selector:
        requirements: list[Requirement] = []
        while True:
            token, literal = self._lookahead()
            if token is _Token.END:
                break
            if token not in {_Token.IDENTIFIER, _Token.DOES_NOT_EXIST}:
                raise self._error(f"found '{literal}', expected: !, identifier, or 'end of string'")

            requirements.append(self._parse_requirement())
            token, literal = self._consume()
            if token is _Token.END:
                break
            if token is not _Token.COMMA:
                raise self._error(f"found '{literal}', expected: ',' or 'end of string'")
            if self._lookahead()[0] not in {_Token.IDENTIFIER, _Token.DOES_NOT_EXIST}:
                raise self._error("found trailing ',', expected: identifier after ','")
        return Selector(tuple(requirements))

    def _parse_requirement(self) -> Requirement:
        negated = False
        if self._lookahead()[0] is _Token.DOES_NOT_EXIST:
            self._consume()
            negated = True

        token, key = self._consume()
        if token is not _Token.IDENTIFIER:
            raise self._error(f"found '{key}', expected: identifier")
        self._validate_key(key)

        if self._lookahead()[0] in {_Token.END, _Token.COMMA}:
            return Requirement(key, Operator.DOES_NOT_EXIST if negated else Operator.EXISTS)
        if negated:
            raise self._error(f"found '{self._lookahead()[1]}', expected: ',' or 'end of string'")

        token, literal = self._consume()
        operator = _OPERATOR_TOKENS.get(token)
        if operator is None:
            raise self._error(f"found '{literal}', expected: {', '.join(_OPERATOR_TOKENS)}")

        if operator in {Operator.IN, Operator.NOT_IN}:
            values = self._parse_value_set()
        else:
            values = (self._parse_exact_value(),)

        for value in values:
            self._validate_value(key, value)
        if operator in {Operator.GREATER_THAN, Operator.LESS_THAN} and (
            _INTEGER.fullmatch(values[0]) is None
        ):
            raise self._error(f"for '{operator}' operator, the value must be an integer")
        return Requirement(key, operator, values)

    def _parse_exact_value(self) -> str:
        token, literal = self._lookahead()
        if token in {_Token.END, _Token.COMMA}:
            return ""
        self._consume()
        if token is not _Token.IDENTIFIER:
            raise self._error(f"found '{literal}', expected: identifier")
        return literal

    def _parse_value_set(self) -> tuple[str, ...]:
        token, literal = self._consume()
        if token is not _Token.OPEN_PAR:
            raise self._error(f"found '{literal}', expected: '('")

        values: list[str] = []
        expect_value = True
        while True:
            token, literal = self._consume()
            if token is _Token.CLOSED_PAR:
                if expect_value:
                    values.append("")
                return tuple(sorted(set(values)))
            if token is _Token.COMMA:
                if expect_value:
                    values.append("")
                expect_value = True
                continue
            if token is _Token.IDENTIFIER and expect_value:
                values.append(literal)
                expect_value = False
                continue
            raise self._error(f"found '{literal}', expected: ',', ')' or identifier")

    def _validate_key(self, key: str) -> None:
        prefix, _, name = key.rpartition("/")
        if "/" in key and (
            not prefix
            or len(prefix) > _PREFIX_MAX_LENGTH
            or _DNS_SUBDOMAIN.fullmatch(prefix) is None
        ):
            raise self._error(f"invalid key prefix {prefix!r}: must be a DNS subdomain")
        if not name or len(name) > _NAME_MAX_LENGTH or _NAME.fullmatch(name) is None:
            raise self._error(f"invalid key {key!r}: must be a qualified name")

    def _validate_value(self, key: str, value: str) -> None:
        if value and (len(value) > _NAME_MAX_LENGTH or _NAME.fullmatch(value) is None):
            raise self._error(f"invalid value {value!r} for key {key!r}")


def parse_filter(expression: str) -> Selector:
    """Compile an annotation filter expression into a :class:`Selector`.

    Raises :class:`FilterSyntaxError` for malformed input instead of degrading to a
    selector that matches nothing.
    """

    if not expression.strip():
        return EVERYTHING
    return _Parser(expression).parse()
