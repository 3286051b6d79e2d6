"""calc() reduction for expressions whose operands share a unit."""

from __future__ import annotations

import re

from uibundle.core.services.css.syntax import transform_function_calls

_TOKEN_RE = re.compile(
    r"\s*(?:(?P<num>[+-]?(?:\d+\.?\d*|\.\d+)(?:e[+-]?\d+)?)(?P<unit>%|[a-z]+)?|(?P<op>[-+*/()]))",
    re.IGNORECASE,
)


class _Irreducible(Exception):
    pass


def reduce_calc(css: str) -> str:
    """Replace every reducible ``calc(...)`` with its computed value."""
    return transform_function_calls(css, "calc", _reduce)


def _reduce(expression: str) -> str | None:
    try:
        value, unit = _Parser(expression).parse()
    except _Irreducible:
        return None
    return _format(value) + unit


def _format(value: float) -> str:
    text = f"{round(value, 5):.5f}".rstrip("0").rstrip(".")
    return "0" if text in ("-0", "") else text


class _Parser:
    """Recursive descent over + - * / and parentheses."""

    def __init__(self, expression: str):
        self.tokens = self._tokenize(expression.replace("calc(", "("))
        self.pos = 0

    @staticmethod
    def _tokenize(expression: str) -> list[tuple[str, object]]:
        tokens: list[tuple[str, object]] = []
        pos = 0
        expression = expression.strip()
        while pos < len(expression):
            m = _TOKEN_RE.match(expression, pos)
            if not m or m.end() == pos:
                raise _Irreducible(expression)
            if m.group("num") is not None:
                # "a -b" after an operand is subtraction, not a signed number
                if m.group("num")[0] in "+-" and tokens and tokens[-1][0] in ("num", ")"):
                    tokens.append(("op", m.group("num")[0]))
                    tokens.append(("num", (float(m.group("num")[1:]), (m.group("unit") or "").lower())))
                else:
                    tokens.append(("num", (float(m.group("num")), (m.group("unit") or "").lower())))
            elif m.group("op") in "()":
                tokens.append((m.group("op"), None))
            else:
                tokens.append(("op", m.group("op")))
            pos = m.end()
            while pos < len(expression) and expression[pos].isspace():
                pos += 1
        return tokens

    def parse(self) -> tuple[float, str]:
        result = self._expr()
        if self.pos != len(self.tokens):
            raise _Irreducible("trailing tokens")
        return result

    def _peek(self) -> tuple[str, object] | None:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def _expr(self) -> tuple[float, str]:
        left = self._term()
        while (tok := self._peek()) and tok[0] == "op" and tok[1] in "+-":
            self.pos += 1
            right = self._term()
            if left[1] != right[1]:
                raise _Irreducible("mixed units")
            left = (left[0] + right[0] if tok[1] == "+" else left[0] - right[0], left[1])
        return left

    def _term(self) -> tuple[float, str]:
        left = self._factor()
        while (tok := self._peek()) and tok[0] == "op" and tok[1] in "*/":
            self.pos += 1
            right = self._factor()
            if tok[1] == "*":
                if left[1] and right[1]:
                    raise _Irreducible("unit * unit")
                left = (left[0] * right[0], left[1] or right[1])
            else:
                if right[1] or right[0] == 0:
                    raise _Irreducible("bad divisor")
                left = (left[0] / right[0], left[1])
        return left

    def _factor(self) -> tuple[float, str]:
        tok = self._peek()
        if tok is None:
            raise _Irreducible("unexpected end")
        self.pos += 1
        if tok[0] == "num":
            return tok[1]
        if tok[0] == "(":
            value = self._expr()
            if self._peek() != (")", None):
                raise _Irreducible("unbalanced")
            self.pos += 1
            return value
        if tok == ("op", "-"):
            value, unit = self._factor()
            return -value, unit
        raise _Irreducible(f"unexpected {tok}")
