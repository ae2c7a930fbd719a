"""Recursive-descent parser turning formula text into an immutable tree.

Grammar
-------
::

    expression := term (('+' | '-') term)*
    term       := factor (('*' | '/' | implicit) factor)*
    factor     := ('+' | '-') factor
                | atom implicit-factor
                | atom '^' factor
                | atom
    atom       := '(' expression ')' | number | variable | constant
                | function '(' expression (',' expression)? ')'

Implicit multiplication
-----------------------
After every atom the parser checks whether the next character is a letter or
an opening parenthesis. If so the following factor is multiplied in, so
``2x(x+1)sin(x)`` is read as ``2*x*(x+1)*sin(x)``. The check lives in one place,
:meth:`ExpressionParser._factor`, and applies uniformly to numbers, variables,
groups, calls and constants.

Identifiers
-----------
An identifier is a run of letters and digits starting with a letter. A run
naming a function and followed by ``(`` is a call; a run naming a constant or
variable is an atom. Any other run is split at its longest prefix that names
a constant or variable (``xsin(x)``, ``2pix``), leaving the remainder to
implicit multiplication. Runs with no such prefix are unknown identifiers.

Input is lowercased and all whitespace is removed before parsing, so error
positions refer to the normalized text.
"""

from __future__ import annotations

import logging
import string
from collections.abc import Sequence
from typing import NoReturn

from .expression_functions import CONSTANTS, FUNCTIONS
from .expression_nodes import BinaryOp, Call, Constant, Negate, Node, Number, Variable
from .plot_errors import ParseError

__all__ = ["ExpressionParser", "normalize_text", "parse"]

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

_LETTERS = frozenset(string.ascii_lowercase)
_DIGITS = frozenset(string.digits)
_NUMBER_CHARS = _DIGITS | {"."}


def normalize_text(text: str) -> str:
    """Lowercase ``text`` and strip every whitespace character."""
    return "".join(text.lower().split())


class ExpressionParser:
    """Single-use parser over one formula string.

    The cursor (``pos``) is scratch state that only exists for the duration
    of :meth:`parse`; the returned tree holds no reference to the parser.
    """

    def __init__(self, text: str, variables: Sequence[str] = ("x",)) -> None:
        self.source = text
        self.text = normalize_text(text)
        self.variables = frozenset(variables)
        self.pos = 0

    def parse(self) -> Node:
        """Parse the whole input and return the root node.

        Raises
        ------
        ParseError
            On any character outside the grammar, unknown identifiers,
            unbalanced parentheses or input left over after a complete
            expression.
        """
        self.pos = 0
        if not self.text:
            self._fail(ParseError.UNEXPECTED_END, "empty expression")
        node = self._expression()
        if self.pos < len(self.text):
            ch = self.text[self.pos]
            if ch == ")":
                self._fail(ParseError.UNMATCHED_PARENTHESIS, "unexpected ')'")
            if self._is_grammar_char(ch):
                self._fail(ParseError.TRAILING_INPUT, repr(self.text[self.pos:]))
            self._fail(ParseError.UNEXPECTED_CHARACTER, repr(ch))
        return node

    # ------------------------------------------------------------------
    # Cursor helpers
    # ------------------------------------------------------------------

    def _peek(self) -> str:
        return self.text[self.pos] if self.pos < len(self.text) else ""

    def _eat(self, ch: str) -> bool:
        if self._peek() == ch:
            self.pos += 1
            return True
        return False

    def _fail(self, reason: str, detail: str = "", position: int | None = None) -> NoReturn:
        raise ParseError(reason, self.text, self.pos if position is None else position, detail)

    def _starts_implicit(self) -> bool:
        ch = self._peek()
        return ch in _LETTERS or ch == "("

    @staticmethod
    def _is_grammar_char(ch: str) -> bool:
        return ch in _LETTERS or ch in _NUMBER_CHARS or ch in "+-*/^(),"

    # ------------------------------------------------------------------
    # Productions
    # ------------------------------------------------------------------

    def _expression(self) -> Node:
        node = self._term()
        while True:
            if self._eat("+"):
                node = BinaryOp("+", node, self._term())
            elif self._eat("-"):
                node = BinaryOp("-", node, self._term())
            else:
                return node

    def _term(self) -> Node:
        node = self._factor()
        while True:
            if self._eat("*"):
                node = BinaryOp("*", node, self._factor())
            elif self._eat("/"):
                node = BinaryOp("/", node, self._factor())
            elif self._starts_implicit():
                node = BinaryOp("*", node, self._factor(), implicit=True)
            else:
                return node

    def _factor(self) -> Node:
        if self._eat("+"):
            return self._factor()
        if self._eat("-"):
            return Negate(self._factor())

        atom = self._atom()
        if self._starts_implicit():
            return BinaryOp("*", atom, self._factor(), implicit=True)
        if self._eat("^"):
            return BinaryOp("^", atom, self._factor())
        return atom

    def _atom(self) -> Node:
        ch = self._peek()
        if ch == "":
            self._fail(ParseError.UNEXPECTED_END, "operand expected")
        if ch == "(":
            opened_at = self.pos
            self.pos += 1
            inner = self._expression()
            if not self._eat(")"):
                self._fail(ParseError.UNMATCHED_PARENTHESIS, "missing ')'", position=opened_at)
            return inner
        if ch in _NUMBER_CHARS:
            return self._number()
        if ch in _LETTERS:
            return self._identifier()
        self._fail(ParseError.UNEXPECTED_CHARACTER, repr(ch))

    def _number(self) -> Number:
        start = self.pos
        while self._peek() in _NUMBER_CHARS:
            self.pos += 1
        literal = self.text[start:self.pos]
        if literal.count(".") > 1 or literal == ".":
            self._fail(ParseError.MALFORMED_NUMBER, repr(literal), position=start)
        return Number(float(literal))

    def _identifier(self) -> Node:
        start = self.pos
        end = start
        while end < len(self.text) and (self.text[end] in _LETTERS or self.text[end] in _DIGITS):
            end += 1
        run = self.text[start:end]

        if run in FUNCTIONS and end < len(self.text) and self.text[end] == "(":
            self.pos = end
            return self._call(run)
        if run in self.variables or run in CONSTANTS:
            self.pos = end
            return self._named_atom(run)

        for cut in range(len(run) - 1, 0, -1):
            prefix = run[:cut]
            if prefix in self.variables or prefix in CONSTANTS:
                self.pos = start + cut
                return self._named_atom(prefix)

        if run in FUNCTIONS:
            self._fail(ParseError.UNKNOWN_IDENTIFIER, f"function {run!r} requires '('", position=start)
        self._fail(ParseError.UNKNOWN_IDENTIFIER, repr(run), position=start)

    def _named_atom(self, name: str) -> Node:
        if name in self.variables:
            return Variable(name)
        return Constant(name)

    def _call(self, name: str) -> Call:
        opened_at = self.pos
        self.pos += 1  # '('
        args = [self._expression()]
        while self._eat(","):
            args.append(self._expression())
        if not self._eat(")"):
            self._fail(ParseError.UNMATCHED_PARENTHESIS, f"missing ')' for {name}()", position=opened_at)
        spec = FUNCTIONS[name]
        if len(args) != spec.arity:
            self._fail(
                ParseError.WRONG_ARITY,
                f"{name}() takes {spec.arity} argument(s), got {len(args)}",
                position=opened_at,
            )
        return Call(name, tuple(args))


def parse(text: str, variables: Sequence[str] = ("x",)) -> Node:
    """Parse ``text`` into a syntax tree; see :class:`ExpressionParser`."""
    node = ExpressionParser(text, variables).parse()
    logger.debug("parsed %r -> %r", text, node)
    return node
