"""Immutable syntax-tree nodes produced by :mod:`funcplot.expression_parser`.

Every node is a frozen dataclass, so a compiled tree can be shared freely
between threads and evaluated any number of times without reset.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Union


@dataclass(frozen=True)
class Number:
    """Numeric literal."""

    value: float


@dataclass(frozen=True)
class Variable:
    """Reference to a bound variable (``x`` or ``y``)."""

    name: str


@dataclass(frozen=True)
class Constant:
    """Named constant such as ``pi`` or ``phi``."""

    name: str


@dataclass(frozen=True)
class Negate:
    """Unary minus."""

    operand: "Node"


@dataclass(frozen=True)
class BinaryOp:
    """Binary arithmetic operation.

    ``implicit`` records that a ``*`` was injected by juxtaposition
    (``2x``) rather than written out; it does not change evaluation.
    """

    op: str
    left: "Node"
    right: "Node"
    implicit: bool = False


@dataclass(frozen=True)
class Call:
    """Call of a named function with one or two arguments."""

    name: str
    args: tuple["Node", ...]


Node = Union[Number, Variable, Constant, Negate, BinaryOp, Call]


def iter_nodes(node: Node) -> Iterator[Node]:
    """Yield ``node`` and all of its descendants, depth first."""
    yield node
    if isinstance(node, Negate):
        yield from iter_nodes(node.operand)
    elif isinstance(node, BinaryOp):
        yield from iter_nodes(node.left)
        yield from iter_nodes(node.right)
    elif isinstance(node, Call):
        for arg in node.args:
            yield from iter_nodes(arg)


def free_variables(node: Node) -> frozenset[str]:
    """Return the variable names referenced anywhere in ``node``."""
    return frozenset(n.name for n in iter_nodes(node) if isinstance(n, Variable))


__all__ = [
    "Number",
    "Variable",
    "Constant",
    "Negate",
    "BinaryOp",
    "Call",
    "Node",
    "iter_nodes",
    "free_variables",
]
