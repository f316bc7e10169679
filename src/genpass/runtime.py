"""Evaluation of lowered genpass source.

Lowered source is a small expression language made of string literals,
integers, lists and calls. It is parsed with the Arpeggio grammar in
:mod:`genpass.grammar`, turned into an expression tree by
:class:`ExpressionBuilderVisitor`, and evaluated by :class:`Environment`, which
exposes only the random-source and sampling primitives.

Example:
    from genpass.runtime import run_source

    run_source('join(["id-", repeat(4, str(rand_range(0, 10)))])')
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Optional

from arpeggio import NoMatch, PTNodeVisitor, Terminal

from .errors import EvaluationFault
from .grammar import getLoweredSourceParser
from .random_source import RandomSource, default_source

logger = logging.getLogger(__name__)

_ESCAPE = re.compile(r"\\(.)", re.DOTALL)


# --- Expression tree ---

@dataclass
class Expr:
    """Base class for lowered expressions.

    Attributes:
        index: Character index of the expression in the lowered source.
    """
    index: int = field(default=0, kw_only=True, compare=False)


@dataclass
class StringExpr(Expr):
    value: str


@dataclass
class IntegerExpr(Expr):
    value: int


@dataclass
class ListExpr(Expr):
    items: list[Expr] = field(default_factory=list)


@dataclass
class CallExpr(Expr):
    name: str
    args: list[Expr] = field(default_factory=list)


class ExpressionBuilderVisitor(PTNodeVisitor):
    """
    Visits the parse tree of lowered source and builds the expression tree.
    """

    def visit_parse_tree(self, parse_tree) -> Expr:
        return self._visit_node(parse_tree)

    def _visit_method(self, node):
        return getattr(self, f"visit_{node.rule_name}", None) if node.rule_name else None

    def _visit_node(self, node):
        """Recursively visit a parse tree node.

        Terminals without a visit method (punctuation, EOF) visit to None.
        """
        visit_method = self._visit_method(node)
        if visit_method is None:
            return None
        children = [] if isinstance(node, Terminal) else self._collect_children(node)
        return visit_method(node, children)

    def _collect_children(self, node):
        # Anonymous non-terminals (Optional, ZeroOrMore, inner sequences) are
        # spliced into their parent so visit methods see a flat list.
        children = []
        for child in node:
            if not isinstance(child, Terminal) and self._visit_method(child) is None:
                children.extend(self._collect_children(child))
                continue
            child_result = self._visit_node(child)
            if child_result is not None:
                children.append(child_result)
        return children

    def visit_lowered_source(self, node, children):
        return children[0]

    def visit_expression(self, node, children):
        return children[0]

    def visit_TOK_STRING(self, node, children):
        # Strip the quotes; every backslash escapes the character after it.
        body = node.value[1:-1]
        return StringExpr(_ESCAPE.sub(r"\1", body), index=node.position)

    def visit_TOK_INTEGER(self, node, children):
        return IntegerExpr(int(node.value), index=node.position)

    def visit_TOK_ID(self, node, children):
        return node.value

    def visit_arguments(self, node, children):
        return [child for child in children if isinstance(child, Expr)]

    def visit_list_expr(self, node, children):
        items = children[0] if children else []
        return ListExpr(items, index=node.position)

    def visit_call_expr(self, node, children):
        name = children[0]
        args = children[1] if len(children) > 1 else []
        return CallExpr(name, args, index=node.position)


def parse_source(source: str) -> Expr:
    """Parse lowered source into an expression tree.

    Raises:
        EvaluationFault: If the source does not match the grammar.
    """
    parser = getLoweredSourceParser()
    try:
        parse_tree = parser.parse(source)
    except NoMatch as e:
        char_pos = e.position if isinstance(e.position, int) else None
        raise EvaluationFault(f"Malformed source: {e}", char_pos) from e
    return ExpressionBuilderVisitor().visit_parse_tree(parse_tree)


# --- Evaluation ---

class Environment:
    """The functions visible to lowered source.

    Each ``call_<name>`` method implements the function ``<name>``. Arguments
    are passed unevaluated so that ``sample`` and ``repeat`` control how often
    their operands run.
    """

    def __init__(self, rng: Optional[RandomSource] = None):
        self.rng = rng if rng is not None else default_source()

    def evaluate(self, expr: Expr) -> Any:
        if isinstance(expr, (StringExpr, IntegerExpr)):
            return expr.value
        if isinstance(expr, ListExpr):
            return [self.evaluate(item) for item in expr.items]
        if isinstance(expr, CallExpr):
            return self._call(expr)
        raise EvaluationFault(f"Cannot evaluate {type(expr).__name__}", expr.index)

    def _call(self, expr: CallExpr) -> Any:
        function = getattr(self, f"call_{expr.name}", None)
        if function is None:
            raise EvaluationFault(f"Unknown function '{expr.name}'", expr.index)
        try:
            return function(*expr.args)
        except EvaluationFault:
            raise
        except (ValueError, TypeError, IndexError, OverflowError) as e:
            raise EvaluationFault(f"{expr.name}(): {e}", expr.index) from e

    def _integer(self, expr: Expr) -> int:
        value = self.evaluate(expr)
        if not isinstance(value, int):
            raise TypeError(f"expected an integer, got {_type_name(value)}")
        return value

    def _string(self, expr: Expr) -> str:
        value = self.evaluate(expr)
        if not isinstance(value, str):
            raise TypeError(f"expected a string, got {_type_name(value)}")
        return value

    def call_rand_range(self, low, high):
        return self.rng.rand_range(self._integer(low), self._integer(high))

    def call_sample(self, population):
        # Only the chosen element of a list is evaluated.
        if isinstance(population, ListExpr):
            if not population.items:
                raise ValueError("cannot sample from an empty list")
            return self._string(self.rng.sample(population.items))
        chars = self._string(population)
        if not chars:
            raise ValueError("cannot sample from an empty string")
        return self.rng.sample(chars)

    def call_join(self, items):
        if not isinstance(items, ListExpr):
            raise TypeError("expected a list")
        return "".join(self._string(item) for item in items.items)

    def call_repeat(self, count, body):
        times = self._integer(count)
        if times < 1:
            raise ValueError(f"repeat count must be at least 1, got {times}")
        return "".join(self._string(body) for _ in range(times))

    def call_chr(self, code):
        return chr(self._integer(code))

    def call_str(self, number):
        return str(self._integer(number))


def _type_name(value: Any) -> str:
    if isinstance(value, list):
        return "a list"
    return type(value).__name__


def run_source(source: str, rng: Optional[RandomSource] = None) -> str:
    """Parse and evaluate lowered source, returning the generated string.

    Raises:
        EvaluationFault: If the source is malformed, nested beyond the
            interpreter's recursion limit, or fails while running.
    """
    logger.debug("Evaluating %s", source)
    try:
        expr = parse_source(source)
        result = Environment(rng).evaluate(expr)
    except RecursionError as e:
        raise EvaluationFault("Source nested too deeply to evaluate") from e
    if not isinstance(result, str):
        raise EvaluationFault(f"Source evaluated to {_type_name(result)}, not a string", expr.index)
    return result
