"""Builds pattern ASTs from pattern text.

The parser is a single left-to-right scan over the pattern. Nested constructs
are tracked on an explicit stack of :class:`ParseContext` frames; each frame
collects the nodes found inside it and is finalized into a node of its own when
its closing token is seen.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

from ..errors import SyntaxFault
from .nodes import (
    PatternNode,
    LiteralNode,
    AnyNode,
    AlphaNode,
    NumericNode,
    SymbolNode,
    BasicSymbolNode,
    SampleSetNode,
    RangeNode,
    AsciiRangeNode,
    GroupNode,
    RootNode,
)

logger = logging.getLogger(__name__)

_DECIMAL = re.compile(r"\s*[0-9]+\s*")


@dataclass
class Position:
    """Represents a position in pattern text.

    Stores only the character index and input string. Line and column are
    calculated lazily when accessed via the line and column properties.
    """
    origin: str
    index: int  # Character position (0-indexed)
    input_str: str = field(default="", repr=False, compare=False)

    def _calculate_line_col(self) -> tuple[int, int]:
        """Calculate (line, column) tuple from the character index, both 1-indexed."""
        if not self.input_str or self.index < 0 or self.index > len(self.input_str):
            return (1, self.index + 1 if self.index >= 0 else 1)
        text_before = self.input_str[:self.index]
        line_number = text_before.count('\n') + 1
        last_newline = text_before.rfind('\n')
        column_number = self.index - last_newline  # 1-indexed
        return (line_number, column_number)

    @property
    def line(self) -> int:
        return self._calculate_line_col()[0]

    @property
    def column(self) -> int:
        return self._calculate_line_col()[1]

    def __str__(self) -> str:
        return f"{self.origin}:{self.line}:{self.column}"


class FrameKind(Enum):
    """Which node a parse frame turns into when it is closed."""
    ROOT = "root"
    SEQUENCE = "sequence"
    CHOICE = "choice"
    RANGE = "range"


@dataclass
class ParseContext:
    """A frame of the parser's nesting stack.

    Attributes:
        kind: The node kind to build on closure.
        end_token: The character that closes this frame, or None when the frame
            is closed by the parser itself (the root and range frames).
        start: Index of the opening token.
        children: Nodes accumulated inside the frame so far.
        last_repeated: The most recent child that already took a ``<n>`` modifier.
    """
    kind: FrameKind
    end_token: Optional[str]
    start: int
    children: list[PatternNode] = field(default_factory=list)
    last_repeated: Optional[PatternNode] = None

    def finalize(self, position: Optional[Position] = None) -> PatternNode:
        """Turn the frame into its node."""
        if self.kind is FrameKind.ROOT:
            return RootNode(children=self.children, position=position)
        if self.kind is FrameKind.SEQUENCE:
            return GroupNode(children=self.children, sequential=True, position=position)
        if self.kind is FrameKind.CHOICE:
            return GroupNode(children=self.children, sequential=False, position=position)
        if self.kind is FrameKind.RANGE:
            # A single segment stands for itself; several are concatenated in
            # order, so ":1-5:a-c;" yields a digit followed by a letter.
            if len(self.children) == 1:
                return self.children[0]
            return GroupNode(children=self.children, sequential=True, position=position)
        raise ValueError(f"Unknown frame kind: {self.kind}")  # pragma: no cover


class PatternParser:
    """Recursive-descent parser for the pattern language.

    Args:
        origin: Name used in node positions (e.g. ``"<repl>"``).
        strict: Raise a :class:`SyntaxFault` on characters that have no
            meaning in the pattern language instead of ignoring them.
            Whitespace is accepted either way.
    """

    #: Most groups that may be open at once. Deeper patterns are rejected
    #: because lowering and evaluation recurse once per level.
    max_depth = 32

    def __init__(self, origin: str = "<pattern>", strict: bool = False):
        self.origin = origin
        self.strict = strict
        self.input = ""
        self.current = 0
        self.context_stack: list[ParseContext] = []
        self._actions: dict[str, Callable[[int], object]] = {
            ".": lambda head: self._push(AnyNode(position=self._position(head))),
            "a": lambda head: self._push(AlphaNode(position=self._position(head))),
            "A": lambda head: self._push(AlphaNode(uppercase=True, position=self._position(head))),
            "#": lambda head: self._push(NumericNode(position=self._position(head))),
            "@": lambda head: self._push(SymbolNode(position=self._position(head))),
            "$": lambda head: self._push(BasicSymbolNode(position=self._position(head))),
            '"': self._parse_literal,
            "[": self._parse_sample_set,
            "<": self._parse_repeat,
            ":": self._parse_range,
            "(": lambda head: self._push_context(FrameKind.SEQUENCE, ")", head),
            "{": lambda head: self._push_context(FrameKind.CHOICE, "}", head),
        }

    def parse(self, text: str) -> RootNode:
        """Parse pattern text into a :class:`RootNode`.

        Raises:
            SyntaxFault: If the pattern is malformed.
        """
        self.input = text
        self.current = 0
        self.context_stack = [ParseContext(FrameKind.ROOT, None, 0)]

        while self.current < len(self.input):
            self._parse_token()

        if len(self.context_stack) > 1:
            raise SyntaxFault(
                f"Expected '{self.current_context.end_token}' but got EOF", self.current
            )

        return self.context_stack[0].finalize(self._position(0))

    @property
    def current_context(self) -> ParseContext:
        return self.context_stack[-1]

    # --- Token handlers ---

    def _parse_token(self):
        head = self.current
        token = self._advance()
        if token == self.current_context.end_token:
            self._close_context(head)
            return
        action = self._actions.get(token)
        if action is not None:
            action(head)
        elif self.strict and not token.isspace():
            raise SyntaxFault(f"Unexpected character '{token}'", head)
        else:
            logger.debug("Ignoring %r at index %d", token, head)

    def _parse_literal(self, head: int):
        literal, _ = self._consume_until('"')
        self._push(LiteralNode(literal, position=self._position(head)))

    def _parse_sample_set(self, head: int):
        sample_set, _ = self._consume_until("]")
        if not sample_set:
            raise SyntaxFault("Sample set must contain at least one character", head)
        self._push(SampleSetNode(sample_set, position=self._position(head)))

    def _parse_repeat(self, head: int):
        text, _ = self._consume_until(">")
        if not _DECIMAL.fullmatch(text):
            raise SyntaxFault("Repeat modifier must be a number", head)
        count = int(text)
        if count < 1:
            raise SyntaxFault("Repeat modifier must be at least 1", head)

        context = self.current_context
        if not context.children:
            raise SyntaxFault("Repeat modifier has nothing to repeat", head)
        node = context.children[-1]
        if node is context.last_repeated:
            raise SyntaxFault("Repeat modifier already applied to this element", head)
        node.repeat_count = count
        context.last_repeated = node

    def _parse_range(self, head: int):
        self._push_context(FrameKind.RANGE, None, head)
        terminator = ":"
        while terminator != ";":
            segment_start = self.current
            segment, terminator = self._consume_until(":", ";")
            self._push(self._range_segment(segment, segment_start))
        self._close_context(head)

    def _range_segment(self, text: str, index: int) -> PatternNode:
        # A three character segment splits on its middle dash, which lets '-'
        # itself be a bound (":--/;").
        if len(text) == 3 and text[1] == "-":
            start, end = text[0], text[2]
        else:
            start, sep, end = text.partition("-")
            if not sep:
                raise SyntaxFault(f"Range '{text}' must have the form start-end", index)

        position = self._position(index)
        if _DECIMAL.fullmatch(start):
            if not _DECIMAL.fullmatch(end):
                raise SyntaxFault(f"Range end '{end}' must be a number", index)
            start_num, end_num = int(start), int(end)
            if end_num < start_num:
                raise SyntaxFault(f"Range {start_num}-{end_num} is reversed", index)
            return RangeNode(start_num, end_num, position=position)

        if len(start) != 1 or len(end) != 1:
            raise SyntaxFault(
                f"Character range '{text}' must have single character bounds", index
            )
        if ord(end) < ord(start):
            raise SyntaxFault(f"Character range '{start}-{end}' is reversed", index)
        return AsciiRangeNode(start, end, position=position)

    # --- Stack handling ---

    def _push(self, node: PatternNode) -> PatternNode:
        self.current_context.children.append(node)
        return node

    def _push_context(self, kind: FrameKind, end_token: Optional[str], head: int) -> ParseContext:
        if kind is not FrameKind.RANGE and self._group_depth() >= self.max_depth:
            raise SyntaxFault("Groups nested too deeply", head)
        context = ParseContext(kind, end_token, head)
        self.context_stack.append(context)
        logger.debug("Opened %s frame at index %d", kind.value, head)
        return context

    def _group_depth(self) -> int:
        return sum(1 for context in self.context_stack
                   if context.kind in (FrameKind.SEQUENCE, FrameKind.CHOICE))

    def _close_context(self, head: int):
        context = self.context_stack.pop()
        if context.kind is FrameKind.CHOICE and not context.children:
            raise SyntaxFault("Choice group must contain at least one element", head)
        logger.debug("Closed %s frame opened at index %d", context.kind.value, context.start)
        self._push(context.finalize(self._position(context.start)))

    # --- Scanning ---

    def _consume_until(self, *end_tokens: str) -> tuple[str, str]:
        """Scan raw text up to one of ``end_tokens``.

        A backslash takes the following character verbatim, even when it is a
        terminator.

        Returns:
            The unescaped text and the terminator that ended it.
        """
        output = []
        while True:
            token = self._advance()
            if token is None:
                raise SyntaxFault(f"Expected {self._describe(end_tokens)} but got EOF", len(self.input))
            if token in end_tokens:
                return "".join(output), token
            if token == "\\":
                escaped = self._advance()
                if escaped is None:
                    raise SyntaxFault(
                        f"Expected {self._describe(end_tokens)} but got EOF", len(self.input)
                    )
                output.append(escaped)
                continue
            output.append(token)

    @staticmethod
    def _describe(end_tokens: tuple[str, ...]) -> str:
        if len(end_tokens) > 1:
            return "one of (" + ", ".join(f"'{t}'" for t in end_tokens) + ")"
        return f"'{end_tokens[0]}'"

    def _advance(self) -> Optional[str]:
        if self.current >= len(self.input):
            return None
        token = self.input[self.current]
        self.current += 1
        return token

    def _position(self, index: int) -> Position:
        return Position(origin=self.origin, index=index, input_str=self.input)
