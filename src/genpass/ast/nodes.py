from __future__ import annotations
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from ..random_source import RandomSource
    from .builder import Position


LOWERCASE = "abcdefghijklmnopqrstuvwxyz"
UPPERCASE = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
SYMBOLS = "!@#$%^&*()_+-=[]{}|;:'\",.<>?"
BASIC_SYMBOLS = "!@#$%^&*?"

# Printable ASCII, half-open.
PRINTABLE_START = 32
PRINTABLE_STOP = 127


def quote(text: str) -> str:
    """Render text as a double-quoted literal of the lowered language.

    Only backslashes and double quotes are escaped.
    """
    escaped = text.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


# --- AST nodes classes. ---

@dataclass(kw_only=True)
class PatternNode(object):
    """Base class for all pattern AST nodes.

    Every node knows how to produce one atomic instance of its output and how
    to lower itself to an expression of the lowered language. Repetition is
    handled here, once, for all node types.

    Attributes:
        repeat_count: How many independent instances are concatenated. Set by
            the ``<n>`` modifier that directly follows the node's token.
        position: The source position of the token that produced this node.
    """
    repeat_count: int = 1
    position: Optional["Position"] = field(default=None, compare=False, repr=False)

    def __post_init__(self):
        if self.repeat_count < 1:
            raise ValueError(f"repeat_count must be at least 1, got {self.repeat_count}")

    def generate_one(self, rng: "RandomSource") -> str:
        """Return one atomic instance, not yet repeated."""
        raise NotImplementedError

    def lower_one(self) -> str:
        """Return the lowered expression for one atomic instance."""
        raise NotImplementedError

    def generate(self, rng: "RandomSource") -> str:
        """Return ``repeat_count`` atomic instances concatenated."""
        return "".join(self.generate_one(rng) for _ in range(self.repeat_count))

    def lower(self) -> str:
        """Return an expression computing the same thing as :meth:`generate`.

        A repeat count of 1 lowers to the bare atom.
        """
        atom = self.lower_one()
        if self.repeat_count == 1:
            return atom
        return f"repeat({self.repeat_count}, {atom})"

    def __str__(self) -> str:
        return self.lower()


@dataclass
class LiteralNode(PatternNode):
    """Exact text, emitted verbatim.

    Example:
        "hello"

    Attributes:
        text: The unescaped literal text.
    """
    text: str

    def generate_one(self, rng):
        return self.text

    def lower_one(self):
        return quote(self.text)


@dataclass
class SampleSetNode(PatternNode):
    """One character chosen uniformly from an explicit set.

    Example:
        [abc]

    Attributes:
        chars: The candidate characters. Duplicates weight the draw.
    """
    chars: str

    def __post_init__(self):
        super().__post_init__()
        if not self.chars:
            raise ValueError("SampleSetNode needs at least one character")

    def generate_one(self, rng):
        return rng.sample(self.chars)

    def lower_one(self):
        return f"sample({quote(self.chars)})"


@dataclass
class _CharsetNode(PatternNode):
    """Base for nodes drawing from a fixed, built-in character set."""

    @property
    def charset(self) -> str:
        raise NotImplementedError

    def generate_one(self, rng):
        return rng.sample(self.charset)

    def lower_one(self):
        return f"sample({quote(self.charset)})"


@dataclass
class AlphaNode(_CharsetNode):
    """One letter, ``a`` for lowercase or ``A`` for uppercase.

    Attributes:
        uppercase: Draw from ``A-Z`` instead of ``a-z``.
    """
    uppercase: bool = False

    @property
    def charset(self):
        return UPPERCASE if self.uppercase else LOWERCASE


@dataclass
class SymbolNode(_CharsetNode):
    """One character of the full punctuation set (``@``)."""

    @property
    def charset(self):
        return SYMBOLS


@dataclass
class BasicSymbolNode(_CharsetNode):
    """One character of the reduced punctuation set (``$``)."""

    @property
    def charset(self):
        return BASIC_SYMBOLS


@dataclass
class AnyNode(PatternNode):
    """One printable ASCII character (``.``)."""

    def generate_one(self, rng):
        return chr(rng.rand_range(PRINTABLE_START, PRINTABLE_STOP))

    def lower_one(self):
        return f"chr(rand_range({PRINTABLE_START}, {PRINTABLE_STOP}))"


@dataclass
class NumericNode(PatternNode):
    """One decimal digit (``#``)."""

    def generate_one(self, rng):
        return str(rng.rand_range(0, 10))

    def lower_one(self):
        return "str(rand_range(0, 10))"


@dataclass
class RangeNode(PatternNode):
    """A random integer from an inclusive range, rendered as decimal text.

    Example:
        :1-100;

    Attributes:
        start: Smallest value that can be drawn.
        end: Largest value that can be drawn.
        stop: Exclusive upper bound (``end + 1``) used for the draw.
    """
    start: int
    end: int
    stop: int = field(init=False, repr=False)

    def __post_init__(self):
        super().__post_init__()
        if self.end < self.start:
            raise ValueError(f"range end {self.end} is below its start {self.start}")
        self.stop = self.end + 1

    def generate_one(self, rng):
        return str(rng.rand_range(self.start, self.stop))

    def lower_one(self):
        return f"str(rand_range({self.start}, {self.stop}))"


@dataclass
class AsciiRangeNode(PatternNode):
    """A random character whose code lies between two characters, inclusive.

    Example:
        :a-f;

    Attributes:
        first: Lowest character that can be drawn.
        last: Highest character that can be drawn.
        start: Code point of ``first``.
        stop: Code point of ``last`` plus one.
    """
    first: str
    last: str
    start: int = field(init=False, repr=False)
    stop: int = field(init=False, repr=False)

    def __post_init__(self):
        super().__post_init__()
        if len(self.first) != 1 or len(self.last) != 1:
            raise ValueError(
                f"character range bounds must be single characters, got {self.first!r} and {self.last!r}"
            )
        self.start = ord(self.first)
        self.stop = ord(self.last) + 1
        if self.stop <= self.start:
            raise ValueError(f"character range {self.first!r}-{self.last!r} is reversed")

    def generate_one(self, rng):
        return chr(rng.rand_range(self.start, self.stop))

    def lower_one(self):
        return f"chr(rand_range({self.start}, {self.stop}))"


@dataclass
class GroupNode(PatternNode):
    """An ordered list of child nodes.

    A sequential group (``(...)``) concatenates the repeated output of every
    child in order. A choice group (``{...}``) picks one child uniformly and
    returns only that child's repeated output.

    Attributes:
        children: The child nodes, owned by this group.
        sequential: True to concatenate, False to pick one child.
    """
    children: list[PatternNode] = field(default_factory=list)
    sequential: bool = True

    def generate_one(self, rng):
        if self.sequential:
            return "".join(child.generate(rng) for child in self.children)
        return rng.sample(self.children).generate(rng)

    def lower_one(self):
        items = ", ".join(child.lower() for child in self.children)
        if self.sequential:
            return f"join([{items}])"
        return f"sample([{items}])"


@dataclass
class RootNode(GroupNode):
    """The top of every parse: a group that is always sequential."""
    sequential: bool = field(default=True, init=False)
