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

# Import the parser and its helpers
from .builder import PatternParser, ParseContext, FrameKind, Position

# Import serialization functions
from .serialization import (
    ast_to_dict,
    ast_to_json,
    ast_from_dict,
    ast_from_json,
    ast_to_yaml,
    ast_from_yaml,
)


# --- AST convenience functions ---

def getASTfromPattern(pattern: str, strict: bool = False, origin: str = "<pattern>") -> RootNode:
    """
    Parse a pattern string and return its abstract syntax tree (AST).

    Args:
        pattern (str): The pattern text to be parsed.
        strict (bool): If True, reject characters with no meaning in the pattern
            language instead of ignoring them (default: False).
        origin (str): Origin identifier for source location tracking (default: "<pattern>").

    Returns:
        RootNode: The root of the parsed tree.

    Raises:
        SyntaxFault: If the pattern is malformed.

    Example:
        ast = getASTfromPattern("A a<7> #<2>")
        ast_strict = getASTfromPattern("Aa<7>#<2>", strict=True)
    """
    return PatternParser(origin=origin, strict=strict).parse(pattern)


__all__ = [
    "PatternNode",
    "LiteralNode",
    "AnyNode",
    "AlphaNode",
    "NumericNode",
    "SymbolNode",
    "BasicSymbolNode",
    "SampleSetNode",
    "RangeNode",
    "AsciiRangeNode",
    "GroupNode",
    "RootNode",
    "PatternParser",
    "ParseContext",
    "FrameKind",
    "Position",
    "ast_to_dict",
    "ast_to_json",
    "ast_from_dict",
    "ast_from_json",
    "ast_to_yaml",
    "ast_from_yaml",
    "getASTfromPattern",
]
