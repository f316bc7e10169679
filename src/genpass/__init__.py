#######################################################################
# genpass: random string generation from compact patterns
#######################################################################

from .ast.builder import PatternParser
from .compiler import compile_and_run, compile_pattern, format_syntax_fault, generate
from .errors import GenpassError, SyntaxFault, EvaluationFault
from .random_source import RandomSource, default_source
from .runtime import run_source


# --- The parser ---

def getPatternParser(strict=False, origin="<pattern>"):
    """Create a pattern parser instance.

    Args:
        strict: If True, reject characters that have no meaning in the pattern
            language instead of ignoring them (default: False)
        origin: Name recorded in node positions (default: "<pattern>")

    Returns:
        PatternParser instance
    """
    return PatternParser(origin=origin, strict=strict)


__all__ = [
    "getPatternParser",
    "PatternParser",
    "compile_and_run",
    "compile_pattern",
    "format_syntax_fault",
    "generate",
    "run_source",
    "RandomSource",
    "default_source",
    "GenpassError",
    "SyntaxFault",
    "EvaluationFault",
]


# vim: set ts=4 sw=4 expandtab:
