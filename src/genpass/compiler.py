"""Pattern compiler front end: parse, lower, run."""

from __future__ import annotations

import logging
from typing import Optional

from .ast.builder import PatternParser
from .errors import EvaluationFault, SyntaxFault
from .random_source import RandomSource, default_source
from .runtime import run_source

logger = logging.getLogger(__name__)


def compile_pattern(pattern: str, strict: bool = False) -> str:
    """Parse a pattern and return its lowered source.

    Raises:
        SyntaxFault: If the pattern is malformed.
    """
    return PatternParser(strict=strict).parse(pattern).lower()


def generate(pattern: str, rng: Optional[RandomSource] = None, strict: bool = False) -> str:
    """Parse a pattern and generate one string by walking the tree directly.

    Raises:
        SyntaxFault: If the pattern is malformed.
    """
    root = PatternParser(strict=strict).parse(pattern)
    return root.generate(rng if rng is not None else default_source())


def format_syntax_fault(fault: SyntaxFault, prompt_width: int = 0) -> str:
    """Render a caret under the fault index followed by the fault message.

    Args:
        fault: The fault to render.
        prompt_width: Width of any prompt printed before the pattern, so the
            caret lines up with what the user typed.
    """
    return " " * (fault.index + prompt_width) + "^\n" + fault.message


def compile_and_run(
    pattern: str,
    rng: Optional[RandomSource] = None,
    prompt_width: int = 0,
    strict: bool = False,
) -> tuple[str, bool]:
    """Compile a pattern, run the lowered source, and render the result.

    Returns:
        ``(text, succeeded)``. On success the text is the lowered source, a
        newline, then the generated string. A failure while running the source
        replaces the generated string with the failure message and still counts
        as success. A syntax fault yields the caret rendering and False.
    """
    try:
        source = compile_pattern(pattern, strict=strict)
    except SyntaxFault as e:
        logger.debug("Syntax fault at index %d: %s", e.index, e.message)
        return format_syntax_fault(e, prompt_width), False

    try:
        output = run_source(source, rng)
    except EvaluationFault as e:
        logger.debug("Evaluation fault: %s", e.message)
        output = e.message
    return f"{source}\n{output}", True
