#######################################################################
# Arpeggio PEG Grammar for lowered genpass source
#######################################################################

from arpeggio import (
    ParserPython, Optional, ZeroOrMore, EOF,
    RegExMatch as _
)


# --- The parser ---

def getLoweredSourceParser(debug=False):
    """Create a parser for lowered genpass source.

    Args:
        debug: If True, enable Arpeggio debug output (default: False)

    Returns:
        ParserPython instance for the lowered expression language
    """
    return ParserPython(lowered_source, reduce_tree=False, memoization=True, debug=debug)


# --- Lowered source root ---

def lowered_source():
    return ( expression, EOF )


# --- Lexical and basic rules ---

def TOK_STRING():
    return _(r'(?s)"([^"\\]|\\.)*"', str_repr='string')

def TOK_INTEGER():
    return _(r'[0-9]+', str_repr='integer')

def TOK_ID():
    return _(r'[A-Za-z_][A-Za-z0-9_]*', str_repr='name')

def TOK_COMMA():
    return ','


# --- Expressions ---

def expression():
    return [ TOK_STRING, TOK_INTEGER, list_expr, call_expr ]

def arguments():
    return ( expression, ZeroOrMore(TOK_COMMA, expression) )

def list_expr():
    return ( '[', Optional(arguments), ']' )

def call_expr():
    return ( TOK_ID, '(', Optional(arguments), ')' )


# vim: set ts=4 sw=4 expandtab:
