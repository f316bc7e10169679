"""Tests for the pattern parser and its context stack."""

import pytest

from genpass import SyntaxFault
from genpass.ast import getASTfromPattern
from genpass.ast.builder import FrameKind, ParseContext, PatternParser
from genpass.ast.nodes import (
    AlphaNode,
    AnyNode,
    AsciiRangeNode,
    BasicSymbolNode,
    GroupNode,
    LiteralNode,
    NumericNode,
    RangeNode,
    RootNode,
    SampleSetNode,
    SymbolNode,
)


def parse_failure(parser, pattern):
    """Helper function to parse a pattern and return the fault."""
    with pytest.raises(SyntaxFault) as excinfo:
        parser.parse(pattern)
    return excinfo.value


class TestSimpleTokens:
    """Single-character tokens."""

    def test_each_token(self, parser):
        root = parser.parse(".aA#@$")
        assert isinstance(root, RootNode)
        assert root.children == [
            AnyNode(),
            AlphaNode(),
            AlphaNode(uppercase=True),
            NumericNode(),
            SymbolNode(),
            BasicSymbolNode(),
        ]

    def test_empty_pattern(self, parser):
        root = parser.parse("")
        assert root.children == []
        assert root.lower() == "join([])"

    def test_positions_are_recorded(self, parser):
        root = parser.parse('a "x"')
        assert root.children[0].position.index == 0
        assert root.children[1].position.index == 2
        assert root.children[1].position.origin == "<pattern>"


class TestLiteralsAndSampleSets:
    """Quoted literals and bracketed sample sets."""

    def test_literal(self, parser):
        root = parser.parse('"abc"')
        assert root.children == [LiteralNode("abc")]
        assert root.generate(None) == "abc"

    def test_literal_keeps_token_characters(self, parser):
        root = parser.parse('"a#(b"')
        assert root.children == [LiteralNode("a#(b")]

    def test_escaped_quote_in_literal(self, parser):
        root = parser.parse('"a\\"b"')
        assert root.children == [LiteralNode('a"b')]

    def test_escaped_backslash_in_literal(self, parser):
        root = parser.parse('"a\\\\b"')
        assert root.children == [LiteralNode("a\\b")]

    def test_sample_set(self, parser):
        root = parser.parse("[abc]")
        assert root.children == [SampleSetNode("abc")]

    def test_sample_set_with_escaped_bracket(self, parser):
        root = parser.parse("[a\\]b]")
        assert root.children == [SampleSetNode("a]b")]

    def test_empty_sample_set_faults(self, parser):
        fault = parse_failure(parser, "x[]")
        assert fault.index == 1

    def test_unterminated_literal(self, parser):
        fault = parse_failure(parser, '"unterminated')
        assert fault.message == "Expected '\"' but got EOF"
        assert fault.index == len('"unterminated')

    def test_trailing_escape_faults(self, parser):
        fault = parse_failure(parser, '"abc\\')
        assert "EOF" in fault.message
        assert fault.index == 5

    def test_unterminated_sample_set(self, parser):
        fault = parse_failure(parser, "[ab")
        assert fault.message == "Expected ']' but got EOF"
        assert fault.index == 3


class TestRepeatModifier:
    """The <n> modifier."""

    def test_sets_count_on_previous_node(self, parser):
        root = parser.parse("[abc]<3>")
        assert root.children == [SampleSetNode("abc", repeat_count=3)]

    def test_applies_to_last_sibling_only(self, parser):
        root = parser.parse("a#<4>")
        assert root.children[0].repeat_count == 1
        assert root.children[1].repeat_count == 4

    def test_applies_to_closed_group(self, parser):
        root = parser.parse("(a#)<2>")
        assert isinstance(root.children[0], GroupNode)
        assert root.children[0].repeat_count == 2
        assert [c.repeat_count for c in root.children[0].children] == [1, 1]

    def test_applies_inside_group(self, parser):
        root = parser.parse("a(#<5>)")
        assert root.children[0].repeat_count == 1
        assert root.children[1].children[0].repeat_count == 5

    def test_spaces_around_number(self, parser):
        root = parser.parse("a< 2 >")
        assert root.children[0].repeat_count == 2

    def test_no_previous_sibling(self, parser):
        fault = parse_failure(parser, "<3>")
        assert fault.index == 0

    def test_no_previous_sibling_in_group(self, parser):
        fault = parse_failure(parser, "a(<3>)")
        assert fault.index == 2

    def test_not_a_number(self, parser):
        fault = parse_failure(parser, "<x>")
        assert fault.message == "Repeat modifier must be a number"
        assert fault.index == 0

    @pytest.mark.parametrize("pattern", ["a<-1>", "a<2x>", "a<>", "a<1_0>"])
    def test_malformed_numbers(self, parser, pattern):
        fault = parse_failure(parser, pattern)
        assert fault.message == "Repeat modifier must be a number"
        assert fault.index == 1

    def test_zero_count(self, parser):
        fault = parse_failure(parser, "a<0>")
        assert fault.index == 1

    def test_applied_twice(self, parser):
        fault = parse_failure(parser, "a<2><3>")
        assert fault.index == 4

    def test_unterminated(self, parser):
        fault = parse_failure(parser, "a<12")
        assert fault.message == "Expected '>' but got EOF"
        assert fault.index == 4


class TestRanges:
    """Range blocks :start-end;"""

    def test_numeric_range(self, parser):
        root = parser.parse(":1-5;")
        assert root.children == [RangeNode(1, 5)]

    def test_multi_digit_range(self, parser):
        root = parser.parse(":100-2500;")
        assert root.children == [RangeNode(100, 2500)]

    def test_ascii_range(self, parser):
        root = parser.parse(":a-c;")
        assert root.children == [AsciiRangeNode("a", "c")]

    def test_dash_as_bound(self, parser):
        root = parser.parse(":--/;")
        assert root.children == [AsciiRangeNode("-", "/")]

    def test_escaped_terminators_as_bounds(self, parser):
        root = parser.parse(":\\:-\\;;")
        assert root.children == [AsciiRangeNode(":", ";")]

    def test_several_segments_become_sequential_group(self, parser):
        root = parser.parse(":1-5:a-c;")
        assert len(root.children) == 1
        group = root.children[0]
        assert isinstance(group, GroupNode)
        assert group.sequential is True
        assert group.children == [RangeNode(1, 5), AsciiRangeNode("a", "c")]

    def test_repeat_after_range(self, parser):
        root = parser.parse(":0-9;<6>")
        assert root.children == [RangeNode(0, 9, repeat_count=6)]

    def test_missing_dash(self, parser):
        fault = parse_failure(parser, ":15;")
        assert fault.index == 1

    def test_numeric_start_with_letter_end(self, parser):
        fault = parse_failure(parser, ":1-a;")
        assert fault.index == 1

    def test_multi_character_ascii_bounds(self, parser):
        fault = parse_failure(parser, ":1-5:ab-c;")
        assert fault.index == 5

    @pytest.mark.parametrize("pattern", [":9-1;", ":z-a;"])
    def test_reversed(self, parser, pattern):
        fault = parse_failure(parser, pattern)
        assert "reversed" in fault.message

    def test_unterminated(self, parser):
        fault = parse_failure(parser, ":1-5")
        assert fault.message == "Expected one of (':', ';') but got EOF"
        assert fault.index == 4


class TestGroups:
    """Sequential and choice groups."""

    def test_sequential_group(self, parser):
        root = parser.parse('("a""b")')
        group = root.children[0]
        assert group == GroupNode([LiteralNode("a"), LiteralNode("b")], sequential=True)
        for _ in range(5):
            assert root.generate(None) == "ab"

    def test_choice_group(self, parser):
        root = parser.parse("{a#}")
        assert root.children == [GroupNode([AlphaNode(), NumericNode()], sequential=False)]

    def test_nested_groups(self, parser):
        root = parser.parse('({"x""y"}#)')
        outer = root.children[0]
        assert outer.sequential is True
        assert outer.children[0].sequential is False
        assert outer.children[1] == NumericNode()

    def test_empty_sequential_group(self, parser):
        root = parser.parse("()")
        assert root.children == [GroupNode([], sequential=True)]

    def test_empty_choice_group_faults(self, parser):
        fault = parse_failure(parser, "a{}")
        assert fault.index == 2

    def test_unclosed_group(self, parser):
        fault = parse_failure(parser, "(a#")
        assert fault.message == "Expected ')' but got EOF"
        assert fault.index == 3

    def test_unclosed_inner_group_reports_innermost(self, parser):
        fault = parse_failure(parser, "({a")
        assert fault.message == "Expected '}' but got EOF"

    def test_mismatched_closer_is_ignored(self, parser):
        # ')' means nothing inside '{...}', so the choice closes normally.
        root = parser.parse("{a)}")
        assert root.children == [GroupNode([AlphaNode()], sequential=False)]

    def test_nesting_up_to_limit(self, parser):
        depth = PatternParser.max_depth
        root = parser.parse("(" * depth + "a" + ")" * depth)
        node = root.children[0]
        for _ in range(depth - 1):
            node = node.children[0]
        assert node.children == [AlphaNode()]

    def test_nesting_past_limit_faults(self, parser):
        depth = PatternParser.max_depth
        fault = parse_failure(parser, "(" * (depth + 1) + "a" + ")" * (depth + 1))
        assert fault.message == "Groups nested too deeply"
        assert fault.index == depth

    def test_nesting_limit_counts_both_group_kinds(self, parser):
        depth = PatternParser.max_depth
        pattern = "({" * (depth // 2) + "{"
        fault = parse_failure(parser, pattern)
        assert fault.index == depth

    def test_ranges_do_not_count_towards_nesting(self, parser, rng):
        depth = PatternParser.max_depth
        root = parser.parse("(" * depth + ":1-2:a-b;" + ")" * depth)
        assert len(root.generate(rng)) == 2


class TestUnrecognizedCharacters:
    """Characters outside the pattern language."""

    def test_ignored_by_default(self, parser):
        root = parser.parse("xa y#")
        assert root.children == [AlphaNode(), NumericNode()]

    def test_stray_closer_ignored_at_top_level(self, parser):
        assert parser.parse(")a").children == [AlphaNode()]

    def test_strict_rejects(self, strict_parser):
        fault = parse_failure(strict_parser, "ab")
        assert fault.message == "Unexpected character 'b'"
        assert fault.index == 1

    def test_strict_allows_whitespace(self, strict_parser):
        root = strict_parser.parse("a #\t@")
        assert root.children == [AlphaNode(), NumericNode(), SymbolNode()]


class TestParseContext:
    """ParseContext.finalize()"""

    def test_range_with_one_child_collapses(self):
        context = ParseContext(FrameKind.RANGE, None, 0, children=[RangeNode(1, 2)])
        assert context.finalize() == RangeNode(1, 2)

    def test_range_with_several_children(self):
        context = ParseContext(FrameKind.RANGE, None, 0, children=[RangeNode(1, 2), RangeNode(3, 4)])
        node = context.finalize()
        assert isinstance(node, GroupNode)
        assert node.sequential is True

    def test_root(self):
        node = ParseContext(FrameKind.ROOT, None, 0).finalize()
        assert isinstance(node, RootNode)

    def test_choice(self):
        node = ParseContext(FrameKind.CHOICE, "}", 0, children=[AnyNode()]).finalize()
        assert node == GroupNode([AnyNode()], sequential=False)


def test_parser_is_reusable():
    parser = PatternParser()
    with pytest.raises(SyntaxFault):
        parser.parse("(")
    assert parser.parse("#").children == [NumericNode()]


def test_get_ast_from_pattern_origin():
    root = getASTfromPattern("a", origin="<repl>")
    assert root.children[0].position.origin == "<repl>"
