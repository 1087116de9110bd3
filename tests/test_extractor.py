# tests/test_extractor.py
"""
Tests for RubyExtractor: per-node emission, indentation, block
termination and the line map.
"""

from types import SimpleNamespace

import pytest

from hamlx.errors import ConfigError, HamlxErrorCodes, StructuralError
from hamlx.extractor import ExtractorConfig, RubyExtractor, extract
from hamlx.keywords import opens_block
from hamlx.nodes import NodeKind, ScriptNode, SilentScriptNode, iter_nodes
from tests.conftest import (
    SIGN_IN_MAP,
    SIGN_IN_RUBY,
    SIGN_IN_TREE,
    comment,
    filter_,
    plain,
    root,
    script,
    silent,
    tag,
)


def _lines(result):
    return result.script.split("\n")


def _assert_map_is_gap_free(result):
    assert list(result.line_map) == list(range(1, len(result.lines) + 1))


class TestDocumentedScenarios:

    def test_if_with_plain_child(self):
        result = extract(root(silent(5, "if x", plain(6))))
        assert _lines(result) == ["if x", "  _hamlx_puts_0", "end"]
        assert dict(result.line_map) == {1: 5, 2: 6, 3: 5}

    def test_comment_lines(self):
        result = extract(root(comment(2, "foo\nbar")))
        assert _lines(result) == ["#foo", "# bar"]
        assert dict(result.line_map) == {1: 2, 2: 2}

    def test_tag_with_plain_child(self):
        result = extract(root(tag(1, "div", plain(1))))
        assert _lines(result) == [
            "_hamlx_puts_0 # div",
            "_hamlx_puts_1",
            "_hamlx_puts_2 # div/",
        ]
        assert dict(result.line_map) == {1: 1, 2: 1, 3: 1}

    def test_sign_in_page(self):
        result = extract(SIGN_IN_TREE)
        assert result.script == SIGN_IN_RUBY
        assert dict(result.line_map) == SIGN_IN_MAP


class TestPlain:

    def test_text_never_copied(self):
        result = extract(root(plain(1, "Don't \"quote\" me"), plain(2, "again")))
        assert "quote" not in result.script
        assert _lines(result) == ["_hamlx_puts_0", "_hamlx_puts_1"]

    def test_placeholders_are_unique(self):
        result = extract(root(*[plain(n) for n in range(1, 6)]))
        assert len(set(_lines(result))) == 5


class TestTag:

    def test_dynamic_attributes_wrapped_and_collapsed(self):
        node = tag(
            3, "span",
            attrs=["{ class: klass,\n    id: ident }", "  html_attrs(user)  "],
            script="user.name",
            static_hash="{ 'rel' => 'x' }",
        )
        result = extract(root(node))
        assert _lines(result) == [
            "{}.merge({ class: klass, id: ident })",
            "{}.merge(html_attrs(user))",
            "_hamlx_puts_0 # span",
            "user.name",
            "_hamlx_puts_1 # span/",
        ]
        assert set(result.line_map.values()) == {3}

    def test_static_hash_emitted_once_without_dynamic_sources(self):
        node = tag(2, "a", static_hash="{ 'href' => '/',\n  'rel' => 'home' }")
        result = extract(root(node))
        assert _lines(result) == [
            "{ 'href' => '/', 'rel' => 'home' }",
            "_hamlx_puts_0 # a",
            "_hamlx_puts_1 # a/",
        ]

    def test_static_hash_suppressed_by_dynamic_source(self):
        node = tag(2, "a", attrs=["{ href: url }"], static_hash="{ 'rel' => 'home' }")
        result = extract(root(node))
        assert "'rel'" not in result.script

    def test_blank_inline_script_dropped(self):
        result = extract(root(tag(1, "p", script="   ")))
        assert _lines(result) == ["_hamlx_puts_0 # p", "_hamlx_puts_1 # p/"]

    def test_tag_inside_block_is_indented(self):
        result = extract(root(silent(1, "if x", tag(2, "b", script="name"))))
        assert _lines(result) == [
            "if x",
            "  _hamlx_puts_0 # b",
            "  name",
            "  _hamlx_puts_1 # b/",
            "end",
        ]


class TestScript:

    def test_if_elsif_else(self):
        tree = root(
            silent(
                1, "if a",
                script(2, "foo"),
                silent(3, "elsif b", plain(4)),
                silent(5, "else", script(6, "bar")),
            )
        )
        result = extract(tree)
        assert _lines(result) == [
            "if a", "  foo", "elsif b", "  _hamlx_puts_0", "else", "  bar", "end",
        ]
        assert dict(result.line_map) == {1: 1, 2: 2, 3: 3, 4: 4, 5: 5, 6: 6, 7: 1}

    def test_case_when(self):
        tree = root(
            silent(
                1, "case status",
                silent(2, "when :active", plain(3)),
                silent(4, "when :archived", plain(5)),
            )
        )
        assert _lines(extract(tree)) == [
            "case status",
            "when :active",
            "  _hamlx_puts_0",
            "when :archived",
            "  _hamlx_puts_1",
            "end",
        ]

    def test_begin_rescue_ensure(self):
        tree = root(
            silent(
                1, "begin",
                script(2, "risky"),
                silent(3, "rescue Timeout::Error => e", script(4, "e.message")),
                silent(5, "ensure", silent(6, "cleanup")),
            )
        )
        assert _lines(extract(tree)) == [
            "begin",
            "  risky",
            "rescue Timeout::Error => e",
            "  e.message",
            "ensure",
            "  cleanup",
            "end",
        ]

    def test_anonymous_block(self):
        tree = root(script(1, "form_for @user do |f|", script(2, "f.text_field :name")))
        result = extract(tree)
        assert _lines(result) == [
            "form_for @user do |f|", "  f.text_field :name", "end",
        ]
        assert dict(result.line_map) == {1: 1, 2: 2, 3: 1}

    def test_nested_blocks(self):
        tree = root(
            silent(
                1, "items.each do |item|",
                silent(2, "if item.visible?", silent(3, "while item.next", plain(4))),
            )
        )
        assert _lines(extract(tree)) == [
            "items.each do |item|",
            "  if item.visible?",
            "    while item.next",
            "      _hamlx_puts_0",
            "    end",
            "  end",
            "end",
        ]

    def test_empty_block_still_terminated(self):
        result = extract(root(silent(9, "unless done")))
        assert _lines(result) == ["unless done", "end"]
        assert dict(result.line_map) == {1: 9, 2: 9}

    def test_non_block_statement_children_keep_depth(self):
        tree = root(silent(1, "x = compute", plain(2)))
        assert _lines(extract(tree)) == ["x = compute", "_hamlx_puts_0"]

    def test_statement_is_trimmed(self):
        assert extract(root(script(1, "   render 'row'   "))).script == "render 'row'"

    def test_multiline_statement_maps_every_line(self):
        result = extract(root(script(7, "link_to 'Home',\n  root_path")))
        assert _lines(result) == ["link_to 'Home',", "  root_path"]
        assert dict(result.line_map) == {1: 7, 2: 7}

    def test_empty_statement_dropped_but_children_visited(self):
        result = extract(root(silent(1, "", plain(2))))
        assert _lines(result) == ["_hamlx_puts_0"]
        assert dict(result.line_map) == {1: 2}

    def test_orphan_continuation_not_negative(self):
        assert _lines(extract(root(silent(1, "else", plain(2))))) == [
            "else", "_hamlx_puts_0",
        ]


class TestComment:

    def test_leading_whitespace_preserved(self):
        result = extract(root(comment(4, " first\n  indented\nflush\n\tTabbed")))
        assert _lines(result) == ["# first", "#  indented", "# flush", "#\tTabbed"]
        assert set(result.line_map.values()) == {4}

    def test_blank_comment_line(self):
        assert _lines(extract(root(comment(1, "a\n\nb")))) == ["#a", "#", "# b"]

    def test_comment_inside_block(self):
        tree = root(silent(1, "if x", comment(2, "note\nmore")))
        assert _lines(extract(tree)) == ["if x", "  #note", "  # more", "end"]


class TestFilter:

    def test_ruby_filter_verbatim(self):
        result = extract(root(filter_(10, "ruby", "x = 1\n\ny = x\n")))
        assert _lines(result) == ["x = 1", "", "y = x"]
        assert dict(result.line_map) == {1: 11, 2: 12, 3: 13}

    def test_ruby_filter_blank_lines_kept(self):
        result = extract(root(filter_(1, "ruby", "\n\n\na = 1")))
        assert _lines(result) == ["", "", "", "a = 1"]
        assert dict(result.line_map) == {1: 2, 2: 3, 3: 4, 4: 5}

    def test_ruby_filter_lines_keep_their_own_layout(self):
        body = "if b\n  1\nelse\n  2\nend"
        result = extract(root(silent(1, "if a", filter_(2, "ruby", body))))
        assert _lines(result) == [
            "if a", "  if b", "    1", "  else", "    2", "  end", "end",
        ]
        assert dict(result.line_map) == {1: 1, 2: 3, 3: 4, 4: 5, 5: 6, 6: 7, 7: 1}

    def test_other_filter_placeholder_and_interpolations(self):
        body = "var a = 1;\nvar b = '#{user.name}';\nvar c = #{count};\n"
        result = extract(root(filter_(3, "javascript", body)))
        assert _lines(result) == ["_hamlx_puts_0 # :javascript", "user.name", "count"]
        assert dict(result.line_map) == {1: 3, 2: 5, 3: 6}

    def test_other_filter_without_interpolation(self):
        result = extract(root(filter_(1, "css", "p { color: red; }")))
        assert _lines(result) == ["_hamlx_puts_0 # :css"]

    def test_interpolated_continuation_keyword_not_dedented(self):
        tree = root(silent(1, "if a", filter_(2, "plain", "#{else}\n")))
        assert _lines(extract(tree))[1:3] == ["  _hamlx_puts_0 # :plain", "  else"]

    def test_host_filter_predicate(self):
        config = ExtractorConfig(is_host_filter=lambda name: name in ("ruby", "erb"))
        result = extract(root(filter_(1, "erb", "a = 1\nb = 2")), config)
        assert _lines(result) == ["a = 1", "b = 2"]

    def test_host_filter_types(self):
        config = ExtractorConfig(host_filter_types=frozenset())
        result = extract(root(filter_(1, "ruby", "a = 1")), config)
        assert _lines(result) == ["_hamlx_puts_0 # :ruby"]

    def test_empty_ruby_filter_emits_nothing(self):
        result = extract(root(filter_(3, "ruby", ""), plain(4)))
        assert _lines(result) == ["_hamlx_puts_0"]
        assert dict(result.line_map) == {1: 4}


class TestInvariants:

    TREES = [
        root(),
        SIGN_IN_TREE,
        root(silent(1, "if a", silent(2, "if b", silent(3, "if c")))),
        root(
            tag(1, "ul", silent(2, "items.each do |i|", tag(3, "li", script="i"))),
            comment(4, "one\ntwo\nthree"),
            filter_(5, "ruby", "x = 1\n\nx += 1"),
            filter_(9, "javascript", "#{a}\n#{b(\n c)}"),
        ),
    ]

    @pytest.mark.parametrize("tree", TREES)
    def test_line_map_gap_free(self, tree):
        _assert_map_is_gap_free(extract(tree))

    @pytest.mark.parametrize("tree", TREES)
    def test_every_opener_terminated(self, tree):
        result = extract(tree)
        openers = sum(
            1 for node in iter_nodes(tree)
            if isinstance(node, (ScriptNode, SilentScriptNode))
            and opens_block(node.text.strip())
        )
        assert sum(1 for line in result.lines if line.strip() == "end") == openers

    @pytest.mark.parametrize("tree", TREES)
    def test_idempotent(self, tree, extractor):
        first = extractor.extract(tree)
        second = extractor.extract(tree)
        assert first.script == second.script
        assert dict(first.line_map) == dict(second.line_map)

    def test_empty_root(self):
        result = extract(root())
        assert result.script == ""
        assert dict(result.line_map) == {}


class TestConfig:

    def test_indent_width(self):
        result = extract(root(silent(1, "if x", plain(2))), ExtractorConfig(indent_width=4))
        assert _lines(result) == ["if x", "    _hamlx_puts_0", "end"]

    def test_placeholder_prefix(self):
        result = extract(root(plain(1)), ExtractorConfig(placeholder_prefix="_lint_puts_"))
        assert result.script == "_lint_puts_0"

    @pytest.mark.parametrize("kwargs", [
        {"placeholder_prefix": "1bad"},
        {"indent_width": -1},
        {"merge_template": "merge()"},
        {"terminator": "  "},
        {"merge_template": "merge({code}) { |h| h }"},
        {"merge_template": "{0}.merge({code})"},
        {"merge_template": "merge({code}})"},
    ])
    def test_invalid_config_rejected(self, kwargs):
        config = ExtractorConfig(**kwargs)
        assert config.validate()
        with pytest.raises(ConfigError):
            RubyExtractor(config)

    def test_default_config_valid(self):
        assert ExtractorConfig().validate() == []


class TestFailures:

    def test_unknown_kind_aborts(self, extractor):
        bogus = SimpleNamespace(kind="doctype", line=3, children=[])
        with pytest.raises(StructuralError) as info:
            extractor.extract(root(plain(1), bogus))
        assert info.value.code == HamlxErrorCodes.UNKNOWN_NODE_KIND

    def test_extractor_reusable_after_failure(self, extractor):
        with pytest.raises(StructuralError):
            extractor.extract(root(SimpleNamespace(kind=None, line=1, children=[])))
        result = extractor.extract(root(plain(1)))
        assert result.script == "_hamlx_puts_0"

    def test_reentrant_extraction_rejected(self):
        class Reentrant(RubyExtractor):
            def visit_plain(self, node, descend):
                self.extract(root())

        with pytest.raises(StructuralError) as info:
            Reentrant().extract(root(plain(1)))
        assert info.value.code == HamlxErrorCodes.REENTRANT_EXTRACTION

    def test_bad_children_abort(self, extractor):
        with pytest.raises(StructuralError) as info:
            extractor.extract(root(SimpleNamespace(kind=NodeKind.SILENT_SCRIPT, line=2, children=None)))
        assert info.value.code == HamlxErrorCodes.INVALID_CHILDREN

    def test_nested_root_aborts(self, extractor):
        tree = root(silent(1, "if x", root(plain(2))))
        with pytest.raises(StructuralError) as info:
            extractor.extract(tree)
        assert info.value.code == HamlxErrorCodes.INVALID_CHILDREN
        assert extractor.extract(root(plain(1))).script == "_hamlx_puts_0"

    def test_doubled_braces_in_merge_template(self):
        config = ExtractorConfig(merge_template="merge({code}) {{ |h| h }}")
        result = extract(root(tag(1, "a", attrs=["{ href: url }"])), config)
        assert _lines(result)[0] == "merge({ href: url }) { |h| h }"
