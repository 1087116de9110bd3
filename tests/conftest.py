# tests/conftest.py
"""
Shared document trees and S-expression sources for the hamlx tests.
"""

import pytest

from hamlx.extractor import ExtractorConfig, RubyExtractor
from hamlx.nodes import (
    CommentNode,
    FilterNode,
    PlainNode,
    RootNode,
    ScriptNode,
    SilentScriptNode,
    TagNode,
)


# ── Tree builders ────────────────────────────────────────────────

def root(*children):
    return RootNode(line=1, children=tuple(children))


def plain(line, text="text"):
    return PlainNode(line=line, text=text)


def tag(line, name, *children, script="", attrs=(), static_hash=None):
    return TagNode(
        line=line,
        tag_name=name,
        script=script,
        dynamic_attributes_sources=tuple(attrs),
        static_hash_source=static_hash,
        children=tuple(children),
    )


def script(line, text, *children):
    return ScriptNode(line=line, text=text, children=tuple(children))


def silent(line, text, *children):
    return SilentScriptNode(line=line, text=text, children=tuple(children))


def comment(line, text):
    return CommentNode(line=line, text=text)


def filter_(line, filter_type, text):
    return FilterNode(line=line, filter_type=filter_type, text=text)


# ── Sample trees ─────────────────────────────────────────────────

# - if signed_in?(viewer)
#   %span Stuff
#   = link_to 'Sign Out', sign_out_path
# - else
#   .some-class{ class: my_method }= my_method
#   = link_to 'Sign In', sign_in_path
SIGN_IN_TREE = root(
    silent(
        1, "if signed_in?(viewer)",
        tag(2, "span", plain(2, "Stuff")),
        script(3, "link_to 'Sign Out', sign_out_path"),
        silent(
            4, "else",
            tag(5, "div", attrs=["{ class: my_method }"], script=" my_method "),
            script(6, "link_to 'Sign In', sign_in_path"),
        ),
    ),
)

SIGN_IN_SEXP = '''
(root
  (silent-script :line 1 :text "if signed_in?(viewer)"
    (tag :line 2 :name "span" (plain :line 2 :text "Stuff"))
    (script :line 3 :text "link_to 'Sign Out', sign_out_path")
    (silent-script :line 4 :text "else"
      (tag :line 5 :name "div" :attrs ("{ class: my_method }") :script " my_method ")
      (script :line 6 :text "link_to 'Sign In', sign_in_path"))))
'''

SIGN_IN_RUBY = "\n".join([
    "if signed_in?(viewer)",
    "  _hamlx_puts_0 # span",
    "  _hamlx_puts_1",
    "  _hamlx_puts_2 # span/",
    "  link_to 'Sign Out', sign_out_path",
    "else",
    "  {}.merge({ class: my_method })",
    "  _hamlx_puts_3 # div",
    "  my_method",
    "  _hamlx_puts_4 # div/",
    "  link_to 'Sign In', sign_in_path",
    "end",
])

SIGN_IN_MAP = {
    1: 1, 2: 2, 3: 2, 4: 2, 5: 3, 6: 4,
    7: 5, 8: 5, 9: 5, 10: 5, 11: 6, 12: 1,
}


@pytest.fixture
def extractor():
    return RubyExtractor(ExtractorConfig())
