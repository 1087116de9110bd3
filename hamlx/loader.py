"""hamlx/loader.py – S-expression dump → document tree.

Lets trees be written by hand (tests, bug reports) or dumped by a parser
adapter in another process, then fed to the extractor.

Surface syntax
--------------
::

    (root <child>...)
    (plain :line N [:text "..."])
    (tag :line N :name "div" [:script "..."] [:attrs ("..." ...)]
         [:hash "..."] <child>...)
    (script :line N :text "..." <child>...)
    (silent-script :line N :text "..." <child>...)
    (comment :line N :text "...")
    (filter :line N :type "ruby" :text "...")

Keyword options come first, children after.  Strings may contain
literal newlines.  The root's line defaults to 1; every other form must
give ``:line``.  ``(root ...)`` may only appear at the top.

Public API
----------
``load_tree(text, *, filename="<string>") -> RootNode``
``load_file(path) -> RootNode``
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

try:
    import sexpdata
    from sexpdata import Symbol
except ImportError:  # pragma: no cover
    raise ImportError(
        "The 'sexpdata' package is required to load document trees. "
        "Install it with:  pip install sexpdata"
    )

from hamlx.errors import HamlxErrorCodes, SourceSpan, TreeLoadError
from hamlx.nodes import (
    CommentNode,
    FilterNode,
    Node,
    PlainNode,
    RootNode,
    ScriptNode,
    SilentScriptNode,
    TagNode,
)

__all__ = ["load_tree", "load_file"]

Sexp = Any  # Union[list, Symbol, str, int, float]

_FORM_DISPATCH: Dict[str, Callable[..., Node]] = {}


def _register(tag: str):
    """Decorator: register a form builder under head symbol *tag*."""
    def deco(fn):
        _FORM_DISPATCH[tag] = fn
        return fn
    return deco


class _Form:
    """One ``(head :key value ... child ...)`` list, split up."""

    def __init__(self, raw: list, filename: str) -> None:
        self.head = _sym_name(raw[0], filename)
        self.filename = filename
        self.options: Dict[str, Sexp] = {}
        self.children: List[Sexp] = []

        items = raw[1:]
        index = 0
        while index < len(items):
            item = items[index]
            if isinstance(item, Symbol) and item.value().startswith(":"):
                if index + 1 >= len(items):
                    raise self.error(f"option {item.value()} has no value")
                self.options[item.value()[1:]] = items[index + 1]
                index += 2
                continue
            self.children = items[index:]
            break

    @property
    def line(self) -> int:
        value = self.options.get("line", 0)
        return value if isinstance(value, int) and not isinstance(value, bool) else 0

    def error(self, message: str) -> TreeLoadError:
        return TreeLoadError(
            f"({self.head} ...): {message}",
            code=HamlxErrorCodes.INVALID_OPTION,
            span=SourceSpan(file=self.filename, line=self.line),
        )

    def require_line(self) -> int:
        if "line" not in self.options:
            raise self.error("missing :line")
        value = self.options["line"]
        if not isinstance(value, int) or isinstance(value, bool) or value < 1:
            raise self.error(f":line must be a positive integer, got {value!r}")
        return value

    def string(self, key: str, default: Optional[str] = "") -> Optional[str]:
        if key not in self.options:
            return default
        value = self.options[key]
        if isinstance(value, Symbol):
            return value.value()
        if isinstance(value, str):
            return value
        raise self.error(f":{key} must be a string, got {value!r}")

    def strings(self, key: str) -> Tuple[str, ...]:
        if key not in self.options:
            return ()
        value = self.options[key]
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise self.error(f":{key} must be a list of strings, got {value!r}")
        return tuple(value)

    def build_children(self) -> Tuple[Node, ...]:
        children = tuple(_build(child, self.filename) for child in self.children)
        for child in children:
            if isinstance(child, RootNode):
                raise TreeLoadError(
                    f"(root ...) is only allowed at the top, found inside ({self.head} ...)",
                    code=HamlxErrorCodes.UNKNOWN_FORM,
                    span=SourceSpan(file=self.filename, line=child.line),
                )
        return children

    def leaf(self) -> None:
        if self.children:
            raise self.error("does not take children")


def _sym_name(s: Sexp, filename: str) -> str:
    if isinstance(s, Symbol):
        return s.value()
    raise TreeLoadError(
        f"expected a form head symbol, got {type(s).__name__}: {s!r}",
        code=HamlxErrorCodes.UNKNOWN_FORM,
        span=SourceSpan(file=filename),
    )


def _build(raw: Sexp, filename: str) -> Node:
    if not isinstance(raw, list) or not raw:
        raise TreeLoadError(
            f"expected a node form (kind ...), got: {raw!r}",
            code=HamlxErrorCodes.UNKNOWN_FORM,
            span=SourceSpan(file=filename),
        )
    form = _Form(raw, filename)
    builder = _FORM_DISPATCH.get(form.head)
    if builder is None:
        raise TreeLoadError(
            f"unknown node form ({form.head} ...)",
            code=HamlxErrorCodes.UNKNOWN_FORM,
            span=SourceSpan(file=filename, line=form.line),
        )
    return builder(form)


# ═══════════════════════════════════════════════════════════════════════
#  Form builders
# ═══════════════════════════════════════════════════════════════════════

@_register("root")
def _build_root(form: _Form) -> RootNode:
    line = form.require_line() if "line" in form.options else 1
    return RootNode(line=line, children=form.build_children())


@_register("plain")
def _build_plain(form: _Form) -> PlainNode:
    form.leaf()
    return PlainNode(line=form.require_line(), text=form.string("text"))


@_register("tag")
def _build_tag(form: _Form) -> TagNode:
    return TagNode(
        line=form.require_line(),
        tag_name=form.string("name"),
        script=form.string("script"),
        dynamic_attributes_sources=form.strings("attrs"),
        static_hash_source=form.string("hash", None),
        children=form.build_children(),
    )


@_register("script")
def _build_script(form: _Form) -> ScriptNode:
    return ScriptNode(
        line=form.require_line(),
        text=form.string("text"),
        children=form.build_children(),
    )


@_register("silent-script")
def _build_silent_script(form: _Form) -> SilentScriptNode:
    return SilentScriptNode(
        line=form.require_line(),
        text=form.string("text"),
        children=form.build_children(),
    )


@_register("comment")
def _build_comment(form: _Form) -> CommentNode:
    form.leaf()
    return CommentNode(line=form.require_line(), text=form.string("text"))


@_register("filter")
def _build_filter(form: _Form) -> FilterNode:
    form.leaf()
    if "type" not in form.options:
        raise form.error("missing :type")
    return FilterNode(
        line=form.require_line(),
        filter_type=form.string("type"),
        text=form.string("text"),
    )


# ═══════════════════════════════════════════════════════════════════════
#  Public API
# ═══════════════════════════════════════════════════════════════════════

def load_tree(text: str, *, filename: str = "<string>") -> RootNode:
    """Parse one S-expression document tree.

    Raises
    ------
    TreeLoadError
        If the text is not a single well-formed tree rooted at ``(root ...)``.
    """
    try:
        raw = sexpdata.loads(text, nil=None, true=None, false=None)
    except Exception as exc:
        raise TreeLoadError(
            f"malformed S-expression: {exc}",
            code=HamlxErrorCodes.MALFORMED_SEXP,
            span=SourceSpan(file=filename),
        ) from exc

    tree = _build(raw, filename)
    if not isinstance(tree, RootNode):
        raise TreeLoadError(
            f"document tree must be rooted at (root ...), got ({type(tree).__name__})",
            code=HamlxErrorCodes.UNKNOWN_FORM,
            span=SourceSpan(file=filename, line=tree.line),
        )
    return tree


def load_file(path: Union[str, Path]) -> RootNode:
    """Read and parse a UTF-8 S-expression tree file."""
    p = Path(path)
    return load_tree(p.read_text(encoding="utf-8"), filename=str(p))
