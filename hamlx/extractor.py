#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
hamlx/extractor.py
==================

Extract the Ruby embedded in a HAML document tree into a standalone
script a Ruby linter can parse, plus a map from every line of that
script back to the template line it came from.  This:

    - if signed_in?(viewer)
      %span Stuff
      = link_to 'Sign Out', sign_out_path
    - else
      .some-class{ class: my_method }= my_method
      = link_to 'Sign In', sign_in_path

becomes roughly:

    if signed_in?(viewer)
      _hamlx_puts_0 # span
      _hamlx_puts_1
      _hamlx_puts_2 # span/
      link_to 'Sign Out', sign_out_path
    else
      {}.merge({ class: my_method })
      _hamlx_puts_3 # div
      my_method
      _hamlx_puts_4 # div/
      link_to 'Sign In', sign_in_path
    end

The result is not meant to run.  It keeps variable definitions and uses
inside the same control-flow shape, so unused-variable and similar
checks still make sense, and it avoids artifacts (unterminated blocks,
identical branches, stray literals) that a linter would flag.

Emission rules
--------------
* plain text      → unique placeholder call, never the text itself
* tag             → attribute hashes, ``<name>`` placeholder, inline
                    script, children, ``<name>/`` placeholder
* script / silent → statement verbatim; block openers get an indented
                    body and a synthetic ``end``
* comment         → Ruby line comments, one per template line
* filter          → host-language filters verbatim line by line,
                    others a placeholder plus their interpolations
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, FrozenSet, List, Optional, Union

from hamlx.errors import ConfigError, HamlxErrorCodes, SourceSpan, StructuralError
from hamlx.interpolation import extract_interpolated_values
from hamlx.keywords import BlockKind, classify, is_anonymous_block, is_mid_block_keyword
from hamlx.nodes import (
    CommentNode,
    DocumentNode,
    FilterNode,
    PlainNode,
    RootNode,
    ScriptNode,
    TagNode,
)
from hamlx.source_map import ExtractionResult, SourceMapTable
from hamlx.static_hash import collapse_newlines, reconstruct_static_hash
from hamlx.visitor import Descend, TreeVisitor

__all__ = ["ExtractorConfig", "RubyExtractor", "extract"]

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════
# CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class ExtractorConfig:
    """Tuning knobs for :class:`RubyExtractor`.

    ``is_host_filter``, when set, replaces the ``host_filter_types``
    lookup: it decides which filters hold Ruby to copy verbatim.
    """
    host_filter_types: FrozenSet[str] = frozenset({"ruby"})
    is_host_filter: Optional[Callable[[str], bool]] = None
    indent_width: int = 2
    placeholder_prefix: str = "_hamlx_puts_"
    merge_template: str = "{{}}.merge({code})"
    terminator: str = "end"

    def validate(self) -> List[str]:
        """Return a list of problems (empty if valid)."""
        problems: List[str] = []
        if self.indent_width < 0:
            problems.append("indent_width must be non-negative")
        if not self.placeholder_prefix.isidentifier():
            problems.append(
                f"placeholder_prefix {self.placeholder_prefix!r} is not an identifier"
            )
        if "{code}" not in self.merge_template:
            problems.append("merge_template must contain '{code}'")
        else:
            try:
                self.merge_template.format(code="x")
            except (KeyError, IndexError, ValueError) as exc:
                problems.append(
                    f"merge_template {self.merge_template!r} is not a valid format "
                    f"string (literal braces must be doubled): {exc!r}"
                )
        if not self.terminator.strip():
            problems.append("terminator must not be blank")
        return problems

    def check(self) -> "ExtractorConfig":
        """Raise :class:`ConfigError` if :meth:`validate` finds problems."""
        problems = self.validate()
        if problems:
            raise ConfigError("invalid extractor configuration: " + "; ".join(problems))
        return self

    def host_filter(self, filter_type: str) -> bool:
        if self.is_host_filter is not None:
            return self.is_host_filter(filter_type)
        return filter_type in self.host_filter_types


# ═══════════════════════════════════════════════════════════════════════════
# EXTRACTOR
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class _ExtractorState:
    """Per-extraction scratch state; never shared between extractions."""
    lines: List[str] = field(default_factory=list)
    source_map: SourceMapTable = field(default_factory=SourceMapTable)
    indent_level: int = 0
    output_count: int = 0


class RubyExtractor(TreeVisitor):
    """Turns a HAML document tree into an :class:`ExtractionResult`.

    One instance may be reused for any number of sequential extractions,
    but a call to :meth:`extract` must not be nested inside another on
    the same instance.
    """

    strict = True

    def __init__(
        self,
        config: Optional[ExtractorConfig] = None,
        filename: str = "",
    ) -> None:
        super().__init__(filename)
        self.config = (config or ExtractorConfig()).check()
        self._state: Optional[_ExtractorState] = None
        self._tree: Optional[DocumentNode] = None

    def extract(self, tree: DocumentNode) -> ExtractionResult:
        """Extract Ruby from *tree*.

        Raises :class:`StructuralError` if the tree cannot be walked; no
        partial result is produced in that case.
        """
        if self._state is not None:
            raise StructuralError(
                "extraction already in progress on this extractor",
                code=HamlxErrorCodes.REENTRANT_EXTRACTION,
                span=SourceSpan.from_node(tree, self.filename),
            )

        self._state = _ExtractorState()
        self._tree = tree
        try:
            self.visit(tree)
            state = self._state
            result = ExtractionResult(
                script="\n".join(state.lines),
                line_map=state.source_map.to_dict(),
            )
        finally:
            self._state = None
            self._tree = None

        logger.debug(
            "extracted %d line(s) from %s",
            len(result.line_map), self.filename or "<tree>",
        )
        return result

    # --- Emission rules -------------------------------------------------

    def visit_root(self, node: RootNode, descend: Descend) -> None:
        # Only the top of the tree may reset state.
        if node is not self._tree:
            raise StructuralError(
                "root node below the top of the document tree",
                code=HamlxErrorCodes.INVALID_CHILDREN,
                span=SourceSpan.from_node(node, self.filename),
            )
        self._state = _ExtractorState()
        descend()

    def visit_plain(self, node: PlainNode, descend: Descend) -> None:
        # Template text is never copied: quote style and non-ASCII checks
        # would fire on prose that is not code.
        self._add_placeholder(node)

    def visit_tag(self, node: TagNode, descend: Descend) -> None:
        # Attribute code is wrapped in a merge call so hash literals and
        # method calls come out as the same kind of expression, and so
        # variables used only in attributes still count as used.
        for attributes_code in node.dynamic_attributes_sources:
            attributes_code = collapse_newlines(attributes_code).strip()
            self._add_line(
                self.config.merge_template.format(code=attributes_code), node
            )

        static_hash = reconstruct_static_hash(node)
        if static_hash is not None:
            self._add_line(static_hash, node)

        self._add_placeholder(node, node.tag_name)

        code = node.script.strip()
        if code:
            self._add_line(code, node)

        descend()

    def after_visit_tag(self, node: TagNode) -> None:
        self._add_placeholder(node, f"{node.tag_name}/")

    def visit_script(self, node: ScriptNode, descend: Descend) -> None:
        code = node.text.strip()
        self._add_line(code, node)

        kind = classify(code)
        start_block = is_anonymous_block(code) or kind is BlockKind.OPENER
        if kind is BlockKind.NEITHER and not start_block:
            logger.debug(
                "%s: no block keyword in %r [%s]",
                SourceSpan.from_node(node, self.filename), code,
                HamlxErrorCodes.CLASSIFICATION_AMBIGUITY,
            )

        state = self._state
        if start_block:
            state.indent_level += 1

        descend()

        if start_block:
            state.indent_level -= 1
            self._add_line(self.config.terminator, node)

    visit_silent_script = visit_script

    def visit_haml_comment(self, node: CommentNode, descend: Descend) -> None:
        # Lines that already start with whitespace keep it; others get a
        # space after the marker so the comment style check passes.
        first, *rest = node.text.split("\n")
        comment_lines = [f"#{first}"]
        for line in rest:
            if not line or line[0].isspace():
                comment_lines.append(f"#{line}")
            else:
                comment_lines.append(f"# {line}")
        self._add_line("\n".join(comment_lines), node)

    def visit_filter(self, node: FilterNode, descend: Descend) -> None:
        if self.config.host_filter(node.filter_type):
            if not node.text:
                return
            lines = node.text.split("\n")
            if node.text.endswith("\n"):
                lines.pop()
            for index, line in enumerate(lines):
                self._add_line(line, node.line + index + 1, discard_blank=False)
            return

        self._add_placeholder(node, f":{node.filter_type}")
        for interpolated_code, line in extract_interpolated_values(node.text):
            self._add_line(interpolated_code, node.line + line)

    # --- Line bookkeeping -----------------------------------------------

    def _add_placeholder(
        self, node: DocumentNode, annotation: Optional[str] = None
    ) -> None:
        """Emit a uniquely numbered dummy call.

        Unique names keep identical-branch checks quiet when two branches
        only differ in markup.
        """
        state = self._state
        suffix = f" # {annotation}" if annotation is not None else ""
        self._add_line(
            f"{self.config.placeholder_prefix}{state.output_count}{suffix}", node
        )
        state.output_count += 1

    def _add_line(
        self,
        code: str,
        origin: Union[DocumentNode, int],
        discard_blank: bool = True,
    ) -> None:
        if not code and discard_blank:
            return

        state = self._state
        indent_level = state.indent_level

        if isinstance(origin, int):
            original_line = origin
        else:
            original_line = origin.line
            # Mid-block keywords are children of their opener, one level
            # too deep.  Raw filter lines keep their own layout.
            if is_mid_block_keyword(code):
                indent_level -= 1

        indent = " " * (self.config.indent_width * max(indent_level, 0))
        code_lines = code.split("\n")
        state.lines.extend(
            indent + line if line else line for line in code_lines
        )
        state.source_map.append(original_line, len(code_lines))


def extract(
    tree: DocumentNode,
    config: Optional[ExtractorConfig] = None,
    filename: str = "",
) -> ExtractionResult:
    """Extract Ruby from *tree* with a fresh :class:`RubyExtractor`."""
    return RubyExtractor(config, filename=filename).extract(tree)
