"""hamlx — extract lintable Ruby from HAML document trees.

Turns the Ruby embedded in a parsed HAML template into a standalone
script a Ruby linter can check, together with a map from every line of
that script back to the template line it came from.

Submodules
----------
nodes
    Document tree node types and the accessor protocol.
keywords
    Block keyword classification (openers, continuations).
extractor
    ``RubyExtractor`` and ``ExtractorConfig``.
source_map
    ``SourceMapTable`` and the ``ExtractionResult`` value.
loader
    S-expression document tree loader.
errors
    Error codes and the ``HamlxError`` hierarchy.

Usage
-----
Programmatic::

    from hamlx.loader import load_tree
    from hamlx.extractor import extract

    result = extract(load_tree('(root (silent-script :line 1 :text "if x"))'))
    result.script          # 'if x\\nend'
    result.line_map        # {1: 1, 2: 1}

Command-line::

    python -m hamlx extract page.haml.sexp --format json
"""

from __future__ import annotations

__version__: str = "0.1.0"
__all__: list[str] = [
    "__version__",
    "errors",
    "extractor",
    "keywords",
    "loader",
    "nodes",
    "source_map",
]
