"""Tern Language Server package.

This package provides:
- A pygls-based Language Server for the Tern scripting language.
- A static indexer that parses documents for declarations without evaluation.

Note: The LSP does not evaluate user buffers; diagnostics come from the lexer
and parser alone.
"""

__all__ = [
    "server",
    "indexer",
]
