"""C-Minus scanner, syntax tree, symbol tables, semantic analysis, TM instruction emitter, TM simulator and listing comparison."""

__version__ = "0.1.0"

__all__ = ["analyze", "code", "diffcheck", "scanner", "symtab", "syntax", "tm"]