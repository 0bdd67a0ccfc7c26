"""Scoped symbol tables, the function list and their printed listings."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

TABLESIZE = 100
SHIFT = 4


def hash_name(key: str) -> int:
    """Hash a name into a bucket index in ``range(TABLESIZE)``."""
    temp = 0
    for ch in key:
        temp = ((temp << SHIFT) + ord(ch)) % TABLESIZE
    return temp


def _text(value: str | None) -> str:
    return "(null)" if value is None else value


@dataclass
class Symbol:
    """A symbol entry: its declaration data and every line it appears on."""

    name: str
    type: str | None
    kind: str
    scope_name: str
    memloc: int
    lines: list[int] = field(default_factory=list)


@dataclass(eq=False)
class Scope:
    """A named scope holding a chained hash table of symbols."""

    name: str
    parent: Scope | None = None
    _buckets: list[list[Symbol]] = field(
        default_factory=lambda: [[] for _ in range(TABLESIZE)], repr=False
    )

    def insert(
        self,
        name: str,
        type: str | None,
        kind: str,
        scope_name: str,
        lineno: int,
        loc: int,
    ) -> Symbol:
        """Add a symbol, or record another line for one already present.

        The type, kind, scope and memory location are kept from the first
        insertion only.
        """
        bucket = self._buckets[hash_name(name)]
        for symbol in bucket:
            if symbol.name == name:
                symbol.lines.append(lineno)
                return symbol
        symbol = Symbol(name, type, kind, scope_name, loc, [lineno])
        bucket.insert(0, symbol)
        return symbol

    def lookup(self, name: str) -> Symbol | None:
        """Return the symbol declared in this scope under ``name``, if any."""
        for symbol in self._buckets[hash_name(name)]:
            if symbol.name == name:
                return symbol
        return None

    def symbols(self) -> Iterator[Symbol]:
        """Yield the symbols in bucket order, newest first within a bucket."""
        for bucket in self._buckets:
            yield from bucket


@dataclass
class Param:
    """A function parameter's name and type."""

    name: str | None
    type: str | None


@dataclass
class Function:
    """A global function with its return type and parameter list."""

    name: str
    type: str | None
    params: list[Param] = field(default_factory=list)

    @property
    def num_params(self) -> int:
        return len(self.params)


class SymbolTable:
    """All scopes and functions of a program, seeded with input and output."""

    def __init__(self) -> None:
        self.scopes: list[Scope] = [Scope("global")]
        self._functions: dict[str, Function] = {}

        glob = self.scopes[0]
        glob.insert("input", "int", "Function", "global", 0, 0)
        glob.insert("output", "void", "Function", "global", 0, 1)
        self.insert_scope("input", "global")
        output_scope = self.insert_scope("output", "global")
        output_scope.insert("value", "int", "Variable", "output", 0, 2)

        self._functions["input"] = Function("input", "int")
        self._functions["output"] = Function(
            "output", "void", [Param("value", "int")]
        )

    @property
    def functions(self) -> list[Function]:
        return list(self._functions.values())

    def insert_scope(self, name: str, parent_name: str) -> Scope:
        """Append a new scope whose parent is the last scope called ``parent_name``."""
        parent = None
        for scope in self.scopes:
            if scope.name == parent_name:
                parent = scope
        scope = Scope(name, parent)
        self.scopes.append(scope)
        return scope

    def lookup_scope(self, name: str) -> Scope | None:
        """Return the first scope called ``name``, or None."""
        return next((s for s in self.scopes if s.name == name), None)

    def insert_function(
        self,
        name: str,
        type: str | None,
        param_name: str | None,
        param_type: str | None,
    ) -> Function:
        """Add a function, or append a parameter to one already listed."""
        function = self._functions.get(name)
        if function is None:
            function = Function(name, type)
            self._functions[name] = function
        else:
            function.params.append(Param(param_name, param_type))
        return function

    def lookup_function(self, name: str) -> Function | None:
        """Return the function called ``name``, or None."""
        return self._functions.get(name)

    def find_symbol(self, name: str, scope_name: str) -> Symbol | None:
        """Look ``name`` up in the named scope and then each enclosing scope."""
        scope = self.lookup_scope(scope_name)
        while scope is not None:
            symbol = scope.lookup(name)
            if symbol is not None:
                return symbol
            scope = scope.parent
        return None

    def format_functions(self) -> str:
        """Render the function list as a table."""
        parts = [
            "\n< Functions >\n",
            "Function Name   Return Type     Param Number    Param Types\n",
            "--------------  --------------  --------------  --------------\n",
        ]
        for function in self._functions.values():
            parts.append(f"{function.name:<14}  ")
            parts.append(f"{_text(function.type):<14}  ")
            parts.append(f"{function.num_params:<12d}  ")
            parts.extend(f"{_text(p.type):>5} " for p in function.params)
            parts.append("\n")
        parts.append("\n")
        return "".join(parts)

    def format_scopes(self) -> str:
        """Render the scope list with each scope's parent."""
        parts = [
            "\n< Scopes >\n",
            "Scope Name      Parent Scope\n",
            "--------------  --------------\n",
        ]
        for scope in self.scopes:
            parent = scope.parent.name if scope.parent is not None else "NULL"
            parts.append(f"{scope.name:<14}  {parent:<14}  \n")
        parts.append("\n")
        return "".join(parts)

    def format_symbols(self) -> str:
        """Render every symbol of every scope, with its line numbers."""
        parts = [
            "\n< Symbol Table >\n",
            "Symbol Name     Symbol Kind     Symbol Type     "
            "Scope Name      Location    Line Numbers\n",
            "--------------  --------------  --------------  "
            "--------------  ----------  -----------------\n",
        ]
        for scope in self.scopes:
            for symbol in scope.symbols():
                parts.append(f"{symbol.name:<14}  ")
                parts.append(f"{symbol.kind:<14}  ")
                parts.append(f"{_text(symbol.type):<14}  ")
                parts.append(f"{symbol.scope_name:<14}  ")
                parts.append(f"{symbol.memloc:<9d}  ")
                parts.extend(f"{line:4d} " for line in symbol.lines)
                parts.append("\n")
        return "".join(parts)