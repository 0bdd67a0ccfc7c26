"""Semantic analysis: scope naming, symbol table construction and type checking."""

from __future__ import annotations

import sys
from collections.abc import Callable
from typing import TextIO

from .symtab import Scope, Symbol, SymbolTable
from .syntax import ExpKind, ExpType, NodeKind, StmtKind, TreeNode

_FIRST_LOCATION = 3
_VOID_TYPES = ("void", "void[]")
_CONDITIONAL = (StmtKind.IF, StmtKind.IF_ELSE, StmtKind.WHILE)

_Visitor = Callable[[TreeNode], None]


def _visit(
    tree: TreeNode | None,
    pre: _Visitor | None = None,
    post: _Visitor | None = None,
) -> None:
    """Walk a tree, calling ``pre`` before and ``post`` after each node's children."""
    if tree is None:
        return
    for node in tree.siblings():
        if pre is not None:
            pre(node)
        for child in node.child:
            _visit(child, pre, post)
        if post is not None:
            post(node)


def _number_text(num: int) -> str:
    return str(num) if num >= 0 else ""


def _function_of(scope_name: str) -> str:
    """Name of the function a (possibly nested) scope belongs to."""
    return scope_name.split(".", 1)[0]


def _propagate(node: TreeNode, inner_scope: str) -> None:
    for child in node.child:
        if child is not None:
            child.scope_name = inner_scope
            child.parent = node
    if node.sibling is not None:
        node.sibling.scope_name = node.scope_name
        node.sibling.parent = node.parent


class Analyzer:
    """Builds the symbol table of a syntax tree and checks its types.

    Every error found is written as a line to ``listing`` and kept in
    ``errors``; analysis carries on after an error.
    """

    def __init__(self, listing: TextIO | None = None, trace: bool = False) -> None:
        self.listing = listing if listing is not None else sys.stdout
        self.trace = trace
        self.table = SymbolTable()
        self.errors: list[str] = []
        self._location = _FIRST_LOCATION

    # -- helpers -----------------------------------------------------------

    def _error(self, message: str) -> None:
        self.errors.append(message)
        self.listing.write(message + "\n")

    def _next_location(self) -> int:
        loc = self._location
        self._location += 1
        return loc

    # -- scope naming ------------------------------------------------------

    def _assign_scopes(self, tree: TreeNode | None, nth: int) -> None:
        if tree is None:
            return
        for node in tree.siblings():
            if node.nodekind is NodeKind.STMT:
                kind = node.kind
                if kind in _CONDITIONAL:
                    nth += 1
                if kind is StmtKind.FUN_DECL:
                    _propagate(node, node.name or "")
                elif kind is StmtKind.COMPOUND:
                    if node.parent is None or node.parent.kind is not StmtKind.COMPOUND:
                        nth -= 1
                    inner = node.scope_name
                    if not node.is_child_of_fun_decl:
                        inner = f"{inner}.{_number_text(nth)}"
                    _propagate(node, inner)
                    nth += 1
                else:
                    _propagate(node, node.scope_name)
            else:
                _propagate(node, node.scope_name)
            for child in node.child:
                self._assign_scopes(child, nth)

    # -- symbol insertion --------------------------------------------------

    def _report_redefined(self, node: TreeNode, symbol: Symbol) -> None:
        lines = "".join(f" {n}" for n in symbol.lines)
        self._error(
            f'Error: Symbol "{node.name}" is redefined at line {node.lineno} '
            f"(already defined at line{lines})"
        )

    def _declare(self, scope: Scope, node: TreeNode, kind: str) -> bool:
        """Insert a declaration; return True when it is a fresh name."""
        existing = scope.lookup(node.name)
        if existing is not None:
            self._report_redefined(node, existing)
            scope.insert(node.name, node.vartype, kind, node.scope_name, node.lineno, 0)
            return False
        return True

    def _resolve_use(self, scope: Scope, node: TreeNode, kind: str) -> bool:
        """Record a use of a name in the nearest scope declaring it."""
        current: Scope | None = scope
        while current is not None:
            if current.lookup(node.name) is not None:
                current.insert(
                    node.name, node.vartype, kind, node.scope_name, node.lineno, 0
                )
                return True
            current = current.parent
        scope.insert(
            node.name,
            "undetermined",
            kind,
            node.scope_name,
            node.lineno,
            self._next_location(),
        )
        return False

    def _insert_symbol(self, node: TreeNode) -> None:
        table = self.table
        scope = table.lookup_scope(node.scope_name)
        if scope is None:
            parent_name = node.parent.scope_name if node.parent is not None else None
            scope = table.insert_scope(node.scope_name, parent_name)

        kind = node.kind
        if kind is StmtKind.FUN_DECL:
            if self._declare(scope, node, "Function"):
                scope.insert(
                    node.name, node.vartype, "Function", node.scope_name,
                    node.lineno, self._next_location(),
                )
                table.insert_function(node.name, node.vartype, None, None)
        elif kind is StmtKind.VAR_DECL:
            if self._declare(scope, node, "Variable"):
                if node.vartype in _VOID_TYPES:
                    self._error(
                        "Error: The void-type variable is declared at line "
                        f'{node.lineno} (name : "{node.name}")'
                    )
                    node.type = ExpType.UNDETERMINED
                scope.insert(
                    node.name, node.vartype, "Variable", node.scope_name,
                    node.lineno, self._next_location(),
                )
        elif kind is ExpKind.PARAM:
            if node.vartype is None:
                return
            if self._declare(scope, node, "Variable"):
                scope.insert(
                    node.name, node.vartype, "Variable", node.scope_name,
                    node.lineno, self._next_location(),
                )
                table.insert_function(node.scope_name, None, node.name, node.vartype)
        elif kind is ExpKind.VAR:
            if not self._resolve_use(scope, node, "Variable"):
                self._error(
                    f'Error: undeclared variable "{node.name}" is used at line {node.lineno}'
                )
        elif kind is ExpKind.CALL:
            if not self._resolve_use(scope, node, "Function"):
                table.insert_function(node.name, "undetermined", None, None)
                self._error(
                    f'Error: undeclared function "{node.name}" is used at line {node.lineno}'
                )

    def build_symtab(self, tree: TreeNode | None) -> SymbolTable:
        """Name every scope in ``tree`` and fill a fresh symbol table from it."""
        self.table = SymbolTable()
        self._assign_scopes(tree, 0)
        _visit(tree, pre=self._insert_symbol)
        if self.trace:
            self.listing.write(self.table.format_functions())
            self.listing.write(self.table.format_scopes())
            self.listing.write(self.table.format_symbols())
        return self.table

    # -- type checking -----------------------------------------------------

    def _declared_type(self, node: TreeNode) -> str | None:
        symbol = self.table.find_symbol(node.name, node.scope_name)
        return symbol.type if symbol is not None else None

    def _is_integer(self, node: TreeNode) -> bool:
        if node.type is ExpType.INTEGER:
            return True
        if node.kind in (ExpKind.VAR, ExpKind.CALL):
            return self._declared_type(node) == "int"
        return False

    def _is_integer_array(self, node: TreeNode) -> bool:
        if node.type is ExpType.INTEGER_ARRAY:
            return True
        if node.kind in (ExpKind.VAR, ExpKind.CALL):
            return self._declared_type(node) == "int[]"
        return False

    def _is_void_kind(self, node: TreeNode) -> bool:
        if node.kind in (ExpKind.VAR, ExpKind.CALL):
            return self._declared_type(node) in _VOID_TYPES
        return node.type in (ExpType.VOID, ExpType.VOID_ARRAY)

    def _invalid_call(self, node: TreeNode) -> None:
        self._error(
            f'Error: Invalid function call at line {node.lineno} (name : "{node.name}")'
        )

    def _check_call(self, node: TreeNode) -> None:
        symbol = self.table.find_symbol(node.name, node.scope_name)
        function = self.table.lookup_function(node.name)
        if symbol is None or symbol.type == "undetermined" or function is None:
            self._invalid_call(node)
            node.type = ExpType.UNDETERMINED
            return
        params = iter(function.params)
        num_args = 0
        args = node.child[0].siblings() if node.child[0] is not None else ()
        for arg in args:
            param = next(params, None)
            matches = param is not None and (
                (arg.type is ExpType.INTEGER and param.type == "int")
                or (arg.type is ExpType.INTEGER_ARRAY and param.type == "int[]")
            )
            if not matches:
                self._invalid_call(node)
                node.type = ExpType.INTEGER
                return
            num_args += 1
        if num_args != function.num_params:
            self._invalid_call(node)
            node.type = ExpType.INTEGER
        node.type = ExpType.INTEGER if function.type == "int" else ExpType.VOID

    def _check_var(self, node: TreeNode) -> None:
        index = node.child[0]
        if self._is_integer(node):
            if index is not None:
                self._error(
                    f"Error: Invalid array indexing at line {node.lineno} "
                    f'(name : "{node.name}"). indexing can only allowed for int[] variables'
                )
                node.type = ExpType.UNDETERMINED
            else:
                node.type = ExpType.INTEGER
        elif self._is_integer_array(node):
            if index is None:
                node.type = ExpType.INTEGER_ARRAY
            else:
                if not self._is_integer(index):
                    self._error(
                        f"Error: Invalid array indexing at line {node.lineno} "
                        f'(name : "{node.name}"). indicies should be integer'
                    )
                node.type = ExpType.INTEGER

    def _check_return(self, node: TreeNode) -> None:
        function = self.table.lookup_function(_function_of(node.scope_name))
        ftype = function.type if function is not None else None
        value = node.child[0]
        if (value is None and ftype != "void") or (
            value is not None and (value.type is not ExpType.INTEGER or ftype != "int")
        ):
            self._error(f"Error: Invalid return at line {node.lineno}")
            node.type = ExpType.UNDETERMINED
            return
        node.type = ExpType.VOID if value is None else ExpType.INTEGER

    def _check_assign(self, node: TreeNode) -> None:
        lhs, rhs = node.child[0], node.child[1]
        if lhs is not None and rhs is not None:
            if lhs.type is ExpType.INTEGER and rhs.type is ExpType.INTEGER:
                node.type = ExpType.INTEGER
                return
            if lhs.type is ExpType.INTEGER_ARRAY and rhs.type is ExpType.INTEGER_ARRAY:
                node.type = ExpType.INTEGER_ARRAY
                return
        self._error(f"Error: invalid assignment at line {node.lineno}")
        node.type = ExpType.UNDETERMINED

    def _check_node(self, node: TreeNode) -> None:
        kind = node.kind
        if kind is ExpKind.OP:
            left, right = node.child[0], node.child[1]
            if left.type is not ExpType.INTEGER or right.type is not ExpType.INTEGER:
                self._error(f"Error: invalid operation at line {left.lineno}")
                node.type = ExpType.UNDETERMINED
            else:
                node.type = ExpType.INTEGER
        elif kind is ExpKind.PARAM:
            if node.vartype is not None and self._is_void_kind(node):
                self._error(
                    "Error: The void-type variable is declared at line "
                    f'{node.lineno} (name : "{node.name}")'
                )
                node.type = ExpType.VOID
        elif kind is ExpKind.VAR:
            self._check_var(node)
        elif kind is ExpKind.CALL:
            self._check_call(node)
        elif kind is ExpKind.CONST:
            node.type = ExpType.INTEGER
        elif kind in _CONDITIONAL:
            condition = node.child[0]
            if condition is None or condition.type is not ExpType.INTEGER:
                body = node.child[1]
                line = body.lineno if body is not None else node.lineno
                self._error(f"Error: invalid condition at line {line}")
                node.type = ExpType.UNDETERMINED
            else:
                node.type = ExpType.VOID
        elif kind is StmtKind.RETURN:
            self._check_return(node)
        elif kind is StmtKind.ASSIGN:
            self._check_assign(node)
        elif kind in (StmtKind.VAR_DECL, StmtKind.FUN_DECL, StmtKind.COMPOUND):
            node.type = ExpType.VOID

    def type_check(self, tree: TreeNode | None) -> None:
        """Assign a type to every node of ``tree``, children before parents."""
        _visit(tree, post=self._check_node)


def analyze(
    tree: TreeNode | None, listing: TextIO | None = None, trace: bool = False
) -> Analyzer:
    """Build the symbol table of ``tree`` and type-check it."""
    analyzer = Analyzer(listing, trace)
    if trace:
        analyzer.listing.write("\nBuilding Symbol Table...\n")
    analyzer.build_symtab(tree)
    if trace:
        analyzer.listing.write("\nChecking Types...\n")
    analyzer.type_check(tree)
    if trace:
        analyzer.listing.write("\nType Checking Finished\n")
    return analyzer