"""Tokens, syntax-tree nodes and their textual listing."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum, auto

MAXCHILDREN = 3
MAXLENSCPNAME = 50


class TokenType(Enum):
    """Kinds of token produced by the scanner."""

    ENDFILE = auto()
    ERROR = auto()
    IF = auto()
    ELSE = auto()
    WHILE = auto()
    RETURN = auto()
    INT = auto()
    VOID = auto()
    ID = auto()
    NUM = auto()
    ASSIGN = auto()
    EQ = auto()
    NE = auto()
    LT = auto()
    LE = auto()
    GT = auto()
    GE = auto()
    PLUS = auto()
    MINUS = auto()
    TIMES = auto()
    OVER = auto()
    LPAREN = auto()
    RPAREN = auto()
    LBRACE = auto()
    RBRACE = auto()
    LCURLY = auto()
    RCURLY = auto()
    SEMI = auto()
    COMMA = auto()


class NodeKind(Enum):
    STMT = auto()
    EXP = auto()


class StmtKind(Enum):
    IF = auto()
    IF_ELSE = auto()
    WHILE = auto()
    RETURN = auto()
    ASSIGN = auto()
    VAR_DECL = auto()
    FUN_DECL = auto()
    COMPOUND = auto()


class ExpKind(Enum):
    OP = auto()
    TYPE = auto()
    CONST = auto()
    ID = auto()
    PARAM = auto()
    VAR = auto()
    CALL = auto()


class ExpType(Enum):
    """Types assigned to nodes during type checking."""

    VOID = auto()
    VOID_ARRAY = auto()
    INTEGER = auto()
    INTEGER_ARRAY = auto()
    UNDETERMINED = auto()


RESERVED_WORDS = frozenset(
    {
        TokenType.IF,
        TokenType.ELSE,
        TokenType.WHILE,
        TokenType.RETURN,
        TokenType.INT,
        TokenType.VOID,
    }
)

_SYMBOLS = {
    TokenType.ASSIGN: "=",
    TokenType.EQ: "==",
    TokenType.NE: "!=",
    TokenType.LT: "<",
    TokenType.LE: "<=",
    TokenType.GT: ">",
    TokenType.GE: ">=",
    TokenType.PLUS: "+",
    TokenType.MINUS: "-",
    TokenType.TIMES: "*",
    TokenType.OVER: "/",
    TokenType.LPAREN: "(",
    TokenType.RPAREN: ")",
    TokenType.LBRACE: "[",
    TokenType.RBRACE: "]",
    TokenType.LCURLY: "{",
    TokenType.RCURLY: "}",
    TokenType.SEMI: ";",
    TokenType.COMMA: ",",
}


@dataclass(eq=False)
class TreeNode:
    """A node of the syntax tree, either a statement or an expression."""

    nodekind: NodeKind
    kind: StmtKind | ExpKind
    lineno: int = 0
    child: list[TreeNode | None] = field(
        default_factory=lambda: [None] * MAXCHILDREN, repr=False
    )
    sibling: TreeNode | None = field(default=None, repr=False)
    parent: TreeNode | None = field(default=None, repr=False)
    op: TokenType | None = None
    val: int = 0
    name: str | None = None
    vartype: str | None = None
    scope_name: str = "global"
    is_child_of_fun_decl: bool = False
    type: ExpType = ExpType.VOID

    @classmethod
    def stmt(cls, kind: StmtKind, lineno: int = 0) -> TreeNode:
        """Create a statement node."""
        return cls(NodeKind.STMT, kind, lineno)

    @classmethod
    def exp(cls, kind: ExpKind, lineno: int = 0) -> TreeNode:
        """Create an expression node."""
        return cls(NodeKind.EXP, kind, lineno)

    def siblings(self) -> Iterator[TreeNode]:
        """Yield this node followed by every node in its sibling chain."""
        node: TreeNode | None = self
        while node is not None:
            yield node
            node = node.sibling


def token_text(token: TokenType, lexeme: str) -> str:
    """Describe a token and its lexeme as one listing line (no newline)."""
    if token in RESERVED_WORDS:
        return f"reserved word: {lexeme}"
    if token in _SYMBOLS:
        return _SYMBOLS[token]
    if token is TokenType.ID:
        return f"ID, name= {lexeme}"
    if token is TokenType.NUM:
        return f"NUM, val= {lexeme}"
    if token is TokenType.ENDFILE:
        return "EOF"
    if token is TokenType.ERROR:
        return f"ERROR: {lexeme}"
    return f"Unknown token: {token}"


def _describe_stmt(node: TreeNode) -> str:
    kind = node.kind
    if kind is StmtKind.IF:
        return "If Statement:"
    if kind is StmtKind.IF_ELSE:
        return "If-Else Statement:"
    if kind is StmtKind.WHILE:
        return "While Statement:"
    if kind is StmtKind.RETURN:
        if node.child[0] is None:
            return "Non-value Return Statement"
        return "Return Statement:"
    if kind is StmtKind.ASSIGN:
        return "Assign:"
    if kind is StmtKind.VAR_DECL:
        return f"Variable Declaration: name = {node.name}, type = {node.vartype}"
    if kind is StmtKind.FUN_DECL:
        return (
            f"Function Declaration: name = {node.name}, "
            f"return type = {node.vartype}"
        )
    if kind is StmtKind.COMPOUND:
        return "Compound Statement:"
    return "Unknown ExpNode kind"


def _describe_exp(node: TreeNode) -> str:
    kind = node.kind
    if kind is ExpKind.OP:
        return "Op: " + token_text(node.op, "")
    if kind is ExpKind.CONST:
        return f"Const: {node.val}"
    if kind is ExpKind.ID:
        return f"Id: {node.name}"
    if kind is ExpKind.PARAM:
        if node.vartype is None:
            return "Void Parameter"
        return f"Parameter: name = {node.name}, type = {node.vartype}"
    if kind is ExpKind.VAR:
        return f"Variable: name = {node.name}"
    if kind is ExpKind.CALL:
        return f"Call: function name = {node.name}"
    if kind is ExpKind.TYPE:
        return f"{node.vartype}"
    return "Unknown ExpNode kind"


def _tree_lines(tree: TreeNode | None, indent: int) -> Iterator[str]:
    if tree is None:
        return
    for node in tree.siblings():
        if node.nodekind is NodeKind.STMT:
            text = _describe_stmt(node)
        elif node.nodekind is NodeKind.EXP:
            text = _describe_exp(node)
        else:
            text = "Unknown node kind"
        yield " " * indent + text
        for child in node.child:
            yield from _tree_lines(child, indent + 2)


def format_tree(tree: TreeNode | None) -> str:
    """Render a syntax tree, indenting each level of children by two spaces."""
    return "".join(line + "\n" for line in _tree_lines(tree, 2))