# cminus

Building blocks for a compiler of C-Minus, the small C-like language used in
compiler construction courses. The package has a scanner, a syntax tree,
scoped symbol tables, semantic analysis, an emitter for TM instructions, and a
simulator for TM, the "Tiny Machine" that such compilers target.

## Modules

- `cminus.syntax`: token kinds (`TokenType`) and syntax tree nodes
  (`TreeNode`, with `NodeKind`, `StmtKind`, `ExpKind` and `ExpType`).
  `token_text` gives the listing text for a token. `format_tree` prints a tree
  with every level of children indented by two more spaces.
- `cminus.scanner`: the C-Minus scanner. `Scanner` reads from a text stream.
  `get_token` returns one `Token` (type, lexeme, line number) at a time, and
  iterating over a `Scanner` yields tokens up to and including `ENDFILE`.
  `tokenize(text)` scans a string into a list of tokens.
- `cminus.symtab`: scoped symbol tables (`SymbolTable`, `Scope`, `Symbol`)
  and the function list (`Function`, `Param`). A new `SymbolTable` already
  declares the built-in functions `input` (returns `int`) and `output` (takes
  one `int` named `value`). `format_functions`, `format_scopes` and
  `format_symbols` render the listings.
- `cminus.analyze`: semantic analysis. `Analyzer.build_symtab` names the scope
  of every node and fills a symbol table. `Analyzer.type_check` assigns a type
  to every node in a post-order walk. `analyze(tree, listing, trace)` runs
  both passes and returns the `Analyzer`. Each error is written to the listing
  as a line such as `Error: undeclared variable "x" is used at line 3`, and it
  is also kept in `Analyzer.errors`. Analysis continues after an error.
- `cminus.code`: `CodeEmitter`, which writes numbered TM instructions
  (`emit_ro`, `emit_rm`, `emit_rm_abs`, `comment`) and supports backpatching
  through `skip`, `backup` and `restore`.
- `cminus.tm`: `TinyMachine`, the TM simulator.
- `cminus.diffcheck`: `compare_files`, a line-by-line comparison of two text
  files.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Scanning

```python
from cminus.scanner import tokenize

for token in tokenize("int x; x = x + 1;"):
    print(token.type, token.lexeme, token.lineno)
```

Comments are written `/* ... */`. The reserved words are `if`, `else`,
`while`, `return`, `int` and `void`.

## Analyzing a tree

Build the tree from `TreeNode.stmt(kind, lineno)` and
`TreeNode.exp(kind, lineno)`. Link the nodes through `child` and `sibling`,
then analyze it:

```python
import sys
from cminus.analyze import analyze

analyzer = analyze(tree, sys.stdout, True)
print(analyzer.errors)
```

With tracing on, the listing shows the function list, the scope list and the
symbol table once the table has been built. It also reports when each pass
starts and when type checking ends.

## Running TM programs

```
cminus-tm program.tm
```

If the file name has no extension, `.tm` is added. The simulator reads
commands at its prompt:

| Command         | Effect                                        |
|-----------------|-----------------------------------------------|
| `s(tep <n>`     | execute n (default 1) instructions            |
| `g(o`           | execute until HALT                            |
| `r(egs`         | print the registers                           |
| `i(Mem <b <n>>` | print n instruction locations starting at b   |
| `d(Mem <b <n>>` | print n data locations starting at b          |
| `t(race`        | toggle the instruction trace                  |
| `p(rint`        | toggle the instruction count after `go`       |
| `c(lear`        | reset the machine for a new run               |
| `h(elp`         | list the commands                             |
| `q(uit`         | end the simulation                            |

From Python:

- `TinyMachine.load` reads a program from a string or from lines of text. It
  raises `ProgramError` for a line it cannot read.
- `TinyMachine.step` executes one instruction and returns a `StepResult`.
- `TinyMachine.do_command` runs one command line.
- `TinyMachine.repl` runs the prompt loop on the machine's `stdin` and
  `stdout`.

## Comparing listings

```
cminus-diff expected.txt actual.txt
```

This reports the first line where the two files differ, or that their
lengths differ. It prints nothing when the files match. From Python,
`compare_files` returns a `Difference` or `None`.

## What the package does not do

The package does not parse C-Minus source text into a syntax tree. Trees
have to be built from `TreeNode` objects by hand.

It also does not generate TM code from a tree. `CodeEmitter` writes
instructions, but no pass walks a tree to produce them. As a result, there is
no command that compiles a C-Minus file.