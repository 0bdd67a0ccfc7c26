"""Emission of TM instructions with backpatching support."""

from __future__ import annotations

import sys
from typing import TextIO

PC = 7
MP = 6
GP = 5
AC = 0
AC1 = 1


class CodeEmitter:
    """Writes numbered TM instructions to a text stream."""

    def __init__(self, out: TextIO | None = None, trace: bool = False) -> None:
        self.out = out if out is not None else sys.stdout
        self.trace = trace
        self._loc = 0
        self._high = 0

    @property
    def location(self) -> int:
        return self._loc

    @property
    def high_location(self) -> int:
        return self._high

    def _finish(self, comment: str) -> None:
        if self.trace:
            self.out.write(f"\t{comment}")
        self.out.write("\n")
        self._high = max(self._high, self._loc)

    def comment(self, text: str) -> None:
        """Write a comment line when tracing is on."""
        if self.trace:
            self.out.write(f"* {text}\n")

    def emit_ro(self, op: str, r: int, s: int, t: int, comment: str = "") -> None:
        """Emit a register-only instruction."""
        self.out.write(f"{self._loc:3d}:  {op:>5}  {r},{s},{t} ")
        self._loc += 1
        self._finish(comment)

    def emit_rm(self, op: str, r: int, d: int, s: int, comment: str = "") -> None:
        """Emit a register-to-memory instruction with offset ``d`` from register ``s``."""
        self.out.write(f"{self._loc:3d}:  {op:>5}  {r},{d}({s}) ")
        self._loc += 1
        self._finish(comment)

    def skip(self, how_many: int) -> int:
        """Reserve ``how_many`` locations and return the location before the skip."""
        loc = self._loc
        self._loc += how_many
        self._high = max(self._high, self._loc)
        return loc

    def backup(self, loc: int) -> None:
        """Move back to a previously skipped location."""
        if loc > self._high:
            self.comment("BUG in emitBackup")
        self._loc = loc

    def restore(self) -> None:
        """Return to the highest location not yet emitted."""
        self._loc = self._high

    def emit_rm_abs(self, op: str, r: int, a: int, comment: str = "") -> None:
        """Emit a register-to-memory instruction addressing ``a`` relative to pc."""
        self.out.write(
            f"{self._loc:3d}:  {op:>5}  {r},{a - (self._loc + 1)}({PC}) "
        )
        self._loc += 1
        self._finish(comment)