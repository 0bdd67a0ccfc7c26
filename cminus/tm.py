"""The TM ("Tiny Machine") simulator: program loader, interpreter and command loop."""

from __future__ import annotations

import operator
import sys
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum, IntEnum, auto
from typing import TextIO

IADDR_SIZE = 1024
DADDR_SIZE = 1024
NO_REGS = 8
PC_REG = 7
WORDSIZE = 20

_DIGITS = frozenset("0123456789")

_HELP = (
    "Commands are:\n"
    "   s(tep <n>      Execute n (default 1) TM instructions\n"
    "   g(o            Execute TM instructions until HALT\n"
    "   r(egs          Print the contents of the registers\n"
    "   i(Mem <b <n>>  Print n iMem locations starting at b\n"
    "   d(Mem <b <n>>  Print n dMem locations starting at b\n"
    "   t(race         Toggle instruction trace\n"
    "   p(rint         Toggle print of total instructions executed ('go' only)\n"
    "   c(lear         Reset simulator for new execution of program\n"
    "   h(elp          Cause this list of commands to be printed\n"
    "   q(uit          Terminate the simulation\n"
)


class _OpClass(Enum):
    RR = auto()  # registers r, s, t
    RM = auto()  # register r, memory d+reg(s)
    RA = auto()  # register r, address d+reg(s)


class OpCode(IntEnum):
    """TM opcodes; the ``*_LIM`` members mark the end of each class."""

    HALT = 0
    IN = 1
    OUT = 2
    ADD = 3
    SUB = 4
    MUL = 5
    DIV = 6
    RR_LIM = 7
    LD = 8
    ST = 9
    RM_LIM = 10
    LDA = 11
    LDC = 12
    JLT = 13
    JLE = 14
    JGT = 15
    JGE = 16
    JEQ = 17
    JNE = 18
    RA_LIM = 19

    @property
    def is_limit(self) -> bool:
        return self in (OpCode.RR_LIM, OpCode.RM_LIM, OpCode.RA_LIM)

    @property
    def mnemonic(self) -> str:
        return "????" if self.is_limit else self.name

    @property
    def op_class(self) -> _OpClass:
        if self <= OpCode.RR_LIM:
            return _OpClass.RR
        if self <= OpCode.RM_LIM:
            return _OpClass.RM
        return _OpClass.RA


class StepResult(Enum):
    """Outcome of executing one instruction, valued by its report text."""

    OKAY = "OK"
    HALT = "Halted"
    IMEM_ERR = "Instruction Memory Fault"
    DMEM_ERR = "Data Memory Fault"
    ZERO_DIVIDE = "Division by 0"


@dataclass(frozen=True)
class Instruction:
    op: OpCode = OpCode.HALT
    arg1: int = 0
    arg2: int = 0
    arg3: int = 0


class ProgramError(ValueError):
    """A TM program line that could not be read."""

    def __init__(self, message: str, line_no: int, inst_no: int = -1) -> None:
        self.message = message
        self.line_no = line_no
        self.inst_no = inst_no
        where = f"Line {line_no}"
        if inst_no >= 0:
            where += f" (Instruction {inst_no})"
        super().__init__(f"{where}   {message}")


def _int32(value: int) -> int:
    return (value + 2**31) % 2**32 - 2**31


def _divide(a: int, b: int) -> int:
    quotient = abs(a) // abs(b)
    return _int32(-quotient if (a < 0) != (b < 0) else quotient)


_ARITHMETIC: dict[OpCode, Callable[[int, int], int]] = {
    OpCode.ADD: operator.add,
    OpCode.SUB: operator.sub,
    OpCode.MUL: operator.mul,
}

_JUMPS: dict[OpCode, Callable[[int], bool]] = {
    OpCode.JLT: lambda v: v < 0,
    OpCode.JLE: lambda v: v <= 0,
    OpCode.JGT: lambda v: v > 0,
    OpCode.JGE: lambda v: v >= 0,
    OpCode.JEQ: lambda v: v == 0,
    OpCode.JNE: lambda v: v != 0,
}


def _match_opcode(word: str) -> OpCode | None:
    key = (word + "\0")[:4]
    for op in OpCode:
        if not op.is_limit and (op.name + "\0")[:4] == key:
            return op
    return None


class _Cursor:
    """Character cursor over one input line, with TM's number and word rules."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.col = 0
        self.ch = " "

    def get_ch(self) -> None:
        self.col += 1
        self.ch = self.text[self.col] if self.col < len(self.text) else " "

    def non_blank(self) -> bool:
        while self.col < len(self.text) and self.text[self.col] == " ":
            self.col += 1
        if self.col < len(self.text):
            self.ch = self.text[self.col]
            return True
        self.ch = " "
        return False

    def at_eol(self) -> bool:
        return not self.non_blank()

    def get_num(self) -> int | None:
        """Read a signed sum of integer terms; None if no digits were read."""
        found = False
        total = 0
        while True:
            sign = 1
            while self.non_blank() and self.ch in "+-":
                found = False
                if self.ch == "-":
                    sign = -sign
                self.get_ch()
            term = 0
            self.non_blank()
            while self.ch in _DIGITS:
                found = True
                term = term * 10 + int(self.ch)
                self.get_ch()
            total += term * sign
            if not (self.non_blank() and self.ch in "+-"):
                break
        return total if found else None

    def get_word(self) -> str:
        letters: list[str] = []
        if self.non_blank():
            while self.ch.isascii() and self.ch.isalnum():
                if len(letters) < WORDSIZE - 1:
                    letters.append(self.ch)
                self.get_ch()
        return "".join(letters)

    def skip_ch(self, c: str) -> bool:
        if self.non_blank() and self.ch == c:
            self.get_ch()
            return True
        return False


class TinyMachine:
    """Instruction and data memory, registers and the interactive commands."""

    def __init__(self, stdin: TextIO | None = None, stdout: TextIO | None = None) -> None:
        self.stdin = stdin if stdin is not None else sys.stdin
        self.stdout = stdout if stdout is not None else sys.stdout
        self.instructions: list[Instruction] = [Instruction()] * IADDR_SIZE
        self.registers: list[int] = [0] * NO_REGS
        self.data: list[int] = [0] * DADDR_SIZE
        self.iloc = 0
        self.dloc = 0
        self.trace = False
        self.icount = False
        self.reset()

    def reset(self) -> None:
        """Zero the registers and data memory; location 0 holds the top address."""
        self.registers = [0] * NO_REGS
        self.data = [0] * DADDR_SIZE
        self.data[0] = DADDR_SIZE - 1

    def load(self, lines: Iterable[str] | str) -> None:
        """Read a TM program, replacing instruction memory and resetting state."""
        if isinstance(lines, str):
            lines = lines.splitlines(keepends=True)
        self.instructions = [Instruction()] * IADDR_SIZE
        self.reset()
        for line_no, raw in enumerate(lines, start=1):
            cur = _Cursor(raw.removesuffix("\n"))
            if not cur.non_blank() or cur.text[cur.col] == "*":
                continue
            loc = cur.get_num()
            if loc is None or loc < 0:
                raise ProgramError("Bad location", line_no)
            if loc >= IADDR_SIZE:
                raise ProgramError("Location too large", line_no, loc)
            if not cur.skip_ch(":"):
                raise ProgramError("Missing colon", line_no, loc)
            word = cur.get_word()
            if not word:
                raise ProgramError("Missing opcode", line_no, loc)
            op = _match_opcode(word)
            if op is None:
                raise ProgramError("Illegal opcode", line_no, loc)
            self.instructions[loc] = self._read_operands(cur, op, line_no, loc)

    @staticmethod
    def _register(cur: _Cursor, message: str, line_no: int, loc: int) -> int:
        num = cur.get_num()
        if num is None or not 0 <= num < NO_REGS:
            raise ProgramError(message, line_no, loc)
        return num

    def _read_operands(
        self, cur: _Cursor, op: OpCode, line_no: int, loc: int
    ) -> Instruction:
        arg1 = self._register(cur, "Bad first register", line_no, loc)
        if not cur.skip_ch(","):
            raise ProgramError("Missing comma", line_no, loc)
        if op.op_class is _OpClass.RR:
            arg2 = self._register(cur, "Bad second register", line_no, loc)
            if not cur.skip_ch(","):
                raise ProgramError("Missing comma", line_no, loc)
            arg3 = self._register(cur, "Bad third register", line_no, loc)
        else:
            displacement = cur.get_num()
            if displacement is None:
                raise ProgramError("Bad displacement", line_no, loc)
            arg2 = displacement
            if not cur.skip_ch("(") and not cur.skip_ch(","):
                raise ProgramError("Missing LParen", line_no, loc)
            arg3 = self._register(cur, "Bad second register", line_no, loc)
        return Instruction(op, arg1, arg2, arg3)

    def _read_in_value(self) -> int:
        while True:
            self.stdout.write("Enter value for IN instruction: ")
            self.stdout.flush()
            line = self.stdin.readline()
            if not line:
                raise EOFError("no input for IN instruction")
            value = _Cursor(line.removesuffix("\n")).get_num()
            if value is not None:
                return value
            self.stdout.write("Illegal value\n")

    def step(self) -> StepResult:
        """Execute the instruction at the program counter."""
        regs = self.registers
        pc = regs[PC_REG]
        if not 0 <= pc < IADDR_SIZE:
            return StepResult.IMEM_ERR
        regs[PC_REG] = pc + 1
        ins = self.instructions[pc]
        op = ins.op
        r = ins.arg1
        if op.op_class is _OpClass.RR:
            s, t, m = ins.arg2, ins.arg3, 0
        else:
            s, t = ins.arg3, 0
            m = ins.arg2 + regs[s]
            if op.op_class is _OpClass.RM and not 0 <= m < DADDR_SIZE:
                return StepResult.DMEM_ERR

        if op is OpCode.HALT:
            self.stdout.write(f"HALT: {r},{s},{t}\n")
            return StepResult.HALT
        if op is OpCode.IN:
            regs[r] = self._read_in_value()
        elif op is OpCode.OUT:
            self.stdout.write(f"OUT instruction prints: {regs[r]}\n")
        elif op in _ARITHMETIC:
            regs[r] = _int32(_ARITHMETIC[op](regs[s], regs[t]))
        elif op is OpCode.DIV:
            if regs[t] == 0:
                return StepResult.ZERO_DIVIDE
            regs[r] = _divide(regs[s], regs[t])
        elif op is OpCode.LD:
            regs[r] = self.data[m]
        elif op is OpCode.ST:
            self.data[m] = regs[r]
        elif op is OpCode.LDA:
            regs[r] = m
        elif op is OpCode.LDC:
            regs[r] = ins.arg2
        elif op in _JUMPS:
            if _JUMPS[op](regs[r]):
                regs[PC_REG] = m
        return StepResult.OKAY

    def format_instruction(self, loc: int) -> str:
        """Render the instruction at ``loc``; the line ends in a newline only if ``loc`` is valid."""
        text = f"{loc:5d}: "
        if 0 <= loc < IADDR_SIZE:
            ins = self.instructions[loc]
            text += f"{ins.op.mnemonic:>6}{ins.arg1:3d},"
            if ins.op.op_class is _OpClass.RR:
                text += f"{ins.arg2:1d},{ins.arg3:1d}"
            else:
                text += f"{ins.arg2:3d}({ins.arg3:1d})"
            text += "\n"
        return text

    def _traced_step(self) -> StepResult:
        self.iloc = self.registers[PC_REG]
        if self.trace:
            self.stdout.write(self.format_instruction(self.iloc))
        return self.step()

    def _run(self, go: bool, count: int) -> None:
        result = StepResult.OKAY
        if go:
            executed = 0
            while result is StepResult.OKAY:
                result = self._traced_step()
                executed += 1
            if self.icount:
                self.stdout.write(f"Number of instructions executed = {executed}\n")
        else:
            while count > 0 and result is StepResult.OKAY:
                result = self._traced_step()
                count -= 1
        self.stdout.write(f"{result.value}\n")

    def _print_locations(self, cur: _Cursor, data: bool) -> None:
        count = 1
        start = cur.get_num()
        if start is not None:
            if data:
                self.dloc = start
            else:
                self.iloc = start
            n = cur.get_num()
            if n is not None:
                count = n
        if not cur.at_eol():
            self.stdout.write("Data locations?\n" if data else "Instruction locations?\n")
            return
        if data:
            while 0 <= self.dloc < DADDR_SIZE and count > 0:
                self.stdout.write(f"{self.dloc:5d}: {self.data[self.dloc]:5d}\n")
                self.dloc += 1
                count -= 1
        else:
            while 0 <= self.iloc < IADDR_SIZE and count > 0:
                self.stdout.write(self.format_instruction(self.iloc))
                self.iloc += 1
                count -= 1

    def do_command(self, line: str) -> bool:
        """Carry out one command line; return False when the command is quit."""
        cur = _Cursor(line.removesuffix("\n"))
        word = cur.get_word()
        if not word:
            return True
        cmd = word[0]
        out = self.stdout.write
        step_count = 0
        if cmd == "t":
            self.trace = not self.trace
            out(f"Tracing now {'on' if self.trace else 'off'}.\n")
        elif cmd == "h":
            out(_HELP)
        elif cmd == "p":
            self.icount = not self.icount
            out(f"Printing instruction count now {'on' if self.icount else 'off'}.\n")
        elif cmd == "s":
            if cur.at_eol():
                step_count = 1
            else:
                n = cur.get_num()
                if n is not None:
                    step_count = abs(n)
                else:
                    out("Step count?\n")
        elif cmd == "g":
            step_count = 1
        elif cmd == "r":
            for i, value in enumerate(self.registers):
                out(f"{i:1d}: {value:4d}    ")
                if i % 4 == 3:
                    out("\n")
        elif cmd == "i":
            self._print_locations(cur, data=False)
        elif cmd == "d":
            self._print_locations(cur, data=True)
        elif cmd == "c":
            self.iloc = 0
            self.dloc = 0
            self.reset()
        elif cmd == "q":
            return False
        else:
            out(f"Command {cmd} unknown.\n")
        if step_count > 0:
            self._run(cmd == "g", step_count)
        return True

    def repl(self) -> None:
        """Prompt for and carry out commands until quit or end of input."""
        while True:
            self.stdout.write("Enter command: ")
            self.stdout.flush()
            line = self.stdin.readline()
            if not line:
                return
            try:
                if not self.do_command(line):
                    return
            except EOFError:
                return


def main(argv: list[str] | None = None) -> int:
    """Load a TM program file and run the interactive simulator."""
    args = sys.argv[1:] if argv is None else list(argv)
    if len(args) != 1:
        print("usage: tm <filename>")
        return 1
    name = args[0]
    if "." not in name:
        name += ".tm"
    try:
        handle = open(name, encoding="utf-8", errors="replace")
    except OSError:
        print(f"file '{name}' not found")
        return 1
    machine = TinyMachine()
    with handle:
        try:
            machine.load(handle)
        except ProgramError as error:
            print(error)
            return 1
    print("TM  simulation (enter h for help)...")
    machine.repl()
    print("Simulation done.")
    return 0