import io

import pytest

from cminus.code import AC, AC1, CodeEmitter
from cminus.tm import (
    DADDR_SIZE,
    IADDR_SIZE,
    PC_REG,
    OpCode,
    ProgramError,
    StepResult,
    TinyMachine,
    main,
)

PROGRAM = "0: LDC 0,5(0)\n1: OUT 0,0,0\n2: HALT 0,0,0\n"


def machine_with(program, stdin_text=""):
    out = io.StringIO()
    machine = TinyMachine(io.StringIO(stdin_text), out)
    machine.load(program)
    return machine, out


def test_go_runs_to_halt():
    machine, out = machine_with(PROGRAM)
    assert machine.do_command("g") is True
    text = out.getvalue()
    assert "OUT instruction prints: 5\n" in text
    assert text.endswith("HALT: 0,0,0\nHalted\n")


def test_comments_and_blank_lines_are_skipped():
    machine, _ = machine_with("* a comment\n\n   0: LDC 1,9(0)\n")
    assert machine.step() is StepResult.OKAY
    assert machine.registers[1] == 9


def test_error_text_names_line_and_instruction():
    machine = TinyMachine(io.StringIO(), io.StringIO())
    with pytest.raises(ProgramError) as info:
        machine.load("* header\n0 LDC 0,1(0)\n")
    assert str(info.value) == "Line 2 (Instruction 0)   Missing colon"


def test_comma_may_replace_parenthesis():
    machine, _ = machine_with("0: LDC 3,7,0\n")
    machine.step()
    assert machine.registers[3] == 7


def test_opcode_matched_on_first_four_letters():
    machine, _ = machine_with("0: HALTX 0,0,0\n")
    assert machine.instructions[0].op is OpCode.HALT


def test_division_by_zero():
    machine, _ = machine_with("0: DIV 0,0,1\n")
    assert machine.step() is StepResult.ZERO_DIVIDE


def test_division_truncates_toward_zero():
    machine, _ = machine_with("0: LDC 0,-7(0)\n1: LDC 1,2(0)\n2: DIV 2,0,1\n")
    for _ in range(3):
        machine.step()
    assert machine.registers[0] == -7
    assert machine.registers[2] == -3


def test_data_memory_fault():
    machine, _ = machine_with("0: LD 0,2000(0)\n")
    assert machine.step() is StepResult.DMEM_ERR


def test_instruction_memory_fault():
    machine, _ = machine_with(PROGRAM)
    machine.registers[PC_REG] = IADDR_SIZE
    assert machine.step() is StepResult.IMEM_ERR


def test_store_then_load():
    machine, _ = machine_with("0: LDC 0,42(0)\n1: ST 0,10(5)\n2: LD 1,10(5)\n")
    for _ in range(3):
        assert machine.step() is StepResult.OKAY
    assert machine.data[10] == 42
    assert machine.registers[1] == 42


def test_in_reads_until_valid_number():
    machine, out = machine_with("0: IN 0,0,0\n", "abc\n42\n")
    assert machine.step() is StepResult.OKAY
    assert machine.registers[0] == 42
    assert "Illegal value\n" in out.getvalue()


def test_in_without_input_raises():
    machine, _ = machine_with("0: IN 0,0,0\n")
    with pytest.raises(EOFError):
        machine.step()


def test_format_instruction():
    machine, _ = machine_with(PROGRAM)
    assert machine.format_instruction(0) == "    0:    LDC  0,  5(0)\n"
    assert machine.format_instruction(1) == "    1:    OUT  0,0,0\n"
    assert not machine.format_instruction(-1).endswith("\n")


def test_emitted_code_runs():
    buffer = io.StringIO()
    emitter = CodeEmitter(buffer, trace=True)
    emitter.comment("sum")
    emitter.emit_rm("LDC", AC, 7, 0, "load seven")
    emitter.emit_rm("LDC", AC1, 3, 0, "load three")
    emitter.emit_ro("ADD", AC, AC, AC1, "add")
    emitter.emit_ro("OUT", AC, 0, 0, "write")
    emitter.emit_ro("HALT", 0, 0, 0, "")
    machine, out = machine_with(buffer.getvalue())
    machine.do_command("g")
    assert machine.registers[AC] == 7 + 3
    assert f"OUT instruction prints: {7 + 3}\n" in out.getvalue()


def test_backpatched_jump_skips_instruction():
    buffer = io.StringIO()
    emitter = CodeEmitter(buffer)
    emitter.emit_rm("LDC", AC, 0, 0)
    saved = emitter.skip(1)
    emitter.emit_rm("LDC", AC1, 1, 0)
    target = emitter.skip(0)
    emitter.backup(saved)
    emitter.emit_rm_abs("JEQ", AC, target)
    emitter.restore()
    emitter.emit_ro("HALT", 0, 0, 0)
    machine, out = machine_with(buffer.getvalue())
    machine.do_command("g")
    assert machine.registers[AC1] == 0
    assert out.getvalue().endswith("Halted\n")


def test_clear_resets_registers_and_data():
    machine, _ = machine_with("0: LDC 0,42(0)\n1: ST 0,10(5)\n")
    machine.do_command("s 2")
    machine.do_command("c")
    assert machine.registers == [0] * len(machine.registers)
    assert machine.data[0] == DADDR_SIZE - 1
    assert machine.data[10] == 0
    assert machine.instructions[0].op is OpCode.LDC


def test_quit_returns_false():
    machine, _ = machine_with(PROGRAM)
    assert machine.do_command("q") is False


def test_blank_command_is_ignored():
    machine, out = machine_with(PROGRAM)
    assert machine.do_command("   \n") is True
    assert out.getvalue() == ""


def test_trace_toggle():
    machine, out = machine_with(PROGRAM)
    machine.do_command("t")
    machine.do_command("t")
    assert out.getvalue() == "Tracing now on.\nTracing now off.\n"


def test_step_count():
    machine, out = machine_with(PROGRAM)
    machine.do_command("s 2")
    assert machine.registers[PC_REG] == 2
    assert out.getvalue().endswith("OK\n")


def test_bad_step_count():
    machine, out = machine_with(PROGRAM)
    machine.do_command("s x")
    assert out.getvalue() == "Step count?\n"


def test_unknown_command():
    machine, out = machine_with(PROGRAM)
    machine.do_command("z")
    assert out.getvalue() == "Command z unknown.\n"


def test_data_listing():
    machine, out = machine_with(PROGRAM)
    machine.do_command("d 0 1")
    assert str(DADDR_SIZE - 1) in out.getvalue()
    assert machine.dloc == 1


def test_instruction_listing_matches_format():
    machine, out = machine_with(PROGRAM)
    machine.do_command("i 0 2")
    assert out.getvalue() == machine.format_instruction(0) + machine.format_instruction(1)


def test_trace_during_go_lists_instructions():
    machine, out = machine_with(PROGRAM)
    machine.do_command("t")
    machine.do_command("g")
    assert machine.format_instruction(2) in out.getvalue()


def test_instruction_count():
    machine, out = machine_with(PROGRAM)
    machine.do_command("p")
    machine.do_command("g")
    lines = PROGRAM.count("\n")
    assert f"Number of instructions executed = {lines}\n" in out.getvalue()


def test_repl_stops_on_quit():
    out = io.StringIO()
    machine = TinyMachine(io.StringIO("t\nq\nt\n"), out)
    machine.load(PROGRAM)
    machine.repl()
    assert machine.trace is True
    assert out.getvalue().count("Enter command: ") == 2


def test_main_usage(capsys):
    assert main([]) == 1
    assert "usage" in capsys.readouterr().out


def test_main_missing_file(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    assert main(["absent"]) == 1
    assert "file 'absent.tm' not found" in capsys.readouterr().out


def test_main_runs_program(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "prog.tm").write_text(PROGRAM)
    monkeypatch.setattr("sys.stdin", io.StringIO("g\nq\n"))
    assert main(["prog"]) == 0
    text = capsys.readouterr().out
    assert "OUT instruction prints: 5" in text
    assert text.endswith("Simulation done.\n")


def test_main_reports_bad_program(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "bad.tm").write_text("0 HALT 0,0,0\n")
    assert main(["bad.tm"]) == 1
    assert "Missing colon" in capsys.readouterr().out