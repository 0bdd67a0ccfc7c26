import io

from cminus.code import AC, GP, PC, CodeEmitter


def make(trace=False):
    out = io.StringIO()
    return CodeEmitter(out, trace), out


def test_emit_ro_format():
    emitter, out = make()
    emitter.emit_ro("HALT", 0, 0, 0, "")
    assert out.getvalue() == "  0:   HALT  0,0,0 \n"
    assert emitter.location == 1


def test_emit_rm_with_trace_comment():
    emitter, out = make(trace=True)
    emitter.emit_rm("LD", 6, 0, AC, "load")
    assert out.getvalue() == "  0:     LD  6,0(0) \tload\n"


def test_emit_rm_without_trace_drops_comment():
    emitter, out = make()
    emitter.emit_rm("ST", AC, 3, GP, "store")
    assert "store" not in out.getvalue()
    assert out.getvalue().endswith(f"{AC},3({GP}) \n")


def test_comment_only_when_tracing():
    emitter, out = make()
    emitter.comment("hello")
    assert out.getvalue() == ""
    emitter, out = make(trace=True)
    emitter.comment("hello")
    assert out.getvalue() == "* hello\n"


def test_skip_backup_restore():
    emitter, out = make()
    emitter.emit_ro("IN", 0, 0, 0)
    saved = emitter.skip(2)
    assert saved == 1
    assert emitter.location == 3
    emitter.emit_ro("OUT", 0, 0, 0)
    high = emitter.high_location
    emitter.backup(saved)
    assert emitter.location == saved
    emitter.emit_ro("ADD", 0, 1, 0)
    emitter.restore()
    assert emitter.location == high
    lines = out.getvalue().splitlines()
    assert [line.split(":")[0].strip() for line in lines] == ["0", "3", "1"]


def test_backup_beyond_high_reports_bug():
    emitter, out = make(trace=True)
    emitter.backup(10)
    assert out.getvalue() == "* BUG in emitBackup\n"
    assert emitter.location == 10


def test_emit_rm_abs_targets_own_location():
    emitter, out = make()
    emitter.skip(4)
    here = emitter.skip(0)
    emitter.emit_rm_abs("LDA", PC, here, "loop")
    assert out.getvalue().endswith(f"{PC},-1({PC}) \n")
    assert out.getvalue().startswith(f"{here:3d}:")


def test_emit_rm_abs_forward_then_back_consistent():
    emitter, out = make()
    target = emitter.skip(0)
    for _ in range(3):
        emitter.emit_ro("ADD", 0, 0, 0)
    at = emitter.location
    emitter.emit_rm_abs("JEQ", AC, target)
    offset = int(out.getvalue().splitlines()[-1].split(",")[1].split("(")[0])
    assert at + 1 + offset == target