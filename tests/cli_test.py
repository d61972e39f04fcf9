import os
import subprocess
import sys

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
CLI = os.path.join(ROOT, "cli.py")

HELLO_WORLD = (
    "++++++++[>++++[>++>+++>+++>+<<<<-]>+>+>->>+[<]<-]>>.\n"
    ">---.+++++++..+++.>>.<-.<.+++.------.--------.>>+.>++.\n"
)


def run_cli(args, inp: bytes = b""):
    return subprocess.run(
        [sys.executable, CLI, *args],
        input=inp,
        capture_output=True,
        cwd=ROOT,
        timeout=10,
    )


def write_program(tmp_path, source, name="prog.bf"):
    path = tmp_path / name
    path.write_text(source, encoding="utf-8")
    return str(path)


def test_run_hello_world(tmp_path):
    proc = run_cli(["run", write_program(tmp_path, HELLO_WORLD)])
    if proc.returncode != 0:
        raise AssertionError(f"Exit code {proc.returncode}\nSTDERR:\n{proc.stderr!r}")
    if proc.stdout != b"Hello World!\n":
        raise AssertionError(f"Unexpected output: {proc.stdout!r}")


def test_run_reads_stdin_bytes(tmp_path):
    proc = run_cli(["run", write_program(tmp_path, ",[.,]")], inp=b"abc\xff")
    if proc.stdout != b"abc\xff":
        raise AssertionError(f"Unexpected output: {proc.stdout!r}")


def test_run_with_dump(tmp_path):
    proc = run_cli(["run", write_program(tmp_path, "+++[>+++<-]>"), "--dump", "--tape-size", "5"])
    if proc.returncode != 0:
        raise AssertionError(f"Exit code {proc.returncode}\nSTDERR:\n{proc.stderr!r}")
    if b"data pointer: 1, tape: [0, 9, ... (3 zero cells)]" not in proc.stdout:
        raise AssertionError(f"Dump missing:\n{proc.stdout!r}")


def test_unknown_character_fails_before_running(tmp_path):
    proc = run_cli(["run", write_program(tmp_path, "+.\n+a.")])
    if proc.returncode != 1:
        raise AssertionError(f"Expected exit code 1, got {proc.returncode}")
    if proc.stdout != b"":
        raise AssertionError(f"Nothing should run on a lex error: {proc.stdout!r}")
    if b"Unknown character" not in proc.stderr or b"line 2, col 2" not in proc.stderr:
        raise AssertionError(f"Unexpected error:\n{proc.stderr!r}")


def test_unmatched_bracket(tmp_path):
    proc = run_cli(["run", write_program(tmp_path, "+.[")])
    if proc.returncode != 1 or proc.stdout != b"":
        raise AssertionError(f"Unexpected result: {proc.returncode} {proc.stdout!r}")
    if b"Unmatched '['" not in proc.stderr:
        raise AssertionError(f"Unexpected error:\n{proc.stderr!r}")


def test_pointer_out_of_bounds(tmp_path):
    proc = run_cli(["run", write_program(tmp_path, "+.<")])
    if proc.returncode != 1:
        raise AssertionError(f"Expected exit code 1, got {proc.returncode}")
    if proc.stdout != b"\x01":
        raise AssertionError(f"Output before the failure should be kept: {proc.stdout!r}")
    if b"out of bounds" not in proc.stderr or b"ip=0002" not in proc.stderr:
        raise AssertionError(f"Unexpected error:\n{proc.stderr!r}")


def test_suffix_check(tmp_path):
    path = write_program(tmp_path, "+", name="prog.txt")
    proc = run_cli(["run", path])
    if proc.returncode != 1 or b"file extension not recognized" not in proc.stderr:
        raise AssertionError(f"Unexpected result: {proc.returncode}\n{proc.stderr!r}")

    proc = run_cli(["run", path, "--any-suffix"])
    if proc.returncode != 0:
        raise AssertionError(f"--any-suffix should accept the file:\n{proc.stderr!r}")


def test_tokens_listing(tmp_path):
    proc = run_cli(["tokens", write_program(tmp_path, "+[-]")])
    out = proc.stdout.decode("utf-8")
    if "0001  LOOP_START -> 0003  (1:2)" not in out or "0003  LOOP_END -> 0001  (1:4)" not in out:
        raise AssertionError(f"Unexpected listing:\n{out}")


def test_trace_goes_to_stderr(tmp_path):
    proc = run_cli(["run", write_program(tmp_path, "+."), "--trace"])
    if proc.stdout != b"\x01":
        raise AssertionError(f"Trace must not touch stdout: {proc.stdout!r}")
    if b"TRACE ip=0000 op=INCREMENT dp=0 cell=0" not in proc.stderr:
        raise AssertionError(f"Trace missing:\n{proc.stderr!r}")


def test_bad_tape_size(tmp_path):
    proc = run_cli(["run", write_program(tmp_path, "+"), "--tape-size", "0"])
    if proc.returncode != 1 or b"invalid tape size" not in proc.stderr:
        raise AssertionError(f"Unexpected result: {proc.returncode}\n{proc.stderr!r}")


def test_repl_keeps_tape_between_snippets():
    proc = run_cli(["repl"], inp=b"++++++++[\n>++++++++<-]\n>+.\n:dump\n:q\n")
    out = proc.stdout.decode("utf-8")
    if proc.returncode != 0:
        raise AssertionError(f"REPL exited with code {proc.returncode}\n{proc.stderr!r}")
    if "A" not in out or "data pointer: 1, tape: [0, 65, ... (29998 zero cells)]" not in out:
        raise AssertionError(f"Unexpected REPL output:\n{out}")


def test_repl_reports_errors_and_continues():
    proc = run_cli(["repl"], inp=b"+x\n]\n+.\n:q\n")
    if proc.returncode != 0:
        raise AssertionError(f"REPL exited with code {proc.returncode}")
    if b"Unknown character" not in proc.stderr or b"Unmatched ']'" not in proc.stderr:
        raise AssertionError(f"Errors missing:\n{proc.stderr!r}")
    if b"\x01" not in proc.stdout:
        raise AssertionError(f"Later snippet should still run:\n{proc.stdout!r}")


def test_repl_reads_program_input():
    proc = run_cli(["repl"], inp=b",.\nhi\n:q\n")
    if b"input> h" not in proc.stdout:
        raise AssertionError(f"Input byte not echoed:\n{proc.stdout!r}")
