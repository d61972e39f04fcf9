import os
import sys
import traceback

import colorama

from errors import TapewormError
from lexer import Lexer, load_source
from resolver import Resolver
from streams import InputSource, StdoutSink
from vm import VM, TAPE_SIZE

USAGE = """Usage:
  python cli.py run <file.bf> [--dump] [--full-dump] [--trace] [--tape-size N]
  python cli.py tokens <file.bf>
  python cli.py repl [--tape-size N]
  (optional) --debug to show Python traceback
  (optional) --color for coloured errors and dumps
  (optional) --any-suffix to accept files not ending in .bf"""

FLAGS = ("--debug", "--dump", "--full-dump", "--trace", "--color", "--any-suffix")


def paint(text: str, code: str, enabled: bool) -> str:
    if not enabled:
        return text
    colorama.just_fix_windows_console()
    return f"\x1b[{code}m{text}\x1b[0m"


def report_error(e: BaseException, opts):
    if opts["debug"]:
        traceback.print_exc()
    else:
        print(paint(str(e), "31", opts["color"]), file=sys.stderr)


def build_program(path, opts):
    code = load_source(path, require_suffix=not opts["any_suffix"])
    tokens = Lexer(code).tokens()
    return Resolver(source_path=os.path.abspath(path)).build(tokens)


def cmd_tokens(path, opts):
    try:
        program = build_program(path, opts)
    except TapewormError as e:
        report_error(e, opts)
        sys.exit(1)

    print("INSTRUCTIONS:")
    for i, (opcode, arg) in enumerate(program.instructions):
        dbg = program.debug[i] or {}
        pos = f"({dbg.get('line')}:{dbg.get('column')})" if dbg else ""
        target = f" -> {arg:04d}" if arg is not None else ""
        print(f"  {i:04d}  {opcode}{target}  {pos}".rstrip())


def cmd_run(path, opts):
    vm = None
    try:
        program = build_program(path, opts)
        vm = VM(program, tape_size=opts["tape_size"], trace=opts["trace"])
        vm.run()
    except (TapewormError, OSError) as e:
        report_error(e, opts)
        if vm is not None and (opts["dump"] or opts["full_dump"]):
            print(vm.dump(color=opts["color"], full=opts["full_dump"]), file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nInterrupted by user.", file=sys.stderr)
        sys.exit(130)

    if opts["dump"] or opts["full_dump"]:
        print(vm.dump(color=opts["color"], full=opts["full_dump"]))


class PromptSource(InputSource):
    """Feeds ',' from REPL lines so program input and commands share stdin."""

    def __init__(self):
        self.pending = b""

    def read_byte(self):
        if not self.pending:
            try:
                self.pending = (input("input> ") + "\n").encode("utf-8")
            except EOFError:
                return None
        value = self.pending[0]
        self.pending = self.pending[1:]
        return value


class LineTrackingSink(StdoutSink):
    def __init__(self, stream=None):
        super().__init__(stream)
        self.last = None

    def write_byte(self, value: int):
        super().write_byte(value)
        self.last = value


def _count_brackets_delta(line: str) -> int:
    return line.count("[") - line.count("]")


def cmd_repl(opts):
    sink = LineTrackingSink()
    vm = VM(Resolver().build([]), tape_size=opts["tape_size"], input_source=PromptSource(), output_sink=sink, trace=opts["trace"])

    print("Tapeworm REPL. Type :q to quit, :dump to show the tape, :reset to clear it.")

    buffer_lines = []
    depth = 0
    while True:
        prompt = "bf> " if not buffer_lines else "...> "
        try:
            line = input(prompt)
        except (EOFError, KeyboardInterrupt):
            print()
            break

        stripped = line.strip()
        if not buffer_lines:
            if stripped in (":q", ":quit", "quit", "exit"):
                break
            if stripped == ":dump":
                print(vm.dump(color=opts["color"], full=opts["full_dump"]))
                continue
            if stripped == ":reset":
                vm.reset()
                continue
            if not stripped:
                continue

        buffer_lines.append(line)
        depth += _count_brackets_delta(line)

        # wait for the loop to close before running
        if depth > 0:
            continue

        source = "\n".join(buffer_lines) + "\n"
        buffer_lines = []
        depth = 0

        sink.last = None
        try:
            program = Resolver(source_path="<repl>").build(Lexer(source).tokens())
            start_ip, end_ip = vm.link_program(program)
            vm.run_range(start_ip, end_ip)
        except TapewormError as e:
            report_error(e, opts)
        except KeyboardInterrupt:
            print("\nInterrupted.", file=sys.stderr)
        if sink.last is not None and sink.last != ord("\n"):
            print()


def parse_options(argv):
    opts = {name[2:].replace("-", "_"): False for name in FLAGS}
    opts["tape_size"] = TAPE_SIZE

    rest = []
    i = 0
    while i < len(argv):
        arg = argv[i]
        if arg in FLAGS:
            opts[arg[2:].replace("-", "_")] = True
        elif arg == "--tape-size":
            if i + 1 >= len(argv):
                raise ValueError("--tape-size needs a value")
            i += 1
            try:
                opts["tape_size"] = int(argv[i])
            except ValueError:
                raise ValueError(f"invalid tape size: {argv[i]}")
            if opts["tape_size"] < 1:
                raise ValueError(f"invalid tape size: {argv[i]}")
        else:
            rest.append(arg)
        i += 1
    return rest, opts


def main(argv=None):
    if argv is None:
        argv = sys.argv[1:]

    try:
        args, opts = parse_options(argv)
    except ValueError as e:
        print(str(e), file=sys.stderr)
        sys.exit(1)

    if not args:
        print(USAGE)
        sys.exit(1)

    cmd = args[0]

    if cmd == "repl":
        if len(args) != 1:
            print(USAGE)
            sys.exit(1)
        cmd_repl(opts)
        return

    if len(args) != 2:
        print(USAGE)
        sys.exit(1)

    path = args[1]

    if cmd == "run":
        cmd_run(path, opts)
    elif cmd == "tokens":
        cmd_tokens(path, opts)
    else:
        print(f"Unknown command: {cmd}")
        sys.exit(1)


if __name__ == "__main__":
    main()
