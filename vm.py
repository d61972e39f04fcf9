import sys

from program import (
    Program,
    MOVE_RIGHT, MOVE_LEFT, INCREMENT, DECREMENT, OUTPUT, INPUT, LOOP_START, LOOP_END, JUMPS,
)
from errors import TapewormRuntimeError, PointerOutOfBoundsError, IoFailureError
from streams import StdinSource, StdoutSink

TAPE_SIZE = 30000


class VM:
    def __init__(self, program, tape=None, tape_size: int = TAPE_SIZE, input_source=None, output_sink=None, trace: bool = False):
        self.instructions = list(program.instructions)
        self.debug = list(getattr(program, "debug", [None] * len(self.instructions)))

        if tape is None:
            if tape_size < 1:
                raise ValueError(f"tape size must be positive, got {tape_size}")
            tape = bytearray(tape_size)
        self.tape = tape

        self.ip = 0                 # instruction pointer (next opcode to execute)
        self.dp = 0                 # data pointer (current cell)

        self.input_source = input_source if input_source is not None else StdinSource()
        self.output_sink = output_sink if output_sink is not None else StdoutSink()

        self.trace_enabled = trace
        self._colorama_inited = False

    def _ensure_colorama(self):
        if self._colorama_inited:
            return
        self._colorama_inited = True
        # enables ANSI escapes on Windows terminals; no-op elsewhere
        import colorama

        colorama.just_fix_windows_console()

    def location_for_ip(self, ip: int):
        if ip < 0 or ip >= len(self.debug):
            return None
        return self.debug[ip]

    def reset(self):
        self.tape[:] = bytes(len(self.tape))
        self.ip = 0
        self.dp = 0

    def link_program(self, program):
        base_ip = len(self.instructions)

        for opcode, arg in program.instructions:
            if opcode in JUMPS:
                if arg is None:
                    raise TapewormRuntimeError(f"Unresolved jump target for {opcode}")
                self.instructions.append((opcode, arg + base_ip))
                continue
            self.instructions.append((opcode, arg))

        program_debug = getattr(program, "debug", None)
        if program_debug is None:
            program_debug = [None] * len(program.instructions)
        self.debug.extend(program_debug)

        return base_ip, len(self.instructions)

    def _io_failure(self, e: OSError):
        return IoFailureError(e, ip=self.ip, dp=self.dp, location=self.location_for_ip(self.ip))

    def step(self) -> bool:
        if self.ip >= len(self.instructions):
            return True
        opcode, arg = self.instructions[self.ip]

        if self.trace_enabled:
            print(f"TRACE ip={self.ip:04d} op={opcode} dp={self.dp} cell={self.tape[self.dp]}", file=sys.stderr)

        if opcode == MOVE_RIGHT:
            if self.dp + 1 >= len(self.tape):
                raise PointerOutOfBoundsError(self.ip, self.dp, "right", len(self.tape), self.location_for_ip(self.ip))
            self.dp += 1

        elif opcode == MOVE_LEFT:
            if self.dp == 0:
                raise PointerOutOfBoundsError(self.ip, self.dp, "left", len(self.tape), self.location_for_ip(self.ip))
            self.dp -= 1

        elif opcode == INCREMENT:
            self.tape[self.dp] = (self.tape[self.dp] + 1) % 256

        elif opcode == DECREMENT:
            self.tape[self.dp] = (self.tape[self.dp] - 1) % 256

        elif opcode == OUTPUT:
            try:
                self.output_sink.write_byte(self.tape[self.dp])
            except OSError as e:
                raise self._io_failure(e)

        elif opcode == INPUT:
            try:
                value = self.input_source.read_byte()
            except OSError as e:
                raise self._io_failure(e)
            # end of input stores 0
            self.tape[self.dp] = 0 if value is None else value

        elif opcode == LOOP_START:
            if self.tape[self.dp] == 0:
                self.ip = arg + 1
                return self.ip >= len(self.instructions)

        elif opcode == LOOP_END:
            if self.tape[self.dp] != 0:
                self.ip = arg
                return False

        else:
            raise TapewormRuntimeError(f"Unknown opcode: {opcode}", ip=self.ip, dp=self.dp)

        self.ip += 1
        return self.ip >= len(self.instructions)

    def run(self):
        while True:
            halted = self.step()
            if halted:
                break

    def run_range(self, start_ip: int, end_ip: int):
        self.ip = start_ip
        while self.ip < end_ip:
            self.step()

    def dump(self, color: bool = False, full: bool = False) -> str:
        """Post-run report: data pointer and tape contents.

        Unless full is set, the run of zero cells at the end of the tape is
        collapsed into a count (the current cell is always shown).
        """
        end = len(self.tape)
        if not full:
            end = self.dp + 1
            for i in range(len(self.tape) - 1, self.dp, -1):
                if self.tape[i] != 0:
                    end = i + 1
                    break

        cells = []
        for i in range(end):
            text = str(self.tape[i])
            if color and i == self.dp:
                self._ensure_colorama()
                text = f"\x1b[33m{text}\x1b[0m"
            cells.append(text)

        report = f"data pointer: {self.dp}, tape: [{', '.join(cells)}"
        hidden = len(self.tape) - end
        if hidden:
            report += f", ... ({hidden} zero cells)"
        return report + "]"


def run(program, bracket_map, tape, input_source, output_sink) -> int:
    """Execute an opcode sequence against a caller-owned tape.

    The tape (a bytearray) is mutated in place; on a runtime error it is left
    exactly as it was at the failing instruction. Returns the final data
    pointer.
    """
    linked = Program()
    for i, opcode in enumerate(program):
        linked.emit(opcode, bracket_map.get(i) if opcode in JUMPS else None)

    vm = VM(linked, tape=tape, input_source=input_source, output_sink=output_sink)
    vm.run()
    return vm.dp
