MOVE_RIGHT = "MOVE_RIGHT"
MOVE_LEFT = "MOVE_LEFT"
INCREMENT = "INCREMENT"
DECREMENT = "DECREMENT"
OUTPUT = "OUTPUT"
INPUT = "INPUT"
LOOP_START = "LOOP_START"
LOOP_END = "LOOP_END"

OPCODES = (MOVE_RIGHT, MOVE_LEFT, INCREMENT, DECREMENT, OUTPUT, INPUT, LOOP_START, LOOP_END)
JUMPS = (LOOP_START, LOOP_END)


class Program:
    def __init__(self):
        self.instructions = []   # list of (OPCODE, arg); arg is the partner index for loop opcodes
        self.debug = []          # list of debug dicts ({"line": int, "column": int}) aligned with instructions
        self.source_path = None

    def __len__(self):
        return len(self.instructions)

    @property
    def opcodes(self):
        return [opcode for opcode, _ in self.instructions]

    @property
    def bracket_map(self):
        return {i: arg for i, (opcode, arg) in enumerate(self.instructions) if opcode in JUMPS}

    def emit(self, opcode, arg=None, debug=None):
        # returns instruction index (useful for jumps)
        self.instructions.append((opcode, arg))
        self.debug.append(debug)
        return len(self.instructions) - 1

    def patch(self, index, arg):
        opcode, _ = self.instructions[index]
        self.instructions[index] = (opcode, arg)
