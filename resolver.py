from program import Program, LOOP_START, LOOP_END
from errors import UnmatchedCloseBracketError, UnmatchedOpenBracketError


def resolve_brackets(opcodes) -> dict:
    """Pair every LOOP_START with its LOOP_END (and back) by nesting depth.

    Returns a dict holding both directions. Raises UnmatchedCloseBracketError
    for a ']' with nothing open, or UnmatchedOpenBracketError naming the
    lowest '[' still open at the end.
    """
    pairs = {}
    pending = []
    for i, opcode in enumerate(opcodes):
        if opcode == LOOP_START:
            pending.append(i)
        elif opcode == LOOP_END:
            if not pending:
                raise UnmatchedCloseBracketError(i)
            start = pending.pop()
            pairs[start] = i
            pairs[i] = start

    if pending:
        raise UnmatchedOpenBracketError(pending[0])

    return pairs


class Resolver:
    def __init__(self, source_path: str | None = None):
        self.program = Program()
        self.program.source_path = source_path
        self.loop_stack = []

    def _debug_for(self, token):
        line = getattr(token, "line", None)
        if line is None:
            return None
        return {"line": line, "column": getattr(token, "column", None)}

    def emit(self, opcode, arg=None, token=None):
        return self.program.emit(opcode, arg, debug=self._debug_for(token))

    def build(self, tokens) -> Program:
        # Accepts Token objects from the lexer or bare opcode strings.
        for token in tokens:
            opcode = getattr(token, "type", token)
            if opcode == LOOP_START:
                self.loop_stack.append((self.emit(opcode, None, token), token))
            elif opcode == LOOP_END:
                index = len(self.program.instructions)
                if not self.loop_stack:
                    line, column = self._position(token)
                    raise UnmatchedCloseBracketError(index, line=line, column=column)
                start, _ = self.loop_stack.pop()
                self.emit(opcode, start, token)
                self.program.patch(start, index)
            else:
                self.emit(opcode, None, token)

        if self.loop_stack:
            start, token = self.loop_stack[0]
            line, column = self._position(token)
            raise UnmatchedOpenBracketError(start, line=line, column=column)

        return self.program

    def _position(self, token):
        return getattr(token, "line", None), getattr(token, "column", None)
