import program as op
from errors import SourceFileError, UnknownCharacterError

SOURCE_SUFFIX = ".bf"

CHAR_TO_OPCODE = {
    ">": op.MOVE_RIGHT,
    "<": op.MOVE_LEFT,
    "+": op.INCREMENT,
    "-": op.DECREMENT,
    ".": op.OUTPUT,
    ",": op.INPUT,
    "[": op.LOOP_START,
    "]": op.LOOP_END,
}


class Token:
    def __init__(self, type, value=None, line=1, column=1):
        self.type = type
        self.value = value
        self.line = line
        self.column = column

    def __repr__(self):
        if self.value is not None:
            return f"{self.type}({self.value})"
        return f"{self.type}"


class Lexer:
    def __init__(self, text):
        self.text = text
        self.pos = 0
        self.current_char = text[0] if text else None
        self.line = 1
        self.column = 1

    def advance(self):
        # track line/column based on current_char before moving
        if self.current_char == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        self.pos += 1
        if self.pos >= len(self.text):
            self.current_char = None
        else:
            self.current_char = self.text[self.pos]

    # spaces, tabs and line terminators never produce an opcode
    def skip_whitespace(self):
        while self.current_char and self.current_char.isspace():
            self.advance()

    def get_next_token(self):
        self.skip_whitespace()
        if self.current_char is None:
            return Token("EOF", line=self.line, column=self.column)

        opcode = CHAR_TO_OPCODE.get(self.current_char)
        if opcode is None:
            raise UnknownCharacterError(self.current_char, line=self.line, column=self.column)

        token = Token(opcode, self.current_char, line=self.line, column=self.column)
        self.advance()
        return token

    def tokens(self):
        result = []
        while True:
            token = self.get_next_token()
            if token.type == "EOF":
                return result
            result.append(token)


def tokenize(source: str) -> list:
    """Turn program text into its ordered list of opcodes.

    Raises UnknownCharacterError on the first character that is neither one
    of the eight commands nor whitespace.
    """
    return [token.type for token in Lexer(source).tokens()]


def load_source(path: str, require_suffix: bool = True) -> str:
    if require_suffix and not path.endswith(SOURCE_SUFFIX):
        raise SourceFileError(path, "file extension not recognized")
    try:
        with open(path, "r", encoding="utf-8") as f:
            return f.read()
    except FileNotFoundError:
        raise SourceFileError(path, "file not found")
    except (OSError, UnicodeDecodeError):
        raise SourceFileError(path, "cannot read file")
