class TapewormError(Exception):
    pass


def _where(line, column):
    if line is None:
        return ""
    if column is None:
        return f" at line {line}"
    return f" at line {line}, col {column}"


class SourceFileError(TapewormError):
    def __init__(self, path: str, message: str):
        super().__init__(message)
        self.path = path
        self.message = message

    def format(self, indent: str = "") -> str:
        return f"{indent}Source error: {self.message} \"{self.path}\""

    def __str__(self) -> str:
        return self.format()


class LexError(TapewormError):
    def __init__(self, message: str, line: int | None = None, column: int | None = None):
        super().__init__(message)
        self.message = message
        self.line = line
        self.column = column

    def format(self, indent: str = "") -> str:
        return f"{indent}Lex error: {self.message}{_where(self.line, self.column)}"

    def __str__(self) -> str:
        return self.format()


class UnknownCharacterError(LexError):
    def __init__(self, char: str, line: int | None = None, column: int | None = None):
        super().__init__(f"Unknown character: {char!r}", line=line, column=column)
        self.char = char


class UnmatchedOpenBracketError(LexError):
    def __init__(self, index: int, line: int | None = None, column: int | None = None):
        super().__init__(f"Unmatched '[' at instruction {index}", line=line, column=column)
        self.index = index


class UnmatchedCloseBracketError(LexError):
    def __init__(self, index: int, line: int | None = None, column: int | None = None):
        super().__init__(f"Unmatched ']' at instruction {index}", line=line, column=column)
        self.index = index


class TapewormRuntimeError(TapewormError):
    def __init__(self, message: str, ip: int | None = None, dp: int | None = None, location=None):
        super().__init__(message)
        self.message = message
        self.ip = ip
        self.dp = dp
        self.location = location or {}

    def format(self, indent: str = "") -> str:
        lines = [f"{indent}Runtime error: {self.message}"]
        if self.ip is not None:
            pos = _where(self.location.get("line"), self.location.get("column"))
            lines.append(f"{indent}  ip={self.ip:04d} dp={self.dp}{pos}")
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.format()


class PointerOutOfBoundsError(TapewormRuntimeError):
    def __init__(self, ip: int, dp: int, direction: str, tape_size: int, location=None):
        target = dp + 1 if direction == "right" else dp - 1
        super().__init__(
            f"data pointer moved {direction} out of bounds: {target} not in [0, {tape_size})",
            ip=ip,
            dp=dp,
            location=location,
        )
        self.direction = direction
        self.tape_size = tape_size


class IoFailureError(TapewormRuntimeError):
    def __init__(self, cause: OSError, ip: int | None = None, dp: int | None = None, location=None):
        super().__init__(f"I/O failure: {cause}", ip=ip, dp=dp, location=location)
        self.cause = cause
