import io
import sys


class InputSource:
    """Anything that can hand the VM one byte at a time.

    read_byte() returns an int in 0..255, or None once input is exhausted.
    """

    def read_byte(self):
        raise NotImplementedError


class OutputSink:
    def write_byte(self, value: int):
        raise NotImplementedError


class StdinSource(InputSource):
    def __init__(self, stream=None):
        self.stream = stream

    def read_byte(self):
        # Binary layer: one byte per call even when the terminal hands us whole lines.
        stream = self.stream or sys.stdin.buffer
        data = stream.read(1)
        if not data:
            return None
        return data[0]


class StdoutSink(OutputSink):
    def __init__(self, stream=None):
        self.stream = stream

    def write_byte(self, value: int):
        stream = self.stream
        if stream is None:
            # keep ordering with text already printed through sys.stdout
            sys.stdout.flush()
            stream = sys.stdout.buffer
        stream.write(bytes((value,)))
        stream.flush()


class BytesSource(InputSource):
    def __init__(self, data=b""):
        if isinstance(data, str):
            data = data.encode("latin-1")
        self.buffer = io.BytesIO(data)

    def read_byte(self):
        data = self.buffer.read(1)
        if not data:
            return None
        return data[0]


class BufferSink(OutputSink):
    def __init__(self):
        self.buffer = io.BytesIO()

    def write_byte(self, value: int):
        self.buffer.write(bytes((value,)))

    def getvalue(self) -> bytes:
        return self.buffer.getvalue()
