"""Buffered reading state for data arriving on a stream transport."""

from dataclasses import dataclass

from .errors import HeError, ReturnCode


@dataclass
class StreamState:
    """Tracks a buffer of incoming stream data and how much has been consumed."""

    incoming_data: bytes = b""
    read_offset: int = 0

    @property
    def incoming_data_length(self):
        return len(self.incoming_data)

    @property
    def left_to_read(self):
        return self.incoming_data_length - self.read_offset

    def setup(self, data):
        """Start reading from ``data``; the previous buffer must be fully consumed."""
        if self.left_to_read != 0:
            raise HeError(ReturnCode.ERR_SSL_ERROR, "previous stream buffer not fully read")
        self.incoming_data = bytes(data)
        self.read_offset = 0

    def read(self, size):
        """Return up to ``size`` bytes from the buffer and advance past them."""
        if size < 0:
            raise ValueError("size must not be negative")
        chunk = self.incoming_data[self.read_offset : self.read_offset + size]
        self.read_offset += len(chunk)
        return chunk