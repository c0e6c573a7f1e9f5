"""Wire format for the chunked UDP transfer: data packets and ACKs."""

from __future__ import annotations

import struct
from dataclasses import dataclass

CHUNK_SIZE = 8
MAX_CHUNKS = 1024
SERVER_PORT = 8888

_HEADER = struct.Struct("!III")
_ACK = struct.Struct("!I")

PACKET_SIZE = _HEADER.size + CHUNK_SIZE
ACK_SIZE = _ACK.size


@dataclass(frozen=True)
class Packet:
    """One chunk of a message, with its position and the chunk count."""

    seq_num: int
    total_chunks: int
    chunk_size: int
    data: bytes = b""

    @property
    def payload(self):
        """The meaningful bytes of the chunk, without padding."""
        return self.data[: self.chunk_size]

    def to_bytes(self):
        """Encode as three big-endian 32-bit words and zero-padded data."""
        if len(self.data) > CHUNK_SIZE:
            raise ValueError(f"chunk data longer than {CHUNK_SIZE} bytes")
        header = _HEADER.pack(self.seq_num, self.total_chunks, self.chunk_size)
        return header + self.data.ljust(CHUNK_SIZE, b"\0")

    @classmethod
    def from_bytes(cls, data):
        """Decode a packet; the datagram must be exactly PACKET_SIZE bytes."""
        if len(data) != PACKET_SIZE:
            raise ValueError(
                f"packet must be {PACKET_SIZE} bytes, got {len(data)}"
            )
        seq_num, total_chunks, chunk_size = _HEADER.unpack_from(data)
        return cls(seq_num, total_chunks, chunk_size, bytes(data[_HEADER.size:]))


def split_message(data, chunk_size=CHUNK_SIZE):
    """Cut a message into numbered packets of at most chunk_size bytes."""
    if isinstance(data, str):
        data = data.encode()
    if chunk_size <= 0:
        raise ValueError("chunk size must be positive")
    pieces = [data[start:start + chunk_size] for start in range(0, len(data), chunk_size)]
    total = len(pieces)
    return [Packet(seq, total, len(piece), piece) for seq, piece in enumerate(pieces)]


def encode_ack(seq):
    """Encode an acknowledgement for chunk seq."""
    return _ACK.pack(seq)


def decode_ack(data):
    """Decode an acknowledgement; it must be exactly four bytes."""
    if len(data) != ACK_SIZE:
        raise ValueError(f"ack must be {ACK_SIZE} bytes, got {len(data)}")
    return _ACK.unpack(data)[0]