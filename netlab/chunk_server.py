"""Receiver for the chunked UDP transfer, with deliberately lossy ACKs."""

from __future__ import annotations

import argparse
import random
import socket
import sys
from dataclasses import dataclass, field

from netlab.packet import MAX_CHUNKS, PACKET_SIZE, SERVER_PORT, Packet, encode_ack

ACK_PROBABILITY = 2 / 3


@dataclass
class ChunkReceiver:
    """Collects chunks of one message until all are received and acknowledged."""

    chunks: dict = field(default_factory=dict)
    received: set = field(default_factory=set)
    acked: set = field(default_factory=set)
    total_chunks: int = 0
    all_chunks_received: bool = False

    def accept(self, packet):
        """Store a chunk; return False if its number is out of range."""
        if packet.seq_num >= MAX_CHUNKS:
            return False
        self.chunks[packet.seq_num] = packet.payload
        self.received.add(packet.seq_num)
        self.total_chunks = packet.total_chunks
        return True

    def mark_acked(self, seq):
        self.acked.add(seq)

    def process_received_data(self):
        """Return the whole message once complete and acknowledged, else None."""
        if self.total_chunks == 0:
            return None
        expected = range(self.total_chunks)
        if not self.all_chunks_received:
            self.all_chunks_received = all(seq in self.received for seq in expected)
        if not self.all_chunks_received:
            return None
        if not all(seq in self.acked for seq in expected):
            return None
        message = b"".join(self.chunks.get(seq, b"") for seq in expected)
        self.received.clear()
        self.acked.clear()
        self.total_chunks = 0
        self.all_chunks_received = False
        return message


class ChunkServer:
    """UDP server that acknowledges chunks with a given probability."""

    def __init__(self, host="127.0.0.1", port=SERVER_PORT, ack_probability=ACK_PROBABILITY, rng=None):
        self.ack_probability = ack_probability
        self.rng = rng if rng is not None else random.Random()
        self.receiver = ChunkReceiver()
        self._sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        try:
            self._sock.bind((host, port))
        except OSError:
            self._sock.close()
            raise

    @property
    def address(self):
        return self._sock.getsockname()

    def close(self):
        self._sock.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def _send_ack(self, seq, addr):
        self._sock.sendto(encode_ack(seq), addr)
        self.receiver.mark_acked(seq)
        print(f"Sent ACK for chunk {seq}")

    def handle_datagram(self, data, addr):
        """Handle one datagram; return the completed message, if any."""
        if len(data) != PACKET_SIZE:
            return None
        packet = Packet.from_bytes(data)
        print(
            f"Received chunk {packet.seq_num} of {packet.total_chunks}, "
            f"size {packet.chunk_size}"
        )
        if not self.receiver.accept(packet):
            return None
        if self.rng.random() < self.ack_probability:
            self._send_ack(packet.seq_num, addr)
        else:
            print(f"Randomly skipping ACK for chunk {packet.seq_num}")
        message = self.receiver.process_received_data()
        if message is not None:
            text = message.decode("utf-8", errors="replace")
            print(f"All chunks received and acknowledged. Complete message: {text}")
        return message

    def serve(self):
        """Receive and acknowledge chunks until interrupted."""
        host, port = self.address
        print(f"Server running on {host}:{port}")
        while True:
            data, addr = self._sock.recvfrom(PACKET_SIZE + 1)
            self.handle_datagram(data, addr)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Receive messages sent in UDP chunks.")
    parser.add_argument("--ip")
    parser.add_argument("--port", type=int)
    args = parser.parse_args(argv)
    try:
        ip = args.ip if args.ip is not None else input("Enter IP address to bind to: ").strip()
        port = args.port if args.port is not None else int(input("Enter port to bind to: "))
    except (EOFError, ValueError) as exc:
        print(f"bad input: {exc}", file=sys.stderr)
        return 1
    try:
        server = ChunkServer(ip, port)
    except OSError as exc:
        print(f"bind failed: {exc}", file=sys.stderr)
        return 1
    with server:
        try:
            server.serve()
        except KeyboardInterrupt:
            pass
        except OSError as exc:
            print(f"recvfrom failed: {exc}", file=sys.stderr)
            return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())