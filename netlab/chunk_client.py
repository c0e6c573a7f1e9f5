"""Sender for the chunked UDP transfer, retransmitting until every ACK arrives."""

from __future__ import annotations

import argparse
import socket
import sys
import time

from netlab.packet import (
    ACK_SIZE,
    MAX_CHUNKS,
    SERVER_PORT,
    decode_ack,
    split_message,
)

TIMEOUT_SEC = 0.1
MAX_BUFFER = 1024
POLL_INTERVAL = 0.01


class ChunkSender:
    """Tracks which chunks of a message are sent and acknowledged."""

    def __init__(self, sock, address, message, timeout=TIMEOUT_SEC, clock=time.monotonic):
        self.sock = sock
        self.address = address
        self.timeout = timeout
        self.clock = clock
        self.packets = split_message(message)
        if len(self.packets) > MAX_CHUNKS:
            raise ValueError(f"message needs more than {MAX_CHUNKS} chunks")
        self._last_sent = {}
        self._acked = set()

    @property
    def total_chunks(self):
        return len(self.packets)

    def _transmit(self, seq):
        self.sock.sendto(self.packets[seq].to_bytes(), self.address)
        self._last_sent[seq] = self.clock()

    def handle_retransmissions(self):
        """Send unsent chunks and resend timed-out ones; return their numbers."""
        now = self.clock()
        transmitted = []
        for seq in self.pending():
            last = self._last_sent.get(seq)
            if last is None:
                print(f"Sending chunk {seq}")
            elif now - last > self.timeout:
                print(f"Retransmitting chunk {seq}")
            else:
                continue
            self._transmit(seq)
            transmitted.append(seq)
        return transmitted

    def handle_ack(self, seq):
        """Record an ACK; return True once every chunk is acknowledged."""
        if 0 <= seq < self.total_chunks:
            print(f"Received ACK for chunk {seq}")
            self._acked.add(seq)
        return not self.pending()

    def pending(self):
        """Chunk numbers still waiting for an acknowledgement, in order."""
        return [seq for seq in range(self.total_chunks) if seq not in self._acked]


def run_client(server_ip, server_port, message):
    """Send message to the server; return the number of chunks delivered."""
    address = (server_ip, server_port)
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
        sock.setblocking(False)
        sender = ChunkSender(sock, address, message)
        print(f"Sending message to server {server_ip}:{server_port}")
        while sender.pending():
            sender.handle_retransmissions()
            try:
                data = sock.recv(ACK_SIZE + 1)
            except (BlockingIOError, InterruptedError):
                data = None
            if data is not None and len(data) == ACK_SIZE:
                sender.handle_ack(decode_ack(data))
            time.sleep(POLL_INTERVAL)
    print("All chunks acknowledged. Message sent successfully.")
    return sender.total_chunks


def main(argv=None):
    parser = argparse.ArgumentParser(description="Send a message in acknowledged UDP chunks.")
    parser.add_argument("--ip")
    parser.add_argument("--port", type=int)
    parser.add_argument("--message")
    args = parser.parse_args(argv)
    try:
        ip = args.ip if args.ip is not None else input("Enter server IP: ").strip()
        port = args.port if args.port is not None else int(input("Enter server port: "))
        message = args.message
        if message is None:
            message = input("Enter message to send: ")
    except (EOFError, ValueError) as exc:
        print(f"bad input: {exc}", file=sys.stderr)
        return 1
    message = message.split("\n", 1)[0][: MAX_BUFFER - 1]
    try:
        run_client(ip, port, message)
    except OSError as exc:
        print(f"sendto failed: {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())