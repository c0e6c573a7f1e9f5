"""Two-way chunked messaging over UDP with per-chunk ACKs and resends.

One side (the sender) binds a well-known port and waits for the other
(the receiver) to say ``CONNECT``. After the handshake both sides take
turns: each message is announced by its chunk count, sent as numbered
chunks that are acknowledged one by one, and confirmed with a final
``ACK`` once the whole message is in.
"""

from __future__ import annotations

import argparse
import socket
import struct
import sys

from netlab.packet import CHUNK_SIZE, decode_ack, encode_ack

SENDER_PORT = 8888
MAX_CHUNKS = 1000
MAX_MESSAGE_SIZE = 1024
RESEND_TIMEOUT = 0.1

CONNECT = b"CONNECT"
FINAL_ACK = b"ACK"

_SEQ = struct.Struct("!I")
_RECV_SIZE = 64


class ProtocolError(Exception):
    """Raised when the peer does not follow the exchange."""


def chunk_message(message):
    """Cut a message into pieces of at most CHUNK_SIZE bytes."""
    if isinstance(message, str):
        message = message.encode()
    return [message[start:start + CHUNK_SIZE] for start in range(0, len(message), CHUNK_SIZE)]


def encode_chunk(seq, data):
    """Encode a chunk as a big-endian sequence number and zero-padded data."""
    if len(data) > CHUNK_SIZE:
        raise ValueError(f"chunk data longer than {CHUNK_SIZE} bytes")
    return _SEQ.pack(seq) + data.ljust(CHUNK_SIZE, b"\0")


def decode_chunk(raw):
    """Decode a chunk datagram into (seq, data), dropping the zero padding."""
    if not _SEQ.size < len(raw) <= _SEQ.size + CHUNK_SIZE:
        raise ProtocolError(f"not a chunk datagram: {len(raw)} bytes")
    (seq,) = _SEQ.unpack_from(raw)
    data = bytes(raw[_SEQ.size:]).split(b"\0", 1)[0]
    return seq, data


def all_chunks_acknowledged(acked, total):
    """True if every chunk number below total is in acked."""
    return all(seq in acked for seq in range(total))


def wait_for_receiver(sock):
    """Wait for a CONNECT, answer it, and return the receiver's address."""
    print("Waiting for receiver to connect...")
    data, address = sock.recvfrom(16)
    if data != CONNECT:
        raise ProtocolError("failed to establish connection with the receiver")
    print("Receiver is successfully connected. Sending acknowledgment.")
    sock.sendto(FINAL_ACK, address)
    return address


def initiate_connection(sock, address):
    """Say CONNECT to the sender at address and wait for its ACK."""
    print("Initiating connection with sender...")
    sock.sendto(CONNECT, address)
    data, _ = sock.recvfrom(16)
    if data != FINAL_ACK:
        raise ProtocolError("failed to establish connection with the sender")
    print("Connection established with sender")


def _poll(sock):
    try:
        data, _ = sock.recvfrom(_RECV_SIZE)
    except TimeoutError:
        return None
    return data


def _await_final_ack(sock):
    while True:
        data, _ = sock.recvfrom(_RECV_SIZE)
        if data == FINAL_ACK:
            return
        if len(data) != _SEQ.size:
            raise ProtocolError("no final ACK from the peer")
        # A late duplicate of a chunk ACK; keep waiting.


def send_message(sock, address, message):
    """Send message in acknowledged chunks; return the number of chunks."""
    chunks = chunk_message(message)
    total = len(chunks)
    if total > MAX_CHUNKS:
        raise ProtocolError(f"message needs more than {MAX_CHUNKS} chunks")
    print(f"Length of the message typed is {sum(map(len, chunks))}")
    print(f"Total chunks to send is: {total}")

    sock.sendto(_SEQ.pack(total), address)
    for seq, chunk in enumerate(chunks):
        sock.sendto(encode_chunk(seq, chunk), address)
        print(f"Sent chunk {seq} (size: {len(chunk)}) value: {chunk.decode(errors='replace')}")

    acked = set()
    finished = False
    previous_timeout = sock.gettimeout()
    sock.settimeout(RESEND_TIMEOUT)
    try:
        while not finished and not all_chunks_acknowledged(acked, total):
            for seq in range(total):
                if seq in acked:
                    continue
                reply = _poll(sock)
                if reply == FINAL_ACK:
                    finished = True
                    break
                if reply is not None and len(reply) == _SEQ.size:
                    ack = decode_ack(reply)
                    if ack < total and ack not in acked:
                        acked.add(ack)
                        print(f"Received ACK for chunk {ack}")
                if seq not in acked:
                    sock.sendto(encode_chunk(seq, chunks[seq]), address)
                    print(f"Resent chunk {seq}")
    finally:
        sock.settimeout(previous_timeout)
    print("All chunks acknowledged.")

    if not finished:
        _await_final_ack(sock)
    print("Received ACK from peer.")
    return total


def receive_message(sock):
    """Receive one chunked message, acknowledging each chunk; return its text."""
    while True:
        data, address = sock.recvfrom(_RECV_SIZE)
        if len(data) == _SEQ.size:
            (total,) = _SEQ.unpack(data)
            break
    if total > MAX_CHUNKS:
        raise ProtocolError(f"peer announced {total} chunks, more than {MAX_CHUNKS}")
    print(f"Expecting {total} chunks")

    chunks = {}
    acked = set()
    while len(chunks) < total or not all_chunks_acknowledged(acked, total):
        raw, address = sock.recvfrom(_RECV_SIZE)
        try:
            seq, data = decode_chunk(raw)
        except ProtocolError:
            continue
        if seq >= total:
            continue
        if seq not in chunks:
            print(f"Received chunk {seq}: {data.decode(errors='replace')}")
            chunks[seq] = data
        sock.sendto(encode_ack(seq), address)
        print(f"Sent ACK for chunk {seq}")
        acked.add(seq)

    message = b"".join(chunks[seq] for seq in range(total)).decode("utf-8", errors="replace")
    print(f"Received message: {message}")
    sock.sendto(FINAL_ACK, address)
    print("Sent ACK after receiving message.")
    return message


def _read_message(prompt):
    line = input(prompt)
    return line.split("\n", 1)[0][: MAX_MESSAGE_SIZE - 1]


def _report(exc):
    print(f"Error: {exc}", file=sys.stderr)


def sender_main(argv=None):
    parser = argparse.ArgumentParser(description="Chunked UDP messaging: the side that waits.")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=SENDER_PORT)
    args = parser.parse_args(argv)
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
        try:
            sock.bind((args.host, args.port))
        except OSError as exc:
            print(f"Bind failed: {exc}", file=sys.stderr)
            return 1
        try:
            address = wait_for_receiver(sock)
        except ProtocolError as exc:
            _report(exc)
            return 1
        try:
            while True:
                message = _read_message("Server: Enter the message to send: ")
                try:
                    send_message(sock, address, message)
                    receive_message(sock)
                except ProtocolError as exc:
                    _report(exc)
        except (EOFError, KeyboardInterrupt):
            return 0


def receiver_main(argv=None):
    parser = argparse.ArgumentParser(description="Chunked UDP messaging: the side that connects.")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=SENDER_PORT)
    args = parser.parse_args(argv)
    address = (args.host, args.port)
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
        try:
            sock.bind(("0.0.0.0", 0))
        except OSError as exc:
            print(f"Bind failed: {exc}", file=sys.stderr)
            return 1
        try:
            initiate_connection(sock, address)
        except (ProtocolError, OSError) as exc:
            _report(exc)
            return 1
        try:
            while True:
                try:
                    receive_message(sock)
                    message = _read_message("Client: Enter the message to send: ")
                    send_message(sock, address, message)
                except ProtocolError as exc:
                    _report(exc)
        except (EOFError, KeyboardInterrupt):
            return 0


if __name__ == "__main__":
    sys.exit(sender_main())