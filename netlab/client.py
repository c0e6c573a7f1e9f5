"""Interactive tic-tac-toe clients for the TCP and UDP game servers."""

from __future__ import annotations

import argparse
import socket
import sys
from enum import Enum

PORT = 8080
BUFFER_SIZE = 1024

DECLINE_MESSAGE = "You chose not to play again. Closing connection.\n"
GAME_OVER_MESSAGE = "Game over.\n"


class PromptKind(Enum):
    """What a server message asks of the player."""

    MOVE = "move"
    PLAY_AGAIN = "play_again"
    GAME_OVER = "game_over"
    OTHER = "other"


def classify(message):
    """Decide what a message from the server asks for."""
    if "Your move" in message:
        return PromptKind.MOVE
    if "Do you want to play again?" in message:
        return PromptKind.PLAY_AGAIN
    if "wins" in message or "draw" in message:
        return PromptKind.GAME_OVER
    return PromptKind.OTHER


def _write(text):
    print(text, end="", flush=True)


def _ask(input_fn, prompt):
    try:
        line = input_fn(prompt)
    except EOFError:
        return ""
    return line.split("\n", 1)[0]


def _declines(reply):
    return reply[:1] in ("n", "N")


def run_tcp_client(host="127.0.0.1", port=PORT, input_fn=input, output_fn=_write):
    """Play through a TCP connection until the game session ends."""
    with socket.create_connection((host, port)) as sock:
        output_fn("Connected to the server.\n")
        while True:
            try:
                data = sock.recv(BUFFER_SIZE)
            except OSError as exc:
                output_fn(f"recv error: {exc}\n")
                break
            if not data:
                output_fn("Server closed the connection.\n")
                break
            message = data.decode("utf-8", errors="replace")
            output_fn(message)
            kind = classify(message)
            if kind is PromptKind.MOVE:
                reply = _ask(input_fn, "Enter row and column: ")
                sock.sendall(reply.encode())
            elif kind is PromptKind.PLAY_AGAIN:
                reply = _ask(input_fn, "Enter your response (y/n): ")
                sock.sendall(reply.encode())
                if _declines(reply):
                    output_fn(DECLINE_MESSAGE)
                    break
            elif kind is PromptKind.GAME_OVER:
                output_fn(GAME_OVER_MESSAGE)
    return 0


def run_udp_client(host="127.0.0.1", port=PORT, input_fn=input, output_fn=_write):
    """Play over UDP until the game session ends."""
    server = (host, port)
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
        output_fn("Connected to the server player is ready...\n")
        sock.sendto(b"", server)
        while True:
            try:
                data, server = sock.recvfrom(BUFFER_SIZE)
            except OSError:
                data = b""
            if not data:
                output_fn("Server closed the connection or error occurred.\n")
                break
            message = data.decode("utf-8", errors="replace")
            output_fn(message)
            kind = classify(message)
            if kind is PromptKind.MOVE:
                reply = _ask(input_fn, "Enter your move (0-8): ")
                sock.sendto(reply.encode(), server)
            elif kind is PromptKind.PLAY_AGAIN:
                reply = _ask(input_fn, "Enter your response (y/n): ")
                sock.sendto(reply.encode(), server)
                if _declines(reply):
                    output_fn(DECLINE_MESSAGE)
                    break
            elif kind is PromptKind.GAME_OVER:
                output_fn(GAME_OVER_MESSAGE)
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(description="Tic-tac-toe client.")
    parser.add_argument("protocol", choices=("tcp", "udp"))
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=PORT)
    args = parser.parse_args(argv)
    runner = run_tcp_client if args.protocol == "tcp" else run_udp_client
    try:
        return runner(args.host, args.port)
    except OSError as exc:
        print(f"Connection Failed: {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 0


if __name__ == "__main__":
    sys.exit(main())