"""Two-player tic-tac-toe server over UDP."""

from __future__ import annotations

import argparse
import socket
import sys
from collections import deque

from netlab.board import InvalidMove, Match, Outcome, mark_for, parse_answer, parse_move
from netlab.tcp_server import (
    BOTH_AGREED,
    BOTH_DECLINED,
    DRAW_MESSAGE,
    INVALID_MOVE_MESSAGE,
    OPPONENT_DECLINED,
    PLAY_AGAIN_PROMPT,
    WAITING_DECISION,
)

PORT = 8080
BUFFER_SIZE = 1024


class UdpGameServer:
    """Referees tic-tac-toe between the first two addresses that say hello."""

    def __init__(self, host="0.0.0.0", port=PORT):
        self.match = Match()
        self._sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        try:
            self._sock.bind((host, port))
        except OSError:
            self._sock.close()
            raise
        # Datagrams from a known player that arrived while another was awaited.
        self._inbox = {}

    @property
    def address(self):
        return self._sock.getsockname()

    def close(self):
        self._sock.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def _send(self, addr, text):
        try:
            self._sock.sendto(text.encode(), addr)
        except OSError:
            pass

    def _watch(self, *addrs):
        for addr in addrs:
            self._inbox.setdefault(addr, deque())

    def _recv_from(self, addr):
        """Return the next message from addr; an empty string means it left."""
        queue = self._inbox.setdefault(addr, deque())
        if queue:
            return queue.popleft()
        while True:
            try:
                data, source = self._sock.recvfrom(BUFFER_SIZE)
            except OSError:
                return ""
            text = data.decode("utf-8", errors="replace")
            if source == addr:
                return text
            if source in self._inbox:
                self._inbox[source].append(text)

    def _wait_for_players(self):
        print("Waiting for Player 1...")
        _, first = self._sock.recvfrom(BUFFER_SIZE)
        print("Player 1 connected!")
        print("Waiting for Player 2...")
        while True:
            _, second = self._sock.recvfrom(BUFFER_SIZE)
            if second != first:
                break
        print("Player 2 connected!")
        self._inbox = {first: deque(), second: deque()}
        return first, second

    def serve(self):
        """Wait for two players, run their session, then shut down."""
        try:
            first, second = self._wait_for_players()
            self._run_session(first, second)
        finally:
            self.close()

    def _run_session(self, first, second):
        while True:
            self.match.reset()
            outcome = self._play_game((first, second))
            if outcome is not Outcome.WIN:
                return
            if not self.ask_play_again(first, second):
                return
            print("Starting a new game")

    def _play_game(self, addrs):
        """Play one game; returns its outcome, or None if a player left."""
        match = self.match
        notified = None
        while True:
            player = match.current_player
            addr, other = addrs[player - 1], addrs[2 - player]
            if notified != player:
                self._send(other, f"Waiting for Player {player}'s move...\n")
                notified = player
            self._send(addr, f"Your move ({mark_for(player)}): Enter the position (0-8): ")
            text = self._recv_from(addr)
            if not text:
                print(f"Player {player} disconnected.", file=sys.stderr)
                self._send(other, f"Player {player} has disconnected.\n")
                return None
            try:
                outcome = match.play(player, parse_move(text))
            except InvalidMove:
                self._send(addr, INVALID_MOVE_MESSAGE)
                continue
            rendered = match.board.render()
            self._send(addr, rendered)
            self._send(other, rendered)
            if outcome is Outcome.WIN:
                message = f"Player {player} wins!\n"
                self._send(addr, message)
                self._send(other, message)
                if not match.board.is_full():
                    return Outcome.WIN
                outcome = Outcome.DRAW
            if outcome is Outcome.DRAW:
                self._send(addr, DRAW_MESSAGE)
                self._send(other, DRAW_MESSAGE)
                return Outcome.DRAW

    def ask_play_again(self, addr, other_addr):
        """Ask both players in turn; True only if both answer yes."""
        self._watch(addr, other_addr)
        self._send(addr, PLAY_AGAIN_PROMPT)
        self._send(other_addr, WAITING_DECISION)
        first_wants = parse_answer(self._recv_from(addr))

        self._send(other_addr, PLAY_AGAIN_PROMPT)
        self._send(addr, WAITING_DECISION)
        second_wants = parse_answer(self._recv_from(other_addr))

        if first_wants and second_wants:
            self._send(addr, BOTH_AGREED)
            self._send(other_addr, BOTH_AGREED)
            return True
        if not first_wants and not second_wants:
            self._send(addr, BOTH_DECLINED)
            self._send(other_addr, BOTH_DECLINED)
            return False
        self._send(addr if first_wants else other_addr, OPPONENT_DECLINED)
        return False


def main(argv=None):
    parser = argparse.ArgumentParser(description="Two-player tic-tac-toe server over UDP.")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=PORT)
    args = parser.parse_args(argv)
    try:
        server = UdpGameServer(args.host, args.port)
    except OSError as exc:
        print(f"Bind failed: {exc}", file=sys.stderr)
        return 1
    try:
        server.serve()
    except KeyboardInterrupt:
        server.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())