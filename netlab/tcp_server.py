"""Two-player tic-tac-toe server over TCP."""

from __future__ import annotations

import argparse
import socket
import sys

from netlab.board import InvalidMove, Match, Outcome, mark_for, parse_answer, parse_move

PORT = 8080
RECV_SIZE = 1023

START_MESSAGE = "Both players are connected. Game starting!\n"
INVALID_MOVE_MESSAGE = "Invalid move. Try again.\n"
DRAW_MESSAGE = "It's a draw!\n"
PLAY_AGAIN_PROMPT = "Do you want to play again? (y/n): "
WAITING_DECISION = "Waiting for the other player to decide...\n"
BOTH_AGREED = "Both players agreed to play again! Resetting the board...\n"
BOTH_DECLINED = "Both players declined to play again. Closing connection.\n"
OPPONENT_DECLINED = "Your opponent does not wish to play again. Closing connection.\n"
OPPONENT_GONE = "Your opponent disconnected. You win by default.\n"


def _send(conn, text):
    """Send text, reporting whether the peer could be reached."""
    try:
        conn.sendall(text.encode())
    except OSError:
        return False
    return True


def _recv(conn):
    """Receive one message; an empty string means the peer is gone."""
    try:
        data = conn.recv(RECV_SIZE)
    except OSError:
        return ""
    return data.decode("utf-8", errors="replace")


class TcpGameServer:
    """Accepts two players and referees tic-tac-toe games between them."""

    def __init__(self, host="0.0.0.0", port=PORT):
        self.match = Match()
        self._listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            self._listener.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            self._listener.bind((host, port))
            self._listener.listen(2)
        except OSError:
            self._listener.close()
            raise

    @property
    def address(self):
        return self._listener.getsockname()

    def close(self):
        self._listener.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def serve(self):
        """Wait for two players, run their session, then shut down."""
        try:
            print("Waiting for players...")
            first, _ = self._listener.accept()
            print("Player 1 connected!")
            second, _ = self._listener.accept()
            print("Player 2 connected!")
            with first, second:
                _send(first, START_MESSAGE)
                _send(second, START_MESSAGE)
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

    def _play_game(self, conns):
        """Play one game; returns its outcome, or None if a player left."""
        match = self.match
        notified = None
        while True:
            player = match.current_player
            conn, other = conns[player - 1], conns[2 - player]
            if notified != player:
                _send(other, f"Waiting for Player {player}'s move...\n")
                notified = player
            _send(conn, f"Your move ({mark_for(player)}): Enter the position (0-8): ")
            text = _recv(conn)
            if not text:
                print(f"Player {player} disconnected.", file=sys.stderr)
                _send(other, f"Player {player} has disconnected.\n")
                return None
            try:
                outcome = match.play(player, parse_move(text))
            except InvalidMove:
                _send(conn, INVALID_MOVE_MESSAGE)
                continue
            rendered = match.board.render()
            _send(conn, rendered)
            _send(other, rendered)
            if outcome is Outcome.WIN:
                message = f"Player {player} wins!\n"
                _send(conn, message)
                _send(other, message)
                if not match.board.is_full():
                    return Outcome.WIN
                outcome = Outcome.DRAW
            if outcome is Outcome.DRAW:
                _send(conn, DRAW_MESSAGE)
                _send(other, DRAW_MESSAGE)
                return Outcome.DRAW

    def ask_play_again(self, conn, other_conn):
        """Ask both players in turn; True only if both answer yes."""
        if not _send(conn, PLAY_AGAIN_PROMPT):
            return self._abandon(conn, other_conn)
        if not _send(other_conn, WAITING_DECISION):
            return self._abandon(other_conn, conn)
        answer = _recv(conn)
        if not answer:
            return self._abandon(conn, other_conn)
        first_wants = parse_answer(answer)

        if not _send(other_conn, PLAY_AGAIN_PROMPT):
            return self._abandon(other_conn, conn)
        _send(conn, WAITING_DECISION)
        answer = _recv(other_conn)
        if not answer:
            return self._abandon(other_conn, conn)
        second_wants = parse_answer(answer)

        if first_wants and second_wants:
            _send(conn, BOTH_AGREED)
            _send(other_conn, BOTH_AGREED)
            return True
        if not first_wants and not second_wants:
            _send(conn, BOTH_DECLINED)
            _send(other_conn, BOTH_DECLINED)
            return False
        _send(conn if first_wants else other_conn, OPPONENT_DECLINED)
        return False

    @staticmethod
    def _abandon(gone, remaining):
        print("A player disconnected while deciding.", file=sys.stderr)
        _send(remaining, OPPONENT_GONE)
        return False


def main(argv=None):
    parser = argparse.ArgumentParser(description="Two-player tic-tac-toe server over TCP.")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=PORT)
    args = parser.parse_args(argv)
    try:
        server = TcpGameServer(args.host, args.port)
    except OSError as exc:
        print(f"bind failed: {exc}", file=sys.stderr)
        return 1
    try:
        server.serve()
    except KeyboardInterrupt:
        server.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())