import socket
import threading

import pytest

from netlab.tcp_server import TcpGameServer


@pytest.fixture
def server():
    srv = TcpGameServer("127.0.0.1", 0)
    yield srv
    srv.close()


def _pair():
    server_end, client_end = socket.socketpair()
    client_end.settimeout(5)
    return server_end, client_end


def _drain(sock):
    chunks = []
    while True:
        data = sock.recv(4096)
        if not data:
            break
        chunks.append(data)
    return b"".join(chunks).decode()


class _Peer:
    def __init__(self, address):
        self.sock = socket.create_connection(address, timeout=5)
        self.text = ""
        self.pos = 0

    def expect(self, marker):
        while (index := self.text.find(marker, self.pos)) < 0:
            data = self.sock.recv(4096)
            if not data:
                raise AssertionError(f"connection closed while waiting for {marker!r}")
            self.text += data.decode()
        self.pos = index + len(marker)

    def send(self, text):
        self.sock.sendall(text.encode())

    def close(self):
        self.sock.close()


def test_ask_play_again_both_agree(server):
    s1, c1 = _pair()
    s2, c2 = _pair()
    c1.sendall(b"y")
    c2.sendall(b"Y")
    assert server.ask_play_again(s1, s2) is True
    s1.close()
    s2.close()
    first, second = _drain(c1), _drain(c2)
    assert first.startswith("Do you want to play again? (y/n): ")
    assert "Both players agreed to play again! Resetting the board...\n" in first
    assert "Waiting for the other player to decide...\n" in second
    assert "Both players agreed to play again!" in second


def test_ask_play_again_both_decline(server):
    s1, c1 = _pair()
    s2, c2 = _pair()
    c1.sendall(b"n")
    c2.sendall(b"n")
    assert server.ask_play_again(s1, s2) is False
    s1.close()
    s2.close()
    assert "Both players declined to play again." in _drain(c1)
    assert "Both players declined to play again." in _drain(c2)


def test_ask_play_again_one_declines(server):
    s1, c1 = _pair()
    s2, c2 = _pair()
    c1.sendall(b"y")
    c2.sendall(b"n")
    assert server.ask_play_again(s1, s2) is False
    s1.close()
    s2.close()
    first, second = _drain(c1), _drain(c2)
    assert "Your opponent does not wish to play again." in first
    assert "Your opponent does not wish to play again." not in second


def test_ask_play_again_first_player_gone(server):
    s1, c1 = _pair()
    s2, c2 = _pair()
    c1.close()
    assert server.ask_play_again(s1, s2) is False
    s1.close()
    s2.close()
    assert "Your opponent disconnected. You win by default.\n" in _drain(c2)


def _start(server):
    thread = threading.Thread(target=server.serve, daemon=True)
    thread.start()
    p1 = _Peer(server.address)
    p2 = _Peer(server.address)
    p1.expect("Both players are connected. Game starting!")
    p2.expect("Both players are connected. Game starting!")
    return thread, p1, p2


def _move(peer, position):
    peer.expect("Your move")
    peer.send(position)


def test_full_game_with_win_then_decline(server):
    thread, p1, p2 = _start(server)
    p2.expect("Waiting for Player 1's move...")
    p1.expect("Your move (X)")
    p1.send("9")
    p1.expect("Invalid move. Try again.")
    p1.send_after = None
    _move(p1, "0")
    _move(p2, "3")
    _move(p1, "1")
    _move(p2, "4")
    _move(p1, "2")
    p1.expect("Player 1 wins!")
    p2.expect("Player 1 wins!")
    p1.expect("Do you want to play again?")
    p1.send("n")
    p2.expect("Do you want to play again?")
    p2.send("n")
    p1.expect("Both players declined to play again.")
    p2.expect("Both players declined to play again.")
    thread.join(5)
    assert not thread.is_alive()
    assert " X | X | X" in p2.text
    p1.close()
    p2.close()


def test_draw_ends_session(server):
    thread, p1, p2 = _start(server)
    sequence = ["0", "1", "2", "4", "3", "5", "7", "6", "8"]
    for index, position in enumerate(sequence):
        _move(p1 if index % 2 == 0 else p2, position)
    p1.expect("It's a draw!")
    p2.expect("It's a draw!")
    thread.join(5)
    assert not thread.is_alive()
    assert "wins" not in p1.text
    p1.close()
    p2.close()


def test_disconnect_is_reported_to_opponent(server):
    thread, p1, p2 = _start(server)
    p1.expect("Your move")
    p1.close()
    p2.expect("Player 1 has disconnected.")
    thread.join(5)
    assert not thread.is_alive()
    p2.close()