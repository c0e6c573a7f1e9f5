import socket
import threading

import pytest

from netlab.tcp_server import (
    BOTH_AGREED,
    BOTH_DECLINED,
    INVALID_MOVE_MESSAGE,
    OPPONENT_DECLINED,
    PLAY_AGAIN_PROMPT,
    WAITING_DECISION,
)
from netlab.udp_server import UdpGameServer, main


def _player():
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    sock.bind(("127.0.0.1", 0))
    sock.settimeout(5)
    return sock


def _recv(sock):
    data, _ = sock.recvfrom(1024)
    return data.decode()


def _recv_until(sock, needle):
    seen = []
    while True:
        text = _recv(sock)
        seen.append(text)
        if needle in text:
            return seen


@pytest.fixture
def server():
    srv = UdpGameServer("127.0.0.1", 0)
    yield srv
    srv.close()


@pytest.fixture
def players():
    a, b = _player(), _player()
    yield a, b
    a.close()
    b.close()


def _start(server, players):
    a, b = players
    address = server.address
    thread = threading.Thread(target=server.serve, daemon=True)
    a.sendto(b"", address)
    b.sendto(b"", address)
    thread.start()
    return address, thread


def _move(sock, address, position):
    _recv_until(sock, "Your move")
    sock.sendto(position.encode(), address)


def test_full_game_win_then_both_decline(server, players):
    a, b = players
    address, thread = _start(server, players)
    first_prompt = _recv_until(a, "Your move")
    assert first_prompt[-1] == "Your move (X): Enter the position (0-8): "
    a.sendto(b"0", address)
    waiting = _recv_until(b, "Your move")
    assert "Waiting for Player 1's move...\n" in waiting
    assert waiting[-1] == "Your move (O): Enter the position (0-8): "
    b.sendto(b"3", address)
    _move(a, address, "1")
    _move(b, address, "4")
    _move(a, address, "2")

    a_seen = _recv_until(a, "wins")
    b_seen = _recv_until(b, "wins")
    assert a_seen[-1] == "Player 1 wins!\n"
    assert b_seen[-1] == "Player 1 wins!\n"
    assert "\n X | X | X\n" in a_seen[-2]

    assert _recv_until(a, "play again")[-1] == PLAY_AGAIN_PROMPT
    a.sendto(b"n", address)
    assert _recv_until(b, "play again")[-1] == PLAY_AGAIN_PROMPT
    b.sendto(b"n", address)
    assert _recv_until(a, "declined")[-1] == BOTH_DECLINED
    assert _recv_until(b, "declined")[-1] == BOTH_DECLINED
    thread.join(5)
    assert not thread.is_alive()


def test_invalid_move_then_disconnect(server, players):
    a, b = players
    address, thread = _start(server, players)
    _move(a, address, "9")
    assert _recv_until(a, "Invalid")[-1] == INVALID_MOVE_MESSAGE
    _move(a, address, "")
    assert _recv_until(b, "disconnected")[-1] == "Player 1 has disconnected.\n"
    thread.join(5)
    assert not thread.is_alive()


def test_occupied_square_is_rejected(server, players):
    a, b = players
    address, thread = _start(server, players)
    _move(a, address, "4")
    _move(b, address, "4")
    assert _recv_until(b, "Invalid")[-1] == INVALID_MOVE_MESSAGE
    b.sendto(b"", address)
    assert _recv_until(a, "disconnected")[-1] == "Player 2 has disconnected.\n"
    thread.join(5)
    assert not thread.is_alive()


def test_ask_play_again_both_agree(server, players):
    a, b = players
    address = server.address
    # The second player's answer arrives first and must be kept for later.
    b.sendto(b"y", address)
    a.sendto(b"Y", address)
    assert server.ask_play_again(a.getsockname(), b.getsockname()) is True
    assert [_recv(a) for _ in range(3)] == [PLAY_AGAIN_PROMPT, WAITING_DECISION, BOTH_AGREED]
    assert [_recv(b) for _ in range(3)] == [WAITING_DECISION, PLAY_AGAIN_PROMPT, BOTH_AGREED]


def test_ask_play_again_one_declines(server, players):
    a, b = players
    address = server.address
    a.sendto(b"yes", address)
    b.sendto(b"no", address)
    assert server.ask_play_again(a.getsockname(), b.getsockname()) is False
    assert [_recv(a) for _ in range(3)] == [PLAY_AGAIN_PROMPT, WAITING_DECISION, OPPONENT_DECLINED]
    assert [_recv(b) for _ in range(2)] == [WAITING_DECISION, PLAY_AGAIN_PROMPT]


def test_ask_play_again_first_declines_second_told(server, players):
    a, b = players
    address = server.address
    a.sendto(b"n", address)
    b.sendto(b"y", address)
    assert server.ask_play_again(a.getsockname(), b.getsockname()) is False
    assert [_recv(b) for _ in range(3)] == [WAITING_DECISION, PLAY_AGAIN_PROMPT, OPPONENT_DECLINED]


def test_main_reports_bind_failure(server):
    host, port = server.address
    assert main(["--host", host, "--port", str(port)]) == 1