# netlab

Small networking programs built on plain sockets, using only the standard
library.

## Tic-tac-toe over the network

Two players connect to a server and take turns placing `X` and `O` on a
3×3 board. Positions are numbered 0 to 8, left to right and top to bottom.
Player 1 plays `X` and moves first. The server checks every move (a move
must be a single digit 0–8 naming a free cell, otherwise the player is told
`Invalid move. Try again.`), shows the board to both players after each
move, and announces a win or a draw.

After a win the server asks each player in turn whether to play again; the
board is reset only if both answer with a word starting with `y` or `Y`.
After a draw, or when a player disconnects, the session ends.

Start a server that speaks TCP or UDP (both bind `0.0.0.0` port 8080 by
default; `--host` and `--port` change that):

    netlab-tcp-server
    netlab-udp-server

Then start one client per player, naming the protocol:

    netlab-client tcp
    netlab-client udp

The client connects to `127.0.0.1:8080` unless given `--host` and
`--port`. It prints what the server sends, asks for a position when it is
your move, and for `y` or `n` when asked to play again.

The game rules can be used on their own from `netlab.board`:

```python
from netlab.board import Match, Outcome, parse_move

match = Match()
outcome = match.play(1, parse_move("4"))
assert outcome is Outcome.CONTINUE
print(match.board.render())
```

`Board.is_valid_move`, `Board.has_line` and `Board.is_full` answer the
usual questions about a position. `Match.play` returns an `Outcome`
(`CONTINUE`, `WIN` or `DRAW`) and raises `InvalidMove` for an illegal move,
a move out of turn, or a move after the game is over. `parse_move` turns a
player's text into a position, and `parse_answer` reads a play-again reply.
`netlab.client.classify` tells which kind of prompt (`PromptKind`) a server
message is.

## Chunked delivery with acknowledgements

A message is cut into 8-byte chunks, each sent as its own datagram with a
sequence number. The receiver acknowledges every chunk it gets and puts the
message back together once every chunk has arrived; the sender resends any
chunk whose acknowledgement has not come back in time (0.1 s).

### Chunk server and client

    netlab-chunk-server --ip 127.0.0.1 --port 8888
    netlab-chunk-client --ip 127.0.0.1 --port 8888 --message "hello, world"

Options left out are asked for on standard input. The chunk server
acknowledges each chunk with probability 2/3 and skips the rest on
purpose, so retransmissions can be watched as they happen. It prints each
message once all of its chunks are received and acknowledged, and keeps
running until interrupted.

In code, `ChunkSender` (in `netlab.chunk_client`) keeps track of sent and
acknowledged chunks, `ChunkReceiver` and `ChunkServer` (in
`netlab.chunk_server`) collect them, and `run_client` sends one message.
The wire format is in `netlab.packet`: `Packet` with `to_bytes` and
`from_bytes`, `split_message`, `encode_ack` and `decode_ack`.

### Turn-taking sender and receiver

    netlab-sequencing-sender
    netlab-sequencing-receiver

The sender binds port 8888 (`--host`, `--port`) and waits for the receiver,
which connects to `127.0.0.1:8888` (`--host`, `--port`) with a `CONNECT`
handshake. They then take turns: the sender types a message and sends it,
the receiver prints it and types a reply, and so on. Each message is
confirmed by a final `ACK`. The building blocks are in `netlab.sequencing`:
`chunk_message`, `encode_chunk`, `decode_chunk`, `send_message`,
`receive_message`, `wait_for_receiver` and `initiate_connection`; a peer
that breaks the exchange raises `ProtocolError`.

## Limits

Each game server serves exactly one pair of players for one session and
then exits; there is no lobby and no way to join a game in progress. The
UDP game has no retransmission of its own, so a lost datagram can stall a
game, and it cannot tell that a player has left.

## Running the tests

    pip install -e ".[test]"
    pytest