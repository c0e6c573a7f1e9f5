"""Networked tic-tac-toe over TCP and UDP, and chunked UDP message delivery with retransmission."""

__version__ = "0.1.0"