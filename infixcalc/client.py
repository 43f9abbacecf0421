"""Blocking TCP client for the expression server."""

from __future__ import annotations

import socket
from typing import Optional

from infixcalc.config import DEFAULT_HOST, DEFAULT_PORT
from infixcalc.protocol import STOP, encode_frame, read_frame


class CalcClient:
    """One connection to a CalcServer.

    Usage:
        with CalcClient("127.0.0.1", 5000) as client:
            client.ask("3 + 4 * 2")   # '11.0'
    """

    def __init__(self, host: str = DEFAULT_HOST, port: int = DEFAULT_PORT, timeout: Optional[float] = 10.0) -> None:
        self.host = host
        self.port = port
        self.timeout = timeout
        self._sock: Optional[socket.socket] = None
        self._rfile = None

    def connect(self) -> None:
        self._sock = socket.create_connection((self.host, self.port), timeout=self.timeout)
        self._rfile = self._sock.makefile("rb")

    @property
    def connected(self) -> bool:
        return self._sock is not None

    def ask(self, expression: str) -> str:
        """Send one expression and wait for the reply text."""
        if expression == STOP:
            raise ValueError("Use close() to end the session")
        if self._sock is None:
            raise RuntimeError("Not connected")
        self._sock.sendall(encode_frame(expression))
        return read_frame(self._rfile)

    def close(self) -> None:
        """Send the stop marker and close the socket."""
        if self._sock is None:
            return
        try:
            self._sock.sendall(encode_frame(STOP))
        except OSError:
            pass  # peer already gone
        finally:
            self._rfile.close()
            self._sock.close()
            self._sock = None
            self._rfile = None

    def __enter__(self) -> CalcClient:
        self.connect()
        return self

    def __exit__(self, *exc) -> None:
        self.close()
