"""Threaded TCP server that evaluates expressions for remote clients.

Data flow per connection:
1. Accept, assign the next client id, log the connect time
2. Read a frame; '#' or EOF ends the session
3. Evaluate with the shared (stateless) engine
4. Write back the formatted value, or the NaN sentinel on failure
5. Log the disconnect time and request count

Connections run on their own threads; the engine keeps all evaluation state
per call, so no locking is needed around it.
"""

from __future__ import annotations

import itertools
import socketserver
import threading
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from rich.console import Console
from rich.markup import escape

from infixcalc.config import ServerConfig
from infixcalc.errors import ConnectionClosed, ProtocolError
from infixcalc.evaluator import evaluate
from infixcalc.formatting import describe_error, format_result
from infixcalc.protocol import STOP, encode_frame, read_frame


# Finished sessions kept for inspection; older ones are dropped.
SESSION_HISTORY = 100


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Session:
    """Bookkeeping for one connected client."""

    client_id: int
    peer: str
    connected_at: datetime = field(default_factory=_now)
    disconnected_at: Optional[datetime] = None
    requests: int = 0

    @property
    def duration_s(self) -> float:
        end = self.disconnected_at or _now()
        return round((end - self.connected_at).total_seconds(), 3)


class _SessionHandler(socketserver.StreamRequestHandler):
    """Runs the request/response loop for one connection."""

    server: CalcServer

    def handle(self) -> None:
        session = self.server.open_session(self.client_address)
        console = self.server.console
        try:
            while True:
                try:
                    expr = read_frame(self.rfile)
                except ConnectionClosed:
                    break
                if expr == STOP:
                    break
                session.requests += 1
                self.wfile.write(encode_frame(self.server.respond(session, expr)))
                self.wfile.flush()
        except (ProtocolError, OSError) as e:
            console.log(f"[red]Client {session.client_id} session error:[/red] {escape(str(e))}")
        finally:
            self.server.close_session(session)


class CalcServer(socketserver.ThreadingTCPServer):
    """Expression server, one thread per connection.

    Usage:
        with CalcServer(ServerConfig(port=0), console) as server:
            server.serve_forever()
    """

    daemon_threads = True
    allow_reuse_address = True

    def __init__(
        self,
        config: ServerConfig,
        console: Optional[Console] = None,
        history_size: int = SESSION_HISTORY,
    ) -> None:
        self.config = config
        self.console = console or Console(stderr=True)
        self._ids = itertools.count(1)
        self._lock = threading.Lock()
        self.active: dict[int, Session] = {}
        self.history: deque[Session] = deque(maxlen=history_size)
        super().__init__((config.host, config.port), _SessionHandler)

    @property
    def port(self) -> int:
        return self.server_address[1]

    def open_session(self, client_address) -> Session:
        with self._lock:
            session = Session(client_id=next(self._ids), peer=f"{client_address[0]}:{client_address[1]}")
            self.active[session.client_id] = session
        self.console.log(
            f"Client {session.client_id} has connected from {session.peer} "
            f"at {session.connected_at.isoformat()}"
        )
        return session

    def close_session(self, session: Session) -> None:
        session.disconnected_at = _now()
        with self._lock:
            self.active.pop(session.client_id, None)
            self.history.append(session)
        self.console.log(
            f"Client {session.client_id} has disconnected at {session.disconnected_at.isoformat()} "
            f"({session.requests} requests, {session.duration_s}s)"
        )

    def respond(self, session: Session, expr: str) -> str:
        """Evaluate one request and return the reply text."""
        self.console.log(f"Client {session.client_id} is asking for: {escape(expr)}")
        result = evaluate(expr)
        if not result.ok:
            self.console.log(
                f"[yellow]Client {session.client_id} evaluation failed:[/yellow] "
                f"{escape(describe_error(result.error))}"
            )
        return format_result(result, self.config.rounding_digits)
