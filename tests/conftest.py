"""Shared fixtures: a live server on an ephemeral port."""

import io
import threading

import pytest
from rich.console import Console

from infixcalc.config import ServerConfig
from infixcalc.server import CalcServer


def _start(config: ServerConfig, **kwargs):
    log = io.StringIO()
    server = CalcServer(config, Console(file=log, width=200), **kwargs)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    return server, thread, log


@pytest.fixture
def make_server():
    """Factory that starts servers and shuts them all down afterwards."""
    started = []

    def _make(rounding_digits=None, **kwargs):
        config = ServerConfig(host="127.0.0.1", port=0, rounding_digits=rounding_digits)
        server, thread, log = _start(config, **kwargs)
        started.append((server, thread))
        return server, log

    yield _make

    for server, thread in started:
        server.shutdown()
        server.server_close()
        thread.join(timeout=5)


@pytest.fixture
def server(make_server):
    srv, _ = make_server()
    return srv
