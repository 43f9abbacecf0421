"""Server/client configuration resolved from the environment.

    INFIXCALC_HOST             bind / connect address (default 127.0.0.1)
    INFIXCALC_PORT             TCP port (default 5000)
    INFIXCALC_ROUNDING_DIGITS  display rounding for responses (default: none)
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Mapping, Optional

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 5000


def _int_var(env: Mapping[str, str], name: str) -> Optional[int]:
    raw = env.get(name, "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


@dataclass(frozen=True)
class ServerConfig:
    """Where the server listens and how it formats responses."""

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    rounding_digits: Optional[int] = None

    def __post_init__(self) -> None:
        if not 0 <= self.port <= 0xFFFF:
            raise ValueError(f"port must be in 0..65535, got {self.port}")
        if self.rounding_digits is not None and self.rounding_digits < 0:
            raise ValueError(f"rounding_digits must be >= 0, got {self.rounding_digits}")

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> ServerConfig:
        env = os.environ if env is None else env
        port = _int_var(env, "INFIXCALC_PORT")
        return cls(
            host=env.get("INFIXCALC_HOST") or DEFAULT_HOST,
            port=DEFAULT_PORT if port is None else port,
            rounding_digits=_int_var(env, "INFIXCALC_ROUNDING_DIGITS"),
        )

    def override(self, **changes) -> ServerConfig:
        """Copy with every non-None keyword applied (CLI flags win)."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})

